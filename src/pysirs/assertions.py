"""Data contract assertions for SIRS inputs and outputs.

Small assertthat-style helpers: ``is_*`` / ``has_*`` predicates return a
boolean, ``assert_*`` wrappers raise :class:`SirsAssertionError`.
"""

from typing import Any, List, Optional, Sequence, Union

import numpy as np
import pandas as pd


class SirsAssertionError(Exception):
    """Raised when an upstream table or a computed result breaks its contract."""
    pass


def assert_that(condition: bool, msg: Optional[str] = None) -> bool:
    """Assert a condition is True.

    Args:
        condition: Boolean condition to check
        msg: Optional error message

    Returns:
        True if condition is met

    Raises:
        SirsAssertionError: If condition is False

    Examples:
        >>> assert_that(1 + 1 == 2)
        True
        >>> assert_that(False, "This should fail")
        SirsAssertionError: This should fail
    """
    if not condition:
        if msg is None:
            msg = "Assertion failed"
        raise SirsAssertionError(msg)
    return True


def has_cols(x: pd.DataFrame, cols: Union[str, Sequence[str]]) -> bool:
    """Check if DataFrame has expected columns.

    Args:
        x: DataFrame to check
        cols: Column name(s) to check for
    """
    if isinstance(cols, str):
        cols = [cols]

    return all(col in x.columns for col in cols)


def missing_cols(x: pd.DataFrame, cols: Sequence[str]) -> List[str]:
    """Return the subset of ``cols`` absent from ``x`` (in request order)."""
    return [col for col in cols if col not in x.columns]


def is_unique(x: Union[pd.Series, List, np.ndarray]) -> bool:
    """Check if all values are unique."""
    if isinstance(x, pd.Series):
        return not x.duplicated().any()
    return len(x) == len(set(x))


def is_sorted(x: Union[pd.Series, List, np.ndarray]) -> bool:
    """Check if values are in non-decreasing order."""
    if isinstance(x, pd.Series):
        return x.is_monotonic_increasing
    return all(a <= b for a, b in zip(x, x[1:]))


def assert_has_cols(df: pd.DataFrame, cols: Union[str, Sequence[str]],
                    msg: Optional[str] = None):
    """Assert DataFrame has required columns."""
    if isinstance(cols, str):
        cols = [cols]
    assert_that(has_cols(df, cols),
                msg or f"DataFrame missing columns: {missing_cols(df, cols)}")


def assert_unique(x: Any, msg: Optional[str] = None):
    """Assert all values are unique."""
    assert_that(is_unique(x), msg or "Values are not unique")


def assert_unique_ids(df: pd.DataFrame, id_col: str, table: str):
    """Assert ``id_col`` holds at most one row per stay in ``table``."""
    dupes = df.loc[df[id_col].duplicated(keep=False), id_col]
    assert_that(
        dupes.empty,
        f"Table '{table}' has {dupes.nunique()} {id_col} value(s) with more than "
        f"one row (e.g. {dupes.iloc[:3].tolist()}); expected one row per stay",
    )


def assert_sorted(x: Any, msg: Optional[str] = None):
    """Assert values are sorted."""
    assert_that(is_sorted(x), msg or "Values are not sorted")


__all__ = [
    "SirsAssertionError",
    "assert_that",
    "has_cols",
    "missing_cols",
    "is_unique",
    "is_sorted",
    "assert_has_cols",
    "assert_unique",
    "assert_unique_ids",
    "assert_sorted",
]
