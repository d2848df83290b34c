"""Result validation and missing-data reporting.

Unknown components are imputed as 0 in the total, so the component
columns are the only place a reader can tell "scored normal" from "not
measured".  :func:`component_missingness` summarises that per criterion.
"""

from typing import Any, Dict

import pandas as pd

from .assertions import assert_has_cols, assert_sorted, assert_that, assert_unique
from .datasource import ID_COL
from .scores import COMPONENT_SCORE_COLS, SCORE_COL


def component_missingness(result: pd.DataFrame) -> pd.DataFrame:
    """Count abnormal, normal and unknown values for each SIRS component.

    Args:
        result: Output of :func:`pysirs.load_sirs` with components kept.

    Returns:
        DataFrame indexed by component name with columns ``abnormal``,
        ``normal``, ``unknown`` and ``unknown_pct``.
    """
    assert_has_cols(result, COMPONENT_SCORE_COLS)
    rows = {}
    for col in COMPONENT_SCORE_COLS:
        values = result[col]
        unknown = int(values.isna().sum())
        rows[col] = {
            'abnormal': int((values == 1).sum()),
            'normal': int((values == 0).sum()),
            'unknown': unknown,
            'unknown_pct': round(unknown / len(values) * 100, 2) if len(values) else 0.0,
        }
    return pd.DataFrame.from_dict(rows, orient='index')


def validate_result(result: pd.DataFrame) -> bool:
    """Check the output invariants of a SIRS result.

    - one row per stay, ordered by stay id
    - total within [0, 4] and never missing
    - total equals the sum of components with unknown counted as 0
    - components only take the values 0, 1 or missing

    Raises:
        SirsAssertionError: If any invariant is violated
    """
    assert_has_cols(result, [ID_COL, SCORE_COL] + COMPONENT_SCORE_COLS)
    assert_unique(result[ID_COL], f"Duplicate {ID_COL} in SIRS result")
    assert_sorted(result[ID_COL], f"SIRS result is not ordered by {ID_COL}")

    total = result[SCORE_COL]
    assert_that(not total.isna().any(), "SIRS total contains missing values")
    assert_that(bool(total.between(0, 4).all()), "SIRS total outside [0, 4]")

    components = result[COMPONENT_SCORE_COLS]
    valid = components.isna() | components.isin([0, 1])
    assert_that(bool(valid.all().all()), "SIRS components must be 0, 1 or missing")

    expected = components.fillna(0).sum(axis=1)
    assert_that(bool((expected == total).all()),
                "SIRS total does not equal the sum of its components")
    return True


def summarise(result: pd.DataFrame) -> Dict[str, Any]:
    """Headline numbers for a scored cohort."""
    n = len(result)
    return {
        'stays': n,
        'meets_sirs': int((result[SCORE_COL] >= 2).sum()),
        'mean_score': float(result[SCORE_COL].mean()) if n else 0.0,
        'score_distribution': result[SCORE_COL].value_counts().sort_index().to_dict(),
    }


__all__ = ["component_missingness", "validate_result", "summarise"]
