"""Suspected-infection cohort selection.

Only stays with a recorded suspected infection time are scored.  The
predicate runs on the infection-time source itself, before any clinical
aggregate is joined, so excluded stays are never scored in the first place.
"""

from __future__ import annotations

import logging

import pandas as pd

from .assertions import assert_unique_ids
from .datasource import ID_COL, SUSPINFECT, FilterOp, FilterSpec

logger = logging.getLogger(__name__)

INFECTION_TIME_COL = "suspected_infection_time"

HAS_INFECTION_TIME = FilterSpec(INFECTION_TIME_COL, FilterOp.NOTNULL)


def suspected_infection_cohort(suspinfect: pd.DataFrame) -> pd.DataFrame:
    """Return the stays eligible for scoring, one row each, ordered by stay id.

    Args:
        suspinfect: Rows of ``(icustay_id, suspected_infection_time)``;
            at most one row per stay.

    Returns:
        DataFrame with ``icustay_id`` and ``suspected_infection_time`` for
        stays whose infection time is not null.
    """
    assert_unique_ids(suspinfect, ID_COL, SUSPINFECT)

    cohort = HAS_INFECTION_TIME.apply(suspinfect)
    excluded = len(suspinfect) - len(cohort)
    if excluded:
        logger.info("Excluded %d stay(s) without a suspected infection time", excluded)

    return (
        cohort[[ID_COL, INFECTION_TIME_COL]]
        .sort_values(ID_COL, kind="mergesort")
        .reset_index(drop=True)
    )


__all__ = ["INFECTION_TIME_COL", "HAS_INFECTION_TIME", "suspected_infection_cohort"]
