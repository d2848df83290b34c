"""Assemble one row of SIRS inputs per stay."""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from .assertions import assert_has_cols, assert_unique_ids
from .datasource import ID_COL, LABS, SOURCE_COLUMNS, VITALS, FilterOp, FilterSpec

logger = logging.getLogger(__name__)

ARTERIAL = "ART"

COMPONENT_COLUMNS = [
    "tempc_min",
    "tempc_max",
    "heartrate_max",
    "resprate_max",
    "paco2_min",
    "wbc_min",
    "wbc_max",
    "bands_max",
]


def arterial_filter(label: str = ARTERIAL) -> FilterSpec:
    """Row filter keeping blood gases whose specimen was classified arterial."""
    return FilterSpec("specimen_pred", FilterOp.EQ, label)


def arterial_pco2_min(bloodgas: pd.DataFrame, arterial_label: str = ARTERIAL) -> pd.DataFrame:
    """Minimum PaCO2 per stay over arterial specimens only.

    Non-arterial rows are dropped before the group-by so a venous reading
    can never lower the minimum.  Stays without any arterial measurement
    get no row.
    """
    assert_has_cols(bloodgas, [ID_COL, "specimen_pred", "pco2"])
    arterial = arterial_filter(arterial_label).apply(bloodgas)
    values = pd.to_numeric(arterial["pco2"], errors="coerce")
    paco2 = (
        values.groupby(arterial[ID_COL])
        .min()
        .rename("paco2_min")
        .reset_index()
    )
    logger.debug(
        "Arterial PaCO2: %d of %d blood gas rows kept, %d stays",
        len(arterial), len(bloodgas), len(paco2),
    )
    return paco2


def score_components(
    cohort: pd.DataFrame,
    bloodgas: pd.DataFrame,
    vitals: pd.DataFrame,
    labs: pd.DataFrame,
    arterial_label: str = ARTERIAL,
    paco2: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """Left join the aggregates onto the cohort, one row per stay.

    Args:
        cohort: Stays to score (``icustay_id`` unique).
        bloodgas: Blood gas rows, aggregated here via :func:`arterial_pco2_min`.
        vitals: Per-stay vital sign aggregates.
        labs: Per-stay laboratory aggregates.
        arterial_label: ``specimen_pred`` value marking arterial samples.
        paco2: Pre-computed :func:`arterial_pco2_min` result; when given,
            ``bloodgas`` is ignored.

    Returns:
        DataFrame with ``icustay_id`` and :data:`COMPONENT_COLUMNS`; values
        missing for a stay are NaN.
    """
    assert_unique_ids(cohort, ID_COL, "cohort")
    # stays outside the cohort never reach the join
    stays = cohort[ID_COL]
    vitals = vitals.loc[vitals[ID_COL].isin(stays)]
    labs = labs.loc[labs[ID_COL].isin(stays)]
    assert_unique_ids(vitals, ID_COL, VITALS)
    assert_unique_ids(labs, ID_COL, LABS)

    if paco2 is None:
        paco2 = arterial_pco2_min(bloodgas, arterial_label)

    data = cohort[[ID_COL]]
    for frame, cols in (
        (paco2, [ID_COL, "paco2_min"]),
        (vitals, list(SOURCE_COLUMNS[VITALS])),
        (labs, list(SOURCE_COLUMNS[LABS])),
    ):
        data = data.merge(frame[cols], on=ID_COL, how="left", validate="one_to_one")

    for col in COMPONENT_COLUMNS:
        data[col] = pd.to_numeric(data[col], errors="coerce").astype("float64")

    return data[[ID_COL] + COMPONENT_COLUMNS]


__all__ = [
    "ARTERIAL",
    "COMPONENT_COLUMNS",
    "arterial_filter",
    "arterial_pco2_min",
    "score_components",
]
