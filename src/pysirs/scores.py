"""SIRS criteria and score.

SIRS criteria (>=2 indicates SIRS):
1. Temperature: <36°C or >38°C (1 point)
2. Heart rate: >90 bpm (1 point)
3. Respiratory rate: >20/min or PaCO2 <32 mmHg (1 point)
4. WBC: <4 or >12 x10^9/L or >10% bands (1 point)

Each criterion is an ordered rule chain: the first matching threshold wins,
and only when none matches is missingness considered.  A criterion is
unknown (``<NA>``) when every value it depends on is missing, otherwise 0.
An abnormal value therefore scores 1 even if a correlated value is absent.
The total treats unknown components as 0 while the components themselves
keep their tri-state value.

References:
    American College of Chest Physicians/Society of Critical Care Medicine
    Consensus Conference: definitions for sepsis and organ failure and
    guidelines for the use of innovative therapies in sepsis. Crit Care Med.
    1992;20(6):864-874. doi:10.1097/00003246-199206000-00025
"""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

import numpy as np
import pandas as pd

from .aggregate import COMPONENT_COLUMNS
from .datasource import ID_COL

SCORE_COL = "sirs"

_OPS = {
    "<": operator.lt,
    ">": operator.gt,
}


class ComponentScore(enum.Enum):
    """Tri-state value of one SIRS criterion."""

    NORMAL = 0
    ABNORMAL = 1
    UNKNOWN = None

    @classmethod
    def from_value(cls, value: Any) -> "ComponentScore":
        if value is None or pd.isna(value):
            return cls.UNKNOWN
        return cls(int(value))

    @property
    def points(self) -> int:
        """Contribution to the total; unknown counts as normal."""
        return 0 if self is ComponentScore.UNKNOWN else self.value


@dataclass(frozen=True)
class Threshold:
    """``column <op> value`` yields ``points`` when true."""

    column: str
    op: str
    value: float
    points: int = 1

    def evaluate(self, frame: pd.DataFrame) -> pd.Series:
        values = pd.to_numeric(frame[self.column], errors="coerce").astype("float64")
        # NaN compares False, so a missing value never matches
        return pd.Series(_OPS[self.op](values, self.value), index=frame.index, dtype=bool)


@dataclass(frozen=True)
class Criterion:
    name: str
    rules: Tuple[Threshold, ...]
    requires: Tuple[str, ...]


TEMPERATURE = Criterion(
    name="temp_score",
    rules=(Threshold("tempc_min", "<", 36.0), Threshold("tempc_max", ">", 38.0)),
    requires=("tempc_min",),
)

HEART_RATE = Criterion(
    name="heartrate_score",
    rules=(Threshold("heartrate_max", ">", 90.0),),
    requires=("heartrate_max",),
)

RESPIRATION = Criterion(
    name="resp_score",
    rules=(Threshold("resprate_max", ">", 20.0), Threshold("paco2_min", "<", 32.0)),
    requires=("resprate_max", "paco2_min"),
)

WBC = Criterion(
    name="wbc_score",
    rules=(
        Threshold("wbc_min", "<", 4.0),
        Threshold("wbc_max", ">", 12.0),
        # > 10% immature neutrophils (band forms)
        Threshold("bands_max", ">", 10.0),
    ),
    requires=("wbc_min", "bands_max"),
)

SIRS_CRITERIA: Tuple[Criterion, ...] = (TEMPERATURE, HEART_RATE, RESPIRATION, WBC)

COMPONENT_SCORE_COLS = [criterion.name for criterion in SIRS_CRITERIA]


def evaluate_criterion(frame: pd.DataFrame, criterion: Criterion) -> pd.Series:
    """Score one criterion for every row of ``frame``.

    Returns:
        Nullable ``Int64`` series with values 0, 1 or ``<NA>``.
    """
    score = pd.Series(pd.NA, index=frame.index, dtype="Int64")
    resolved = pd.Series(False, index=frame.index)

    for rule in criterion.rules:
        hit = rule.evaluate(frame) & ~resolved
        score[hit] = rule.points
        resolved |= hit

    unknown = frame[list(criterion.requires)].isna().all(axis=1)
    score[~resolved & ~unknown] = 0
    return score.rename(criterion.name)


def sirs_score(components: pd.DataFrame, keep_components: bool = True) -> pd.DataFrame:
    """Calculate the SIRS score from per-stay aggregates.

    Args:
        components: One row per stay with ``icustay_id`` and
            :data:`~pysirs.aggregate.COMPONENT_COLUMNS`.
        keep_components: Whether to keep the tri-state component scores.

    Returns:
        DataFrame with ``icustay_id``, ``sirs`` (int, 0-4) and, if
        requested, ``temp_score``, ``heartrate_score``, ``resp_score`` and
        ``wbc_score`` (``Int64``, missing data is ``<NA>``).
    """
    result = components[[ID_COL]].copy()
    for criterion in SIRS_CRITERIA:
        result[criterion.name] = evaluate_criterion(components, criterion)

    # impute 0 for unknown components
    result[SCORE_COL] = (
        result[COMPONENT_SCORE_COLS].fillna(0).sum(axis=1).astype(np.int64)
    )

    cols = [ID_COL, SCORE_COL]
    if keep_components:
        cols.extend(COMPONENT_SCORE_COLS)
    return result[cols]


@dataclass(frozen=True)
class SirsResult:
    """SIRS score of one stay with its tri-state components."""

    icustay_id: Any
    sirs: int
    temp_score: ComponentScore
    heartrate_score: ComponentScore
    resp_score: ComponentScore
    wbc_score: ComponentScore

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SirsResult":
        return cls(
            icustay_id=row[ID_COL],
            sirs=int(row[SCORE_COL]),
            **{col: ComponentScore.from_value(row[col]) for col in COMPONENT_SCORE_COLS},
        )

    @property
    def components(self) -> Dict[str, ComponentScore]:
        return {col: getattr(self, col) for col in COMPONENT_SCORE_COLS}

    @property
    def missing_components(self) -> List[str]:
        return [
            col for col, value in self.components.items()
            if value is ComponentScore.UNKNOWN
        ]

    @property
    def meets_sirs(self) -> bool:
        """Two or more criteria met (a flag, not a sepsis diagnosis)."""
        return self.sirs >= 2

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {ID_COL: self.icustay_id, SCORE_COL: self.sirs}
        payload.update({col: value.value for col, value in self.components.items()})
        return payload


def score_stay(record: Mapping[str, Any]) -> SirsResult:
    """Score a single stay from a mapping of aggregated values.

    Keys absent from ``record`` are treated as missing.

    Examples:
        >>> score_stay({"icustay_id": 1, "tempc_min": 35.0}).temp_score
        <ComponentScore.ABNORMAL: 1>
    """
    row = {ID_COL: record.get(ID_COL)}
    row.update({col: record.get(col, np.nan) for col in COMPONENT_COLUMNS})
    frame = pd.DataFrame([row])
    for col in COMPONENT_COLUMNS:
        frame[col] = pd.to_numeric(frame[col], errors="coerce").astype("float64")
    return SirsResult.from_row(sirs_score(frame).iloc[0])


__all__ = [
    "SCORE_COL",
    "ComponentScore",
    "Threshold",
    "Criterion",
    "TEMPERATURE",
    "HEART_RATE",
    "RESPIRATION",
    "WBC",
    "SIRS_CRITERIA",
    "COMPONENT_SCORE_COLS",
    "evaluate_criterion",
    "sirs_score",
    "SirsResult",
    "score_stay",
]
