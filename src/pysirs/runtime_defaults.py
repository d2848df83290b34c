"""Runtime defaults for scoring execution profiles.

Scoring is a pure per-stay transform, so a large cohort can be split into
independent chunks and scored on several workers.  The helpers below pick
a chunk size and worker count from the cohort size, with environment
overrides for batch jobs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence
import math
import os


@dataclass(frozen=True)
class ScoringDefaults:
    chunk_size: Optional[int]
    workers: int
    profile: str
    source: Dict[str, str]

    def summary(self) -> str:
        chunk_label = self.chunk_size if self.chunk_size else "disabled"
        return (
            f"profile={self.profile}, "
            f"chunk_size={chunk_label} [{self.source['chunk']}], "
            f"workers={self.workers} [{self.source['workers']}]"
        )


_DEFAULT_ENV_KEYS: Dict[str, Sequence[str]] = {
    "chunk": ("PYSIRS_CHUNK_SIZE",),
    "workers": ("PYSIRS_WORKERS",),
}

# chunk=None scores the whole cohort in one pass
_DEFAULT_TIERS = (
    {"max_stays": 10000, "profile": "small", "chunk": None, "workers": 1},
    {"max_stays": 100000, "profile": "medium", "chunk": 25000, "workers": 2},
    {"max_stays": math.inf, "profile": "large", "chunk": 50000, "workers": 4},
)


def resolve_scoring_defaults(
    n_stays: Optional[int],
    *,
    chunk_size: Optional[int] = None,
    workers: Optional[int] = None,
    env: Optional[Mapping[str, str]] = None,
    tiers: Sequence[Mapping[str, Any]] = _DEFAULT_TIERS,
) -> ScoringDefaults:
    """Return chunking/worker settings for a cohort of ``n_stays`` stays.

    Explicit arguments win over environment variables, which win over the
    size-based profile.  A chunk size of 0 disables chunking.

    Raises:
        ValueError: If ``chunk_size`` is negative or ``workers`` is below 1.
    """

    env = dict(os.environ if env is None else env)
    target = n_stays if n_stays and n_stays > 0 else 0
    profile = _select_tier(target, tiers)

    if chunk_size is not None and chunk_size < 0:
        raise ValueError(f"chunk_size must be >= 0, got {chunk_size}")
    if workers is not None and workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    if chunk_size is not None:
        chunk_value, chunk_source = chunk_size, "argument"
    else:
        chunk_value, chunk_source = _read_int(_DEFAULT_ENV_KEYS["chunk"], env, minimum=0)
        if chunk_value is None:
            chunk_value = profile["chunk"]
            chunk_source = f"auto({profile['profile']})"
    if chunk_value == 0:
        chunk_value = None

    if workers is not None:
        workers_value, workers_source = workers, "argument"
    else:
        workers_value, workers_source = _read_int(_DEFAULT_ENV_KEYS["workers"], env, minimum=1)
        if workers_value is None:
            workers_value = profile["workers"]
            workers_source = f"auto({profile['profile']})"

    return ScoringDefaults(
        chunk_size=chunk_value,
        workers=workers_value,
        profile=profile["profile"],
        source={"chunk": chunk_source, "workers": workers_source},
    )


def _select_tier(target: int, tiers: Sequence[Mapping[str, Any]]) -> Mapping[str, Any]:
    for tier in tiers:
        threshold = tier.get("max_stays", math.inf)
        if target <= threshold:
            return tier
    return tiers[-1]


def _read_int(
    keys: Sequence[str],
    env: Mapping[str, str],
    *,
    minimum: int,
) -> tuple[Optional[int], Optional[str]]:
    for key in keys:
        raw = env.get(key)
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError:
            continue
        if value >= minimum:
            return value, f"env({key})"
    return None, None


__all__ = ["ScoringDefaults", "resolve_scoring_defaults"]
