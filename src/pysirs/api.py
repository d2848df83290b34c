"""High level entry point: score every suspected-infection stay.

Examples:
    >>> from pysirs import SirsDataSource, load_sirs
    >>> src = SirsDataSource({
    ...     'suspinfect': 'suspinfect.parquet',
    ...     'bloodgasarterial': 'bloodgasarterial.parquet',
    ...     'vitals': 'vitals.parquet',
    ...     'labs': 'labs.parquet',
    ... })
    >>> sirs = load_sirs(src)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Union

import pandas as pd

from .aggregate import arterial_filter, arterial_pco2_min, score_components
from .cohort import suspected_infection_cohort
from .config import SirsConfig
from .datasource import (
    BLOODGAS,
    ID_COL,
    LABS,
    REQUIRED_SOURCES,
    SUSPINFECT,
    VITALS,
    SirsDataSource,
    TableLoader,
)
from .runtime_defaults import resolve_scoring_defaults
from .scores import SirsResult, sirs_score

logger = logging.getLogger(__name__)

SourceLike = Union[SirsDataSource, SirsConfig, Mapping[str, TableLoader], str, Path]


def _as_datasource(source: SourceLike) -> SirsDataSource:
    if isinstance(source, SirsDataSource):
        return source
    if isinstance(source, (SirsConfig, str, Path)):
        return SirsDataSource.from_config(source)
    return SirsDataSource(tables=source)


def _chunks(cohort: pd.DataFrame, chunk_size: Optional[int]) -> List[pd.DataFrame]:
    if not chunk_size or len(cohort) <= chunk_size:
        return [cohort]
    return [cohort.iloc[start:start + chunk_size] for start in range(0, len(cohort), chunk_size)]


def load_sirs(
    source: SourceLike,
    keep_components: bool = True,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> pd.DataFrame:
    """Compute the SIRS score at suspected infection time for each ICU stay.

    Args:
        source: A :class:`SirsDataSource`, a :class:`SirsConfig` (or the path
            to its JSON file), or a mapping of source name to table loader.
        keep_components: Keep the four tri-state component columns.
        workers: Threads used to score independent chunks of stays.
        chunk_size: Stays per chunk; 0 disables chunking.

    Returns:
        One row per stay with a non-null suspected infection time, ordered
        by ``icustay_id``: ``sirs`` plus ``temp_score``,
        ``heartrate_score``, ``resp_score`` and ``wbc_score``.

    Raises:
        MissingSourceError: If any of the four upstream sources is absent.
    """
    datasource = _as_datasource(source)
    datasource.ensure_sources(REQUIRED_SOURCES)

    config = datasource.config
    cohort = suspected_infection_cohort(datasource.load_table(SUSPINFECT))
    logger.info("Scoring SIRS for %d stay(s) with suspected infection", len(cohort))

    # restrict to arterial specimens while loading, ahead of the min() aggregate
    bloodgas = datasource.load_table(BLOODGAS, filters=[arterial_filter(config.arterial_label)])
    paco2 = arterial_pco2_min(bloodgas, config.arterial_label)
    vitals = datasource.load_table(VITALS)
    labs = datasource.load_table(LABS)

    defaults = resolve_scoring_defaults(
        len(cohort),
        chunk_size=chunk_size if chunk_size is not None else config.chunk_size,
        workers=workers if workers is not None else config.workers,
    )
    logger.debug("Scoring defaults: %s", defaults.summary())

    def _score(part: pd.DataFrame) -> pd.DataFrame:
        components = score_components(
            part, bloodgas, vitals, labs,
            arterial_label=config.arterial_label, paco2=paco2,
        )
        return sirs_score(components, keep_components=keep_components)

    parts = _chunks(cohort, defaults.chunk_size)
    if defaults.workers > 1 and len(parts) > 1:
        results: Dict[int, pd.DataFrame] = {}
        with ThreadPoolExecutor(max_workers=defaults.workers) as executor:
            future_map = {executor.submit(_score, part): idx for idx, part in enumerate(parts)}
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()
        scored = [results[idx] for idx in range(len(parts))]
    else:
        scored = [_score(part) for part in parts]

    result = pd.concat(scored, ignore_index=True) if len(scored) > 1 else scored[0]
    result = result.sort_values(ID_COL, kind="mergesort").reset_index(drop=True)
    logger.info("Scored %d stay(s)", len(result))
    return result


def iter_sirs_results(result: pd.DataFrame) -> Iterator[SirsResult]:
    """Yield a :class:`SirsResult` for every row of a :func:`load_sirs` frame."""
    for row in result.to_dict(orient="records"):
        yield SirsResult.from_row(row)


__all__ = ["load_sirs", "iter_sirs_results"]
