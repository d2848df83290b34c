"""Upstream source registry for the SIRS scoring pipeline.

The scoring engine consumes four pre-aggregated tables.  Each may be
registered as an in-memory DataFrame, a zero-argument callable returning
one, or a path to a CSV/Parquet file.  A source that was never registered
(or whose file is gone) raises :class:`MissingSourceError`; a registered
but empty table is a valid input whose values are simply all absent.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Union

import pandas as pd

from .assertions import missing_cols
from .config import SirsConfig, SourceConfig

logger = logging.getLogger(__name__)

ID_COL = "icustay_id"

SUSPINFECT = "suspinfect"
BLOODGAS = "bloodgasarterial"
VITALS = "vitals"
LABS = "labs"

# canonical columns each upstream table must provide
SOURCE_COLUMNS: Dict[str, Sequence[str]] = {
    SUSPINFECT: (ID_COL, "suspected_infection_time"),
    BLOODGAS: (ID_COL, "specimen_pred", "pco2"),
    VITALS: (ID_COL, "tempc_min", "tempc_max", "heartrate_max", "resprate_max"),
    LABS: (ID_COL, "wbc_min", "wbc_max", "bands_max"),
}

REQUIRED_SOURCES = tuple(SOURCE_COLUMNS)

TableLoader = Union[pd.DataFrame, Callable[[], pd.DataFrame], str, Path]


class MissingSourceError(KeyError):
    """An upstream source is unavailable as a whole (not just empty)."""

    def __init__(self, names: Union[str, Iterable[str]], detail: Optional[str] = None) -> None:
        self.names = [names] if isinstance(names, str) else list(names)
        message = f"Missing input source(s): {', '.join(self.names)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


class MissingColumnsError(KeyError):
    """A registered source lacks a column the scoring engine needs."""

    def __init__(self, table: str, columns: Sequence[str]) -> None:
        self.table = table
        self.columns = list(columns)
        super().__init__(f"Columns {self.columns} not found in source '{table}'")

    def __str__(self) -> str:
        return str(self.args[0])


class FilterOp(str, enum.Enum):
    """Supported filter operations for table loading."""

    EQ = "=="
    NOTNULL = "notnull"


@dataclass
class FilterSpec:
    """Declarative row filter applied while a table is loaded."""

    column: str
    op: FilterOp
    value: Any = None

    def __post_init__(self):
        self.op = FilterOp(self.op)

    def apply(self, frame: pd.DataFrame) -> pd.DataFrame:
        if self.op == FilterOp.EQ:
            mask = frame[self.column] == self.value
            return frame.loc[mask]
        if self.op == FilterOp.NOTNULL:
            return frame.loc[frame[self.column].notna()]
        raise ValueError(f"Unsupported filter operation: {self.op}")


class SirsDataSource:
    """Facade that resolves and loads the upstream tables for one run."""

    def __init__(
        self,
        tables: Optional[Mapping[str, TableLoader]] = None,
        config: Optional[SirsConfig] = None,
    ) -> None:
        self.config = config or SirsConfig()
        self._loaders: Dict[str, TableLoader] = {}
        for source in self.config.sources.values():
            if source.path is not None:
                self._loaders[source.name] = source.path
        for name, loader in (tables or {}).items():
            self.register(name, loader)

    @classmethod
    def from_config(cls, config: Union[SirsConfig, str, Path]) -> "SirsDataSource":
        if not isinstance(config, SirsConfig):
            config = SirsConfig.from_json(config)
        return cls(config=config)

    def register(self, name: str, loader: TableLoader) -> None:
        if name not in SOURCE_COLUMNS:
            raise ValueError(
                f"Unknown source '{name}', expected one of {list(SOURCE_COLUMNS)}"
            )
        if isinstance(loader, str):
            loader = Path(loader)
        self._loaders[name] = loader

    def __contains__(self, name: object) -> bool:
        return name in self._loaders

    def missing_sources(self, names: Iterable[str] = REQUIRED_SOURCES) -> list:
        """Return the names among ``names`` that cannot be loaded at all."""
        missing = []
        for name in names:
            loader = self._loaders.get(name)
            if loader is None:
                missing.append(name)
            elif isinstance(loader, Path) and not loader.exists():
                missing.append(name)
        return missing

    def ensure_sources(self, names: Iterable[str] = REQUIRED_SOURCES) -> None:
        """Fail fast when any required source is absent."""
        missing = self.missing_sources(names)
        if missing:
            raise MissingSourceError(missing)

    def load_table(
        self,
        name: str,
        columns: Optional[Iterable[str]] = None,
        filters: Sequence[FilterSpec] = (),
    ) -> pd.DataFrame:
        """Load ``name`` with canonical column names and ``filters`` applied."""
        loader = self._loaders.get(name)
        if loader is None:
            raise MissingSourceError(name, "not registered")

        if isinstance(loader, pd.DataFrame):
            frame = loader.copy()
        elif callable(loader):
            frame = loader()
        else:
            frame = self._read_file(name, Path(loader))

        source_cfg = self.config.sources.get(name)
        if source_cfg is not None and source_cfg.columns:
            frame = frame.rename(columns=source_cfg.rename_map())

        required = list(columns) if columns is not None else list(SOURCE_COLUMNS[name])
        missing = missing_cols(frame, required)
        if missing:
            raise MissingColumnsError(name, missing)
        frame = frame[required]

        for spec in filters:
            frame = spec.apply(frame)

        logger.debug("Loaded source %s: %d rows", name, len(frame))
        return frame.reset_index(drop=True)

    def _read_file(self, name: str, path: Path) -> pd.DataFrame:
        if not path.exists():
            raise MissingSourceError(name, f"file not found: {path}")

        source_cfg: Optional[SourceConfig] = self.config.sources.get(name)
        fmt = source_cfg.format if source_cfg is not None and source_cfg.format else None
        if fmt is None:
            fmt = path.suffix.lower().lstrip(".")

        if fmt == "parquet":
            return pd.read_parquet(path, engine="pyarrow")
        if fmt == "csv":
            return pd.read_csv(path)
        raise ValueError(
            f"Unsupported file format '{path.suffix}' for {path.name}. "
            "Only CSV and Parquet are supported."
        )


__all__ = [
    "ID_COL",
    "SUSPINFECT",
    "BLOODGAS",
    "VITALS",
    "LABS",
    "SOURCE_COLUMNS",
    "REQUIRED_SOURCES",
    "MissingSourceError",
    "MissingColumnsError",
    "FilterOp",
    "FilterSpec",
    "SirsDataSource",
]
