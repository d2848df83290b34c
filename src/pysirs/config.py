"""Configuration models for the SIRS upstream sources.

Each of the four upstream aggregate tables is described by a
:class:`SourceConfig` telling the loader where the table lives and how its
columns map onto the canonical names used by the scoring engine.  The
models are validated with :mod:`pydantic` so a malformed JSON file fails
when it is read, not halfway through a scoring run.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SUPPORTED_FORMATS = ("csv", "parquet")


class SourceConfig(BaseModel):
    """Location and column mapping for one upstream table."""

    name: str
    path: Optional[Path] = None
    format: Optional[str] = None
    # canonical column name -> upstream column name
    columns: Dict[str, str] = Field(default_factory=dict, alias="cols")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("format", mode="before")
    def _normalise_format(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        fmt = str(value).lower().lstrip(".")
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format '{value}', expected one of {SUPPORTED_FORMATS}"
            )
        return fmt

    @model_validator(mode="after")
    def _infer_format(self) -> "SourceConfig":
        if self.format is None and self.path is not None:
            suffix = self.path.suffix.lower().lstrip(".")
            if suffix in SUPPORTED_FORMATS:
                self.format = suffix
        return self

    def rename_map(self) -> Dict[str, str]:
        """Return the upstream -> canonical mapping used by ``DataFrame.rename``."""
        return {upstream: canonical for canonical, upstream in self.columns.items()}


class SirsConfig(BaseModel):
    """Complete configuration for one SIRS scoring run."""

    sources: Dict[str, SourceConfig] = Field(default_factory=dict)
    arterial_label: str = "ART"
    workers: Optional[int] = Field(default=None, ge=1)
    chunk_size: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    def _normalise_sources(cls, values: Mapping[str, object]) -> Mapping[str, object]:
        values = dict(values)
        raw = values.get("sources") or {}
        if not isinstance(raw, Mapping):
            raise TypeError("sources must be a mapping of source name to settings")
        sources = {}
        for key, cfg in raw.items():
            if isinstance(cfg, SourceConfig):
                sources[key] = cfg
            elif isinstance(cfg, (str, Path)):
                sources[key] = SourceConfig(name=key, path=cfg)
            elif isinstance(cfg, Mapping):
                sources[key] = SourceConfig(name=key, **cfg)
            else:
                raise TypeError(f"source '{key}' must be a path or a mapping")
        values["sources"] = sources
        return values

    def get_source(self, name: str) -> SourceConfig:
        try:
            return self.sources[name]
        except KeyError as error:
            raise KeyError(f"No source configured for '{name}'") from error

    def list_sources(self) -> List[str]:
        return sorted(self.sources.keys())

    @classmethod
    def from_json(cls, file_path: str | Path) -> "SirsConfig":
        path = Path(file_path)
        with path.open("r", encoding="utf8") as handle:
            payload = json.load(handle)
        config = cls(**payload)
        # relative paths are resolved against the config file's directory
        for source in config.sources.values():
            if source.path is not None and not source.path.is_absolute():
                source.path = path.parent / source.path
        return config


__all__ = ["SUPPORTED_FORMATS", "SourceConfig", "SirsConfig"]
