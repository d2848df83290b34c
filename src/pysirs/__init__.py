"""pysirs - SIRS score at suspected infection time for ICU stays.

The package turns four pre-aggregated upstream tables (suspected infection
times, arterial blood gases, vital signs and labs) into one SIRS row per
stay, keeping the distinction between a criterion that scored normal and
one that could not be scored because nothing was measured.
"""

from .aggregate import arterial_pco2_min, score_components
from .api import iter_sirs_results, load_sirs
from .assertions import SirsAssertionError
from .cohort import suspected_infection_cohort
from .config import SirsConfig, SourceConfig
from .data_quality import component_missingness, validate_result
from .datasource import (
    FilterOp,
    FilterSpec,
    MissingColumnsError,
    MissingSourceError,
    SirsDataSource,
)
from .logging_utils import configure_logging
from .scores import (
    SIRS_CRITERIA,
    ComponentScore,
    Criterion,
    SirsResult,
    Threshold,
    evaluate_criterion,
    score_stay,
    sirs_score,
)

__version__ = "0.1.0"

__all__ = [
    "SirsConfig",
    "SourceConfig",
    "SirsDataSource",
    "FilterOp",
    "FilterSpec",
    "MissingSourceError",
    "MissingColumnsError",
    "SirsAssertionError",
    "suspected_infection_cohort",
    "arterial_pco2_min",
    "score_components",
    "SIRS_CRITERIA",
    "ComponentScore",
    "Criterion",
    "Threshold",
    "SirsResult",
    "evaluate_criterion",
    "sirs_score",
    "score_stay",
    "load_sirs",
    "iter_sirs_results",
    "component_missingness",
    "validate_result",
    "configure_logging",
]
