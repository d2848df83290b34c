"""
Command line entry point: score SIRS from four upstream aggregate files.

Usage:
    # explicit files (CSV or Parquet, chosen by suffix)
    pysirs --suspinfect suspinfect.csv --bloodgas bg.csv \\
           --vitals vitals.csv --labs labs.csv --output sirs.csv

    # sources and column mappings from a JSON config
    pysirs --config sirs_sources.json --output sirs.parquet
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .api import load_sirs
from .assertions import SirsAssertionError
from .config import SirsConfig
from .data_quality import component_missingness, summarise, validate_result
from .datasource import (
    BLOODGAS,
    LABS,
    SUSPINFECT,
    VITALS,
    MissingColumnsError,
    MissingSourceError,
    SirsDataSource,
)
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)

EXIT_MISSING_SOURCE = 2
EXIT_BAD_INPUT = 3


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected an integer >= 0, got {value}")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected an integer >= 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pysirs",
        description="Compute the SIRS score at suspected infection time per ICU stay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON file describing the sources (paths and column mappings)",
    )
    parser.add_argument("--suspinfect", type=Path, help="suspected infection table")
    parser.add_argument("--bloodgas", type=Path, help="blood gas table with specimen_pred")
    parser.add_argument("--vitals", type=Path, help="per-stay vital sign aggregates")
    parser.add_argument("--labs", type=Path, help="per-stay lab aggregates")
    parser.add_argument(
        "--output",
        type=Path,
        help="output file (.csv or .parquet); prints CSV to stdout when omitted",
    )
    parser.add_argument("--workers", type=_positive_int, default=None, help="scoring threads")
    parser.add_argument("--chunk-size", type=_non_negative_int, default=None, help="stays per chunk (0 disables)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser


def _build_source(args: argparse.Namespace) -> SirsDataSource:
    config = SirsConfig.from_json(args.config) if args.config else SirsConfig()
    datasource = SirsDataSource(config=config)
    for name, path in (
        (SUSPINFECT, args.suspinfect),
        (BLOODGAS, args.bloodgas),
        (VITALS, args.vitals),
        (LABS, args.labs),
    ):
        if path is not None:
            datasource.register(name, path)
    return datasource


def write_result(result: pd.DataFrame, output: Optional[Path]) -> None:
    if output is None:
        result.to_csv(sys.stdout, index=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".parquet":
        result.to_parquet(output, index=False, engine="pyarrow")
    else:
        result.to_csv(output, index=False)
    logger.info("Wrote %d row(s) to %s", len(result), output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        datasource = _build_source(args)
        result = load_sirs(datasource, workers=args.workers, chunk_size=args.chunk_size)
        validate_result(result)
    except MissingSourceError as exc:
        logger.error("%s", exc)
        return EXIT_MISSING_SOURCE
    # covers pydantic ValidationError and JSONDecodeError
    except (MissingColumnsError, SirsAssertionError, ValueError, OSError) as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_BAD_INPUT

    stats = summarise(result)
    logger.info(
        "%d stay(s) scored, %d meet SIRS (>=2), mean score %.2f",
        stats['stays'], stats['meets_sirs'], stats['mean_score'],
    )
    logger.debug("Component missingness:\n%s", component_missingness(result).to_string())

    write_result(result, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
