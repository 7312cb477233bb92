#!/usr/bin/env python3
"""
mfa_data_generator.py

Synthetic MFA sign-in data generator.

Builds an employee roster and an application catalogue, draws sign-in
events with realistic MFA usage, forces the current month's compliance
rate onto a configured target, and reports coverage and compliance
statistics.

Usage:
    python mfa_data_generator.py --seed 42 --current-date 2024-10-15 > signins.csv
    python mfa_data_generator.py --config mfa_generator_config.json --summary-only
    python mfa_data_generator.py --format json --records 10000 --output out/signins.jsonl
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from mfa_config import ConfigLoader, GeneratorConfig, OUTPUT_FORMATS
from mfa_reporter import MFAStatisticsReporter, MFAValidator, render_statistics
from output_writers import DataWriter
from population_builder import Application, Employee, build_population
from seeded_random import SeededRandom
from signin_synthesizer import SignInRecord, SignInSynthesizer
from target_correction import CorrectionReport, TargetCorrectionEngine


@dataclass
class GenerationResult:
    """Everything one run produced, after correction."""
    config: GeneratorConfig
    seed: int
    current_date: datetime
    employees: List[Employee]
    applications: List[Application]
    records: List[SignInRecord]
    correction: Optional[CorrectionReport]
    summary: Dict[str, Any]
    validation: Optional[Dict[str, Any]] = None


# =============================================================================
# Main Generator Orchestrator
# =============================================================================

class MFADataGenerator:
    """Orchestrates the generation pipeline."""

    def __init__(self, config: GeneratorConfig, current_date: Optional[datetime] = None):
        self.config = config
        self.current_date = current_date or datetime.now()
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self) -> GenerationResult:
        """Execute population build, synthesis, correction and reporting in order."""
        self.logger.info("=" * 60)
        self.logger.info("MFA SIGN-IN DATA GENERATION - STARTING")
        self.logger.info("=" * 60)

        rng = SeededRandom(self.config.seed)
        self.logger.info(f"Using seed: {rng.seed}")
        self.logger.info(f"Current date: {self.current_date:%Y-%m-%d %H:%M:%S}")

        # Step 1: Population
        employees, applications = build_population(self.config, rng)
        self.logger.info("✓ Built employee roster and application catalogue")

        # Step 2: Sign-in events
        synthesizer = SignInSynthesizer(self.config, rng, employees, applications, self.current_date)
        records = synthesizer.generate(self.config.record_count)
        self.logger.info("✓ Generated sign-in records")

        # Step 3: Current-month target correction
        correction = None
        if self.config.correction_enabled:
            engine = TargetCorrectionEngine(self.config, rng)
            correction = engine.correct(records, self.current_date)
            self._log_correction(correction)
        else:
            self.logger.info("Target correction disabled, records left as drawn")

        # Step 4: Statistics and validation (read-only)
        reporter = MFAStatisticsReporter(
            self.config, employees, applications, records,
            self.current_date, seed=rng.seed, correction_report=correction,
        )
        summary = reporter.generate_summary()

        validation = None
        if self.config.validation_enabled or self.config.summary_only:
            validation = MFAValidator(self.config, summary, records).validate()

        self.logger.info("=" * 60)
        self.logger.info("MFA SIGN-IN DATA GENERATION - COMPLETE")
        self.logger.info("=" * 60)

        return GenerationResult(
            config=self.config,
            seed=rng.seed,
            current_date=self.current_date,
            employees=employees,
            applications=applications,
            records=records,
            correction=correction,
            summary=summary,
            validation=validation,
        )

    def _log_correction(self, report: CorrectionReport) -> None:
        if report.rate_before is None:
            self.logger.warning(f"Correction skipped for {report.period}: {report.status}")
            return
        self.logger.info(
            f"Correction {report.period}: {report.rate_before:.2%} -> "
            f"{report.rate_after:.2%} (target {report.target_rate:.2%}, "
            f"{report.records_flipped} records flipped, status={report.status})"
        )


def write_outputs(result: GenerationResult, output_path: Optional[Path] = None,
                  stdout=None, stderr=None) -> Optional[Path]:
    """
    Route records and statistics.

    Records go to output_path or stdout unless summary-only. Statistics go to
    stderr when summary-only or stdout is a terminal, otherwise to a
    companion file; its path is returned.
    """
    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr
    config = result.config

    writer = DataWriter(config)
    text = render_statistics(result.summary, config, result.validation)

    if not config.summary_only:
        writer.write_records(result.records, output_path if output_path is not None else stdout)

    if config.summary_only or stdout.isatty():
        writer.write_statistics(text, stderr)
        return None

    stats_path = writer.statistics_path(output_path)
    writer.write_statistics(text, stats_path)
    return stats_path


# =============================================================================
# CLI Entry Point
# =============================================================================

def setup_logging(level: str = 'INFO') -> None:
    """Configure logging."""
    log_format = "%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        stream=sys.stderr,
    )
    # Suppress verbose logs from faker
    logging.getLogger("faker").setLevel(logging.WARNING)


def parse_current_date(value: str) -> datetime:
    """argparse type for --current-date (YYYY-MM-DD)."""
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{value}'")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Synthetic MFA Sign-In Data Generator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration JSON file (built-in defaults when omitted)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible output (overrides config)"
    )

    parser.add_argument(
        "--summary-only",
        action="store_true",
        help="Only print statistics and validation, no data records"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Run validation checks and include them in the statistics"
    )

    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Record output format (overrides config)"
    )

    parser.add_argument(
        "--records",
        type=int,
        default=None,
        help="Number of sign-in records to generate (overrides config)"
    )

    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write records to this file instead of stdout"
    )

    parser.add_argument(
        "--current-date",
        type=parse_current_date,
        default=None,
        help="Simulation date YYYY-MM-DD (defaults to now)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Load the config file and apply command-line overrides."""
    config = ConfigLoader(args.config).load()

    overrides: Dict[str, Any] = {}
    if args.seed is not None:
        overrides['seed'] = args.seed
    if args.records is not None:
        overrides['record_count'] = args.records
    if args.format is not None:
        overrides['output_format'] = args.format
    if args.summary_only:
        overrides['summary_only'] = True
        overrides['validation_enabled'] = True
    if args.validate:
        overrides['validation_enabled'] = True

    if overrides:
        config = config.with_overrides(**overrides)
    return config


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    log_level = 'DEBUG' if args.verbose else 'INFO'
    setup_logging(log_level)

    try:
        config = build_config(args)
        result = MFADataGenerator(config, args.current_date).run()
        write_outputs(result, args.output)
    except FileNotFoundError as e:
        logging.error(f"File not found: {e}")
        sys.exit(1)
    except ValueError as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
