"""
target_correction.py

Forces the current calendar month's compliance rate to a configured target.

Records of the current period are selected by comparing the year-month part
of their monthly bucket ('YYYY-MM') as a string, never by parsing dates.
If the realised rate is outside tolerance, the minimum number of records is
flipped, chosen uniformly at random without replacement:

- raising compliance flips non-compliant records to compliant;
- lowering compliance flips compliant records whose application requires
  MFA. Records of applications that do not require MFA are compliant by
  definition and are never candidates.

A flipped record on an MFA-required application has its MFA-usage flag set
to the new compliance value, so compliance == (not mfa_required) or is_mfa
holds for every record after the pass.

Shortfalls, empty periods and periods too small for the tolerance are
diagnostics, not errors: the report always states the rate actually achieved.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from mfa_config import GeneratorConfig
from seeded_random import SeededRandom
from signin_synthesizer import SignInRecord

# Slack for float comparisons against the tolerance
FLOAT_SLACK = 1e-12


def period_key(when: date) -> str:
    """Year-month key 'YYYY-MM' for a date or datetime."""
    return f"{when.year:04d}-{when.month:02d}"


def records_in_period(records: Sequence[SignInRecord], key: str) -> List[SignInRecord]:
    return [r for r in records if r.tl_date[:7] == key]


def find_invariant_violations(records: Sequence[SignInRecord]) -> List[SignInRecord]:
    """Records whose compliance flag disagrees with their MFA usage and policy."""
    return [
        r for r in records
        if r.compliance_status != ((not r.app_mfa_required) or r.is_mfa)
    ]


@dataclass
class CorrectionReport:
    """Outcome of one correction pass."""
    period: str
    target_rate: float
    tolerance: float
    records_in_period: int = 0
    compliant_before: int = 0
    rate_before: Optional[float] = None
    target_compliant_count: Optional[int] = None
    records_needed: int = 0
    candidates_available: int = 0
    records_flipped: int = 0
    compliant_after: int = 0
    rate_after: Optional[float] = None
    status: str = 'skipped'
    flipped_ids: List[str] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def within_tolerance(self) -> bool:
        if self.rate_after is None:
            return False
        return abs(self.rate_after - self.target_rate) <= self.tolerance + FLOAT_SLACK

    def to_dict(self) -> dict:
        return {
            'period': self.period,
            'status': self.status,
            'records_in_period': self.records_in_period,
            'rate_before': self.rate_before,
            'target_rate': self.target_rate,
            'tolerance': self.tolerance,
            'target_compliant_count': self.target_compliant_count,
            'records_needed': self.records_needed,
            'candidates_available': self.candidates_available,
            'records_flipped': self.records_flipped,
            'rate_after': self.rate_after,
            'within_tolerance': self.within_tolerance,
            'diagnostics': list(self.diagnostics),
        }


class TargetCorrectionEngine:
    """Flips a minimal random subset of current-period records to hit a target rate."""

    def __init__(self, config: GeneratorConfig, rng: SeededRandom):
        self.target_rate = config.target_compliance
        self.tolerance = config.correction_tolerance
        self.rng = rng
        self.logger = logging.getLogger(self.__class__.__name__)

    def correct(self, records: List[SignInRecord], current_date: date) -> CorrectionReport:
        """
        Mutate records in place so the current period lands on the target.

        Returns a CorrectionReport; never raises for shortfalls.
        """
        key = period_key(current_date)
        report = CorrectionReport(period=key, target_rate=self.target_rate, tolerance=self.tolerance)

        self.logger.info("Applying final data correction to hit exact target...")
        period_records = records_in_period(records, key)

        if not period_records:
            message = f"No current month records found for {key}"
            self.logger.warning(message)
            report.status = 'no_records'
            report.diagnostics.append(message)
            return report

        total = len(period_records)
        compliant = sum(1 for r in period_records if r.compliance_status)
        rate = compliant / total

        report.records_in_period = total
        report.compliant_before = compliant
        report.rate_before = rate

        self.logger.info(f"  Current: {compliant}/{total} = {rate:.2%}")
        self.logger.info(f"  Target: {self.target_rate:.2%}")
        self.logger.info(f"  Difference: {abs(rate - self.target_rate) * 100:.2f}pp")

        if abs(rate - self.target_rate) <= self.tolerance + FLOAT_SLACK:
            self.logger.info(f"  Already within tolerance (±{self.tolerance:.1%})")
            report.status = 'within_tolerance'
            report.compliant_after = compliant
            report.rate_after = rate
            return report

        # Half-up rounding
        target_count = int(math.floor(total * self.target_rate + 0.5))
        need = abs(target_count - compliant)
        report.target_compliant_count = target_count
        report.records_needed = need

        if need == 0:
            # Period too small: no whole number of compliant records lands within tolerance
            message = (
                f"No flip count brings {key} within ±{self.tolerance:.2%} of "
                f"{self.target_rate:.2%}; left at {rate:.2%} ({compliant}/{total})"
            )
            self.logger.warning(message)
            report.status = 'unreachable'
            report.compliant_after = compliant
            report.rate_after = rate
            report.diagnostics.append(message)
            return report

        if compliant < target_count:
            candidates = [r for r in period_records if not r.compliance_status]
        else:
            candidates = [r for r in period_records
                          if r.compliance_status and r.app_mfa_required]
        report.candidates_available = len(candidates)

        self.logger.info(f"  Adjusting {need} records to reach {target_count} compliant...")
        to_flip = self.rng.sample_without_replacement(candidates, need)

        for record in to_flip:
            self._flip(record)
            report.flipped_ids.append(record.unique_signin)

        compliant_after = sum(1 for r in period_records if r.compliance_status)
        report.records_flipped = len(to_flip)
        report.compliant_after = compliant_after
        report.rate_after = compliant_after / total
        report.status = 'corrected'

        if len(to_flip) < need:
            message = (
                f"Only {len(to_flip)} of {need} required flips were possible for {key}; "
                f"achieved {report.rate_after:.2%} against target {self.target_rate:.2%}"
            )
            self.logger.warning(message)
            report.status = 'partial'
            report.diagnostics.append(message)
        elif not report.within_tolerance:
            message = (
                f"Closest reachable rate for {key} is {report.rate_after:.2%} "
                f"({compliant_after}/{total}), outside ±{self.tolerance:.2%} of {self.target_rate:.2%}"
            )
            self.logger.warning(message)
            report.status = 'unreachable'
            report.diagnostics.append(message)

        self.logger.info(f"  Final: {compliant_after}/{total} = {report.rate_after:.2%}")
        return report

    @staticmethod
    def _flip(record: SignInRecord) -> None:
        record.compliance_status = not record.compliance_status
        if record.app_mfa_required:
            record.is_mfa = record.compliance_status
