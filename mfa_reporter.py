"""
mfa_reporter.py

Read-only statistics and validation over the corrected sign-in record set.

MFAStatisticsReporter builds a nested summary dictionary (coverage metric,
usage and compliance rates, admin statistics, current-period statistics,
per-user and per-application breakdowns, sign-in sources, monthly trend).
MFAValidator runs tolerance checks of that summary against the configured
targets. render_statistics() turns both into the human-readable report.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from mfa_config import GeneratorConfig, RISK_TIERS
from population_builder import Application, Employee, RiskTier
from reference_data import MONTH_LABELS, TIER_LABELS
from signin_synthesizer import SignInRecord, records_to_dataframe
from target_correction import FLOAT_SLACK, CorrectionReport, find_invariant_violations, period_key

TOP_OFFENDERS = 10
NON_MFA_BUCKETS = [
    ('1-2', 1, 2),
    ('3-5', 3, 5),
    ('6-10', 6, 10),
    ('11+', 11, None),
]


def _pct(numerator: float, denominator: float) -> float:
    return (numerator / denominator) * 100 if denominator else 0.0


# =============================================================================
# Statistics Reporter
# =============================================================================

class MFAStatisticsReporter:
    """Computes summary statistics; never mutates the records."""

    def __init__(self, config: GeneratorConfig,
                 employees: Sequence[Employee],
                 applications: Sequence[Application],
                 records: Sequence[SignInRecord],
                 current_date: datetime,
                 seed: Optional[int] = None,
                 correction_report: Optional[CorrectionReport] = None):
        self.config = config
        self.employees = employees
        self.applications = applications
        self.records = records
        self.current_date = current_date
        self.seed = seed
        self.correction_report = correction_report
        self.df = records_to_dataframe(records)
        self.logger = logging.getLogger(self.__class__.__name__)

    def generate_summary(self) -> Dict[str, Any]:
        """Generate the full statistics summary."""
        self.logger.info("Calculating MFA coverage statistics...")
        summary = {
            'overview': self._overview(),
            'portfolio': self._portfolio(),
            'coverage': self._coverage(),
            'usage': self._usage(),
            'admin': self._admin(),
            'current_period': self._current_period(),
            'users': self._users(),
            'applications': self._applications(),
            'sources': self._sources(),
            'monthly_trend': self._monthly_trend(),
            'correction': self.correction_report.to_dict() if self.correction_report else None,
        }
        return summary

    def _overview(self) -> Dict[str, Any]:
        window_start = self.current_date - timedelta(days=self.config.date_range_days)
        return {
            'total_signins': len(self.df),
            'employees': len(self.employees),
            'applications': len(self.applications),
            'date_range_days': self.config.date_range_days,
            'window_start': window_start.strftime('%Y-%m-%d'),
            'current_date': self.current_date.strftime('%Y-%m-%d'),
            'seed': self.seed,
        }

    def _portfolio(self) -> Dict[str, Any]:
        total = len(self.applications)
        tiers = {}
        for tier in RISK_TIERS:
            count = sum(1 for a in self.applications if a.risk_tier == RiskTier(tier))
            tiers[tier] = {'count': count, 'pct': _pct(count, total)}
        return {'total': total, 'tiers': tiers}

    def _coverage(self) -> Dict[str, Any]:
        """Share of in-scope (critical/high-risk) applications that require MFA."""
        in_scope = [a for a in self.applications if a.in_scope]
        protected = [a for a in in_scope if a.mfa_required]
        coverage = _pct(len(protected), len(in_scope))
        target = self.config.target_mfa_coverage * 100
        return {
            'in_scope_apps': len(in_scope),
            'in_scope_apps_with_mfa': len(protected),
            'coverage_pct': coverage,
            'target_pct': target,
            'meets_target': coverage >= target,
            'gap_to_target': target - coverage,
        }

    def _usage(self) -> Dict[str, Any]:
        df = self.df
        total = len(df)
        mfa = int(df['is_mfa'].sum()) if total else 0
        compliant = int(df['compliance_status'].sum()) if total else 0
        required = df[df['app_mfa_required'] & df['app_in_scope']] if total else df
        required_mfa = int(required['is_mfa'].sum()) if len(required) else 0
        return {
            'total_signins': total,
            'mfa_signins': mfa,
            'non_mfa_signins': total - mfa,
            'mfa_usage_rate': _pct(mfa, total),
            'compliant_signins': compliant,
            'compliance_rate': _pct(compliant, total),
            'non_compliant_signins': total - compliant,
            'non_compliance_rate': _pct(total - compliant, total),
            'required_in_scope_signins': len(required),
            'required_in_scope_mfa_signins': required_mfa,
            'required_in_scope_compliance_rate': _pct(required_mfa, len(required)),
        }

    def _admin(self) -> Dict[str, Any]:
        df = self.df
        admins = df[df['is_admin']] if len(df) else df
        admin_mfa = int(admins['is_mfa'].sum()) if len(admins) else 0
        return {
            'admin_users': sum(1 for e in self.employees if e.is_admin),
            'admin_signins': len(admins),
            'admin_mfa_signins': admin_mfa,
            'admin_mfa_rate': _pct(admin_mfa, len(admins)),
            'target_rate': self.config.admin_mfa_enforcement * 100,
        }

    def _current_period(self) -> Dict[str, Any]:
        key = period_key(self.current_date)
        df = self.df
        period = df[df['tl_date'].str[:7] == key] if len(df) else df
        total = len(period)
        mfa = int(period['is_mfa'].sum()) if total else 0
        compliant = int(period['compliance_status'].sum()) if total else 0
        return {
            'period': key,
            'total': total,
            'mfa': mfa,
            'mfa_rate': _pct(mfa, total),
            'compliant': compliant,
            'non_compliant': total - compliant,
            'compliance_rate': _pct(compliant, total),
        }

    def _users(self) -> Dict[str, Any]:
        df = self.df
        if not len(df):
            return {'users_with_signins': 0, 'users_with_mfa': 0, 'users_with_non_mfa': 0,
                    'buckets': {label: 0 for label, _, _ in NON_MFA_BUCKETS}, 'top_offenders': []}

        per_user = df.groupby('employee_id').agg(
            name=('employee_full_name', 'first'),
            total=('is_mfa', 'size'),
            mfa=('is_mfa', 'sum'),
        ).reset_index()
        per_user['no_mfa'] = per_user['total'] - per_user['mfa']

        buckets = {}
        for label, low, high in NON_MFA_BUCKETS:
            mask = per_user['no_mfa'] >= low
            if high is not None:
                mask &= per_user['no_mfa'] <= high
            buckets[label] = int(mask.sum())

        offenders = (
            per_user[per_user['no_mfa'] > 0]
            .sort_values(['no_mfa', 'employee_id'], ascending=[False, True])
            .head(TOP_OFFENDERS)
        )
        top = [
            {
                'employee_id': row.employee_id,
                'name': row.name,
                'no_mfa': int(row.no_mfa),
                'total': int(row.total),
                'no_mfa_pct': _pct(row.no_mfa, row.total),
            }
            for row in offenders.itertuples(index=False)
        ]

        return {
            'users_with_signins': len(per_user),
            'users_with_mfa': int((per_user['mfa'] > 0).sum()),
            'users_with_non_mfa': int((per_user['no_mfa'] > 0).sum()),
            'buckets': buckets,
            'top_offenders': top,
        }

    def _applications(self) -> Dict[str, Any]:
        df = self.df
        if len(df):
            per_app = df.groupby('application_id').agg(
                total=('compliance_status', 'size'),
                compliant=('compliance_status', 'sum'),
            )
        else:
            per_app = pd.DataFrame(columns=['total', 'compliant'])

        rows = []
        for app in self.applications:
            if app.app_id in per_app.index:
                total = int(per_app.at[app.app_id, 'total'])
                compliant = int(per_app.at[app.app_id, 'compliant'])
            else:
                total = compliant = 0
            rows.append({
                'app_id': app.app_id,
                'name': app.app_name,
                'risk_tier': app.risk_tier.value,
                'mfa_required': app.mfa_required,
                'total': total,
                'compliant': compliant,
                'non_compliant': total - compliant,
                'compliance_rate': _pct(compliant, total),
            })

        with_non_compliance = sum(1 for r in rows if r['non_compliant'] > 0)
        return {
            'per_app': rows,
            'apps_with_non_compliance': with_non_compliance,
            'apps_with_non_compliance_pct': _pct(with_non_compliance, len(rows)),
        }

    def _sources(self) -> List[Dict[str, Any]]:
        total = len(self.df)
        counts = self.df['signin_source'].value_counts() if total else pd.Series(dtype=int)
        return [
            {'name': name, 'count': int(counts.get(name, 0)), 'pct': _pct(counts.get(name, 0), total)}
            for name, _ in self.config.signin_sources
        ]

    def _monthly_trend(self) -> List[Dict[str, Any]]:
        df = self.df
        if not len(df):
            return []
        monthly = df.groupby(df['tl_date'].str[:7]).agg(
            total=('is_mfa', 'size'),
            mfa=('is_mfa', 'sum'),
            compliant=('compliance_status', 'sum'),
        ).sort_index()
        return [
            {
                'month': row.Index,
                'total': int(row.total),
                'mfa': int(row.mfa),
                'mfa_rate': _pct(row.mfa, row.total),
                'compliance_rate': _pct(row.compliant, row.total),
            }
            for row in monthly.itertuples()
        ]


# =============================================================================
# Validator
# =============================================================================

@dataclass
class ValidationCheck:
    """One tolerance check: passes iff the actual value is close enough to the expected one."""
    check: str
    expected: str
    actual: str
    tolerance: str
    passed: bool
    details: str = ''


class MFAValidator:
    """Checks generated data against configuration targets."""

    def __init__(self, config: GeneratorConfig, summary: Dict[str, Any],
                 records: Sequence[SignInRecord]):
        self.config = config
        self.summary = summary
        self.records = records
        self.logger = logging.getLogger(self.__class__.__name__)

    def validate(self) -> Dict[str, Any]:
        """Run all checks and return {'all_passed': bool, 'results': [...]}."""
        self.logger.info("Running validation checks...")

        results: List[ValidationCheck] = [
            self._check_coverage(),
            self._check_admin_rate(),
            self._check_risk_distribution(),
            self._check_records_per_app(),
        ]
        if self.config.trendline_enabled and len(self.summary['monthly_trend']) >= 2:
            results.append(self._check_trendline())
        results.append(self._check_current_period_variance())
        results.append(self._check_user_variance())
        results.append(self._check_app_variance())
        if self.config.correction_enabled:
            results.append(self._check_target_compliance())
        results.append(self._check_invariant())

        all_passed = all(r.passed for r in results)
        failed = [r.check for r in results if not r.passed]
        if failed:
            self.logger.warning(f"Validation checks failed: {failed}")
        else:
            self.logger.info("All validation checks passed")

        return {'all_passed': all_passed, 'results': [asdict(r) for r in results]}

    def _check_coverage(self) -> ValidationCheck:
        expected = self.config.baseline_mfa_coverage * 100
        actual = self.summary['coverage']['coverage_pct']
        tolerance = self.config.mfa_coverage_tolerance * 100
        return ValidationCheck(
            check='MFA Coverage (Critical/High-Risk Apps)',
            expected=f"{expected:.1f}%",
            actual=f"{actual:.1f}%",
            tolerance=f"±{tolerance:.1f}%",
            passed=abs(actual - expected) <= tolerance,
            details=f"Target is baseline_mfa_coverage ({self.config.baseline_mfa_coverage})",
        )

    def _check_admin_rate(self) -> ValidationCheck:
        expected = self.config.admin_mfa_enforcement * 100
        actual = self.summary['admin']['admin_mfa_rate']
        tolerance = self.config.admin_mfa_tolerance * 100
        return ValidationCheck(
            check='Admin MFA Usage Rate',
            expected=f"{expected:.1f}%",
            actual=f"{actual:.1f}%",
            tolerance=f"±{tolerance:.1f}%",
            passed=abs(actual - expected) <= tolerance,
            details=f"Target is admin_mfa_enforcement ({self.config.admin_mfa_enforcement})",
        )

    def _check_risk_distribution(self) -> ValidationCheck:
        tiers = self.summary['portfolio']['tiers']
        configured = self.config.risk_percentages
        tolerance = self.config.risk_distribution_tolerance
        passed = all(
            abs(tiers[t]['pct'] / 100 - configured.get(t, 0.0)) <= tolerance + FLOAT_SLACK
            for t in RISK_TIERS
        )
        short = {'CRITICAL': 'C', 'HIGH_RISK': 'H', 'MEDIUM_RISK': 'M', 'LOW_RISK': 'L'}
        return ValidationCheck(
            check='Application Risk Distribution',
            expected=' '.join(f"{short[t]}:{configured.get(t, 0.0) * 100:.0f}%" for t in RISK_TIERS),
            actual=' '.join(f"{short[t]}:{tiers[t]['pct']:.0f}%" for t in RISK_TIERS),
            tolerance=f"±{tolerance * 100:.1f}%",
            passed=passed,
            details='Tier counts allocated from risk_distribution',
        )

    def _check_records_per_app(self) -> ValidationCheck:
        minimum = self.config.min_records_per_app
        low = sum(1 for row in self.summary['applications']['per_app'] if row['total'] < minimum)
        return ValidationCheck(
            check='Sign-In Data Coverage',
            expected=f"≥{minimum} sign-ins per app",
            actual=f"{low} apps below threshold",
            tolerance='0 apps',
            passed=low == 0,
            details='All apps should have minimum statistical validity',
        )

    def _check_trendline(self) -> ValidationCheck:
        trend = self.summary['monthly_trend']
        first, last = trend[0]['mfa_rate'], trend[-1]['mfa_rate']
        return ValidationCheck(
            check='MFA Adoption Trendline',
            expected='Increasing over time',
            actual=f"{first:.1f}% → {last:.1f}%",
            tolerance='Positive trend',
            passed=last > first,
            details='MFA usage should increase from early to late months',
        )

    def _check_current_period_variance(self) -> ValidationCheck:
        current = self.summary['current_period']
        passed = current['total'] > 0 and current['non_compliant'] > 0
        return ValidationCheck(
            check='Current Month Non-Compliance',
            expected='< 100% (must have non-compliant records)',
            actual=f"{current['compliance_rate']:.1f}% ({current['non_compliant']} non-compliant)",
            tolerance='Must have variance',
            passed=passed,
            details=f"Current month: {current['period']}",
        )

    def _check_user_variance(self) -> ValidationCheck:
        users = self.summary['users']
        buckets = users['buckets']
        return ValidationCheck(
            check='Users with Non-MFA Sign-Ins',
            expected='> 0 users with 6-10 non-MFA sign-ins',
            actual=(f"{users['users_with_non_mfa']} total ({buckets['6-10']} with 6-10, "
                    f"{buckets['11+']} with 11+)"),
            tolerance='Must have repeat non-MFA users',
            passed=users['users_with_non_mfa'] > 0 and buckets['6-10'] > 0,
            details='Dashboards need users with patterns of non-MFA usage',
        )

    def _check_app_variance(self) -> ValidationCheck:
        apps = self.summary['applications']
        return ValidationCheck(
            check='Apps with Non-Compliant Sign-Ins',
            expected='> 0 apps',
            actual=f"{apps['apps_with_non_compliance']} apps ({apps['apps_with_non_compliance_pct']:.1f}%)",
            tolerance='Must have app-level variance',
            passed=apps['apps_with_non_compliance'] > 0,
            details='Dashboards need to show non-compliant apps',
        )

    def _check_target_compliance(self) -> ValidationCheck:
        current = self.summary['current_period']
        target = self.config.target_compliance
        tolerance = self.config.correction_tolerance
        actual = current['compliance_rate'] / 100
        passed = current['total'] > 0 and abs(actual - target) <= tolerance + FLOAT_SLACK
        return ValidationCheck(
            check='Current Month Target Compliance',
            expected=f"{target * 100:.2f}%",
            actual=f"{actual * 100:.2f}%",
            tolerance=f"±{tolerance * 100:.2f}%",
            passed=passed,
            details=f"Exact target correction for {current['period']}",
        )

    def _check_invariant(self) -> ValidationCheck:
        violations = find_invariant_violations(self.records)
        return ValidationCheck(
            check='Derived Compliance Consistency',
            expected='0 inconsistent records',
            actual=f"{len(violations)} inconsistent records",
            tolerance='0 records',
            passed=not violations,
            details='compliance == (not app_mfa_required) or is_mfa',
        )


# =============================================================================
# Text rendering
# =============================================================================

def render_validation_table(validation: Dict[str, Any]) -> str:
    lines = [
        '─' * 110,
        'VALIDATION CHECK'.ljust(42) + 'EXPECTED'.ljust(28) + 'ACTUAL'.ljust(32) + 'STATUS',
        '─' * 110,
    ]
    for result in validation['results']:
        status = 'PASS' if result['passed'] else 'FAIL'
        lines.append(
            result['check'].ljust(42)
            + result['expected'].ljust(28)
            + result['actual'].ljust(32)
            + status
        )
    lines.append('─' * 110)
    overall = 'ALL CHECKS PASSED' if validation['all_passed'] else 'SOME CHECKS FAILED'
    lines.append(f"Overall Validation: {overall}")
    return '\n'.join(lines)


def _section(title: str) -> List[str]:
    return ['', '─' * 80, title, '─' * 80]


def render_statistics(summary: Dict[str, Any], config: GeneratorConfig,
                      validation: Optional[Dict[str, Any]] = None) -> str:
    """Render the human-readable statistics report."""
    ov = summary['overview']
    cov = summary['coverage']
    usage = summary['usage']
    admin = summary['admin']
    current = summary['current_period']
    users = summary['users']
    apps = summary['applications']

    seed = ov['seed'] if ov['seed'] is not None else 'Random (not seeded)'
    lines = [
        '=' * 80,
        'MFA DATA GENERATOR - STATISTICS SUMMARY',
        '=' * 80,
        f"Generation Date:                    {datetime.now().isoformat()}",
        f"Random Seed:                        {seed}",
    ]

    lines += _section('DATA GENERATION OVERVIEW')
    lines += [
        f"Total Sign-In Records:              {ov['total_signins']:,}",
        f"Total Employees:                    {ov['employees']:,}",
        f"Total Applications:                 {ov['applications']}",
        f"Date Range:                         {ov['date_range_days']} days "
        f"({ov['window_start']} to {ov['current_date']})",
    ]

    lines += _section('APPLICATION PORTFOLIO BREAKDOWN')
    for tier, stats in summary['portfolio']['tiers'].items():
        label = f"{TIER_LABELS[tier]} Applications:"
        lines.append(f"{label:<36}{stats['count']} ({stats['pct']:.1f}%)")
    lines += [
        '',
        f"Critical/High-Risk Total:           {cov['in_scope_apps']}",
        f"Critical/High-Risk with MFA:        {cov['in_scope_apps_with_mfa']}",
    ]

    lines += _section('MFA COVERAGE METRIC (CRITICAL/HIGH-RISK APPLICATIONS)')
    lines += [
        f"In-Scope Systems:                   {cov['in_scope_apps']}",
        f"Systems with MFA Protection:        {cov['in_scope_apps_with_mfa']}",
        f"MFA Coverage Percentage:            {cov['coverage_pct']:.1f}%",
        f"Formula: ({cov['in_scope_apps_with_mfa']} / {cov['in_scope_apps']}) x 100 = "
        f"{cov['coverage_pct']:.1f}%",
        f"Target:                             {cov['target_pct']:.1f}%",
        f"Current vs Target:                  {'MEETS TARGET' if cov['meets_target'] else 'BELOW TARGET'}",
        f"Gap to Target:                      {cov['gap_to_target']:.1f} percentage points",
    ]

    lines += _section('MFA USAGE STATISTICS (SIGN-IN BEHAVIOUR)')
    lines += [
        f"Total Sign-Ins:                     {usage['total_signins']:,}",
        f"Sign-Ins with MFA:                  {usage['mfa_signins']:,} ({usage['mfa_usage_rate']:.1f}%)",
        f"Sign-Ins without MFA:               {usage['non_mfa_signins']:,} "
        f"({100 - usage['mfa_usage_rate']:.1f}%)" if usage['total_signins'] else
        "Sign-Ins without MFA:               0",
        f"Sign-Ins to MFA-Required Apps:      {usage['required_in_scope_signins']:,}",
        f"Compliant MFA Sign-Ins:             {usage['required_in_scope_mfa_signins']:,} "
        f"({usage['required_in_scope_compliance_rate']:.1f}%)",
        f"Non-Compliant Sign-Ins:             {usage['non_compliant_signins']:,} "
        f"({usage['non_compliance_rate']:.1f}%)",
    ]

    lines += _section('ADMIN USER MFA STATISTICS')
    lines += [
        f"Admin Users:                        {admin['admin_users']}",
        f"Admin Sign-Ins:                     {admin['admin_signins']:,}",
        f"Admin Sign-Ins with MFA:            {admin['admin_mfa_signins']:,} ({admin['admin_mfa_rate']:.1f}%)",
        f"Admin MFA Enforcement Target:       {admin['target_rate']:.1f}%",
    ]

    lines += _section(f"CURRENT MONTH STATISTICS (TL_DATE: {current['period']})")
    lines += [
        f"Total Sign-Ins in Current Month:    {current['total']:,}",
        f"Sign-Ins with MFA:                  {current['mfa']:,} ({current['mfa_rate']:.1f}%)",
        f"Compliant Sign-Ins:                 {current['compliant']:,} ({current['compliance_rate']:.1f}%)",
        f"Non-Compliant Sign-Ins:             {current['non_compliant']:,}",
        '',
        'User-Level Variance:',
        f"  Users with >=1 MFA sign-in:       {users['users_with_mfa']:,}",
        f"  Users with >=1 non-MFA sign-in:   {users['users_with_non_mfa']:,}",
        '',
        'User Non-MFA Sign-In Distribution:',
    ]
    for label, count in users['buckets'].items():
        lines.append(f"  Users with {label} non-MFA sign-ins: {count:,}")
    lines.append('')
    lines.append(f"Top {TOP_OFFENDERS} Users Not Using MFA:")
    for idx, user in enumerate(users['top_offenders'], start=1):
        lines.append(
            f"  {idx:>2}. {user['name']:<30} {user['no_mfa']:>3} non-MFA sign-ins "
            f"({user['no_mfa_pct']:>5.1f}% of {user['total']})"
        )
    lines.append('')
    lines.append(f"Apps with non-compliance:             {apps['apps_with_non_compliance']} "
                 f"({apps['apps_with_non_compliance_pct']:.1f}%)")

    lines += _section('PER-APPLICATION COMPLIANCE')
    for row in apps['per_app']:
        lines.append(
            f"{row['app_id']}  {row['name'][:34]:<34} {row['risk_tier']:<12} "
            f"{'MFA' if row['mfa_required'] else '   '} {row['total']:>7,} "
            f"{row['compliance_rate']:>6.1f}%"
        )

    lines += _section('SIGN-IN SOURCE BREAKDOWN')
    for source in summary['sources']:
        lines.append(f"{source['name']:<30} {source['count']:>10,} ({source['pct']:>5.1f}%)")

    lines += _section('TRENDLINE ANALYSIS (MFA ADOPTION OVER TIME)')
    lines.append(f"Trendline Enabled:                  {'Yes' if config.trendline_enabled else 'No'}")
    for month in summary['monthly_trend']:
        lines.append(
            f"  {month['month']}: {month['total']:>7,} sign-ins, MFA {month['mfa_rate']:5.1f}%, "
            f"compliant {month['compliance_rate']:5.1f}%"
        )
    if config.trendline_enabled:
        lines.append('')
        lines.append(f"Monthly MFA Adoption Multipliers (applied to {config.baseline_mfa_coverage * 100:.0f}% baseline):")
        for label, weight in zip(MONTH_LABELS, config.monthly_weights):
            bar = '#' * int(round(weight * 20))
            lines.append(
                f"  {label}: {weight:.2f}x -> {config.baseline_mfa_coverage * weight * 100:.1f}% coverage {bar}"
            )

    correction = summary.get('correction')
    if correction:
        lines += _section('CURRENT MONTH TARGET CORRECTION')
        before = correction['rate_before']
        after = correction['rate_after']
        lines += [
            f"Period:                             {correction['period']}",
            f"Status:                             {correction['status']}",
            f"Rate Before:                        {before * 100:.2f}%" if before is not None else
            "Rate Before:                        n/a",
            f"Target:                             {correction['target_rate'] * 100:.2f}%",
            f"Records Flipped:                    {correction['records_flipped']}",
            f"Rate After:                         {after * 100:.2f}%" if after is not None else
            "Rate After:                         n/a",
        ]
        for message in correction['diagnostics']:
            lines.append(f"Warning: {message}")

    lines += _section('KEY INSIGHTS')
    coverage_pct = cov['coverage_pct']
    if coverage_pct >= 90:
        lines.append('EXCELLENT: MFA coverage exceeds 90% for critical/high-risk apps')
    elif coverage_pct >= 80:
        lines.append('GOOD: MFA coverage within the typical 80-100% range')
    else:
        lines.append('ACTION REQUIRED: MFA coverage below 80% - priority remediation needed')
    if admin['admin_mfa_rate'] >= 95:
        lines.append('Admin accounts well protected with MFA')
    else:
        lines.append('Admin MFA usage below target - high-priority security risk')
    if usage['non_compliance_rate'] < 5:
        lines.append('Low non-compliance rate - strong security posture')
    else:
        lines.append('Significant non-compliant sign-ins detected')

    if validation is not None:
        lines += ['', render_validation_table(validation)]

    lines += ['', '=' * 80, '']
    return '\n'.join(lines)
