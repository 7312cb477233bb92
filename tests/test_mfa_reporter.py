from datetime import datetime

import pytest

from mfa_config import GeneratorConfig
from mfa_data_generator import MFADataGenerator
from mfa_reporter import (
    MFAStatisticsReporter,
    MFAValidator,
    render_statistics,
    render_validation_table,
)
from population_builder import Application, RiskTier

CURRENT = datetime(2024, 10, 15, 12, 0, 0)


def make_apps():
    return [
        Application("APP0001", "Vault", RiskTier.CRITICAL, True),
        Application("APP0002", "Payroll", RiskTier.HIGH_RISK, False),
        Application("APP0003", "Wiki", RiskTier.LOW_RISK, False),
    ]


def report_for(records, config=None, applications=None):
    config = config or GeneratorConfig.default()
    reporter = MFAStatisticsReporter(
        config, [], applications if applications is not None else make_apps(),
        records, CURRENT, seed=5,
    )
    return reporter.generate_summary()


def test_usage_and_current_period(record_factory) -> None:
    records = (record_factory(8, is_mfa=True, app_id="APP0001")
               + record_factory(2, is_mfa=False, app_id="APP0001")
               + record_factory(10, is_mfa=False, mfa_required=False, app_id="APP0003",
                                tl_date="2024-09-01"))

    summary = report_for(records)

    usage = summary["usage"]
    assert usage["total_signins"] == 20
    assert usage["mfa_signins"] == 8
    assert usage["mfa_usage_rate"] == pytest.approx(40.0)
    assert usage["non_compliant_signins"] == 2
    assert usage["non_compliance_rate"] == pytest.approx(10.0)
    assert usage["required_in_scope_signins"] == 10
    assert usage["required_in_scope_compliance_rate"] == pytest.approx(80.0)

    current = summary["current_period"]
    assert current["period"] == "2024-10"
    assert current["total"] == 10
    assert current["compliance_rate"] == pytest.approx(80.0)
    assert current["non_compliant"] == 2


def test_coverage_metric_counts_applications() -> None:
    summary = report_for([])

    coverage = summary["coverage"]
    assert coverage["in_scope_apps"] == 2
    assert coverage["in_scope_apps_with_mfa"] == 1
    assert coverage["coverage_pct"] == pytest.approx(50.0)
    assert coverage["meets_target"] is False
    assert summary["portfolio"]["tiers"]["MEDIUM_RISK"]["count"] == 0


def test_user_buckets_and_top_offenders(record_factory) -> None:
    records = []
    for employee, misses in (("EMP000001", 1), ("EMP000002", 4), ("EMP000003", 7), ("EMP000004", 12)):
        records += record_factory(misses, is_mfa=False, employee_id=employee)
        records += record_factory(2, is_mfa=True, employee_id=employee)
    records += record_factory(3, is_mfa=True, employee_id="EMP000005")

    users = report_for(records)["users"]

    assert users["users_with_signins"] == 5
    assert users["users_with_mfa"] == 5
    assert users["users_with_non_mfa"] == 4
    assert users["buckets"] == {"1-2": 1, "3-5": 1, "6-10": 1, "11+": 1}
    top = users["top_offenders"]
    assert [u["employee_id"] for u in top] == ["EMP000004", "EMP000003", "EMP000002", "EMP000001"]
    assert top[0]["no_mfa"] == 12
    assert top[0]["total"] == 14


def test_per_app_rows_include_unused_apps(record_factory) -> None:
    records = record_factory(4, is_mfa=False, app_id="APP0001") + record_factory(6, app_id="APP0001")

    apps = report_for(records)["applications"]

    rows = {row["app_id"]: row for row in apps["per_app"]}
    assert rows["APP0001"]["non_compliant"] == 4
    assert rows["APP0001"]["compliance_rate"] == pytest.approx(60.0)
    assert rows["APP0003"]["total"] == 0
    assert apps["apps_with_non_compliance"] == 1


def test_monthly_trend_sorted(record_factory) -> None:
    records = (record_factory(2, tl_date="2024-10-01")
               + record_factory(3, tl_date="2023-11-01", is_mfa=False)
               + record_factory(1, tl_date="2024-02-01"))

    trend = report_for(records)["monthly_trend"]

    assert [m["month"] for m in trend] == ["2023-11", "2024-02", "2024-10"]
    assert trend[0]["mfa_rate"] == 0.0
    assert trend[-1]["mfa_rate"] == pytest.approx(100.0)


def test_reporter_does_not_mutate_records(record_factory) -> None:
    records = record_factory(5, is_mfa=False) + record_factory(5)
    snapshot = [(r.is_mfa, r.compliance_status) for r in records]

    report_for(records)

    assert [(r.is_mfa, r.compliance_status) for r in records] == snapshot


def test_validator_flags_invariant_violation(record_factory) -> None:
    records = record_factory(20, is_mfa=True)
    records[0].compliance_status = False
    config = GeneratorConfig.default()
    summary = report_for(records, config)

    result = MFAValidator(config, summary, records).validate()

    checks = {r["check"]: r for r in result["results"]}
    assert checks["Derived Compliance Consistency"]["passed"] is False
    assert result["all_passed"] is False


def test_validator_skips_disabled_checks(record_factory) -> None:
    config = GeneratorConfig.default().with_overrides(
        correction_enabled=False, trendline_enabled=False,
    )
    records = record_factory(10)
    result = MFAValidator(config, report_for(records, config), records).validate()

    names = {r["check"] for r in result["results"]}
    assert "Current Month Target Compliance" not in names
    assert "MFA Adoption Trendline" not in names
    assert "Derived Compliance Consistency" in names


@pytest.fixture(scope="module")
def pipeline_result():
    config = GeneratorConfig.default().with_overrides(
        seed=31, record_count=20000, employee_count=300, application_count=40,
        validation_enabled=True,
    )
    return MFADataGenerator(config, CURRENT).run()


def test_pipeline_summary_hits_target(pipeline_result) -> None:
    current = pipeline_result.summary["current_period"]
    assert current["total"] > 500
    assert abs(current["compliance_rate"] / 100 - 0.95) <= 0.001 + 1e-12

    checks = {r["check"]: r for r in pipeline_result.validation["results"]}
    assert checks["Current Month Target Compliance"]["passed"]
    assert checks["Derived Compliance Consistency"]["passed"]
    assert checks["Current Month Non-Compliance"]["passed"]
    assert checks["Apps with Non-Compliant Sign-Ins"]["passed"]
    assert checks["Sign-In Data Coverage"]["passed"]


def test_render_statistics_sections(pipeline_result) -> None:
    text = render_statistics(pipeline_result.summary, pipeline_result.config,
                             pipeline_result.validation)

    assert "MFA DATA GENERATOR - STATISTICS SUMMARY" in text
    seed_line = next(line for line in text.splitlines() if line.startswith("Random Seed:"))
    assert seed_line.split()[-1] == "31"
    assert "MFA COVERAGE METRIC" in text
    assert "CURRENT MONTH STATISTICS (TL_DATE: 2024-10)" in text
    assert "CURRENT MONTH TARGET CORRECTION" in text
    assert "SIGN-IN SOURCE BREAKDOWN" in text
    assert "Overall Validation:" in text


def test_render_validation_table() -> None:
    validation = {
        "all_passed": False,
        "results": [
            {"check": "A", "expected": "1", "actual": "1", "tolerance": "0", "passed": True, "details": ""},
            {"check": "B", "expected": "1", "actual": "2", "tolerance": "0", "passed": False, "details": ""},
        ],
    }
    table = render_validation_table(validation)
    assert "PASS" in table and "FAIL" in table
    assert table.endswith("Overall Validation: SOME CHECKS FAILED")
