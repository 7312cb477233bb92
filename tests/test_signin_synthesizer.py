from datetime import datetime, timedelta

import pytest

from mfa_config import FatalConfigError, GeneratorConfig
from population_builder import Application, RiskTier, build_population
from seeded_random import SeededRandom
from signin_synthesizer import (
    RECORD_COLUMNS,
    SignInSynthesizer,
    is_weekday,
    month_bucket,
    records_to_dataframe,
)
from target_correction import find_invariant_violations


def make_synthesizer(config: GeneratorConfig, current_date: datetime, seed: int = 10):
    rng = SeededRandom(seed)
    employees, applications = build_population(config, rng)
    return SignInSynthesizer(config, rng, employees, applications, current_date)


def test_month_bucket_and_weekday() -> None:
    assert month_bucket(datetime(2024, 2, 29, 23, 59)) == "2024-02-01"
    assert is_weekday(datetime(2024, 10, 14))       # Monday
    assert not is_weekday(datetime(2024, 10, 13))   # Sunday


def test_record_fields(small_config: GeneratorConfig, current_date: datetime) -> None:
    synthesizer = make_synthesizer(small_config, current_date)
    records = synthesizer.generate(500)

    window_start = current_date - timedelta(days=small_config.date_range_days)
    source_names = {name for name, _ in small_config.signin_sources}

    for r in records:
        signin = datetime.strptime(r.signin_time, "%Y-%m-%d %H:%M:%S")
        assert window_start.date() <= signin.date() <= current_date.date()
        assert r.tl_date == month_bucket(signin)
        assert r.data_as_of == "2024-10-15"
        assert r.signin_source in source_names
        load = datetime.strptime(r.load_date, "%Y-%m-%d").date()
        assert load - signin.date() in (timedelta(0), timedelta(days=1))
        assert r.unique_signin.startswith(f"SIGNIN-{signin:%Y%m%d}-{r.application_id}-{r.employee_id}-")


def test_unique_signin_ids(small_config: GeneratorConfig, current_date: datetime) -> None:
    records = make_synthesizer(small_config, current_date).generate(2000)
    assert len({r.unique_signin for r in records}) == 2000


def test_derived_compliance_holds(small_config: GeneratorConfig, current_date: datetime) -> None:
    records = make_synthesizer(small_config, current_date).generate(2000)

    assert find_invariant_violations(records) == []
    # applications without an MFA requirement are always compliant
    assert all(r.compliance_status for r in records if not r.app_mfa_required)


def test_weekday_and_business_hours_bias(small_config: GeneratorConfig, current_date: datetime) -> None:
    records = make_synthesizer(small_config, current_date).generate(3000)
    times = [datetime.strptime(r.signin_time, "%Y-%m-%d %H:%M:%S") for r in records]

    weekday_share = sum(is_weekday(t) for t in times) / len(times)
    business_share = sum(7 <= t.hour <= 19 for t in times) / len(times)

    assert weekday_share > 0.85
    assert business_share > 0.70


def test_generation_is_reproducible(small_config: GeneratorConfig, current_date: datetime) -> None:
    a = make_synthesizer(small_config, current_date, seed=77).generate(300)
    b = make_synthesizer(small_config, current_date, seed=77).generate(300)
    assert a == b


def test_adoption_multiplier(small_config: GeneratorConfig, current_date: datetime) -> None:
    synthesizer = make_synthesizer(small_config, current_date)
    assert synthesizer.adoption_multiplier(datetime(2024, 1, 10)) == 0.65
    assert synthesizer.adoption_multiplier(datetime(2024, 10, 10)) == 1.08

    flat = make_synthesizer(small_config.with_overrides(trendline_enabled=False), current_date)
    assert flat.adoption_multiplier(datetime(2024, 1, 10)) == 1.0


def test_mfa_probability_is_clamped(small_config: GeneratorConfig, current_date: datetime) -> None:
    synthesizer = make_synthesizer(small_config, current_date)
    employee = synthesizer.employees[0]
    required = Application("APP9999", "Vault", RiskTier.CRITICAL, True)
    optional = Application("APP9998", "Wiki", RiskTier.LOW_RISK, False)

    assert synthesizer.mfa_probability(required, employee, 1.08) == 1.0
    assert synthesizer.mfa_probability(required, employee, 1.0) == pytest.approx(0.95)
    expected = 0.95 if employee.is_admin else 0.30
    assert synthesizer.mfa_probability(optional, employee, 1.0) == pytest.approx(expected)


def test_empty_pools_are_fatal(small_config: GeneratorConfig, current_date: datetime) -> None:
    with pytest.raises(FatalConfigError):
        SignInSynthesizer(small_config, SeededRandom(1), [], [], current_date)


def test_dataframe_columns(small_config: GeneratorConfig, current_date: datetime) -> None:
    records = make_synthesizer(small_config, current_date).generate(10)
    df = records_to_dataframe(records)

    for attr, _ in RECORD_COLUMNS:
        assert attr in df.columns
    assert len(RECORD_COLUMNS) == 24
    assert "app_mfa_required" in df.columns


def test_weekday_redraws_are_bounded() -> None:
    # A one-day window ending on a Sunday holds no weekday to redraw into
    sunday = datetime(2024, 10, 13, 23, 0, 0)
    config = GeneratorConfig.default().with_overrides(
        seed=8, record_count=200, employee_count=20, application_count=8,
        date_range_days=1, weekday_percentage=1.0, max_weekday_redraws=5,
    )

    records = make_synthesizer(config, sunday).generate(200)

    times = [datetime.strptime(r.signin_time, "%Y-%m-%d %H:%M:%S") for r in records]
    assert len(records) == 200
    assert not any(is_weekday(t) for t in times)


def test_zero_redraws_accepts_first_draw(small_config: GeneratorConfig, current_date: datetime) -> None:
    config = small_config.with_overrides(weekday_percentage=1.0, max_weekday_redraws=0)
    records = make_synthesizer(config, current_date).generate(500)
    weekday_share = sum(
        is_weekday(datetime.strptime(r.signin_time, "%Y-%m-%d %H:%M:%S")) for r in records
    ) / len(records)
    assert 0.6 < weekday_share < 0.85


def test_signin_time_never_after_current_date() -> None:
    morning = datetime(2024, 10, 15, 6, 30, 0)
    config = GeneratorConfig.default().with_overrides(
        seed=3, record_count=300, employee_count=20, application_count=8,
        date_range_days=1, business_hours_percentage=1.0,
    )

    records = make_synthesizer(config, morning).generate(300)

    times = [datetime.strptime(r.signin_time, "%Y-%m-%d %H:%M:%S") for r in records]
    assert max(times) <= morning
    assert any(t == morning for t in times)


def test_certain_probabilities_apply_everywhere(small_config: GeneratorConfig, current_date: datetime) -> None:
    config = small_config.with_overrides(
        load_lag_probability=1.0, business_hours_percentage=1.0,
        mfa_required_usage_rate=1.0, trendline_enabled=False,
    )
    records = make_synthesizer(config, current_date).generate(500)

    for r in records:
        signin = datetime.strptime(r.signin_time, "%Y-%m-%d %H:%M:%S")
        load = datetime.strptime(r.load_date, "%Y-%m-%d").date()
        assert load - signin.date() == timedelta(days=1)
        assert 7 <= signin.hour <= 19 or signin == current_date
        if r.app_mfa_required:
            assert r.is_mfa and r.compliance_status
