import io
import json
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from mfa_config import GeneratorConfig
from mfa_data_generator import MFADataGenerator, main, parse_args, write_outputs
from output_writers import DataWriter
from target_correction import find_invariant_violations

CURRENT = datetime(2024, 10, 15, 12, 0, 0)


def small(**overrides) -> GeneratorConfig:
    values = dict(seed=2024, record_count=6000, employee_count=150, application_count=24)
    values.update(overrides)
    return GeneratorConfig.default().with_overrides(**values)


def render_csv(config: GeneratorConfig) -> str:
    result = MFADataGenerator(config, CURRENT).run()
    stream = io.StringIO()
    DataWriter(config).write_records(result.records, stream)
    return stream.getvalue()


def test_same_seed_byte_identical_output() -> None:
    config = small()
    assert render_csv(config) == render_csv(config)


def test_different_seed_different_output() -> None:
    assert render_csv(small(seed=1)) != render_csv(small(seed=2))


def test_run_result_contents() -> None:
    result = MFADataGenerator(small(), CURRENT).run()

    assert result.seed == 2024
    assert len(result.records) == 6000
    assert len(result.employees) == 150
    assert len(result.applications) == 24
    assert result.correction is not None
    assert result.correction.period == "2024-10"
    assert result.validation is None
    assert find_invariant_violations(result.records) == []


def test_correction_disabled_leaves_no_report() -> None:
    result = MFADataGenerator(small(correction_enabled=False), CURRENT).run()
    assert result.correction is None
    assert result.summary["correction"] is None


@pytest.mark.parametrize("overrides", [
    {},
    {"target_compliance": 0.5},
    {"target_compliance": 0.99, "trendline_enabled": False},
    {"non_critical_mfa_rate": 0.0, "baseline_user_mfa_rate": 0.0},
])
def test_optional_mfa_apps_always_compliant(overrides) -> None:
    result = MFADataGenerator(small(**overrides), CURRENT).run()

    optional = [r for r in result.records if not r.app_mfa_required]
    assert optional
    assert all(r.compliance_status for r in optional)
    assert find_invariant_violations(result.records) == []


def test_write_outputs_summary_only_goes_to_stderr() -> None:
    result = MFADataGenerator(small(summary_only=True, validation_enabled=True), CURRENT).run()
    stdout, stderr = io.StringIO(), io.StringIO()

    stats_path = write_outputs(result, None, stdout=stdout, stderr=stderr)

    assert stats_path is None
    assert stdout.getvalue() == ""
    assert "STATISTICS SUMMARY" in stderr.getvalue()
    assert "Overall Validation:" in stderr.getvalue()


def test_write_outputs_file_and_companion_stats(tmp_path: Path) -> None:
    result = MFADataGenerator(small(output_format="json"), CURRENT).run()
    output_path = tmp_path / "signins.jsonl"

    stats_path = write_outputs(result, output_path, stdout=io.StringIO(), stderr=io.StringIO())

    lines = output_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 6000
    assert json.loads(lines[0])["DATA_AS_OF"] == "2024-10-15"
    assert stats_path.parent == tmp_path
    assert stats_path.name.startswith("mfa_stats_")
    assert "MFA COVERAGE METRIC" in stats_path.read_text(encoding="utf-8")


def test_parse_args_flags() -> None:
    args = parse_args([
        "--seed", "7", "--summary-only", "--format", "tsv", "--records", "100",
        "--current-date", "2024-03-31", "-v",
    ])
    assert args.seed == 7
    assert args.summary_only is True
    assert args.format == "tsv"
    assert args.records == 100
    assert args.current_date == datetime(2024, 3, 31)
    assert args.verbose is True
    assert args.config is None


def test_parse_args_rejects_bad_date() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--current-date", "15/10/2024"])


def test_cli_summary_only(capsys) -> None:
    main([
        "--seed", "5", "--records", "3000", "--summary-only",
        "--current-date", "2024-10-15",
    ])

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Random Seed:" in captured.err
    assert "VALIDATION CHECK" in captured.err


def test_cli_writes_csv_file(tmp_path: Path, capsys) -> None:
    output_path = tmp_path / "signins.csv"
    main([
        "--seed", "5", "--records", "2000", "--output", str(output_path),
        "--current-date", "2024-10-15",
    ])

    df = pd.read_csv(output_path, keep_default_na=False)
    assert len(df) == 2000
    assert df["UNIQUE_SIGNIN"].is_unique
    assert list(tmp_path.glob("mfa_stats_*.txt"))
    assert capsys.readouterr().out == ""


def test_cli_missing_config_exits_1(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.json")])
    assert excinfo.value.code == 1


def test_cli_invalid_config_exits_1(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"global": {"record_count": -1}}), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(path)])
    assert excinfo.value.code == 1
