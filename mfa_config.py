"""
mfa_config.py

Configuration for the MFA sign-in generator.

The configuration file is JSON with the sections below. Any leaf may be
written as {"value": X, "_comment": "..."}; comment keys are dropped and
single-value wrappers flattened before use. A file only needs to hold the
keys it overrides; everything else comes from DEFAULT_CONFIG.

The loaded result is an immutable GeneratorConfig that is passed explicitly
to every component.
"""

import copy
import json
import logging
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class FatalConfigError(ValueError):
    """Invalid generation parameters; the run is aborted before generating."""


RISK_TIERS = ('CRITICAL', 'HIGH_RISK', 'MEDIUM_RISK', 'LOW_RISK')
OUTPUT_FORMATS = ('csv', 'tsv', 'json')

DEFAULT_CONFIG: Dict[str, Any] = {
    "global": {
        "seed": None,
        "record_count": 50000,
        "employee_count": 5000,
        "application_count": 80,
        "date_range_days": 365,
        "company_name": "TechCorp Industries",
        "email_domain": "techcorp.com",
    },
    "applications": {
        "risk_distribution": {
            "CRITICAL": 0.20,
            "HIGH_RISK": 0.25,
            "MEDIUM_RISK": 0.35,
            "LOW_RISK": 0.20,
        },
        "baseline_mfa_coverage": 0.75,
        "non_critical_mfa_rate": 0.45,
        "target_mfa_coverage": 0.90,
    },
    "employees": {
        "admin_user_percentage": 0.08,
        "admin_mfa_enforcement": 0.95,
        "sub_team_probability": 0.30,
    },
    "signin": {
        "business_hours_percentage": 0.75,
        "weekday_percentage": 0.85,
        "max_weekday_redraws": 5,
        "load_lag_probability": 0.30,
        "mfa_required_usage_rate": 0.95,
        "baseline_user_mfa_rate": 0.30,
        "sources": [
            {"name": "Okta", "weight": 0.45},
            {"name": "Azure AD", "weight": 0.30},
            {"name": "Google Workspace", "weight": 0.15},
            {"name": "OneLogin", "weight": 0.07},
            {"name": "Direct LDAP", "weight": 0.03},
        ],
    },
    "trendline": {
        "enabled": True,
        "monthly_weights": [0.65, 0.70, 0.78, 0.85, 0.92, 0.95,
                            0.98, 1.00, 1.05, 1.08, 1.06, 1.02],
    },
    "correction": {
        "enabled": True,
        "current_month_target_compliance": 0.95,
        "tolerance": 0.001,
    },
    "output": {
        "format": "csv",
        "summary_only": False,
    },
    "validation": {
        "enabled": False,
        "mfa_coverage_tolerance": 0.05,
        "admin_mfa_tolerance": 0.05,
        "risk_distribution_tolerance": 0.02,
        "min_records_per_app": 10,
    },
}


@dataclass(frozen=True)
class GeneratorConfig:
    """Immutable, validated generation parameters."""
    seed: Optional[int]
    record_count: int
    employee_count: int
    application_count: int
    date_range_days: int
    company_name: str
    email_domain: str
    risk_distribution: Tuple[Tuple[str, float], ...]
    baseline_mfa_coverage: float
    non_critical_mfa_rate: float
    target_mfa_coverage: float
    admin_user_percentage: float
    admin_mfa_enforcement: float
    sub_team_probability: float
    business_hours_percentage: float
    weekday_percentage: float
    max_weekday_redraws: int
    load_lag_probability: float
    mfa_required_usage_rate: float
    baseline_user_mfa_rate: float
    signin_sources: Tuple[Tuple[str, float], ...]
    trendline_enabled: bool
    monthly_weights: Tuple[float, ...]
    correction_enabled: bool
    target_compliance: float
    correction_tolerance: float
    output_format: str
    summary_only: bool
    validation_enabled: bool
    mfa_coverage_tolerance: float
    admin_mfa_tolerance: float
    risk_distribution_tolerance: float
    min_records_per_app: int

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "GeneratorConfig":
        """Build from a (flattened, defaults-merged) config dictionary."""
        try:
            g = cfg['global']
            apps = cfg['applications']
            emp = cfg['employees']
            signin = cfg['signin']
            trend = cfg['trendline']
            corr = cfg['correction']
            out = cfg['output']
            val = cfg['validation']

            config = cls(
                seed=None if g.get('seed') is None else _as_int('global.seed', g['seed']),
                record_count=_as_int('global.record_count', g['record_count']),
                employee_count=_as_int('global.employee_count', g['employee_count']),
                application_count=_as_int('global.application_count', g['application_count']),
                date_range_days=_as_int('global.date_range_days', g['date_range_days']),
                company_name=str(g['company_name']),
                email_domain=str(g['email_domain']).lstrip('@'),
                risk_distribution=tuple(
                    (tier, float(apps['risk_distribution'].get(tier, 0.0))) for tier in RISK_TIERS
                ),
                baseline_mfa_coverage=float(apps['baseline_mfa_coverage']),
                non_critical_mfa_rate=float(apps['non_critical_mfa_rate']),
                target_mfa_coverage=float(apps['target_mfa_coverage']),
                admin_user_percentage=float(emp['admin_user_percentage']),
                admin_mfa_enforcement=float(emp['admin_mfa_enforcement']),
                sub_team_probability=float(emp['sub_team_probability']),
                business_hours_percentage=float(signin['business_hours_percentage']),
                weekday_percentage=float(signin['weekday_percentage']),
                max_weekday_redraws=_as_int('signin.max_weekday_redraws', signin['max_weekday_redraws']),
                load_lag_probability=float(signin['load_lag_probability']),
                mfa_required_usage_rate=float(signin['mfa_required_usage_rate']),
                baseline_user_mfa_rate=float(signin['baseline_user_mfa_rate']),
                signin_sources=tuple(
                    (str(src['name']), float(src['weight'])) for src in signin['sources']
                ),
                trendline_enabled=_as_bool('trendline.enabled', trend['enabled']),
                monthly_weights=tuple(float(w) for w in trend['monthly_weights']),
                correction_enabled=_as_bool('correction.enabled', corr['enabled']),
                target_compliance=float(corr['current_month_target_compliance']),
                correction_tolerance=float(corr['tolerance']),
                output_format=str(out['format']).lower(),
                summary_only=_as_bool('output.summary_only', out['summary_only']),
                validation_enabled=_as_bool('validation.enabled', val['enabled']),
                mfa_coverage_tolerance=float(val['mfa_coverage_tolerance']),
                admin_mfa_tolerance=float(val['admin_mfa_tolerance']),
                risk_distribution_tolerance=float(val['risk_distribution_tolerance']),
                min_records_per_app=_as_int('validation.min_records_per_app', val['min_records_per_app']),
            )
        except (KeyError, TypeError, ValueError) as e:
            if isinstance(e, FatalConfigError):
                raise
            raise FatalConfigError(f"Malformed configuration: {e!r}") from e

        config.validate()
        return config

    @classmethod
    def default(cls) -> "GeneratorConfig":
        return cls.from_dict(copy.deepcopy(DEFAULT_CONFIG))

    def with_overrides(self, **changes: Any) -> "GeneratorConfig":
        """Return a validated copy with the given fields replaced."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise FatalConfigError(f"Unknown configuration fields: {sorted(unknown)}")
        updated = replace(self, **changes)
        updated.validate()
        return updated

    @property
    def risk_percentages(self) -> Dict[str, float]:
        return dict(self.risk_distribution)

    def validate(self) -> None:
        """Collect every problem, then raise one FatalConfigError."""
        errors: List[str] = []

        if self.seed is not None and self.seed < 0:
            errors.append(f"seed must be null or non-negative, got {self.seed}")

        for name in ('record_count', 'employee_count', 'application_count', 'date_range_days'):
            value = getattr(self, name)
            if value <= 0:
                errors.append(f"{name} must be positive, got {value}")

        for name in ('baseline_mfa_coverage', 'non_critical_mfa_rate', 'target_mfa_coverage',
                     'admin_user_percentage', 'admin_mfa_enforcement', 'sub_team_probability',
                     'business_hours_percentage', 'weekday_percentage', 'load_lag_probability',
                     'mfa_required_usage_rate', 'baseline_user_mfa_rate',
                     'mfa_coverage_tolerance', 'admin_mfa_tolerance', 'risk_distribution_tolerance'):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0) or math.isnan(value):
                errors.append(f"{name} must be a probability in [0, 1], got {value}")

        for tier, pct in self.risk_distribution:
            if not (0.0 <= pct <= 1.0):
                errors.append(f"risk_distribution.{tier} must be in [0, 1], got {pct}")
        total = sum(pct for _, pct in self.risk_distribution)
        if not (0.99 <= total <= 1.01):
            errors.append(f"risk_distribution must sum to 1.0, got {total}")

        if not (0.0 < self.target_compliance < 1.0):
            errors.append(
                f"current_month_target_compliance must be in (0, 1), got {self.target_compliance}"
            )
        if self.correction_tolerance < 0:
            errors.append(f"correction tolerance must be >= 0, got {self.correction_tolerance}")

        if self.max_weekday_redraws < 0:
            errors.append(f"max_weekday_redraws must be >= 0, got {self.max_weekday_redraws}")
        if self.min_records_per_app < 0:
            errors.append(f"min_records_per_app must be >= 0, got {self.min_records_per_app}")

        if len(self.monthly_weights) != 12:
            errors.append(f"monthly_weights must have 12 entries, got {len(self.monthly_weights)}")
        if any(w < 0 for w in self.monthly_weights):
            errors.append("monthly_weights must be non-negative")

        if not self.signin_sources:
            errors.append("signin.sources must contain at least one source")
        elif any(w < 0 for _, w in self.signin_sources) or sum(w for _, w in self.signin_sources) <= 0:
            errors.append("signin.sources weights must be non-negative with a positive sum")

        if self.output_format not in OUTPUT_FORMATS:
            errors.append(f"output format must be one of {OUTPUT_FORMATS}, got '{self.output_format}'")

        if errors:
            raise FatalConfigError("Invalid configuration: " + "; ".join(errors))


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise FatalConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise FatalConfigError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _as_bool(name: str, value: Any) -> bool:
    # bool("false") is True, so strings and numbers are rejected outright
    if not isinstance(value, bool):
        raise FatalConfigError(f"{name} must be true or false, got {value!r}")
    return value


class ConfigLoader:
    """Loads a JSON config file over DEFAULT_CONFIG and validates it."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def load(self) -> GeneratorConfig:
        """Load, flatten, merge and validate the configuration."""
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path is not None:
            self.logger.info(f"Loading configuration from {self.config_path}")
            if not self.config_path.exists():
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                try:
                    file_config = json.load(f)
                except json.JSONDecodeError as e:
                    raise FatalConfigError(f"Config file is not valid JSON: {e}") from e

            if not isinstance(file_config, dict):
                raise FatalConfigError("Config file must contain a JSON object")
            self._merge(self.config, self._flatten_recursive(file_config))
        else:
            self.logger.info("No config file given, using built-in defaults")

        config = GeneratorConfig.from_dict(self.config)
        self.logger.info("Configuration validation passed")
        return config

    def _flatten_recursive(self, obj: Any) -> Any:
        """Recursively flatten objects with 'value' keys."""
        if isinstance(obj, dict):
            keys = set(obj.keys())
            if keys == {'value'} or keys == {'value', '_comment'}:
                return self._flatten_recursive(obj['value'])

            return {k: self._flatten_recursive(v) for k, v in obj.items()
                    if not k.startswith('_comment')}

        elif isinstance(obj, list):
            return [self._flatten_recursive(item) for item in obj]

        return obj

    def _merge(self, base: Dict[str, Any], overrides: Dict[str, Any], path: str = '') -> None:
        """Deep-merge overrides into base; unknown keys are reported and skipped."""
        for key, value in overrides.items():
            dotted = f"{path}{key}"
            if key not in base:
                self.logger.warning(f"Ignoring unknown config key: {dotted}")
                continue
            # Distribution tables are replaced wholesale rather than merged
            if isinstance(base[key], dict) and isinstance(value, dict) and key != 'risk_distribution':
                self._merge(base[key], value, path=f"{dotted}.")
            else:
                base[key] = value
