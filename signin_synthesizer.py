"""
signin_synthesizer.py

Draws synthetic sign-in events from the employee pool and application
catalogue.

Each event gets a timestamp biased toward weekdays and business hours, an
MFA-usage flag whose probability depends on the application's MFA policy,
the employee's admin flag and a monthly adoption multiplier, and a derived
compliance flag:

    compliance_status == (not app_mfa_required) or is_mfa
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import List, Sequence

import numpy as np
import pandas as pd

from mfa_config import FatalConfigError, GeneratorConfig
from population_builder import Application, Employee
from seeded_random import SeededRandom

PROGRESS_INTERVAL = 10000

# Business window: hours 07..19; off-hours: 19..06 (wrapping midnight)
BUSINESS_HOUR_START = 7
BUSINESS_HOUR_SPAN = 12
OFF_HOUR_START = 19
OFF_HOUR_END = 30


@dataclass
class SignInRecord:
    """One sign-in event with copied employee and application attributes."""
    employee_email: str
    application_name: str
    application_id: str
    signin_time: str
    signin_source: str
    is_mfa: bool
    unique_signin: str
    load_date: str
    compliance_status: bool
    employee_full_name: str
    employee_id: str
    employee_job_title: str
    manager_full_name: str
    manager_employee_id: str
    manager_email_address: str
    level_1: str
    level_2: str
    level_3: str
    level_4: str
    level_5: str
    level_6: str
    is_admin: bool
    tl_date: str
    data_as_of: str
    # Application attributes used for analysis; not part of the output schema
    app_risk_level: str
    app_in_scope: bool
    app_mfa_required: bool


# Output schema: (attribute, column header), in emitted order
RECORD_COLUMNS = [
    ('employee_email', 'EMPLOYEE_EMAIL'),
    ('application_name', 'APPLICATION_NAME'),
    ('application_id', 'APPLICATION_ID'),
    ('signin_time', 'SIGNIN_TIME'),
    ('signin_source', 'SIGNIN_SOURCE'),
    ('is_mfa', 'IS_MFA'),
    ('unique_signin', 'UNIQUE_SIGNIN'),
    ('load_date', 'LOAD_DATE'),
    ('compliance_status', 'COMPLIANCE_STATUS'),
    ('employee_full_name', 'EMPLOYEE_FULL_NAME'),
    ('employee_id', 'EMPLOYEE_ID'),
    ('employee_job_title', 'EMPLOYEE_JOB_TITLE'),
    ('manager_full_name', 'MANAGER_FULL_NAME'),
    ('manager_employee_id', 'MANAGER_EMPLOYEE_ID'),
    ('manager_email_address', 'MANAGER_EMAIL_ADDRESS'),
    ('level_1', 'LEVEL_1'),
    ('level_2', 'LEVEL_2'),
    ('level_3', 'LEVEL_3'),
    ('level_4', 'LEVEL_4'),
    ('level_5', 'LEVEL_5'),
    ('level_6', 'LEVEL_6'),
    ('is_admin', 'IS_ADMIN'),
    ('tl_date', 'TL_DATE'),
    ('data_as_of', 'DATA_AS_OF'),
]


def is_weekday(when: datetime) -> bool:
    return when.weekday() < 5


def month_bucket(when: datetime) -> str:
    """First day of the month as 'YYYY-MM-01'."""
    return f"{when.year:04d}-{when.month:02d}-01"


def records_to_dataframe(records: Sequence[SignInRecord]) -> pd.DataFrame:
    """All record attributes, including the analysis-only application fields."""
    if not records:
        return pd.DataFrame(columns=list(SignInRecord.__dataclass_fields__))
    return pd.DataFrame([asdict(r) for r in records])


# =============================================================================
# Sign-in Synthesizer
# =============================================================================

class SignInSynthesizer:
    """Generates sign-in records one at a time from a shared random source."""

    def __init__(self, config: GeneratorConfig, rng: SeededRandom,
                 employees: Sequence[Employee], applications: Sequence[Application],
                 current_date: datetime):
        if not employees or not applications:
            raise FatalConfigError("Sign-in synthesis needs at least one employee and one application")

        self.config = config
        self.rng = rng
        self.employees = list(employees)
        self.applications = list(applications)
        self.current_date = current_date
        self.window_start = current_date - timedelta(days=config.date_range_days)
        self.record_counter = 0
        self.logger = logging.getLogger(self.__class__.__name__)

        self.source_names = [name for name, _ in config.signin_sources]
        self.source_weights = [weight for _, weight in config.signin_sources]

    def _random_timestamp(self) -> datetime:
        """Uniform instant in [current_date - range, current_date]."""
        span = self.current_date - self.window_start
        return self.window_start + span * self.rng.uniform()

    def _draw_signin_time(self) -> datetime:
        """Draw a timestamp with weekday and business-hours bias."""
        signin = self._random_timestamp()

        attempts = 0
        while (self.rng.bernoulli(self.config.weekday_percentage)
               and not is_weekday(signin)
               and attempts < self.config.max_weekday_redraws):
            signin = self._random_timestamp()
            attempts += 1

        if self.rng.bernoulli(self.config.business_hours_percentage):
            hour = BUSINESS_HOUR_START + self.rng.int_range(0, BUSINESS_HOUR_SPAN)
        else:
            hour = self.rng.int_range(OFF_HOUR_START, OFF_HOUR_END) % 24

        signin = signin.replace(
            hour=hour,
            minute=self.rng.int_range(0, 59),
            second=self.rng.int_range(0, 59),
            microsecond=0,
        )
        # Forcing the hour can move a final-day sign-in past the current date
        return min(signin, self.current_date.replace(microsecond=0))

    def adoption_multiplier(self, when: datetime) -> float:
        """Monthly MFA adoption multiplier; 1.0 when the trendline is off."""
        if not self.config.trendline_enabled:
            return 1.0
        month_index = when.month - 1
        if 0 <= month_index < len(self.config.monthly_weights):
            return self.config.monthly_weights[month_index]
        return 1.0

    def mfa_probability(self, application: Application, employee: Employee,
                        multiplier: float) -> float:
        """Bernoulli parameter for MFA usage, clamped to [0, 1]."""
        if application.mfa_required:
            base = self.config.mfa_required_usage_rate
        elif employee.is_admin:
            base = self.config.admin_mfa_enforcement
        else:
            base = self.config.baseline_user_mfa_rate
        return float(np.clip(base * multiplier, 0.0, 1.0))

    def generate_record(self) -> SignInRecord:
        """Draw one sign-in event."""
        self.record_counter += 1

        employee = self.rng.choice(self.employees)
        application = self.rng.choice(self.applications)
        signin = self._draw_signin_time()

        multiplier = self.adoption_multiplier(signin)
        is_mfa = self.rng.bernoulli(self.mfa_probability(application, employee, multiplier))
        compliant = True if not application.mfa_required else is_mfa

        source = self.rng.weighted_choice(self.source_names, self.source_weights)

        load_date = signin.date()
        if self.rng.bernoulli(self.config.load_lag_probability):
            load_date += timedelta(days=1)

        unique_signin = (
            f"SIGNIN-{signin:%Y%m%d}-{application.app_id}-{employee.employee_id}-"
            f"{self.record_counter:08d}"
        )

        return SignInRecord(
            employee_email=employee.email,
            application_name=application.app_name,
            application_id=application.app_id,
            signin_time=signin.strftime('%Y-%m-%d %H:%M:%S'),
            signin_source=source,
            is_mfa=is_mfa,
            unique_signin=unique_signin,
            load_date=load_date.strftime('%Y-%m-%d'),
            compliance_status=compliant,
            employee_full_name=employee.full_name,
            employee_id=employee.employee_id,
            employee_job_title=employee.job_title,
            manager_full_name=employee.manager_name or '',
            manager_employee_id=employee.manager_id or '',
            manager_email_address=employee.manager_email or '',
            level_1=employee.level_1,
            level_2=employee.level_2,
            level_3=employee.level_3,
            level_4=employee.level_4,
            level_5=employee.level_5,
            level_6=employee.level_6 or '',
            is_admin=employee.is_admin,
            tl_date=month_bucket(signin),
            data_as_of=self.current_date.strftime('%Y-%m-%d'),
            app_risk_level=application.risk_tier.value,
            app_in_scope=application.in_scope,
            app_mfa_required=application.mfa_required,
        )

    def generate(self, count: int) -> List[SignInRecord]:
        """Generate count records sequentially."""
        if count <= 0:
            raise FatalConfigError(f"record_count must be positive, got {count}")

        self.logger.info(f"Generating {count} sign-in records...")
        records = []
        for i in range(count):
            records.append(self.generate_record())
            if (i + 1) % PROGRESS_INTERVAL == 0:
                self.logger.info(f"  Generated {i + 1} records...")

        self.logger.info(f"Generated {len(records)} total sign-in records")
        return records
