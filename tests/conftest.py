from datetime import datetime
from typing import Callable, List

import pytest

from mfa_config import GeneratorConfig
from signin_synthesizer import SignInRecord


CURRENT_DATE = datetime(2024, 10, 15, 12, 0, 0)


def build_record(index: int, *, is_mfa: bool = True, mfa_required: bool = True,
                 tl_date: str = "2024-10-01", is_admin: bool = False,
                 app_id: str = "APP0001", employee_id: str = "EMP000001") -> SignInRecord:
    compliant = (not mfa_required) or is_mfa
    return SignInRecord(
        employee_email=f"{employee_id.lower()}@techcorp.com",
        application_name=f"Application {app_id}",
        application_id=app_id,
        signin_time=f"{tl_date[:8]}05 09:30:00",
        signin_source="Okta",
        is_mfa=is_mfa,
        unique_signin=f"SIGNIN-{tl_date[:4]}{tl_date[5:7]}05-{app_id}-{employee_id}-{index:08d}",
        load_date=f"{tl_date[:8]}05",
        compliance_status=compliant,
        employee_full_name=f"Employee {employee_id}",
        employee_id=employee_id,
        employee_job_title="Software Engineer",
        manager_full_name="",
        manager_employee_id="",
        manager_email_address="",
        level_1="TechCorp Industries",
        level_2="Technology",
        level_3="Engineering",
        level_4="Platform Engineering",
        level_5="Team 1",
        level_6="",
        is_admin=is_admin,
        tl_date=tl_date,
        data_as_of="2024-10-15",
        app_risk_level="CRITICAL",
        app_in_scope=True,
        app_mfa_required=mfa_required,
    )


@pytest.fixture
def record_factory() -> Callable[..., List[SignInRecord]]:
    """Build n records sharing the given attributes, with unique ids."""
    counter = {"next": 0}

    def factory(n: int, **kwargs) -> List[SignInRecord]:
        records = []
        for _ in range(n):
            counter["next"] += 1
            records.append(build_record(counter["next"], **kwargs))
        return records

    return factory


@pytest.fixture
def small_config() -> GeneratorConfig:
    return GeneratorConfig.default().with_overrides(
        seed=1234,
        record_count=3000,
        employee_count=120,
        application_count=20,
    )


@pytest.fixture
def current_date() -> datetime:
    return CURRENT_DATE
