"""
population_builder.py

Builds the employee roster and the application catalogue once, before any
sign-in events are synthesized.

- Employees: unique ids and emails, job title, six organisational levels,
  admin flag, and a manager forest (every 8th employee is manager-less).
- Applications: sequential ids, a risk tier, and an MFA-required flag drawn
  once with a tier-dependent probability.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set

from faker import Faker

from mfa_config import FatalConfigError, GeneratorConfig, RISK_TIERS
from reference_data import (
    APPLICATION_CATALOG,
    JOB_TITLES,
    LEVEL_2_ORGS,
    LEVEL_3_ORGS,
    LEVEL_4_ORGS,
    TIER_LABELS,
)
from seeded_random import SeededRandom

MANAGER_SPAN = 8


class RiskTier(str, Enum):
    CRITICAL = 'CRITICAL'
    HIGH_RISK = 'HIGH_RISK'
    MEDIUM_RISK = 'MEDIUM_RISK'
    LOW_RISK = 'LOW_RISK'

    @property
    def in_scope(self) -> bool:
        return self in (RiskTier.CRITICAL, RiskTier.HIGH_RISK)

    @property
    def label(self) -> str:
        return TIER_LABELS[self.value]


@dataclass
class Employee:
    """Represents an employee with organisational attributes."""
    employee_id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    job_title: str
    is_admin: bool
    level_1: str
    level_2: str
    level_3: str
    level_4: str
    level_5: str
    level_6: Optional[str]
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None
    manager_email: Optional[str] = None


@dataclass(frozen=True)
class Application:
    """Represents an application; its MFA policy is fixed at creation."""
    app_id: str
    app_name: str
    risk_tier: RiskTier
    mfa_required: bool

    @property
    def in_scope(self) -> bool:
        return self.risk_tier.in_scope


# =============================================================================
# Employee Generator
# =============================================================================

class EmployeeGenerator:
    """Generates the employee roster and its manager hierarchy."""

    def __init__(self, config: GeneratorConfig, rng: SeededRandom, faker: Faker):
        self.config = config
        self.rng = rng
        self.faker = faker
        self.logger = logging.getLogger(self.__class__.__name__)

        self.employees: List[Employee] = []
        self.used_emails: Set[str] = set()

    def _generate_email(self, first_name: str, last_name: str) -> str:
        """
        Build a unique email from first and last name.

        Collisions are resolved by appending a counter rather than drawing a
        new name, so the random stream is unaffected by collisions.
        """
        first = ''.join(c for c in first_name.lower() if c.isalnum()) or 'user'
        last = ''.join(c for c in last_name.lower() if c.isalnum()) or 'user'
        local = f"{first}.{last}"
        domain = self.config.email_domain

        email = f"{local}@{domain}"
        counter = 1
        while email in self.used_emails:
            email = f"{local}{counter}@{domain}"
            counter += 1

        self.used_emails.add(email)
        return email

    def _draw_org_path(self) -> Dict[str, Optional[str]]:
        level_2 = self.rng.choice(LEVEL_2_ORGS)
        level_3 = self.rng.choice(LEVEL_3_ORGS.get(level_2, [level_2]))
        level_4 = self.rng.choice(LEVEL_4_ORGS.get(level_3, [level_3]))
        level_5 = f"Team {self.rng.int_range(1, 8)}"
        level_6 = None
        if self.rng.bernoulli(self.config.sub_team_probability):
            level_6 = f"Sub-Team {chr(ord('A') + self.rng.int_range(0, 3))}"

        return {
            'level_1': self.config.company_name,
            'level_2': level_2,
            'level_3': level_3,
            'level_4': level_4,
            'level_5': level_5,
            'level_6': level_6,
        }

    def generate(self, num_employees: int) -> List[Employee]:
        """Generate the specified number of employees."""
        if num_employees <= 0:
            raise FatalConfigError(f"employee_count must be positive, got {num_employees}")

        self.logger.info(f"Generating {num_employees} employees...")

        for i in range(num_employees):
            first_name = self.faker.first_name()
            last_name = self.faker.last_name()
            email = self._generate_email(first_name, last_name)
            job_title = self.rng.choice(JOB_TITLES)
            is_admin = self.rng.bernoulli(self.config.admin_user_percentage)
            org = self._draw_org_path()

            self.employees.append(Employee(
                employee_id=f"EMP{i + 1:06d}",
                email=email,
                first_name=first_name,
                last_name=last_name,
                full_name=f"{first_name} {last_name}",
                job_title=job_title,
                is_admin=is_admin,
                **org,
            ))

        self._assign_managers()

        admins = sum(1 for e in self.employees if e.is_admin)
        self.logger.info(f"Generated {len(self.employees)} employees ({admins} admins)")
        return self.employees

    def _assign_managers(self) -> None:
        """
        Every 8th employee (by position) is a manager without a manager.

        Everyone else reports to the nearest preceding manager in the same
        level-3 department, or to the manager at the start of their own block
        of eight when their department has none yet. Managers never have a
        manager, so the hierarchy is a forest of depth one.
        """
        self.logger.info("Assigning manager hierarchy...")
        latest_manager_by_dept: Dict[str, Employee] = {}
        in_dept = 0

        for idx, employee in enumerate(self.employees):
            if idx % MANAGER_SPAN == 0:
                employee.manager_id = None
                employee.manager_name = None
                employee.manager_email = None
                latest_manager_by_dept[employee.level_3] = employee
                continue

            manager = latest_manager_by_dept.get(employee.level_3)
            if manager is not None:
                in_dept += 1
            else:
                manager = self.employees[(idx // MANAGER_SPAN) * MANAGER_SPAN]

            employee.manager_id = manager.employee_id
            employee.manager_name = manager.full_name
            employee.manager_email = manager.email

        num_managers = (len(self.employees) + MANAGER_SPAN - 1) // MANAGER_SPAN
        self.logger.info(
            f"Assigned {num_managers} managers; {in_dept} reports matched within their department"
        )


# =============================================================================
# Application Generator
# =============================================================================

class ApplicationGenerator:
    """Generates the application catalogue with fixed MFA policies."""

    def __init__(self, config: GeneratorConfig, rng: SeededRandom):
        self.config = config
        self.rng = rng
        self.logger = logging.getLogger(self.__class__.__name__)
        self.applications: List[Application] = []

    def tier_counts(self, num_apps: int) -> Dict[RiskTier, int]:
        """
        Split num_apps across tiers by the configured percentages.

        Largest-remainder rounding; equal remainders go to the earlier tier.
        """
        pcts = self.config.risk_percentages
        total_pct = sum(pcts.values())
        exact = [(RiskTier(t), num_apps * pcts.get(t, 0.0) / total_pct) for t in RISK_TIERS]

        counts = {tier: int(share) for tier, share in exact}
        leftover = num_apps - sum(counts.values())
        by_remainder = sorted(
            range(len(exact)),
            key=lambda i: (-(exact[i][1] - int(exact[i][1])), i)
        )
        for i in by_remainder[:leftover]:
            counts[exact[i][0]] += 1
        return counts

    def _app_name(self, tier: RiskTier, position: int) -> str:
        catalog = APPLICATION_CATALOG[tier.value]
        if position < len(catalog):
            return catalog[position]
        return f"{tier.label} Application {position + 1}"

    def _mfa_probability(self, tier: RiskTier) -> float:
        if tier.in_scope:
            return self.config.baseline_mfa_coverage
        return self.config.non_critical_mfa_rate

    def generate(self, num_apps: int) -> List[Application]:
        """Generate the specified number of applications."""
        if num_apps <= 0:
            raise FatalConfigError(f"application_count must be positive, got {num_apps}")

        self.logger.info(f"Generating {num_apps} applications...")

        app_counter = 1
        for tier, count in self.tier_counts(num_apps).items():
            for position in range(count):
                mfa_required = self.rng.bernoulli(self._mfa_probability(tier))
                self.applications.append(Application(
                    app_id=f"APP{app_counter:04d}",
                    app_name=self._app_name(tier, position),
                    risk_tier=tier,
                    mfa_required=mfa_required,
                ))
                app_counter += 1

        in_scope = [a for a in self.applications if a.in_scope]
        protected = [a for a in in_scope if a.mfa_required]
        self.logger.info(f"Generated {len(self.applications)} applications")
        self.logger.info(f"Critical/High-Risk applications: {len(in_scope)}")
        self.logger.info(f"MFA-protected Critical/High-Risk applications: {len(protected)}")
        return self.applications


def build_population(config: GeneratorConfig, rng: SeededRandom):
    """
    Build employees and applications from one random source.

    The Faker instance is seeded with the first draw from rng, so the root
    seed alone reproduces names as well as every other attribute.
    """
    if config.employee_count <= 0 or config.application_count <= 0:
        raise FatalConfigError("employee_count and application_count must be positive")

    faker = Faker()
    faker.seed_instance(rng.derive_seed())

    employees = EmployeeGenerator(config, rng, faker).generate(config.employee_count)
    applications = ApplicationGenerator(config, rng).generate(config.application_count)
    return employees, applications
