# practice_comp/engines/proration.py
"""
Proration of a physician's year between the employee and partner roles.

Every function here is a total dispatch over the six lifecycle variants and
has no side effects.
"""

from practice_comp.state.schema import (
    MAX_VACATION_WEEKS,
    Employee,
    EmployeeToPartner,
    EmployeeToTerminate,
    NewEmployee,
    Partner,
    PartnerToRetire,
    PhysicianRecord,
)
from practice_comp.utils.decimal_helpers import clamp

WEEKS_PER_YEAR = 52.0


def employee_portion(record: PhysicianRecord) -> float:
    """Fraction of the year worked as a W2 employee."""
    if isinstance(record, Employee):
        return 1.0
    if isinstance(record, NewEmployee):
        return 1.0 - record.start_portion_of_year
    if isinstance(record, EmployeeToTerminate):
        return record.terminate_portion_of_year
    if isinstance(record, EmployeeToPartner):
        return record.employee_portion_of_year
    if isinstance(record, (Partner, PartnerToRetire)):
        return 0.0
    raise TypeError(f"Unknown physician record type: {type(record).__name__}")


def partner_portion(record: PhysicianRecord) -> float:
    """Fraction of the year worked as a partner."""
    if isinstance(record, Partner):
        return 1.0
    if isinstance(record, EmployeeToPartner):
        return 1.0 - record.employee_portion_of_year
    if isinstance(record, PartnerToRetire):
        return record.partner_portion_of_year
    if isinstance(record, (Employee, NewEmployee, EmployeeToTerminate)):
        return 0.0
    raise TypeError(f"Unknown physician record type: {type(record).__name__}")


def partner_fte_weight(record: PhysicianRecord) -> float:
    """
    Share weight used to split the distributable pool.

    (1 - vacation_weeks / 52) scaled by the partner portion of the year,
    floored at 0. Pure employee variants always weigh 0.
    """
    weeks = clamp(record.weeks_vacation, 0.0, MAX_VACATION_WEEKS)
    return max(0.0, (1.0 - weeks / WEEKS_PER_YEAR) * partner_portion(record))


def prorated_salary(record: PhysicianRecord) -> float:
    return record.salary * employee_portion(record)


def is_partner_eligible(record: PhysicianRecord) -> bool:
    return isinstance(record, (Partner, EmployeeToPartner, PartnerToRetire))


def is_employee_type(record: PhysicianRecord) -> bool:
    return isinstance(record, (Employee, EmployeeToPartner, NewEmployee, EmployeeToTerminate))


def is_prior_year_retiree(record: PhysicianRecord) -> bool:
    # Retired before this year began: still owed a buyout and trailing MD money
    return isinstance(record, PartnerToRetire) and record.partner_portion_of_year == 0


__all__ = [
    "employee_portion",
    "partner_portion",
    "partner_fte_weight",
    "prorated_salary",
    "is_partner_eligible",
    "is_employee_type",
    "is_prior_year_retiree",
]
