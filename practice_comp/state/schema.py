# practice_comp/state/schema.py
"""
Physician role records.

A physician's role for one year is one of six variants, discriminated by the
``type`` field. Each variant carries only the fraction-of-year fields it needs.
Out-of-range numbers are clamped rather than rejected because the records are
fed from sliders that can transiently overshoot while being edited.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class PhysicianType(str, Enum):
    """Enumeration of physician lifecycle states within one year."""

    PARTNER = "partner"
    EMPLOYEE = "employee"
    EMPLOYEE_TO_PARTNER = "employeeToPartner"
    PARTNER_TO_RETIRE = "partnerToRetire"
    NEW_EMPLOYEE = "newEmployee"
    EMPLOYEE_TO_TERMINATE = "employeeToTerminate"


MAX_VACATION_WEEKS = 24.0

# Field groups used by the propagation and reporting code
PORTION_FIELDS = (
    "employee_portion_of_year",
    "partner_portion_of_year",
    "start_portion_of_year",
    "terminate_portion_of_year",
)


def _bounded(value: Any, low: float, high: Optional[float] = None) -> float:
    if value is None:
        return low
    value = float(value)
    if value != value:  # NaN
        return low
    if high is not None and value > high:
        return high
    return max(low, value)


class _PhysicianBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )

    id: str
    name: str = ""
    salary: float = 0.0
    weeks_vacation: float = 0.0
    receives_benefits: bool = False
    bonus_amount: float = 0.0
    has_medical_director_hours: bool = False
    medical_director_hours_percentage: float = 0.0
    additional_days_worked: float = Field(
        0.0, description="Dollars paid for extra internal-locum days, allocated before the pool split"
    )

    @field_validator("salary", "bonus_amount", "additional_days_worked", mode="before")
    @classmethod
    def _non_negative_money(cls, v: Any) -> float:
        return _bounded(v, 0.0)

    @field_validator("weeks_vacation", mode="before")
    @classmethod
    def _vacation_weeks(cls, v: Any) -> float:
        return _bounded(v, 0.0, MAX_VACATION_WEEKS)

    @field_validator("medical_director_hours_percentage", mode="before")
    @classmethod
    def _percentage(cls, v: Any) -> float:
        return _bounded(v, 0.0, 100.0)

    @field_validator("receives_benefits", "has_medical_director_hours", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return bool(v)


def _portion(v: Any, default: float) -> float:
    if v is None:
        return default
    return _bounded(v, 0.0, 1.0)


class Partner(_PhysicianBase):
    type: Literal["partner"] = "partner"


class Employee(_PhysicianBase):
    type: Literal["employee"] = "employee"


class EmployeeToPartner(_PhysicianBase):
    """Employee for the first part of the year, partner for the rest."""

    type: Literal["employeeToPartner"] = "employeeToPartner"
    employee_portion_of_year: float = 0.5

    @field_validator("employee_portion_of_year", mode="before")
    @classmethod
    def _clamp_portion(cls, v: Any) -> float:
        return _portion(v, 0.5)


class PartnerToRetire(_PhysicianBase):
    """Partner for the first part of the year; a portion of 0 means retired in a prior year."""

    type: Literal["partnerToRetire"] = "partnerToRetire"
    partner_portion_of_year: float = 0.5
    buyout_cost: float = 0.0
    trailing_shared_md_amount: Optional[float] = None

    @field_validator("partner_portion_of_year", mode="before")
    @classmethod
    def _clamp_portion(cls, v: Any) -> float:
        return _portion(v, 0.5)

    @field_validator("buyout_cost", mode="before")
    @classmethod
    def _clamp_buyout(cls, v: Any) -> float:
        return _bounded(v, 0.0)

    @field_validator("trailing_shared_md_amount", mode="before")
    @classmethod
    def _clamp_trailing(cls, v: Any) -> Optional[float]:
        return None if v is None else _bounded(v, 0.0)


class NewEmployee(_PhysicianBase):
    """Hired during the year; 0 means a Jan 1 start, 1 means Dec 31."""

    type: Literal["newEmployee"] = "newEmployee"
    start_portion_of_year: float = 0.0

    @field_validator("start_portion_of_year", mode="before")
    @classmethod
    def _clamp_portion(cls, v: Any) -> float:
        return _portion(v, 0.0)


class EmployeeToTerminate(_PhysicianBase):
    """Employed from Jan 1 until the termination point of the year."""

    type: Literal["employeeToTerminate"] = "employeeToTerminate"
    terminate_portion_of_year: float = 1.0

    @field_validator("terminate_portion_of_year", mode="before")
    @classmethod
    def _clamp_portion(cls, v: Any) -> float:
        return _portion(v, 1.0)


PhysicianRecord = Annotated[
    Union[Partner, Employee, EmployeeToPartner, PartnerToRetire, NewEmployee, EmployeeToTerminate],
    Field(discriminator="type"),
]

PHYSICIAN_ADAPTER = TypeAdapter(PhysicianRecord)


def physician_from_dict(data: dict) -> PhysicianRecord:
    """Build the right variant from a plain mapping (camelCase or snake_case keys)."""
    return PHYSICIAN_ADAPTER.validate_python(data)


def updated(record: PhysicianRecord, **changes: Any) -> PhysicianRecord:
    """Return a re-validated copy of ``record`` with ``changes`` applied."""
    data = record.model_dump()
    data.update(changes)
    return PHYSICIAN_ADAPTER.validate_python(data)


def change_role(record: PhysicianRecord, new_type: Union[PhysicianType, str], **changes: Any) -> PhysicianRecord:
    """
    Rebuild ``record`` as another lifecycle variant.
    Fields the new variant does not carry are dropped.
    """
    data = record.model_dump()
    for name in PORTION_FIELDS + ("buyout_cost", "trailing_shared_md_amount"):
        data.pop(name, None)
    data.update(changes)
    data["type"] = PhysicianType(new_type).value
    return PHYSICIAN_ADAPTER.validate_python(data)


__all__ = [
    "PhysicianType",
    "Partner",
    "Employee",
    "EmployeeToPartner",
    "PartnerToRetire",
    "NewEmployee",
    "EmployeeToTerminate",
    "PhysicianRecord",
    "PHYSICIAN_ADAPTER",
    "physician_from_dict",
    "updated",
    "change_role",
    "MAX_VACATION_WEEKS",
    "PORTION_FIELDS",
]
