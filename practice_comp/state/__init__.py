from .schema import (
    Employee,
    EmployeeToPartner,
    EmployeeToTerminate,
    NewEmployee,
    Partner,
    PartnerToRetire,
    PhysicianRecord,
    PhysicianType,
    change_role,
    physician_from_dict,
    updated,
)
from .scenario import BaselineMode, HistoricYear, ProjectionSettings, ScenarioState, YearFinancials

__all__ = [
    "Employee",
    "EmployeeToPartner",
    "EmployeeToTerminate",
    "NewEmployee",
    "Partner",
    "PartnerToRetire",
    "PhysicianRecord",
    "PhysicianType",
    "change_role",
    "physician_from_dict",
    "updated",
    "BaselineMode",
    "HistoricYear",
    "ProjectionSettings",
    "ScenarioState",
    "YearFinancials",
]
