from .benefits import annual_benefit_cost, benefit_start_day, benefits_cost
from .delayed_comp import DelayedCompensation, delayed_compensation, pay_periods_for_year
from .medical_director import MedicalDirectorAllocation, allocate_medical_director
from .payroll_tax import PayrollTaxBreakdown, employer_payroll_taxes, payroll_tax_breakdown
from .pool import (
    CompensationLine,
    PoolBreakdown,
    PoolDistribution,
    distribute_partner_pool,
    employee_total_cost,
)
from .proration import (
    employee_portion,
    is_employee_type,
    is_partner_eligible,
    is_prior_year_retiree,
    partner_fte_weight,
    partner_portion,
)

__all__ = [
    "annual_benefit_cost",
    "benefit_start_day",
    "benefits_cost",
    "DelayedCompensation",
    "delayed_compensation",
    "pay_periods_for_year",
    "MedicalDirectorAllocation",
    "allocate_medical_director",
    "PayrollTaxBreakdown",
    "employer_payroll_taxes",
    "payroll_tax_breakdown",
    "CompensationLine",
    "PoolBreakdown",
    "PoolDistribution",
    "distribute_partner_pool",
    "employee_total_cost",
    "employee_portion",
    "is_employee_type",
    "is_partner_eligible",
    "is_prior_year_retiree",
    "partner_fte_weight",
    "partner_portion",
]
