import logging

import pytest

from practice_comp.config.models import EngineFlags
from practice_comp.engines.benefits import annual_benefit_cost
from practice_comp.engines.payroll_tax import employer_payroll_taxes
from practice_comp.engines.pool import distribute_partner_pool, employee_total_cost
from practice_comp.state.schema import (
    Employee,
    EmployeeToPartner,
    NewEmployee,
    Partner,
    PartnerToRetire,
)

INCOME = 3164006.93
NON_EMPLOYMENT = 229713.57
POOL = INCOME - NON_EMPLOYMENT


def _two_partner_year(make_year, **aggregates):
    aggregates.setdefault("therapy_income", INCOME)
    aggregates.setdefault("non_employment_costs", NON_EMPLOYMENT)
    partners = [Partner(id="A", name="Alpha", weeks_vacation=9), Partner(id="B", name="Beta", weeks_vacation=11)]
    return make_year(partners, **aggregates)


def test_two_partner_split(make_year, config):
    result = distribute_partner_pool(_two_partner_year(make_year), 7.2, config)
    assert result.breakdown.base_pool == pytest.approx(2934293.36)
    assert result.breakdown.distributable_pool == pytest.approx(2934293.36)
    # Weights 43/52 and 41/52
    assert result.line("A").compensation == pytest.approx(POOL * 43 / 84)
    assert result.line("B").compensation == pytest.approx(POOL * 41 / 84)
    assert result.line("A").compensation + result.line("B").compensation == pytest.approx(POOL)


def test_pool_shares_conserve_distributable_pool(make_year, config):
    physicians = [
        Partner(id="A", weeks_vacation=9, has_medical_director_hours=True, medical_director_hours_percentage=60),
        Partner(id="B", weeks_vacation=11, additional_days_worked=12000,
                has_medical_director_hours=True, medical_director_hours_percentage=40),
        EmployeeToPartner(id="C", employee_portion_of_year=0.5, salary=400000, weeks_vacation=8),
        PartnerToRetire(id="D", partner_portion_of_year=0.25, weeks_vacation=4, buyout_cost=50000),
        Employee(id="E", salary=300000, receives_benefits=True),
    ]
    fy = make_year(physicians, therapy_income=INCOME, non_employment_costs=NON_EMPLOYMENT,
                   medical_director_pool=97200, prcs_director_pool=50000, prcs_director_physician_id="A",
                   consulting_services=17030)
    result = distribute_partner_pool(fy, 7.2, config)
    assert result.total_pool_shares == pytest.approx(result.breakdown.distributable_pool)
    assert result.breakdown.total_income == pytest.approx(INCOME + 97200 + 50000 + 17030)
    assert result.breakdown.distributable_pool == pytest.approx(
        result.breakdown.base_pool - result.breakdown.total_medical_director_allocation - 12000
    )


def test_zero_weight_pays_no_shares(make_year, config, caplog):
    retiree = PartnerToRetire(id="HW", partner_portion_of_year=0, buyout_cost=51666.58,
                              trailing_shared_md_amount=8302.50)
    fy = make_year([retiree], therapy_income=INCOME, non_employment_costs=NON_EMPLOYMENT)
    with caplog.at_level(logging.WARNING):
        result = distribute_partner_pool(fy, 7.2, config)
    assert result.total_pool_shares == 0.0
    assert result.breakdown.total_weight == 0.0
    assert any("total FTE weight is 0" in r.message for r in caplog.records)


def test_prior_year_buyout_paid_but_not_deducted(make_year, config):
    retiree = PartnerToRetire(id="HW", partner_portion_of_year=0, buyout_cost=51666.58,
                              trailing_shared_md_amount=8302.50)
    fy = _two_partner_year(make_year)
    fy = fy.model_copy(update={"physicians": fy.physicians + [retiree]})

    result = distribute_partner_pool(fy, 7.2, config)
    assert result.breakdown.total_buyout_cost == 0.0
    assert result.breakdown.base_pool == pytest.approx(POOL)
    assert result.line("HW").compensation == pytest.approx(51666.58 + 8302.50)

    deducting = config.model_copy(update={"flags": EngineFlags(deduct_prior_year_buyouts=True)})
    result = distribute_partner_pool(fy, 7.2, deducting)
    assert result.breakdown.base_pool == pytest.approx(POOL - 51666.58)
    assert result.line("HW").compensation == pytest.approx(51666.58 + 8302.50)


def test_retiring_partner_buyout_is_a_practice_cost(make_year, config):
    retiring = PartnerToRetire(id="GA", partner_portion_of_year=0.5, weeks_vacation=8, buyout_cost=50000)
    fy = _two_partner_year(make_year)
    fy = fy.model_copy(update={"physicians": fy.physicians + [retiring]})
    result = distribute_partner_pool(fy, 7.2, config)
    assert result.breakdown.base_pool == pytest.approx(POOL - 50000)
    line = result.line("GA")
    assert line.compensation == pytest.approx(line.pool_share + 50000)


def test_employee_cost_and_pay(make_year, config):
    employee = NewEmployee(id="N", salary=400000, start_portion_of_year=0.5, bonus_amount=20000)
    cost = employee_total_cost(employee, 2025, 7.2, config)
    assert cost == pytest.approx(200000 + 20000 + employer_payroll_taxes(200000, 2025, config.payroll_taxes))

    fy = _two_partner_year(make_year)
    fy = fy.model_copy(update={"physicians": fy.physicians + [employee]})
    result = distribute_partner_pool(fy, 7.2, config)
    assert result.line("N").compensation == pytest.approx(220000)
    assert result.line("N").role == "newEmployee"
    assert result.breakdown.base_pool == pytest.approx(POOL - cost)


def test_full_year_employee_cost_includes_benefits(config):
    employee = Employee(id="E", salary=300000, receives_benefits=True)
    expected = (
        300000
        + annual_benefit_cost(2026, 7.2, config.benefits)
        + employer_payroll_taxes(300000, 2026, config.payroll_taxes)
    )
    assert employee_total_cost(employee, 2026, 7.2, config) == pytest.approx(expected)
    assert employee_total_cost(Partner(id="P"), 2026, 7.2, config) == 0.0


def test_exclude_w2_leaves_out_salary_portion(make_year, config):
    transitioning = EmployeeToPartner(id="C", employee_portion_of_year=0.5, salary=400000, weeks_vacation=8)
    fy = _two_partner_year(make_year)
    fy = fy.model_copy(update={"physicians": fy.physicians + [transitioning]})

    full = distribute_partner_pool(fy, 7.2, config)
    net = distribute_partner_pool(fy, 7.2, config, exclude_w2=True)
    assert full.line("C").compensation - net.line("C").compensation == pytest.approx(200000)
    # W2 pay is still a practice cost either way
    assert full.breakdown.base_pool == pytest.approx(net.breakdown.base_pool)


def test_costs_above_income_floor_pool_at_zero(make_year, config):
    fy = _two_partner_year(make_year, therapy_income=100000, non_employment_costs=500000)
    result = distribute_partner_pool(fy, 7.2, config)
    assert result.breakdown.base_pool == 0.0
    assert result.breakdown.distributable_pool == 0.0
    assert all(line.compensation == 0.0 for line in result.lines)


def test_prcs_income_needs_assignee_on_roster(make_year, config):
    fy = _two_partner_year(make_year, prcs_director_pool=50000, prcs_director_physician_id="ZZ")
    result = distribute_partner_pool(fy, 7.2, config)
    assert result.breakdown.total_income == pytest.approx(INCOME)


def test_more_income_never_lowers_a_share(make_year, config):
    shares = []
    for income in (2000000, 2500000, 3000000, 3500000):
        fy = _two_partner_year(make_year, therapy_income=income)
        shares.append(distribute_partner_pool(fy, 7.2, config).line("A").pool_share)
    assert shares == sorted(shares)


@pytest.mark.parametrize("low, high", [(150000, 160000), (170000, 176100), (176100, 190000), (200000, 250000)])
def test_raising_salary_raises_only_that_employees_cost(make_year, config, low, high):
    other = Employee(id="O", salary=300000, receives_benefits=True)
    before = Employee(id="E", salary=low, receives_benefits=True)
    after = before.model_copy(update={"salary": high})
    assert employee_total_cost(after, 2025, 7.2, config) > employee_total_cost(before, 2025, 7.2, config)

    fy = _two_partner_year(make_year)
    low_year = fy.model_copy(update={"physicians": fy.physicians + [before, other]})
    high_year = fy.model_copy(update={"physicians": fy.physicians + [after, other]})
    low_result = distribute_partner_pool(low_year, 7.2, config)
    high_result = distribute_partner_pool(high_year, 7.2, config)

    delta = employee_total_cost(after, 2025, 7.2, config) - employee_total_cost(before, 2025, 7.2, config)
    assert high_result.breakdown.total_employee_cost - low_result.breakdown.total_employee_cost == pytest.approx(delta)
    assert low_result.line("O").compensation == high_result.line("O").compensation
    assert employee_total_cost(other, 2025, 7.2, config) == pytest.approx(
        low_result.breakdown.total_employee_cost - employee_total_cost(before, 2025, 7.2, config)
    )
