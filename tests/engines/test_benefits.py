import pytest

from practice_comp.engines.benefits import annual_benefit_cost, benefit_start_day, benefits_cost
from practice_comp.state.schema import Employee, EmployeeToTerminate, NewEmployee, Partner

ANNUAL_2025 = (722.81 + 57.12 + 6.44) * 12


def test_annual_cost_grows_from_base_year(config):
    benefits = config.benefits
    assert benefits.annual_base_cost == pytest.approx(9436.44)
    assert annual_benefit_cost(2025, 7.2, benefits) == pytest.approx(ANNUAL_2025)
    assert annual_benefit_cost(2027, 7.2, benefits) == pytest.approx(ANNUAL_2025 * 1.072 ** 2)


@pytest.mark.parametrize("start_day, expected", [
    (60, 91),   # Mar 1 -> Apr 1
    (15, 60),   # Jan 15 + 30 days -> Feb 14 -> Mar 1
    (32, 91),   # Feb 1 waits the full period -> Mar 3 -> Apr 1
    (1, 32),    # Jan 1 -> Feb 1
])
def test_benefit_start_day(config, start_day, expected):
    assert benefit_start_day(start_day, 2025, config.benefits) == expected


def test_benefits_starting_after_year_end(config):
    # Dec 1 start begins Jan 1 of the following year
    assert benefit_start_day(335, 2025, config.benefits) == 366


def test_full_year_employee(config):
    record = Employee(id="E", salary=400000, receives_benefits=True)
    assert benefits_cost(record, 2025, 7.2, config.benefits) == pytest.approx(ANNUAL_2025)


def test_no_enrolment_no_cost(config):
    record = Employee(id="E", salary=400000, receives_benefits=False)
    assert benefits_cost(record, 2025, 7.2, config.benefits) == 0.0


def test_new_employee_waits_for_benefits(config):
    record = NewEmployee(id="N", salary=400000, receives_benefits=True, start_portion_of_year=0.0)
    cost = benefits_cost(record, 2025, 7.2, config.benefits)
    assert cost == pytest.approx(ANNUAL_2025 * (365 - 32 + 1) / 365)


def test_new_employee_hired_in_december_costs_nothing(config):
    record = NewEmployee(id="N", salary=400000, receives_benefits=True, start_portion_of_year=334 / 365)
    assert benefits_cost(record, 2025, 7.2, config.benefits) == 0.0


def test_terminating_employee_prorated(config):
    record = EmployeeToTerminate(id="T", receives_benefits=True, terminate_portion_of_year=0.5)
    assert benefits_cost(record, 2025, 7.2, config.benefits) == pytest.approx(ANNUAL_2025 * 0.5)


def test_partners_are_not_on_the_plan(config):
    record = Partner(id="P", receives_benefits=True)
    assert benefits_cost(record, 2025, 7.2, config.benefits) == 0.0
