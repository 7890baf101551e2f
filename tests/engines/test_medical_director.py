import pytest

from practice_comp.engines.medical_director import allocate_medical_director, trailing_md_amount
from practice_comp.state.schema import Employee, Partner, PartnerToRetire


def _md_partner(pid, pct):
    return Partner(id=pid, name=pid, has_medical_director_hours=True, medical_director_hours_percentage=pct)


def test_shared_pool_split_by_percentage(config):
    physicians = [_md_partner("A", 50), _md_partner("B", 30), _md_partner("C", 20)]
    md = allocate_medical_director(100000, 0, None, physicians, config.medical_director)
    assert md.allocations == pytest.approx({"A": 50000, "B": 30000, "C": 20000})
    assert md.shared_total == pytest.approx(100000)
    assert md.total == pytest.approx(100000)


def test_prcs_pool_goes_to_assignee(config):
    physicians = [_md_partner("A", 50), _md_partner("B", 50)]
    md = allocate_medical_director(100000, 50000, "B", physicians, config.medical_director)
    assert md.for_physician("B") == pytest.approx(100000)
    assert md.prcs_total == pytest.approx(50000)


def test_prcs_assignee_missing_from_roster(config):
    md = allocate_medical_director(100000, 50000, "ZZ", [_md_partner("A", 100)], config.medical_director)
    assert md.prcs_total == 0.0
    assert "ZZ" not in md.allocations


def test_prior_year_retiree_gets_trailing_amount(config):
    retiree = PartnerToRetire(id="HW", partner_portion_of_year=0, trailing_shared_md_amount=8302.50)
    md = allocate_medical_director(100000, 0, None, [_md_partner("A", 100), retiree], config.medical_director)
    assert md.trailing == {"HW": pytest.approx(8302.50)}
    assert md.allocations == pytest.approx({"A": 100000 - 8302.50})
    assert md.total == pytest.approx(100000)


def test_trailing_and_shares_use_up_the_pool(config):
    retiree = PartnerToRetire(id="HW", partner_portion_of_year=0, trailing_shared_md_amount=8302.50)
    physicians = [_md_partner("MC", 26.39 / 93.05 * 100), _md_partner("JS", 33.33 / 93.05 * 100),
                  _md_partner("GA", 33.33 / 93.05 * 100), retiree]
    md = allocate_medical_director(119374, 0, None, physicians, config.medical_director)
    assert md.shared_total + md.trailing_total == pytest.approx(119374)
    assert md.allocations["MC"] == pytest.approx(31501, abs=1)


def test_trailing_larger_than_pool_leaves_no_shares(config):
    retiree = PartnerToRetire(id="HW", partner_portion_of_year=0, trailing_shared_md_amount=8302.50)
    md = allocate_medical_director(5000, 0, None, [_md_partner("A", 100), retiree], config.medical_director)
    assert md.shared_total == 0.0
    assert md.for_physician("HW") == pytest.approx(8302.50)


def test_default_trailing_amount(config):
    retiree = PartnerToRetire(id="HW", partner_portion_of_year=0)
    assert trailing_md_amount(retiree, config.medical_director) == pytest.approx(2500)
    assert trailing_md_amount(_md_partner("A", 100), config.medical_director) == 0.0


def test_employees_never_share_md_pool(config):
    employee = Employee(id="E", has_medical_director_hours=True, medical_director_hours_percentage=40)
    md = allocate_medical_director(100000, 0, None, [employee, _md_partner("A", 60)], config.medical_director)
    assert "E" not in md.allocations
    assert md.shared_total == pytest.approx(60000)
