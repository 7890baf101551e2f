import logging

import pytest

from practice_comp.config.models import EngineFlags
from practice_comp.projections.propagation import (
    apply_physician_edit,
    medical_director_total,
    normalise_medical_director_percentages,
    rebalance_medical_director_percentages,
    recompute_medical_director_percentages,
    remove_physician,
)
from practice_comp.state.schema import (
    Employee,
    EmployeeToPartner,
    NewEmployee,
    Partner,
    PartnerToRetire,
    updated,
)

YEARS = (2025, 2026, 2027, 2028)


def _partner(pid, name, pct=0.0, weeks=8):
    return Partner(id=pid, name=name, weeks_vacation=weeks, has_medical_director_hours=pct > 0,
                   medical_director_hours_percentage=pct)


@pytest.fixture
def three_partners(make_state):
    roster = [_partner("A", "Alice", 40), _partner("B", "Bob", 30), _partner("C", "Cara", 30)]
    return make_state({year: roster for year in YEARS})


def test_md_percentages_rebalanced_after_edit(three_partners, config):
    alice = three_partners.year(2025).physician("A")
    state = apply_physician_edit(three_partners, 2025, updated(alice, medical_director_hours_percentage=70), config)
    fy = state.year(2025)
    assert fy.physician("A").medical_director_hours_percentage == pytest.approx(70)
    assert fy.physician("B").medical_director_hours_percentage == pytest.approx(15)
    assert fy.physician("C").medical_director_hours_percentage == pytest.approx(15)
    assert medical_director_total(fy.physicians) == pytest.approx(100)


def test_sole_partner_holds_all_md_hours():
    physicians = [_partner("A", "Alice", 40), Employee(id="E", salary=300000)]
    result = rebalance_medical_director_percentages(physicians, "A")
    assert result[0].medical_director_hours_percentage == 100
    assert result[1].medical_director_hours_percentage == 0


def test_recompute_by_partner_portion():
    physicians = [
        _partner("A", "Alice"),
        PartnerToRetire(id="R", name="Ray", partner_portion_of_year=0.5),
        Employee(id="E", salary=300000),
    ]
    result = recompute_medical_director_percentages(physicians)
    assert [p.medical_director_hours_percentage for p in result] == pytest.approx([200 / 3, 100 / 3, 0])
    assert result[0].has_medical_director_hours
    assert not result[2].has_medical_director_hours


def test_partner_mix_change_recomputes_percentages(three_partners, config):
    retiring = PartnerToRetire(id="C", name="Cara", partner_portion_of_year=0.5, weeks_vacation=8, buyout_cost=50000)
    state = apply_physician_edit(three_partners, 2025, retiring, config)
    fy = state.year(2025)
    assert [p.medical_director_hours_percentage for p in fy.physicians] == pytest.approx([40, 40, 20])
    assert medical_director_total(fy.physicians) == pytest.approx(100)


def test_entered_percentage_kept_when_mix_changes(three_partners, config):
    retiring = PartnerToRetire(id="C", name="Cara", partner_portion_of_year=0.5, weeks_vacation=8,
                               has_medical_director_hours=True, medical_director_hours_percentage=50)
    state = apply_physician_edit(three_partners, 2025, retiring, config)
    fy = state.year(2025)
    assert [p.medical_director_hours_percentage for p in fy.physicians] == pytest.approx([25, 25, 50])
    assert medical_director_total(fy.physicians) == pytest.approx(100)


def test_new_partner_with_entered_percentage(three_partners, config):
    state = apply_physician_edit(three_partners, 2025, _partner("D", "Dana", 40), config)
    fy = state.year(2025)
    assert fy.physician("D").medical_director_hours_percentage == pytest.approx(40)
    assert [p.medical_director_hours_percentage for p in fy.physicians[:3]] == pytest.approx([20, 20, 20])


def test_normalise_scales_entered_percentages_to_100():
    physicians = [
        _partner("MC", "Mac", 26.39),
        _partner("JS", "Jess", 33.33),
        _partner("GA", "Gus", 33.33),
        PartnerToRetire(id="HW", name="Hal", partner_portion_of_year=0, medical_director_hours_percentage=6.95),
    ]
    result = normalise_medical_director_percentages(physicians)
    assert result[0].medical_director_hours_percentage == pytest.approx(26.39 / 93.05 * 100)
    assert result[1].medical_director_hours_percentage == pytest.approx(result[2].medical_director_hours_percentage)
    assert result[3].medical_director_hours_percentage == 0.0
    assert medical_director_total(result) == pytest.approx(100)


def test_normalise_without_hours_splits_by_portion():
    physicians = [_partner("A", "Alice"), _partner("B", "Bob")]
    result = normalise_medical_director_percentages(physicians)
    assert [p.medical_director_hours_percentage for p in result] == pytest.approx([50, 50])


def test_leaving_physician_removed_from_later_years(three_partners, config):
    retiring = PartnerToRetire(id="C", name="Cara", partner_portion_of_year=0.5, weeks_vacation=8)
    state = apply_physician_edit(three_partners, 2026, retiring, config)
    assert state.year(2025).physician("C").type == "partner"
    assert state.year(2026).physician("C").type == "partnerToRetire"
    for year in (2027, 2028):
        fy = state.year(year)
        assert fy.physician("C") is None
        assert medical_director_total(fy.physicians) == pytest.approx(100)


def test_new_employee_progresses_in_later_years(three_partners, config):
    hire = NewEmployee(id="N", name="Nia", start_portion_of_year=0.5)
    state = apply_physician_edit(three_partners, 2025, hire, config)

    assert state.year(2026).physician("N").type == "employee"
    assert state.year(2026).physician("N").salary == 500000
    transition = state.year(2027).physician("N")
    assert transition.type == "employeeToPartner"
    assert transition.employee_portion_of_year == 0.5
    assert transition.weeks_vacation == 8
    assert state.year(2028).physician("N").type == "partner"
    # Transition year brings a new partner into the MD split
    assert medical_director_total(state.year(2027).physicians) == pytest.approx(100)


def test_new_partner_added_to_every_later_year(three_partners, config):
    state = apply_physician_edit(three_partners, 2026, _partner("D", "Dana", weeks=10), config)
    assert state.year(2025).physician("D") is None
    for year in (2026, 2027, 2028):
        assert state.year(year).physician("D").weeks_vacation == 10


def test_salary_floor_only_raises_later_years(make_state, config):
    state = make_state({
        2025: [Employee(id="E", name="Eve", salary=300000)],
        2026: [Employee(id="E", name="Eve", salary=350000)],
        2027: [Employee(id="E", name="Eve", salary=280000)],
    })
    eve = state.year(2025).physician("E")

    raised = apply_physician_edit(state, 2025, updated(eve, salary=400000), config)
    assert [raised.year(y).physician("E").salary for y in (2025, 2026, 2027)] == [400000, 400000, 400000]

    modest = apply_physician_edit(state, 2025, updated(eve, salary=320000), config)
    assert [modest.year(y).physician("E").salary for y in (2025, 2026, 2027)] == [320000, 350000, 320000]


def test_vacation_floor_for_partners(three_partners, config):
    bob = three_partners.year(2025).physician("B")
    state = apply_physician_edit(three_partners, 2025, updated(bob, weeks_vacation=12), config)
    assert all(state.year(y).physician("B").weeks_vacation == 12 for y in YEARS)


def test_transition_makes_later_employee_years_partner_years(make_state, config):
    state = make_state({year: [Employee(id="E", name="Eve", salary=300000)] for year in YEARS})
    transition = EmployeeToPartner(id="E", name="Eve", employee_portion_of_year=0.5, salary=300000, weeks_vacation=8)
    state = apply_physician_edit(state, 2026, transition, config)
    assert state.year(2025).physician("E").type == "employee"
    assert state.year(2026).physician("E").type == "employeeToPartner"
    for year in (2027, 2028):
        later = state.year(year).physician("E")
        assert later.type == "partner"
        assert later.salary == 0
        assert later.weeks_vacation == 8


def test_rename_applies_to_every_year(three_partners, config):
    bob = three_partners.year(2026).physician("B")
    state = apply_physician_edit(three_partners, 2026, updated(bob, name="Robert"), config)
    assert {state.year(y).physician("B").name for y in YEARS} == {"Robert"}


def test_per_year_ids_matched_by_name(make_state, config):
    state = make_state({
        2025: [_partner("2025-A", "Alice", 100)],
        2026: [_partner("2026-A", "Alice", 100)],
    })
    alice = state.year(2025).physician("2025-A")
    edited = apply_physician_edit(state, 2025, updated(alice, weeks_vacation=14), config)
    assert edited.year(2026).physician("2026-A").weeks_vacation == 14

    by_id_only = config.model_copy(update={"flags": EngineFlags(match_by_name=False)})
    edited = apply_physician_edit(state, 2025, updated(alice, weeks_vacation=14), by_id_only)
    assert edited.year(2026).physician("2026-A").weeks_vacation == 8


def test_edit_does_not_touch_input_state(three_partners, config):
    before = three_partners.to_payload()
    alice = three_partners.year(2025).physician("A")
    apply_physician_edit(three_partners, 2025, updated(alice, weeks_vacation=20), config)
    assert three_partners.to_payload() == before


def test_remove_from_year_onward(three_partners, config):
    state = three_partners.model_copy(update={"years": [
        fy.model_copy(update={"prcs_director_physician_id": "B"}) for fy in three_partners.years
    ]})
    state = remove_physician(state, 2026, "B", config)
    assert state.year(2025).physician("B") is not None
    assert state.year(2025).prcs_director_physician_id == "B"
    for year in (2026, 2027, 2028):
        fy = state.year(year)
        assert fy.physician("B") is None
        assert fy.prcs_director_physician_id is None
        assert medical_director_total(fy.physicians) == pytest.approx(100)


def test_unknown_year_or_physician_is_ignored(three_partners, config, caplog):
    with caplog.at_level(logging.WARNING):
        state = remove_physician(three_partners, 2030, "A", config)
        assert state.to_payload() == three_partners.to_payload()
        state = remove_physician(three_partners, 2025, "nobody", config)
        assert state.to_payload() == three_partners.to_payload()
        state = apply_physician_edit(three_partners, 1999, _partner("D", "Dana"), config)
        assert state.to_payload() == three_partners.to_payload()
    assert len([r for r in caplog.records if r.levelname == "WARNING"]) == 3
