"""Tests for the incident generator."""

from __future__ import annotations

import pytest

from basement_backend.game_logic.incidents import (
    INCIDENT_CATALOG,
    Incident,
    IncidentContext,
    IncidentGenerator,
    can_prevent,
    category_weights,
    describe,
    incident_probability,
)
from basement_backend.shared.enums import IncidentCategory
from basement_backend.shared.rng import DeterministicRandomService
from basement_backend.shared.value_objects import EffectBundle, EffectTarget
from scene_factories import ScriptedRandom, make_performer, make_venue


def test_base_probability_without_modifiers() -> None:
    probability = incident_probability(
        make_performer(), make_venue(), IncidentContext()
    )

    assert probability == pytest.approx(0.15)


def test_probability_adjustments_stack() -> None:
    performer = make_performer(traits=("chaotic",))
    venue = make_venue(has_security=True)
    context = IncidentContext(reputation=60, stress=70)

    probability = incident_probability(performer, venue, context)

    assert probability == pytest.approx(0.15 - 0.05 + 0.10 - 0.02 + 0.10)


def test_probability_modifiers_are_clamped() -> None:
    context = IncidentContext(
        modifiers=EffectBundle(additives={EffectTarget.INCIDENT_PROBABILITY: -1.0})
    )

    assert incident_probability(make_performer(), make_venue(), context) == 0.0


def test_category_weights_follow_show_conditions() -> None:
    performer = make_performer(energy=90)
    venue = make_venue(capacity=200, police_presence=60)
    context = IncidentContext(reputation=10, stress=40)

    weights = category_weights(performer, venue, context)

    assert weights[IncidentCategory.EQUIPMENT_FAILURE] == 3.0
    assert weights[IncidentCategory.POLICE_SHUTDOWN] == pytest.approx(3.0)
    assert weights[IncidentCategory.BAND_DRAMA] == 2.0
    assert weights[IncidentCategory.CROWD_INCIDENT] == 2.0
    assert weights[IncidentCategory.RIVAL_SABOTAGE] == 2.0


def test_failed_roll_produces_no_incident() -> None:
    generator = IncidentGenerator(ScriptedRandom(roll_result=False))

    incidents = generator.roll_incidents(
        make_performer(), make_venue(), IncidentContext()
    )

    assert incidents == []


def test_double_incident_uses_two_categories() -> None:
    generator = IncidentGenerator(ScriptedRandom(roll_result=True, seed=11))

    incidents = generator.roll_incidents(
        make_performer(), make_venue(), IncidentContext()
    )

    assert len(incidents) == 2
    assert incidents[0].category != incidents[1].category


def test_selected_incident_comes_from_catalog() -> None:
    generator = IncidentGenerator(DeterministicRandomService(seed=5))

    for _ in range(25):
        incident = generator.select_incident(
            make_performer(), make_venue(), IncidentContext()
        )
        assert incident is not None
        assert incident in INCIDENT_CATALOG[incident.category]


def test_empty_catalog_selects_nothing() -> None:
    generator = IncidentGenerator(ScriptedRandom(roll_result=True), catalog={})

    incidents = generator.roll_incidents(
        make_performer(), make_venue(), IncidentContext()
    )

    assert incidents == []


def test_describe_fills_in_names() -> None:
    incident = Incident(
        category=IncidentCategory.VENUE_ISSUE,
        description="{band} got locked out of {venue}",
    )

    text = describe(
        incident,
        make_performer(name="The Drips"),
        make_venue(name="The Pit"),
    )

    assert text == "The Drips got locked out of The Pit"


def test_prevention_needs_enough_money() -> None:
    incident = INCIDENT_CATALOG[IncidentCategory.EQUIPMENT_FAILURE][0]
    police = INCIDENT_CATALOG[IncidentCategory.POLICE_SHUTDOWN][0]

    assert can_prevent(incident, 100)
    assert not can_prevent(incident, 99)
    assert not can_prevent(police, 10_000)
