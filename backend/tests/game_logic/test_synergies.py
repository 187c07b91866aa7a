"""Tests for combo rule evaluation and discovery tracking."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from basement_backend.game_logic.state import Venue  # noqa: TC001
from basement_backend.game_logic.synergies import (
    ConditionField,
    ConditionOperator,
    DuplicateSynergyError,
    Quantifier,
    SynergyCondition,
    SynergyContext,
    SynergyEffect,
    SynergyEffectKind,
    SynergyEngine,
    SynergyRule,
)
from basement_backend.shared.enums import (
    Genre,
    PerformerStat,
    SynergyTier,
    VenueType,
)
from basement_backend.shared.value_objects import EffectTarget
from scene_factories import make_performer, make_venue


def _basement() -> Venue:
    return make_venue("basement", venue_type=VenueType.BASEMENT, authenticity=95)


def test_diy_combo_fires_for_authentic_punk_in_basement() -> None:
    engine = SynergyEngine()
    band = make_performer(authenticity=95)

    activations = engine.evaluate([band], _basement())

    identifiers = [activation.identifier for activation in activations]
    assert identifiers == ["diy-authentic", "punk_basement"]
    diy = activations[0]
    assert diy.multiplier == 2.0
    assert diy.reputation_bonus == 10
    assert diy.tier is SynergyTier.RARE
    assert diy.first_discovery


def test_diy_combo_requires_every_performer_to_be_authentic() -> None:
    engine = SynergyEngine()
    lineup = [make_performer("a", authenticity=95), make_performer("b")]

    activations = engine.evaluate(lineup, _basement(), record=False)

    assert "diy-authentic" not in {activation.identifier for activation in activations}


def test_to_bundle_combines_multipliers_and_effects() -> None:
    engine = SynergyEngine()
    activations = engine.evaluate([make_performer(authenticity=95)], _basement())

    bundle = SynergyEngine.to_bundle(activations)

    assert bundle.multiplier(EffectTarget.ATTENDANCE) == pytest.approx(3.0)
    assert bundle.additive(EffectTarget.REPUTATION) == 10
    assert bundle.multiplier(EffectTarget.REPUTATION) == pytest.approx(2.0)
    assert bundle.multiplier(EffectTarget.FANS) == pytest.approx(1.2)


def test_stacking_is_uncapped() -> None:
    engine = SynergyEngine()
    activations = engine.evaluate([make_performer(authenticity=95)], _basement())

    assert SynergyEngine.total_multiplier(activations) == pytest.approx(3.0)
    assert SynergyEngine.total_multiplier([]) == 1.0


def test_hometown_combo_matches_district() -> None:
    engine = SynergyEngine()
    local = make_performer(hometown="eastside")

    activations = engine.evaluate([local], make_venue(), record=False)

    assert [activation.identifier for activation in activations] == [
        "hometown-heroes"
    ]


def test_chain_trigger_fires_target_one_hop_deep() -> None:
    engine = SynergyEngine()
    lineup = [make_performer(f"punk-{index}") for index in range(3)]

    activations = engine.evaluate(lineup, make_venue())

    by_id = {activation.identifier: activation for activation in activations}
    assert set(by_id) == {"triple_punk_chaos", "circle_pit_madness"}
    assert by_id["circle_pit_madness"].chained_from == "triple_punk_chaos"


def test_chain_only_rules_never_fire_alone() -> None:
    engine = SynergyEngine()

    activations = engine.evaluate([make_performer()], make_venue())

    assert activations == []
    assert not engine.is_discovered("circle_pit_madness")


def test_unlock_content_is_recorded_once() -> None:
    engine = SynergyEngine()
    lineup = [
        make_performer("m", genre=Genre.METAL),
        make_performer("e", genre=Genre.EXPERIMENTAL),
        make_performer("p"),
    ]

    engine.evaluate(lineup, make_venue())
    engine.evaluate(lineup, make_venue())

    assert engine.unlocked_content == ("new_genre_fusion",)
    assert engine.trigger_count("genre_collision") == 2


def test_evaluate_without_recording_leaves_codex_untouched() -> None:
    engine = SynergyEngine()
    band = make_performer(authenticity=95)

    activations = engine.evaluate([band], _basement(), record=False)

    assert engine.trigger_counts() == {}
    assert engine.record_triggers(activations) == ["diy-authentic", "punk_basement"]
    assert engine.record_triggers(activations) == []
    assert engine.trigger_count("diy-authentic") == 2


def test_results_are_ordered_rarest_first() -> None:
    rules = [
        SynergyRule(identifier="plain", name="Plain"),
        SynergyRule(identifier="mythic", name="Mythic", tier=SynergyTier.MYTHIC),
        SynergyRule(identifier="rare", name="Rare", tier=SynergyTier.RARE),
    ]
    engine = SynergyEngine(rules)

    activations = engine.evaluate([make_performer()], make_venue())

    assert [activation.tier for activation in activations] == [
        SynergyTier.MYTHIC,
        SynergyTier.RARE,
        SynergyTier.COMMON,
    ]


def test_extra_conditions_never_make_a_rule_fire_more() -> None:
    loose = SynergyRule(
        identifier="loose",
        name="Loose",
        conditions=(SynergyCondition(field=ConditionField.GENRE, value=Genre.PUNK),),
    )
    strict = SynergyRule(
        identifier="strict",
        name="Strict",
        conditions=(
            *loose.conditions,
            SynergyCondition(
                field=ConditionField.PERFORMER_STAT,
                stat=PerformerStat.ENERGY,
                operator=ConditionOperator.GREATER_THAN,
                value=60,
                quantifier=Quantifier.ALL,
            ),
            SynergyCondition(
                field=ConditionField.VENUE_CAPACITY,
                operator=ConditionOperator.LESS_THAN,
                value=150,
            ),
        ),
    )
    lineups = [
        [make_performer(energy=energy, genre=genre)]
        for energy in (20, 61, 99)
        for genre in (Genre.PUNK, Genre.METAL)
    ]
    venues = [make_venue(capacity=capacity) for capacity in (40, 149, 400)]
    context = SynergyContext()

    for lineup in lineups:
        for venue in venues:
            if strict.matches(lineup, venue, context):
                assert loose.matches(lineup, venue, context)


def test_empty_lineup_never_satisfies_performer_conditions() -> None:
    condition = SynergyCondition(field=ConditionField.GENRE, value=Genre.PUNK)

    assert not condition.holds([], make_venue(), SynergyContext())


def test_stat_conditions_require_an_axis() -> None:
    with pytest.raises(ValidationError):
        SynergyCondition(field=ConditionField.PERFORMER_STAT, value=10)


def test_chain_effect_requires_target_identifier() -> None:
    with pytest.raises(ValidationError):
        SynergyEffect(kind=SynergyEffectKind.CHAIN_TRIGGER, value=2.0)
    with pytest.raises(ValidationError):
        SynergyEffect(kind=SynergyEffectKind.MULTIPLY_FANS, value=-1.0)


def test_duplicate_registration_is_rejected() -> None:
    engine = SynergyEngine([])
    rule = SynergyRule(identifier="once", name="Once")
    engine.register(rule)

    with pytest.raises(DuplicateSynergyError):
        engine.register(rule)


def test_codex_tracks_progress_per_tier() -> None:
    engine = SynergyEngine()
    engine.evaluate([make_performer(authenticity=95)], _basement())

    progress = engine.codex_progress()
    entries = engine.discovered_synergies()

    assert progress[SynergyTier.RARE][0] == 1
    assert [entry.identifier for entry in entries] == [
        "diy-authentic",
        "punk_basement",
    ]
    assert engine.undiscovered_count() == len(engine.rules) - 2


def test_restore_ignores_unknown_rules() -> None:
    engine = SynergyEngine()

    engine.restore({"diy-authentic": 3, "retired-combo": 9}, ["legendary_venue"])

    assert engine.is_discovered("diy-authentic")
    assert engine.trigger_counts() == {"diy-authentic": 3}
    assert engine.unlocked_content == ("legendary_venue",)
