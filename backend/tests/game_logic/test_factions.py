"""Tests for faction standings, cascades and events."""

from __future__ import annotations

import pytest

from basement_backend.game_logic.factions import (
    FactionChoice,
    FactionEvent,
    FactionEventKind,
    FactionEventResolvedError,
    FactionGraph,
    UnknownFactionChoiceError,
    UnknownFactionError,
    UnknownFactionEventError,
)
from basement_backend.game_logic.state import Performer  # noqa: TC001
from basement_backend.shared.value_objects import EffectTarget
from scene_factories import make_performer, make_venue


def _purist_band() -> Performer:
    return make_performer(
        "purists",
        authenticity=100,
        technical_skill=30,
        popularity=0,
        traits=("authentic",),
    )


def test_relationships_are_symmetric() -> None:
    graph = FactionGraph()

    assert graph.relationship("old-guard", "new-wave") == -80
    assert graph.relationship("new-wave", "old-guard") == -80
    assert graph.relationship("old-guard", "old-guard") == 100
    assert graph.relationship("metal-elite", "old-guard") == 0


def test_set_relationship_rejects_self_and_unknown() -> None:
    graph = FactionGraph()

    with pytest.raises(ValueError, match="itself"):
        graph.set_relationship("old-guard", "old-guard", 10)
    with pytest.raises(UnknownFactionError):
        graph.set_relationship("old-guard", "nobody", 10)


def test_small_change_does_not_cascade() -> None:
    graph = FactionGraph()

    applied = graph.adjust_standing("old-guard", 5)

    assert applied == {"old-guard": 5}
    assert graph.standing("new-wave") == 0


def test_cascade_moves_rivals_opposite_and_stops_after_one_hop() -> None:
    graph = FactionGraph()

    applied = graph.adjust_standing("old-guard", 20)

    assert applied == {"old-guard": 20, "new-wave": -6}
    # diy-purists is a rival of new-wave but only related to old-guard at 50
    assert graph.standing("diy-purists") == 0


@pytest.mark.parametrize("delta", [7, -13, 40, -100])
def test_cascade_never_exceeds_thirty_percent(delta: int) -> None:
    graph = FactionGraph()

    applied = graph.adjust_standing("diy-purists", delta)

    for faction_id, change in applied.items():
        if faction_id != "diy-purists":
            assert abs(change) <= abs(delta) * 0.3


def test_standings_are_clamped() -> None:
    graph = FactionGraph(standings={"old-guard": 95})

    applied = graph.adjust_standing("old-guard", 20)

    assert applied["old-guard"] == 5
    assert graph.standing("old-guard") == 100


def test_alignment_scores_values_and_traits() -> None:
    graph = FactionGraph()

    assert graph.alignment(_purist_band(), "diy-purists") == pytest.approx(80)


def test_favoured_faction_boosts_show() -> None:
    graph = FactionGraph(standings={"diy-purists": 60})

    bundle = graph.show_modifiers(_purist_band(), make_venue())

    assert bundle.multiplier(EffectTarget.FANS) == pytest.approx(0.96)
    assert bundle.multiplier(EffectTarget.REPUTATION) == pytest.approx(1.65)
    assert bundle.multiplier(EffectTarget.REVENUE) == pytest.approx(0.85)


def test_hostile_aligned_faction_penalises_show() -> None:
    graph = FactionGraph(standings={"diy-purists": -60})

    bundle = graph.show_modifiers(_purist_band(), make_venue())

    assert bundle.multiplier(EffectTarget.FANS) == pytest.approx(0.7)
    assert bundle.multiplier(EffectTarget.REPUTATION) == pytest.approx(0.8)
    assert bundle.additive(EffectTarget.INCIDENT_PROBABILITY) == pytest.approx(0.3)


def test_neutral_standings_leave_show_untouched() -> None:
    graph = FactionGraph()

    assert graph.show_modifiers(_purist_band(), make_venue()).is_neutral()


def test_controlled_venue_success_adds_standing() -> None:
    graph = FactionGraph(controlled_venues={"diy-purists": ["venue-1"]})

    graph.update_standings_from_show(_purist_band(), make_venue(), success=True)

    assert graph.standing("diy-purists") == 8
    assert graph.standing("new-wave") == -2


def test_assign_performer_picks_best_faction_above_threshold() -> None:
    graph = FactionGraph()
    outsider = make_performer(
        "outsider", authenticity=0, technical_skill=0, popularity=100
    )

    assert graph.assign_performer(_purist_band()) == "diy-purists"
    assert graph.members("diy-purists") == ("purists",)
    assert graph.assign_performer(outsider) is None


def test_assign_venue_moves_control() -> None:
    graph = FactionGraph(controlled_venues={"old-guard": ["v1"]})

    graph.assign_venue("metal-elite", "v1")

    assert graph.controls_venue("metal-elite", "v1")
    assert not graph.controls_venue("old-guard", "v1")


def test_conflict_event_is_raised_once() -> None:
    graph = FactionGraph(standings={"old-guard": 40, "new-wave": 40})

    raised = graph.check_for_events()
    again = graph.check_for_events()

    assert [event.kind for event in raised] == [FactionEventKind.CONFLICT]
    assert raised[0].faction_ids == ("old-guard", "new-wave")
    assert again == []


def test_applying_choice_twice_is_rejected() -> None:
    graph = FactionGraph(standings={"diy-purists": 80})
    (event,) = graph.check_for_events()

    choice = graph.apply_choice(event.identifier, "accept")

    assert choice.reputation_change == 10
    assert graph.standing("diy-purists") == 85
    with pytest.raises(FactionEventResolvedError):
        graph.apply_choice(event.identifier, "accept")
    assert graph.standing("diy-purists") == 85
    assert graph.pending_events() == []


def test_unknown_event_and_choice_are_rejected() -> None:
    graph = FactionGraph(standings={"diy-purists": -80})
    (event,) = graph.check_for_events()

    with pytest.raises(UnknownFactionEventError):
        graph.apply_choice("missing", "ignore")
    with pytest.raises(UnknownFactionChoiceError):
        graph.apply_choice(event.identifier, "burn-it-down")
    assert event.kind is FactionEventKind.DRAMA


def test_restored_events_keep_counter_and_drop_unknown_factions() -> None:
    graph = FactionGraph(standings={"old-guard": 80})
    restored = FactionEvent(
        identifier="alliance-diy-purists-4",
        kind=FactionEventKind.ALLIANCE,
        faction_ids=("diy-purists",),
        title="Old offer",
        description="Still on the table.",
        choices=(FactionChoice(identifier="accept", text="Accept"),),
    )
    orphan = restored.model_copy(
        update={"identifier": "drama-ghosts-9", "faction_ids": ("ghosts",)}
    )

    graph.restore_events([restored, orphan])
    (raised,) = graph.check_for_events()

    assert raised.identifier == "alliance-old-guard-5"
    assert {event.identifier for event in graph.all_events()} == {
        "alliance-diy-purists-4",
        "alliance-old-guard-5",
    }


def test_faction_data_is_serialisable() -> None:
    graph = FactionGraph(standings={"indie-crowd": 12})

    data = {entry["identifier"]: entry for entry in graph.all_faction_data()}

    assert data["indie-crowd"]["player_standing"] == 12
    assert data["indie-crowd"]["relationships"]["new-wave"] == 60
