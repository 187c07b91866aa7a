"""Scene factions, the player's standing with them and the events they raise."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence  # noqa: TC003
from enum import StrEnum
from itertools import combinations
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from basement_backend.shared.enums import PerformerStat
from basement_backend.shared.value_objects import EffectBundle, EffectTarget, clamp

if TYPE_CHECKING:
    from basement_backend.game_logic.state import Performer, Venue

logger = logging.getLogger(__name__)

STANDING_MIN = -100
STANDING_MAX = 100
CASCADE_THRESHOLD = 5
CASCADE_RELATIONSHIP_THRESHOLD = 50
CASCADE_RATIO = 0.3
FAVOURED_STANDING = 50
HOSTILE_STANDING = -50
ALIGNED_THRESHOLD = 70
MISALIGNED_THRESHOLD = 30
MEMBERSHIP_THRESHOLD = 60
CONFLICT_RELATIONSHIP = -50
CONFLICT_STANDING = 30
ALLIANCE_STANDING = 70


class FactionEventKind(StrEnum):
    """Kinds of events a faction can raise."""

    CONFLICT = "conflict"
    ALLIANCE = "alliance"
    DRAMA = "drama"


class FactionEventError(ValueError):
    """Base error for invalid faction event operations."""


class UnknownFactionEventError(FactionEventError):
    """Raised when a choice targets an event id that was never raised."""


class UnknownFactionChoiceError(FactionEventError):
    """Raised when a choice id is not offered by the event."""


class FactionEventResolvedError(FactionEventError):
    """Raised when a choice is applied to an event that was already resolved."""


class UnknownFactionError(KeyError):
    """Raised when a faction id does not exist in the graph."""


class FactionValues(BaseModel):
    """What a faction cares about; negative values prefer the opposite."""

    model_config = ConfigDict(frozen=True)

    authenticity: int = Field(..., ge=-100, le=100)
    technical_skill: int = Field(..., ge=-100, le=100)
    popularity: int = Field(..., ge=-100, le=100)
    tradition: int = Field(..., ge=-100, le=100)
    innovation: int = Field(..., ge=-100, le=100)


class FactionModifiers(BaseModel):
    """Bonuses a faction grants the shows it favours."""

    model_config = ConfigDict(frozen=True)

    fan_bonus: float = Field(default=1.0, ge=0)
    reputation_multiplier: float = Field(default=1.0, ge=0)
    money_modifier: float = Field(default=0.0, ge=-1, le=1)
    capacity_bonus: float = Field(default=0.0, ge=0)
    drama_chance: float = Field(default=0.0, ge=0, le=1)


class Faction(BaseModel):
    """Static description of one faction."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    values: FactionValues
    modifiers: FactionModifiers = Field(default_factory=FactionModifiers)
    traits: tuple[str, ...] = Field(default_factory=tuple)


class FactionChoice(BaseModel):
    """One option of a faction event and everything it changes."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    standing_changes: dict[str, int] = Field(default_factory=dict)
    reputation_change: int = 0
    stress_change: int = 0
    money_change: int = 0


class FactionEvent(BaseModel):
    """A queued decision the player must make about a faction."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    kind: FactionEventKind
    faction_ids: tuple[str, ...] = Field(..., min_length=1)
    title: str
    description: str
    choices: tuple[FactionChoice, ...] = Field(..., min_length=1)
    resolved: bool = False
    chosen: str | None = None

    def choice(self, choice_id: str) -> FactionChoice:
        """Return the option called *choice_id*."""
        for option in self.choices:
            if option.identifier == choice_id:
                return option
        msg = f"Event '{self.identifier}' has no choice '{choice_id}'."
        raise UnknownFactionChoiceError(msg)


DEFAULT_FACTIONS: tuple[Faction, ...] = (
    Faction(
        identifier="diy-purists",
        name="The DIY Purists Collective",
        description="No sponsors, no masters, no money.",
        values=FactionValues(
            authenticity=100,
            technical_skill=30,
            popularity=-50,
            tradition=80,
            innovation=40,
        ),
        modifiers=FactionModifiers(
            fan_bonus=0.8,
            reputation_multiplier=1.5,
            money_modifier=-0.3,
            drama_chance=0.2,
        ),
        traits=("authentic", "anti-commercial", "community-focused"),
    ),
    Faction(
        identifier="metal-elite",
        name="Metal Elite",
        description="Technical prowess above all. Shredding is a way of life.",
        values=FactionValues(
            authenticity=60,
            technical_skill=100,
            popularity=40,
            tradition=70,
            innovation=50,
        ),
        modifiers=FactionModifiers(
            fan_bonus=1.2,
            reputation_multiplier=1.1,
            money_modifier=0.1,
            capacity_bonus=0.1,
            drama_chance=0.3,
        ),
        traits=("technical", "elitist", "competitive"),
    ),
    Faction(
        identifier="indie-crowd",
        name="Indie Crowd",
        description="Art for art's sake. Aesthetic and emotion over everything.",
        values=FactionValues(
            authenticity=70,
            technical_skill=50,
            popularity=60,
            tradition=30,
            innovation=90,
        ),
        modifiers=FactionModifiers(
            fan_bonus=1.0,
            reputation_multiplier=1.2,
            drama_chance=0.4,
        ),
        traits=("artistic", "experimental", "trendy"),
    ),
    Faction(
        identifier="old-guard",
        name="Old Guard",
        description="Keepers of the flame. Respect the history or get out.",
        values=FactionValues(
            authenticity=80,
            technical_skill=70,
            popularity=20,
            tradition=100,
            innovation=10,
        ),
        modifiers=FactionModifiers(
            fan_bonus=0.9,
            reputation_multiplier=1.3,
            money_modifier=-0.1,
            capacity_bonus=0.2,
            drama_chance=0.5,
        ),
        traits=("traditional", "gatekeeping", "respected"),
    ),
    Faction(
        identifier="new-wave",
        name="New Wave",
        description="Breaking boundaries and mixing genres. The future is now.",
        values=FactionValues(
            authenticity=50,
            technical_skill=60,
            popularity=80,
            tradition=20,
            innovation=100,
        ),
        modifiers=FactionModifiers(
            fan_bonus=1.3,
            reputation_multiplier=0.9,
            money_modifier=0.2,
            drama_chance=0.6,
        ),
        traits=("innovative", "crossover", "polarizing"),
    ),
)

DEFAULT_RELATIONSHIPS: dict[tuple[str, str], int] = {
    ("diy-purists", "metal-elite"): -30,
    ("diy-purists", "new-wave"): -70,
    ("diy-purists", "old-guard"): 50,
    ("metal-elite", "indie-crowd"): -40,
    ("old-guard", "new-wave"): -80,
    ("indie-crowd", "new-wave"): 60,
}


def _pair(first: str, second: str) -> tuple[str, str]:
    return (first, second) if first <= second else (second, first)


class FactionGraph:
    """Owns the faction catalog, the relationship matrix and player standings.

    Relationships are symmetric and stored once per unordered pair. Standings
    are integers clamped to ``[-100, 100]``. Events are queued and only ever
    applied through :meth:`apply_choice`.
    """

    def __init__(
        self,
        factions: Sequence[Faction] = DEFAULT_FACTIONS,
        relationships: Mapping[tuple[str, str], int] | None = None,
        *,
        standings: Mapping[str, int] | None = None,
        controlled_venues: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._factions: dict[str, Faction] = {
            faction.identifier: faction for faction in factions
        }
        self._relationships: dict[tuple[str, str], int] = {}
        rel_source = DEFAULT_RELATIONSHIPS if relationships is None else relationships
        for (first, second), value in rel_source.items():
            if first not in self._factions or second not in self._factions:
                continue
            self.set_relationship(first, second, value)
        self._standings: dict[str, int] = dict.fromkeys(self._factions, 0)
        for faction_id, value in (standings or {}).items():
            if faction_id in self._standings:
                self._standings[faction_id] = int(
                    clamp(value, STANDING_MIN, STANDING_MAX)
                )
        self._members: dict[str, list[str]] = {key: [] for key in self._factions}
        self._controlled: dict[str, set[str]] = {key: set() for key in self._factions}
        for faction_id, venue_ids in (controlled_venues or {}).items():
            self._require(faction_id)
            self._controlled[faction_id].update(venue_ids)
        self._events: dict[str, FactionEvent] = {}
        self._event_counter = 0

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------
    @property
    def factions(self) -> tuple[Faction, ...]:
        """Return the catalog in declaration order."""
        return tuple(self._factions.values())

    def faction(self, faction_id: str) -> Faction:
        """Return the faction called *faction_id*."""
        return self._require(faction_id)

    def standing(self, faction_id: str) -> int:
        """Return the player's standing with *faction_id*."""
        self._require(faction_id)
        return self._standings[faction_id]

    def standings(self) -> dict[str, int]:
        """Return a copy of every standing."""
        return dict(self._standings)

    def relationship(self, first: str, second: str) -> int:
        """Return the symmetric relationship between two factions."""
        if first == second:
            return 100
        return self._relationships.get(_pair(first, second), 0)

    def controls_venue(self, faction_id: str, venue_id: str) -> bool:
        """Whether *faction_id* controls the venue."""
        return venue_id in self._controlled.get(faction_id, set())

    def members(self, faction_id: str) -> tuple[str, ...]:
        """Return the performer ids that joined *faction_id*."""
        self._require(faction_id)
        return tuple(self._members[faction_id])

    def all_faction_data(self) -> list[dict[str, Any]]:
        """Return a serialisable view of every faction for display."""
        data: list[dict[str, Any]] = []
        for faction_id, faction in self._factions.items():
            entry = faction.model_dump(mode="json")
            entry["player_standing"] = self._standings[faction_id]
            entry["member_performers"] = list(self._members[faction_id])
            entry["controlled_venues"] = sorted(self._controlled[faction_id])
            entry["relationships"] = {
                other: self.relationship(faction_id, other)
                for other in self._factions
                if other != faction_id
            }
            data.append(entry)
        return data

    def pending_events(self) -> list[FactionEvent]:
        """Return events still waiting for a choice, oldest first."""
        return [event for event in self._events.values() if not event.resolved]

    def event(self, event_id: str) -> FactionEvent:
        """Return the event called *event_id*."""
        try:
            return self._events[event_id]
        except KeyError as exc:
            msg = f"Unknown faction event '{event_id}'."
            raise UnknownFactionEventError(msg) from exc

    # ------------------------------------------------------------------
    # Alignment and modifiers
    # ------------------------------------------------------------------
    def alignment(self, performer: Performer, faction_id: str) -> float:
        """Return how well *performer* matches the faction's values, 0..100."""
        faction = self._require(faction_id)
        values = faction.values
        authenticity = performer.stat(PerformerStat.AUTHENTICITY)
        skill = performer.stat(PerformerStat.TECHNICAL_SKILL)
        popularity = performer.stat(PerformerStat.POPULARITY)

        score = 0.3 * (100 - abs(authenticity - values.authenticity))
        score += 0.2 * (100 - abs(skill - values.technical_skill))
        if values.popularity < 0:
            popularity_term = 100 - popularity
        else:
            popularity_term = 100 - abs(popularity - values.popularity)
        score += 0.2 * popularity_term
        score += 10 * sum(1 for tag in performer.trait_tags if tag in faction.traits)
        return clamp(score, 0, 100)

    def show_modifiers(self, performer: Performer, venue: Venue) -> EffectBundle:
        """Return the combined faction bundle for a show.

        A faction that likes both the player and the performer lends its
        bonuses, amplified. An aligned faction the player has alienated
        applies a penalty instead. Factions compose multiplicatively.
        """
        bundle = EffectBundle.neutral(source="factions")
        for faction_id, faction in self._factions.items():
            standing = self._standings[faction_id]
            if HOSTILE_STANDING <= standing <= FAVOURED_STANDING:
                continue
            if self.alignment(performer, faction_id) <= ALIGNED_THRESHOLD:
                continue
            modifiers = faction.modifiers
            if standing > FAVOURED_STANDING:
                bundle = bundle.scale(EffectTarget.FANS, modifiers.fan_bonus * 1.2)
                bundle = bundle.scale(
                    EffectTarget.REPUTATION, modifiers.reputation_multiplier * 1.1
                )
                bundle = bundle.scale(
                    EffectTarget.REVENUE, 1 + modifiers.money_modifier * 0.5
                )
                if modifiers.capacity_bonus and self.controls_venue(
                    faction_id, venue.identifier
                ):
                    bundle = bundle.scale(
                        EffectTarget.CAPACITY, 1 + modifiers.capacity_bonus
                    )
            else:
                bundle = bundle.scale(EffectTarget.FANS, 0.7)
                bundle = bundle.scale(EffectTarget.REPUTATION, 0.8)
                bundle = bundle.add(EffectTarget.INCIDENT_PROBABILITY, 0.3)
        return bundle

    def is_performer_favored(self, performer: Performer, faction_id: str) -> bool:
        """Whether the faction likes both the performer and the player."""
        return (
            self.alignment(performer, faction_id) > ALIGNED_THRESHOLD
            and self.standing(faction_id) > 20
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def set_relationship(self, first: str, second: str, value: int) -> None:
        """Set the symmetric relationship between two distinct factions."""
        self._require(first)
        self._require(second)
        if first == second:
            msg = "A faction has no relationship with itself."
            raise ValueError(msg)
        self._relationships[_pair(first, second)] = int(clamp(value, -100, 100))

    def adjust_standing(self, faction_id: str, delta: int) -> dict[str, int]:
        """Shift the player's standing and cascade to strongly related factions.

        A change larger than 5 propagates 30% of itself, truncated toward
        zero, to every faction whose relationship exceeds 50 in magnitude:
        allies move the same way, rivals the opposite way. The propagated
        changes never cascade further. Returns the applied change per faction.
        """
        self._require(faction_id)
        applied = {faction_id: self._shift(faction_id, delta)}
        if abs(delta) <= CASCADE_THRESHOLD:
            return applied

        for other in self._factions:
            if other == faction_id:
                continue
            relationship = self.relationship(faction_id, other)
            if abs(relationship) <= CASCADE_RELATIONSHIP_THRESHOLD:
                continue
            cascade = int(delta * CASCADE_RATIO)
            if relationship < 0:
                cascade = -cascade
            if cascade:
                applied[other] = applied.get(other, 0) + self._shift(other, cascade)
        return applied

    def update_standings_from_show(
        self, performer: Performer, venue: Venue, *, success: bool
    ) -> list[FactionEvent]:
        """Move standings after a show and return any newly raised events."""
        for faction_id in self._factions:
            alignment = self.alignment(performer, faction_id)
            change = 0
            if alignment > ALIGNED_THRESHOLD:
                change = 5 if success else -2
            elif alignment < MISALIGNED_THRESHOLD:
                change = -3 if success else 1
            if self.controls_venue(faction_id, venue.identifier):
                change += 3 if success else -5
            if change:
                self.adjust_standing(faction_id, change)
        return self.check_for_events()

    def assign_performer(self, performer: Performer) -> str | None:
        """Enrol *performer* in the best aligned faction above 60, if any."""
        best: str | None = None
        best_alignment = 0.0
        for faction_id in self._factions:
            alignment = self.alignment(performer, faction_id)
            if alignment > best_alignment and alignment > MEMBERSHIP_THRESHOLD:
                best = faction_id
                best_alignment = alignment
        if best is not None and performer.identifier not in self._members[best]:
            self._members[best].append(performer.identifier)
        return best

    def assign_venue(self, faction_id: str, venue_id: str) -> None:
        """Hand control of a venue to *faction_id*."""
        self._require(faction_id)
        for controlled in self._controlled.values():
            controlled.discard(venue_id)
        self._controlled[faction_id].add(venue_id)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def check_for_events(self) -> list[FactionEvent]:
        """Scan standings and queue any new conflict, alliance or drama events."""
        raised: list[FactionEvent] = []
        pending_keys = {
            (event.kind, event.faction_ids) for event in self.pending_events()
        }

        for first, second in combinations(self._factions, 2):
            if self.relationship(first, second) >= CONFLICT_RELATIONSHIP:
                continue
            if (
                self._standings[first] > CONFLICT_STANDING
                and self._standings[second] > CONFLICT_STANDING
                and (FactionEventKind.CONFLICT, (first, second)) not in pending_keys
            ):
                raised.append(self._conflict_event(first, second))

        for faction_id, standing in self._standings.items():
            key = (faction_id,)
            if (
                standing > ALLIANCE_STANDING
                and (FactionEventKind.ALLIANCE, key) not in pending_keys
            ):
                raised.append(self._alliance_event(faction_id))
            elif (
                standing < HOSTILE_STANDING
                and (FactionEventKind.DRAMA, key) not in pending_keys
            ):
                raised.append(self._drama_event(faction_id))

        for event in raised:
            self._events[event.identifier] = event
            logger.info("Faction event raised: %s", event.identifier)
        return raised

    def apply_choice(self, event_id: str, choice_id: str) -> FactionChoice:
        """Apply a choice to a pending event exactly once.

        Returns the chosen option so the caller can apply its resource
        changes. Re-applying a resolved event raises
        :class:`FactionEventResolvedError` and changes nothing.
        """
        event = self.event(event_id)
        if event.resolved:
            msg = f"Faction event '{event_id}' has already been resolved."
            raise FactionEventResolvedError(msg)
        choice = event.choice(choice_id)
        for faction_id, change in choice.standing_changes.items():
            self.adjust_standing(faction_id, change)
        self._events[event_id] = event.model_copy(
            update={"resolved": True, "chosen": choice_id}
        )
        return choice

    def restore_events(self, events: Iterable[FactionEvent]) -> None:
        """Reload previously raised events, e.g. from a snapshot."""
        for event in events:
            if not set(event.faction_ids) <= self._factions.keys():
                logger.warning(
                    "Dropping event %s with unknown faction", event.identifier
                )
                continue
            self._events[event.identifier] = event
            suffix = event.identifier.rsplit("-", 1)[-1]
            if suffix.isdigit():
                self._event_counter = max(self._event_counter, int(suffix))

    def all_events(self) -> list[FactionEvent]:
        """Return every raised event, resolved ones included."""
        return list(self._events.values())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require(self, faction_id: str) -> Faction:
        try:
            return self._factions[faction_id]
        except KeyError as exc:
            msg = f"Unknown faction '{faction_id}'."
            raise UnknownFactionError(msg) from exc

    def _shift(self, faction_id: str, delta: int) -> int:
        current = self._standings[faction_id]
        updated = int(clamp(current + delta, STANDING_MIN, STANDING_MAX))
        self._standings[faction_id] = updated
        return updated - current

    def _next_event_id(self, kind: FactionEventKind, *faction_ids: str) -> str:
        self._event_counter += 1
        return f"{kind.value}-{'-'.join(faction_ids)}-{self._event_counter}"

    def _conflict_event(self, first: str, second: str) -> FactionEvent:
        a = self._factions[first]
        b = self._factions[second]
        return FactionEvent(
            identifier=self._next_event_id(FactionEventKind.CONFLICT, first, second),
            kind=FactionEventKind.CONFLICT,
            faction_ids=(first, second),
            title=f"{a.name} vs {b.name}",
            description=(
                f"Tensions are rising between {a.name} and {b.name}. "
                "You must choose a side or try to stay neutral."
            ),
            choices=(
                FactionChoice(
                    identifier="side-with-1",
                    text=f"Support {a.name}",
                    standing_changes={first: 20, second: -30},
                    reputation_change=5,
                ),
                FactionChoice(
                    identifier="side-with-2",
                    text=f"Support {b.name}",
                    standing_changes={first: -30, second: 20},
                    reputation_change=5,
                ),
                FactionChoice(
                    identifier="stay-neutral",
                    text="Try to stay neutral",
                    standing_changes={first: -10, second: -10},
                    reputation_change=-5,
                    stress_change=10,
                ),
            ),
        )

    def _alliance_event(self, faction_id: str) -> FactionEvent:
        faction = self._factions[faction_id]
        return FactionEvent(
            identifier=self._next_event_id(FactionEventKind.ALLIANCE, faction_id),
            kind=FactionEventKind.ALLIANCE,
            faction_ids=(faction_id,),
            title=f"{faction.name} want you in",
            description=(
                f"{faction.name} offer to promote your shows to their people."
            ),
            choices=(
                FactionChoice(
                    identifier="accept",
                    text="Accept their backing",
                    standing_changes={faction_id: 5},
                    reputation_change=10,
                    stress_change=5,
                ),
                FactionChoice(
                    identifier="decline",
                    text="Stay independent",
                    standing_changes={faction_id: -5},
                ),
            ),
        )

    def _drama_event(self, faction_id: str) -> FactionEvent:
        faction = self._factions[faction_id]
        return FactionEvent(
            identifier=self._next_event_id(FactionEventKind.DRAMA, faction_id),
            kind=FactionEventKind.DRAMA,
            faction_ids=(faction_id,),
            title=f"{faction.name} are talking trash",
            description=(
                f"{faction.name} are badmouthing your shows all over town."
            ),
            choices=(
                FactionChoice(
                    identifier="apologize",
                    text="Publicly apologize",
                    standing_changes={faction_id: 15},
                    reputation_change=-5,
                ),
                FactionChoice(
                    identifier="ignore",
                    text="Ignore them",
                    standing_changes={faction_id: -5},
                    stress_change=5,
                ),
            ),
        )


__all__ = [
    "DEFAULT_FACTIONS",
    "DEFAULT_RELATIONSHIPS",
    "Faction",
    "FactionChoice",
    "FactionEvent",
    "FactionEventError",
    "FactionEventKind",
    "FactionEventResolvedError",
    "FactionGraph",
    "FactionModifiers",
    "FactionValues",
    "UnknownFactionChoiceError",
    "UnknownFactionError",
    "UnknownFactionEventError",
]
