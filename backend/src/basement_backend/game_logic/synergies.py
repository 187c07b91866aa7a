"""Combo rules that reward the right lineup in the right room.

Each rule is a conjunction of declarative conditions over the lineup, the
venue and the player's context. The engine evaluates every registered rule,
returns the ones that fire ordered by rarity, and tracks which combos the
player has discovered and how often each one has fired.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence  # noqa: TC003
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from basement_backend.shared.enums import (
    Genre,
    PerformerStat,
    SynergyTier,
    VenueAmenity,
    VenueStat,
    VenueType,
)
from basement_backend.shared.value_objects import EffectBundle, EffectTarget

if TYPE_CHECKING:
    from basement_backend.game_logic.state import Performer, Venue

logger = logging.getLogger(__name__)


class ConditionField(StrEnum):
    """What a condition inspects."""

    GENRE = "genre"
    TRAIT = "trait"
    PERFORMER_STAT = "performer_stat"
    HOMETOWN = "hometown"
    LINEUP_SIZE = "lineup_size"
    LINEUP_GENRES = "lineup_genres"
    VENUE_TYPE = "venue_type"
    VENUE_STAT = "venue_stat"
    VENUE_CAPACITY = "venue_capacity"
    VENUE_AMENITY = "venue_amenity"
    DISTRICT = "district"
    REPUTATION = "reputation"


class ConditionOperator(StrEnum):
    """How the inspected value is compared to the expected one."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    INCLUDES = "includes"
    EXCLUDES = "excludes"
    INCLUDES_ALL = "includes_all"


class Quantifier(StrEnum):
    """Which performers of the lineup a per-performer condition must hold for."""

    HEADLINER = "headliner"
    ANY = "any"
    ALL = "all"


class SynergyEffectKind(StrEnum):
    """Closed set of extra effects a combo may carry."""

    MULTIPLY_REVENUE = "multiply_revenue"
    MULTIPLY_FANS = "multiply_fans"
    MULTIPLY_REPUTATION = "multiply_reputation"
    CHAIN_TRIGGER = "chain_trigger"
    UNLOCK_CONTENT = "unlock_content"


_PERFORMER_FIELDS = frozenset(
    {
        ConditionField.GENRE,
        ConditionField.TRAIT,
        ConditionField.PERFORMER_STAT,
        ConditionField.HOMETOWN,
    }
)
_NUMERIC_EFFECTS = frozenset(
    {
        SynergyEffectKind.MULTIPLY_REVENUE,
        SynergyEffectKind.MULTIPLY_FANS,
        SynergyEffectKind.MULTIPLY_REPUTATION,
    }
)
_EFFECT_TARGETS: dict[SynergyEffectKind, EffectTarget] = {
    SynergyEffectKind.MULTIPLY_REVENUE: EffectTarget.REVENUE,
    SynergyEffectKind.MULTIPLY_FANS: EffectTarget.FANS,
    SynergyEffectKind.MULTIPLY_REPUTATION: EffectTarget.REPUTATION,
}


class SynergyContext(BaseModel):
    """Player state a combo may depend on."""

    model_config = ConfigDict(frozen=True)

    turn: int = Field(default=0, ge=0)
    reputation: int = Field(default=0, ge=0)


class SynergyCondition(BaseModel):
    """A single predicate of a combo rule."""

    model_config = ConfigDict(frozen=True)

    field: ConditionField
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: Any = None
    stat: PerformerStat | VenueStat | None = None
    quantifier: Quantifier = Quantifier.ANY

    @model_validator(mode="after")
    def _check_stat(self) -> SynergyCondition:
        """Stat conditions must name the stat axis they inspect."""
        if self.field is ConditionField.PERFORMER_STAT and not isinstance(
            self.stat, PerformerStat
        ):
            msg = "Performer stat conditions require a performer stat axis."
            raise ValueError(msg)
        if self.field is ConditionField.VENUE_STAT and not isinstance(
            self.stat, VenueStat
        ):
            msg = "Venue stat conditions require a venue stat axis."
            raise ValueError(msg)
        return self

    def holds(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        context: SynergyContext,
    ) -> bool:
        """Return whether the condition is satisfied."""
        if self.field in _PERFORMER_FIELDS:
            if not lineup:
                return False
            candidates = (
                [lineup[0]] if self.quantifier is Quantifier.HEADLINER else lineup
            )
            checks = (
                _compare(
                    self._performer_value(performer, venue), self.operator, self.value
                )
                for performer in candidates
            )
            if self.quantifier is Quantifier.ALL:
                return all(checks)
            return any(checks)
        actual = self._scene_value(lineup, venue, context)
        return _compare(actual, self.operator, self.value)

    def _performer_value(self, performer: Performer, venue: Venue) -> Any:
        if self.field is ConditionField.GENRE:
            return performer.genre
        if self.field is ConditionField.TRAIT:
            return performer.trait_tags
        if self.field is ConditionField.PERFORMER_STAT:
            return performer.stat(self.stat)  # type: ignore[arg-type]
        return performer.hometown is not None and performer.hometown in (
            venue.location.district_id,
            venue.location.name,
        )

    def _scene_value(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        context: SynergyContext,
    ) -> Any:
        scene_values: dict[ConditionField, Any] = {
            ConditionField.LINEUP_SIZE: len(lineup),
            ConditionField.LINEUP_GENRES: {performer.genre for performer in lineup},
            ConditionField.VENUE_TYPE: venue.venue_type,
            ConditionField.VENUE_CAPACITY: venue.capacity,
            ConditionField.VENUE_AMENITY: {
                amenity for amenity in VenueAmenity if venue.has_amenity(amenity)
            },
            ConditionField.DISTRICT: venue.location.district_id,
            ConditionField.REPUTATION: context.reputation,
        }
        if self.field is ConditionField.VENUE_STAT:
            return venue.stat(self.stat)  # type: ignore[arg-type]
        return scene_values[self.field]


def _compare(actual: Any, operator: ConditionOperator, expected: Any) -> bool:
    if operator is ConditionOperator.EQUALS:
        return actual == expected
    if operator is ConditionOperator.NOT_EQUALS:
        return actual != expected
    if operator is ConditionOperator.IN:
        return actual in expected
    if operator is ConditionOperator.GREATER_THAN:
        return actual > expected
    if operator is ConditionOperator.LESS_THAN:
        return actual < expected
    if operator is ConditionOperator.INCLUDES:
        return expected in actual
    if operator is ConditionOperator.EXCLUDES:
        return expected not in actual
    return all(item in actual for item in expected)


class SynergyEffect(BaseModel):
    """An extra effect a combo applies beyond its base multiplier."""

    model_config = ConfigDict(frozen=True)

    kind: SynergyEffectKind
    value: float | str
    description: str = ""

    @model_validator(mode="after")
    def _check_value(self) -> SynergyEffect:
        """Multiplying effects need a non-negative number, others a target id."""
        if self.kind in _NUMERIC_EFFECTS:
            if isinstance(self.value, str) or self.value < 0:
                msg = f"{self.kind} requires a non-negative numeric value."
                raise ValueError(msg)
        elif not isinstance(self.value, str) or not self.value:
            msg = f"{self.kind} requires a target identifier."
            raise ValueError(msg)
        return self


class SynergyRule(BaseModel):
    """A named combo: all conditions must hold for it to fire."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    tier: SynergyTier = SynergyTier.COMMON
    multiplier: float = Field(default=1.0, gt=0)
    reputation_bonus: int = 0
    conditions: tuple[SynergyCondition, ...] = Field(default_factory=tuple)
    effects: tuple[SynergyEffect, ...] = Field(default_factory=tuple)
    chain_only: bool = False

    def matches(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        context: SynergyContext,
    ) -> bool:
        """Return whether every condition holds, stopping at the first miss."""
        return all(
            condition.holds(lineup, venue, context) for condition in self.conditions
        )


class SynergyActivation(BaseModel):
    """A combo that fired for a specific show."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    name: str
    description: str
    tier: SynergyTier
    multiplier: float
    reputation_bonus: int
    effects: tuple[SynergyEffect, ...] = Field(default_factory=tuple)
    first_discovery: bool = False
    chained_from: str | None = None


class CodexEntry(BaseModel):
    """Display record for the combo codex."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    name: str
    description: str
    tier: SynergyTier
    trigger_count: int = Field(..., ge=0)


class DuplicateSynergyError(ValueError):
    """Raised when a rule id is registered twice."""


class SynergyEngine:
    """Registry and evaluator of combo rules with discovery tracking."""

    def __init__(self, rules: Iterable[SynergyRule] | None = None) -> None:
        self._rules: dict[str, SynergyRule] = {}
        self._discovered: set[str] = set()
        self._trigger_counts: dict[str, int] = {}
        self._unlocked: list[str] = []
        for rule in DEFAULT_SYNERGIES if rules is None else rules:
            self.register(rule)

    def register(self, rule: SynergyRule) -> None:
        """Add *rule* to the registry."""
        if rule.identifier in self._rules:
            msg = f"Synergy '{rule.identifier}' is already registered."
            raise DuplicateSynergyError(msg)
        self._rules[rule.identifier] = rule

    @property
    def rules(self) -> tuple[SynergyRule, ...]:
        """Return every registered rule in registration order."""
        return tuple(self._rules.values())

    def evaluate(
        self,
        lineup: Sequence[Performer],
        venue: Venue,
        context: SynergyContext | None = None,
        *,
        record: bool = True,
    ) -> list[SynergyActivation]:
        """Return the combos that fire, rarest first.

        Chain triggers activate their chain-only target one hop deep when the
        target's own conditions hold. With ``record=False`` discovery and
        trigger counters are left untouched so the result can be committed
        later through :meth:`record_triggers`.
        """
        context = context or SynergyContext()
        activations: list[SynergyActivation] = []
        fired: set[str] = set()
        for rule in self._rules.values():
            if rule.chain_only or not rule.matches(lineup, venue, context):
                continue
            activations.append(self._activation(rule))
            fired.add(rule.identifier)

        for activation in list(activations):
            for effect in activation.effects:
                if effect.kind is not SynergyEffectKind.CHAIN_TRIGGER:
                    continue
                target = self._rules.get(str(effect.value))
                if target is None or target.identifier in fired:
                    continue
                if not target.matches(lineup, venue, context):
                    continue
                activations.append(
                    self._activation(target, chained_from=activation.identifier)
                )
                fired.add(target.identifier)

        activations.sort(key=lambda item: item.tier.rank, reverse=True)
        if record:
            self.record_triggers(activations)
        return activations

    def record_triggers(self, activations: Iterable[SynergyActivation]) -> list[str]:
        """Commit discovery, trigger counts and unlocks; return new discoveries."""
        discovered: list[str] = []
        for activation in activations:
            if activation.identifier not in self._rules:
                continue
            self._trigger_counts[activation.identifier] = (
                self._trigger_counts.get(activation.identifier, 0) + 1
            )
            if activation.identifier not in self._discovered:
                self._discovered.add(activation.identifier)
                discovered.append(activation.identifier)
                logger.info("Synergy discovered: %s", activation.identifier)
            for effect in activation.effects:
                if (
                    effect.kind is SynergyEffectKind.UNLOCK_CONTENT
                    and effect.value not in self._unlocked
                ):
                    self._unlocked.append(str(effect.value))
        return discovered

    @staticmethod
    def total_multiplier(activations: Iterable[SynergyActivation]) -> float:
        """Return the product of the combo multipliers; stacking is unbounded."""
        total = 1.0
        for activation in activations:
            total *= activation.multiplier
        return total

    @staticmethod
    def total_reputation_bonus(activations: Iterable[SynergyActivation]) -> int:
        """Return the summed flat reputation bonus."""
        return sum(activation.reputation_bonus for activation in activations)

    @classmethod
    def to_bundle(cls, activations: Sequence[SynergyActivation]) -> EffectBundle:
        """Translate fired combos into an effect bundle.

        The combo multiplier scales attendance, the reputation bonus is
        additive and named multiplying effects scale their own target.
        """
        bundle = EffectBundle.neutral(source="synergies")
        bundle = bundle.scale(
            EffectTarget.ATTENDANCE, cls.total_multiplier(activations)
        )
        bonus = cls.total_reputation_bonus(activations)
        if bonus:
            bundle = bundle.add(EffectTarget.REPUTATION, bonus)
        for activation in activations:
            for effect in activation.effects:
                target = _EFFECT_TARGETS.get(effect.kind)
                if target is not None:
                    bundle = bundle.scale(target, float(effect.value))
        return bundle

    def is_discovered(self, identifier: str) -> bool:
        """Whether the combo has fired at least once."""
        return identifier in self._discovered

    def trigger_count(self, identifier: str) -> int:
        """Return how often the combo has fired."""
        return self._trigger_counts.get(identifier, 0)

    def trigger_counts(self) -> dict[str, int]:
        """Return a copy of all trigger counters."""
        return dict(self._trigger_counts)

    def discovered_synergies(self) -> list[CodexEntry]:
        """Return codex entries for every discovered combo, rarest first."""
        entries = [
            CodexEntry(
                identifier=rule.identifier,
                name=rule.name,
                description=rule.description,
                tier=rule.tier,
                trigger_count=self.trigger_count(rule.identifier),
            )
            for rule in self._rules.values()
            if rule.identifier in self._discovered
        ]
        entries.sort(key=lambda entry: entry.tier.rank, reverse=True)
        return entries

    def undiscovered_count(self) -> int:
        """Return how many registered combos are still unknown."""
        return sum(1 for rule in self._rules if rule not in self._discovered)

    def codex_progress(self) -> dict[SynergyTier, tuple[int, int]]:
        """Return ``(discovered, total)`` per tier."""
        progress: dict[SynergyTier, tuple[int, int]] = {}
        for tier in SynergyTier:
            in_tier = [rule for rule in self._rules.values() if rule.tier is tier]
            found = sum(1 for rule in in_tier if rule.identifier in self._discovered)
            progress[tier] = (found, len(in_tier))
        return progress

    @property
    def unlocked_content(self) -> tuple[str, ...]:
        """Return unlocked content ids in unlock order."""
        return tuple(self._unlocked)

    def restore(
        self,
        trigger_counts: dict[str, int],
        unlocked: Iterable[str] = (),
    ) -> None:
        """Reload discovery state, ignoring ids that are no longer registered."""
        for identifier, count in trigger_counts.items():
            if identifier not in self._rules:
                logger.warning("Ignoring unknown synergy '%s' on restore", identifier)
                continue
            self._trigger_counts[identifier] = max(count, 0)
            if count > 0:
                self._discovered.add(identifier)
        for content in unlocked:
            if content not in self._unlocked:
                self._unlocked.append(content)

    def _activation(
        self, rule: SynergyRule, *, chained_from: str | None = None
    ) -> SynergyActivation:
        return SynergyActivation(
            identifier=rule.identifier,
            name=rule.name,
            description=rule.description,
            tier=rule.tier,
            multiplier=rule.multiplier,
            reputation_bonus=rule.reputation_bonus,
            effects=rule.effects,
            first_discovery=rule.identifier not in self._discovered,
            chained_from=chained_from,
        )


def _when(
    field: ConditionField, value: Any = None, **options: Any
) -> SynergyCondition:
    return SynergyCondition(field=field, value=value, **options)


def _effect(
    kind: SynergyEffectKind, value: float | str, description: str = ""
) -> SynergyEffect:
    return SynergyEffect(kind=kind, value=value, description=description)


DEFAULT_SYNERGIES: tuple[SynergyRule, ...] = (
    SynergyRule(
        identifier="diy-authentic",
        name="True DIY",
        description="Authentic underground vibes double the impact.",
        tier=SynergyTier.RARE,
        multiplier=2.0,
        reputation_bonus=10,
        conditions=(
            _when(
                ConditionField.PERFORMER_STAT,
                90,
                stat=PerformerStat.AUTHENTICITY,
                operator=ConditionOperator.GREATER_THAN,
                quantifier=Quantifier.ALL,
            ),
            _when(
                ConditionField.VENUE_STAT,
                90,
                stat=VenueStat.AUTHENTICITY,
                operator=ConditionOperator.GREATER_THAN,
            ),
            _when(
                ConditionField.VENUE_TYPE,
                (VenueType.BASEMENT, VenueType.DIY_SPACE),
                operator=ConditionOperator.IN,
            ),
        ),
    ),
    SynergyRule(
        identifier="genre-match-punk",
        name="Perfect Fit",
        description="Punk bands thrive in this venue.",
        multiplier=1.5,
        reputation_bonus=5,
        conditions=(
            _when(ConditionField.GENRE, Genre.PUNK, quantifier=Quantifier.HEADLINER),
            _when(
                ConditionField.VENUE_TYPE,
                (VenueType.PUNK_CLUB, VenueType.DIY_SPACE),
                operator=ConditionOperator.IN,
            ),
        ),
    ),
    SynergyRule(
        identifier="genre-match-metal",
        name="Perfect Fit",
        description="Metal bands thrive in this venue.",
        multiplier=1.5,
        reputation_bonus=5,
        conditions=(
            _when(ConditionField.GENRE, Genre.METAL, quantifier=Quantifier.HEADLINER),
            _when(
                ConditionField.VENUE_TYPE,
                (VenueType.METAL_VENUE, VenueType.WAREHOUSE),
                operator=ConditionOperator.IN,
            ),
        ),
    ),
    SynergyRule(
        identifier="genre-match-hardcore",
        name="Perfect Fit",
        description="Hardcore bands thrive in this venue.",
        multiplier=1.5,
        reputation_bonus=5,
        conditions=(
            _when(
                ConditionField.GENRE, Genre.HARDCORE, quantifier=Quantifier.HEADLINER
            ),
            _when(
                ConditionField.VENUE_TYPE,
                (VenueType.BASEMENT, VenueType.DIY_SPACE),
                operator=ConditionOperator.IN,
            ),
        ),
    ),
    SynergyRule(
        identifier="hometown-heroes",
        name="Hometown Heroes",
        description="Local support boosts attendance.",
        multiplier=1.3,
        reputation_bonus=3,
        conditions=(
            _when(ConditionField.HOMETOWN, True, quantifier=Quantifier.HEADLINER),
        ),
    ),
    SynergyRule(
        identifier="legendary-pairing",
        name="Legendary Performance",
        description="Master musicians in a proper venue.",
        tier=SynergyTier.LEGENDARY,
        multiplier=1.8,
        reputation_bonus=15,
        conditions=(
            _when(
                ConditionField.PERFORMER_STAT,
                80,
                stat=PerformerStat.TECHNICAL_SKILL,
                operator=ConditionOperator.GREATER_THAN,
                quantifier=Quantifier.HEADLINER,
            ),
            _when(
                ConditionField.PERFORMER_STAT,
                70,
                stat=PerformerStat.POPULARITY,
                operator=ConditionOperator.GREATER_THAN,
                quantifier=Quantifier.HEADLINER,
            ),
            _when(
                ConditionField.VENUE_TYPE,
                (VenueType.CONCERT_HALL, VenueType.THEATER),
                operator=ConditionOperator.IN,
            ),
        ),
    ),
    SynergyRule(
        identifier="chaos-reigns",
        name="Controlled Chaos",
        description="Insane energy in tight quarters creates legendary shows.",
        tier=SynergyTier.RARE,
        multiplier=1.6,
        reputation_bonus=8,
        conditions=(
            _when(
                ConditionField.PERFORMER_STAT,
                85,
                stat=PerformerStat.ENERGY,
                operator=ConditionOperator.GREATER_THAN,
                quantifier=Quantifier.HEADLINER,
            ),
            _when(
                ConditionField.VENUE_CAPACITY, 50, operator=ConditionOperator.LESS_THAN
            ),
        ),
    ),
    SynergyRule(
        identifier="bar-boost",
        name="Thirsty Crowd",
        description="Bar sales through the roof.",
        multiplier=1.2,
        conditions=(
            _when(
                ConditionField.VENUE_AMENITY,
                VenueAmenity.BAR,
                operator=ConditionOperator.INCLUDES,
            ),
            _when(
                ConditionField.PERFORMER_STAT,
                40,
                stat=PerformerStat.POPULARITY,
                operator=ConditionOperator.GREATER_THAN,
                quantifier=Quantifier.HEADLINER,
            ),
            _when(
                ConditionField.TRAIT,
                "youth_crew",
                operator=ConditionOperator.EXCLUDES,
                quantifier=Quantifier.HEADLINER,
            ),
        ),
        effects=(
            _effect(SynergyEffectKind.MULTIPLY_REVENUE, 1.2, "Bar tab overflow"),
        ),
    ),
    SynergyRule(
        identifier="underground-network",
        name="Scene Unity",
        description="Underground bands supporting each other.",
        multiplier=1.4,
        reputation_bonus=6,
        conditions=(
            _when(
                ConditionField.LINEUP_SIZE, 1, operator=ConditionOperator.GREATER_THAN
            ),
            _when(
                ConditionField.PERFORMER_STAT,
                70,
                stat=PerformerStat.AUTHENTICITY,
                operator=ConditionOperator.GREATER_THAN,
                quantifier=Quantifier.ALL,
            ),
            _when(
                ConditionField.PERFORMER_STAT,
                30,
                stat=PerformerStat.POPULARITY,
                operator=ConditionOperator.LESS_THAN,
                quantifier=Quantifier.ALL,
            ),
        ),
    ),
    SynergyRule(
        identifier="punk_basement",
        name="DIY or Die",
        description="Punk in a basement, the way it was meant to be.",
        multiplier=1.5,
        conditions=(
            _when(ConditionField.GENRE, Genre.PUNK),
            _when(ConditionField.VENUE_TYPE, VenueType.BASEMENT),
        ),
        effects=(
            _effect(
                SynergyEffectKind.MULTIPLY_REPUTATION, 2, "Double authenticity gains"
            ),
            _effect(SynergyEffectKind.MULTIPLY_FANS, 1.2, "20% more fans"),
        ),
    ),
    SynergyRule(
        identifier="metal_warehouse",
        name="Industrial Mayhem",
        description="Metal bouncing off warehouse walls.",
        multiplier=1.8,
        conditions=(
            _when(ConditionField.GENRE, Genre.METAL),
            _when(ConditionField.VENUE_TYPE, VenueType.WAREHOUSE),
        ),
        effects=(
            _effect(SynergyEffectKind.MULTIPLY_REVENUE, 1.5, "50% more revenue"),
            _effect(SynergyEffectKind.MULTIPLY_FANS, 1.5, "50% more fans"),
        ),
    ),
    SynergyRule(
        identifier="triple_punk_chaos",
        name="Punk Rock Riot",
        description="Three punk bands, one night, zero rules.",
        tier=SynergyTier.RARE,
        multiplier=3.0,
        conditions=(
            _when(ConditionField.GENRE, Genre.PUNK),
            _when(ConditionField.LINEUP_SIZE, 3),
        ),
        effects=(
            _effect(SynergyEffectKind.MULTIPLY_REVENUE, 2, "Double revenue"),
            _effect(SynergyEffectKind.MULTIPLY_FANS, 3, "Triple fan gain"),
            _effect(
                SynergyEffectKind.CHAIN_TRIGGER,
                "circle_pit_madness",
                "May trigger Circle Pit Madness",
            ),
        ),
    ),
    SynergyRule(
        identifier="doom_dive_depression",
        name="Existential Dread Hour",
        description="Doom in a dive bar. Everyone orders another round.",
        tier=SynergyTier.RARE,
        multiplier=2.5,
        conditions=(
            _when(ConditionField.GENRE, Genre.DOOM),
            _when(ConditionField.VENUE_TYPE, VenueType.DIVE_BAR),
        ),
        effects=(
            _effect(SynergyEffectKind.MULTIPLY_REVENUE, 2.5, "Bar sales skyrocket"),
            _effect(SynergyEffectKind.MULTIPLY_REPUTATION, 3, "Triple authenticity"),
        ),
    ),
    SynergyRule(
        identifier="genre_collision",
        name="Genre Annihilation",
        description="Metal meets experimental and nobody leaves the same.",
        tier=SynergyTier.LEGENDARY,
        multiplier=5.0,
        conditions=(
            _when(
                ConditionField.LINEUP_GENRES,
                (Genre.METAL, Genre.EXPERIMENTAL),
                operator=ConditionOperator.INCLUDES_ALL,
            ),
            _when(
                ConditionField.LINEUP_SIZE, 2, operator=ConditionOperator.GREATER_THAN
            ),
        ),
        effects=(
            _effect(SynergyEffectKind.MULTIPLY_REVENUE, 3, "Triple revenue"),
            _effect(SynergyEffectKind.MULTIPLY_FANS, 5, "5x fan gain"),
            _effect(
                SynergyEffectKind.UNLOCK_CONTENT,
                "new_genre_fusion",
                "Unlocks fusion genre",
            ),
        ),
    ),
    SynergyRule(
        identifier="perfect_storm",
        name="The Perfect Storm",
        description="Three bands, a warehouse, the industrial district.",
        tier=SynergyTier.MYTHIC,
        multiplier=10.0,
        conditions=(
            _when(ConditionField.VENUE_TYPE, VenueType.WAREHOUSE),
            _when(ConditionField.LINEUP_SIZE, 3),
            _when(ConditionField.DISTRICT, "industrial"),
        ),
        effects=(
            _effect(SynergyEffectKind.MULTIPLY_REVENUE, 5, "5x revenue"),
            _effect(SynergyEffectKind.MULTIPLY_FANS, 10, "10x fan gain"),
            _effect(
                SynergyEffectKind.UNLOCK_CONTENT,
                "legendary_venue",
                "Unlocks legendary venue",
            ),
            _effect(
                SynergyEffectKind.CHAIN_TRIGGER,
                "scene_explosion",
                "Triggers Scene Explosion",
            ),
        ),
    ),
    SynergyRule(
        identifier="circle_pit_madness",
        name="Circle Pit Madness",
        description="The pit takes over the whole room.",
        tier=SynergyTier.RARE,
        multiplier=1.5,
        reputation_bonus=5,
        chain_only=True,
        effects=(_effect(SynergyEffectKind.MULTIPLY_FANS, 1.5, "The pit recruits"),),
    ),
    SynergyRule(
        identifier="scene_explosion",
        name="Scene Explosion",
        description="Word spreads across the whole city overnight.",
        tier=SynergyTier.MYTHIC,
        multiplier=2.0,
        reputation_bonus=25,
        chain_only=True,
    ),
)


__all__ = [
    "DEFAULT_SYNERGIES",
    "CodexEntry",
    "ConditionField",
    "ConditionOperator",
    "DuplicateSynergyError",
    "Quantifier",
    "SynergyActivation",
    "SynergyCondition",
    "SynergyContext",
    "SynergyEffect",
    "SynergyEffectKind",
    "SynergyEngine",
    "SynergyRule",
]
