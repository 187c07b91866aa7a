"""Owned, installed and rented gear and the bonuses it lends a venue."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping  # noqa: TC003
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from basement_backend.shared.enums import (
    EquipmentCategory,
    Genre,
    PerformerStat,
    VenueType,
)
from basement_backend.shared.value_objects import EffectBundle, EffectTarget, clamp

if TYPE_CHECKING:
    from basement_backend.game_logic.state import (
        Performer,
        TechnicalRequirement,
        Venue,
    )

logger = logging.getLogger(__name__)

INSTALLED_WEAR_PER_SHOW = 2.0
STORAGE_WEAR_PER_SHOW = 0.5
WORN_CONDITION = 50
WORN_MAINTENANCE_FACTOR = 1.5


class EquipmentEffect(StrEnum):
    """Closed set of bonuses a piece of gear may provide."""

    CAPACITY_BONUS = "capacity_bonus"
    ACOUSTICS_BONUS = "acoustics_bonus"
    ATMOSPHERE_BONUS = "atmosphere_bonus"
    REPUTATION_MULTIPLIER = "reputation_multiplier"
    STRESS_REDUCTION = "stress_reduction"
    INCIDENT_REDUCTION = "incident_reduction"

    @property
    def multiplicative(self) -> bool:
        """Whether the effect folds in as a multiplier rather than a sum."""
        return self is EquipmentEffect.REPUTATION_MULTIPLIER


class InstallationRequirements(BaseModel):
    """Constraints on where a piece of gear can be installed."""

    model_config = ConfigDict(frozen=True)

    min_capacity: int | None = Field(default=None, ge=1)
    venue_types: tuple[VenueType, ...] | None = None


class EquipmentItem(BaseModel):
    """A piece of gear, either a catalog entry or an owned copy of one."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: EquipmentCategory
    quality: int = Field(..., ge=1, le=5)
    condition: float = Field(default=100.0, ge=0, le=100)
    maintenance_cost: int = Field(default=0, ge=0)
    purchase_price: int = Field(default=0, ge=0)
    rental_price: int = Field(default=0, ge=0)
    effects: dict[EquipmentEffect, float] = Field(default_factory=dict)
    requirements: InstallationRequirements = Field(
        default_factory=InstallationRequirements
    )

    def worn(self, amount: float) -> EquipmentItem:
        """Return a copy with condition reduced by *amount*, floored at zero."""
        return self.model_copy(
            update={"condition": clamp(self.condition - amount, 0, 100)}
        )


class AggregatedEquipmentEffects(BaseModel):
    """Condition-scaled sum of every effect present at a venue."""

    model_config = ConfigDict(frozen=True)

    capacity_bonus: float = 0.0
    acoustics_bonus: float = 0.0
    atmosphere_bonus: float = 0.0
    reputation_multiplier: float = 1.0
    stress_reduction: float = 0.0
    incident_reduction: float = 0.0

    def to_bundle(self) -> EffectBundle:
        """Translate gear effects into an effect bundle."""
        bundle = EffectBundle(
            multipliers={
                EffectTarget.CAPACITY: 1 + self.capacity_bonus / 100,
                EffectTarget.ATTENDANCE: 1 + self.atmosphere_bonus / 200,
                EffectTarget.REPUTATION: self.reputation_multiplier,
                EffectTarget.INCIDENT_PROBABILITY: max(
                    0.0, 1 - self.incident_reduction
                ),
            },
            source="equipment",
        )
        if self.acoustics_bonus:
            bundle = bundle.add(EffectTarget.REPUTATION, self.acoustics_bonus / 10)
        if self.stress_reduction:
            bundle = bundle.add(EffectTarget.STRESS, -self.stress_reduction)
        return bundle


class EquipmentActionResult(BaseModel):
    """Outcome of a purchase, rental, installation or repair request."""

    model_config = ConfigDict(frozen=True)

    success: bool
    cost: int = 0
    error: str | None = None


def _item(
    identifier: str,
    name: str,
    category: EquipmentCategory,
    quality: int,
    *,
    maintenance: int,
    purchase: int,
    rental: int,
    effects: Mapping[EquipmentEffect, float],
    min_capacity: int | None = None,
    venue_types: tuple[VenueType, ...] | None = None,
) -> EquipmentItem:
    return EquipmentItem(
        identifier=identifier,
        name=name,
        category=category,
        quality=quality,
        maintenance_cost=maintenance,
        purchase_price=purchase,
        rental_price=rental,
        effects=dict(effects),
        requirements=InstallationRequirements(
            min_capacity=min_capacity, venue_types=venue_types
        ),
    )


_BIG_ROOMS = (
    VenueType.WAREHOUSE,
    VenueType.THEATER,
    VenueType.CONCERT_HALL,
    VenueType.ARENA,
)

EQUIPMENT_CATALOG: dict[str, EquipmentItem] = {
    item.identifier: item
    for item in (
        _item(
            "pa-basic",
            "Basic PA System",
            EquipmentCategory.PA_SYSTEM,
            1,
            maintenance=10,
            purchase=500,
            rental=50,
            effects={
                EquipmentEffect.CAPACITY_BONUS: 10,
                EquipmentEffect.ACOUSTICS_BONUS: 10,
            },
        ),
        _item(
            "pa-pro",
            "Professional PA System",
            EquipmentCategory.PA_SYSTEM,
            3,
            maintenance=30,
            purchase=2000,
            rental=150,
            effects={
                EquipmentEffect.CAPACITY_BONUS: 25,
                EquipmentEffect.ACOUSTICS_BONUS: 30,
                EquipmentEffect.REPUTATION_MULTIPLIER: 1.2,
            },
            min_capacity=100,
        ),
        _item(
            "pa-line-array",
            "Line Array PA System",
            EquipmentCategory.PA_SYSTEM,
            5,
            maintenance=75,
            purchase=8000,
            rental=400,
            effects={
                EquipmentEffect.CAPACITY_BONUS: 50,
                EquipmentEffect.ACOUSTICS_BONUS: 50,
                EquipmentEffect.REPUTATION_MULTIPLIER: 1.5,
                EquipmentEffect.INCIDENT_REDUCTION: 0.3,
            },
            min_capacity=300,
            venue_types=_BIG_ROOMS,
        ),
        _item(
            "lights-basic",
            "Basic Stage Lights",
            EquipmentCategory.LIGHTING,
            1,
            maintenance=5,
            purchase=300,
            rental=30,
            effects={
                EquipmentEffect.ATMOSPHERE_BONUS: 15,
                EquipmentEffect.STRESS_REDUCTION: 5,
            },
        ),
        _item(
            "lights-led",
            "LED Light Show System",
            EquipmentCategory.LIGHTING,
            4,
            maintenance=25,
            purchase=3000,
            rental=200,
            effects={
                EquipmentEffect.ATMOSPHERE_BONUS: 40,
                EquipmentEffect.REPUTATION_MULTIPLIER: 1.3,
                EquipmentEffect.STRESS_REDUCTION: 10,
            },
            min_capacity=150,
        ),
        _item(
            "lights-laser",
            "Laser Light System",
            EquipmentCategory.LIGHTING,
            5,
            maintenance=50,
            purchase=6000,
            rental=350,
            effects={
                EquipmentEffect.ATMOSPHERE_BONUS: 60,
                EquipmentEffect.REPUTATION_MULTIPLIER: 1.4,
                EquipmentEffect.STRESS_REDUCTION: 15,
                EquipmentEffect.CAPACITY_BONUS: 10,
            },
            min_capacity=200,
            venue_types=_BIG_ROOMS,
        ),
        _item(
            "stage-riser",
            "Stage Riser Platform",
            EquipmentCategory.STAGE,
            2,
            maintenance=5,
            purchase=800,
            rental=60,
            effects={
                EquipmentEffect.CAPACITY_BONUS: 15,
                EquipmentEffect.ATMOSPHERE_BONUS: 10,
                EquipmentEffect.INCIDENT_REDUCTION: 0.2,
            },
        ),
        _item(
            "stage-pro",
            "Professional Stage Setup",
            EquipmentCategory.STAGE,
            4,
            maintenance=20,
            purchase=4000,
            rental=250,
            effects={
                EquipmentEffect.CAPACITY_BONUS: 30,
                EquipmentEffect.ATMOSPHERE_BONUS: 25,
                EquipmentEffect.INCIDENT_REDUCTION: 0.4,
                EquipmentEffect.STRESS_REDUCTION: 20,
            },
            min_capacity=150,
        ),
        _item(
            "backline-basic",
            "Basic Backline Gear",
            EquipmentCategory.BACKLINE,
            2,
            maintenance=15,
            purchase=1200,
            rental=80,
            effects={
                EquipmentEffect.STRESS_REDUCTION: 15,
                EquipmentEffect.INCIDENT_REDUCTION: 0.3,
            },
        ),
        _item(
            "backline-pro",
            "Professional Backline",
            EquipmentCategory.BACKLINE,
            4,
            maintenance=40,
            purchase=5000,
            rental=300,
            effects={
                EquipmentEffect.STRESS_REDUCTION: 30,
                EquipmentEffect.INCIDENT_REDUCTION: 0.5,
                EquipmentEffect.REPUTATION_MULTIPLIER: 1.1,
            },
        ),
        _item(
            "recording-basic",
            "Basic Recording Setup",
            EquipmentCategory.RECORDING,
            2,
            maintenance=20,
            purchase=2500,
            rental=100,
            effects={EquipmentEffect.REPUTATION_MULTIPLIER: 1.2},
        ),
        _item(
            "recording-studio",
            "Mobile Studio Setup",
            EquipmentCategory.RECORDING,
            5,
            maintenance=60,
            purchase=10000,
            rental=500,
            effects={
                EquipmentEffect.REPUTATION_MULTIPLIER: 1.5,
                EquipmentEffect.ATMOSPHERE_BONUS: 20,
            },
        ),
    )
}


def required_categories(performer: Performer) -> set[EquipmentCategory]:
    """Return the gear categories a performer's skill and genre demand."""
    required: set[EquipmentCategory] = set()
    skill = performer.stat(PerformerStat.TECHNICAL_SKILL)
    if skill > 60:
        required.add(EquipmentCategory.PA_SYSTEM)
    if skill > 70:
        required.add(EquipmentCategory.LIGHTING)
    if skill > 85:
        required.add(EquipmentCategory.BACKLINE)
    if performer.genre is Genre.METAL:
        required.update({EquipmentCategory.PA_SYSTEM, EquipmentCategory.BACKLINE})
    return required


class EquipmentInventory:
    """Owns every piece of gear the player has bought, installed or rented."""

    def __init__(self, catalog: Mapping[str, EquipmentItem] | None = None) -> None:
        self._catalog = dict(EQUIPMENT_CATALOG if catalog is None else catalog)
        self._owned: dict[str, EquipmentItem] = {}
        self._installed: dict[str, str] = {}
        self._rented: dict[str, list[EquipmentItem]] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def catalog(self) -> tuple[EquipmentItem, ...]:
        """Return every item that can be bought or rented."""
        return tuple(self._catalog.values())

    def owned(self) -> list[EquipmentItem]:
        """Return owned gear in purchase order."""
        return list(self._owned.values())

    def installations(self) -> dict[str, str]:
        """Return a copy of the item id to venue id installation map."""
        return dict(self._installed)

    def rented_for(self, venue_id: str) -> list[EquipmentItem]:
        """Return the gear rented for the next show at *venue_id*."""
        return list(self._rented.get(venue_id, ()))

    def venue_equipment(self, venue_id: str) -> list[EquipmentItem]:
        """Return installed plus rented gear at *venue_id*."""
        installed = [
            self._owned[item_id]
            for item_id, installed_at in self._installed.items()
            if installed_at == venue_id
        ]
        return installed + self.rented_for(venue_id)

    def aggregate_effects(self, venue_id: str) -> AggregatedEquipmentEffects:
        """Combine the gear at a venue, each item scaled by its condition.

        Additive effects are summed after scaling; the multiplicative effect
        folds in as ``1 + (value - 1) * scale`` so a half-broken item delivers
        half of its bonus.
        """
        totals: dict[EquipmentEffect, float] = {
            effect: 0.0 for effect in EquipmentEffect if not effect.multiplicative
        }
        reputation_multiplier = 1.0
        for item in self.venue_equipment(venue_id):
            scale = item.condition / 100
            for effect, value in item.effects.items():
                if effect.multiplicative:
                    reputation_multiplier *= 1 + (value - 1) * scale
                else:
                    totals[effect] += value * scale
        return AggregatedEquipmentEffects(
            capacity_bonus=totals[EquipmentEffect.CAPACITY_BONUS],
            acoustics_bonus=totals[EquipmentEffect.ACOUSTICS_BONUS],
            atmosphere_bonus=totals[EquipmentEffect.ATMOSPHERE_BONUS],
            reputation_multiplier=reputation_multiplier,
            stress_reduction=totals[EquipmentEffect.STRESS_REDUCTION],
            incident_reduction=totals[EquipmentEffect.INCIDENT_REDUCTION],
        )

    def effect_bundle(self, venue_id: str) -> EffectBundle:
        """Return the gear bundle for a show at *venue_id*."""
        return self.aggregate_effects(venue_id).to_bundle()

    def missing_requirements(
        self, performer: Performer, venue: Venue
    ) -> list[EquipmentCategory]:
        """Return categories the performer needs that the venue lacks."""
        available = {item.category for item in self.venue_equipment(venue.identifier)}
        return sorted(
            (
                category
                for category in required_categories(performer)
                if category not in available
            ),
            key=lambda category: category.value,
        )

    def meets_requirement(
        self, venue_id: str, requirement: TechnicalRequirement
    ) -> bool:
        """Whether the venue has gear of the category at the demanded quality."""
        return any(
            item.category is requirement.category
            and item.quality >= requirement.min_quality
            for item in self.venue_equipment(venue_id)
        )

    def upkeep_cost(self) -> int:
        """Return this turn's maintenance bill for owned gear."""
        total = 0.0
        for item in self._owned.values():
            factor = WORN_MAINTENANCE_FACTOR if item.condition < WORN_CONDITION else 1.0
            total += item.maintenance_cost * factor
        return math.floor(total)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def purchase(
        self, item_id: str, budget: int | None = None
    ) -> EquipmentActionResult:
        """Buy a catalog item; the caller pays the returned cost."""
        item = self._catalog.get(item_id)
        if item is None:
            return EquipmentActionResult(success=False, error="Equipment not found")
        if item_id in self._owned:
            return EquipmentActionResult(success=False, error="Already owned")
        if budget is not None and budget < item.purchase_price:
            return EquipmentActionResult(success=False, error="Insufficient funds")
        self._owned[item_id] = item
        return EquipmentActionResult(success=True, cost=item.purchase_price)

    def rent(
        self, item_id: str, venue_id: str, budget: int | None = None
    ) -> EquipmentActionResult:
        """Rent a catalog item for the next show at *venue_id*."""
        item = self._catalog.get(item_id)
        if item is None:
            return EquipmentActionResult(success=False, error="Equipment not found")
        if budget is not None and budget < item.rental_price:
            return EquipmentActionResult(success=False, error="Insufficient funds")
        rented = self._rented.setdefault(venue_id, [])
        if any(existing.category is item.category for existing in rented):
            return EquipmentActionResult(
                success=False, error="Already renting equipment of this type"
            )
        rented.append(item)
        return EquipmentActionResult(success=True, cost=item.rental_price)

    def install(self, item_id: str, venue: Venue) -> EquipmentActionResult:
        """Install owned gear at *venue* after checking its requirements."""
        item = self._owned.get(item_id)
        if item is None:
            return EquipmentActionResult(success=False, error="Equipment not owned")
        installed_at = self._installed.get(item_id)
        if installed_at == venue.identifier:
            return EquipmentActionResult(
                success=False, error="Already installed at this venue"
            )
        if installed_at is not None:
            return EquipmentActionResult(
                success=False, error="Already installed at another venue"
            )
        requirements = item.requirements
        if requirements.min_capacity and venue.capacity < requirements.min_capacity:
            return EquipmentActionResult(
                success=False,
                error=f"Venue too small (needs {requirements.min_capacity}+)",
            )
        allowed = requirements.venue_types
        if allowed and venue.venue_type not in allowed:
            return EquipmentActionResult(success=False, error="Wrong venue type")
        self._installed[item_id] = venue.identifier
        return EquipmentActionResult(success=True)

    def uninstall(self, item_id: str, venue_id: str) -> EquipmentActionResult:
        """Move gear from *venue_id* back into storage."""
        if self._installed.get(item_id) != venue_id:
            return EquipmentActionResult(
                success=False, error="Equipment not found at venue"
            )
        del self._installed[item_id]
        return EquipmentActionResult(success=True)

    def remove_venue(self, venue_id: str) -> None:
        """Return everything at a venue to storage and drop its rentals."""
        for item_id in [
            item_id for item_id, at in self._installed.items() if at == venue_id
        ]:
            del self._installed[item_id]
        self._rented.pop(venue_id, None)

    def degrade(
        self,
        venue_id: str,
        shows: int = 1,
        *,
        installed_wear: float = INSTALLED_WEAR_PER_SHOW,
        storage_wear: float = STORAGE_WEAR_PER_SHOW,
    ) -> None:
        """Apply one show's wear and drop the rentals for *venue_id*."""
        for item_id, item in self._owned.items():
            wear = installed_wear if item_id in self._installed else storage_wear
            self._owned[item_id] = item.worn(wear * shows)
        self._rented.pop(venue_id, None)

    def repair(self, item_id: str, budget: int | None = None) -> EquipmentActionResult:
        """Restore owned gear to full condition; the caller pays the cost."""
        item = self._owned.get(item_id)
        if item is None:
            return EquipmentActionResult(success=False, error="Equipment not owned")
        cost = math.floor((100 - item.condition) * item.purchase_price / 200)
        if budget is not None and budget < cost:
            return EquipmentActionResult(success=False, error="Insufficient funds")
        self._owned[item_id] = item.model_copy(update={"condition": 100.0})
        return EquipmentActionResult(success=True, cost=cost)

    def restore(
        self,
        conditions: Mapping[str, float],
        installations: Mapping[str, str],
        known_venues: Iterable[str],
    ) -> None:
        """Reload owned gear and installations, skipping unknown ids."""
        venues = set(known_venues)
        for item_id, condition in conditions.items():
            item = self._catalog.get(item_id)
            if item is None:
                logger.warning("Ignoring unknown equipment '%s' on restore", item_id)
                continue
            self._owned[item_id] = item.model_copy(
                update={"condition": clamp(condition, 0, 100)}
            )
        for item_id, venue_id in installations.items():
            if item_id in self._owned and venue_id in venues:
                self._installed[item_id] = venue_id


__all__ = [
    "EQUIPMENT_CATALOG",
    "AggregatedEquipmentEffects",
    "EquipmentActionResult",
    "EquipmentEffect",
    "EquipmentInventory",
    "EquipmentItem",
    "InstallationRequirements",
    "required_categories",
]
