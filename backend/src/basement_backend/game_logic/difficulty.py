"""Progressive difficulty curve feeding every other subsystem."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence  # noqa: TC003
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from basement_backend.shared.value_objects import EffectBundle, EffectTarget

if TYPE_CHECKING:
    from basement_backend.game_logic.state import Performer, Venue
    from basement_backend.shared.rng import DeterministicRandomService

logger = logging.getLogger(__name__)

ROUND_FACTOR_TURNS = 50
ROUND_FACTOR_CAP = 2.0
SUCCESS_FACTOR_SCALE = 1000
SUCCESS_FACTOR_CAP = 1.5
MAX_REPUTATION_DECAY = 5.0
PRICE_PENALTY_THRESHOLD = 10
PRICE_PENALTY_FLOOR = 0.5

DIFFICULTY_MILESTONES: dict[int, str] = {
    10: "The scene is taking notice. Expectations are rising.",
    20: "You're becoming known. With fame comes pressure.",
    30: "The underground isn't so underground anymore.",
    40: "Gentrification is accelerating. The old venues are disappearing.",
    50: "You've made it this far, but the scene is changing fast.",
    75: "The city barely resembles what it was. Can you keep the spirit alive?",
    100: "Legendary status achieved. But at what cost?",
}


class DifficultyFactors(BaseModel):
    """Scaling factors derived from how far and how well the player has come."""

    model_config = ConfigDict(frozen=True)

    round_factor: float = Field(..., ge=0, le=ROUND_FACTOR_CAP)
    success_factor: float = Field(..., ge=0, le=SUCCESS_FACTOR_CAP)

    rent_multiplier: float = Field(..., ge=0)
    booking_cost_multiplier: float = Field(..., ge=0)
    ticket_price_resistance: float = Field(..., ge=0)

    fan_expectations: float = Field(..., gt=0)
    reputation_decay: float = Field(..., ge=0, le=MAX_REPUTATION_DECAY)
    competition_level: int = Field(..., ge=1)

    police_attention: float = Field(..., ge=0)
    equipment_failure: float = Field(..., ge=0)
    band_drama: float = Field(..., ge=0)

    gentrification_rate: float = Field(..., ge=0)
    venue_closure_risk: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _ensure_finite(self) -> DifficultyFactors:
        """Reject any non-finite factor."""
        for name, value in self:
            if isinstance(value, float) and not math.isfinite(value):
                msg = f"Difficulty factor '{name}' must be finite."
                raise ValueError(msg)
        return self


def difficulty(turn_count: int, reputation: int, fans: int) -> DifficultyFactors:
    """Return the difficulty factors for the given progress.

    ``round_factor`` grows with elapsed turns and caps at 2, ``success_factor``
    grows with reputation plus fans and caps at 1.5. Negative inputs count as
    zero so every factor stays non-negative.
    """
    round_factor = min(max(turn_count, 0) / ROUND_FACTOR_TURNS, ROUND_FACTOR_CAP)
    success_factor = min(
        max(reputation + fans, 0) / SUCCESS_FACTOR_SCALE, SUCCESS_FACTOR_CAP
    )
    return DifficultyFactors(
        round_factor=round_factor,
        success_factor=success_factor,
        rent_multiplier=1 + round_factor * 0.5 + success_factor * 0.3,
        booking_cost_multiplier=1 + round_factor * 0.3 + success_factor * 0.2,
        ticket_price_resistance=1 + round_factor * 0.4,
        fan_expectations=1 + round_factor * 0.6 + success_factor * 0.4,
        reputation_decay=min(round_factor * 2, MAX_REPUTATION_DECAY),
        competition_level=math.floor(1 + round_factor * 3),
        police_attention=0.05 + round_factor * 0.1 + success_factor * 0.05,
        equipment_failure=0.02 + round_factor * 0.03,
        band_drama=0.1 + success_factor * 0.1,
        gentrification_rate=0.02 + round_factor * 0.03,
        venue_closure_risk=0.01 + round_factor * 0.02 + success_factor * 0.01,
    )


def price_penalty(factors: DifficultyFactors, ticket_price: float) -> float:
    """Return the attendance multiplier caused by an expensive ticket."""
    if ticket_price <= PRICE_PENALTY_THRESHOLD:
        return 1.0
    overshoot = ticket_price - PRICE_PENALTY_THRESHOLD
    return max(
        PRICE_PENALTY_FLOOR, 1 - overshoot * 0.05 * factors.ticket_price_resistance
    )


def show_modifiers(factors: DifficultyFactors, ticket_price: float) -> EffectBundle:
    """Return the difficulty bundle applied to a single show."""
    attendance = (1 / factors.fan_expectations) * price_penalty(factors, ticket_price)
    return EffectBundle(
        multipliers={EffectTarget.ATTENDANCE: attendance},
        source="difficulty",
    )


def scaled_cost(base_cost: float, multiplier: float) -> int:
    """Return *base_cost* scaled by a difficulty multiplier, floored."""
    return math.floor(base_cost * multiplier)


def difficulty_milestone(turn: int) -> str | None:
    """Return the milestone message for *turn*, if one exists."""
    return DIFFICULTY_MILESTONES.get(turn)


def is_player_struggling(money: int, stress: int) -> bool:
    """Whether the player is broke and burnt out at the same time."""
    return money < 100 and stress > 70


class PassiveDifficultyResult(BaseModel):
    """Outcome of the once-per-turn passive difficulty pass."""

    model_config = ConfigDict(frozen=True)

    reputation_lost: int = Field(default=0, ge=0)
    money_lost: int = Field(default=0, ge=0)
    messages: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def message(self) -> str | None:
        """Return all event messages joined, or ``None`` when quiet."""
        return " ".join(self.messages) if self.messages else None


def roll_passive_difficulty(
    factors: DifficultyFactors,
    rng: DeterministicRandomService,
    *,
    venues: Sequence[Venue],
    roster: Sequence[Performer],
) -> PassiveDifficultyResult:
    """Roll the passive risks of a turn and return what the caller should apply.

    Reputation decay always applies. Police attention, equipment failure and
    band drama are independent rolls; only equipment failure costs money.
    """
    reputation_lost = math.floor(factors.reputation_decay)
    money_lost = 0
    messages: list[str] = []

    if rng.roll(factors.police_attention) and venues:
        venue = rng.choice(list(venues))
        messages.append(f"Police shut down shows at {venue.name} this turn!")

    if rng.roll(factors.equipment_failure):
        money_lost = scaled_cost(50 + factors.booking_cost_multiplier * 50, 1.0)
        messages.append(f"PA system blew out! Emergency repairs cost ${money_lost}")

    if rng.roll(factors.band_drama) and len(roster) > 1:
        messages.append(
            f"{roster[0].name} is having internal conflicts. They need a break."
        )

    if messages:
        logger.info("Passive difficulty events: %s", " | ".join(messages))
    return PassiveDifficultyResult(
        reputation_lost=reputation_lost,
        money_lost=money_lost,
        messages=tuple(messages),
    )


__all__ = [
    "DIFFICULTY_MILESTONES",
    "DifficultyFactors",
    "PassiveDifficultyResult",
    "difficulty",
    "difficulty_milestone",
    "is_player_struggling",
    "price_penalty",
    "roll_passive_difficulty",
    "scaled_cost",
    "show_modifiers",
]
