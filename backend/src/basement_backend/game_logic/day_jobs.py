"""Day jobs that pay the rent between shows at a cost to scene credibility."""

from __future__ import annotations

import logging
import math
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

if TYPE_CHECKING:
    from basement_backend.game_logic.state import PlayerResources
    from basement_backend.shared.rng import DeterministicRandomService

logger = logging.getLogger(__name__)

BURNOUT_STRESS = 80
BREAKDOWN_STRESS = 100
BURNOUT_PAY_FACTOR = 0.8
BURNOUT_STRESS_FACTOR = 1.5
BREAKDOWN_RECOVERY = -30


class JobCategory(StrEnum):
    """Broad kind of employer, which decides the random events."""

    VENUE = "venue"
    CORPORATE = "corporate"
    COMMUNITY = "community"


class DayJobType(StrEnum):
    """Available day job templates."""

    VENUE_STAFF = "venue_staff"
    SOUND_TECH = "sound_tech"
    DOOR_PERSON = "door_person"
    RETAIL_CHAIN = "retail_chain"
    OFFICE_DRONE = "office_drone"
    GIG_ECONOMY = "gig_economy"
    NON_PROFIT = "non_profit"
    VOLUNTEER = "volunteer"
    COLLECTIVE = "collective"


class DayJob(BaseModel):
    """Per-turn income and side effects of holding a job."""

    model_config = ConfigDict(frozen=True)

    job_type: DayJobType
    category: JobCategory
    name: str
    description: str = ""
    money_per_turn: int = Field(..., ge=0)
    reputation_change: int = 0
    fan_change: int = 0
    stress_gain: int = Field(default=0, ge=0)
    connection_gain: int = Field(default=0, ge=0)
    min_reputation: int = Field(default=0, ge=0)
    min_connections: int = Field(default=0, ge=0)

    def is_available(self, resources: PlayerResources) -> bool:
        """Whether the player meets the job's requirements."""
        return (
            resources.reputation >= self.min_reputation
            and resources.connections >= self.min_connections
        )


class JobEvent(BaseModel):
    """Chance-based extra that can happen during a shift."""

    model_config = ConfigDict(frozen=True)

    chance: float = Field(..., ge=0, le=1)
    message: str
    money: int = 0
    reputation: int = 0
    fans: int = 0
    stress: int = 0
    connections: int = 0


class DayJobResult(BaseModel):
    """Deltas produced by one turn of work; the caller applies them."""

    model_config = ConfigDict(frozen=True)

    job_type: DayJobType
    money: int = 0
    reputation: int = 0
    fans: int = 0
    stress: int = 0
    connections: int = 0
    message: str
    breakdown: bool = False
    event: JobEvent | None = None


DAY_JOBS: dict[DayJobType, DayJob] = {
    job.job_type: job
    for job in (
        DayJob(
            job_type=DayJobType.VENUE_STAFF,
            category=JobCategory.VENUE,
            name="Barback",
            description="Cleaning up after shows you wish you were playing",
            money_per_turn=80,
            stress_gain=8,
            connection_gain=2,
        ),
        DayJob(
            job_type=DayJobType.SOUND_TECH,
            category=JobCategory.VENUE,
            name="Sound Tech",
            description="Making terrible bands sound slightly less terrible",
            money_per_turn=120,
            reputation_change=2,
            stress_gain=10,
            connection_gain=3,
            min_connections=5,
        ),
        DayJob(
            job_type=DayJobType.DOOR_PERSON,
            category=JobCategory.VENUE,
            name="Door Person",
            description="Checking IDs and pretending not to know underage scenesters",
            money_per_turn=100,
            reputation_change=1,
            stress_gain=6,
            connection_gain=4,
        ),
        DayJob(
            job_type=DayJobType.RETAIL_CHAIN,
            category=JobCategory.CORPORATE,
            name="Sales Associate",
            description="Selling your soul one customer at a time",
            money_per_turn=180,
            reputation_change=-8,
            fan_change=-3,
            stress_gain=15,
        ),
        DayJob(
            job_type=DayJobType.OFFICE_DRONE,
            category=JobCategory.CORPORATE,
            name="Data Entry",
            description="Ctrl+C, Ctrl+V, repeat until dead inside",
            money_per_turn=250,
            reputation_change=-12,
            fan_change=-5,
            stress_gain=20,
        ),
        DayJob(
            job_type=DayJobType.GIG_ECONOMY,
            category=JobCategory.CORPORATE,
            name="Delivery Driver",
            description="Burning gas to make shareholders rich",
            money_per_turn=160,
            reputation_change=-6,
            fan_change=-2,
            stress_gain=12,
        ),
        DayJob(
            job_type=DayJobType.NON_PROFIT,
            category=JobCategory.COMMUNITY,
            name="Community Outreach",
            description="Actually making a difference for once",
            money_per_turn=50,
            reputation_change=5,
            fan_change=2,
            stress_gain=5,
            connection_gain=3,
        ),
        DayJob(
            job_type=DayJobType.VOLUNTEER,
            category=JobCategory.COMMUNITY,
            name="Volunteer",
            description="Working for free but keeping your punk ethics intact",
            money_per_turn=0,
            reputation_change=8,
            fan_change=3,
            stress_gain=3,
            connection_gain=5,
        ),
        DayJob(
            job_type=DayJobType.COLLECTIVE,
            category=JobCategory.COMMUNITY,
            name="Collective Organizer",
            description="Building the scene one consensus meeting at a time",
            money_per_turn=30,
            reputation_change=10,
            fan_change=5,
            stress_gain=7,
            connection_gain=6,
            min_reputation=25,
        ),
    )
}

JOB_EVENTS: dict[JobCategory, tuple[JobEvent, ...]] = {
    JobCategory.VENUE: (
        JobEvent(
            chance=0.15,
            message="Helped a touring band load in. They remember you!",
            connections=3,
            reputation=2,
        ),
        JobEvent(
            chance=0.1,
            message="Venue owner noticed your hard work. Bonus!",
            money=50,
        ),
        JobEvent(
            chance=0.08,
            message="Equipment malfunction during your shift. Stressful night.",
            stress=10,
        ),
    ),
    JobCategory.CORPORATE: (
        JobEvent(
            chance=0.1,
            message="Customer recognized you from a show. Awkward...",
            reputation=-5,
            stress=5,
        ),
        JobEvent(
            chance=0.08,
            message="Mandatory overtime. Missing band practice again.",
            stress=15,
            connections=-2,
        ),
        JobEvent(
            chance=0.05,
            message="Corporate social media policy violation warning.",
            stress=20,
            reputation=-10,
        ),
    ),
    JobCategory.COMMUNITY: (
        JobEvent(
            chance=0.15,
            message="Met like-minded folks. The network grows!",
            connections=5,
        ),
        JobEvent(
            chance=0.1,
            message="Your work made the local zine. Street cred!",
            reputation=5,
            fans=3,
        ),
        JobEvent(
            chance=0.08,
            message="Organized a benefit show through work connections.",
            connections=3,
            reputation=3,
        ),
    ),
}


def available_jobs(resources: PlayerResources) -> list[DayJob]:
    """Return the job templates the player currently qualifies for."""
    return [job for job in DAY_JOBS.values() if job.is_available(resources)]


def work_shift(
    job: DayJob,
    resources: PlayerResources,
    rng: DeterministicRandomService,
    *,
    turns_worked: int = 1,
) -> DayJobResult:
    """Work one turn at *job* and return the resulting deltas.

    A player at full stress breaks down instead: no pay, some stress relief,
    and the caller should drop the job. Above the burnout line pay shrinks and
    stress builds faster. At most one random event fires per shift.
    """
    if resources.stress >= BREAKDOWN_STRESS:
        logger.info("Breakdown while working %s", job.job_type)
        return DayJobResult(
            job_type=job.job_type,
            stress=BREAKDOWN_RECOVERY,
            message=(
                "You had a complete breakdown and quit your job. "
                "Time to focus on the music... or therapy."
            ),
            breakdown=True,
        )

    money = float(job.money_per_turn)
    stress = float(job.stress_gain)
    if resources.stress > BURNOUT_STRESS:
        money *= BURNOUT_PAY_FACTOR
        stress *= BURNOUT_STRESS_FACTOR

    event = next(
        (
            candidate
            for candidate in JOB_EVENTS[job.category]
            if rng.roll(candidate.chance)
        ),
        None,
    )

    if event is not None:
        message = event.message
    elif turns_worked <= 1:
        message = job.description
    else:
        message = f"Turn {turns_worked} as {job.name}. Is this sustainable?"

    return DayJobResult(
        job_type=job.job_type,
        money=math.floor(money) + (event.money if event else 0),
        reputation=job.reputation_change + (event.reputation if event else 0),
        fans=job.fan_change + (event.fans if event else 0),
        stress=math.floor(stress) + (event.stress if event else 0),
        connections=job.connection_gain + (event.connections if event else 0),
        message=message,
        event=event,
    )


__all__ = [
    "DAY_JOBS",
    "JOB_EVENTS",
    "DayJob",
    "DayJobResult",
    "DayJobType",
    "JobCategory",
    "JobEvent",
    "available_jobs",
    "work_shift",
]
