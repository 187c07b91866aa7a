"""Single-player game session that owns state and drives whole turns."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping  # noqa: TC003
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from basement_backend.game_logic.booking import (
    BookingRequest,
    BookingResult,
    validate_booking,
)
from basement_backend.game_logic.configuration import SimulationConfiguration
from basement_backend.game_logic.day_jobs import (
    DAY_JOBS,
    DayJob,
    DayJobResult,
    DayJobType,
    work_shift,
)
from basement_backend.game_logic.difficulty import (
    DifficultyFactors,
    difficulty,
    difficulty_milestone,
    roll_passive_difficulty,
    scaled_cost,
)
from basement_backend.game_logic.equipment import (
    EquipmentActionResult,
    EquipmentInventory,
)
from basement_backend.game_logic.factions import (
    DEFAULT_FACTIONS,
    FactionChoice,
    FactionEvent,
    FactionGraph,
)
from basement_backend.game_logic.incidents import IncidentGenerator
from basement_backend.game_logic.persistence import (
    GameStateSnapshot,
    load_snapshot_payload,
)
from basement_backend.game_logic.phases import (
    TURN_PHASE_SEQUENCE,
    PhaseJournalEntry,
    RecurringCosts,
    TurnPhase,
    TurnReport,
)
from basement_backend.game_logic.resolver import (
    PerformanceOutcome,
    PerformanceResolver,
    ResolutionContext,
)
from basement_backend.game_logic.state import (
    Performer,
    PlayerResources,
    ScheduledPerformance,
    Venue,
)
from basement_backend.game_logic.synergies import SynergyEngine
from basement_backend.shared.events import LoggedEvent
from basement_backend.shared.rng import DeterministicRandomService

logger = logging.getLogger(__name__)

MAX_HYPE = 100


class MissingReferenceError(LookupError):
    """Raised when an action names a performance, venue or job that does not exist."""


class PromotionResult(BaseModel):
    """Outcome of spending money on hype for a booked show."""

    model_config = ConfigDict(frozen=True)

    success: bool
    performance: ScheduledPerformance | None = None
    cost: int = 0
    error: str | None = None


class TurnAccumulator(BaseModel):
    """Explicit carrier of the values one turn phase hands to the next."""

    turn: int
    factors: DifficultyFactors
    resources: PlayerResources
    due: list[ScheduledPerformance] = Field(default_factory=list)
    waiting: list[ScheduledPerformance] = Field(default_factory=list)
    outcomes: list[PerformanceOutcome] = Field(default_factory=list)
    recurring_costs: RecurringCosts = Field(default_factory=RecurringCosts)
    reputation_decay: int = 0
    passive_events: list[LoggedEvent] = Field(default_factory=list)
    day_job: DayJobResult | None = None
    milestone: str | None = None
    faction_events: list[FactionEvent] = Field(default_factory=list)
    discoveries: list[str] = Field(default_factory=list)
    journal: list[PhaseJournalEntry] = Field(default_factory=list)


class GameSession:
    """Owns the player's scene and plays it forward one turn at a time.

    Every subsystem (factions, synergies, gear, randomness) is an explicit
    member of the session rather than a global, so two sessions never share
    state. Turns run through :data:`TURN_PHASE_SEQUENCE` and each phase adds
    journal entries to the returned :class:`TurnReport`.
    """

    def __init__(  # noqa: PLR0913
        self,
        configuration: SimulationConfiguration | None = None,
        *,
        performers: Iterable[Performer] = (),
        venues: Iterable[Venue] = (),
        factions: FactionGraph | None = None,
        synergies: SynergyEngine | None = None,
        equipment: EquipmentInventory | None = None,
        rng: DeterministicRandomService | None = None,
        resources: PlayerResources | None = None,
        turn: int = 1,
        schedule: Iterable[ScheduledPerformance] = (),
        day_job: DayJobType | None = None,
        turns_worked: int = 0,
        performance_counter: int = 0,
    ) -> None:
        self._config = configuration or SimulationConfiguration()
        self._rng = rng or DeterministicRandomService(self._config.rng_seed)
        self._factions = factions or FactionGraph()
        self._synergies = synergies or SynergyEngine()
        self._equipment = equipment or EquipmentInventory()
        self._incidents = IncidentGenerator(self._rng)
        self._resolver = PerformanceResolver(
            synergies=self._synergies,
            factions=self._factions,
            equipment=self._equipment,
            incidents=self._incidents,
            rng=self._rng,
            configuration=self._config,
        )
        self._resources = resources or PlayerResources(
            money=self._config.starting_money,
            reputation=self._config.starting_reputation,
            fans=self._config.starting_fans,
            stress=self._config.starting_stress,
            connections=self._config.starting_connections,
        )
        self._performers: dict[str, Performer] = {}
        self._venues: dict[str, Venue] = {}
        self._schedule: list[ScheduledPerformance] = list(schedule)
        self._turn = turn
        self._performance_counter = performance_counter
        self._day_job: DayJob | None = DAY_JOBS.get(day_job) if day_job else None
        self._turns_worked = turns_worked if self._day_job else 0
        self._reports: list[TurnReport] = []
        self._journal: list[PhaseJournalEntry] = []
        self._accumulator: TurnAccumulator | None = None
        self._active_phase: TurnPhase | None = None

        for performer in performers:
            self.add_performer(performer)
        for venue in venues:
            self.add_venue(venue)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def turn(self) -> int:
        """Current turn number, starting at 1."""
        return self._turn

    @property
    def resources(self) -> PlayerResources:
        """Return the player's current resources."""
        return self._resources

    @property
    def configuration(self) -> SimulationConfiguration:
        """Return the tuning parameters of this session."""
        return self._config

    @property
    def performers(self) -> dict[str, Performer]:
        """Return a copy of the roster keyed by identifier."""
        return dict(self._performers)

    @property
    def venues(self) -> dict[str, Venue]:
        """Return a copy of the known venues keyed by identifier."""
        return dict(self._venues)

    @property
    def schedule(self) -> list[ScheduledPerformance]:
        """Return pending performances in booking order."""
        return list(self._schedule)

    @property
    def factions(self) -> FactionGraph:
        """Return the faction graph."""
        return self._factions

    @property
    def synergies(self) -> SynergyEngine:
        """Return the synergy engine."""
        return self._synergies

    @property
    def equipment(self) -> EquipmentInventory:
        """Return the gear inventory."""
        return self._equipment

    @property
    def day_job(self) -> DayJob | None:
        """Return the job the player currently holds."""
        return self._day_job

    @property
    def turn_reports(self) -> list[TurnReport]:
        """Return a copy of the reports of every processed turn."""
        return list(self._reports)

    @property
    def action_journal(self) -> list[PhaseJournalEntry]:
        """Return a copy of the accumulated action journal."""
        return list(self._journal)

    def current_difficulty(self) -> DifficultyFactors:
        """Return the difficulty factors for the current turn."""
        return difficulty(self._turn, self._resources.reputation, self._resources.fans)

    # ------------------------------------------------------------------
    # Roster and venues
    # ------------------------------------------------------------------
    def add_performer(self, performer: Performer) -> None:
        """Add or replace a performer and sign them to a faction if aligned."""
        self._performers[performer.identifier] = performer
        self._factions.assign_performer(performer)

    def remove_performer(self, performer_id: str) -> None:
        """Drop a performer; booked shows that need them will fail."""
        if self._performers.pop(performer_id, None) is None:
            msg = f"Unknown performer '{performer_id}'."
            raise MissingReferenceError(msg)

    def add_venue(self, venue: Venue) -> None:
        """Add or replace a venue."""
        self._venues[venue.identifier] = venue

    def remove_venue(self, venue_id: str) -> None:
        """Drop a venue and send its gear back to storage."""
        if self._venues.pop(venue_id, None) is None:
            msg = f"Unknown venue '{venue_id}'."
            raise MissingReferenceError(msg)
        self._equipment.remove_venue(venue_id)

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def schedule_performance(
        self,
        performer_ids: Iterable[str],
        venue_id: str,
        ticket_price: int,
        lead_time: int,
    ) -> BookingResult:
        """Book a show, charging the booking fee when it is accepted."""
        request = BookingRequest(
            performer_ids=tuple(performer_ids),
            venue_id=venue_id,
            ticket_price=ticket_price,
            lead_time=lead_time,
        )
        factors = self.current_difficulty()
        result = validate_booking(
            request,
            performance_id=f"show-{self._performance_counter + 1}",
            resources=self._resources,
            performers=self._performers,
            venues=self._venues,
            schedule=self._schedule,
            equipment=self._equipment,
            factors=factors,
            configuration=self._config,
        )
        if not result.accepted or result.performance is None:
            return result

        self._performance_counter += 1
        performance = self._with_preview(result.performance, factors)
        self._schedule.append(performance)
        self._resources = self._resources.adjust(money=-result.cost)
        logger.info(
            "Booked %s at %s for turn +%s",
            performance.identifier,
            performance.venue_id,
            performance.turns_until_show,
        )
        return result.model_copy(update={"performance": performance})

    def promote_performance(self, performance_id: str, hype: int) -> PromotionResult:
        """Spend money to add hype to a booked show."""
        index = self._schedule_index(performance_id)
        performance = self._schedule[index]
        if hype <= 0:
            return PromotionResult(success=False, error="Hype must be positive")
        added = min(hype, MAX_HYPE - performance.hype)
        if added == 0:
            return PromotionResult(success=False, error="Show is already fully hyped")
        cost = added * self._config.promotion_cost_per_hype
        if self._resources.money < cost:
            return PromotionResult(success=False, error="Insufficient funds")

        promoted = self._with_preview(
            performance.model_copy(update={"hype": performance.hype + added}),
            self.current_difficulty(),
        )
        self._schedule[index] = promoted
        self._resources = self._resources.adjust(money=-cost)
        return PromotionResult(success=True, performance=promoted, cost=cost)

    def cancel_performance(self, performance_id: str) -> ScheduledPerformance:
        """Remove a booked show from the schedule without a refund."""
        return self._schedule.pop(self._schedule_index(performance_id))

    def apply_faction_choice(self, event_id: str, choice_id: str) -> FactionChoice:
        """Resolve a faction event and apply the choice's resource changes."""
        choice = self._factions.apply_choice(event_id, choice_id)
        self._resources = self._resources.adjust(
            money=choice.money_change,
            reputation=choice.reputation_change,
            stress=choice.stress_change,
        )
        return choice

    def take_day_job(self, job_type: DayJobType) -> bool:
        """Start working a day job if the player qualifies."""
        job = DAY_JOBS.get(job_type)
        if job is None:
            msg = f"Unknown day job '{job_type}'."
            raise MissingReferenceError(msg)
        if not job.is_available(self._resources):
            return False
        self._day_job = job
        self._turns_worked = 0
        return True

    def quit_day_job(self) -> None:
        """Quit the current job for a little stress relief."""
        if self._day_job is None:
            return
        self._day_job = None
        self._turns_worked = 0
        self._resources = self._resources.adjust(stress=-5)

    def purchase_equipment(self, item_id: str) -> EquipmentActionResult:
        """Buy gear if the player can afford it."""
        return self._charge(self._equipment.purchase(item_id, self._resources.money))

    def rent_equipment(self, item_id: str, venue_id: str) -> EquipmentActionResult:
        """Rent gear for the next show at *venue_id*."""
        self._require_venue(venue_id)
        return self._charge(
            self._equipment.rent(item_id, venue_id, self._resources.money)
        )

    def install_equipment(self, item_id: str, venue_id: str) -> EquipmentActionResult:
        """Install owned gear at a known venue."""
        return self._equipment.install(item_id, self._require_venue(venue_id))

    def uninstall_equipment(self, item_id: str, venue_id: str) -> EquipmentActionResult:
        """Move gear from a venue back into storage."""
        return self._equipment.uninstall(item_id, venue_id)

    def repair_equipment(self, item_id: str) -> EquipmentActionResult:
        """Restore owned gear to full condition."""
        return self._charge(self._equipment.repair(item_id, self._resources.money))

    # ------------------------------------------------------------------
    # Turn processing
    # ------------------------------------------------------------------
    def process_turn(self) -> TurnReport:
        """Run every phase of the current turn and return the report."""
        self._accumulator = TurnAccumulator(
            turn=self._turn,
            factors=self.current_difficulty(),
            resources=self._resources,
        )
        try:
            for phase in TURN_PHASE_SEQUENCE:
                self.run_phase(phase)
            report = self._reports[-1]
        finally:
            self._accumulator = None
        return report

    def run_phase(self, phase: TurnPhase) -> None:
        """Execute a single phase against the active turn accumulator."""
        if self._accumulator is None:
            msg = "Phases can only run while a turn is being processed."
            raise RuntimeError(msg)
        handler = self._phase_handler_for(phase)
        self._active_phase = phase
        try:
            handler(self._accumulator)
        finally:
            self._active_phase = None

    def _phase_handler_for(
        self, phase: TurnPhase
    ) -> Callable[[TurnAccumulator], None]:
        """Return the method that corresponds to the requested phase."""
        handlers: dict[TurnPhase, Callable[[TurnAccumulator], None]] = {
            TurnPhase.COLLECT_DUE: self._collect_due,
            TurnPhase.RESOLVE: self._resolve_due,
            TurnPhase.RECURRING_COSTS: self._charge_recurring_costs,
            TurnPhase.PASSIVE_DECAY: self._apply_passive_decay,
            TurnPhase.ADVANCE: self._advance_subsystems,
            TurnPhase.REPORT: self._emit_report,
        }
        try:
            return handlers[phase]
        except KeyError as exc:  # pragma: no cover - guarded by enum usage
            msg = f"Unsupported phase: {phase}"
            raise ValueError(msg) from exc

    def _log_phase_event(
        self,
        acc: TurnAccumulator,
        message: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Append a log entry for the currently running phase."""
        if self._active_phase is None:
            return
        acc.journal.append(
            PhaseJournalEntry(
                turn=acc.turn,
                phase=self._active_phase,
                message=message,
                payload=payload or {},
            )
        )

    def _collect_due(self, acc: TurnAccumulator) -> None:
        for performance in self._schedule:
            if performance.turns_until_show <= 1:
                acc.due.append(performance)
            else:
                acc.waiting.append(performance)
        self._log_phase_event(
            acc,
            "Collected due performances",
            {"due": [p.identifier for p in acc.due], "waiting": len(acc.waiting)},
        )

    def _resolve_due(self, acc: TurnAccumulator) -> None:
        for performance in acc.due:
            outcome = self._resolve_one(performance, acc)
            acc.outcomes.append(outcome)
            acc.faction_events.extend(outcome.faction_events)
            acc.discoveries.extend(outcome.new_discoveries)
            acc.resources = acc.resources.adjust(
                money=outcome.money_change,
                reputation=outcome.reputation_change,
                fans=outcome.fans_gained,
                stress=outcome.stress_change,
            )
            self._log_phase_event(
                acc,
                "Performance failed" if outcome.failed else "Performance resolved",
                {
                    "performance_id": outcome.performance_id,
                    "attendance": outcome.attendance,
                    "revenue": outcome.revenue,
                    "reputation_change": outcome.reputation_change,
                    "success": outcome.success,
                },
            )

    def _resolve_one(
        self, performance: ScheduledPerformance, acc: TurnAccumulator
    ) -> PerformanceOutcome:
        venue = self._venues.get(performance.venue_id)
        lineup = [
            self._performers[performer_id]
            for performer_id in performance.performer_ids
            if performer_id in self._performers
        ]
        if venue is None or len(lineup) != len(performance.performer_ids):
            missing = "venue" if venue is None else "performer"
            return self._resolver.failed_outcome(
                performance.identifier,
                venue_id=performance.venue_id,
                performer_ids=performance.performer_ids,
                reason=f"Booked {missing} no longer exists",
            )
        return self._resolver.resolve(
            lineup,
            venue,
            performance.ticket_price,
            ResolutionContext(
                turn=acc.turn,
                reputation=acc.resources.reputation,
                stress=acc.resources.stress,
                hype=performance.hype,
                difficulty=acc.factors,
            ),
            performance_id=performance.identifier,
        )

    def _charge_recurring_costs(self, acc: TurnAccumulator) -> None:
        rent = sum(
            scaled_cost(
                venue.rent * venue.location.rent_multiplier,
                acc.factors.rent_multiplier,
            )
            for venue in self._venues.values()
        )
        acc.recurring_costs = RecurringCosts(
            rent=rent, upkeep=self._equipment.upkeep_cost()
        )
        acc.resources = acc.resources.adjust(money=-acc.recurring_costs.total)
        self._log_phase_event(
            acc,
            "Charged recurring costs",
            {"rent": rent, "upkeep": acc.recurring_costs.upkeep},
        )

    def _apply_passive_decay(self, acc: TurnAccumulator) -> None:
        result = roll_passive_difficulty(
            acc.factors,
            self._rng,
            venues=list(self._venues.values()),
            roster=list(self._performers.values()),
        )
        acc.reputation_decay = result.reputation_lost
        acc.resources = acc.resources.adjust(
            reputation=-result.reputation_lost, money=-result.money_lost
        )
        acc.passive_events.extend(
            LoggedEvent(turn=acc.turn, event_type="passive_difficulty", message=message)
            for message in result.messages
        )
        self._log_phase_event(
            acc,
            "Applied passive difficulty",
            {
                "reputation_lost": result.reputation_lost,
                "money_lost": result.money_lost,
                "events": len(result.messages),
            },
        )

    def _advance_subsystems(self, acc: TurnAccumulator) -> None:
        if self._day_job is not None:
            self._turns_worked += 1
            acc.day_job = work_shift(
                self._day_job,
                acc.resources,
                self._rng,
                turns_worked=self._turns_worked,
            )
            acc.resources = acc.resources.adjust(
                money=acc.day_job.money,
                reputation=acc.day_job.reputation,
                fans=acc.day_job.fans,
                stress=acc.day_job.stress,
                connections=acc.day_job.connections,
            )
            if acc.day_job.breakdown:
                self._day_job = None
                self._turns_worked = 0

        next_factors = difficulty(
            acc.turn + 1, acc.resources.reputation, acc.resources.fans
        )
        self._schedule = [
            self._with_preview(
                performance.model_copy(
                    update={"turns_until_show": performance.turns_until_show - 1}
                ),
                next_factors,
                turn=acc.turn + 1,
                resources=acc.resources,
            )
            for performance in acc.waiting
        ]
        acc.faction_events.extend(
            event
            for event in self._factions.check_for_events()
            if event not in acc.faction_events
        )
        acc.milestone = difficulty_milestone(acc.turn)
        self._turn = acc.turn + 1
        self._log_phase_event(
            acc,
            "Advanced to next turn",
            {
                "next_turn": self._turn,
                "scheduled": len(self._schedule),
                "milestone": acc.milestone,
            },
        )

    def _emit_report(self, acc: TurnAccumulator) -> None:
        self._resources = acc.resources
        self._log_phase_event(
            acc,
            "Turn complete",
            {"money": acc.resources.money, "reputation": acc.resources.reputation},
        )
        report = TurnReport(
            turn=acc.turn,
            outcomes=acc.outcomes,
            recurring_costs=acc.recurring_costs,
            reputation_decay=acc.reputation_decay,
            passive_events=acc.passive_events,
            day_job=acc.day_job,
            milestone=acc.milestone,
            faction_events=acc.faction_events,
            discoveries=acc.discoveries,
            resources=acc.resources,
            journal=acc.journal,
        )
        self._reports.append(report)
        self._journal.extend(acc.journal)
        logger.info(
            "Turn %s processed: %s shows, money=%s",
            acc.turn,
            len(acc.outcomes),
            acc.resources.money,
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> GameStateSnapshot:
        """Capture everything needed to continue this session later."""
        return GameStateSnapshot(
            turn=self._turn,
            configuration=self._config,
            resources=self._resources,
            performers=tuple(self._performers.values()),
            venues=tuple(self._venues.values()),
            schedule=tuple(self._schedule),
            faction_standings=self._factions.standings(),
            controlled_venues={
                faction.identifier: tuple(
                    venue_id
                    for venue_id in self._venues
                    if self._factions.controls_venue(faction.identifier, venue_id)
                )
                for faction in self._factions.factions
            },
            faction_events=tuple(self._factions.all_events()),
            synergy_trigger_counts=self._synergies.trigger_counts(),
            unlocked_content=self._synergies.unlocked_content,
            equipment_conditions={
                item.identifier: item.condition for item in self._equipment.owned()
            },
            equipment_installations=self._equipment.installations(),
            day_job=self._day_job.job_type if self._day_job else None,
            turns_worked=self._turns_worked,
            performance_counter=self._performance_counter,
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: GameStateSnapshot,
        *,
        rng: DeterministicRandomService | None = None,
    ) -> GameSession:
        """Rebuild a session from a snapshot."""
        known_factions = {faction.identifier for faction in DEFAULT_FACTIONS}
        factions = FactionGraph(
            standings=snapshot.faction_standings,
            controlled_venues={
                faction_id: venue_ids
                for faction_id, venue_ids in snapshot.controlled_venues.items()
                if faction_id in known_factions
            },
        )
        factions.restore_events(snapshot.faction_events)
        synergies = SynergyEngine()
        synergies.restore(snapshot.synergy_trigger_counts, snapshot.unlocked_content)
        equipment = EquipmentInventory()
        equipment.restore(
            snapshot.equipment_conditions,
            snapshot.equipment_installations,
            known_venues=(venue.identifier for venue in snapshot.venues),
        )
        return cls(
            snapshot.configuration,
            performers=snapshot.performers,
            venues=snapshot.venues,
            factions=factions,
            synergies=synergies,
            equipment=equipment,
            rng=rng,
            resources=snapshot.resources,
            turn=snapshot.turn,
            schedule=snapshot.schedule,
            day_job=snapshot.day_job,
            turns_worked=snapshot.turns_worked,
            performance_counter=snapshot.performance_counter,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _schedule_index(self, performance_id: str) -> int:
        for index, performance in enumerate(self._schedule):
            if performance.identifier == performance_id:
                return index
        msg = f"Unknown performance '{performance_id}'."
        raise MissingReferenceError(msg)

    def _require_venue(self, venue_id: str) -> Venue:
        try:
            return self._venues[venue_id]
        except KeyError as exc:
            msg = f"Unknown venue '{venue_id}'."
            raise MissingReferenceError(msg) from exc

    def _charge(self, result: EquipmentActionResult) -> EquipmentActionResult:
        if result.success and result.cost:
            self._resources = self._resources.adjust(money=-result.cost)
        return result

    def _with_preview(
        self,
        performance: ScheduledPerformance,
        factors: DifficultyFactors,
        *,
        turn: int | None = None,
        resources: PlayerResources | None = None,
    ) -> ScheduledPerformance:
        resources = resources or self._resources
        venue = self._venues.get(performance.venue_id)
        lineup = [
            self._performers[performer_id]
            for performer_id in performance.performer_ids
            if performer_id in self._performers
        ]
        if venue is None or not lineup:
            return performance.model_copy(update={"expected_attendance": 0})
        expected = self._resolver.preview(
            lineup,
            venue,
            performance.ticket_price,
            ResolutionContext(
                turn=self._turn if turn is None else turn,
                reputation=resources.reputation,
                stress=resources.stress,
                hype=performance.hype,
                difficulty=factors,
            ),
        )
        return performance.model_copy(update={"expected_attendance": expected})


def session_from_payload(
    payload: Mapping[str, Any],
    *,
    rng: DeterministicRandomService | None = None,
) -> GameSession:
    """Rebuild a session from an untrusted snapshot payload."""
    return GameSession.from_snapshot(load_snapshot_payload(payload), rng=rng)


__all__ = [
    "GameSession",
    "MissingReferenceError",
    "PromotionResult",
    "TurnAccumulator",
    "session_from_payload",
]
