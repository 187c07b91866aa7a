"""Core rules and mechanics that drive a Basement turn."""

from basement_backend.game_logic.booking import (
    BookingRejection,
    BookingRequest,
    BookingResult,
    validate_booking,
)
from basement_backend.game_logic.configuration import (
    SessionOverrides,
    SimulationConfiguration,
    SimulationDefaults,
    build_session_configuration,
    get_default_simulation_configuration,
)
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
    roll_passive_difficulty,
)
from basement_backend.game_logic.equipment import (
    EQUIPMENT_CATALOG,
    EquipmentActionResult,
    EquipmentInventory,
    EquipmentItem,
)
from basement_backend.game_logic.factions import (
    DEFAULT_FACTIONS,
    Faction,
    FactionEvent,
    FactionEventResolvedError,
    FactionGraph,
    UnknownFactionEventError,
)
from basement_backend.game_logic.incidents import (
    INCIDENT_CATALOG,
    Incident,
    IncidentGenerator,
)
from basement_backend.game_logic.orchestration import (
    SessionNotInitializedError,
    SessionOrchestrator,
)
from basement_backend.game_logic.persistence import (
    SNAPSHOT_VERSION,
    GameStateSnapshot,
    InMemorySnapshotStore,
    InMemoryTurnReportStore,
    SnapshotStore,
    TurnReportStore,
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
from basement_backend.game_logic.session import (
    GameSession,
    MissingReferenceError,
    PromotionResult,
)
from basement_backend.game_logic.state import (
    Performer,
    PerformerTrait,
    PlayerResources,
    ScheduledPerformance,
    TechnicalRequirement,
    Venue,
    VenueLocation,
)
from basement_backend.game_logic.synergies import (
    DEFAULT_SYNERGIES,
    SynergyActivation,
    SynergyEngine,
    SynergyRule,
)

__all__ = [
    "DAY_JOBS",
    "DEFAULT_FACTIONS",
    "DEFAULT_SYNERGIES",
    "EQUIPMENT_CATALOG",
    "INCIDENT_CATALOG",
    "SNAPSHOT_VERSION",
    "TURN_PHASE_SEQUENCE",
    "BookingRejection",
    "BookingRequest",
    "BookingResult",
    "DayJob",
    "DayJobResult",
    "DayJobType",
    "DifficultyFactors",
    "EquipmentActionResult",
    "EquipmentInventory",
    "EquipmentItem",
    "Faction",
    "FactionEvent",
    "FactionEventResolvedError",
    "FactionGraph",
    "GameSession",
    "GameStateSnapshot",
    "InMemorySnapshotStore",
    "InMemoryTurnReportStore",
    "Incident",
    "IncidentGenerator",
    "MissingReferenceError",
    "PerformanceOutcome",
    "PerformanceResolver",
    "Performer",
    "PerformerTrait",
    "PhaseJournalEntry",
    "PlayerResources",
    "PromotionResult",
    "RecurringCosts",
    "ResolutionContext",
    "ScheduledPerformance",
    "SessionNotInitializedError",
    "SessionOrchestrator",
    "SessionOverrides",
    "SimulationConfiguration",
    "SimulationDefaults",
    "SnapshotStore",
    "SynergyActivation",
    "SynergyEngine",
    "SynergyRule",
    "TechnicalRequirement",
    "TurnPhase",
    "TurnReport",
    "TurnReportStore",
    "UnknownFactionEventError",
    "Venue",
    "VenueLocation",
    "build_session_configuration",
    "difficulty",
    "get_default_simulation_configuration",
    "load_snapshot_payload",
    "roll_passive_difficulty",
    "validate_booking",
    "work_shift",
]
