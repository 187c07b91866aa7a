"""Shared utilities, shared models and cross-cutting helpers for the backend."""

from basement_backend.shared.enums import (
    EquipmentCategory,
    Genre,
    IncidentCategory,
    PerformerStat,
    SynergyTier,
    VenueAmenity,
    VenueStat,
    VenueType,
)
from basement_backend.shared.events import LoggedEvent
from basement_backend.shared.rng import DeterministicRandomService
from basement_backend.shared.value_objects import EffectBundle, EffectTarget, clamp

__all__ = [
    "DeterministicRandomService",
    "EffectBundle",
    "EffectTarget",
    "EquipmentCategory",
    "Genre",
    "IncidentCategory",
    "LoggedEvent",
    "PerformerStat",
    "SynergyTier",
    "VenueAmenity",
    "VenueStat",
    "VenueType",
    "clamp",
]
