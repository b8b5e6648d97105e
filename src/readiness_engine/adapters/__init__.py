"""Interfaces consumed by the engine; implemented by platform adapters."""

from readiness_engine.adapters.base import (
    ActivitySource,
    AthleteProfileProvider,
    PhysiologicalSource,
    StaticProfileProvider,
)

__all__ = [
    "ActivitySource",
    "AthleteProfileProvider",
    "PhysiologicalSource",
    "StaticProfileProvider",
]
