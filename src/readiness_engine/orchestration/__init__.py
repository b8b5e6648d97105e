"""Score computation orchestration: single-flight, deadlines, dependencies, pub/sub."""

from readiness_engine.orchestration.observers import ObserverRegistry
from readiness_engine.orchestration.orchestrator import ComputationOrchestrator, Flight
from readiness_engine.orchestration.race import race

__all__ = ["ComputationOrchestrator", "Flight", "ObserverRegistry", "race"]
