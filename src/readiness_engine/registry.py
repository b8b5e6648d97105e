"""Calculator registry with auto-discovery of ScoreCalculator subclasses."""

from __future__ import annotations

import importlib
import logging
import pkgutil

from readiness_engine.calculators.base import ScoreCalculator
from readiness_engine.models.enums import ScoreType

logger = logging.getLogger(__name__)


class CalculatorRegistry:
    """Discovers and manages the ScoreCalculator implementations.

    Auto-discovers calculators by scanning the calculators/ package for
    concrete subclasses of ScoreCalculator. A new calculator is added by
    placing a .py file in that package; no manual registration needed.
    One calculator is kept per ScoreType; a later registration replaces
    an earlier one, which is how configured instances override defaults.
    """

    def __init__(self) -> None:
        self._calculators: dict[ScoreType, ScoreCalculator] = {}

    def discover_calculators(self) -> None:
        """Scan the calculators package and register every ScoreCalculator subclass."""
        import readiness_engine.calculators as calculators_pkg

        self._scan_package(calculators_pkg.__name__, list(calculators_pkg.__path__))

    def _scan_package(self, package_name: str, package_path: list[str]) -> None:
        """Recursively import all modules under a package and register calculators."""
        for _finder, module_name, _is_pkg in pkgutil.walk_packages(
            package_path, prefix=package_name + "."
        ):
            module = importlib.import_module(module_name)
            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type)
                    and issubclass(attr, ScoreCalculator)
                    and attr is not ScoreCalculator
                    and not getattr(attr, "__abstractmethods__", set())
                    and attr.score_type not in self._calculators
                ):
                    self.register(attr())

    def register(self, calculator: ScoreCalculator) -> None:
        """Register a calculator instance under its score type."""
        logger.debug(
            "Registered %s for %s", type(calculator).__name__, calculator.score_type.name
        )
        self._calculators[calculator.score_type] = calculator

    def get(self, score_type: ScoreType) -> ScoreCalculator | None:
        return self._calculators.get(score_type)

    def get_all_calculators(self) -> list[ScoreCalculator]:
        """All registered calculators in dependency order (Sleep first)."""
        return [self._calculators[t] for t in sorted(self._calculators)]

    @property
    def score_types(self) -> list[ScoreType]:
        return sorted(self._calculators)
