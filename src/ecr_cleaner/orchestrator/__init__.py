from __future__ import annotations

from ecr_cleaner.base import Orchestrator
from ecr_cleaner.settings import Settings

from .ecs import ECSOrchestrator

__all__ = [
    "Orchestrator",
    "ECSOrchestrator",
    "init_orchestrator",
]


def init_orchestrator(settings: Settings) -> Orchestrator:
    return ECSOrchestrator.from_settings(settings)
