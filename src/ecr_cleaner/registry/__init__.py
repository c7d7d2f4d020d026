from __future__ import annotations

from ecr_cleaner.base import Registry
from ecr_cleaner.settings import Settings

from .ecr import ECRRegistry

__all__ = [
    "Registry",
    "ECRRegistry",
    "init_registry",
]


def init_registry(settings: Settings) -> tuple[Registry, str]:
    registry = ECRRegistry.from_settings(settings)
    region = registry.client.meta.region_name
    info = f"ECR ({region}): {settings.repo_to_clean}"
    return registry, info
