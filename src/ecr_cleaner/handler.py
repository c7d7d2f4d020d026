"""AWS Lambda entry point."""

from typing import Any

from loguru import logger

from ecr_cleaner.log import configure_logging
from ecr_cleaner.orchestrator import init_orchestrator
from ecr_cleaner.pipeline import CleanupPipeline
from ecr_cleaner.registry import init_registry
from ecr_cleaner.settings import Settings


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    settings = Settings()
    configure_logging(settings.log_level)
    registry, registry_info = init_registry(settings)
    logger.info(f"Registry: {registry_info} | Dry run: {settings.dry_run}")

    outcome = CleanupPipeline(settings, registry, init_orchestrator(settings)).run()
    logger.info(f"Deleted: {outcome.count} images, {len(outcome.failures)} failures")
    return outcome.to_dict()
