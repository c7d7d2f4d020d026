import sys

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger
from pydantic import ValidationError

from ecr_cleaner.log import configure_logging
from ecr_cleaner.orchestrator import init_orchestrator
from ecr_cleaner.pipeline import CleanupPipeline
from ecr_cleaner.registry import init_registry
from ecr_cleaner.settings import Settings


def main() -> int:
    try:
        settings = Settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings.log_level)

    try:
        registry, registry_info = init_registry(settings)
        orchestrator = init_orchestrator(settings)
    except BotoCoreError as e:
        logger.error(f"Error: {e}")
        return 1

    if settings.repo_age_threshold is not None:
        threshold = f"Age>={settings.repo_age_threshold}d"
    elif settings.repo_first_n_threshold is not None:
        threshold = f"Keep newest {settings.repo_first_n_threshold}"
    else:
        threshold = "No threshold"
    logger.info(
        f"Registry: {registry_info} | {threshold} | Envs: {settings.envs} | "
        f"Dry run: {settings.dry_run}"
    )

    try:
        outcome = CleanupPipeline(settings, registry, orchestrator).run()
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Cleanup aborted: {e}")
        return 1

    logger.info(f"Deleted: {outcome.count} images, {len(outcome.failures)} failures")

    return 0 if not outcome.failures else 1


if __name__ == "__main__":
    sys.exit(main())
