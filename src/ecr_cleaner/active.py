"""Images referenced by ACTIVE task definitions."""

import time
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from ecr_cleaner.base import Orchestrator
from ecr_cleaner.pagination import paginate
from ecr_cleaner.settings import Settings

ACTIVE_STATUS = "ACTIVE"


def _task_definition_images(
    orchestrator: Orchestrator, arn: str, api_delay: int
) -> list[str]:
    response = orchestrator.describe_task_definition(arn)
    time.sleep(api_delay / 1000)
    container_definitions = (response.get("taskDefinition") or {}).get(
        "containerDefinitions"
    ) or []
    return [c["image"] for c in container_definitions if c.get("image")]


def get_active_images(settings: Settings, orchestrator: Orchestrator) -> frozenset[str]:
    """Collect every image named by a container definition of an ACTIVE task definition.

    Only the task definition status matters, not whether any task is running.
    """
    arns = paginate(
        lambda cursor: orchestrator.list_task_definitions(ACTIVE_STATUS, cursor),
        "taskDefinitionArns",
    )
    logger.info(f"Found {len(arns)} active task definition(s)")

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        per_definition = executor.map(
            lambda arn: _task_definition_images(orchestrator, arn, settings.api_delay),
            arns,
        )
        active = frozenset(image for images in per_definition for image in images)

    logger.debug(f"ACTIVE IMAGES: {sorted(active)}")
    return active
