"""Batched deletion of image tags."""

from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from operator import add

from loguru import logger

from ecr_cleaner.base import DeletionFailure, DeletionOutcome, ImageRef, Registry
from ecr_cleaner.settings import Settings

# batch_delete_image accepts at most 100 image ids per call
BATCH_SIZE = 99


def split_batches(images: list[str], size: int = BATCH_SIZE) -> list[list[str]]:
    return [images[i : i + size] for i in range(0, len(images), size)]


def image_tag(image_url: str) -> str:
    return image_url.partition(":")[2]


def _delete_batch(
    settings: Settings, registry: Registry, batch: list[str]
) -> DeletionOutcome:
    logger.debug(f"IMAGES TO DELETE: {batch}")
    image_ids = [{"imageTag": tag} for tag in map(image_tag, batch) if tag]
    logger.debug(f"IMAGE TAGS TO DELETE: {image_ids}")

    if settings.dry_run or not image_ids:
        return DeletionOutcome()

    response = registry.batch_delete_image(settings.repo_to_clean, image_ids)
    deleted = response.get("imageIds", [])
    failures = [DeletionFailure.from_api(f) for f in response.get("failures", [])]
    for failure in failures:
        logger.warning(f"Failed to delete {failure.ref.tag}: {failure.reason}")

    return DeletionOutcome(
        failures=failures,
        success=[ImageRef.from_api(image_id) for image_id in deleted],
        count=len(deleted),
    )


def delete_images(
    settings: Settings, registry: Registry, images: list[str]
) -> DeletionOutcome:
    """Delete the tags of ``images`` (``<repository url>:<tag>``) in bounded batches.

    Batches run concurrently; their outcomes are merged in batch order. In dry
    run mode nothing is sent to the registry.
    """
    batches = split_batches(images)
    if settings.dry_run:
        logger.info(f"DRY RUN: Would delete {len(images)} image(s)")
    else:
        logger.info(f"Deleting {len(images)} image(s) in {len(batches)} batch(es)")

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        outcomes = list(
            executor.map(lambda batch: _delete_batch(settings, registry, batch), batches)
        )

    return reduce(add, outcomes, DeletionOutcome())
