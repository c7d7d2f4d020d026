"""Retention filters for registry cleanup."""

from collections.abc import Iterable
from datetime import UTC, datetime

from loguru import logger

from ecr_cleaner.base import ImageDetail
from ecr_cleaner.settings import Settings

PROTECTED_TAG = "latest"


def image_age_days(pushed_at: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since the image was pushed."""
    now = now or datetime.now(UTC)
    return (now - pushed_at).days


def create_repo_url(repository_url: str, image_tag: str) -> str:
    return f"{repository_url}:{image_tag}"


def group_key(image_tag: str, envs: Iterable[str]) -> str:
    """Retention group of a tag: the first env label it contains, else the tag itself."""
    return next((env for env in envs if env in image_tag), image_tag)


def filter_images_by_date_threshold(
    images: list[ImageDetail],
    settings: Settings,
    repository_url: str,
    now: datetime | None = None,
) -> list[str]:
    """Select images pushed at least REPO_AGE_THRESHOLD days ago.

    Images without a push time and images tagged ``latest`` are never selected.
    """
    if settings.repo_age_threshold is None:
        return []

    logger.debug(
        f"IMAGES TO PROCESS (age threshold): {[img.image_tag for img in images]}"
    )
    now = now or datetime.now(UTC)

    eligible = []
    for image in images:
        if image.pushed_at is None or image.image_tag == PROTECTED_TAG:
            continue
        age_days = image_age_days(image.pushed_at, now)
        if age_days >= settings.repo_age_threshold:
            logger.debug(
                f"'{image.image_tag}': DELETE - >={settings.repo_age_threshold}d ({age_days}d old)"
            )
            eligible.append(create_repo_url(repository_url, image.image_tag))

    return eligible


def filter_images_by_first_n(
    images: list[ImageDetail], settings: Settings, repository_url: str
) -> list[str]:
    """Select all but the REPO_FIRST_N_THRESHOLD newest images of each group.

    Tags are grouped by the first configured env label they contain; tags
    matching no label form their own group. Images without a push time count
    as the oldest.
    """
    keep = settings.repo_first_n_threshold
    if keep is None:
        return []

    logger.debug(
        f"IMAGES TO PROCESS (first {keep}): {[img.image_tag for img in images]}"
    )

    by_created = sorted(
        images,
        key=lambda img: img.pushed_at.timestamp() if img.pushed_at else float("-inf"),
    )

    groups: dict[str, list[str]] = {}
    for image in by_created:
        groups.setdefault(group_key(image.image_tag, settings.envs), []).append(
            image.image_tag
        )

    eligible = []
    for key, tags in groups.items():
        older = tags[: max(0, len(tags) - keep)]
        if older:
            logger.debug(f"[{key}] DELETE {older}, KEEP {tags[len(older):]}")
        eligible.extend(create_repo_url(repository_url, tag) for tag in older)

    return eligible


def filter_out_active_images(
    candidates: list[str], active_images: Iterable[str]
) -> list[str]:
    """Drop candidates referenced by an active task definition, keeping order."""
    active = set(active_images)
    logger.debug(f"BEFORE FILTER: {candidates}")
    return [image for image in candidates if image not in active]
