"""Cleanup pipeline: list -> describe -> select -> exclude active -> delete."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger

from ecr_cleaner.active import get_active_images
from ecr_cleaner.base import DeletionOutcome, ImageDetail, ImageRef, Orchestrator, Registry
from ecr_cleaner.deletion import delete_images
from ecr_cleaner.logic import (
    filter_images_by_date_threshold,
    filter_images_by_first_n,
    filter_out_active_images,
)
from ecr_cleaner.pagination import paginate
from ecr_cleaner.settings import Settings

# describe_images accepts at most 100 image ids per call
DESCRIBE_CHUNK_SIZE = 100


def _parse_detail(detail: dict[str, Any]) -> ImageDetail:
    return ImageDetail(
        ref=ImageRef(detail.get("imageDigest")),
        pushed_at=detail.get("imagePushedAt"),
        tags=list(detail.get("imageTags") or []),
    )


@dataclass
class CleanupPipeline:
    settings: Settings
    registry: Registry
    orchestrator: Orchestrator
    now: datetime | None = None

    @property
    def repository(self) -> str:
        return self.settings.repo_to_clean

    def get_repo_images(self) -> list[ImageRef]:
        image_ids = paginate(
            lambda cursor: self.registry.list_images(self.repository, cursor),
            "imageIds",
        )
        return [ImageRef.from_api(image_id) for image_id in image_ids]

    def describe_images(self, images: list[ImageRef]) -> list[ImageDetail]:
        # A digest can appear once per tag in list_images; describe each once
        image_ids = list({ref.digest or ref.tag: ref.to_api() for ref in images}.values())
        details = []
        for i in range(0, len(image_ids), DESCRIBE_CHUNK_SIZE):
            chunk = image_ids[i : i + DESCRIBE_CHUNK_SIZE]
            details.extend(
                paginate(
                    lambda cursor, chunk=chunk: self.registry.describe_images(
                        self.repository, chunk, cursor
                    ),
                    "imageDetails",
                )
            )
        return [_parse_detail(detail) for detail in details]

    def select_candidates(
        self, images: list[ImageDetail], repository_url: str
    ) -> list[str]:
        if self.settings.repo_age_threshold is not None:
            return filter_images_by_date_threshold(
                images, self.settings, repository_url, self.now
            )
        if self.settings.repo_first_n_threshold is not None:
            return filter_images_by_first_n(images, self.settings, repository_url)
        logger.warning("No retention threshold configured, nothing to select")
        return []

    def exclude_active(self, candidates: list[str]) -> list[str]:
        active = get_active_images(self.settings, self.orchestrator)
        return filter_out_active_images(candidates, active)

    def delete(self, images: list[str]) -> DeletionOutcome:
        return delete_images(self.settings, self.registry, images)

    def run(self) -> DeletionOutcome:
        repository_url = self.registry.repository_uri(self.repository)
        images = self.get_repo_images()
        logger.info(f"Found {len(images)} image(s) in {repository_url}")

        details = self.describe_images(images)
        candidates = self.select_candidates(details, repository_url)
        logger.info(f"{len(candidates)} image(s) eligible for deletion")
        if not candidates:
            logger.info("No images to delete")
            return DeletionOutcome()

        eligible = self.exclude_active(candidates)
        logger.info(
            f"{len(candidates) - len(eligible)} eligible image(s) in use by active "
            f"task definitions, {len(eligible)} left to delete"
        )
        if not eligible:
            logger.info("No images to delete")
            return DeletionOutcome()

        return self.delete(eligible)
