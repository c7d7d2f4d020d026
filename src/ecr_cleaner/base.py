from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ecr_cleaner.settings import Settings


@dataclass(frozen=True)
class ImageRef:
    """Identifier of one pushed image, as accepted by the registry image APIs."""

    digest: str | None = None
    tag: str | None = None

    @classmethod
    def from_api(cls, image_id: dict[str, Any]) -> ImageRef:
        return cls(image_id.get("imageDigest"), image_id.get("imageTag"))

    def to_api(self) -> dict[str, str]:
        image_id: dict[str, str] = {}
        if self.digest:
            image_id["imageDigest"] = self.digest
        if self.tag:
            image_id["imageTag"] = self.tag
        return image_id


@dataclass
class ImageDetail:
    """Described image: its identity, push time and tags.

    The first tag is the one retention decisions are made on.
    """

    ref: ImageRef
    pushed_at: datetime | None
    tags: list[str] = field(default_factory=list)

    @property
    def image_tag(self) -> str:
        return self.tags[0] if self.tags else ""


@dataclass(frozen=True)
class DeletionFailure:
    ref: ImageRef
    reason: str

    @classmethod
    def from_api(cls, failure: dict[str, Any]) -> DeletionFailure:
        reason = failure.get("failureReason") or failure.get("failureCode", "")
        return cls(ImageRef.from_api(failure.get("imageId", {})), reason)


@dataclass
class DeletionOutcome:
    """Result of one or more batch deletions.

    Outcomes combine with ``+``: failures and successes are concatenated and
    counts summed. ``DeletionOutcome()`` is the identity.
    """

    failures: list[DeletionFailure] = field(default_factory=list)
    success: list[ImageRef] = field(default_factory=list)
    count: int = 0

    def __add__(self, other: DeletionOutcome) -> DeletionOutcome:
        return DeletionOutcome(
            failures=[*self.failures, *other.failures],
            success=[*self.success, *other.success],
            count=self.count + other.count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "failures": [
                {"imageId": f.ref.to_api(), "failureReason": f.reason}
                for f in self.failures
            ],
            "success": [ref.to_api() for ref in self.success],
            "count": self.count,
        }


class Registry(ABC):
    """Image registry capability used by the cleanup pipeline.

    Listing methods return one page of the raw API response; the items sit under
    the API's own key and ``nextToken`` is present while more pages remain.
    """

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings) -> Registry:
        pass

    @abstractmethod
    def repository_uri(self, repository_name: str) -> str:
        pass

    @abstractmethod
    def list_images(
        self, repository_name: str, cursor: str | None = None
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    def describe_images(
        self,
        repository_name: str,
        image_ids: list[dict[str, str]],
        cursor: str | None = None,
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    def batch_delete_image(
        self, repository_name: str, image_ids: list[dict[str, str]]
    ) -> dict[str, Any]:
        pass


class Orchestrator(ABC):
    """Deployment orchestrator capability: lists and describes task definitions."""

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings) -> Orchestrator:
        pass

    @abstractmethod
    def list_task_definitions(
        self, status: str, cursor: str | None = None
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    def describe_task_definition(self, arn: str) -> dict[str, Any]:
        pass
