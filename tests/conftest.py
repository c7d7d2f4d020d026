import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ecr_cleaner.base import Orchestrator, Registry
from ecr_cleaner.settings import Settings

SETTINGS_ENV = [
    "REPO_TO_CLEAN",
    "DRY_RUN",
    "REPO_AGE_THRESHOLD",
    "REPO_FIRST_N_THRESHOLD",
    "ENVS",
    "API_DELAY",
    "MAX_WORKERS",
    "AWS_REGION",
    "LOG_LEVEL",
]

NOW = datetime(2026, 1, 1, tzinfo=UTC)
REPO_URL = "123456789012.dkr.ecr.us-east-1.amazonaws.com/repo"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


def days_ago(days: int) -> datetime:
    return NOW - timedelta(days=days)


class FakeRegistry(Registry):
    """In-memory registry serving images in pages of ``page_size``."""

    def __init__(
        self,
        details: list[dict[str, Any]],
        page_size: int = 2,
        failures: list[dict[str, Any]] | None = None,
    ):
        self.details = details
        self.page_size = page_size
        self.failures = failures or []
        self.deleted: list[list[dict[str, str]]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "FakeRegistry":
        return cls([])

    def _page(self, items: list[Any], key: str, cursor: str | None) -> dict[str, Any]:
        start = int(cursor or 0)
        end = start + self.page_size
        response: dict[str, Any] = {key: items[start:end]}
        if end < len(items):
            response["nextToken"] = str(end)
        return response

    def repository_uri(self, repository_name: str) -> str:
        return REPO_URL

    def list_images(self, repository_name: str, cursor: str | None = None) -> dict[str, Any]:
        image_ids = [
            {"imageDigest": d["imageDigest"], "imageTag": tag}
            for d in self.details
            for tag in d.get("imageTags") or [None]
        ]
        image_ids = [{k: v for k, v in i.items() if v} for i in image_ids]
        return self._page(image_ids, "imageIds", cursor)

    def describe_images(
        self,
        repository_name: str,
        image_ids: list[dict[str, str]],
        cursor: str | None = None,
    ) -> dict[str, Any]:
        digests = {i.get("imageDigest") for i in image_ids}
        matching = [d for d in self.details if d["imageDigest"] in digests]
        return self._page(matching, "imageDetails", cursor)

    def batch_delete_image(
        self, repository_name: str, image_ids: list[dict[str, str]]
    ) -> dict[str, Any]:
        self.deleted.append(image_ids)
        failed = {f["imageId"]["imageTag"] for f in self.failures}
        return {
            "imageIds": [i for i in image_ids if i["imageTag"] not in failed],
            "failures": [f for f in self.failures if f["imageId"] in image_ids],
        }


class FakeOrchestrator(Orchestrator):
    """In-memory task definitions keyed by ARN, listed one per page."""

    def __init__(self, task_definitions: dict[str, list[str]]):
        self.task_definitions = task_definitions
        self.described: list[str] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "FakeOrchestrator":
        return cls({})

    def list_task_definitions(self, status: str, cursor: str | None = None) -> dict[str, Any]:
        arns = list(self.task_definitions)
        start = int(cursor or 0)
        response: dict[str, Any] = {"taskDefinitionArns": arns[start : start + 1]}
        if start + 1 < len(arns):
            response["nextToken"] = str(start + 1)
        return response

    def describe_task_definition(self, arn: str) -> dict[str, Any]:
        self.described.append(arn)
        return {
            "taskDefinition": {
                "containerDefinitions": [
                    {"name": f"c{i}", "image": image}
                    for i, image in enumerate(self.task_definitions[arn])
                ]
            }
        }


def image_detail(
    digest: str, tags: list[str], pushed_at: datetime | None
) -> dict[str, Any]:
    detail: dict[str, Any] = {"imageDigest": digest}
    if tags:
        detail["imageTags"] = tags
    if pushed_at is not None:
        detail["imagePushedAt"] = pushed_at
    return detail
