from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import boto3
from dateutil import parser as date_parser  # type: ignore[import-untyped]

from ecr_cleaner.base import Registry
from ecr_cleaner.settings import Settings


class ECRRegistry(Registry):
    """Amazon ECR registry client.

    Credentials and region come from boto3's default chain; AWS_REGION overrides
    the region.
    """

    @classmethod
    def from_settings(cls, settings: Settings) -> ECRRegistry:
        return cls(boto3.client("ecr", region_name=settings.aws_region))

    def __init__(self, client: Any):
        self.client = client

    def repository_uri(self, repository_name: str) -> str:
        response = self.client.describe_repositories(repositoryNames=[repository_name])
        return str(response["repositories"][0]["repositoryUri"])

    def list_images(
        self, repository_name: str, cursor: str | None = None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"repositoryName": repository_name}
        if cursor:
            params["nextToken"] = cursor
        response: dict[str, Any] = self.client.list_images(**params)
        return response

    def describe_images(
        self,
        repository_name: str,
        image_ids: list[dict[str, str]],
        cursor: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "repositoryName": repository_name,
            "imageIds": image_ids,
        }
        if cursor:
            params["nextToken"] = cursor
        response: dict[str, Any] = self.client.describe_images(**params)
        for detail in response.get("imageDetails", []):
            if detail.get("imagePushedAt") is not None:
                detail["imagePushedAt"] = self._parse_time(detail["imagePushedAt"])
        return response

    def batch_delete_image(
        self, repository_name: str, image_ids: list[dict[str, str]]
    ) -> dict[str, Any]:
        response: dict[str, Any] = self.client.batch_delete_image(
            repositoryName=repository_name, imageIds=image_ids
        )
        return response

    @staticmethod
    def _parse_time(time_str: str | datetime) -> datetime:
        parsed = date_parser.parse(time_str) if isinstance(time_str, str) else time_str
        return parsed.replace(tzinfo=UTC) if parsed.tzinfo is None else parsed
