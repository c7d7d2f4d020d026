from __future__ import annotations

from typing import Any

import boto3

from ecr_cleaner.base import Orchestrator
from ecr_cleaner.settings import Settings


class ECSOrchestrator(Orchestrator):
    """Amazon ECS client for task definition lookups."""

    @classmethod
    def from_settings(cls, settings: Settings) -> ECSOrchestrator:
        return cls(boto3.client("ecs", region_name=settings.aws_region))

    def __init__(self, client: Any):
        self.client = client

    def list_task_definitions(
        self, status: str, cursor: str | None = None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"status": status}
        if cursor:
            params["nextToken"] = cursor
        response: dict[str, Any] = self.client.list_task_definitions(**params)
        return response

    def describe_task_definition(self, arn: str) -> dict[str, Any]:
        response: dict[str, Any] = self.client.describe_task_definition(
            taskDefinition=arn
        )
        return response
