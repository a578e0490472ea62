"""Deployment data models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamelModel(BaseModel):
    """Model serialized with the camelCase keys the browser client uses."""

    model_config = ConfigDict(populate_by_name=True)


class DatabaseConfig(CamelModel):
    """Requested settings for one relational database."""

    db_name: str = Field(default="", alias="dbName")
    username: str = ""
    password: str = ""


class DeploymentRequest(CamelModel):
    """What the user asked to have provisioned."""

    user_id: str | None = Field(default=None, alias="userId")
    create_s3: bool = Field(default=False, alias="createS3")
    create_rds: bool = Field(default=False, alias="createRDS")
    create_eks: bool = Field(default=False, alias="createEKS")
    s3_bucket_name: str | None = Field(default=None, alias="s3BucketName")
    databases: list[DatabaseConfig] = Field(default_factory=list)

    @field_validator("create_s3", "create_rds", "create_eks", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        # Form clients send "true" and "false" as often as real booleans
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @field_validator("user_id", "s3_bucket_name", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    def workflow_inputs(self) -> dict[str, str]:
        """Coerce the request to the string-typed workflow input schema."""
        inputs = {
            "userId": self.user_id or "",
            "createS3": _flag(self.create_s3),
            "createRDS": _flag(self.create_rds),
            "createEKS": _flag(self.create_eks),
            "s3BucketName": self.s3_bucket_name or "",
        }
        # Only the first database is provisioned
        if self.create_rds and self.databases:
            database = self.databases[0]
            inputs["dbName"] = database.db_name
            inputs["dbUsername"] = database.username
            inputs["dbPassword"] = database.password
        return inputs

    def requested(self) -> "RequestedResources":
        return RequestedResources(
            create_s3=self.create_s3,
            create_rds=self.create_rds,
            create_eks=self.create_eks,
        )


def _flag(value: bool) -> str:
    return "true" if value else "false"


class RequestedResources(CamelModel):
    """Resource-selection flags of a deployment."""

    create_s3: bool = Field(default=False, alias="createS3")
    create_rds: bool = Field(default=False, alias="createRDS")
    create_eks: bool = Field(default=False, alias="createEKS")


class RunHandle(CamelModel):
    """Identifies one dispatched workflow run."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    run_id: str = Field(alias="runId")
    user_id: str = Field(alias="userId")
    requested: RequestedResources
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")


class RunLifecycle(str, Enum):
    """Workflow run lifecycle as exposed to clients."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"

    @classmethod
    def from_github(cls, status: str) -> "RunLifecycle":
        """Collapse GitHub's run statuses onto the three client-facing ones.

        ``in_progress`` is running; ``waiting``, ``requested``, ``pending`` and
        anything else not yet started count as queued.
        """
        if status == "in_progress":
            return cls.RUNNING
        if status == cls.COMPLETED.value:
            return cls.COMPLETED
        return cls.QUEUED


class RunStatus(BaseModel):
    """Snapshot of a remote workflow run."""

    run_id: str
    status: str
    conclusion: str | None = None
    logs_url: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == RunLifecycle.COMPLETED.value

    @property
    def succeeded(self) -> bool:
        return self.is_completed and self.conclusion == "success"


class S3Outputs(CamelModel):
    bucket_name: str = Field(alias="bucketName")
    bucket_url: str | None = Field(default=None, alias="bucketUrl")
    region: str | None = None


class RDSOutputs(CamelModel):
    instance_endpoint: str = Field(alias="instanceEndpoint")
    db_name: str = Field(alias="dbName")
    username: str
    region: str | None = None


class EKSOutputs(CamelModel):
    cluster_name: str = Field(alias="clusterName")
    cluster_endpoint: str | None = Field(default=None, alias="clusterEndpoint")
    region: str | None = None


class DeploymentOutputs(CamelModel):
    """Resource details reported by a successful infrastructure run."""

    s3: S3Outputs | None = None
    rds: RDSOutputs | None = None
    eks: EKSOutputs | None = None


class StoredDeploymentRecord(CamelModel):
    """Everything the client needs to remember a successful deployment."""

    run_id: str = Field(alias="runId")
    user_id: str | None = Field(default=None, alias="userId")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    requested: RequestedResources | None = None
    outputs: DeploymentOutputs = Field(default_factory=DeploymentOutputs)


class DispatchResponse(CamelModel):
    """Successful answer of the dispatch endpoint."""

    message: str = "Deployment triggered"
    run_id: str = Field(alias="runId")
