"""Data models for Deploy Relay."""

from app.models.deployment import (
    DatabaseConfig,
    DeploymentOutputs,
    DeploymentRequest,
    DispatchResponse,
    EKSOutputs,
    RDSOutputs,
    RequestedResources,
    RunHandle,
    RunLifecycle,
    RunStatus,
    S3Outputs,
    StoredDeploymentRecord,
)

__all__ = [
    # Request models
    "DeploymentRequest",
    "DatabaseConfig",
    "RequestedResources",
    "DispatchResponse",
    # Run models
    "RunHandle",
    "RunLifecycle",
    "RunStatus",
    # Output models
    "DeploymentOutputs",
    "S3Outputs",
    "RDSOutputs",
    "EKSOutputs",
    "StoredDeploymentRecord",
]
