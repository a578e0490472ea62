"""Deployment outputs reported by the infrastructure workflow.

The workflow prints its stack outputs as one JSON line after the marker, e.g.::

    DEPLOYMENT_OUTPUTS={"s3": {"bucketName": "b1", "region": "eu-west-1"}}
"""

import json

from pydantic import ValidationError as PydanticValidationError

from app.models.deployment import DeploymentOutputs, RequestedResources
from app.utils.logging import get_logger

logger = get_logger(__name__)


def extract_outputs(
    log_text: str,
    marker: str,
    requested: RequestedResources | None = None,
) -> DeploymentOutputs:
    """Parse the last outputs line in the log.

    Resources that were not requested are dropped when the request is known.
    """
    payload = None
    for line in reversed(log_text.splitlines()):
        _, found, rest = line.partition(marker)
        if found and rest.strip():
            payload = rest.strip()
            break

    if payload is None:
        return DeploymentOutputs()

    try:
        outputs = DeploymentOutputs.model_validate(json.loads(payload))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logger.warning("outputs.invalid", error=str(e))
        return DeploymentOutputs()

    if requested is None:
        return outputs
    return DeploymentOutputs(
        s3=outputs.s3 if requested.create_s3 else None,
        rds=outputs.rds if requested.create_rds else None,
        eks=outputs.eks if requested.create_eks else None,
    )
