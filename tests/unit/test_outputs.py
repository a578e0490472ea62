"""Unit tests for deployment outputs extraction."""

from app.models.deployment import RequestedResources
from app.services.outputs import extract_outputs

MARKER = "DEPLOYMENT_OUTPUTS="


def test_no_marker_gives_empty_outputs():
    outputs = extract_outputs("just some logs", MARKER)
    assert outputs.s3 is None and outputs.rds is None and outputs.eks is None


def test_parses_last_marker_line():
    log = "\n".join(
        [
            'DEPLOYMENT_OUTPUTS={"s3": {"bucketName": "old"}}',
            "pulumi up finished",
            'DEPLOYMENT_OUTPUTS={"s3": {"bucketName": "new", "bucketUrl": "https://new.s3"}}',
        ]
    )

    outputs = extract_outputs(log, MARKER)

    assert outputs.s3.bucket_name == "new"
    assert outputs.s3.bucket_url == "https://new.s3"


def test_marker_after_echo_prefix():
    log = 'echo: DEPLOYMENT_OUTPUTS={"eks": {"clusterName": "c1", "region": "us-east-1"}}'

    outputs = extract_outputs(log, MARKER)

    assert outputs.eks.cluster_name == "c1"
    assert outputs.eks.region == "us-east-1"


def test_filters_unrequested_resources():
    log = (
        'DEPLOYMENT_OUTPUTS={"s3": {"bucketName": "b1"}, '
        '"rds": {"instanceEndpoint": "db:5432", "dbName": "app", "username": "admin"}}'
    )

    outputs = extract_outputs(log, MARKER, RequestedResources(create_rds=True))

    assert outputs.s3 is None
    assert outputs.rds.instance_endpoint == "db:5432"


def test_invalid_payload_gives_empty_outputs():
    outputs = extract_outputs("DEPLOYMENT_OUTPUTS={not json", MARKER)
    assert outputs.model_dump(exclude_none=True) == {}


def test_payload_missing_required_fields():
    outputs = extract_outputs('DEPLOYMENT_OUTPUTS={"rds": {"dbName": "app"}}', MARKER)
    assert outputs.rds is None
