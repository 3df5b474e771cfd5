import logging
import os

import aws_cdk as cdk

logger = logging.getLogger(__name__)

# Context keys
VPC_ID_CONTEXT_KEY = "vpcId"
APPROVAL_TIMEOUT_CONTEXT_KEY = "approvalTimeoutMinutes"

# Manual approval timeout bounds accepted by CodePipeline, in minutes
APPROVAL_TIMEOUT_DEFAULT = 7 * 24 * 60
APPROVAL_TIMEOUT_MIN = 5
APPROVAL_TIMEOUT_MAX = 86400

# Container
CONTAINER_NAME = "cs-cdk-devsecops-container"
CONTAINER_IMAGE = "amazon/amazon-ecs-sample"
CONTAINER_CPU = 256
CONTAINER_MEMORY_MIB = 256
CONTAINER_PORT = 80
LOG_STREAM_PREFIX = "cs-cdk-devsecops-logs"

# Service
DESIRED_COUNT = 2
LISTENER_PORT = 80

EXECUTION_ROLE_ACTIONS = [
    "ecr:GetAuthorizationToken",
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
    "logs:CreateLogStream",
    "logs:PutLogEvents",
]

# Source
SOURCE_REPOSITORY_NAME = "amazon-ecs-fargate-cdk-cicd"
SOURCE_BRANCH = "main"

# Build job
IMAGE_DEFINITIONS_FILE = "imagedefinitions.json"
DOCKERFILE = "Dockerfile"
HADOLINT_IMAGE = "hadolint/hadolint:v1.16.2"
INLINE_SCAN_URL = "https://ci-tools.anchore.io/inline_scan-v0.3.3"


class MissingContextError(ValueError):
    """A required context value was not supplied."""


class InvalidContextError(ValueError):
    """A context value was supplied but cannot be used."""


def _approval_timeout(raw) -> int:
    if raw is None:
        return APPROVAL_TIMEOUT_DEFAULT
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise InvalidContextError(
            f"{APPROVAL_TIMEOUT_CONTEXT_KEY} must be a whole number of minutes, got {raw!r}"
        )
    try:
        minutes = int(raw)
    except (TypeError, ValueError):
        raise InvalidContextError(
            f"{APPROVAL_TIMEOUT_CONTEXT_KEY} must be a whole number of minutes, got {raw!r}"
        )
    if not APPROVAL_TIMEOUT_MIN <= minutes <= APPROVAL_TIMEOUT_MAX:
        raise InvalidContextError(
            f"{APPROVAL_TIMEOUT_CONTEXT_KEY} must be between {APPROVAL_TIMEOUT_MIN} "
            f"and {APPROVAL_TIMEOUT_MAX} minutes, got {minutes}"
        )
    return minutes


def load_props(node) -> dict:
    """
    Read the deployment inputs from the CDK context of ``node``.

    Raises MissingContextError when no VPC id was given, so callers can fail
    before declaring any resource.
    """
    vpc_id = node.try_get_context(VPC_ID_CONTEXT_KEY)
    if not vpc_id or not str(vpc_id).strip():
        logger.error("Context value %s is missing", VPC_ID_CONTEXT_KEY)
        raise MissingContextError(
            f"VPC ID must be provided in the context. "
            f"Use -c {VPC_ID_CONTEXT_KEY}=<your-vpc-id> when deploying."
        )

    props = {}
    props["vpc-id"] = str(vpc_id).strip()
    props["approval-timeout-minutes"] = _approval_timeout(
        node.try_get_context(APPROVAL_TIMEOUT_CONTEXT_KEY)
    )
    return props


def deployment_env() -> cdk.Environment:
    return cdk.Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=os.getenv("CDK_DEFAULT_REGION"),
    )
