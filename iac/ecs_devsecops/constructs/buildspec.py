import json

from ecs_devsecops import config

TAGGED_IMAGE = "$ECR_REPOSITORY_URI:$IMAGE_TAG"
LATEST_IMAGE = "$ECR_REPOSITORY_URI:latest"
INLINE_SCAN_SCRIPT = "inline_scan.sh"


def image_definitions(container_name: str, image_uri: str) -> list:
    """The deploy action expects one entry per container it should update."""
    return [{"name": container_name, "imageUri": image_uri}]


def image_definitions_command(container_name: str) -> str:
    manifest = json.dumps(
        image_definitions(container_name, "%s"), separators=(",", ":")
    )
    return f"printf '{manifest}' {TAGGED_IMAGE} > {config.IMAGE_DEFINITIONS_FILE}"


def build_spec_object(container_name: str = config.CONTAINER_NAME) -> dict:
    return {
        "version": "0.2",
        "phases": {
            "pre_build": {
                "commands": [
                    "env",
                    "export TAG=${CODEBUILD_RESOLVED_SOURCE_VERSION}",
                ]
            },
            "build": {
                "on-failure": "ABORT",
                "commands": [
                    'echo "DOCKER FILE LINT STAGE"',
                    f"docker pull {config.HADOLINT_IMAGE}",
                    f"docker run --rm -i -v ${{PWD}}/.hadolint.yml:/.hadolint.yaml {config.HADOLINT_IMAGE} "
                    f"hadolint -f json - < ./{config.DOCKERFILE}",
                    'echo "DOCKER FILE LINT STAGE - PASSED"',
                    "echo Logging in to Amazon ECR...",
                    "aws ecr get-login-password --region $AWS_DEFAULT_REGION | "
                    "docker login --username AWS --password-stdin ${ECR_REPOSITORY_URI%%/*}",
                    "IMAGE_TAG=$(echo $CODEBUILD_RESOLVED_SOURCE_VERSION | cut -c 1-7)",
                    f"docker build -f {config.DOCKERFILE} -t {LATEST_IMAGE} .",
                    f"docker tag {LATEST_IMAGE} {TAGGED_IMAGE}",
                    f"docker history --no-trunc {TAGGED_IMAGE}",
                ],
            },
            "post_build": {
                "commands": [
                    "if [ \"$CODEBUILD_BUILD_SUCCEEDING\" = \"0\" ]; "
                    "then echo 'Build failed, aborting before push'; exit 1; fi",
                    "echo Build completed on `date`",
                    f"docker push {LATEST_IMAGE}",
                    f"docker push {TAGGED_IMAGE}",
                    'echo "Deep Vulnerability Scan By Anchore Engine"',
                    'echo "POST_BUILD Phase Will fail if Container fails with Vulnerabilities"',
                    "export COMPOSE_INTERACTIVE_NO_CLI=1",
                    f"curl -sSfL {config.INLINE_SCAN_URL} -o {INLINE_SCAN_SCRIPT}",
                    f"bash {INLINE_SCAN_SCRIPT} -f {TAGGED_IMAGE}",
                    "echo Writing image definitions file...",
                    image_definitions_command(container_name),
                    f"cat {config.IMAGE_DEFINITIONS_FILE}",
                ]
            },
        },
        "artifacts": {"files": [config.IMAGE_DEFINITIONS_FILE]},
    }
