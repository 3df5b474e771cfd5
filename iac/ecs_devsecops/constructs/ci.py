import logging

from aws_cdk import (
    Stack,
    aws_iam as iam,
    aws_codecommit as codecommit,
    aws_codebuild as codebuild,
    aws_codepipeline as codepipeline,
    aws_codepipeline_actions as codepipeline_actions,
    aws_ecr as ecr,
    aws_ecs as ecs,
)
from constructs import Construct

from ecs_devsecops import config
from ecs_devsecops.constructs.buildspec import build_spec_object

logger = logging.getLogger(__name__)

SOURCE_STAGE = "Source"
BUILD_STAGE = "Build"
APPROVE_STAGE = "Approve"
DEPLOY_STAGE = "Deploy-to-ECS"


class CIConstruct(Construct):
    """Registry, source repository, build project and the four stage pipeline."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        props,
        cluster: ecs.ICluster,
        service: ecs.IBaseService,
        container_name: str,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.ecr_repo = ecr.Repository(self, "cs-cdk-devsecops-ecr-repo")

        self.codecommit_repo = codecommit.Repository(
            self,
            config.SOURCE_REPOSITORY_NAME,
            repository_name=config.SOURCE_REPOSITORY_NAME,
            description=config.SOURCE_REPOSITORY_NAME,
        )

        self.build_project = codebuild.PipelineProject(
            self,
            "DevSecOpsBuild",
            project_name=Stack.of(self).stack_name,
            environment=codebuild.BuildEnvironment(
                build_image=codebuild.LinuxBuildImage.AMAZON_LINUX_2_5,
                privileged=True,
            ),
            environment_variables={
                "CLUSTER_NAME": codebuild.BuildEnvironmentVariable(
                    value=cluster.cluster_name
                ),
                "ECR_REPOSITORY_URI": codebuild.BuildEnvironmentVariable(
                    value=self.ecr_repo.repository_uri
                ),
            },
            build_spec=codebuild.BuildSpec.from_object(
                build_spec_object(container_name)
            ),
        )

        self.ecr_repo.grant_pull_push(self.build_project)
        self.build_project.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "ecs:DescribeCluster",
                    "ecr:GetAuthorizationToken",
                    "ecr:BatchCheckLayerAvailability",
                    "ecr:BatchGetImage",
                    "ecr:GetDownloadUrlForLayer",
                ],
                effect=iam.Effect.ALLOW,
                resources=[cluster.cluster_arn],
            )
        )

        self.source_output = codepipeline.Artifact()
        self.build_output = codepipeline.Artifact()

        source_action = codepipeline_actions.CodeCommitSourceAction(
            action_name="CodeCommit_Source",
            repository=self.codecommit_repo,
            branch=config.SOURCE_BRANCH,
            output=self.source_output,
        )
        build_action = codepipeline_actions.CodeBuildAction(
            action_name="CodeBuild",
            project=self.build_project,
            input=self.source_output,
            outputs=[self.build_output],
        )
        approval_action = codepipeline_actions.ManualApprovalAction(
            action_name="Approve",
            additional_information=(
                f"Approve to deploy {container_name} to the ECS service"
            ),
        )
        deploy_action = codepipeline_actions.EcsDeployAction(
            action_name="DeployAction",
            service=service,
            image_file=codepipeline.ArtifactPath(
                self.build_output, config.IMAGE_DEFINITIONS_FILE
            ),
        )

        stages = [
            codepipeline.StageProps(stage_name=SOURCE_STAGE, actions=[source_action]),
            codepipeline.StageProps(stage_name=BUILD_STAGE, actions=[build_action]),
            codepipeline.StageProps(stage_name=APPROVE_STAGE, actions=[approval_action]),
            codepipeline.StageProps(stage_name=DEPLOY_STAGE, actions=[deploy_action]),
        ]
        self.pipeline = codepipeline.Pipeline(
            self,
            "cs-cdk-devsecops-pipeline",
            pipeline_type=codepipeline.PipelineType.V2,
            stages=stages,
        )

        # The L2 approval action has no timeout setting
        approve_index = [s.stage_name for s in stages].index(APPROVE_STAGE)
        self.pipeline.node.default_child.add_property_override(
            f"Stages.{approve_index}.Actions.0.TimeoutInMinutes",
            props["approval-timeout-minutes"],
        )
        logger.info(
            "Declared pipeline %s with manual approval timeout of %d minutes",
            " -> ".join(s.stage_name for s in stages),
            props["approval-timeout-minutes"],
        )
