import logging

from aws_cdk import (
    Stack,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_ecs_patterns as ecs_patterns,
    aws_iam as iam,
)
from constructs import Construct

from ecs_devsecops import config

logger = logging.getLogger(__name__)


class EcsServiceConstruct(Construct):
    """VPC lookup, cluster, task definition and the load balanced Fargate service."""

    def __init__(
        self, scope: Construct, construct_id: str, props, **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        stack_name = Stack.of(self).stack_name

        self.vpc = ec2.Vpc.from_lookup(self, "vpc", vpc_id=props["vpc-id"])
        logger.info("Using VPC %s", props["vpc-id"])

        self.cluster = ecs.Cluster(
            self, "ecs-cdk-devsecops-cluster", vpc=self.vpc
        )

        self.task_role = iam.Role(
            self,
            "ecs-taskRole",
            role_name=f"ecs-taskRole-{stack_name}",
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com"),
        )

        self.task_definition = ecs.FargateTaskDefinition(
            self, "cs-cdk-devsecops-taskdef", task_role=self.task_role
        )
        self.task_definition.add_to_execution_role_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                resources=["*"],
                actions=list(config.EXECUTION_ROLE_ACTIONS),
            )
        )

        self.container = self.task_definition.add_container(
            config.CONTAINER_NAME,
            container_name=config.CONTAINER_NAME,
            image=ecs.ContainerImage.from_registry(config.CONTAINER_IMAGE),
            memory_limit_mib=config.CONTAINER_MEMORY_MIB,
            cpu=config.CONTAINER_CPU,
            logging=ecs.AwsLogDriver(stream_prefix=config.LOG_STREAM_PREFIX),
        )
        self.container.add_port_mappings(
            ecs.PortMapping(
                container_port=config.CONTAINER_PORT, protocol=ecs.Protocol.TCP
            )
        )

        self.fargate_service = ecs_patterns.ApplicationLoadBalancedFargateService(
            self,
            "cs-cdk-devsecops-service",
            cluster=self.cluster,
            task_definition=self.task_definition,
            public_load_balancer=True,
            desired_count=config.DESIRED_COUNT,
            listener_port=config.LISTENER_PORT,
        )
        logger.info(
            "Declared service with %d tasks of %s on port %d",
            config.DESIRED_COUNT,
            config.CONTAINER_NAME,
            config.LISTENER_PORT,
        )
