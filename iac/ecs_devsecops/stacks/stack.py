import logging

from aws_cdk import CfnOutput, Stack
from constructs import Construct

from ecs_devsecops.config import load_props
from ecs_devsecops.constructs.ci import CIConstruct
from ecs_devsecops.constructs.service import EcsServiceConstruct

logger = logging.getLogger(__name__)


class EcsDevSecOpsStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Nothing is declared until the context has been validated
        props = load_props(self.node)
        logger.info("Building %s in VPC %s", self.stack_name, props["vpc-id"])

        self.service = EcsServiceConstruct(self, "cdk-ecs-service-construct", props)
        self.ci = CIConstruct(
            self,
            "cdk-ci-construct",
            props,
            cluster=self.service.cluster,
            service=self.service.fargate_service.service,
            container_name=self.service.container.container_name,
        )

        CfnOutput(
            self,
            "LoadBalancerDNS",
            value=self.service.fargate_service.load_balancer.load_balancer_dns_name,
        )
        CfnOutput(self, "ECRURI", value=self.ci.ecr_repo.repository_uri)
        CfnOutput(self, "Container", value=self.service.container.container_name)
