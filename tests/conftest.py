import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from ecs_devsecops.stacks.stack import EcsDevSecOpsStack

TEST_ENV = cdk.Environment(account="123456789012", region="us-east-1")
TEST_VPC_ID = "vpc-0123abcd"


@pytest.fixture
def app():
    """CDK App with a VPC id in context"""
    return cdk.App(context={"vpcId": TEST_VPC_ID})


@pytest.fixture
def stack(app):
    return EcsDevSecOpsStack(app, "TestStack", env=TEST_ENV)


@pytest.fixture
def template(stack):
    return Template.from_stack(stack)
