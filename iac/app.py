## Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
## SPDX-License-Identifier: MIT-0
#!/usr/bin/env python3
import logging

import aws_cdk as cdk

from ecs_devsecops.config import deployment_env
from ecs_devsecops.stacks.stack import EcsDevSecOpsStack

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = cdk.App()
EcsDevSecOpsStack(app, "CdkEcsDevsecopsStack", env=deployment_env())

app.synth()
