#!/usr/bin/env python3
import aws_cdk as cdk

from serverless_cicd.config import load_config
from serverless_cicd.pipeline import ServerlessCICDPipelineStack, stack_env, stack_id

app = cdk.App()
config = load_config(app.node.try_get_context("config"))
general_config = config["general"]

ServerlessCICDPipelineStack(
    app,
    id=stack_id(general_config),
    general_config=general_config,
    stages_config=config["stage"],
    env=stack_env(general_config),
)

app.synth()
