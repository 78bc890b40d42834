import aws_cdk as cdk
from aws_cdk.assertions import Template

from serverless_cicd.config import load_config
from serverless_cicd.pipeline import ServerlessCICDPipelineStack, stack_env, stack_id


def synth_stack(raw_config: dict = None) -> ServerlessCICDPipelineStack:
    app = cdk.App()
    config = load_config(raw_config)
    return ServerlessCICDPipelineStack(
        app,
        stack_id(config["general"]),
        general_config=config["general"],
        stages_config=config["stage"],
        env=stack_env(config["general"]),
    )


def synth(raw_config: dict = None) -> Template:
    return Template.from_stack(synth_stack(raw_config))


def resources_of_type(template: Template, resource_type: str) -> list:
    return [
        resource
        for resource in template.to_json()["Resources"].values()
        if resource["Type"] == resource_type
    ]


def build_actions_of(template: Template) -> list:
    (pipeline,) = resources_of_type(template, "AWS::CodePipeline::Pipeline")
    stages = {stage["Name"]: stage for stage in pipeline["Properties"]["Stages"]}
    return stages["Build"]["Actions"]
