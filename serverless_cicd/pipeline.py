import aws_cdk as cdk
import aws_cdk.aws_codepipeline as codepipeline
import aws_cdk.aws_codepipeline_actions as codepipeline_actions
import aws_cdk.aws_s3 as s3
import aws_cdk.aws_sns as sns
import aws_cdk.aws_sns_subscriptions as subscriptions
from constructs import Construct

import logging

from serverless_cicd.config import stage_title
from serverless_cicd.deployment import DeploymentProject
from serverless_cicd.parameters import PipelineParameters
from serverless_cicd.roles import deployment_role, pipeline_role
from serverless_cicd.source import github_source_action

logger = logging.getLogger()
logger.setLevel(logging.INFO)

DESCRIPTION = (
    "Multi-step code pipeline deploying serverless framework lambda functions "
    "through staged builds with a manual approval gate"
)


class ServerlessCICDPipelineStack(cdk.Stack):
    def __init__(
        self,
        scope: Construct,
        id: str,
        general_config: dict,
        stages_config: dict,
        **kwargs,
    ) -> None:
        kwargs.setdefault("description", DESCRIPTION)
        super().__init__(scope, id, stack_name=id, **kwargs)

        parameters = PipelineParameters(self, general_config=general_config, stages_config=stages_config)
        app_name = parameters.app_name.value_as_string

        build_role = deployment_role(self, app_name, general_config["deployment_policy"])

        deployments = {}
        for stage in stages_config:
            deployments[stage] = DeploymentProject(
                self,
                f"{stage_title(stage)}Deployment",
                app_name=app_name,
                environment_name=parameters.environment_name(stage),
                description=f"{stage_title(stage)} deployment of the serverless application",
                role=build_role,
                compute_type=parameters.compute_type.value_as_string,
                docker_image=parameters.docker_image.value_as_string,
                buildspec=general_config.get("buildspec"),
            ).project

        artifacts_bucket = s3.Bucket(
            self,
            "ArtifactsBucket",
            bucket_name=f"{app_name}-code-pipeline-artifacts",
            versioned=True,
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=cdk.RemovalPolicy.RETAIN,
        )
        cdk.Tags.of(artifacts_bucket).add("resource-owner", "pipeline")

        artifacts_bucket.node.default_child.cfn_options.metadata = {
            "cfn_nag": {
                "rules_to_suppress": [
                    {"id": "W35", "reason": "Pipeline artifacts are short lived, access logging is not required"},
                ]
            }
        }

        topic_name = general_config["notification_topic_name"]
        notification_topic = sns.Topic(
            self,
            "CodePipelineSNSTopic",
            display_name=topic_name,
            topic_name=topic_name,
        )
        cdk.Tags.of(notification_topic).add("resource-owner", "pipeline")

        notification_topic.node.default_child.cfn_options.metadata = {
            "cfn_nag": {
                "rules_to_suppress": [
                    {"id": "W47", "reason": "Approval notifications carry no sensitive data"},
                ]
            }
        }

        for email in general_config["approval_emails"]:
            notification_topic.add_subscription(subscriptions.EmailSubscription(email))

        # Defines the artifact representing the sourcecode
        source_artifact = codepipeline.Artifact("AppSource")

        pipeline = codepipeline.Pipeline(
            self,
            "Pipeline",
            pipeline_name=f"{app_name}-cicd-code-pipeline",
            role=pipeline_role(self, app_name),
            artifact_bucket=artifacts_bucket,
            use_pipeline_role_for_actions=True,
        )

        pipeline.add_stage(
            stage_name="Source",
            actions=[github_source_action(parameters, source_artifact, general_config["source_trigger"])],
        )

        build_stage = pipeline.add_stage(stage_name="Build")
        for action in build_actions(parameters, stages_config, deployments, source_artifact, notification_topic):
            build_stage.add_action(action)

        cdk.CfnOutput(self, "pipeline-name", value=pipeline.pipeline_name)
        cdk.CfnOutput(self, "pipeline-artifact-bucket", value=artifacts_bucket.bucket_name)
        cdk.CfnOutput(self, "notification-topic-arn", value=notification_topic.topic_arn)


def build_actions(
    parameters: PipelineParameters,
    stages_config: dict,
    deployments: dict,
    source_artifact: codepipeline.Artifact,
    notification_topic: sns.ITopic,
) -> list:
    """
    Actions of the build stage, in run order.

    Every environment is built from the same source artifact. A stage with
    ``manual_approvals`` waits for an approval before its build runs, the
    approval asks to test the previous environment first.
    """
    actions = []
    previous_stage = None

    for stage, stage_config in stages_config.items():
        environment_name = parameters.environment_name(stage)

        if stage_config["manual_approvals"]:
            if previous_stage is None:
                action_name = f"ReleaseTo{stage_title(stage)}"
                custom_data = f"Do you want to deploy to {environment_name}?"
            else:
                action_name = f"Approve{stage_title(previous_stage)}"
                custom_data = (
                    f"PLEASE TEST IN {parameters.environment_name(previous_stage)}\n"
                    f"Do you want to deploy to {environment_name}?"
                )

            logger.info("Stage %s waits for manual approval (%s)", stage, action_name)
            actions.append(
                codepipeline_actions.ManualApprovalAction(
                    action_name=action_name,
                    notification_topic=notification_topic,
                    additional_information=custom_data,
                    run_order=len(actions) + 1,
                )
            )

        logger.info("Stage %s builds with run order %d", stage, len(actions) + 1)
        actions.append(
            codepipeline_actions.CodeBuildAction(
                action_name=f"Build{stage_title(stage)}",
                project=deployments[stage],
                input=source_artifact,
                outputs=[codepipeline.Artifact(f"{stage_title(stage)}AppBuild")],
                run_order=len(actions) + 1,
            )
        )

        previous_stage = stage

    return actions


def stack_id(general_config: dict) -> str:
    return f"{general_config.get('app_name') or 'serverless-app'}-cicd"


def stack_env(general_config: dict):
    """Deployment environment of the stack, ``None`` keeps the template environment agnostic."""
    if not general_config.get("toolchain_account"):
        return None

    return cdk.Environment(
        account=general_config["toolchain_account"],
        region=general_config.get("toolchain_region"),
    )
