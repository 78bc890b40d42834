import aws_cdk as cdk
from constructs import Construct

from serverless_cicd.config import COMPUTE_TYPES, stage_title


class PipelineParameters:
    """
    Input parameters of the synthesized template.

    Synth-time config only provides defaults, every value can still be
    overridden when the template is deployed.
    """

    def __init__(self, scope: Construct, general_config: dict, stages_config: dict):

        self.app_name = cdk.CfnParameter(
            scope,
            "AppName",
            type="String",
            description="Name of the application",
            **_default(general_config.get("app_name")),
        )

        self.github_owner = cdk.CfnParameter(
            scope,
            "GitHubOwner",
            type="String",
            description="GitHub repository owner",
            **_default(general_config.get("github_owner")),
        )
        self.github_repo = cdk.CfnParameter(
            scope,
            "GitHubRepo",
            type="String",
            description="GitHub repository name",
            **_default(general_config.get("github_repo")),
        )
        self.github_branch = cdk.CfnParameter(
            scope,
            "GitHubBranch",
            type="String",
            description="GitHub repository branch",
            default=general_config["github_branch"],
        )
        self.github_token = cdk.CfnParameter(
            scope,
            "GitHubToken",
            type="String",
            description="GitHub repository OAuth token",
            no_echo=True,
        )

        self.environment_names = {}
        for stage, stage_config in stages_config.items():
            self.environment_names[stage] = cdk.CfnParameter(
                scope,
                f"{stage_title(stage)}EnvironmentName",
                type="String",
                description=f"Environment name for {stage_title(stage)}",
                default=stage_config["environment_name"],
            )

        self.compute_type = cdk.CfnParameter(
            scope,
            "CodeBuildComputeType",
            type="String",
            description="The build compute type",
            default=general_config["codebuild_compute_type"],
            allowed_values=COMPUTE_TYPES,
        )
        self.docker_image = cdk.CfnParameter(
            scope,
            "CodeBuildDockerImage",
            type="String",
            description="The docker image to be used for code build",
            default=general_config["codebuild_docker_image"],
        )

    @property
    def oauth_token(self) -> cdk.SecretValue:
        return cdk.SecretValue.cfn_parameter(self.github_token)

    def environment_name(self, stage: str) -> str:
        return self.environment_names[stage].value_as_string


def _default(value) -> dict:
    """Keyword arguments setting ``value`` as the parameter default, unset or empty values leave it required."""
    return {"default": value} if value else {}
