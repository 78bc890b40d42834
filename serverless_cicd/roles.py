import aws_cdk.aws_iam as iam
from constructs import Construct

SCOPED_DEPLOYMENT_ACTIONS = [
    "s3:*",
    "lambda:*",
    "cloudformation:*",
    "apigateway:*",
    "iam:PassRole",
    "sns:Publish",
]

PIPELINE_ACTIONS = [
    "s3:*",
    "lambda:*",
    "codebuild:*",
    "iam:PassRole",
    "sns:Publish",
]


def deployment_role(scope: Construct, app_name: str, deployment_policy: str) -> iam.Role:
    """
    Role the build projects assume to deploy the serverless application.

    ``admin`` grants AdministratorAccess, ``scoped`` only what a serverless
    framework deployment needs. Lock it down further to fit your application.
    """
    if deployment_policy == "admin":
        role = iam.Role(
            scope,
            "CodeBuildDeploymentRole",
            role_name=f"{app_name}-code-build-role",
            assumed_by=iam.ServicePrincipal("codebuild.amazonaws.com"),
            managed_policies=[iam.ManagedPolicy.from_aws_managed_policy_name("AdministratorAccess")],
        )
    else:
        role = iam.Role(
            scope,
            "CodeBuildDeploymentRole",
            role_name=f"{app_name}-code-build-role",
            assumed_by=iam.ServicePrincipal("codebuild.amazonaws.com"),
            inline_policies={
                "CodeBuildAccess": iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            actions=SCOPED_DEPLOYMENT_ACTIONS,
                            resources=["*"],
                        )
                    ]
                )
            },
        )

    role.node.default_child.cfn_options.metadata = {
        "cfn_nag": {
            "rules_to_suppress": [
                {"id": "W11", "reason": "Deployments create resources whose names are not known up front"},
                {"id": "W28", "reason": "Role name is derived from the application name"},
                {"id": "F38", "reason": "Serverless deployments pass roles to the functions they create"},
            ]
        }
    }

    return role


def pipeline_role(scope: Construct, app_name: str) -> iam.Role:
    role = iam.Role(
        scope,
        "PipelineRole",
        role_name=f"{app_name}-code-pipeline-role",
        path="/",
        assumed_by=iam.ServicePrincipal("codepipeline.amazonaws.com"),
        inline_policies={
            "CodePipelineAccess": iam.PolicyDocument(
                statements=[
                    iam.PolicyStatement(
                        effect=iam.Effect.ALLOW,
                        actions=PIPELINE_ACTIONS,
                        resources=["*"],
                    )
                ]
            )
        },
    )

    role.node.default_child.cfn_options.metadata = {
        "cfn_nag": {
            "rules_to_suppress": [
                {"id": "W11", "reason": "Pipeline drives projects and buckets named by parameters"},
                {"id": "W28", "reason": "Role name is derived from the application name"},
                {"id": "F38", "reason": "Pipeline passes its own role to the build actions"},
            ]
        }
    }

    return role
