import aws_cdk.aws_codebuild as codebuild
import aws_cdk.aws_iam as iam
from constructs import Construct


class DeploymentProject(Construct):
    """CodeBuild project that deploys the application into one environment."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        app_name: str,
        environment_name: str,
        description: str,
        role: iam.IRole,
        compute_type: str,
        docker_image: str,
        buildspec: str = None,
    ) -> None:
        super().__init__(scope, id)

        self.project = codebuild.PipelineProject(
            self,
            "Project",
            project_name=f"{environment_name}-{app_name}-deployment",
            description=description,
            role=role,
            environment=codebuild.BuildEnvironment(
                build_image=codebuild.LinuxBuildImage.from_docker_registry(docker_image),
            ),
            environment_variables={
                "STAGE_NAME": codebuild.BuildEnvironmentVariable(value=environment_name),
            },
            build_spec=codebuild.BuildSpec.from_source_filename(buildspec) if buildspec else None,
        )

        # ComputeType is an enum in the construct library, the template takes it from a parameter
        self.project.node.default_child.add_property_override("Environment.ComputeType", compute_type)
