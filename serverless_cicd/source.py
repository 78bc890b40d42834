import aws_cdk.aws_codepipeline as codepipeline
import aws_cdk.aws_codepipeline_actions as codepipeline_actions

from serverless_cicd.parameters import PipelineParameters

TRIGGERS = {
    "webhook": codepipeline_actions.GitHubTrigger.WEBHOOK,
    "poll": codepipeline_actions.GitHubTrigger.POLL,
    "none": codepipeline_actions.GitHubTrigger.NONE,
}


def github_source_action(
    parameters: PipelineParameters, output: codepipeline.Artifact, trigger: str
) -> codepipeline_actions.GitHubSourceAction:
    return codepipeline_actions.GitHubSourceAction(
        action_name="Source",
        owner=parameters.github_owner.value_as_string,
        repo=parameters.github_repo.value_as_string,
        branch=parameters.github_branch.value_as_string,
        oauth_token=parameters.oauth_token,
        output=output,
        trigger=TRIGGERS[trigger],
        run_order=1,
    )
