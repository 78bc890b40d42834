import copy
import logging
import re

logger = logging.getLogger()

COMPUTE_TYPES = ["BUILD_GENERAL1_SMALL", "BUILD_GENERAL1_MEDIUM", "BUILD_GENERAL1_LARGE"]
SOURCE_TRIGGERS = ["webhook", "poll", "none"]
DEPLOYMENT_POLICIES = ["admin", "scoped"]

DEFAULT_GENERAL_CONFIG = {
    "github_branch": "master",
    "source_trigger": "webhook",
    "codebuild_compute_type": "BUILD_GENERAL1_SMALL",
    "codebuild_docker_image": "onema/amazonlinux4lambda:1.13.3",
    "deployment_policy": "admin",
    "notification_topic_name": "code-pipeline-notifications",
    "approval_emails": [],
}

DEFAULT_STAGES_CONFIG = {
    "staging": {"environment_name": "staging", "manual_approvals": False},
    "production": {"environment_name": "production", "manual_approvals": True},
}

STAGE_KEY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


class ConfigError(ValueError):
    pass


def stage_title(stage: str) -> str:
    """Turn a stage key such as ``pre-prod`` into ``PreProd``."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", stage) if part)


def load_config(raw_config: dict = None) -> dict:
    """
    Merge the ``config`` context object over the defaults and validate it.

    Returns a new dict with a ``general`` section and an ordered ``stage``
    section; the input is never modified.
    """
    raw_config = raw_config or {}
    if not isinstance(raw_config, dict):
        raise ConfigError("config must be a mapping")

    raw_general_config = raw_config.get("general") or {}
    if not isinstance(raw_general_config, dict):
        raise ConfigError("general must be a mapping")

    general_config = copy.deepcopy(DEFAULT_GENERAL_CONFIG)
    general_config.update(raw_general_config)

    raw_stages_config = raw_config.get("stage", DEFAULT_STAGES_CONFIG)
    if not isinstance(raw_stages_config, dict):
        raise ConfigError("stage must be a mapping of stage name to stage config")

    stages_config = {}
    for stage, stage_config in raw_stages_config.items():
        # an empty entry takes every stage default
        if not isinstance(stage_config or {}, dict):
            raise ConfigError(f"stage.{stage} must be a mapping")
        stage_config = dict(stage_config or {})
        stage_config.setdefault("environment_name", stage)
        stage_config.setdefault("manual_approvals", False)
        stages_config[stage] = stage_config

    config = {"general": general_config, "stage": stages_config}
    validate_config(config)

    logger.info("Loaded pipeline config with stages: %s", ", ".join(stages_config))
    return config


def validate_config(config: dict) -> None:
    general_config = config["general"]

    _check_choice(general_config, "codebuild_compute_type", COMPUTE_TYPES)
    _check_choice(general_config, "source_trigger", SOURCE_TRIGGERS)
    _check_choice(general_config, "deployment_policy", DEPLOYMENT_POLICIES)

    for key in ["github_branch", "codebuild_docker_image", "notification_topic_name"]:
        if not isinstance(general_config[key], str) or not general_config[key]:
            raise ConfigError(f"general.{key} must be a non-empty string")

    emails = general_config["approval_emails"]
    if not isinstance(emails, list) or not all(isinstance(email, str) and "@" in email for email in emails):
        raise ConfigError("general.approval_emails must be a list of email addresses")

    if "github_token" in general_config:
        raise ConfigError("general.github_token is not allowed, pass the GitHubToken parameter at deploy time")

    stages_config = config["stage"]
    if not stages_config:
        raise ConfigError("at least one stage is required")

    titles = set()
    for stage, stage_config in stages_config.items():
        if not STAGE_KEY_PATTERN.match(stage):
            raise ConfigError(f"stage.{stage}: keys must start with a letter and use letters, digits, '-' or '_'")
        if stage_title(stage) in titles:
            raise ConfigError(f"stage.{stage} clashes with another stage of the same name")
        titles.add(stage_title(stage))

        if not isinstance(stage_config["manual_approvals"], bool):
            raise ConfigError(f"stage.{stage}.manual_approvals must be true or false")
        if not isinstance(stage_config["environment_name"], str) or not stage_config["environment_name"]:
            raise ConfigError(f"stage.{stage}.environment_name must be a non-empty string")


def _check_choice(general_config: dict, key: str, choices: list) -> None:
    if general_config[key] not in choices:
        raise ConfigError(f"general.{key} must be one of {', '.join(choices)}, got {general_config[key]!r}")
