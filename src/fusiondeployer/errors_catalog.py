"""Actionable error catalog for fusiondeployer."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "promote_requires_deploy": {
        "what": "If `promote` is true, `deploy` must also be true.",
        "next": "Enable `deploy` or disable `promote` for this run.",
    },
    "missing_input": {
        "what": "Missing required input `{name}`.",
        "next": "Provide `{name}` through the CI step inputs, the config file, or the CLI.",
    },
    "invalid_minimum_running_versions": {
        "what": "`minimum-running-versions` must be a whole number between 1 and {maximum}, got {value}.",
        "next": "Choose how many versions must stay running after a deployment.",
    },
    "invalid_retry_settings": {
        "what": "`{name}` must be a whole number of zero or more, got {value}.",
        "next": "Set `{name}` to a non-negative integer or leave it empty to use the default.",
    },
    "invalid_api_hostname": {
        "what": "Invalid API hostname: {hostname}",
        "next": "Use the bare hostname of your environment, for example `api.sandbox.myorg.arcpublishing.com`.",
    },
    "invalid_pagebuilder_version": {
        "what": "Invalid page builder version: {value}",
        "next": "Use `latest`, `latest-<tag>`, or a release number such as `5.10.3`.",
    },
    "artifact_not_found": {
        "what": "Artifact not found: {path}",
        "next": "Build the bundle before this step or point `artifact` to the generated zip file.",
    },
    "no_current_versions": {
        "what": "Unable to determine current versions.",
        "next": "Check the API hostname and key, and that at least one version is running.",
    },
    "poll_timeout": {
        "what": (
            "We retried {retry_count} times with {retry_delay} seconds between retries. "
            "Unfortunately, the new version does not appear to have deployed successfully."
        ),
        "next": (
            "Please check logs, and contact support if this problem continues. "
            "You may wish to retry this action again, but with debugging enabled."
        ),
    },
    "request_failed": {
        "what": "{method} {url} failed: {reason}",
        "next": "Verify the API hostname and key, then re-run with verbose logging.",
    },
}


def actionable_error(code: str, **kwargs) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
