"""Pre-flight checks for deployment inputs. None of them touch the network."""

import re
from pathlib import Path
from urllib.parse import urlparse

from packaging import version

from fusiondeployer.constants import MAXIMUM_RUNNING_VERSIONS
from fusiondeployer.errors import DeployerError
from fusiondeployer.errors_catalog import actionable_error
from fusiondeployer.models import RunContext

_HOSTNAME_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$", re.IGNORECASE)
_LATEST_TAG = re.compile(r"^latest(?:-[a-z0-9][a-z0-9.-]*)?$", re.IGNORECASE)


class ValidationService:
    """Validates a run context before any request is made."""

    def validate(self, run_context: RunContext):
        self.verify_required_inputs(run_context)
        self.verify_minimum_running_versions(run_context)
        self.verify_retry_settings(run_context)
        self.verify_api_hostname(run_context)
        self.verify_pagebuilder_version(run_context)
        self.verify_promote_requires_deploy(run_context)
        self.verify_artifact(run_context)

    def verify_required_inputs(self, run_context: RunContext):
        for name, value in (("org-id", run_context.org_id), ("api-key", run_context.api_key)):
            if not value or not str(value).strip():
                raise DeployerError(actionable_error("missing_input", name=name))

    def verify_minimum_running_versions(self, run_context: RunContext):
        value = run_context.minimum_running_versions
        is_int = isinstance(value, int) and not isinstance(value, bool)
        if not is_int or not 1 <= value <= MAXIMUM_RUNNING_VERSIONS:
            raise DeployerError(
                actionable_error(
                    "invalid_minimum_running_versions",
                    value=value,
                    maximum=MAXIMUM_RUNNING_VERSIONS,
                )
            )

    def verify_retry_settings(self, run_context: RunContext):
        for name, value in (
            ("retry-count", run_context.retry_count),
            ("retry-delay", run_context.retry_delay),
        ):
            is_int = isinstance(value, int) and not isinstance(value, bool)
            if not is_int or value < 0:
                raise DeployerError(actionable_error("invalid_retry_settings", name=name, value=value))

    def verify_api_hostname(self, run_context: RunContext):
        hostname = (run_context.api_hostname or "").strip()
        if not hostname:
            raise DeployerError(actionable_error("missing_input", name="api-hostname"))

        if "://" in hostname or urlparse(f"//{hostname}").hostname != hostname.lower():
            raise DeployerError(actionable_error("invalid_api_hostname", hostname=hostname))

        labels = hostname.split(".")
        if labels[0].lower() != "api" or len(labels) < 3:
            raise DeployerError(actionable_error("invalid_api_hostname", hostname=hostname))
        if not all(_HOSTNAME_LABEL.match(label) for label in labels):
            raise DeployerError(actionable_error("invalid_api_hostname", hostname=hostname))

    def verify_pagebuilder_version(self, run_context: RunContext):
        value = (run_context.pagebuilder_version or "").strip()
        if _LATEST_TAG.match(value):
            return

        try:
            version.Version(value)
        except version.InvalidVersion as exc:
            raise DeployerError(
                actionable_error("invalid_pagebuilder_version", value=value or "<empty>")
            ) from exc

    def verify_promote_requires_deploy(self, run_context: RunContext):
        if run_context.should_promote and not run_context.should_deploy:
            raise DeployerError(actionable_error("promote_requires_deploy"))

    def verify_artifact(self, run_context: RunContext):
        path = Path(run_context.artifact or "")
        if not run_context.artifact or not path.is_file():
            raise DeployerError(actionable_error("artifact_not_found", path=run_context.artifact))
