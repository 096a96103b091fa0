"""Shared capability set for CI providers."""

import logging
import os
from typing import Any, Dict, Mapping, Optional

from fusiondeployer import __version__
from fusiondeployer.constants import (
    DEFAULT_ARTIFACT,
    DEFAULT_MINIMUM_RUNNING_VERSIONS,
    DEFAULT_PAGEBUILDER_VERSION,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TERMINATE_RETRY_COUNT,
    DEFAULT_TERMINATE_RETRY_DELAY,
)
from fusiondeployer.models import CIContext, RunContext, build_bundle_name
from fusiondeployer.services.client import DeploymentClient


class BaseProvider:
    """Reads inputs, reports progress and marks failure for one CI system.

    Subclasses implement ``get_input``, ``get_context`` and
    ``create_log_handler``. Logging goes through the ``fusiondeployer``
    logger, so whatever handler the provider installs decides how lines look
    in the CI log.
    """

    name = "base"
    label = "CI"
    flags_default_on = False

    def __init__(self, environ: Optional[Mapping[str, str]] = None, logger=None):
        self.environ = os.environ if environ is None else environ
        self.logger = logger or logging.getLogger("fusiondeployer")
        self.failed = False
        self.failure_message: Optional[str] = None
        self.detected = True

    def get_input(self, name: str) -> str:
        raise NotImplementedError("get_input() must be implemented by subclass")

    def get_context(self) -> CIContext:
        raise NotImplementedError("get_context() must be implemented by subclass")

    def create_log_handler(self) -> logging.Handler:
        raise NotImplementedError("create_log_handler() must be implemented by subclass")

    def debug_enabled(self) -> bool:
        return False

    def input_name(self, key: str) -> str:
        return key.replace("_", "-")

    def debug(self, message: str, *args):
        self.logger.debug(message, *args)

    def info(self, message: str, *args):
        self.logger.info(message, *args)

    def warning(self, message: str, *args):
        self.logger.warning(message, *args)

    def set_failed(self, message: str):
        """Marks the run as failed without raising."""
        self.failed = True
        self.failure_message = message
        self.logger.error(message)

    def create_run_context(
        self,
        options: Optional[Dict[str, Any]] = None,
        defaults: Optional[Dict[str, Any]] = None,
        client_factory=DeploymentClient,
    ) -> RunContext:
        """Builds the run context.

        Values are resolved per key from ``options`` (CLI), then the CI
        input, then ``defaults`` (config file), then the built-in default.
        """
        options = options or {}
        defaults = defaults or {}

        def resolve(key: str, fallback: Any = None) -> Any:
            if options.get(key) is not None:
                return options[key]
            ci_value = self.get_input(self.input_name(key))
            if ci_value:
                return ci_value
            if defaults.get(key) is not None:
                return defaults[key]
            return fallback

        api_key = resolve("api_key", "")
        api_hostname = resolve("api_hostname", "")
        bundle_prefix = resolve("bundle_prefix")
        context = self.get_context()

        client = client_factory(
            api_hostname,
            api_key,
            timeout=self._number(
                "request_timeout", resolve("request_timeout"), DEFAULT_REQUEST_TIMEOUT, float
            ),
            user_agent=f"fusiondeployer/{__version__} ({self.label})",
        )

        return RunContext(
            org_id=resolve("org_id", ""),
            api_key=api_key,
            api_hostname=api_hostname,
            bundle_name=build_bundle_name(bundle_prefix, context),
            client=client,
            core=self,
            context=context,
            bundle_prefix=bundle_prefix,
            pagebuilder_version=resolve("pagebuilder_version") or DEFAULT_PAGEBUILDER_VERSION,
            artifact=resolve("artifact") or DEFAULT_ARTIFACT,
            retry_count=self._number("retry_count", resolve("retry_count"), DEFAULT_RETRY_COUNT),
            retry_delay=self._number("retry_delay", resolve("retry_delay"), DEFAULT_RETRY_DELAY),
            minimum_running_versions=self._number(
                "minimum_running_versions",
                resolve("minimum_running_versions"),
                DEFAULT_MINIMUM_RUNNING_VERSIONS,
                keep_invalid=True,
            ),
            terminate_retry_count=self._number(
                "terminate_retry_count",
                resolve("terminate_retry_count"),
                DEFAULT_TERMINATE_RETRY_COUNT,
            ),
            terminate_retry_delay=self._number(
                "terminate_retry_delay",
                resolve("terminate_retry_delay"),
                DEFAULT_TERMINATE_RETRY_DELAY,
            ),
            should_deploy=self._flag(resolve("deploy")),
            should_promote=self._flag(resolve("promote")),
        )

    def _flag(self, value: Any) -> bool:
        if value is None or value == "":
            return self.flags_default_on
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if self.flags_default_on:
            return text != "false"
        return text == "true"

    def _number(self, key: str, value: Any, default, cast=int, keep_invalid: bool = False):
        if value is None or value == "":
            return default
        try:
            return cast(str(value).strip()) if isinstance(value, str) else cast(value)
        except (TypeError, ValueError):
            if keep_invalid:
                return value
            self.logger.warning(
                "Input '%s' has non-numeric value %r. Using default %s.",
                self.input_name(key),
                value,
                default,
            )
            return default
