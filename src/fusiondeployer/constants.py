"""Defaults shared by the CLI, providers and services."""

DEFAULT_BUNDLE_PREFIX = "bundle"
DEFAULT_PAGEBUILDER_VERSION = "latest"
DEFAULT_ARTIFACT = "dist/fusion-bundle.zip"
DEFAULT_RETRY_COUNT = 10
DEFAULT_RETRY_DELAY = 5
DEFAULT_MINIMUM_RUNNING_VERSIONS = 7
DEFAULT_TERMINATE_RETRY_COUNT = 3
DEFAULT_TERMINATE_RETRY_DELAY = 10
DEFAULT_REQUEST_TIMEOUT = 60.0

MAXIMUM_RUNNING_VERSIONS = 10

DEPLOYMENTS_PATH = "/deployments/fusion"
