"""Configuration loader for fusiondeployer."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from fusiondeployer.errors import DeployerError


class ConfigLoader:
    """Loads YAML configuration files used as the lowest-priority input layer."""

    SUPPORTED_KEYS = {
        "org_id",
        "api_key",
        "api_hostname",
        "bundle_prefix",
        "pagebuilder_version",
        "artifact",
        "retry_count",
        "retry_delay",
        "minimum_running_versions",
        "terminate_retry_count",
        "terminate_retry_delay",
        "deploy",
        "promote",
        "request_timeout",
        "report_file",
        "verbose",
        "log_file",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise DeployerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise DeployerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise DeployerError("Config file must contain a YAML mapping at the root.")

        normalized = {str(key).replace("-", "_"): value for key, value in parsed.items()}
        unknown = sorted(set(normalized.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise DeployerError(f"Unknown configuration keys: {unknown_list}")

        return normalized
