"""HTTP client for the page builder deployment API."""

import os
from typing import Any, List, Optional

import requests

from fusiondeployer import __version__
from fusiondeployer.constants import DEFAULT_REQUEST_TIMEOUT, DEPLOYMENTS_PATH
from fusiondeployer.errors import DeployerError
from fusiondeployer.errors_catalog import actionable_error


class DeploymentClient:
    """Thin wrapper over the deployer endpoints. Performs no retries."""

    def __init__(
        self,
        api_hostname: str,
        api_key: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        user_agent: Optional[str] = None,
        requests_module=requests,
    ):
        self.api_hostname = api_hostname
        self.timeout = timeout
        self.requests = requests_module
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "User-Agent": user_agent or f"fusiondeployer/{__version__}",
        }

    def url(self, path: str) -> str:
        return f"https://{self.api_hostname}{DEPLOYMENTS_PATH}{path}"

    def list_versions(self) -> List[str]:
        """Returns running versions, oldest first."""
        response = self._request("GET", self.url("/services"))
        try:
            payload = response.json()
        except ValueError as exc:
            raise DeployerError(f"Version list response is not valid JSON: {exc}") from exc
        return self._parse_versions(payload)

    def upload_artifact(self, bundle_name: str, artifact_path: str):
        with open(artifact_path, "rb") as file_obj:
            return self._request(
                "POST",
                self.url("/bundles"),
                data={"name": bundle_name},
                files={"bundle": (os.path.basename(artifact_path), file_obj, "application/zip")},
            )

    def deploy(self, bundle_name: str, pagebuilder_version: str):
        return self._request(
            "POST",
            self.url("/services"),
            params={"bundle": bundle_name, "version": pagebuilder_version},
        )

    def terminate(self, version: str):
        return self._request("POST", self.url(f"/services/{version}/terminate"))

    def promote(self, version: str):
        return self._request("POST", self.url(f"/services/{version}/promote"))

    def _request(self, method: str, url: str, **kwargs):
        try:
            response = self.requests.request(
                method,
                url,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except self.requests.RequestException as exc:
            status = getattr(getattr(exc, "response", None), "status_code", None)
            reason = f"HTTP {status}: {exc}" if status else str(exc)
            raise DeployerError(
                actionable_error("request_failed", method=method, url=url, reason=reason)
            ) from exc
        return response

    @staticmethod
    def _parse_versions(payload: Any) -> List[str]:
        if isinstance(payload, dict) and isinstance(payload.get("result"), dict):
            payload = payload["result"]

        entries: Any = payload.get("lambdas") if isinstance(payload, dict) else payload
        if not isinstance(entries, list):
            raise DeployerError("Version list response has an unexpected shape.")

        versions = []
        for entry in entries:
            value: Optional[Any] = entry.get("Version") if isinstance(entry, dict) else entry
            if value is None or str(value) == "$LATEST":
                continue
            versions.append(str(value))

        if versions and all(item.isdigit() for item in versions):
            versions.sort(key=int)
        return versions
