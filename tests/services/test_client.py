import pytest

from fusiondeployer.errors import DeployerError
from fusiondeployer.services.client import DeploymentClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self.payload = payload
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise FakeRequestsModule.HTTPError(f"{self.status_code} Server Error", response=self)

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeRequestsModule:
    class RequestException(Exception):
        def __init__(self, message="", response=None):
            super().__init__(message)
            self.response = response

    class HTTPError(RequestException):
        pass

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error:
            raise self.error
        return self.response


def build_client(requests_module):
    return DeploymentClient(
        "api.sandbox.myorg.example.com",
        "secret-key",
        timeout=12.5,
        requests_module=requests_module,
    )


def test_list_versions_parses_and_sorts_numeric_versions():
    payload = {
        "lambdas": [
            {"Version": "10"},
            {"Version": "$LATEST"},
            {"Version": "9"},
            {"Version": 11},
        ]
    }
    requests_module = FakeRequestsModule(FakeResponse(payload=payload))

    versions = build_client(requests_module).list_versions()

    assert versions == ["9", "10", "11"]
    call = requests_module.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.sandbox.myorg.example.com/deployments/fusion/services"
    assert call["headers"]["Authorization"] == "Bearer secret-key"
    assert call["timeout"] == 12.5


def test_list_versions_accepts_result_envelope():
    payload = {"result": {"lambdas": [{"Version": "3"}, {"Version": "4"}]}}
    requests_module = FakeRequestsModule(FakeResponse(payload=payload))

    assert build_client(requests_module).list_versions() == ["3", "4"]


def test_list_versions_keeps_service_order_for_non_numeric_versions():
    payload = {"lambdas": [{"Version": "b"}, {"Version": "a"}]}
    requests_module = FakeRequestsModule(FakeResponse(payload=payload))

    assert build_client(requests_module).list_versions() == ["b", "a"]


def test_list_versions_rejects_unexpected_shape():
    requests_module = FakeRequestsModule(FakeResponse(payload={"services": "nope"}))

    with pytest.raises(DeployerError, match="unexpected shape"):
        build_client(requests_module).list_versions()


def test_list_versions_rejects_invalid_json():
    requests_module = FakeRequestsModule(FakeResponse(json_error=True))

    with pytest.raises(DeployerError, match="not valid JSON"):
        build_client(requests_module).list_versions()


def test_http_error_status_raises_deployer_error():
    requests_module = FakeRequestsModule(FakeResponse(status_code=500))

    with pytest.raises(DeployerError, match="HTTP 500"):
        build_client(requests_module).terminate("7")


def test_transport_error_raises_deployer_error():
    requests_module = FakeRequestsModule(
        error=FakeRequestsModule.RequestException("connection reset")
    )

    with pytest.raises(DeployerError, match="connection reset"):
        build_client(requests_module).promote("7")


def test_terminate_and_promote_post_to_version_urls():
    requests_module = FakeRequestsModule()
    client = build_client(requests_module)

    client.terminate("7")
    client.promote("8")

    assert [call["method"] for call in requests_module.calls] == ["POST", "POST"]
    assert requests_module.calls[0]["url"].endswith("/deployments/fusion/services/7/terminate")
    assert requests_module.calls[1]["url"].endswith("/deployments/fusion/services/8/promote")


def test_deploy_sends_bundle_and_pagebuilder_version():
    requests_module = FakeRequestsModule()

    build_client(requests_module).deploy("bundle-1-main-abc", "latest")

    call = requests_module.calls[0]
    assert call["url"].endswith("/deployments/fusion/services")
    assert call["params"] == {"bundle": "bundle-1-main-abc", "version": "latest"}


def test_upload_artifact_sends_multipart_bundle(tmp_path):
    artifact = tmp_path / "fusion-bundle.zip"
    artifact.write_bytes(b"zip-bytes")
    requests_module = FakeRequestsModule()

    build_client(requests_module).upload_artifact("bundle-1-main-abc", str(artifact))

    call = requests_module.calls[0]
    assert call["url"].endswith("/deployments/fusion/bundles")
    assert call["data"] == {"name": "bundle-1-main-abc"}
    filename, _file_obj, content_type = call["files"]["bundle"]
    assert filename == "fusion-bundle.zip"
    assert content_type == "application/zip"
