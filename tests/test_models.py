import re

import pytest

from fusiondeployer.errors import DeployerError
from fusiondeployer.models import (
    CIContext,
    RunContext,
    build_bundle_name,
    positive_int_or_default,
)


def build_context(**kwargs):
    return RunContext(
        org_id="myorg",
        api_key="secret",
        api_hostname="api.sandbox.myorg.arcpublishing.com",
        bundle_name="bundle-1-main-abc",
        client=None,
        core=None,
        **kwargs,
    )


def test_build_bundle_name_joins_prefix_timestamp_ref_and_sha():
    context = CIContext(ref_name="main", sha="abc123")

    assert build_bundle_name("site", context, timestamp_ms=1700000000000) == (
        "site-1700000000000-main-abc123"
    )


def test_build_bundle_name_defaults_prefix_and_timestamp():
    name = build_bundle_name(None, CIContext(ref_name="main", sha="abc123"))

    assert re.fullmatch(r"bundle-\d{13}-main-abc123", name)


def test_newest_version_is_write_once():
    context = build_context()

    context.record_newest_version("9")

    assert context.newest_version == "9"
    with pytest.raises(DeployerError, match="already recorded"):
        context.record_newest_version("10")
    assert context.newest_version == "9"


def test_worst_case_wait_covers_both_retry_loops():
    context = build_context(
        retry_count=10,
        retry_delay=5,
        terminate_retry_count=3,
        terminate_retry_delay=10,
    )

    assert context.worst_case_wait_seconds() == 11 * 5 + 3 * 10


def test_describe_omits_api_key():
    context = build_context()

    assert "secret" not in repr(context)
    assert "api_key" not in context.describe()


@pytest.mark.parametrize(
    "value,expected",
    [("4", 4), (4, 4), (" 2 ", 2), ("abc", 3), (None, 3), (0, 3), (-1, 3)],
)
def test_positive_int_or_default(value, expected):
    assert positive_int_or_default(value, 3) == expected
