"""Pytest configuration and shared fixtures for the security group toolkit."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from sg_toolkit.security.models import IngressRule, ScopeContext, SecurityGroup


@pytest.fixture(autouse=True)
def mock_aws_env_file(tmp_path, monkeypatch):
    """Auto-use fixture that provides a mock .env file for tests requiring AWS credentials."""
    env_file = tmp_path / ".env"
    env_file.write_text("AWS_ACCESS_KEY_ID=test_key\nAWS_SECRET_ACCESS_KEY=test_secret\n")
    monkeypatch.setenv("AWS_ENV_FILE", str(env_file))
    yield str(env_file)


@pytest.fixture(name="scope")
def fixture_scope():
    """Scope used by every reconciliation and directory test."""
    return ScopeContext(region="us-east-1", account_id="123456789012", operator="tester")


@pytest.fixture(name="make_group")
def fixture_make_group():
    """Factory building SecurityGroup snapshots from (source, protocol, from, to) tuples."""

    def _make_group(name, group_id=None, rules=(), vpc_id="vpc-1"):
        return SecurityGroup(
            group_id=group_id or f"sg-{name}",
            group_name=name,
            description=f"{name} hosts",
            vpc_id=vpc_id,
            ingress_rules=tuple(IngressRule(*rule) for rule in rules),
        )

    return _make_group


@pytest.fixture(name="mock_gateway")
def fixture_mock_gateway():
    """Permission gateway double recording grant/revoke calls."""
    return mock.Mock(spec=["grant", "revoke"])


@pytest.fixture(name="mock_directory")
def fixture_mock_directory():
    """Group directory double; tests configure list_groups/get_group."""
    return mock.Mock(spec=["list_groups", "get_group", "create_group", "delete_group"])
