"""Shared pytest fixtures for test files."""

from __future__ import annotations

import copy

import pytest
from botocore.exceptions import ClientError

from sg_toolkit.common import aws_client_factory, credential_utils


class _DefaultResponse(dict):
    """Dict returning empty list for missing keys."""

    def __missing__(self, key):
        return []


_DEFAULT_RESPONSES: dict[str, dict] = {
    "describe_security_groups": _DefaultResponse(SecurityGroups=[]),
    "create_security_group": _DefaultResponse(GroupId="sg-stub"),
}


class _StubPaginator:
    """Single-page paginator returning the stub response."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name

    def paginate(self, **kwargs):
        del kwargs
        yield copy.deepcopy(_DEFAULT_RESPONSES.get(self.operation_name, _DefaultResponse()))


class _StubBotoClient:
    """Minimal stub for boto3 clients used in tests."""

    def __init__(self, service_name: str, **kwargs):
        self.service_name = service_name
        self.region_name = kwargs.get("region_name")
        self.exceptions = ClientError

    def get_paginator(self, operation_name: str):
        return _StubPaginator(operation_name)

    def __getattr__(self, name: str):
        def _method(*args, **kwargs):
            del args, kwargs
            response = _DEFAULT_RESPONSES.get(name)
            if response is None:
                return _DefaultResponse()
            return copy.deepcopy(response)

        return _method


@pytest.fixture(autouse=True)
def stub_boto3_client(monkeypatch):
    """Replace boto3.client with a stub so tests don't call real AWS."""

    def fake_client(service_name, **kwargs):
        return _StubBotoClient(service_name, **kwargs)

    monkeypatch.setattr("boto3.client", fake_client)


@pytest.fixture(autouse=True)
def stub_credentials(monkeypatch):
    """Provide fake AWS credentials so create_client doesn't fail."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "stub-key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "stub-secret")
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)
    monkeypatch.setattr(
        credential_utils,
        "load_credentials_from_env",
        aws_client_factory.load_credentials_from_env,
    )
