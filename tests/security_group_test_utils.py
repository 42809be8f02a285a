"""Shared helpers for security group-related tests."""

from __future__ import annotations

from unittest.mock import MagicMock

from botocore.exceptions import ClientError


def client_error(code: str, operation: str = "Operation", message: str = "error") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def group_permission(source_id: str, from_port: int, to_port: int, protocol: str = "tcp"):
    """Return an IpPermissions entry granting access from a source group."""
    return {
        "IpProtocol": protocol,
        "FromPort": from_port,
        "ToPort": to_port,
        "UserIdGroupPairs": [{"GroupId": source_id, "UserId": "123456789012"}],
        "IpRanges": [],
    }


def describe_entry(group_id, group_name, permissions=(), vpc_id="vpc-1"):
    """Return one describe_security_groups entry."""
    return {
        "GroupId": group_id,
        "GroupName": group_name,
        "Description": f"{group_name} hosts",
        "VpcId": vpc_id,
        "OwnerId": "123456789012",
        "IpPermissions": list(permissions),
        "IpPermissionsEgress": [],
    }


def paginated_client(*pages):
    """Return a MagicMock EC2 client whose describe_security_groups paginator yields pages."""
    client = MagicMock()
    client.get_paginator.return_value.paginate.side_effect = lambda **_: iter(
        [{"SecurityGroups": list(page)} for page in pages]
    )
    return client


def apply_diff(current, diff):
    """Return the rule set that results from applying diff to current."""
    return (set(current) - diff.to_revoke) | diff.to_grant
