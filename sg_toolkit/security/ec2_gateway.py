#!/usr/bin/env python3
"""
EC2 security group directory and permission gateway.

Thin boto3 wrappers that turn describe/create/delete/authorize/revoke calls
into SecurityGroup snapshots and typed errors. Duplicate grants and missing
revokes are treated as already applied.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from sg_toolkit.common.aws_client_factory import create_ec2_client

from .exceptions import GatewayFailureError
from .models import IngressRule, ScopeContext, SecurityGroup

NOT_FOUND_ERROR_CODES = frozenset(
    {"InvalidGroup.NotFound", "InvalidGroupId.NotFound", "InvalidGroupId.Malformed"}
)
DUPLICATE_GROUP_ERROR_CODE = "InvalidGroup.Duplicate"
DUPLICATE_PERMISSION_ERROR_CODE = "InvalidPermission.Duplicate"
MISSING_PERMISSION_ERROR_CODE = "InvalidPermission.NotFound"


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class _Ec2Access:  # pylint: disable=too-few-public-methods
    """Caches one EC2 client per region."""

    def __init__(self, client_factory: Callable[[str], object] = create_ec2_client):
        self._client_factory = client_factory
        self._clients: dict[str, object] = {}

    def client(self, scope: ScopeContext):
        if scope.region not in self._clients:
            self._clients[scope.region] = self._client_factory(scope.region)
        return self._clients[scope.region]


class Ec2GroupDirectory(_Ec2Access):
    """Lists, fetches, creates and deletes security groups in a scope."""

    def _describe(self, scope: ScopeContext, **params) -> list[dict]:
        if scope.vpc_id:
            params.setdefault("Filters", []).append({"Name": "vpc-id", "Values": [scope.vpc_id]})
        paginator = self.client(scope).get_paginator("describe_security_groups")
        entries: list[dict] = []
        for page in paginator.paginate(**params):
            entries.extend(page.get("SecurityGroups", []))
        return entries

    def _names_by_id(self, scope: ScopeContext) -> dict[str, str]:
        return {entry["GroupId"]: entry["GroupName"] for entry in self._describe(scope)}

    def list_groups(self, scope: ScopeContext) -> list[SecurityGroup]:
        """
        Return every security group in the scope.

        Raises:
            GatewayFailureError: If the describe call fails
        """
        try:
            entries = self._describe(scope)
        except (ClientError, BotoCoreError) as exc:
            raise GatewayFailureError(
                "describe_security_groups", scope.describe(), str(exc)
            ) from exc
        names_by_id = {entry["GroupId"]: entry["GroupName"] for entry in entries}
        return [SecurityGroup.from_describe(entry, names_by_id) for entry in entries]

    def get_group(self, scope: ScopeContext, id_or_name: str) -> Optional[SecurityGroup]:
        """
        Fetch one group by id ("sg-...") or by name.

        Returns:
            SecurityGroup, or None if no such group exists in the scope

        Raises:
            GatewayFailureError: If the describe call fails for another reason
        """
        if not id_or_name:
            return None
        if id_or_name.startswith("sg-"):
            params = {"GroupIds": [id_or_name]}
        else:
            params = {"Filters": [{"Name": "group-name", "Values": [id_or_name]}]}

        try:
            entries = self._describe(scope, **params)
            if not entries:
                return None
            names_by_id = self._names_by_id(scope)
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_ERROR_CODES:
                return None
            raise GatewayFailureError("describe_security_groups", id_or_name, str(exc)) from exc
        except BotoCoreError as exc:
            raise GatewayFailureError("describe_security_groups", id_or_name, str(exc)) from exc

        return SecurityGroup.from_describe(entries[0], names_by_id)

    def create_group(
        self,
        scope: ScopeContext,
        name: str,
        description: str,
        vpc_id: Optional[str] = None,
    ) -> tuple[SecurityGroup, bool]:
        """
        Create a group unless one with the same name already exists.

        Returns:
            tuple: (group, created) where created is False for an existing group

        Raises:
            GatewayFailureError: If EC2 rejects the creation
        """
        existing = self.get_group(scope, name)
        if existing is not None:
            logging.info("Security group %s already exists in %s", name, scope.describe())
            return existing, False

        params = {"GroupName": name, "Description": description or name}
        target_vpc = vpc_id or scope.vpc_id
        if target_vpc:
            params["VpcId"] = target_vpc

        try:
            response = self.client(scope).create_security_group(**params)
        except ClientError as exc:
            if _error_code(exc) == DUPLICATE_GROUP_ERROR_CODE:
                existing = self.get_group(scope, name)
                if existing is not None:
                    return existing, False
            raise GatewayFailureError("create_security_group", name, str(exc)) from exc
        except BotoCoreError as exc:
            raise GatewayFailureError("create_security_group", name, str(exc)) from exc

        logging.info(
            "Created security group %s (%s) in %s for %s",
            name,
            response["GroupId"],
            scope.describe(),
            scope.operator,
        )
        created = self.get_group(scope, response["GroupId"])
        if created is None:
            created = SecurityGroup(
                group_id=response["GroupId"],
                group_name=name,
                description=params["Description"],
                vpc_id=target_vpc,
            )
        return created, True

    def delete_group(self, scope: ScopeContext, group: SecurityGroup) -> None:
        """
        Delete a group.

        Raises:
            GatewayFailureError: If EC2 rejects the deletion (e.g. still referenced)
        """
        try:
            self.client(scope).delete_security_group(GroupId=group.group_id)
        except (ClientError, BotoCoreError) as exc:
            raise GatewayFailureError("delete_security_group", group.label, str(exc)) from exc
        logging.info(
            "Deleted security group %s in %s for %s", group.label, scope.describe(), scope.operator
        )


class Ec2PermissionGateway(_Ec2Access):
    """Grants and revokes group-sourced ingress permissions."""

    def _send(self, method, operation, ignored_code, target, source, permissions) -> bool:
        """Send one request; False when EC2 answered with ignored_code."""
        try:
            method(GroupId=target.group_id, IpPermissions=permissions)
        except ClientError as exc:
            if _error_code(exc) == ignored_code:
                logging.info(
                    "%s on %s from %s was already applied: %s",
                    operation,
                    target.group_name,
                    source.group_name,
                    exc,
                )
                return False
            raise GatewayFailureError(operation, target.group_name, str(exc)) from exc
        except BotoCoreError as exc:
            raise GatewayFailureError(operation, target.group_name, str(exc)) from exc
        return True

    def _call(
        self,
        operation: str,
        ignored_code: str,
        scope: ScopeContext,
        target: SecurityGroup,
        source: SecurityGroup,
        rules: Iterable[IngressRule],
    ) -> None:
        permissions = [rule.to_ip_permission(source.group_id) for rule in rules]
        if not permissions:
            return
        method = getattr(self.client(scope), operation)
        applied = self._send(method, operation, ignored_code, target, source, permissions)
        if applied or len(permissions) == 1:
            return
        # EC2 rejects the whole request when any permission hits ignored_code
        logging.info(
            "Retrying %d permissions for %s one at a time", len(permissions), target.group_name
        )
        for permission in permissions:
            self._send(method, operation, ignored_code, target, source, [permission])

    def grant(
        self,
        scope: ScopeContext,
        target: SecurityGroup,
        source: SecurityGroup,
        rules: Iterable[IngressRule],
    ) -> None:
        """Authorize ingress on target from source for each rule."""
        self._call(
            "authorize_security_group_ingress",
            DUPLICATE_PERMISSION_ERROR_CODE,
            scope,
            target,
            source,
            rules,
        )

    def revoke(
        self,
        scope: ScopeContext,
        target: SecurityGroup,
        source: SecurityGroup,
        rules: Iterable[IngressRule],
    ) -> None:
        """Revoke ingress on target from source for each rule."""
        self._call(
            "revoke_security_group_ingress",
            MISSING_PERMISSION_ERROR_CODE,
            scope,
            target,
            source,
            rules,
        )
