"""
Security group operations: list, show, create, edit options, update, delete.

Each operation takes the ScopeContext and its collaborators explicitly and
returns a small result dataclass whose message is ready to show an operator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Event
from typing import Iterable, Mapping, Optional

from sg_toolkit.config import NON_EDITABLE_GROUP_NAMES

from .exceptions import GroupNotEditableError, GroupNotFoundError
from .ingress_diff import partition_by_source
from .models import IngressRule, ScopeContext, SecurityGroup
from .name_rules import extract_app_name, validate_group_name
from .port_spec import format_port_spec
from .reconcile import ReconciliationResult, groups_in_target_vpc, reconcile_ingress


@dataclass
class GroupDetails:
    """A group with its rules sorted for display."""

    group: SecurityGroup
    rules: list[IngressRule]
    app_name: str
    app_registered: Optional[bool]
    editable: bool


@dataclass
class SourceGroupOption:
    """One row of the edit form: a potential source and its current ports."""

    group_name: str
    group_id: str
    selected: bool
    port_spec: str


@dataclass
class CreateResult:
    group: SecurityGroup
    created: bool
    message: str


@dataclass
class DeleteResult:
    deleted: bool
    message: str


def parse_app_names(values: Optional[Iterable[str]]) -> set[str]:
    """Flatten "a,b" style values into a lowercase set."""
    names: set[str] = set()
    for value in values or ():
        names.update(part.strip().lower() for part in value.split(",") if part.strip())
    return names


def filter_groups_by_app(groups: Iterable[SecurityGroup], app_names: set[str]):
    return [group for group in groups if extract_app_name(group.group_name).lower() in app_names]


def sort_groups(groups: Iterable[SecurityGroup]) -> list[SecurityGroup]:
    return sorted(groups, key=lambda group: group.group_name.lower())


def sort_rules(rules: Iterable[IngressRule]) -> list[IngressRule]:
    return sorted(rules, key=lambda rule: (rule.source_group.lower(), rule.from_port, rule.to_port))


def is_security_group_editable(group_name: str) -> bool:
    """Return False for groups managed outside this tool."""
    return group_name.lower() not in NON_EDITABLE_GROUP_NAMES


def list_security_groups(
    scope: ScopeContext, directory, app_names: Optional[Iterable[str]] = None
) -> list[SecurityGroup]:
    """List groups sorted by name, optionally only those owned by the given applications."""
    groups = directory.list_groups(scope)
    wanted = parse_app_names(app_names)
    if wanted:
        groups = filter_groups_by_app(groups, wanted)
    return sort_groups(groups)


def _require_group(scope: ScopeContext, directory, id_or_name: str) -> SecurityGroup:
    group = directory.get_group(scope, id_or_name)
    if group is None:
        raise GroupNotFoundError(id_or_name, scope.region)
    return group


def describe_security_group(
    scope: ScopeContext, directory, id_or_name: str, app_directory=None
) -> GroupDetails:
    """
    Fetch a group for display.

    Raises:
        GroupNotFoundError: If the group does not exist
    """
    group = _require_group(scope, directory, id_or_name)
    app_name = extract_app_name(group.group_name)
    registered = None
    if app_directory is not None:
        registered = app_directory.is_registered(scope, app_name)
    return GroupDetails(
        group=group,
        rules=sort_rules(group.ingress_rules),
        app_name=app_name,
        app_registered=registered,
        editable=is_security_group_editable(group.group_name),
    )


def create_security_group(
    scope: ScopeContext,
    directory,
    app_name: str,
    detail: Optional[str] = None,
    description: str = "",
    vpc_id: Optional[str] = None,
    app_directory=None,
) -> CreateResult:
    """
    Validate the name, then create the group if it does not exist yet.

    Raises:
        NameValidationError: The first naming rule the name breaks; nothing is created
        GatewayFailureError: If EC2 rejects the creation
    """
    name = validate_group_name(scope, app_name, detail, app_directory)
    group, created = directory.create_group(scope, name, description, vpc_id)
    if created:
        message = f"Security Group '{name}' has been created."
    else:
        message = f"Security Group '{name}' already exists."
    return CreateResult(group, created, message)


def security_group_options_for_target(
    scope: ScopeContext, directory, target: SecurityGroup
) -> list[SourceGroupOption]:
    """List every group in target's VPC as a potential source with the ports it has on target."""
    options = []
    for group in sort_groups(groups_in_target_vpc(target, directory.list_groups(scope))):
        current = partition_by_source(target.ingress_rules, group.group_name)
        options.append(
            SourceGroupOption(
                group_name=group.group_name,
                group_id=group.group_id,
                selected=bool(current),
                port_spec=format_port_spec(rule.port_range for rule in current),
            )
        )
    return options


def update_security_group(
    scope: ScopeContext,
    directory,
    gateway,
    target_id: str,
    selected_groups: Iterable[str],
    port_specs: Mapping[str, Optional[str]],
    stop_event: Optional[Event] = None,
) -> ReconciliationResult:
    """
    Reconcile a group's ingress after checking that this tool may modify it.

    Raises:
        GroupNotFoundError: If the target group does not exist
        GroupNotEditableError: If the target is managed outside this tool
    """
    target = _require_group(scope, directory, target_id)
    if not is_security_group_editable(target.group_name):
        raise GroupNotEditableError(target.group_name)
    known_groups = directory.list_groups(scope)
    return reconcile_ingress(
        scope, target, known_groups, selected_groups, port_specs, gateway, stop_event
    )


def delete_security_group(scope: ScopeContext, directory, id_or_name: str) -> DeleteResult:
    """
    Delete a group if it exists.

    Raises:
        GatewayFailureError: If EC2 rejects the deletion
    """
    group = directory.get_group(scope, id_or_name)
    if group is None:
        logging.info("Nothing to delete: %s not found in %s", id_or_name, scope.describe())
        return DeleteResult(False, f"Security Group '{id_or_name}' does not exist.")
    directory.delete_group(scope, group)
    return DeleteResult(True, f"Security Group '{group.group_name}' has been deleted.")
