"""
Ingress reconciliation for one target security group.

Every known group is treated as a potential source: a group that is not
selected, or is selected with blank port text, ends up with no access to the
target. Source groups are handled one at a time; a bad port entry or a failed
EC2 call is recorded against that source group and the run moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from threading import Event
from typing import Iterable, Mapping, Optional

from .exceptions import (
    GatewayFailureError,
    GroupNotFoundError,
    MalformedPortSpecError,
    SecurityGroupError,
)
from .ingress_diff import desired_rules, diff_ingress, partition_by_source
from .models import IngressRule, ScopeContext, SecurityGroup
from .port_spec import is_blank, parse_port_spec


class OutcomeStatus(Enum):
    """Result of reconciling one source group"""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class GroupOutcome:
    """What happened to the rules from one source group."""

    source_group: str
    status: OutcomeStatus
    granted: tuple[IngressRule, ...] = ()
    revoked: tuple[IngressRule, ...] = ()
    error: Optional[SecurityGroupError] = None


@dataclass
class ReconciliationSummary:
    """Per-source-group outcomes of one reconciliation run."""

    target_group: str
    outcomes: list[GroupOutcome] = field(default_factory=list)
    aborted: bool = False

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def updated(self) -> int:
        return self._count(OutcomeStatus.UPDATED)

    @property
    def unchanged(self) -> int:
        return self._count(OutcomeStatus.UNCHANGED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def failures(self) -> list[GroupOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is OutcomeStatus.FAILED]

    @property
    def granted(self) -> list[IngressRule]:
        return [rule for outcome in self.outcomes for rule in outcome.granted]

    @property
    def revoked(self) -> list[IngressRule]:
        return [rule for outcome in self.outcomes for rule in outcome.revoked]


@dataclass
class ReconciliationResult:
    """Summary plus the one-line message shown to the operator."""

    summary: ReconciliationSummary
    message: str

    @property
    def succeeded(self) -> bool:
        return self.summary.failed == 0 and not self.summary.aborted


def build_message(summary: ReconciliationSummary) -> str:
    name = summary.target_group
    if summary.failed:
        details = "; ".join(
            f"{outcome.source_group}: {outcome.error}" for outcome in summary.failures
        )
        message = (
            f"Security Group '{name}' was partially updated: "
            f"{summary.failed} source group(s) failed ({details})."
        )
    elif summary.updated:
        message = f"Security Group '{name}' has been updated."
    else:
        message = f"Security Group '{name}' is already up to date."
    if summary.aborted:
        message += " Reconciliation stopped before every source group was checked."
    return message


def _reconcile_source(scope, target, source, wanted_text, gateway) -> GroupOutcome:
    source_name = source.group_name
    try:
        ranges = parse_port_spec(wanted_text)
    except MalformedPortSpecError as exc:
        logging.warning("Skipping %s -> %s: %s", source_name, target.group_name, exc)
        return GroupOutcome(source_name, OutcomeStatus.FAILED, error=exc)

    current = partition_by_source(target.ingress_rules, source_name)
    diff = diff_ingress(current, desired_rules(source_name, ranges))
    if diff.is_empty:
        return GroupOutcome(source_name, OutcomeStatus.UNCHANGED)

    granted: tuple[IngressRule, ...] = ()
    to_grant = tuple(sorted(diff.to_grant, key=lambda rule: rule.port_range))
    to_revoke = tuple(sorted(diff.to_revoke, key=lambda rule: rule.port_range))
    try:
        if to_grant:
            gateway.grant(scope, target, source, to_grant)
            granted = to_grant
        if to_revoke:
            gateway.revoke(scope, target, source, to_revoke)
    except GatewayFailureError as exc:
        logging.error("Updating %s from %s failed: %s", target.group_name, source_name, exc)
        return GroupOutcome(source_name, OutcomeStatus.FAILED, granted=granted, error=exc)

    logging.info(
        "Updated %s from %s: granted [%s] revoked [%s]",
        target.group_name,
        source_name,
        ", ".join(str(rule.port_range) for rule in to_grant),
        ", ".join(str(rule.port_range) for rule in to_revoke),
    )
    return GroupOutcome(source_name, OutcomeStatus.UPDATED, granted=to_grant, revoked=to_revoke)


def groups_in_target_vpc(target: SecurityGroup, groups: Iterable[SecurityGroup]):
    """Keep only groups that can be sources for target; names are unique per VPC only."""
    if not target.vpc_id:
        return list(groups)
    return [group for group in groups if group.vpc_id in (None, target.vpc_id)]


def reconcile_ingress(
    scope: ScopeContext,
    target: SecurityGroup,
    known_groups: Iterable[SecurityGroup],
    selected_groups: Iterable[str],
    port_specs: Mapping[str, Optional[str]],
    gateway,
    stop_event: Optional[Event] = None,
) -> ReconciliationResult:
    """
    Converge target's group-sourced ingress rules to the operator's selection.

    Args:
        scope: ScopeContext for gateway calls and log lines
        target: Snapshot of the group being updated, fetched just before this call
        known_groups: Every group that may be a source; unselected ones lose access.
            Groups in another VPC than target are ignored
        selected_groups: Names of groups that should have access
        port_specs: Source group name -> port specification text
        gateway: PermissionGateway with grant/revoke
        stop_event: Optional event checked between source groups

    Returns:
        ReconciliationResult with per-group outcomes and an operator message
    """
    selected = set(selected_groups)
    summary = ReconciliationSummary(target.group_name)
    known_names = set()
    logging.info(
        "Reconciling ingress for %s in %s on behalf of %s",
        target.label,
        scope.describe(),
        scope.operator,
    )

    for source in groups_in_target_vpc(target, known_groups):
        if stop_event is not None and stop_event.is_set():
            summary.aborted = True
            logging.warning("Reconciliation of %s stopped early", target.group_name)
            break
        known_names.add(source.group_name)
        text = port_specs.get(source.group_name)
        wanted_text = text if source.group_name in selected and not is_blank(text) else None
        summary.outcomes.append(_reconcile_source(scope, target, source, wanted_text, gateway))

    if not summary.aborted:
        for missing in sorted(selected - known_names):
            error = GroupNotFoundError(missing, scope.region)
            logging.warning("Selected source group %s does not exist", missing)
            summary.outcomes.append(GroupOutcome(missing, OutcomeStatus.FAILED, error=error))

    return ReconciliationResult(summary, build_message(summary))


def reconcile_security_group(
    scope: ScopeContext,
    directory,
    gateway,
    target_id: str,
    selected_groups: Iterable[str],
    port_specs: Mapping[str, Optional[str]],
    stop_event: Optional[Event] = None,
) -> ReconciliationResult:
    """
    Fetch the target and every known group, then reconcile.

    Raises:
        GroupNotFoundError: If the target group does not exist
        GatewayFailureError: If the groups cannot be listed
    """
    target = directory.get_group(scope, target_id)
    if target is None:
        raise GroupNotFoundError(target_id, scope.region)
    known_groups = directory.list_groups(scope)
    return reconcile_ingress(
        scope, target, known_groups, selected_groups, port_specs, gateway, stop_event
    )
