"""Per-source-group comparison of live and desired ingress rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import IngressRule, PortRange


@dataclass(frozen=True)
class IngressDiff:
    """Rules to revoke and grant to move one source group to its desired state."""

    to_revoke: frozenset[IngressRule] = frozenset()
    to_grant: frozenset[IngressRule] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.to_revoke and not self.to_grant


def partition_by_source(rules: Iterable[IngressRule], source_group: str) -> list[IngressRule]:
    """Return the rules whose source is source_group."""
    return [rule for rule in rules if rule.source_group == source_group]


def desired_rules(source_group: str, ranges: Iterable[PortRange]) -> list[IngressRule]:
    return [IngressRule.from_port_range(source_group, port_range) for port_range in ranges]


def diff_ingress(current: Iterable[IngressRule], desired: Iterable[IngressRule]) -> IngressDiff:
    """
    Compare one source group's live rules with its desired rules.

    Rules are matched on (protocol, from_port, to_port) exactly; overlapping
    ranges are independent rules.
    """
    current = list(current)
    desired = list(desired)
    current_keys = {rule.port_range for rule in current}
    desired_keys = {rule.port_range for rule in desired}
    return IngressDiff(
        to_revoke=frozenset(rule for rule in current if rule.port_range not in desired_keys),
        to_grant=frozenset(rule for rule in desired if rule.port_range not in current_keys),
    )
