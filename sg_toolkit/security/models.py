"""
Data model for security groups and their group-sourced ingress rules.

Groups are immutable snapshots built from describe_security_groups output;
nothing here talks to AWS.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

ALL_PROTOCOLS = "-1"


@dataclass(frozen=True)
class ScopeContext:
    """Where and on whose behalf an operation runs."""

    region: str
    account_id: Optional[str] = None
    vpc_id: Optional[str] = None
    operator: str = "unknown"

    def describe(self) -> str:
        """Return a short label for log lines."""
        parts = [self.region]
        if self.account_id:
            parts.append(self.account_id)
        if self.vpc_id:
            parts.append(self.vpc_id)
        return "/".join(parts)


@dataclass(frozen=True, order=True)
class PortRange:
    """Protocol and inclusive port range of one permission."""

    protocol: str
    from_port: int
    to_port: int

    def __str__(self) -> str:
        return f"{self.protocol} {self.from_port}-{self.to_port}"


@dataclass(frozen=True)
class IngressRule:
    """Inbound permission on a target group from one named source group."""

    source_group: str
    protocol: str
    from_port: int
    to_port: int

    @property
    def port_range(self) -> PortRange:
        return PortRange(self.protocol, self.from_port, self.to_port)

    @classmethod
    def from_port_range(cls, source_group: str, port_range: PortRange) -> IngressRule:
        return cls(source_group, port_range.protocol, port_range.from_port, port_range.to_port)

    def to_ip_permission(self, source_group_id: str) -> dict:
        """Build the IpPermissions entry EC2 expects for this rule."""
        permission = {
            "IpProtocol": self.protocol,
            "UserIdGroupPairs": [{"GroupId": source_group_id}],
        }
        if self.protocol != ALL_PROTOCOLS:
            permission["FromPort"] = self.from_port
            permission["ToPort"] = self.to_port
        return permission

    def __str__(self) -> str:
        return f"{self.source_group} {self.protocol} {self.from_port}-{self.to_port}"


@dataclass(frozen=True)
class SecurityGroup:
    """Snapshot of one EC2 security group."""

    group_id: str
    group_name: str
    description: str = ""
    vpc_id: Optional[str] = None
    owner_id: Optional[str] = None
    ingress_rules: tuple[IngressRule, ...] = ()
    # CIDR and prefix-list permissions are carried but never reconciled
    cidr_permissions: tuple[dict, ...] = field(default=(), compare=False, hash=False)

    @property
    def label(self) -> str:
        return f"{self.group_id} ({self.group_name})"

    @classmethod
    def from_describe(
        cls, entry: dict, names_by_id: Optional[Mapping[str, str]] = None
    ) -> SecurityGroup:
        """
        Build a snapshot from one describe_security_groups entry.

        Args:
            entry: Dict from the SecurityGroups list
            names_by_id: Group id to name lookup used when a UserIdGroupPair
                         carries only a GroupId (the usual case in a VPC)

        Returns:
            SecurityGroup with group-sourced rules split out per source group
        """
        names_by_id = names_by_id or {}
        rules: list[IngressRule] = []
        cidr_permissions: list[dict] = []

        for permission in entry.get("IpPermissions", []):
            protocol = str(permission.get("IpProtocol", ALL_PROTOCOLS))
            from_port = permission.get("FromPort", 0 if protocol == ALL_PROTOCOLS else -1)
            to_port = permission.get("ToPort", 65535 if protocol == ALL_PROTOCOLS else -1)
            for pair in permission.get("UserIdGroupPairs", []):
                source_name = (
                    pair.get("GroupName")
                    or names_by_id.get(pair.get("GroupId", ""))
                    or pair.get("GroupId", "")
                )
                rules.append(IngressRule(source_name, protocol, from_port, to_port))
            if any(permission.get(key) for key in ("IpRanges", "Ipv6Ranges", "PrefixListIds")):
                passthrough = {k: v for k, v in permission.items() if k != "UserIdGroupPairs"}
                cidr_permissions.append(passthrough)

        return cls(
            group_id=entry["GroupId"],
            group_name=entry["GroupName"],
            description=entry.get("Description", ""),
            vpc_id=entry.get("VpcId"),
            owner_id=entry.get("OwnerId"),
            ingress_rules=tuple(dict.fromkeys(rules)),
            cidr_permissions=tuple(cidr_permissions),
        )
