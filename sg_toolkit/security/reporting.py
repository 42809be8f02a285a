"""
Console reporting for security group commands.
"""

from typing import List

from .groups import GroupDetails, SourceGroupOption
from .models import SecurityGroup
from .reconcile import OutcomeStatus, ReconciliationResult

_STATUS_ICONS = {
    OutcomeStatus.UPDATED: "✅",
    OutcomeStatus.UNCHANGED: "➖",
    OutcomeStatus.FAILED: "❌",
}


def print_group_list(groups: List[SecurityGroup]) -> None:
    """Print one line per security group."""
    if not groups:
        print("No security groups found.")
        return
    print(f"{'GROUP ID':<24} {'NAME':<40} {'VPC':<24} RULES")
    print("-" * 96)
    for group in groups:
        print(
            f"{group.group_id:<24} {group.group_name:<40} "
            f"{group.vpc_id or '-':<24} {len(group.ingress_rules)}"
        )
    print(f"\n📊 {len(groups)} security group(s)")


def print_group_details(details: GroupDetails) -> None:
    """Print a group with its ingress rules."""
    group = details.group
    print(f"🔒 Security Group: {group.group_name}")
    print("=" * 60)
    print(f"   ID:          {group.group_id}")
    print(f"   Description: {group.description or '-'}")
    print(f"   VPC:         {group.vpc_id or '-'}")
    print(f"   Owner:       {group.owner_id or '-'}")
    if details.app_registered is None:
        print(f"   Application: {details.app_name}")
    else:
        state = "registered" if details.app_registered else "not registered"
        print(f"   Application: {details.app_name} ({state})")
    print(f"   Editable:    {'yes' if details.editable else 'no'}")
    print()

    print("📥 Ingress from security groups:")
    if not details.rules:
        print("   (none)")
    for rule in details.rules:
        print(f"   {rule.source_group:<40} {rule.protocol:<5} {rule.from_port}-{rule.to_port}")

    if group.cidr_permissions:
        print()
        print("🌐 Ingress from address ranges (not managed here):")
        for permission in group.cidr_permissions:
            ranges = [item.get("CidrIp") for item in permission.get("IpRanges", [])]
            ranges += [item.get("CidrIpv6") for item in permission.get("Ipv6Ranges", [])]
            ranges += [item.get("PrefixListId") for item in permission.get("PrefixListIds", [])]
            print(
                f"   {', '.join(filter(None, ranges)):<40} {permission.get('IpProtocol'):<5} "
                f"{permission.get('FromPort', '*')}-{permission.get('ToPort', '*')}"
            )


def print_source_options(target: SecurityGroup, options: List[SourceGroupOption]) -> None:
    """Print the groups that may be granted access to target."""
    print(f"🔧 Ingress sources for {target.group_name}")
    print("=" * 60)
    for option in options:
        marker = "[x]" if option.selected else "[ ]"
        print(f"   {marker} {option.group_name:<40} {option.port_spec}")


def print_reconciliation_summary(result: ReconciliationResult) -> None:
    """Print per-source outcomes followed by totals."""
    summary = result.summary
    print("=" * 60)
    print(f"🎯 INGRESS UPDATE SUMMARY: {summary.target_group}")
    print("=" * 60)
    for outcome in summary.outcomes:
        if outcome.status is OutcomeStatus.UNCHANGED:
            continue
        print(f"{_STATUS_ICONS[outcome.status]} {outcome.source_group}")
        for rule in outcome.granted:
            print(f"     + {rule.port_range}")
        for rule in outcome.revoked:
            print(f"     - {rule.port_range}")
        if outcome.error is not None:
            print(f"     {outcome.error}")
    print()
    print(f"✅ Source groups updated:   {summary.updated}")
    print(f"➖ Source groups unchanged: {summary.unchanged}")
    print(f"❌ Source groups failed:    {summary.failed}")
    print()
    print(result.message)
