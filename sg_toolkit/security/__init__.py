"""
Security group management package.
Provides naming rules, port specification parsing and ingress reconciliation
for EC2 security groups.
"""

from .exceptions import (
    ErrorKind,
    GatewayFailureError,
    GroupNotFoundError,
    MalformedPortSpecError,
    NameValidationError,
    SecurityGroupError,
)
from .ingress_diff import IngressDiff, diff_ingress
from .models import IngressRule, PortRange, ScopeContext, SecurityGroup
from .name_rules import (
    build_group_name,
    extract_app_name,
    first_name_violation,
    validate_app_name,
    validate_detail,
    validate_group_name,
)
from .port_spec import format_port_spec, parse_port_spec
from .reconcile import ReconciliationResult, reconcile_ingress, reconcile_security_group

__all__ = [
    "ErrorKind",
    "GatewayFailureError",
    "GroupNotFoundError",
    "IngressDiff",
    "IngressRule",
    "MalformedPortSpecError",
    "NameValidationError",
    "PortRange",
    "ReconciliationResult",
    "ScopeContext",
    "SecurityGroup",
    "SecurityGroupError",
    "build_group_name",
    "diff_ingress",
    "extract_app_name",
    "first_name_violation",
    "format_port_spec",
    "parse_port_spec",
    "reconcile_ingress",
    "reconcile_security_group",
    "validate_app_name",
    "validate_detail",
    "validate_group_name",
]
