"""
Configuration for the security group toolkit.

Naming limits, EC2 client timeouts and the groups this tool must never modify.
Credentials are not configured here; they come from the .env file resolved by
sg_toolkit.common.aws_client_factory.
"""

__all__ = [
    "DEFAULT_REGION",
    "GROUP_NAME_MAX_LENGTH",
    "EC2_CONNECT_TIMEOUT",
    "EC2_READ_TIMEOUT",
    "EC2_MAX_ATTEMPTS",
    "NON_EDITABLE_GROUP_NAMES",
    "APPLICATION_REGISTRY_ENV",
    "DEFAULT_PROTOCOL",
]

# Region used when the caller does not pass --region
DEFAULT_REGION: str = "us-east-1"

# Longest composite "<app>-<detail>" name accepted for a new group
GROUP_NAME_MAX_LENGTH: int = 96

# EC2 API call limits (seconds / attempts). A timed out call is reported
# as a failure for the source group being reconciled.
EC2_CONNECT_TIMEOUT: int = 10
EC2_READ_TIMEOUT: int = 30
EC2_MAX_ATTEMPTS: int = 3

# Groups whose ingress rules are managed outside this tool
NON_EDITABLE_GROUP_NAMES: frozenset = frozenset({"default"})

# Environment variable naming the JSON application registry file
APPLICATION_REGISTRY_ENV: str = "SG_TOOLKIT_APP_REGISTRY"

# Protocol assumed for port entries without a "proto:" prefix
DEFAULT_PROTOCOL: str = "tcp"
