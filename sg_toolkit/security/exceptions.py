"""
Exceptions for security group naming, port specifications and EC2 calls.

Every exception carries an ErrorKind so callers can map failures to their own
messages without matching on exception text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Categories of failure reported by the security group toolkit."""

    ILLEGAL_CHARACTER = "illegal_character"
    RESERVED_FORMAT = "reserved_format"
    NAME_TOO_LONG = "name_too_long"
    APPLICATION_NOT_REGISTERED = "application_not_registered"
    MALFORMED_PORT_SPEC = "malformed_port_spec"
    GROUP_NOT_FOUND = "group_not_found"
    GATEWAY_FAILURE = "gateway_failure"
    PORT_OUT_OF_RANGE = "port_out_of_range"
    INVALID_PORT_RANGE = "invalid_port_range"
    GROUP_NOT_EDITABLE = "group_not_editable"


class SecurityGroupError(Exception):
    """Base class for all toolkit errors."""

    kind: ErrorKind


class NameValidationError(SecurityGroupError, ValueError):
    """Raised when an application name or detail violates a naming rule."""

    def __init__(self, field: str, value: Optional[str], message: str):
        super().__init__(message)
        self.field = field
        self.value = value


class IllegalCharacterError(NameValidationError):
    """Raised when a name contains characters outside the allowed set."""

    kind = ErrorKind.ILLEGAL_CHARACTER

    def __init__(self, field: str, value: Optional[str], allowed: str):
        if not value:
            message = f"The {field} must not be blank"
        else:
            message = f"The {field} '{value}' must consist of {allowed}"
        super().__init__(field, value, message)


class ReservedFormatError(NameValidationError):
    """Raised when a name collides with a system-generated naming pattern."""

    kind = ErrorKind.RESERVED_FORMAT

    def __init__(self, field: str, value: str):
        super().__init__(
            field,
            value,
            f"The {field} '{value}' uses a format reserved for generated cluster names",
        )


class NameTooLongError(NameValidationError):
    """Raised when the composed group name exceeds the maximum length."""

    kind = ErrorKind.NAME_TOO_LONG

    def __init__(self, name: str, max_length: int):
        super().__init__(
            "name",
            name,
            f"The complete name cannot exceed {max_length} characters ('{name}' has {len(name)})",
        )
        self.max_length = max_length


class ApplicationNotRegisteredError(NameValidationError):
    """Raised when the application name is not in the application registry."""

    kind = ErrorKind.APPLICATION_NOT_REGISTERED

    def __init__(self, app_name: str):
        super().__init__(
            "application name", app_name, f"Application '{app_name}' is not registered"
        )


class MalformedPortSpecError(SecurityGroupError, ValueError):
    """Raised when port specification text cannot be parsed."""

    kind = ErrorKind.MALFORMED_PORT_SPEC

    def __init__(self, text: str, entry: str, reason: Optional[str] = None):
        detail = reason or "expected PORT, FROM-TO or PROTOCOL:PORT[-TO]"
        super().__init__(f"Invalid port entry '{entry}' in '{text}': {detail}")
        self.text = text
        self.entry = entry


class PortOutOfRangeError(MalformedPortSpecError):
    """Raised when a port number is outside 0-65535."""

    kind = ErrorKind.PORT_OUT_OF_RANGE

    def __init__(self, text: str, entry: str, port: int):
        super().__init__(text, entry, f"port {port} is outside 0-65535")
        self.port = port


class InvalidPortRangeError(MalformedPortSpecError):
    """Raised when a port range starts above where it ends."""

    kind = ErrorKind.INVALID_PORT_RANGE

    def __init__(self, text: str, entry: str, from_port: int, to_port: int):
        super().__init__(text, entry, f"range start {from_port} is greater than end {to_port}")
        self.from_port = from_port
        self.to_port = to_port


class GroupNotFoundError(SecurityGroupError, LookupError):
    """Raised when a security group cannot be found by id or name."""

    kind = ErrorKind.GROUP_NOT_FOUND

    def __init__(self, identifier: str, region: Optional[str] = None):
        where = f" in {region}" if region else ""
        super().__init__(f"Security Group '{identifier}' not found{where}")
        self.identifier = identifier


class GatewayFailureError(SecurityGroupError, RuntimeError):
    """Raised when an EC2 API call fails for reasons other than idempotent no-ops."""

    kind = ErrorKind.GATEWAY_FAILURE

    def __init__(self, operation: str, group: str, detail: str):
        super().__init__(f"{operation} failed for {group}: {detail}")
        self.operation = operation
        self.group = group


class GroupNotEditableError(SecurityGroupError, PermissionError):
    """Raised when asked to modify a group that is managed outside this tool."""

    kind = ErrorKind.GROUP_NOT_EDITABLE

    def __init__(self, group_name: str):
        super().__init__(f"Security group '{group_name}' should not be modified with this tool.")
        self.group_name = group_name
