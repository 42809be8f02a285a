"""
Naming rules for security groups.

Group names are "<app>" or "<app>-<detail>". Validation reports the first
rule a name breaks, checked in a fixed order so operators always see the same
message for the same input:

    app characters, detail characters, app reserved format,
    detail reserved format, application registration, composed length
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from sg_toolkit.config import GROUP_NAME_MAX_LENGTH

from .exceptions import (
    ApplicationNotRegisteredError,
    IllegalCharacterError,
    NameTooLongError,
    NameValidationError,
    ReservedFormatError,
)

NAME_SEPARATOR = "-"

RE_APP_NAME = re.compile(r"^[A-Za-z0-9._]+$")
RE_DETAIL = re.compile(r"^[A-Za-z0-9-]+$")

# Segments that look like generated push versions ("v042") or labeled
# cluster variables ("c0us", "d0prod", "x0extra").
RE_PUSH_SEGMENT = re.compile(r"(?:^|-)v\d{3}(?:-|$)")
RE_LABELED_SEGMENT = re.compile(r"(?:^|-)[cdhpruwxyz]0")

APP_NAME_ALLOWED = "alphanumeric characters, dots and underscores"
DETAIL_ALLOWED = "alphanumeric characters and hyphens"


def uses_reserved_format(name: Optional[str]) -> bool:
    """Return True if the name mimics a system-generated cluster or push name."""
    if not name:
        return False
    return bool(RE_PUSH_SEGMENT.search(name) or RE_LABELED_SEGMENT.search(name))


def check_app_name_characters(app_name: Optional[str]) -> None:
    if not app_name or not RE_APP_NAME.match(app_name):
        raise IllegalCharacterError("application name", app_name, APP_NAME_ALLOWED)


def check_detail_characters(detail: Optional[str]) -> None:
    if detail and not RE_DETAIL.match(detail):
        raise IllegalCharacterError("detail", detail, DETAIL_ALLOWED)


def validate_app_name(app_name: Optional[str]) -> None:
    """
    Check an application name on its own.

    Raises:
        IllegalCharacterError: blank, or characters outside [A-Za-z0-9._]
        ReservedFormatError: the name matches a reserved pattern
    """
    check_app_name_characters(app_name)
    if uses_reserved_format(app_name):
        raise ReservedFormatError("application name", app_name)


def validate_detail(detail: Optional[str]) -> None:
    """
    Check a detail suffix on its own. An empty detail is valid.

    Raises:
        IllegalCharacterError: characters outside [A-Za-z0-9-]
        ReservedFormatError: the detail matches a reserved pattern
    """
    check_detail_characters(detail)
    if uses_reserved_format(detail):
        raise ReservedFormatError("detail", detail)


def build_group_name(app_name: str, detail: Optional[str] = None) -> str:
    """Compose "<app>" or "<app>-<detail>"."""
    if not detail:
        return app_name
    return f"{app_name}{NAME_SEPARATOR}{detail}"


def check_length(app_name: str, detail: Optional[str] = None) -> None:
    name = build_group_name(app_name, detail)
    if len(name) > GROUP_NAME_MAX_LENGTH:
        raise NameTooLongError(name, GROUP_NAME_MAX_LENGTH)


def extract_app_name(group_name: Optional[str]) -> str:
    """Return the application part of a group name; names without a separator come back whole."""
    if not group_name:
        return ""
    return group_name.split(NAME_SEPARATOR, 1)[0]


def validate_group_name(scope, app_name, detail=None, app_directory=None) -> str:
    """
    Validate a new group's name and return the composed name.

    Args:
        scope: ScopeContext passed to the application directory
        app_name: Owning application name
        detail: Optional detail suffix
        app_directory: Optional ApplicationDirectory; when given the
                       application must be registered in it

    Returns:
        The composed group name

    Raises:
        NameValidationError: The first rule the name violates
    """
    check_app_name_characters(app_name)
    check_detail_characters(detail)
    if uses_reserved_format(app_name):
        raise ReservedFormatError("application name", app_name)
    if uses_reserved_format(detail):
        raise ReservedFormatError("detail", detail)
    if app_directory is not None and not app_directory.is_registered(scope, app_name):
        raise ApplicationNotRegisteredError(app_name)
    check_length(app_name, detail)
    return build_group_name(app_name, detail)


def first_name_violation(scope, app_name, detail=None, app_directory=None):
    """Return the first NameValidationError for the name, or None when it is valid."""
    try:
        validate_group_name(scope, app_name, detail, app_directory)
    except NameValidationError as exc:
        logging.debug("Rejected group name %r/%r: %s", app_name, detail, exc)
        return exc
    return None
