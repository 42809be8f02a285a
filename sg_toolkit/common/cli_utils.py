"""
Shared CLI utilities for common command-line patterns.
"""


def confirm_action(message, skip_prompt=False):
    """
    Prompt user to confirm an action; only y or yes (any case) confirms.

    Args:
        message: Prompt message to display to the user
        skip_prompt: If True, skip confirmation and return True

    Returns:
        bool: True if user confirmed or prompt was skipped, False otherwise
    """
    if skip_prompt:
        return True

    try:
        response = input(message).strip()
    except EOFError:
        print("\nConfirmation not received.")
        return False

    return response.lower() in {"y", "yes"}


def parse_key_value(value, separator="="):
    """
    Split "KEY=VALUE" into (KEY, VALUE); a bare "KEY" gives (KEY, "").

    Raises:
        ValueError: If the key part is empty
    """
    key, _, rest = value.partition(separator)
    key = key.strip()
    if not key:
        raise ValueError(f"Expected KEY{separator}VALUE, got {value!r}")
    return key, rest.strip()
