"""
Credential loading for the command line.

The CLI loads credentials once, before building any EC2 client, and stops with
a hint naming the .env file when they are missing.
"""

from __future__ import annotations

import logging
from typing import Optional

from sg_toolkit.common.aws_client_factory import (
    _resolve_env_path,
    load_credentials_from_env,
)

REQUIRED_CREDENTIAL_KEYS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")


def print_credential_hint(env_path=None):
    """Tell the operator which .env file was read and what it must contain."""
    resolved_path = _resolve_env_path(env_path)
    print(f"⚠️  AWS credentials not found in {resolved_path}.")
    print(f"Please ensure {resolved_path} contains:")
    for key in REQUIRED_CREDENTIAL_KEYS:
        print(f"  {key}=...")
    print("  AWS_SESSION_TOKEN=...  (optional, temporary credentials only)")


def load_cli_credentials(env_path=None) -> Optional[tuple[str, str]]:
    """
    Load credentials for one CLI run.

    Returns:
        tuple: (aws_access_key_id, aws_secret_access_key), or None after
               printing a hint when the .env file does not hold them
    """
    try:
        return load_credentials_from_env(env_path)
    except ValueError as exc:
        logging.debug("Credential lookup failed: %s", exc)
        print_credential_hint(env_path)
        return None
