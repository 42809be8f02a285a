#!/usr/bin/env python3
"""
Command-line interface for managing security groups and their ingress.

Usage examples:
  sg-toolkit list --app myapp
  sg-toolkit show myapp-frontend
  sg-toolkit create myapp --detail frontend --description "Frontend hosts"
  sg-toolkit options myapp-frontend
  sg-toolkit update myapp-frontend --allow myapp-backend=8080,tcp:9090
  sg-toolkit delete myapp-frontend
"""

from __future__ import annotations

import argparse
import getpass
import logging
import signal
import sys
from threading import Event

from sg_toolkit.common.aws_client_factory import create_ec2_client
from sg_toolkit.common.cli_utils import confirm_action, parse_key_value
from sg_toolkit.common.credential_utils import load_cli_credentials
from sg_toolkit.config import DEFAULT_REGION

from .app_registry import ApplicationRegistryError, registry_from_env
from .ec2_gateway import Ec2GroupDirectory, Ec2PermissionGateway
from .exceptions import SecurityGroupError
from .groups import (
    create_security_group,
    delete_security_group,
    describe_security_group,
    list_security_groups,
    security_group_options_for_target,
    update_security_group,
)
from .models import ScopeContext
from .reporting import (
    print_group_details,
    print_group_list,
    print_reconciliation_summary,
    print_source_options,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL_FAILURE = 2


def _allow_value(value):
    try:
        parse_key_value(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create security groups and reconcile their ingress rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--region", default=DEFAULT_REGION, help="AWS region")
    parser.add_argument("--vpc-id", help="Only operate on groups in this VPC")
    parser.add_argument("--account-id", help="Account label used in log lines")
    parser.add_argument("--operator", help="Operator identity for log lines (default: login)")
    parser.add_argument("--env-file", help="Path to the .env file holding AWS credentials")
    parser.add_argument("--app-registry", help="JSON file listing registered applications")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List security groups")
    list_parser.add_argument(
        "--app", action="append", default=[], help="Only groups of this application (repeatable)"
    )

    show_parser = subparsers.add_parser("show", help="Show one security group")
    show_parser.add_argument("group", help="Group id or name")

    create_parser = subparsers.add_parser("create", help="Create a security group")
    create_parser.add_argument("app_name", help="Owning application name")
    create_parser.add_argument("--detail", default="", help="Optional name suffix")
    create_parser.add_argument("--description", default="", help="Group description")

    options_parser = subparsers.add_parser("options", help="Show possible ingress sources")
    options_parser.add_argument("group", help="Target group id or name")

    update_parser = subparsers.add_parser("update", help="Reconcile ingress rules of a group")
    update_parser.add_argument("group", help="Target group id or name")
    update_parser.add_argument(
        "--allow",
        action="append",
        default=[],
        type=_allow_value,
        metavar="SOURCE=PORTS",
        help="Grant SOURCE access on PORTS (repeatable). Unlisted sources lose access.",
    )
    update_parser.add_argument("--yes", action="store_true", help="Skip confirmation")

    delete_parser = subparsers.add_parser("delete", help="Delete a security group")
    delete_parser.add_argument("group", help="Group id or name")
    delete_parser.add_argument("--yes", action="store_true", help="Skip confirmation")

    return parser


def build_scope(args: argparse.Namespace) -> ScopeContext:
    return ScopeContext(
        region=args.region,
        account_id=args.account_id,
        vpc_id=args.vpc_id,
        operator=args.operator or getpass.getuser(),
    )


def create_collaborators(credentials):
    """Return (directory, gateway) building their EC2 clients from the same credentials."""
    aws_access_key_id, aws_secret_access_key = credentials

    def client_factory(region):
        return create_ec2_client(region, aws_access_key_id, aws_secret_access_key)

    return Ec2GroupDirectory(client_factory), Ec2PermissionGateway(client_factory)


def parse_allow_arguments(values):
    """Turn repeated SOURCE=PORTS values into (selected names, port specs)."""
    port_specs = {}
    for value in values:
        source, ports = parse_key_value(value)
        if source in port_specs and ports:
            port_specs[source] = ",".join(filter(None, [port_specs[source], ports]))
        else:
            port_specs.setdefault(source, ports)
    return list(port_specs), port_specs


def _handle_list(args, scope, directory, _gateway) -> int:
    print_group_list(list_security_groups(scope, directory, args.app))
    return EXIT_OK


def _handle_show(args, scope, directory, _gateway) -> int:
    registry = registry_from_env(args.app_registry)
    print_group_details(describe_security_group(scope, directory, args.group, registry))
    return EXIT_OK


def _handle_create(args, scope, directory, _gateway) -> int:
    registry = registry_from_env(args.app_registry)
    result = create_security_group(
        scope,
        directory,
        args.app_name,
        args.detail,
        args.description,
        vpc_id=args.vpc_id,
        app_directory=registry,
    )
    print(f"✅ {result.message} ({result.group.group_id})")
    return EXIT_OK


def _handle_options(args, scope, directory, _gateway) -> int:
    details = describe_security_group(scope, directory, args.group)
    print_source_options(
        details.group, security_group_options_for_target(scope, directory, details.group)
    )
    return EXIT_OK


def _handle_update(args, scope, directory, gateway) -> int:
    selected, port_specs = parse_allow_arguments(args.allow)
    prompt = (
        f"Reconcile ingress of {args.group}: {len(selected)} source group(s) keep access, "
        "every other group loses access. Continue? [y/N] "
    )
    if not confirm_action(prompt, skip_prompt=args.yes):
        print("❌ Operation cancelled by user")
        return EXIT_OK

    stop_event = Event()

    def _signal_handler(_signum, _frame):
        print("\n⚠️  Interrupted: stopping after the current source group...")
        stop_event.set()

    previous_handler = signal.signal(signal.SIGINT, _signal_handler)
    try:
        result = update_security_group(
            scope, directory, gateway, args.group, selected, port_specs, stop_event
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print_reconciliation_summary(result)
    return EXIT_OK if result.succeeded else EXIT_PARTIAL_FAILURE


def _handle_delete(args, scope, directory, _gateway) -> int:
    if not confirm_action(f"Delete security group {args.group}? [y/N] ", skip_prompt=args.yes):
        print("❌ Operation cancelled by user")
        return EXIT_OK
    result = delete_security_group(scope, directory, args.group)
    print(f"{'✅' if result.deleted else 'ℹ️ '} {result.message}")
    return EXIT_OK


_HANDLERS = {
    "list": _handle_list,
    "show": _handle_show,
    "create": _handle_create,
    "options": _handle_options,
    "update": _handle_update,
    "delete": _handle_delete,
}


def main(argv=None) -> int:
    """Main entry point for the security group CLI."""
    args = build_parser().parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    credentials = load_cli_credentials(args.env_file)
    if credentials is None:
        return EXIT_ERROR

    scope = build_scope(args)
    directory, gateway = create_collaborators(credentials)
    try:
        return _HANDLERS[args.command](args, scope, directory, gateway)
    except (SecurityGroupError, ApplicationRegistryError) as exc:
        print(f"❌ {exc}")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
