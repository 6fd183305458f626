#!/usr/bin/env python3
"""
junos-provider - declarative management of Junos configuration objects

Usage examples:
junos-provider validate resources.yaml
junos-provider plan resources.yaml
junos-provider apply resources.yaml --yes
junos-provider import junos_firewall_policer policer1 policer1
junos-provider destroy --yes
"""

import argparse
import json
import sys
from pathlib import Path

from junos_provider import __version__
from junos_provider.datasources.system_information import read_system_information
from junos_provider.engine.manifest import load_manifest
from junos_provider.engine.planner import has_changes, summarize
from junos_provider.engine.runner import Runner
from junos_provider.engine.state import StateStore
from junos_provider.exit_codes import ExitCodeManager, ProviderExitCodes
from junos_provider.junos.client import Client
from junos_provider.resources.registry import RESOURCE_CLASSES, list_resource_types
from junos_provider.utils.config import get_config_manager
from junos_provider.utils.error_handling import (
    ConfigurationError,
    ErrorFormatter,
    ProviderError,
    ValidationError,
    handle_errors,
    print_error,
    print_success,
    print_warning,
    validate_common_args,
)
from junos_provider.utils.logging import get_logger, log_system_info, setup_logging


def setup_app_logging(verbose: bool = False, quiet: bool = False):
    """Configure logging for the application"""
    if quiet:
        level = 'WARNING'
    elif verbose:
        level = 'DEBUG'
    else:
        level = 'INFO'

    setup_logging(get_config_manager().get_config(), level=level, console_colors=True)

    if verbose:
        log_system_info()


def _config_path(args):
    return Path(args.config) if getattr(args, 'config', None) else None


def build_client(args) -> Client:
    """Client for the configured device, refusing to start on config issues"""
    manager = get_config_manager(_config_path(args))
    issues = manager.validate_config()
    if issues:
        raise ConfigurationError(
            "Invalid provider configuration: " + "; ".join(issues),
            guidance="Run 'junos-provider config --validate' for details",
        )
    return Client(manager.get_config().provider)


def open_state(args) -> StateStore:
    engine = get_config_manager(_config_path(args)).get_config().engine
    path = getattr(args, 'state', None) or engine.state_path
    return StateStore(path, backup=engine.backup_state)


def confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    answer = input(f"{prompt} Only 'yes' will be accepted: ")
    return answer.strip() == 'yes'


def print_plan(plan) -> None:
    for change in plan:
        if change.action != 'noop':
            print(f"  {change.describe()}")
    print(summarize(plan))


def report_apply(result) -> int:
    for warning in result.warnings:
        print_warning(warning)
    for change in result.applied:
        print_success(f"{change.address}: {change.action} complete")
    if result.success:
        print_success(f"Apply complete: {len(result.applied)} change(s)")
        return ProviderExitCodes.SUCCESS
    error = result.error
    print(ErrorFormatter.format_error(error))
    print_error(f"{result.failed.address}: {result.failed.action} failed, "
                f"{len(result.applied)} change(s) applied before the failure")
    if isinstance(error, ProviderError):
        return error.exit_code
    return ProviderExitCodes.GENERAL_ERROR


@handle_errors('junos_provider.validate')
def cmd_validate(args):
    """Offline validation of a manifest"""
    manifest = load_manifest(args.manifest)
    print_success(f"{args.manifest}: {len(manifest.entries)} resource(s) valid")
    return ProviderExitCodes.SUCCESS


@handle_errors('junos_provider.plan')
def cmd_plan(args):
    """Refresh the state and show the pending changes"""
    manifest = load_manifest(args.manifest)
    client = build_client(args)
    with open_state(args) as store:
        plan = Runner(client, store).plan(manifest, refresh=not args.refresh_only_state)

    if not has_changes(plan):
        print_success("No changes. Device configuration matches the manifest.")
        return ProviderExitCodes.SUCCESS
    print_plan(plan)
    if args.detailed_exitcode:
        return ProviderExitCodes.CHANGES_PENDING
    return ProviderExitCodes.SUCCESS


@handle_errors('junos_provider.apply')
def cmd_apply(args):
    """Plan then execute the changes"""
    manifest = load_manifest(args.manifest)
    client = build_client(args)
    with open_state(args) as store:
        runner = Runner(client, store)
        plan = runner.plan(manifest)
        if not has_changes(plan):
            print_success("No changes. Device configuration matches the manifest.")
            return ProviderExitCodes.SUCCESS
        print_plan(plan)
        if not confirm("Apply these changes?", args.yes):
            print_warning("Apply cancelled")
            return ProviderExitCodes.SUCCESS
        result = runner.apply(plan)
    return report_apply(result)


@handle_errors('junos_provider.destroy')
def cmd_destroy(args):
    """Delete every resource recorded in the state"""
    client = build_client(args)
    with open_state(args) as store:
        addresses = store.addresses()
        if not addresses:
            print_success("Nothing to destroy")
            return ProviderExitCodes.SUCCESS
        for address in reversed(addresses):
            print(f"  - {address}")
        if not confirm(f"Destroy {len(addresses)} resource(s)?", args.yes):
            print_warning("Destroy cancelled")
            return ProviderExitCodes.SUCCESS
        result = Runner(client, store).destroy()
    return report_apply(result)


@handle_errors('junos_provider.import')
def cmd_import(args):
    """Record an existing device object in the state"""
    client = build_client(args)
    with open_state(args) as store:
        data = Runner(client, store).import_resource(args.type, args.label, args.id)
    print_success(f"Imported {args.type}.{args.label} (id {data.id})")
    return ProviderExitCodes.SUCCESS


@handle_errors('junos_provider.show')
def cmd_show(args):
    """Print the state content"""
    store = open_state(args).load()
    if args.address:
        entry = store.get(args.address)
        if entry is None:
            raise ValidationError(f"{args.address} is not in the state", "address")
        print(json.dumps(entry, indent=2, sort_keys=True))
        return ProviderExitCodes.SUCCESS
    if not store.addresses():
        print("State is empty")
        return ProviderExitCodes.SUCCESS
    for address in store.addresses():
        print(f"{address:<60} id={store.get(address)['id']}")
    return ProviderExitCodes.SUCCESS


@handle_errors('junos_provider.facts')
def cmd_facts(args):
    """Print the device system information"""
    client = build_client(args)
    facts = read_system_information(client)
    for key in sorted(facts):
        print(f"  {key:<16} {facts[key]}")
    if args.show_config:
        with client.start_new_session() as session:
            print(session.config_get(args.format))
    return ProviderExitCodes.SUCCESS


@handle_errors('junos_provider.config')
def cmd_config(args):
    """Print the effective provider configuration"""
    manager = get_config_manager(_config_path(args))
    manager.print_config()
    if args.validate:
        issues = manager.validate_config()
        if issues:
            for issue in issues:
                print_error(issue)
            return ProviderExitCodes.CONFIG_ERROR
        print_success("Configuration is valid")
    return ProviderExitCodes.SUCCESS


@handle_errors('junos_provider.types')
def cmd_types(args):
    """List the supported resource types"""
    for type_name in list_resource_types():
        print(f"  {type_name:<45} {RESOURCE_CLASSES[type_name].junos_name}")
    return ProviderExitCodes.SUCCESS


def create_common_flags_parent(subcommand: bool = False):
    """
    Create a parent parser with common global flags

    The subcommand copy leaves unset flags out of the namespace, so a flag
    given before the subcommand is not overwritten by the subcommand default.
    """
    parent_parser = argparse.ArgumentParser(add_help=False)
    defaults = {"default": argparse.SUPPRESS} if subcommand else {}

    verbose_group = parent_parser.add_mutually_exclusive_group()
    verbose_group.add_argument('-v', '--verbose', action='store_true',
                               help='Enable verbose logging', **defaults)
    verbose_group.add_argument('-q', '--quiet', action='store_true',
                               help='Quiet mode (warnings only)', **defaults)

    parent_parser.add_argument('--config', metavar='FILE',
                               help='Provider configuration file (JSON)', **defaults)
    return parent_parser


def create_parser():
    """Create and configure argument parser"""
    parser = argparse.ArgumentParser(
        prog='junos-provider',
        description='Declarative management of Junos configuration objects',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
        parents=[create_common_flags_parent()]
    )
    common_flags_parent = create_common_flags_parent(subcommand=True)
    parser.add_argument('--version', action='version', version=f'junos-provider {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    validate_parser = subparsers.add_parser('validate', help='Validate a manifest offline',
                                            parents=[common_flags_parent])
    validate_parser.add_argument('manifest', help='YAML manifest of resources')

    plan_parser = subparsers.add_parser('plan', help='Show the changes an apply would make',
                                        parents=[common_flags_parent])
    plan_parser.add_argument('manifest', help='YAML manifest of resources')
    plan_parser.add_argument('--state', help='State file (default from engine config)')
    plan_parser.add_argument('--refresh-only-state', action='store_true',
                             help='Compare with the recorded state without reading the device')
    plan_parser.add_argument('--detailed-exitcode', action='store_true',
                             help='Exit with 3 when changes are pending')

    apply_parser = subparsers.add_parser('apply', help='Apply the manifest to the device',
                                         parents=[common_flags_parent])
    apply_parser.add_argument('manifest', help='YAML manifest of resources')
    apply_parser.add_argument('--state', help='State file (default from engine config)')
    apply_parser.add_argument('--yes', '-y', action='store_true',
                              help='Skip the confirmation prompt')

    destroy_parser = subparsers.add_parser('destroy', help='Delete every managed resource',
                                           parents=[common_flags_parent])
    destroy_parser.add_argument('--state', help='State file (default from engine config)')
    destroy_parser.add_argument('--yes', '-y', action='store_true',
                                help='Skip the confirmation prompt')

    import_parser = subparsers.add_parser('import', help='Import an existing object into the state',
                                          parents=[common_flags_parent])
    import_parser.add_argument('type', help='Resource type (see types)')
    import_parser.add_argument('label', help='Label of the resource in the state')
    import_parser.add_argument('id', help='Import id of the object')
    import_parser.add_argument('--state', help='State file (default from engine config)')

    show_parser = subparsers.add_parser('show', help='Show the state content',
                                        parents=[common_flags_parent])
    show_parser.add_argument('address', nargs='?', help='Resource address <type>.<label>')
    show_parser.add_argument('--state', help='State file (default from engine config)')

    facts_parser = subparsers.add_parser('facts', help='Show the device system information',
                                         parents=[common_flags_parent])
    facts_parser.add_argument('--show-config', action='store_true',
                              help='Also print the committed configuration')
    facts_parser.add_argument('--format', choices=['set', 'text'], default='set',
                              help='Format of the printed configuration (default: set)')

    config_parser = subparsers.add_parser('config', help='Show the provider configuration',
                                          parents=[common_flags_parent])
    config_parser.add_argument('--validate', action='store_true',
                               help='Also validate the configuration')

    subparsers.add_parser('types', help='List supported resource types',
                          parents=[common_flags_parent])

    return parser


def main(argv=None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return ProviderExitCodes.INVALID_USAGE

    try:
        args = validate_common_args(args)
    except ValidationError as e:
        print(ErrorFormatter.format_error(e))
        return ProviderExitCodes.INVALID_USAGE

    get_config_manager(_config_path(args))
    setup_app_logging(args.verbose, args.quiet)

    command_functions = {
        'validate': cmd_validate,
        'plan': cmd_plan,
        'apply': cmd_apply,
        'destroy': cmd_destroy,
        'import': cmd_import,
        'show': cmd_show,
        'facts': cmd_facts,
        'config': cmd_config,
        'types': cmd_types,
    }

    try:
        exit_code = int(command_functions[args.command](args))
        return ExitCodeManager().log_exit(exit_code, args.command)
    except KeyboardInterrupt:
        print_warning("Operation interrupted by user")
        return ProviderExitCodes.SIGINT_TERMINATION
    except Exception as e:
        logger = get_logger('junos_provider.main')
        logger.error(f"Unexpected error: {e}")
        print(ErrorFormatter.format_error(e))
        return ProviderExitCodes.GENERAL_ERROR


if __name__ == '__main__':
    sys.exit(main())
