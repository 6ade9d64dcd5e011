import argparse
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sendgrid_tv.adapters.sendgrid_store import SendGridTemplateStore
from sendgrid_tv.adapters.state_file import JsonStateStore, StateFileError
from sendgrid_tv.app_shell.engine import (
    PlanAction,
    PlannedChange,
    apply,
    import_resource,
    plan,
    plan_destroy,
)
from sendgrid_tv.components.template_version import ReconcileError, TemplateStorePort
from sendgrid_tv.core.ports.template_store import TemplateStoreError
from sendgrid_tv.rules.loader import load_declarations, resolve_api_key
from sendgrid_tv.rules.models import Declarations

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

CONFIG_PATH = "sendgrid.yaml"
STATE_PATH = "sendgrid.state.json"


@contextmanager
def open_store(declarations: Declarations) -> Iterator[TemplateStorePort]:
    provider = declarations.provider
    with SendGridTemplateStore(
        resolve_api_key(declarations),
        base_url=provider.base_url,
        timeout_seconds=provider.timeout_seconds,
    ) as store:
        yield store


def print_plan(changes: list[PlannedChange]) -> int:
    pending = [c for c in changes if c.action is not PlanAction.NOOP]
    if not pending:
        print("No changes. Template versions match the declarations.")
        return 0
    for change in pending:
        print(change.describe())
    print(f"Plan: {len(pending)} to change.")
    return len(pending)


def handle_plan(declarations: Declarations, state_store: JsonStateStore) -> None:
    with open_store(declarations) as store:
        changes = plan(declarations.declarations(), state_store.load(), store=store)
    print_plan(changes)


def handle_apply(declarations: Declarations, state_store: JsonStateStore) -> None:
    states = state_store.load()
    with open_store(declarations) as store:
        changes = plan(declarations.declarations(), states, store=store)
        if print_plan(changes) == 0:
            # Persist refreshed digests even when nothing changes
            state_store.save(apply(changes, states, store=store))
            return
        apply(changes, states, store=store, persist=state_store.save)
    print("Apply complete.")


def handle_destroy(declarations: Declarations, state_store: JsonStateStore) -> None:
    states = state_store.load()
    changes = plan_destroy(states)
    if print_plan(changes) == 0:
        return
    with open_store(declarations) as store:
        apply(changes, states, store=store, persist=state_store.save)
    print("Destroy complete.")


def handle_import(
    declarations: Declarations, state_store: JsonStateStore, args: argparse.Namespace
) -> None:
    with open_store(declarations) as store:
        states = import_resource(
            args.name,
            args.key,
            declarations.declarations(),
            state_store.load(),
            store=store,
        )
    state_store.save(states)
    print(f"Imported {args.key} as {args.name}.")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Manage SendGrid template versions")
    parser.add_argument("--config", default=CONFIG_PATH, help="Declarations YAML file")
    parser.add_argument("--state", default=STATE_PATH, help="State JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("plan", help="Show changes needed to match declarations")
    subparsers.add_parser("apply", help="Create, update or replace template versions")
    subparsers.add_parser("destroy", help="Delete every managed template version")

    import_parser = subparsers.add_parser("import", help="Adopt an existing version")
    import_parser.add_argument("name", help="Declared resource name")
    import_parser.add_argument("key", help="<template_id>/<version_id>")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        declarations = load_declarations(Path(args.config))
        state_store = JsonStateStore(args.state)

        if args.command == "plan":
            handle_plan(declarations, state_store)
        elif args.command == "apply":
            handle_apply(declarations, state_store)
        elif args.command == "destroy":
            handle_destroy(declarations, state_store)
        elif args.command == "import":
            handle_import(declarations, state_store, args)
    except (
        FileNotFoundError,
        ValueError,
        StateFileError,
        ReconcileError,
        TemplateStoreError,
    ) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
