#!/usr/bin/env python3
"""Dependency installer CLI tool."""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables FIRST (before importing project modules)
load_dotenv(".env")

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wpdi.constants import InstallerSettings
from wpdi.context import InstallerContext, build_context
from wpdi.installer.errors import ConfigError
from wpdi.installer.manifest import MANIFEST_FILE, load_manifest

console = Console()

STATUS_STYLES = {
    "info": "cyan",
    "success": "green",
    "error": "red",
}


def get_context(args) -> InstallerContext:
    """Create an installer context from the environment."""
    return build_context(InstallerSettings.from_env(), network_admin=getattr(args, "network", False))


def cmd_list(args):
    """List all declared dependencies."""
    context = get_context(args)
    dependencies = context.registry.all()

    if not dependencies:
        console.print("No dependencies declared.")
        return

    table = Table(title="Declared dependencies")
    table.add_column("Slug")
    table.add_column("Name")
    table.add_column("Host")
    table.add_column("Required")
    table.add_column("State")
    table.add_column("Source")

    for d in dependencies:
        table.add_row(
            d.slug,
            d.display_name,
            d.host.value,
            "Yes" if d.required else "No",
            context.controller.state_of(d.slug).value,
            d.source,
        )
    console.print(table)


def cmd_resolve(args):
    """Print the download link of every dependency."""
    context = get_context(args)
    asyncio.run(context.resolver.apply_config(context.registry))

    for d in context.registry.all():
        link = d.download_link or "[red]unresolved[/red]"
        console.print(f"{d.slug:<40} {link}")


def cmd_check(args):
    """Run one evaluation pass and print the notices."""
    context = get_context(args)
    report = asyncio.run(context.controller.evaluate())

    if not report.notices:
        console.print("[green]All dependencies are active.[/green]")
        return

    for notice in report.notices:
        style = STATUS_STYLES.get(notice.status.value, "white")
        action = f" ({notice.action.value} available)" if notice.action else ""
        console.print(f"[{style}]\\[Dependency][/{style}] {escape(notice.slug)}: {escape(notice.message)}{action}")


def _run_action(args, method: str):
    context = get_context(args)
    if not context.registry.has(args.slug):
        console.print(f"Dependency '{args.slug}' not found.")
        sys.exit(1)

    message = asyncio.run(context.controller.dispatch(method, args.slug))
    if message:
        console.print(message)
    elif method != "dismiss":
        console.print(f"Nothing to {method} for '{args.slug}'.")


def cmd_install(args):
    """Install a dependency."""
    _run_action(args, "install")


def cmd_activate(args):
    """Activate a dependency."""
    _run_action(args, "activate")


def cmd_dismiss(args):
    """Dismiss a dependency's notice."""
    _run_action(args, "dismiss")
    console.print(f"Notice for '{args.slug}' dismissed.")


def cmd_doctor(args):
    """Run health checks on the installer setup."""
    settings = InstallerSettings.from_env()
    issues = []

    if not settings.plugins_dir.exists():
        issues.append(f"Plugins directory missing: {settings.plugins_dir}")

    if not settings.manifest_paths:
        issues.append("WPDI_MANIFEST_PATHS is empty, no manifests will be loaded")

    total = 0
    for plugin_path in settings.manifest_paths:
        if not (plugin_path / MANIFEST_FILE).exists():
            issues.append(f"No {MANIFEST_FILE} in {plugin_path}")
            continue
        try:
            declarations = load_manifest(plugin_path) or []
        except ConfigError as e:
            issues.append(f"Invalid manifest in {plugin_path}: {e}")
            continue
        total += len(declarations)

    for store in (settings.state_file, settings.transients_file, settings.dismissals_file):
        if store.exists():
            try:
                with open(store) as f:
                    json.load(f)
            except json.JSONDecodeError as e:
                issues.append(f"{store.name} has invalid JSON: {e}")

    if issues:
        console.print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            console.print(f"  {i}. {issue}")
        sys.exit(1)
    else:
        console.print(f"All checks passed. {total} dependency declaration(s) found.")


def main():
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper()),
        format="%(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="WP Dependency Installer")
    parser.add_argument("--network", action="store_true", help="Act as network admin")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List declared dependencies")
    subparsers.add_parser("resolve", help="Show resolved download links")
    subparsers.add_parser("check", help="Evaluate dependencies and show notices")

    for name, help_text in (
        ("install", "Install a dependency"),
        ("activate", "Activate a dependency"),
        ("dismiss", "Dismiss a dependency notice"),
    ):
        action_parser = subparsers.add_parser(name, help=help_text)
        action_parser.add_argument("slug", help="Plugin slug, e.g. akismet/akismet.php")

    subparsers.add_parser("doctor", help="Run health checks")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "list": cmd_list,
        "resolve": cmd_resolve,
        "check": cmd_check,
        "install": cmd_install,
        "activate": cmd_activate,
        "dismiss": cmd_dismiss,
        "doctor": cmd_doctor,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
