# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""CLI entry point for monokit.

Subcommands::

    monokit ls        List workspace packages
    monokit check     Verify sibling dependency ranges match actual versions
    monokit run       Run an npm script in every package that declares it
    monokit explain   Explain an error code

Usage::

    monokit ls --json
    monokit check
    monokit run build --parallel
    monokit explain MK-PUBLISH-DIRECTORY-INVALID
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from rich_argparse import RichHelpFormatter

from monokit import __version__
from monokit.backends.npm import NpmScriptRunner
from monokit.config import MonokitConfig, load_config
from monokit.errors import E, MonokitError, MonokitWarning, explain, render_error, render_warning
from monokit.logging import configure_logging, get_logger
from monokit.package import Package
from monokit.workspace import check_dependency_graph, discover_packages

log = get_logger('monokit.cli')


async def _load_workspace(args: argparse.Namespace) -> tuple[MonokitConfig, list[Package]]:
    root = Path(args.root).resolve()
    config = load_config(root)
    return config, await discover_packages(root, config)


def _package_entry(pkg: Package) -> dict[str, object]:
    return {
        'name': pkg.name,
        'version': pkg.version,
        'location': str(pkg.location),
        'private': pkg.is_private(),
        'publish_directory': str(pkg.publish_directory_location) if pkg.publish_directory_location else None,
    }


def _cmd_ls(args: argparse.Namespace) -> int:
    """Handle the ``ls`` subcommand."""
    _, packages = asyncio.run(_load_workspace(args))
    entries = [_package_entry(pkg) for pkg in packages]

    if args.json:
        print(json.dumps(entries, indent=2))  # noqa: T201 - CLI output
        return 0

    for entry in entries:
        private = ' [private]' if entry['private'] else ''
        print(f'  {entry["name"]} {entry["version"]} ({entry["location"]}){private}')  # noqa: T201 - CLI output
        if entry['publish_directory']:
            print(f'    publishes from: {entry["publish_directory"]}')  # noqa: T201 - CLI output
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the ``check`` subcommand."""
    _, packages = asyncio.run(_load_workspace(args))
    mismatches = check_dependency_graph(packages, warn=False)
    if not mismatches:
        print(f'All sibling dependencies satisfied ({len(packages)} packages).')  # noqa: T201 - CLI output
        return 0

    for mismatch in mismatches:
        render_warning(
            MonokitWarning(
                code=E.DEPENDENCY_MISMATCH,
                message=str(mismatch),
                hint=f'Widen the range in {mismatch.package} or bump {mismatch.dependency}.',
            )
        )
    return 1


async def _cmd_run(args: argparse.Namespace) -> int:
    """Handle the ``run`` subcommand."""
    config, packages = await _load_workspace(args)
    runner = NpmScriptRunner(dry_run=args.dry_run)
    targets = [pkg for pkg in packages if args.script in pkg.scripts]
    log.info('run_targets', script=args.script, count=len(targets))

    if args.parallel:
        results = await asyncio.gather(
            *(pkg.run_script(args.script, runner=runner, npm_client=config.npm_client) for pkg in targets)
        )
    else:
        results = [await pkg.run_script(args.script, runner=runner, npm_client=config.npm_client) for pkg in targets]

    for pkg, result in zip(targets, results, strict=True):
        if result is not None and result.stdout:
            print(f'── {pkg.name} ──')  # noqa: T201 - CLI output
            print(result.stdout.rstrip())  # noqa: T201 - CLI output
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='monokit',
        description='Package checks and script runs for npm-style monorepos.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--root', default='.', help='Workspace root (default: current directory).')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines.')

    subparsers = parser.add_subparsers(dest='command')

    ls_parser = subparsers.add_parser('ls', help='List workspace packages.', formatter_class=RichHelpFormatter)
    ls_parser.add_argument('--json', action='store_true', help='Print JSON instead of a listing.')

    subparsers.add_parser(
        'check',
        help='Verify sibling dependency ranges match actual versions.',
        formatter_class=RichHelpFormatter,
    )

    run_parser = subparsers.add_parser(
        'run',
        help='Run an npm script in every package that declares it.',
        formatter_class=RichHelpFormatter,
    )
    run_parser.add_argument('script', help='Script name from package.json "scripts".')
    run_parser.add_argument('--parallel', action='store_true', help='Run in all packages concurrently.')
    run_parser.add_argument('--dry-run', action='store_true', help='Log commands without executing.')

    explain_parser = subparsers.add_parser('explain', help='Explain an error code.', formatter_class=RichHelpFormatter)
    explain_parser.add_argument('code', help='Error code, e.g. MK-PUBLISH-DIRECTORY-INVALID.')

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'ls':
            return _cmd_ls(args)
        if command == 'check':
            return _cmd_check(args)
        if command == 'run':
            return asyncio.run(_cmd_run(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()
        print(f'\n{parser.prog}: error: please provide a command', file=sys.stderr)  # noqa: T201 - CLI output
        return 2

    except MonokitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        log.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
