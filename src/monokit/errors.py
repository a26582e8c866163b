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

"""Structured error system for monokit.

Every error has a unique ``MK-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorCode           │ A unique named ID like "MK-CONFIG-PARSE-ERROR"│
    │                     │ for each error. Readable at a glance.         │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorInfo           │ A bundle of code + message + hint. Like an    │
    │                     │ error card with a fix suggestion stapled on.  │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ MonokitError        │ An exception you can raise. Carries the       │
    │                     │ error card so renderers can display it.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ERRORS catalog      │ Pre-built error cards for common mistakes.    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ explain()           │ Looks up an error code and prints details.    │
    └─────────────────────┴────────────────────────────────────────────────┘

Code categories::

    MK-CONFIG-*       monokit.toml errors
    MK-WORKSPACE-*    Workspace discovery errors
    MK-MANIFEST-*     package.json read/parse errors
    MK-PUBLISH-*      Publish directory configuration errors
    MK-DEPENDENCY-*   Dependency range diagnostics
    MK-SCRIPT-*       Lifecycle script errors

Usage::

    from monokit.errors import MonokitError, E

    raise MonokitError(
        code=E.PUBLISH_DIRECTORY_INVALID,
        message="Package 'pkg' is configured to publish from a missing directory",
        hint='Build the package before publishing.',
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all monokit diagnostic codes.

    Each code maps to a unique ``MK-NAMED-KEY`` identifier. Use these
    constants instead of raw strings when raising :class:`MonokitError`.
    """

    # Configuration
    CONFIG_INVALID_KEY = 'MK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'MK-CONFIG-INVALID-VALUE'
    CONFIG_PARSE_ERROR = 'MK-CONFIG-PARSE-ERROR'

    # Workspace discovery
    WORKSPACE_NO_MEMBERS = 'MK-WORKSPACE-NO-MEMBERS'
    WORKSPACE_DUPLICATE_PACKAGE = 'MK-WORKSPACE-DUPLICATE-PACKAGE'

    # Manifests
    MANIFEST_NOT_FOUND = 'MK-MANIFEST-NOT-FOUND'
    MANIFEST_PARSE_ERROR = 'MK-MANIFEST-PARSE-ERROR'

    # Publish directory
    PUBLISH_DIRECTORY_INVALID = 'MK-PUBLISH-DIRECTORY-INVALID'

    # Dependencies
    DEPENDENCY_MISMATCH = 'MK-DEPENDENCY-MISMATCH'

    # Scripts
    SCRIPT_FAILED = 'MK-SCRIPT-FAILED'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``MK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class MonokitError(Exception):
    """Base exception for all monokit errors.

    Carries structured diagnostic information (code, message, hint) that
    can be rendered as a rich terminal message or structured JSON.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


class MonokitWarning(UserWarning):
    """Base warning for all monokit warnings.

    Same structure as :class:`MonokitError` but emitted via
    :func:`warnings.warn` or rendered directly instead of being raised.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of the warning.
        hint: Optional suggestion for how to address the warning.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for addressing this warning, or empty string."""
        return self.info.hint


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.PUBLISH_DIRECTORY_INVALID: ErrorInfo(
        code=E.PUBLISH_DIRECTORY_INVALID,
        message=(
            'A package sets config.publishDirectory, but that directory does not exist '
            'or has no package.json.'
        ),
        hint='Build the package so the publish directory holds a package.json, or remove config.publishDirectory.',
    ),
    E.DEPENDENCY_MISMATCH: ErrorInfo(
        code=E.DEPENDENCY_MISMATCH,
        message="A workspace package depends on a range that its sibling's current version does not satisfy.",
        hint="Update the dependency range, or run 'monokit check' to list every mismatch.",
    ),
    E.WORKSPACE_NO_MEMBERS: ErrorInfo(
        code=E.WORKSPACE_NO_MEMBERS,
        message='No package.json files matched the configured package globs.',
        hint='Check the "packages" globs in monokit.toml (default: ["packages/*"]).',
    ),
    E.CONFIG_INVALID_KEY: ErrorInfo(
        code=E.CONFIG_INVALID_KEY,
        message='monokit.toml contains an unknown key.',
        hint='Valid keys are: packages, exclude, npm_client.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"MK-CONFIG-INVALID-KEY"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def _render(kind: str, color: str, info: ErrorInfo, out: TextIO) -> None:
    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(info.message)
        console.print(
            f'[bold {color}]{kind}[/bold {color}][bold {color}]\\[{info.code.value}][/bold {color}][bold]: {msg}[/bold]',
        )
        if info.hint:
            hint = rich_escape(info.hint)
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {hint}')
        console.print()
    else:
        print(f'{kind}[{info.code.value}]: {info.message}', file=out)  # noqa: T201 - CLI output
        if info.hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {info.hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


def render_error(exc: MonokitError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style with color.

    Output format::

        error[MK-CONFIG-INVALID-KEY]: Unknown key 'pakages' in monokit.toml
          |
          = hint: Did you mean 'packages'?

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    _render('error', 'red', exc.info, file or sys.stderr)


def render_warning(exc: MonokitWarning, *, file: TextIO | None = None) -> None:
    """Render a warning in Rust-compiler style with color.

    Args:
        exc: The warning to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    _render('warning', 'yellow', exc.info, file or sys.stderr)


__all__ = [
    'E',
    'ERRORS',
    'ErrorCode',
    'ErrorInfo',
    'MonokitError',
    'MonokitWarning',
    'explain',
    'render_error',
    'render_warning',
]
