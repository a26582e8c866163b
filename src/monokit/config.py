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

"""Configuration reader for monokit.

Reads ``monokit.toml`` from the workspace root and returns a validated
:class:`MonokitConfig`. A workspace without the file gets the defaults,
which match the conventional ``packages/*`` layout.

Validation Pipeline::

    monokit.toml
    ┌──────────────────┐
    │ pakages = [...]  │  ← typo!
    └────────┬─────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 1. Unknown key   │────→│ MK-CONFIG-INVALID-KEY:       │
    │    detection     │     │ hint: "Did you mean          │
    └────────┬─────────┘     │       'packages'?"           │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 2. Type check    │────→│ MK-CONFIG-INVALID-VALUE:     │
    │    each value    │     │ Expected list, got str       │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 3. Value check   │────→│ MK-CONFIG-INVALID-VALUE:     │
    │    (enums, etc.) │     │ npm_client must be one of... │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐
    │ MonokitConfig()  │  ← frozen dataclass, ready to use
    └──────────────────┘

Supported keys in ``monokit.toml``::

    packages   = ["packages/*", "tools/*", "!packages/scratch"]
    exclude    = ["example-*"]     # package-name globs dropped after discovery
    npm_client = "pnpm"            # "npm", "pnpm" or "yarn"
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from monokit.backends.npm import NPM_CLIENTS
from monokit.errors import E, MonokitError
from monokit.logging import get_logger

log = get_logger('monokit.config')

CONFIG_FILENAME = 'monokit.toml'

DEFAULT_PACKAGE_GLOBS: tuple[str, ...] = ('packages/*',)

VALID_KEYS: frozenset[str] = frozenset({
    'exclude',
    'npm_client',
    'packages',
})

_TYPE_MAP: dict[str, type] = {
    'exclude': list,
    'npm_client': str,
    'packages': list,
}


@dataclass(frozen=True)
class MonokitConfig:
    """Validated workspace configuration.

    Attributes:
        packages: Globs (relative to the workspace root) for package
            directories. A leading ``!`` excludes matches.
        exclude: Package-name globs removed after discovery.
        npm_client: CLI used to run package scripts.
        config_path: The file this was read from, or ``None`` for defaults.
    """

    packages: list[str] = field(default_factory=lambda: list(DEFAULT_PACKAGE_GLOBS))
    exclude: list[str] = field(default_factory=list)
    npm_client: str = 'npm'
    config_path: Path | None = None


def _suggest_key(unknown: str) -> str | None:
    """Return the closest valid key for a typo, or None."""
    matches = difflib.get_close_matches(unknown, VALID_KEYS, n=1, cutoff=0.6)
    return matches[0] if matches else None


def _validate_value_type(key: str, value: Any) -> None:  # noqa: ANN401 - dynamic config values
    expected = _TYPE_MAP[key]
    if not isinstance(value, expected):
        raise MonokitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {expected.__name__}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {CONFIG_FILENAME}.',
        )


def _validate_string_list(key: str, items: list[object]) -> None:
    for item in items:
        if not isinstance(item, str) or not item:
            raise MonokitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'{key}' items must be non-empty strings, got {type(item).__name__}: {item!r}",
                hint=f'Each {key} entry should be a glob pattern string in {CONFIG_FILENAME}.',
            )


def _validate_npm_client(value: str) -> None:
    if value not in NPM_CLIENTS:
        raise MonokitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"npm_client must be one of {sorted(NPM_CLIENTS)}, got '{value}'",
            hint="Use 'npm' unless the workspace is managed by pnpm or yarn.",
        )


def load_config(workspace_root: Path) -> MonokitConfig:
    """Load and validate ``monokit.toml`` from ``workspace_root``.

    Returns:
        A validated :class:`MonokitConfig`; defaults if the file is absent.

    Raises:
        MonokitError: If the file can't be parsed or has invalid settings.
    """
    config_path = workspace_root / CONFIG_FILENAME

    if not config_path.is_file():
        log.debug('no_monokit_config', path=str(config_path))
        return MonokitConfig()

    try:
        raw: dict[str, Any] = tomlkit.parse(config_path.read_text(encoding='utf-8')).unwrap()  # noqa: ANN401
    except OSError as exc:
        raise MonokitError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc
    except tomlkit.exceptions.TOMLKitError as exc:
        raise MonokitError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to parse {config_path}: {exc}',
            hint='Check the file for TOML syntax errors.',
        ) from exc

    for key in raw:
        if key not in VALID_KEYS:
            suggestion = _suggest_key(key)
            raise MonokitError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {CONFIG_FILENAME}",
                hint=f"Did you mean '{suggestion}'?" if suggestion else f'Valid keys are: {", ".join(sorted(VALID_KEYS))}.',
            )

    for key, value in raw.items():
        _validate_value_type(key, value)

    for list_key in ('packages', 'exclude'):
        if list_key in raw:
            _validate_string_list(list_key, raw[list_key])
    if 'npm_client' in raw:
        _validate_npm_client(raw['npm_client'])

    log.debug('loaded_monokit_config', path=str(config_path), keys=sorted(raw))
    return MonokitConfig(**raw, config_path=config_path)


__all__ = [
    'CONFIG_FILENAME',
    'DEFAULT_PACKAGE_GLOBS',
    'MonokitConfig',
    'VALID_KEYS',
    'load_config',
]
