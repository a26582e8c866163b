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

"""Reading ``package.json`` descriptors.

Descriptors are returned exactly as stored on disk: no field
normalisation, no defaults filled in. Whatever a package author wrote
is what :class:`~monokit.package.Package` sees.

Two readers share one contract:

- :func:`read_manifest` blocks. The package model uses it while
  resolving a publish directory, which is synchronous by nature.
- :func:`read_manifest_async` goes through ``aiofiles`` and is used by
  workspace discovery, which reads many manifests at once.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiofiles

from monokit.errors import E, MonokitError

#: File name of an npm package descriptor.
MANIFEST_FILENAME = 'package.json'


def manifest_exists(path: Path) -> bool:
    """Return True if ``path`` is an existing regular file."""
    return path.is_file()


def parse_manifest(text: str, path: Path) -> dict[str, Any]:  # noqa: ANN401 - JSON dict values are inherently untyped
    """Parse descriptor JSON, raising a MonokitError on failure."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MonokitError(
            code=E.MANIFEST_PARSE_ERROR,
            message=f'Failed to parse {path}: {exc}',
            hint=f'Check that {path} contains valid JSON.',
        ) from exc
    if not isinstance(data, dict):
        raise MonokitError(
            code=E.MANIFEST_PARSE_ERROR,
            message=f'{path} is not a JSON object',
            hint=f'Expected a JSON object at the top level of {path}.',
        )
    return data


def _not_found(path: Path, exc: OSError) -> MonokitError:
    return MonokitError(
        code=E.MANIFEST_NOT_FOUND,
        message=f'Failed to read {path}: {exc}',
        hint=f'Check that {path} exists and is readable.',
    )


def _undecodable(path: Path, exc: UnicodeDecodeError) -> MonokitError:
    return MonokitError(
        code=E.MANIFEST_PARSE_ERROR,
        message=f'Failed to decode {path}: {exc}',
        hint=f'Save {path} as UTF-8.',
    )


def read_manifest(path: Path) -> dict[str, Any]:  # noqa: ANN401
    """Read and parse a ``package.json`` file.

    Raises:
        MonokitError: ``MK-MANIFEST-NOT-FOUND`` if the file can't be read,
            ``MK-MANIFEST-PARSE-ERROR`` if it isn't UTF-8 or isn't a JSON
            object.
    """
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as exc:
        raise _undecodable(path, exc) from exc
    except OSError as exc:
        raise _not_found(path, exc) from exc
    return parse_manifest(text, path)


async def read_manifest_async(path: Path) -> dict[str, Any]:  # noqa: ANN401
    """Async variant of :func:`read_manifest` using ``aiofiles``."""
    try:
        async with aiofiles.open(path, encoding='utf-8') as f:
            text = await f.read()
    except UnicodeDecodeError as exc:
        raise _undecodable(path, exc) from exc
    except OSError as exc:
        raise _not_found(path, exc) from exc
    return parse_manifest(text, path)


__all__ = [
    'MANIFEST_FILENAME',
    'manifest_exists',
    'parse_manifest',
    'read_manifest',
    'read_manifest_async',
]
