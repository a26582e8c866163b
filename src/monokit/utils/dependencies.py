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

"""npm semver helpers.

Range arithmetic (``^1.2.0``, ``~1.2``, ``>=1 <2``, ``1.x``...) is
delegated to `node-semver <https://pypi.org/project/node-semver/>`_,
a port of the resolver npm itself uses. These helpers only add the
policy monokit needs on top: anything that can't be compared counts
as "not satisfied" instead of an error, so a workspace-wide check can
keep going and report every problem.
"""

from __future__ import annotations

from pathlib import Path

import nodesemver

from monokit.errors import MonokitError
from monokit.manifest import MANIFEST_FILENAME, read_manifest


def version_satisfies(version: str | None, version_range: str | None) -> bool:
    """Return True if ``version`` falls inside the npm ``version_range``.

    Missing or malformed inputs yield ``False``.
    """
    if not version or not version_range:
        return False
    try:
        return bool(nodesemver.satisfies(version, version_range, loose=False))
    except (ValueError, TypeError):
        return False


def dependency_is_satisfied(node_modules: Path, dep_name: str, need_version: str | None) -> bool:
    """Return True if ``dep_name`` is installed under ``node_modules`` at a matching version.

    Reads ``node_modules/<dep_name>/package.json`` (scoped names map to
    ``node_modules/@scope/name``) and checks its ``version`` against
    ``need_version``. A missing or unreadable manifest means not installed.
    """
    if not need_version:
        return False
    try:
        data = read_manifest(node_modules / dep_name / MANIFEST_FILENAME)
    except MonokitError:
        return False
    return version_satisfies(data.get('version'), need_version)


__all__ = [
    'dependency_is_satisfied',
    'version_satisfies',
]
