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

"""Workspace scan and dependency-graph validation.

Workspace structure::

    monorepo/
    ├── monokit.toml             # package globs (optional)
    ├── package.json             # root manifest (usually private, nameless)
    └── packages/
        ├── core/
        │   ├── package.json
        │   └── dist/
        │       └── package.json # publish directory descriptor
        └── utils/
            └── package.json

:func:`discover_packages` builds one :class:`~monokit.package.Package`
per matching ``package.json``. :func:`check_dependency_graph` checks
every sibling dependency range against the sibling's actual version and
returns *all* mismatches, so a single run shows everything that needs
fixing.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from monokit.config import MonokitConfig
from monokit.errors import E, MonokitError
from monokit.logging import get_logger
from monokit.manifest import MANIFEST_FILENAME, read_manifest_async
from monokit.package import Package

log = get_logger('monokit.workspace')


@dataclass(frozen=True)
class DependencyMismatch:
    """A sibling dependency whose declared range rejects the sibling's version.

    Attributes:
        package: Name of the package declaring the dependency.
        dependency: Name of the sibling it depends on.
        expected: The declared range (e.g. ``"^1.0.0"``).
        actual: The sibling's current version (e.g. ``"2.0.0"``).
    """

    package: str
    dependency: str
    expected: str
    actual: str

    def __str__(self) -> str:
        """Render as ``pkg: depends on "dep@range" instead of "dep@version"``."""
        return f'{self.package}: depends on "{self.dependency}@{self.expected}" instead of "{self.dependency}@{self.actual}"'


def _glob_safe(root: Path, pattern: str) -> list[Path]:
    """Expand one glob relative to ``root``.

    ``"."`` is the root itself; a leading ``"./"`` is stripped because
    ``pathlib.glob`` rejects it on some Python versions.
    """
    if pattern == '.':
        return [root]
    if pattern.startswith('./'):
        pattern = pattern[2:]
    if not pattern:
        return [root]
    return sorted(root.glob(pattern))


def _expand_member_globs(root: Path, patterns: Sequence[str]) -> list[Path]:
    """Return directories matching ``patterns`` that contain a ``package.json``."""
    include = [p for p in patterns if not p.startswith('!')]
    exclude = [p[1:] for p in patterns if p.startswith('!')]

    found: set[Path] = set()
    for pattern in include:
        for candidate in _glob_safe(root, pattern):
            if candidate.is_dir() and (candidate / MANIFEST_FILENAME).is_file():
                found.add(candidate.resolve())

    excluded: set[Path] = set()
    for pattern in exclude:
        excluded.update(candidate.resolve() for candidate in _glob_safe(root, pattern))

    result = sorted(found - excluded)
    log.debug('expanded_member_globs', include=include, exclude=exclude, count=len(result))
    return result


async def discover_packages(root: Path, config: MonokitConfig) -> list[Package]:
    """Build a :class:`Package` for every workspace member under ``root``.

    Nameless manifests (typically the workspace root's own
    ``package.json``) are skipped.

    Raises:
        MonokitError: ``MK-WORKSPACE-NO-MEMBERS`` if no package matches,
            ``MK-WORKSPACE-DUPLICATE-PACKAGE`` if two share a name, or a
            manifest error if a ``package.json`` can't be read.
    """
    pkg_dirs = _expand_member_globs(root, config.packages)

    packages: list[Package] = []
    seen: dict[str, Path] = {}
    for pkg_dir in pkg_dirs:
        descriptor = await read_manifest_async(pkg_dir / MANIFEST_FILENAME)
        name = descriptor.get('name')
        if not isinstance(name, str) or not name:
            log.debug('skipped_nameless_package', path=str(pkg_dir))
            continue
        if name in seen:
            raise MonokitError(
                code=E.WORKSPACE_DUPLICATE_PACKAGE,
                message=f"Duplicate package name '{name}' at {pkg_dir} and {seen[name]}",
                hint='Each package in the workspace must have a unique name.',
            )
        seen[name] = pkg_dir
        packages.append(Package(descriptor, pkg_dir))

    if config.exclude:
        packages = [p for p in packages if not any(fnmatch.fnmatch(p.name or '', pat) for pat in config.exclude)]

    if not packages:
        raise MonokitError(
            code=E.WORKSPACE_NO_MEMBERS,
            message=f'No packages found under {root} matching {list(config.packages)}',
            hint='Check that your globs match directories with a named package.json.',
        )

    result = sorted(packages, key=lambda p: p.name or '')
    log.info('discovered_packages', count=len(result))
    return result


def check_dependency_graph(packages: Sequence[Package], *, warn: bool = True) -> list[DependencyMismatch]:
    """Return every sibling dependency whose range the sibling's version fails.

    Only pairs where the first package actually declares the second are
    considered, whether in ``dependencies`` or ``devDependencies``.
    ``peerDependencies`` are not checked.
    """
    mismatches: list[DependencyMismatch] = []
    for pkg in packages:
        declared = pkg.all_dependencies
        for dep in packages:
            if dep is pkg or dep.name not in declared:
                continue
            if not pkg.has_matching_dependency(dep, do_warn=warn):
                mismatches.append(
                    DependencyMismatch(
                        package=pkg.name or '',
                        dependency=dep.name or '',
                        expected=declared[dep.name or ''],
                        actual=str(dep.version),
                    )
                )
    log.info('checked_dependency_graph', packages=len(packages), mismatches=len(mismatches))
    return mismatches


__all__ = [
    'DependencyMismatch',
    'check_dependency_graph',
    'discover_packages',
]
