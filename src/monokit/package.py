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

"""The workspace package model.

A :class:`Package` wraps one ``package.json`` descriptor and the
directory it lives in. It answers two questions for workspace-wide
commands:

1. Does this package's declared range for a sibling (or an installed
   dependency) accept the version that is actually there?
2. Which descriptor is authoritative at publish time? A package may
   publish from a sub-directory (``config.publishDirectory``, typically
   a build output like ``dist/``) whose own ``package.json`` carries the
   real ``version`` and ``private`` flag.

Publish directory resolution::

    config.publishDirectory?
      │
      ├── no ──────────────────────────────────────────→ ABSENT
      │
      └── yes: <location>/<publishDirectory>/package.json exists?
            │
            ├── yes → read raw descriptor ──────────────→ RESOLVED
            │
            └── no → resolver(None) returns descriptor?
                  ├── yes ──────────────────────────────→ RESOLVED
                  └── no  → MK-PUBLISH-DIRECTORY-INVALID → FAILED

Resolution runs at most once per instance. Later calls, including calls
that pass a different ``resolver``, observe the memoized outcome; a
failed resolution re-raises the original error.

Usage::

    pkg = Package(read_manifest(path / 'package.json'), path)
    if pkg.has_matching_dependency(sibling, do_warn=True):
        ...
    publish_pkg = pkg.get_publish_directory_package()
"""

from __future__ import annotations

import copy
import enum
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from monokit.backends._run import CommandResult
from monokit.backends.npm import NpmScriptRunner, ScriptRunner
from monokit.errors import E, MonokitError
from monokit.logging import get_logger
from monokit.manifest import MANIFEST_FILENAME, manifest_exists, read_manifest
from monokit.utils.dependencies import dependency_is_satisfied, version_satisfies

log = get_logger('monokit.package')

#: A raw ``package.json`` descriptor.
Descriptor = dict[str, Any]

#: Fallback for a publish directory without a ``package.json``. Called
#: with ``None``; returns a descriptor or ``None``.
PublishDirectoryResolver = Callable[[None], Descriptor | None]

_default_runner: ScriptRunner = NpmScriptRunner()


class VersionSerializer(Protocol):
    """Two-way transform applied to a package descriptor.

    ``deserialize`` runs once, when the serializer is assigned to a
    package; ``serialize`` runs every time the descriptor leaves the
    package through :meth:`Package.to_json`.
    """

    def deserialize(self, pkg: Descriptor) -> Descriptor:
        """Convert an on-disk descriptor to its in-memory form."""
        ...

    def serialize(self, pkg: Descriptor) -> Descriptor:
        """Convert an in-memory descriptor back to its on-disk form."""
        ...


class _Resolution(enum.Enum):
    UNRESOLVED = 'unresolved'
    ABSENT = 'absent'
    RESOLVED = 'resolved'
    FAILED = 'failed'


class Package:
    """One named, versioned package in the workspace.

    ``name`` and ``location`` are fixed at construction. ``version`` may
    be reassigned (e.g. by a version bump). No validation is performed:
    a descriptor without a ``name`` simply yields ``None``.

    Args:
        descriptor: The raw ``package.json`` contents.
        location: Directory that contains the descriptor.
    """

    def __init__(self, descriptor: Descriptor, location: Path | str) -> None:
        """Store the descriptor and its location verbatim."""
        self._package = descriptor
        self._location = Path(location)
        self._version_serializer: VersionSerializer | None = None
        self._publish_dir_lock = threading.Lock()
        self._publish_dir_state = _Resolution.UNRESOLVED
        self._publish_dir_package: Package | None = None
        self._publish_dir_error: Exception | None = None

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f'Package(name={self.name!r}, version={self.version!r}, location={str(self._location)!r})'

    @property
    def name(self) -> str | None:
        """The package name."""
        return self._package.get('name')

    @property
    def location(self) -> Path:
        """Directory containing this package's ``package.json``."""
        return self._location

    @property
    def manifest_location(self) -> Path:
        """Path to this package's ``package.json``."""
        return self._location / MANIFEST_FILENAME

    @property
    def node_modules_location(self) -> Path:
        """Path to this package's ``node_modules`` directory."""
        return self._location / 'node_modules'

    @property
    def bin_location(self) -> Path:
        """Path to this package's ``node_modules/.bin`` directory."""
        return self.node_modules_location / '.bin'

    @property
    def publish_directory(self) -> str | None:
        """``config.publishDirectory``, or ``None`` when unset or empty."""
        config = self._package.get('config')
        if isinstance(config, dict) and config.get('publishDirectory'):
            return config['publishDirectory']
        return None

    @property
    def publish_directory_location(self) -> Path | None:
        """Absolute publish directory; relative values resolve against :attr:`location`."""
        publish_directory = self.publish_directory
        return self._location / publish_directory if publish_directory else None

    @property
    def version(self) -> str | None:
        """The package version."""
        return self._package.get('version')

    @version.setter
    def version(self, version: str) -> None:
        self._package['version'] = version

    @property
    def bin(self) -> str | dict[str, str] | None:
        """The ``bin`` field, as declared."""
        return self._package.get('bin')

    @property
    def private(self) -> bool:
        """This descriptor's own ``private`` flag. See :meth:`is_private`."""
        return bool(self._package.get('private'))

    @property
    def dependencies(self) -> dict[str, str]:
        """Copy of ``dependencies``."""
        return dict(self._package.get('dependencies') or {})

    @property
    def dev_dependencies(self) -> dict[str, str]:
        """Copy of ``devDependencies``."""
        return dict(self._package.get('devDependencies') or {})

    @property
    def peer_dependencies(self) -> dict[str, str]:
        """Copy of ``peerDependencies``."""
        return dict(self._package.get('peerDependencies') or {})

    @property
    def all_dependencies(self) -> dict[str, str]:
        """``devDependencies`` merged with ``dependencies``.

        ``dependencies`` wins on a name collision. ``peerDependencies``
        are not included.
        """
        return {**self.dev_dependencies, **self.dependencies}

    @property
    def scripts(self) -> dict[str, str]:
        """Copy of ``scripts``."""
        return dict(self._package.get('scripts') or {})

    @property
    def version_serializer(self) -> VersionSerializer | None:
        """The serializer assigned to this package, if any."""
        return self._version_serializer

    @version_serializer.setter
    def version_serializer(self, version_serializer: VersionSerializer | None) -> None:
        self._version_serializer = version_serializer
        if version_serializer is not None:
            self._package = version_serializer.deserialize(self._package)

    def is_private(self) -> bool:
        """Return whether this package must not be published.

        The publish directory's descriptor decides when there is one;
        otherwise this package's own descriptor does.

        Raises:
            MonokitError: ``MK-PUBLISH-DIRECTORY-INVALID`` if the publish
                directory is configured but can't be resolved.
        """
        publish_dir_package = self.get_publish_directory_package()
        if publish_dir_package is not None:
            return publish_dir_package.private
        return self.private

    def to_json(self) -> Descriptor:
        """Return a deep copy of the descriptor, serialized if a serializer is set."""
        pkg = copy.deepcopy(self._package)
        if self._version_serializer is not None:
            return self._version_serializer.serialize(pkg)
        return pkg

    async def run_script(
        self,
        script: str,
        *,
        runner: ScriptRunner | None = None,
        npm_client: str = 'npm',
    ) -> CommandResult | None:
        """Run an npm script in this package's directory.

        Returns ``None`` without touching the runner when the package
        doesn't declare ``script``.

        Raises:
            MonokitError: ``MK-SCRIPT-FAILED`` if the script fails.
        """
        log.debug('run_script', script=script, package=self.name)
        if not self.scripts.get(script):
            return None
        runner = runner or _default_runner
        return await runner.run_script_in_dir(script, args=[], directory=self._location, npm_client=npm_client)

    def run_script_sync(
        self,
        script: str,
        *,
        runner: ScriptRunner | None = None,
        npm_client: str = 'npm',
    ) -> CommandResult | None:
        """Blocking variant of :meth:`run_script`."""
        log.debug('run_script_sync', script=script, package=self.name)
        if not self.scripts.get(script):
            return None
        runner = runner or _default_runner
        return runner.run_script_in_dir_sync(script, args=[], directory=self._location, npm_client=npm_client)

    def has_matching_dependency(self, dependency: Package, do_warn: bool = False) -> bool:
        """Return whether ``dependency``'s version satisfies the range declared for it here.

        A dependency this package doesn't declare yields ``False``: there
        is no constraint to check. A declared range that the actual
        version doesn't satisfy also yields ``False`` and, when
        ``do_warn`` is set, logs a ``dependency_mismatch`` warning.
        """
        log.debug('has_matching_dependency', package=self.name, dependency=dependency.name)

        expected_version = self.all_dependencies.get(dependency.name) if dependency.name else None
        actual_version = dependency.version

        if not expected_version:
            return False

        if version_satisfies(actual_version, expected_version):
            return True

        if do_warn:
            log.warning(
                'dependency_mismatch',
                package=self.name,
                expected=f'{dependency.name}@{expected_version}',
                actual=f'{dependency.name}@{actual_version}',
                code=E.DEPENDENCY_MISMATCH.value,
            )

        return False

    def has_dependency_installed(self, dep_name: str) -> bool:
        """Return whether ``dep_name`` is in ``node_modules`` at the version required here."""
        log.debug('has_dependency_installed', package=self.name, dependency=dep_name)
        return dependency_is_satisfied(self.node_modules_location, dep_name, self.all_dependencies.get(dep_name))

    def get_publish_directory_package(self, resolver: PublishDirectoryResolver | None = None) -> Package | None:
        """Return the package that is actually published, if it lives elsewhere.

        Returns ``None`` when ``config.publishDirectory`` is not set.
        Otherwise returns a new :class:`Package` for the descriptor in
        the publish directory, or for the one ``resolver`` supplies when
        that directory has no ``package.json``.

        The first call decides the outcome for the lifetime of this
        instance; ``resolver`` is ignored on later calls.

        Raises:
            MonokitError: ``MK-PUBLISH-DIRECTORY-INVALID`` if the publish
                directory has no descriptor and no fallback was obtained.
                Errors from reading the descriptor or from ``resolver``
                propagate unchanged; either way, later calls re-raise the
                same exception.
        """
        with self._publish_dir_lock:
            if self._publish_dir_state is _Resolution.UNRESOLVED:
                try:
                    self._publish_dir_package = self._resolve_publish_directory_package(resolver)
                except Exception as exc:  # noqa: BLE001 - memoized and re-raised below
                    self._publish_dir_state = _Resolution.FAILED
                    self._publish_dir_error = exc
                else:
                    self._publish_dir_state = (
                        _Resolution.ABSENT if self._publish_dir_package is None else _Resolution.RESOLVED
                    )

            if self._publish_dir_state is _Resolution.FAILED and self._publish_dir_error is not None:
                raise self._publish_dir_error
            return self._publish_dir_package

    def _resolve_publish_directory_package(self, resolver: PublishDirectoryResolver | None) -> Package | None:
        publish_dir_location = self.publish_directory_location
        if publish_dir_location is None:
            return None

        log.debug('custom_publish_directory', package=self.name, directory=str(publish_dir_location))

        manifest_path = publish_dir_location / MANIFEST_FILENAME
        publish_dir_json: Descriptor | None = None
        if manifest_exists(manifest_path):
            publish_dir_json = read_manifest(manifest_path)
        elif resolver is not None:
            publish_dir_json = resolver(None)

        if not publish_dir_json:
            message = (
                f"Package '{self.name}' is configured to publish from custom directory "
                f"{publish_dir_location}, which doesn't exist or is missing 'package.json'"
            )
            log.error('publish_directory_invalid', package=self.name, directory=str(publish_dir_location))
            raise MonokitError(
                code=E.PUBLISH_DIRECTORY_INVALID,
                message=message,
                hint='Build the package so the publish directory holds a package.json, '
                'or remove config.publishDirectory.',
            )

        return Package(publish_dir_json, publish_dir_location)


__all__ = [
    'Descriptor',
    'Package',
    'PublishDirectoryResolver',
    'VersionSerializer',
]
