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

"""npm-client script runner for monokit.

:class:`NpmScriptRunner` runs a ``package.json`` script through the
configured npm client::

    <npm_client> run <script> [args...]

with the package directory as the working directory. ``npm``, ``pnpm``
and ``yarn`` all accept this form.

Both a blocking and an async variant exist. The async one dispatches
the blocking subprocess call to ``asyncio.to_thread()`` so that many
packages can run a script concurrently without blocking the event loop.

A non-zero exit or a timeout is reported as :class:`~monokit.errors.MonokitError`
with code ``MK-SCRIPT-FAILED``. Callers never have to inspect
``return_code`` themselves.
"""

from __future__ import annotations

import asyncio
import subprocess  # noqa: S404 - only for TimeoutExpired
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from monokit.backends._run import DEFAULT_TIMEOUT_SECONDS, CommandResult, run_command
from monokit.errors import E, MonokitError
from monokit.logging import get_logger

log = get_logger('monokit.backends.npm')

#: npm clients monokit knows how to drive.
NPM_CLIENTS: frozenset[str] = frozenset({'npm', 'pnpm', 'yarn'})


@runtime_checkable
class ScriptRunner(Protocol):
    """Protocol for running a ``package.json`` script in a directory."""

    async def run_script_in_dir(
        self,
        script: str,
        *,
        args: Sequence[str],
        directory: Path,
        npm_client: str,
    ) -> CommandResult:
        """Run ``script`` in ``directory`` without blocking the event loop."""
        ...

    def run_script_in_dir_sync(
        self,
        script: str,
        *,
        args: Sequence[str],
        directory: Path,
        npm_client: str,
    ) -> CommandResult:
        """Run ``script`` in ``directory``, blocking until it exits."""
        ...


class NpmScriptRunner:
    """Script runner backed by the npm client CLI.

    Args:
        dry_run: Log the command instead of executing it.
        timeout: Seconds a single script may run before it is killed.
    """

    def __init__(self, *, dry_run: bool = False, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        """Initialize the runner."""
        self._dry_run = dry_run
        self._timeout = timeout

    async def run_script_in_dir(
        self,
        script: str,
        *,
        args: Sequence[str],
        directory: Path,
        npm_client: str,
    ) -> CommandResult:
        """Run a script asynchronously. See :meth:`run_script_in_dir_sync`."""
        return await asyncio.to_thread(
            self.run_script_in_dir_sync,
            script,
            args=args,
            directory=directory,
            npm_client=npm_client,
        )

    def run_script_in_dir_sync(
        self,
        script: str,
        *,
        args: Sequence[str],
        directory: Path,
        npm_client: str,
    ) -> CommandResult:
        """Run ``<npm_client> run <script> [args...]`` in ``directory``.

        Raises:
            MonokitError: ``MK-SCRIPT-FAILED`` if the script exits non-zero
                or runs longer than the runner's timeout.
        """
        cmd = [npm_client, 'run', script, *args]
        log.info('run_script', script=script, directory=str(directory), npm_client=npm_client)
        try:
            result = run_command(cmd, cwd=directory, timeout=self._timeout, dry_run=self._dry_run)
        except subprocess.TimeoutExpired as exc:
            log.error('script_timeout', script=script, directory=str(directory), timeout=self._timeout)
            raise MonokitError(
                code=E.SCRIPT_FAILED,
                message=f"Script '{script}' in {directory} timed out after {self._timeout:g}s",
                hint=f"Run '{' '.join(cmd)}' in {directory} to see where it hangs.",
            ) from exc
        if not result.ok:
            stderr_tail = result.stderr.strip()[-500:]
            raise MonokitError(
                code=E.SCRIPT_FAILED,
                message=f"Script '{script}' failed in {directory} (exit {result.return_code}): {stderr_tail}",
                hint=f"Run '{result.command_str}' in {directory} to reproduce.",
            )
        return result


__all__ = [
    'NPM_CLIENTS',
    'NpmScriptRunner',
    'ScriptRunner',
]
