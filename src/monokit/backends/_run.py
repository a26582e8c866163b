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

"""Subprocess seam for monokit.

Package scripts are the only child processes monokit starts, and they
all go through :func:`run_command`. It captures output, records wall
time, and either runs the command or, in dry-run mode, only logs it.
The exit code is returned untouched; deciding what a failure means is
left to the caller (:class:`~monokit.backends.npm.NpmScriptRunner`).
"""

from __future__ import annotations

import subprocess  # noqa: S404 - running package scripts is this module's job
import time
from dataclasses import dataclass
from pathlib import Path

from monokit.logging import get_logger

log = get_logger('monokit.backends.run')

# Lifecycle scripts (builds, test suites) can be slow: 30 minutes.
DEFAULT_TIMEOUT_SECONDS = 1800


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one script invocation.

    Attributes:
        command: argv that was (or, for a dry run, would have been) executed.
        return_code: Exit status; always 0 for a dry run.
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall time in milliseconds.
        dry_run: True if the command was only logged.
        cwd: Directory the command ran in.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0
    dry_run: bool = False
    cwd: str = ''

    @property
    def ok(self) -> bool:
        """Whether the script exited with status 0."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """argv joined with spaces, for messages."""
        return ' '.join(self.command)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    dry_run: bool = False,
) -> CommandResult:
    """Run ``cmd`` in ``cwd`` and capture its output.

    Raises:
        subprocess.TimeoutExpired: If the command outlives ``timeout`` seconds.
    """
    cwd_str = str(cwd)
    if dry_run:
        log.info('dry_run', cmd=' '.join(cmd), cwd=cwd_str)
        return CommandResult(command=cmd, return_code=0, dry_run=True, cwd=cwd_str)

    log.debug('run_command', cmd=' '.join(cmd), cwd=cwd_str)
    start = time.monotonic()
    proc = subprocess.run(  # noqa: S603 - argv is built from a declared package.json script name
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    result = CommandResult(
        command=cmd,
        return_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration=(time.monotonic() - start) * 1000,
        cwd=cwd_str,
    )
    log.debug('command_finished', cmd=result.command_str, return_code=result.return_code, duration=result.duration)
    return result


__all__ = [
    'DEFAULT_TIMEOUT_SECONDS',
    'CommandResult',
    'run_command',
]
