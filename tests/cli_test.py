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

"""Tests for monokit.cli."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from monokit.cli import build_parser, main
from tests._fakes import FakeScriptRunner


def _write_pkg(root: Path, rel: str, descriptor: dict[str, Any]) -> None:
    pkg_dir = root / rel
    pkg_dir.mkdir(parents=True, exist_ok=True)
    (pkg_dir / 'package.json').write_text(json.dumps(descriptor), encoding='utf-8')


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    """A two-package workspace whose dependency ranges line up."""
    _write_pkg(tmp_path, 'packages/core', {'name': 'core', 'version': '1.2.0', 'scripts': {'build': 'tsc'}})
    _write_pkg(
        tmp_path,
        'packages/app',
        {'name': 'app', 'version': '0.1.0', 'private': True, 'dependencies': {'core': '^1.0.0'}},
    )
    return tmp_path


class TestBuildParser:
    """Tests for build_parser()."""

    def test_run_flags(self) -> None:
        """run takes a script and optional flags."""
        args = build_parser().parse_args(['run', 'build', '--parallel', '--dry-run'])
        assert args.command == 'run'
        assert args.script == 'build'
        assert args.parallel is True
        assert args.dry_run is True

    def test_global_flags(self) -> None:
        """Global flags precede the subcommand."""
        args = build_parser().parse_args(['--root', '/ws', '-v', 'ls', '--json'])
        assert args.root == '/ws'
        assert args.verbose is True
        assert args.json is True


class TestMain:
    """Tests for main()."""

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No subcommand prints help and exits 2."""
        assert main([]) == 2
        assert 'please provide a command' in capsys.readouterr().err

    def test_ls_json(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """ls --json prints one entry per package."""
        assert main(['--root', str(workspace), '-q', 'ls', '--json']) == 0
        entries = json.loads(capsys.readouterr().out)
        assert [e['name'] for e in entries] == ['app', 'core']
        assert entries[0]['private'] is True
        assert entries[1]['publish_directory'] is None

    def test_ls_text(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """ls prints a readable listing."""
        assert main(['--root', str(workspace), '-q', 'ls']) == 0
        out = capsys.readouterr().out
        assert 'app 0.1.0' in out
        assert '[private]' in out

    def test_check_ok(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A consistent workspace passes check."""
        assert main(['--root', str(workspace), '-q', 'check']) == 0
        assert 'All sibling dependencies satisfied' in capsys.readouterr().out

    def test_check_mismatch(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A range the sibling doesn't satisfy fails check."""
        _write_pkg(workspace, 'packages/core', {'name': 'core', 'version': '2.0.0'})
        assert main(['--root', str(workspace), '-q', 'check']) == 1
        assert 'MK-DEPENDENCY-MISMATCH' in capsys.readouterr().err

    def test_empty_workspace(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Errors are rendered and exit 1."""
        assert main(['--root', str(tmp_path), '-q', 'ls']) == 1
        assert 'MK-WORKSPACE-NO-MEMBERS' in capsys.readouterr().err

    def test_run_only_declaring_packages(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """run only touches packages that declare the script."""
        runner = FakeScriptRunner()
        with patch('monokit.cli.NpmScriptRunner', return_value=runner):
            assert main(['--root', str(workspace), '-q', 'run', 'build']) == 0
        assert [(script, path.name) for script, path, _ in runner.calls] == [('build', 'core')]
        assert 'ran build' in capsys.readouterr().out

    def test_run_uses_configured_client(self, workspace: Path) -> None:
        """npm_client from monokit.toml reaches the runner."""
        (workspace / 'monokit.toml').write_text('npm_client = "pnpm"\n', encoding='utf-8')
        runner = FakeScriptRunner()
        with patch('monokit.cli.NpmScriptRunner', return_value=runner):
            assert main(['--root', str(workspace), '-q', 'run', 'build', '--parallel']) == 0
        assert runner.calls[0][2] == 'pnpm'

    def test_run_failure(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A failing script exits 1 with the error rendered."""
        with patch('monokit.cli.NpmScriptRunner', return_value=FakeScriptRunner(fail=['build'])):
            assert main(['--root', str(workspace), '-q', 'run', 'build']) == 1
        assert 'MK-SCRIPT-FAILED' in capsys.readouterr().err

    def test_run_timeout(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A script that times out is rendered as an error, not a traceback."""

        def hang(cmd: list[str], **kwargs: Any) -> object:
            raise subprocess.TimeoutExpired(cmd, kwargs['timeout'])

        with patch('monokit.backends.npm.run_command', hang):
            assert main(['--root', str(workspace), '-q', 'run', 'build']) == 1
        err = capsys.readouterr().err
        assert 'MK-SCRIPT-FAILED' in err
        assert 'timed out' in err

    def test_explain(self, capsys: pytest.CaptureFixture[str]) -> None:
        """explain prints the catalog entry."""
        assert main(['explain', 'MK-WORKSPACE-NO-MEMBERS']) == 0
        assert 'No package.json files matched' in capsys.readouterr().out

    def test_explain_unknown(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Unknown codes exit 1."""
        assert main(['explain', 'MK-NOPE']) == 1
        assert 'Unknown error code' in capsys.readouterr().out
