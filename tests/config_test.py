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

"""Tests for monokit.config."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest
from monokit.config import CONFIG_FILENAME, MonokitConfig, load_config
from monokit.errors import E, MonokitError


def _write(root: Path, text: str) -> Path:
    path = root / CONFIG_FILENAME
    path.write_text(text, encoding='utf-8')
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """No monokit.toml means the default layout."""
        config = load_config(tmp_path)
        assert config == MonokitConfig()
        assert config.packages == ['packages/*']
        assert config.exclude == []
        assert config.npm_client == 'npm'
        assert config.config_path is None

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file also gives defaults, with the path recorded."""
        path = _write(tmp_path, '')
        config = load_config(tmp_path)
        assert config.packages == ['packages/*']
        assert config.config_path == path

    def test_all_keys(self, tmp_path: Path) -> None:
        """Every supported key is read."""
        _write(
            tmp_path,
            'packages = ["packages/*", "!packages/scratch"]\nexclude = ["example-*"]\nnpm_client = "pnpm"\n',
        )
        config = load_config(tmp_path)
        assert config.packages == ['packages/*', '!packages/scratch']
        assert config.exclude == ['example-*']
        assert config.npm_client == 'pnpm'

    def test_frozen(self, tmp_path: Path) -> None:
        """The config cannot be reassigned."""
        config = load_config(tmp_path)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.npm_client = 'yarn'  # type: ignore[misc]

    def test_unknown_key_suggests(self, tmp_path: Path) -> None:
        """A typo gets a did-you-mean hint."""
        _write(tmp_path, 'pakages = ["x/*"]\n')
        with pytest.raises(MonokitError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == E.CONFIG_INVALID_KEY
        assert "'packages'" in exc_info.value.hint

    def test_unknown_key_without_suggestion(self, tmp_path: Path) -> None:
        """An unrelated key lists the valid ones."""
        _write(tmp_path, 'zzz = 1\n')
        with pytest.raises(MonokitError) as exc_info:
            load_config(tmp_path)
        assert 'npm_client' in exc_info.value.hint

    def test_wrong_type(self, tmp_path: Path) -> None:
        """packages must be a list."""
        _write(tmp_path, 'packages = "packages/*"\n')
        with pytest.raises(MonokitError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE

    def test_non_string_items(self, tmp_path: Path) -> None:
        """List items must be strings."""
        _write(tmp_path, 'exclude = [1]\n')
        with pytest.raises(MonokitError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE

    def test_unknown_npm_client(self, tmp_path: Path) -> None:
        """npm_client is restricted to known clients."""
        _write(tmp_path, 'npm_client = "bun"\n')
        with pytest.raises(MonokitError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE

    def test_parse_error(self, tmp_path: Path) -> None:
        """Broken TOML raises MK-CONFIG-PARSE-ERROR."""
        _write(tmp_path, 'packages = [\n')
        with pytest.raises(MonokitError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == E.CONFIG_PARSE_ERROR
