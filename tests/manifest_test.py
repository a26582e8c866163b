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

"""Tests for monokit.manifest."""

from __future__ import annotations

from pathlib import Path

import pytest
from monokit.errors import E, MonokitError
from monokit.manifest import manifest_exists, parse_manifest, read_manifest, read_manifest_async


class TestParseManifest:
    """Tests for parse_manifest()."""

    def test_object(self) -> None:
        """A JSON object is returned unchanged."""
        assert parse_manifest('{"name": "a", "version": "1.0.0"}', Path('p.json')) == {
            'name': 'a',
            'version': '1.0.0',
        }

    def test_invalid_json(self) -> None:
        """Bad JSON raises MK-MANIFEST-PARSE-ERROR."""
        with pytest.raises(MonokitError) as exc_info:
            parse_manifest('{', Path('p.json'))
        assert exc_info.value.code == E.MANIFEST_PARSE_ERROR

    def test_not_an_object(self) -> None:
        """A JSON array is not a descriptor."""
        with pytest.raises(MonokitError) as exc_info:
            parse_manifest('[1, 2]', Path('p.json'))
        assert exc_info.value.code == E.MANIFEST_PARSE_ERROR


class TestReadManifest:
    """Tests for the sync and async readers."""

    def test_exists(self, tmp_path: Path) -> None:
        """manifest_exists() only accepts regular files."""
        path = tmp_path / 'package.json'
        assert manifest_exists(path) is False
        path.write_text('{}', encoding='utf-8')
        assert manifest_exists(path) is True
        assert manifest_exists(tmp_path) is False

    def test_read(self, tmp_path: Path) -> None:
        """Fields are returned raw, without normalisation."""
        path = tmp_path / 'package.json'
        path.write_text('{"name": "A", "version": " 1.0.0 ", "extra": null}', encoding='utf-8')
        assert read_manifest(path) == {'name': 'A', 'version': ' 1.0.0 ', 'extra': None}

    def test_read_missing(self, tmp_path: Path) -> None:
        """A missing file raises MK-MANIFEST-NOT-FOUND."""
        with pytest.raises(MonokitError) as exc_info:
            read_manifest(tmp_path / 'package.json')
        assert exc_info.value.code == E.MANIFEST_NOT_FOUND

    def test_read_not_utf8(self, tmp_path: Path) -> None:
        """Bytes that aren't UTF-8 raise MK-MANIFEST-PARSE-ERROR."""
        path = tmp_path / 'package.json'
        path.write_bytes(b'{"name": "\xff"}')
        with pytest.raises(MonokitError) as exc_info:
            read_manifest(path)
        assert exc_info.value.code == E.MANIFEST_PARSE_ERROR

    @pytest.mark.asyncio()
    async def test_read_async_not_utf8(self, tmp_path: Path) -> None:
        """The async reader maps decode failures the same way."""
        path = tmp_path / 'package.json'
        path.write_bytes(b'{"name": "\xff"}')
        with pytest.raises(MonokitError) as exc_info:
            await read_manifest_async(path)
        assert exc_info.value.code == E.MANIFEST_PARSE_ERROR

    @pytest.mark.asyncio()
    async def test_read_async(self, tmp_path: Path) -> None:
        """The async reader returns the same data."""
        path = tmp_path / 'package.json'
        path.write_text('{"name": "a"}', encoding='utf-8')
        assert await read_manifest_async(path) == {'name': 'a'}

    @pytest.mark.asyncio()
    async def test_read_async_missing(self, tmp_path: Path) -> None:
        """The async reader reports missing files the same way."""
        with pytest.raises(MonokitError) as exc_info:
            await read_manifest_async(tmp_path / 'package.json')
        assert exc_info.value.code == E.MANIFEST_NOT_FOUND
