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

"""Structured logging for monokit.

Every module holds a module-level ``log = get_logger('monokit.<module>')``
and emits snake_case events with key/value context::

    log.warning('dependency_mismatch', package='app', expected='core@^1.0.0', actual='core@2.0.0')

Events go through stdlib :mod:`logging` so that levels and handlers
behave as usual, and are rendered by structlog. The CLI calls
:func:`configure_logging` once per invocation:

=============  ===========  ==========================================
Flag           Root level   Shows
=============  ===========  ==========================================
(none)         INFO         discovery counts, script runs, dry runs
``-v``         DEBUG        manifest reads, publish-directory lookups
``-q``         WARNING      dependency mismatches and failures only
=============  ===========  ==========================================

Output goes to stderr, keeping stdout for ``monokit ls --json``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route monokit events to ``stream`` (stderr by default).

    ``quiet`` wins over ``verbose``. With ``json_log`` each event is one
    JSON object per line; otherwise a console renderer is used, colored
    only when the stream is a terminal. Calling this again replaces the
    previous setup, including for loggers that were already created.
    """
    out = stream or sys.stderr
    level = logging.WARNING if quiet else logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format='%(message)s', stream=out, level=level, force=True)

    renderer: structlog.types.Processor
    if json_log:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # The renderer lives on the handler, so cached loggers pick up a new one.
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'monokit') -> structlog.stdlib.BoundLogger:
    """Return the structlog logger for ``name``."""
    return structlog.get_logger(name)


__all__ = [
    'configure_logging',
    'get_logger',
]
