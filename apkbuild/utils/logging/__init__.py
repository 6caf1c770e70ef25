# Copyright (C) 2025  Arsen Arsenović <arsen@managarm.org>

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.

# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""
Logging setup for the compiler.  Records logged through a
:py:class:`logging.LoggerAdapter` carrying a ``package`` and, optionally, a ``step``
are tagged ``package#step``::

    DEBUG (hello#2) apkbuild.buildsystem.script: resolved fetch
"""

import logging
import typing as T

if T.TYPE_CHECKING:
    from apkbuild.data.config import LoggingConfig


class ContextFormattingFilter(logging.Filter):
    """Moves the ``package`` and ``step`` of a record into ``apkbuild_context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        package = record.__dict__.pop("package", None)
        step = record.__dict__.pop("step", None)
        context = ""
        if package is not None:
            context = f" ({package})" if step is None else f" ({package}#{step})"
        record.apkbuild_context = context
        return True


def create_stream_handler(stream: T.TextIO | None = None) -> logging.StreamHandler[T.TextIO]:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        logging.Formatter("%(levelname)s%(apkbuild_context)s %(name)s: %(message)s")
    )
    handler.addFilter(ContextFormattingFilter())
    return handler


def apply_logging_config(config: "LoggingConfig", stream: T.TextIO | None = None) -> None:
    """Logs to ``stream`` (stderr by default) at the level ``config`` asks for."""
    root = logging.getLogger()
    root.addHandler(create_stream_handler(stream))
    root.setLevel(logging.DEBUG if config.debug else logging.INFO)
