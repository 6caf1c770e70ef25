# Errors raised while compiling a package specification.
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
This module contains the exceptions the compiler raises.  All of them are fatal to the
compilation that raised them, and none of them are worth retrying, as compilation is
deterministic.
"""

import typing as T


class CompileError(Exception):
    """
    Base class of all compilation errors.  The message is meant to be shown to the user
    verbatim.
    """

    def __init__(self, message: str, *, step: int | None = None) -> None:
        super().__init__(message)
        self.step = step
        """1-based index of the pipeline step that caused the error, if any."""


class SchemaError(CompileError):
    """
    A spec or pipeline definition is structurally invalid, or a pipeline step sets both
    or neither of ``uses`` and ``run``.
    """


class ValidationError(CompileError):
    """
    The arguments of a pipeline step do not conform to the input schema of the pipeline
    it references.
    """

    def __init__(
        self,
        message: str,
        *,
        step: int,
        pipeline: str,
        input_name: str,
        allowed: T.Sequence[str] = (),
    ) -> None:
        super().__init__(message, step=step)
        self.pipeline = pipeline
        self.input_name = input_name
        self.allowed = tuple(allowed)
        """Sorted names of the inputs the pipeline accepts, for unknown-input errors."""


class NotFoundError(CompileError):
    """A referenced pipeline does not exist in the catalog."""

    def __init__(self, message: str, *, name: str, step: int | None = None) -> None:
        super().__init__(message, step=step)
        self.name = name


class PreconditionError(CompileError):
    """A required top-level spec field is absent or empty."""

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field
