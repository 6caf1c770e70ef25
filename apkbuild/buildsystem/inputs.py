# Pipeline input validation and resolution.
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
This module checks the arguments of a pipeline step against the input schema of the
pipeline it references, and computes the final value of every input.
"""

import typing as T

from apkbuild.errors import ValidationError

from .template import substitute_package

if T.TYPE_CHECKING:
    from apkbuild.data.spec import Scalar, Spec

    from .catalog import PipelineDef

ResolvedInputs: T.TypeAlias = dict[str, str]
"""Input name to resolved value, covering every input a pipeline declares."""


def scalar_to_text(value: "Scalar") -> str:
    """
    Renders a step argument as text.  Booleans become ``true`` or ``false``, numbers
    their decimal representation (integral floats lose the fraction, so ``3.0`` is
    ``3``), and strings stay as they are.
    """
    match value:
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case float():
            return str(int(value)) if value.is_integer() else repr(value)
        case str():
            return value
    return str(value)


def validate_arguments(
    definition: "PipelineDef",
    arguments: T.Mapping[str, "Scalar"],
    *,
    pipeline: str,
    step: int,
) -> None:
    """
    Checks ``arguments`` against the schema in ``definition``.  ``step`` is the 1-based
    index of the step, and ``pipeline`` the name it referenced, both used for error
    reporting only.

    Raises:
      ValidationError: on an unknown argument, or a missing or blank required one.
    """
    for key in arguments:
        if key not in definition.inputs:
            allowed = definition.sorted_input_names()
            raise ValidationError(
                f"pipeline step {step} ({pipeline}): unknown input {key!r} "
                f"(allowed: {', '.join(allowed)})",
                step=step,
                pipeline=pipeline,
                input_name=key,
                allowed=allowed,
            )

    for name, input_def in definition.inputs.items():
        if not input_def.required:
            continue
        if name not in arguments:
            raise ValidationError(
                f"pipeline step {step} ({pipeline}): required input {name!r} is missing",
                step=step,
                pipeline=pipeline,
                input_name=name,
            )
        if not scalar_to_text(arguments[name]).strip():
            raise ValidationError(
                f"pipeline step {step} ({pipeline}): required input {name!r} must not be "
                "empty",
                step=step,
                pipeline=pipeline,
                input_name=name,
            )


def resolve_inputs(
    definition: "PipelineDef",
    arguments: T.Mapping[str, "Scalar"],
    spec: "Spec",
    *,
    pipeline: str,
    step: int,
) -> ResolvedInputs:
    """
    Validates ``arguments`` (see :py:func:`validate_arguments`) and merges them over the
    defaults of ``definition``.  Package metadata placeholders in the values are
    substituted, so that an argument may refer to the package name or version.

    Returns:
      A mapping with an entry for every input ``definition`` declares.
    """
    validate_arguments(definition, arguments, pipeline=pipeline, step=step)

    resolved = {name: input_def.default for (name, input_def) in definition.inputs.items()}
    for key, value in arguments.items():
        resolved[key] = scalar_to_text(value)

    return {name: substitute_package(value, spec) for (name, value) in resolved.items()}
