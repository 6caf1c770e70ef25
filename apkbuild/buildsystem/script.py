# Build script synthesis.
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
This module turns the pipeline of a spec into a single shell script.
"""

import logging
import typing as T

from apkbuild.constants import OUTPUT_DIR
from apkbuild.errors import NotFoundError, SchemaError

from .inputs import resolve_inputs
from .template import substitute_script

if T.TYPE_CHECKING:
    from apkbuild.data.spec import PipelineStep, Spec

    from .catalog import PipelineCatalog

logger = logging.getLogger(__name__)

SCRIPT_PROLOGUE = f"set -e\nmkdir -p {OUTPUT_DIR}\n"
"""Every build script starts with this."""


def _terminate(fragment: str) -> str:
    # Trailing blanks after the last newline don't count as an unterminated line.
    if fragment.rstrip(" \t").endswith("\n"):
        return fragment
    return fragment + "\n"


def check_step_form(step: "PipelineStep", index: int) -> None:
    """
    Makes sure ``step`` sets exactly one of ``uses`` and ``run``.  ``index`` is 1-based.
    """
    if step.is_inline and step.is_reference:
        raise SchemaError(f"pipeline step {index}: cannot set both 'uses' and 'run'", step=index)
    if not step.is_inline and not step.is_reference:
        raise SchemaError(f"pipeline step {index}: must set either 'uses' or 'run'", step=index)


def resolve_step(step: "PipelineStep", index: int, spec: "Spec", catalog: "PipelineCatalog") -> str:
    """
    Produces the script fragment for one step, terminated by a newline.

    Raises:
      SchemaError: if the step is malformed, or references a malformed pipeline.
      NotFoundError: if the step references an unknown pipeline.
      ValidationError: if the step arguments don't match the pipeline inputs.
    """
    check_step_form(step, index)
    if step.is_inline:
        return _terminate(step.run)

    try:
        definition = catalog.resolve(step.uses)
    except NotFoundError as e:
        raise NotFoundError(f"pipeline step {index}: {e}", name=e.name, step=index) from e
    except SchemaError as e:
        raise SchemaError(f"pipeline step {index}: {e}", step=index) from e

    inputs = resolve_inputs(definition, step.with_, spec, pipeline=step.uses, step=index)
    return _terminate(substitute_script(definition.runs, inputs, spec))


def synthesize_script(spec: "Spec", catalog: "PipelineCatalog") -> str:
    """
    Resolves every step of ``spec.pipeline``, in order, and joins them into one script
    that aborts on the first failing command.  Fails on the first bad step.

    Raises:
      SchemaError: if there are no steps, or on a bad step (see :py:func:`resolve_step`).
    """
    if not spec.pipeline:
        raise SchemaError("pipeline is required and must not be empty")

    fragments = [SCRIPT_PROLOGUE]
    for index, step in enumerate(spec.pipeline, start=1):
        fragments.append(resolve_step(step, index, spec, catalog))
        log = logging.LoggerAdapter(logger, dict(package=spec.name, step=index))
        log.debug("resolved %s", step.uses or "inline script")
    return "".join(fragments)
