# Placeholder substitution in pipeline scripts.
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
This module expands placeholders in pipeline script templates.  Placeholders look like
``${{scope.key}}``.  The recognized ones are:

``${{package.name}}``, ``${{package.version}}``
  Name and version of the package being built.
``${{targets.contextdir}}``
  The directory build steps install into.
``${{inputs.<name>}}``
  The resolved value of a pipeline input.

Input placeholders naming an input that does not exist are removed, so that the shell
never sees a ``${{`` sequence.
"""

import re
import typing as T

from apkbuild.constants import OUTPUT_DIR

if T.TYPE_CHECKING:
    from apkbuild.data.spec import Spec

PACKAGE_NAME_PLACEHOLDER = "${{package.name}}"
PACKAGE_VERSION_PLACEHOLDER = "${{package.version}}"
CONTEXTDIR_PLACEHOLDER = "${{targets.contextdir}}"

INPUT_PLACEHOLDER_RE = re.compile(r"\$\{\{inputs\.[^}]+\}\}")
"""Matches any input placeholder."""


def input_placeholder(name: str) -> str:
    return "${{inputs." + name + "}}"


def substitute_package(template: str, spec: "Spec") -> str:
    """Replaces package metadata placeholders in ``template``."""
    template = template.replace(PACKAGE_NAME_PLACEHOLDER, spec.name)
    return template.replace(PACKAGE_VERSION_PLACEHOLDER, spec.version)


def substitute_script(template: str, inputs: T.Mapping[str, str], spec: "Spec") -> str:
    """
    Expands every placeholder in ``template``.  Package metadata goes first, then the
    output directory, then inputs.  Leftover input placeholders are removed last.
    """
    script = substitute_package(template, spec)
    script = script.replace(CONTEXTDIR_PLACEHOLDER, OUTPUT_DIR)
    for name, value in inputs.items():
        script = script.replace(input_placeholder(name), value)
    return INPUT_PLACEHOLDER_RE.sub("", script)
