# YAML loading helpers.
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
Loading of spec and pipeline documents.

Versions such as ``1.10`` look like floats to YAML, and would come out as ``1.1``.  The
loader here never produces floats: a plain scalar that would resolve to one stays the
string the author wrote.  Integers and booleans resolve as usual.
"""

import typing as T

import yaml

_FLOAT_TAG = "tag:yaml.org,2002:float"


class TextScalarLoader(yaml.SafeLoader):
    """A :py:class:`yaml.SafeLoader` without the implicit float resolver."""


TextScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for (tag, regexp) in resolvers if tag != _FLOAT_TAG]
    for (first, resolvers) in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_document(data: str | bytes) -> T.Any:
    """
    Parses a single YAML document with :py:class:`TextScalarLoader`.

    Raises:
      yaml.YAMLError: if ``data`` is not valid YAML.
    """
    return yaml.load(data, Loader=TextScalarLoader)
