# Catalog of reusable pipeline definitions.
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
This module contains the pipeline catalog.

A pipeline is a named, reusable build step: an input schema plus a script template.
Pipelines are stored as YAML files under a catalog root, and are addressed by their
path relative to that root, without the ``.yaml`` extension.  ``autoconf/configure``,
for instance, names ``autoconf/configure.yaml``.
"""

import logging
import os.path as path
import threading
import typing as T

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apkbuild.errors import NotFoundError, SchemaError
from apkbuild.utils.yamlutil import load_document

from .inputs import scalar_to_text

logger = logging.getLogger(__name__)

BUNDLED_CATALOG_ROOT = path.join(path.dirname(path.dirname(__file__)), "pipelines")
"""Location of the pipeline definitions shipped with apkbuild."""

PIPELINE_EXTENSION = ".yaml"


class InputDef(BaseModel):
    """
    Schema of one pipeline input.

    In YAML, an input is either a bare scalar, taken to be its default value, or a
    mapping with the keys ``description``, ``default`` and ``required``.
    """

    model_config = ConfigDict(frozen=True)

    description: str = ""
    default: str = ""
    """Value used when the caller does not supply one."""

    required: bool = False
    """If ``True``, the caller must supply a non-blank value."""

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: T.Any) -> T.Any:
        if data is None:
            return {}
        if isinstance(data, (str, bool, int, float)):
            return {"default": data}
        return data

    @field_validator("default", mode="before")
    @classmethod
    def _default_to_text(cls, value: T.Any) -> T.Any:
        if value is None:
            return ""
        if isinstance(value, (bool, int, float)):
            return scalar_to_text(value)
        return value


class PipelineNeeds(BaseModel):
    """What a pipeline needs from the build environment."""

    model_config = ConfigDict(frozen=True)

    packages: list[str] = Field(default_factory=list)


class PipelineDef(BaseModel):
    """A catalog entry."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    """Human-readable name."""

    needs: PipelineNeeds = Field(default_factory=PipelineNeeds)
    inputs: dict[str, InputDef] = Field(default_factory=dict)
    runs: str = ""
    """Script template.  Must not be empty."""

    @field_validator("needs", "inputs", mode="before")
    @classmethod
    def _null_is_empty(cls, value: T.Any) -> T.Any:
        return {} if value is None else value

    def sorted_input_names(self) -> list[str]:
        return sorted(self.inputs.keys())


def _is_valid_name(name: str) -> bool:
    if not name or "\\" in name or "\0" in name or name.startswith("/"):
        return False
    return all(part not in ("", ".", "..") for part in name.split("/"))


class PipelineCatalog:
    """
    Loads pipeline definitions from a catalog root on first use, and caches them for the
    lifetime of the catalog object.

    Lookups are safe to perform from multiple threads.  A single lock guards both the
    cache lookup and the fill, so a definition is parsed at most once, and no caller can
    observe a half-loaded entry.  Failed loads are not cached.
    """

    def __init__(self, root: str | None = None) -> None:
        self.root: T.Final = root or BUNDLED_CATALOG_ROOT
        self._cache: dict[str, PipelineDef] = {}
        self._lock = threading.Lock()

    def _definition_file(self, name: str) -> str:
        return path.join(self.root, *name.split("/")) + PIPELINE_EXTENSION

    def _parse(self, name: str, data: str) -> PipelineDef:
        try:
            document = load_document(data)
        except yaml.YAMLError as e:
            raise SchemaError(f"pipeline {name!r}: {e}") from e
        if not isinstance(document, dict):
            raise SchemaError(f"pipeline {name!r}: definition must be a mapping")

        try:
            definition = PipelineDef.model_validate(document)
        except pydantic.ValidationError as e:
            raise SchemaError(f"pipeline {name!r}: {e}") from e

        if not definition.runs:
            raise SchemaError(f"pipeline {name!r}: missing runs")
        return definition

    def resolve(self, name: str) -> PipelineDef:
        """
        Get the pipeline definition called ``name``.  Repeated lookups of the same name
        return the same instance.

        Raises:
          NotFoundError: if there's no such pipeline.
          SchemaError: if the definition exists but is malformed.
        """
        with self._lock:
            cached = self._cache.get(name)
            if cached is not None:
                return cached

            if not _is_valid_name(name):
                raise NotFoundError(f"pipeline {name!r} not found", name=name)

            try:
                with open(self._definition_file(name), "r") as definition_file:
                    data = definition_file.read()
            except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
                raise NotFoundError(f"pipeline {name!r} not found", name=name) from e

            definition = self._parse(name, data)
            logger.debug("loaded pipeline %r from %s", name, self.root)
            self._cache[name] = definition
            return definition
