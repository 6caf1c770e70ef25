# Package build specification models.
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
Data models for the declarative package build specification, and the loader that
produces them.

A spec is loaded once, fully defaulted, and never modified afterwards.  Every model
here is frozen.
"""

import typing as T

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apkbuild.constants import DEFAULT_INSTALL_DIR
from apkbuild.errors import SchemaError
from apkbuild.utils.yamlutil import load_document

Scalar: T.TypeAlias = str | bool | int | float
"""A value a spec author can pass to a pipeline input."""


class _SpecModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: T.Any) -> T.Any:
        # An empty YAML key (``description:``) means "unset", not "null".
        if isinstance(data, dict):
            return {k: v for (k, v) in data.items() if v is not None}
        return data


class Copyright(_SpecModel):
    """A copyright or attestation entry."""

    attestation: str = ""
    license: str = ""


class Dependencies(_SpecModel):
    """Dependencies of the produced package."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    runtime: list[str] = Field(default_factory=list)
    """Packages the produced package depends on at runtime."""


class EnvironmentContents(_SpecModel):
    """Contents of the build environment."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    repositories: list[str] = Field(default_factory=list)
    """Package repository URLs added to the package manager configuration."""

    packages: list[str] = Field(default_factory=list)
    """Packages installed before the build runs."""


class Environment(_SpecModel):
    """The build environment."""

    contents: EnvironmentContents = Field(default_factory=EnvironmentContents)


class SourceContext(_SpecModel):
    """Use a named build context as source."""

    name: str = ""


class Source(_SpecModel):
    """A single named source."""

    context: SourceContext | None = None


class BuildOptions(_SpecModel):
    """Optional build output configuration."""

    install_dir: str = DEFAULT_INSTALL_DIR
    """Install prefix."""

    source_dir: str = ""
    """Subdirectory of the source tree the build happens in."""

    @field_validator("install_dir")
    @classmethod
    def _default_install_dir(cls, value: str) -> str:
        return value or DEFAULT_INSTALL_DIR


class PipelineStep(_SpecModel):
    """
    One step of the build pipeline.  A step either runs an inline script (``run``) or
    references a catalog pipeline (``uses``) along with arguments (``with``).  Setting
    both, or neither, is an error detected during compilation.
    """

    model_config = ConfigDict(populate_by_name=True)

    uses: str = ""
    """Name of the catalog pipeline this step invokes."""

    with_: dict[str, Scalar] = Field(default_factory=dict, alias="with")
    """Arguments to the referenced pipeline."""

    run: str = ""
    """Inline shell script."""

    @field_validator("with_", mode="before")
    @classmethod
    def _null_arguments_are_blank(cls, value: T.Any) -> T.Any:
        # ``url:`` passes an empty argument, which the pipeline schema then judges.
        if isinstance(value, dict):
            return {k: "" if v is None else v for (k, v) in value.items()}
        return value

    @property
    def is_inline(self) -> bool:
        """``True`` if this step carries an inline script."""
        return self.run.strip() != ""

    @property
    def is_reference(self) -> bool:
        """``True`` if this step references a catalog pipeline."""
        return self.uses != ""


class Spec(_SpecModel):
    """
    The root of a package build specification.

    Required metadata (``name``, ``version``, ``description``, ``url``, ``license``)
    defaults to the empty string here, so that the compiler can report a missing field
    precisely rather than failing at load time.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = ""
    version: str = ""
    epoch: int = Field(default=0, ge=0)
    """Release counter of the produced package."""

    description: str = ""
    url: str = ""
    license: str = ""
    copyright: list[Copyright] = Field(default_factory=list)
    dependencies: Dependencies = Field(default_factory=Dependencies)
    environment: Environment = Field(default_factory=Environment)
    sources: dict[str, Source] = Field(default_factory=dict)
    pipeline: list[PipelineStep] = Field(default_factory=list)
    build: BuildOptions = Field(default_factory=BuildOptions)


def load_spec(data: str | bytes) -> Spec:
    """
    Parses a YAML spec document into a fully defaulted :py:class:`Spec`.  Unknown
    top-level keys are ignored.

    Raises:
      SchemaError: if the document is not valid YAML, is not a mapping, or does not
                   match the spec structure.
    """
    try:
        document = load_document(data)
    except yaml.YAMLError as e:
        raise SchemaError(f"spec is not valid YAML: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise SchemaError("spec must be a mapping")

    try:
        return Spec.model_validate(document)
    except pydantic.ValidationError as e:
        raise SchemaError(f"invalid spec: {e}") from e
