# Build plan models.
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
This module contains the build plan, the output of compilation, and the functions used
to hand it over to the execution engine.

A plan is an ordered list of stages.  Each stage applies one operation on top of a base
filesystem state, and produces a new state named after the stage.  Stages refer to one
another by identifier.  Two identifiers are reserved for states coming from outside the
plan: :py:data:`IMAGE_INPUT`, the base image, and :py:data:`SOURCE_INPUT`, the source
tree supplied by the caller.
"""

import enum
import typing as T

import msgpack
from pydantic import BaseModel, Field

IMAGE_INPUT = "image"
"""Identifier of the base image state."""

SOURCE_INPUT = "source"
"""Identifier of the caller-supplied source tree state."""

EXTERNAL_INPUTS = frozenset((IMAGE_INPUT, SOURCE_INPUT))


class StageRole(enum.StrEnum):
    """What a stage is for."""

    ENVIRONMENT_SETUP = "environment-setup"
    SOURCE_MATERIALIZATION = "source-materialization"
    BUILD_EXECUTION = "build-execution"
    PACKAGING_METADATA = "packaging-metadata"
    PACKAGING = "packaging"
    """Packaging and signing."""


class Mount(BaseModel):
    """A state mounted into the filesystem of a running command."""

    target: str
    source: str
    """Identifier of the mounted state."""

    readonly: bool = False


class RunOperation(BaseModel):
    """Run a shell script on top of the base state."""

    op: T.Literal["run"] = "run"
    script: str
    shell: list[str] = Field(default_factory=lambda: ["sh", "-c"])
    workdir: str | None = None
    mounts: list[Mount] = Field(default_factory=list)

    @property
    def args(self) -> list[str]:
        """Complete command line."""
        return [*self.shell, self.script]


class CopyOperation(BaseModel):
    """Copy ``source_path`` of the ``source`` state to ``dest_path`` of the base state."""

    op: T.Literal["copy"] = "copy"
    source: str
    source_path: str
    dest_path: str


class MkfileOperation(BaseModel):
    """Create a file in the base state."""

    op: T.Literal["mkfile"] = "mkfile"
    path: str
    mode: int
    contents: str


Operation: T.TypeAlias = T.Annotated[
    RunOperation | CopyOperation | MkfileOperation, Field(discriminator="op")
]


class Stage(BaseModel):
    """
    One node of the plan.  Satisfies the same shape as a graph node: an identifier,
    the identifiers it depends on and the identifiers it produces.
    """

    identifier: str
    role: StageRole
    description: str
    """Human-readable name shown by the execution engine."""

    base: str | None
    """State the operation applies on top of.  ``None`` is an empty filesystem."""

    operation: Operation

    @property
    def dependencies(self) -> frozenset[str]:
        deps = set[str]()
        if self.base is not None:
            deps.add(self.base)
        match self.operation:
            case RunOperation(mounts=mounts):
                deps.update(mount.source for mount in mounts)
            case CopyOperation(source=source):
                deps.add(source)
        return frozenset(deps)

    @property
    def products(self) -> frozenset[str]:
        return frozenset((self.identifier,))


class PlanResult(BaseModel):
    """Where the finished artifact tree is taken from."""

    stage: str
    path: str


class BuildPlan(BaseModel):
    """A compiled build plan."""

    package: str
    version: str
    base_image: str
    """Image reference :py:data:`IMAGE_INPUT` stands for."""

    source_tree: str
    """Opaque handle :py:data:`SOURCE_INPUT` stands for."""

    stages: list[Stage]
    result: PlanResult

    def stage(self, identifier: str) -> Stage:
        """Get the stage called ``identifier``."""
        for stage in self.stages:
            if stage.identifier == identifier:
                return stage
        raise KeyError(identifier)

    def stage_for_role(self, role: StageRole) -> Stage:
        """Get the first stage with the given ``role``."""
        for stage in self.stages:
            if stage.role == role:
                return stage
        raise KeyError(role)


def serialize_plan(plan: BuildPlan) -> bytes:
    """
    Encode a plan into a MessagePack string for the execution engine.
    """
    return msgpack.packb(plan.model_dump(mode="json"))


def deserialize_plan(data: bytes) -> BuildPlan:
    """
    Decode a plan previously encoded using :py:func:`serialize_plan`.
    """
    return BuildPlan.model_validate(msgpack.unpackb(data))
