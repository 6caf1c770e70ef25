# Spec to build plan compilation.
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
This package turns a :py:class:`~apkbuild.data.spec.Spec` into a
:py:class:`~apkbuild.data.plan.BuildPlan`, which an external execution engine then
carries out.  apkbuild itself never runs anything.

The steps are, in order:

#. Check the required metadata of the spec.
#. Resolve each pipeline step, either an inline script or a reference to a catalog
   pipeline, into a script fragment, and join the fragments into the build script.
#. Lay out the stages that set up the environment, materialize the sources, run the
   build script, and package the result.
"""

import typing as T

from apkbuild.data.config import CompilerConfig

from .catalog import PipelineCatalog
from .plan import compile_plan
from .script import synthesize_script

if T.TYPE_CHECKING:
    from apkbuild.data.plan import BuildPlan
    from apkbuild.data.spec import Spec


class Compiler:
    """
    Compiles specs using one pipeline catalog.  The catalog caches definitions, so a
    single ``Compiler`` should be reused for many compilations.  It may be used from
    multiple threads at once.
    """

    def __init__(
        self, config: CompilerConfig | None = None, catalog: PipelineCatalog | None = None
    ) -> None:
        self.config: T.Final = config or CompilerConfig()
        self.catalog: T.Final = catalog or PipelineCatalog(self.config.catalog_dir)

    def synthesize_script(self, spec: "Spec") -> str:
        """Produces the build script of ``spec``.  See :py:func:`synthesize_script`."""
        return synthesize_script(spec, self.catalog)

    def compile(self, spec: "Spec", source_tree: str) -> "BuildPlan":
        """Compiles ``spec`` into a build plan.  See :py:func:`compile_plan`."""
        return compile_plan(spec, source_tree, self.catalog, self.config)
