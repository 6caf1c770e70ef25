# Build plan compiler.
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
This module compiles a spec into a :py:class:`BuildPlan`.  The plan consists of the
following stages, in order:

#. ``environment``: install the build environment on top of the base image.
#. ``sources``: copy the source tree into the environment.
#. ``build``: run the synthesized build script.
#. ``manifest``: write the ``APKBUILD``, on an empty filesystem.
#. ``package``: on top of the environment, with the manifest and the build output
   mounted, build and sign the package as an unprivileged user.

The result of the plan is the directory of the ``package`` stage that holds the
produced ``.apk`` files.
"""

import logging
import shlex
import typing as T

from apkbuild.constants import (
    APK_REPOSITORIES_FILE,
    BUILDER_USER,
    INPUT_DIR,
    MANIFEST_NAME,
    OUTPUT_DIR,
    RESULT_DIR,
    SOURCE_DIR,
    WORK_DIR,
)
from apkbuild.data.plan import (
    IMAGE_INPUT,
    SOURCE_INPUT,
    BuildPlan,
    CopyOperation,
    MkfileOperation,
    Mount,
    PlanResult,
    RunOperation,
    Stage,
    StageRole,
)
from apkbuild.errors import PreconditionError

from .dag import validate_plan
from .script import synthesize_script

if T.TYPE_CHECKING:
    from apkbuild.data.config import CompilerConfig
    from apkbuild.data.spec import Spec

    from .catalog import PipelineCatalog

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "version", "description", "url", "license")
"""Spec fields that must not be empty, in the order they are checked."""

PACKAGING_SCRIPT = f"""\
set -e
adduser -D {BUILDER_USER}
addgroup {BUILDER_USER} abuild
mkdir -p {RESULT_DIR}
chown -R {BUILDER_USER}:{BUILDER_USER} {WORK_DIR} {RESULT_DIR}
su {BUILDER_USER} -s /bin/sh -c 'abuild-keygen -an'
cp /home/{BUILDER_USER}/.abuild/*.rsa.pub /etc/apk/keys/
su {BUILDER_USER} -s /bin/sh -c 'cd {WORK_DIR} && abuild -r && \
find ~/packages -name "*.apk" -exec cp {{}} {RESULT_DIR} \\;'
"""
"""Builds, signs and collects the package.  abuild refuses to run as root."""


def check_preconditions(spec: "Spec") -> None:
    """
    Raises:
      PreconditionError: for the first required field of ``spec`` that is empty.
    """
    for field in REQUIRED_FIELDS:
        if not getattr(spec, field):
            raise PreconditionError(f"spec {field} is required", field=field)


def pipeline_needs(spec: "Spec", catalog: "PipelineCatalog") -> list[str]:
    """
    Packages the catalog pipelines referenced by ``spec`` need, in order of first
    reference.  Only meaningful after the pipeline was successfully synthesized.
    """
    packages: list[str] = []
    for step in spec.pipeline:
        if not step.is_reference:
            continue
        for package in catalog.resolve(step.uses).needs.packages:
            if package not in packages:
                packages.append(package)
    return packages


def environment_script(spec: "Spec", extra_packages: T.Iterable[str] = ()) -> str:
    """
    Shell script that configures the package repositories of the spec and installs its
    packages, followed by ``extra_packages`` that the spec doesn't already list.
    """
    contents = spec.environment.contents
    lines = ["set -e"]
    for repository in contents.repositories:
        lines.append(f"echo {shlex.quote(repository)} >> {APK_REPOSITORIES_FILE}")

    packages = list(contents.packages)
    packages.extend(p for p in extra_packages if p not in contents.packages)
    if packages:
        lines.append(f"apk add --no-cache {shlex.join(packages)}")
    return "\n".join(lines) + "\n"


def _dq(value: str) -> str:
    """Escape ``value`` for use inside a double-quoted shell string."""
    for special in ("\\", '"', "$", "`"):
        value = value.replace(special, "\\" + special)
    return value


def render_manifest(spec: "Spec") -> str:
    """Renders the ``APKBUILD`` for ``spec``."""
    return f"""\
# Contributor: apkbuild
pkgname="{_dq(spec.name.lower())}"
pkgver="{_dq(spec.version)}"
pkgrel="{spec.epoch:d}"
pkgdesc="{_dq(spec.description)}"
url="{_dq(spec.url)}"
arch="all"
license="{_dq(spec.license)}"
depends="{_dq(" ".join(spec.dependencies.runtime))}"
options="!check !strip"
source=""

build() {{
	true
}}

package() {{
	mkdir -p "$pkgdir"
	cp -a {INPUT_DIR}{OUTPUT_DIR}/* "$pkgdir"/ 2>/dev/null || cp -a {INPUT_DIR}/* "$pkgdir"/
}}
"""


def compile_plan(
    spec: "Spec",
    source_tree: str,
    catalog: "PipelineCatalog",
    config: "CompilerConfig",
) -> BuildPlan:
    """
    Compiles ``spec`` into a build plan.  ``source_tree`` is an opaque handle for the
    source tree, interpreted by the execution engine.

    Nothing is constructed unless the spec passes all checks, so either a complete plan
    is returned or an exception is raised.

    Raises:
      PreconditionError: if required metadata is missing.
      CompileError: if the pipeline cannot be synthesized.  See
                    :py:func:`synthesize_script`.
    """
    check_preconditions(spec)
    script = synthesize_script(spec, catalog)
    extra_packages = pipeline_needs(spec, catalog) if config.install_pipeline_needs else []

    log = logging.LoggerAdapter(logger, dict(package=spec.name))
    log.debug("building plan on %s from source %r", config.base_image, source_tree)

    environment = Stage(
        identifier="environment",
        role=StageRole.ENVIRONMENT_SETUP,
        description="install build deps",
        base=IMAGE_INPUT,
        operation=RunOperation(script=environment_script(spec, extra_packages)),
    )
    sources = Stage(
        identifier="sources",
        role=StageRole.SOURCE_MATERIALIZATION,
        description="copy sources",
        base=environment.identifier,
        operation=CopyOperation(source=SOURCE_INPUT, source_path="/", dest_path=SOURCE_DIR),
    )
    build = Stage(
        identifier="build",
        role=StageRole.BUILD_EXECUTION,
        description="run build steps",
        base=sources.identifier,
        operation=RunOperation(script=script, workdir="/"),
    )
    manifest = Stage(
        identifier="manifest",
        role=StageRole.PACKAGING_METADATA,
        description=f"write {MANIFEST_NAME}",
        base=None,
        operation=MkfileOperation(path=MANIFEST_NAME, mode=0o644, contents=render_manifest(spec)),
    )
    package = Stage(
        identifier="package",
        role=StageRole.PACKAGING,
        description="abuild package",
        base=environment.identifier,
        operation=RunOperation(
            script=PACKAGING_SCRIPT,
            mounts=[
                Mount(target=WORK_DIR, source=manifest.identifier),
                Mount(target=INPUT_DIR, source=build.identifier, readonly=True),
            ],
        ),
    )

    plan = BuildPlan(
        package=spec.name,
        version=spec.version,
        base_image=config.base_image,
        source_tree=source_tree,
        stages=[environment, sources, build, manifest, package],
        result=PlanResult(stage=package.identifier, path=RESULT_DIR),
    )
    validate_plan(plan)
    return plan
