# Command line interface.
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
``apkbuild-compile``: compiles a spec file and prints the resulting plan as JSON, or
writes it, MessagePack-encoded, to a file for the execution engine.
"""

import argparse
import logging
import sys
import typing as T

from apkbuild import __version__
from apkbuild.buildsystem import Compiler
from apkbuild.data.config import CompilerConfig, load_and_validate_config
from apkbuild.data.plan import serialize_plan
from apkbuild.data.spec import load_spec
from apkbuild.errors import CompileError
from apkbuild.utils.logging import apply_logging_config

logger = logging.getLogger(__name__)


def main(argv: T.Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="apkbuild-compile", description="Compile a package spec into a build plan."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="TOML configuration file, relative to $APKBUILD_CFG_DIR",
    )
    parser.add_argument("spec", help="YAML spec file to compile")
    parser.add_argument(
        "--context",
        default="context",
        help="handle of the source tree the execution engine should materialize "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="write the MessagePack-encoded plan to FILE instead of printing JSON",
    )
    parser.add_argument(
        "--script-only",
        action="store_true",
        help="only print the synthesized build script",
    )
    args = parser.parse_args(argv)

    if args.config:
        config = load_and_validate_config(args.config, CompilerConfig)
    else:
        config = CompilerConfig()
    apply_logging_config(config.log, sys.stderr)

    try:
        with open(args.spec, "rb") as spec_file:
            data = spec_file.read()
    except OSError as e:
        parser.error(f"cannot read {args.spec}: {e.strerror}")

    compiler = Compiler(config)
    try:
        spec = load_spec(data)
        if args.script_only:
            sys.stdout.write(compiler.synthesize_script(spec))
            return
        plan = compiler.compile(spec, args.context)
    except CompileError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    if args.output:
        with open(args.output, "wb") as output:
            output.write(serialize_plan(plan))
        logger.info("wrote plan for %s-%s to %s", plan.package, plan.version, args.output)
    else:
        print(plan.model_dump_json(indent=2))
