# Fixed paths and names used in compiled build plans.
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
Constants shared between the script synthesizer and the plan compiler.
"""

DEFAULT_BASE_IMAGE = "alpine:3.23"
"""Image the environment-setup stage starts from, unless configured otherwise."""

DEFAULT_INSTALL_DIR = "/usr"
"""Install prefix used when a spec does not set ``build.install_dir``."""

OUTPUT_DIR = "/pkg"
"""Directory build steps install into.  Replaces ``${{targets.contextdir}}``."""

SOURCE_DIR = "/src"
"""Where the source tree is materialized."""

INPUT_DIR = "/input"
"""Where the build output is mounted, read-only, during packaging."""

WORK_DIR = "/work"
"""Packaging work directory, holding the ``APKBUILD``."""

RESULT_DIR = "/out"
"""Directory the packaging stage copies finished packages into."""

BUILDER_USER = "builder"
"""Unprivileged user packaging and signing runs as."""

APK_REPOSITORIES_FILE = "/etc/apk/repositories"
"""Package manager repository list."""

MANIFEST_NAME = "APKBUILD"
"""File name of the packaging manifest."""
