# Configuration file models
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
Data models and validation schemas for configuration files.
"""

import logging
import os
import os.path as path
import sys
from typing import TypeVar

import toml
from pydantic import BaseModel, Field, ValidationError

from apkbuild.constants import DEFAULT_BASE_IMAGE

logger = logging.getLogger(__name__)


class LoggingConfig(BaseModel):
    """
    Common logging configuration.
    """

    debug: bool = Field(default=False)
    """
    If ``true``, enables logging the debug level.  This logs every catalog load and
    resolved step.
    """


class CompilerConfig(BaseModel):
    """
    Configuration model for the compiler.
    """

    log: LoggingConfig = Field(default_factory=LoggingConfig)
    """
    Logger configuration.  See :py:class:`LoggingConfig`.
    """

    base_image: str = Field(default=DEFAULT_BASE_IMAGE)
    """
    Image reference the environment-setup stage starts from.  It is passed to the
    execution engine as-is; resolving it is the engine's job.
    """

    catalog_dir: str | None = Field(default=None)
    """
    Directory containing pipeline definitions.  Defaults to the catalog shipped with
    apkbuild.
    """

    install_pipeline_needs: bool = Field(default=True)
    """
    If ``true``, packages the referenced pipelines declare in ``needs.packages`` are
    installed in the build environment alongside the packages the spec asks for.
    """


M = TypeVar("M", bound=BaseModel)


def load_and_validate_config(config_file: str, model: type[M]) -> M:
    """
    Validate and load a config file as the given model.

    Args:
      config_file: Filename to open in the config directory.  Absolute paths are used
                   as-is.
      model: A Pydantic model by which to validate the loaded config

    Returns:
      A parsed config.

    Raises:
      SystemExit: if configuration parsing fails.  Exit code 1.
    """

    config_dir = os.getenv("APKBUILD_CFG_DIR") or "/etc/apkbuild"

    try:
        with open(path.join(config_dir, config_file), "r") as config:
            return model.model_validate(toml.load(config))
    except (ValidationError, toml.TomlDecodeError):
        logger.exception("failed to parse config")
        sys.exit(1)
    except Exception:
        logger.exception("failed to load config")
        sys.exit(1)
