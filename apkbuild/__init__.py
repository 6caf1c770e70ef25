# SPDX-License-Identifier: AGPL-3.0-only
"""
apkbuild compiles declarative package specs into build plans for a build-graph
execution engine.
"""

__version__ = "0.0.1"
