# Build plan consistency checks.
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
This module checks that a build plan forms a valid graph.
"""

from apkbuild.data.plan import EXTERNAL_INPUTS, BuildPlan


class PlanConsistencyError(ValueError):
    """
    Raised when a :py:class:`BuildPlan` is detected to violate some constraint.
    """


def validate_plan(plan: BuildPlan) -> None:
    """
    Check that a given plan is valid.  A plan is valid if each state is produced by
    exactly one stage, every stage only depends on external inputs or states produced
    by earlier stages, and the result comes from a stage of the plan.  The second
    condition implies the plan is acyclic.
    """
    seen = set[str](EXTERNAL_INPUTS)
    for stage in plan.stages:
        missing = next((x for x in sorted(stage.dependencies) if x not in seen), None)
        if missing:
            raise PlanConsistencyError(
                f"Stage {stage.identifier!r} depends on {missing!r}, which is not produced "
                "before it"
            )
        for product in stage.products:
            if product in seen:
                raise PlanConsistencyError(f"State {product!r} produced multiple times")
            seen.add(product)

    if plan.result.stage not in seen - EXTERNAL_INPUTS:
        raise PlanConsistencyError(f"Result stage {plan.result.stage!r} is not in the plan")
