"""One-shot expansion of the legacy collapsed ``data`` payload."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from teamsched.schemas.employee import Employee

logger = logging.getLogger(__name__)


def expand_legacy_payload(employee: Employee) -> bool:
    """Move everything nested under ``employee.data`` onto the aggregate.

    Legacy labor codes belonged to the employee; they are appended to every
    assignment. Returns True when a payload was expanded, so a second call is
    a no-op that returns False.
    """
    data = employee.data
    if data is None:
        return False

    employee.company_info = data.company_info
    employee.assignments = data.assignments
    employee.variations = data.variations
    employee.balances = data.balances
    employee.leaves = data.leaves
    employee.requests = data.requests
    for assignment in employee.assignments:
        for labor_code in data.labor_codes:
            assignment.labor_codes.append(labor_code.model_copy())
    employee.data = None

    logger.info(
        "Expanded legacy payload for employee %s (%d assignments, %d leaves, %d requests)",
        employee.id,
        len(employee.assignments),
        len(employee.leaves),
        len(employee.requests),
    )
    return True
