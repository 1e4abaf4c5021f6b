"""The four-state role diff."""

from __future__ import annotations

from rolesync.domain.model import RoleAction


def plan_role_action(*, qualifies: bool, has_role: bool) -> RoleAction:
    """Return the single mutation that brings a member's role in line.

    ============  =========  ========
    qualifies     has_role   action
    ============  =========  ========
    True          False      ADD
    True          True       NONE
    False         True       REMOVE
    False         False      NONE
    ============  =========  ========
    """

    if qualifies and not has_role:
        return RoleAction.ADD
    if not qualifies and has_role:
        return RoleAction.REMOVE
    return RoleAction.NONE
