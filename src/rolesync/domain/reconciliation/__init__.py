"""Role reconciliation: diff, failure policy and the per-tier applier."""

from __future__ import annotations

from .plan import plan_role_action
from .policy import (
    HoldingsFailurePolicy,
    fail_open_to_ineligible,
    get_policy,
    retain_prior_state,
)
from .reconciler import RoleReconciler

__all__ = [
    "HoldingsFailurePolicy",
    "RoleReconciler",
    "fail_open_to_ineligible",
    "get_policy",
    "plan_role_action",
    "retain_prior_state",
]
