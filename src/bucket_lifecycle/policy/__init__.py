"""Lifecycle policy changes.

This package contains the pure merge functions that apply one rule change to
a policy, and the manager that runs them against a bucket.
"""

from .manager import LifecycleManager, parse_rule_argument, parse_rule_id_argument
from .merge import remove_rule, upsert_rule

__all__ = [
    "LifecycleManager",
    "parse_rule_argument",
    "parse_rule_id_argument",
    "remove_rule",
    "upsert_rule",
]
