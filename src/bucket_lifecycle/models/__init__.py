"""Data models for bucket-lifecycle.

This module contains Pydantic models for lifecycle rules and policies.
"""

from bucket_lifecycle.models.lifecycle_rule import (
    AbortIncompleteMultipartUpload,
    Expiration,
    NoncurrentVersionExpiration,
    NoncurrentVersionTransition,
    Policy,
    Rule,
    RuleStatus,
    StorageClass,
    Transition,
)

__all__ = [
    "AbortIncompleteMultipartUpload",
    "Expiration",
    "NoncurrentVersionExpiration",
    "NoncurrentVersionTransition",
    "Policy",
    "Rule",
    "RuleStatus",
    "StorageClass",
    "Transition",
]
