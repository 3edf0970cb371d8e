"""Apply single-rule changes to a full lifecycle policy.

Both functions work on copies; the policy passed in is never modified.
"""

from __future__ import annotations

import structlog

from bucket_lifecycle.models import Policy, Rule

logger = structlog.get_logger()


def _merge_into(existing: Rule, incoming: Rule) -> None:
    if incoming.abort_incomplete_multipart_upload is not None:
        existing.abort_incomplete_multipart_upload = incoming.abort_incomplete_multipart_upload
    if incoming.expiration is not None:
        existing.expiration = incoming.expiration
    if incoming.noncurrent_version_expiration is not None:
        existing.noncurrent_version_expiration = incoming.noncurrent_version_expiration

    # Appended as-is. Repeated upserts to one prefix accumulate duplicates.
    existing.transitions.extend(incoming.transitions)
    existing.noncurrent_version_transitions.extend(incoming.noncurrent_version_transitions)


def upsert_rule(policy: Policy, rule: Rule) -> Policy:
    """Add a rule to a policy, or fold it into a matching rule.

    A rule with the same ID is replaced wholesale, in place. Failing that, the
    first rule with the same prefix and no tag or size filter absorbs the
    incoming effects: single effects are overwritten, transitions are
    appended, and the existing ID and status are kept. Failing both, the rule
    is appended.

    Args:
        policy: The current policy.
        rule: The rule to add.

    Returns:
        Policy: A new policy with the rule applied.
    """

    updated = policy.model_copy(deep=True)
    incoming = rule.model_copy(deep=True)

    for index, existing in enumerate(updated.rules):
        if existing.id == incoming.id:
            updated.rules[index] = incoming
            logger.debug("lifecycle_rule_replaced", rule_id=incoming.id, index=index)
            return updated

    for existing in updated.rules:
        # Tag- or size-scoped rules cover only part of their prefix.
        if existing.prefix == incoming.prefix and not existing.narrowed_filter:
            _merge_into(existing, incoming)
            logger.debug(
                "lifecycle_rule_merged",
                rule_id=existing.id,
                incoming_rule_id=incoming.id,
                prefix=existing.prefix,
            )
            return updated

    updated.rules.append(incoming)
    logger.debug("lifecycle_rule_appended", rule_id=incoming.id, prefix=incoming.prefix)
    return updated


def remove_rule(policy: Policy, rule_id: str) -> Policy:
    """Drop the rule with the given ID, keeping the order of the others.

    Removing an ID that is not present returns an equal policy.
    """

    updated = policy.model_copy(deep=True)
    updated.rules = [r for r in updated.rules if r.id != rule_id]
    return updated
