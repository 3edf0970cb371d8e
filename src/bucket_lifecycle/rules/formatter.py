"""Render Rule models in the compact text form read by the compiler."""

from __future__ import annotations

from bucket_lifecycle.exceptions import FormatError
from bucket_lifecycle.models import Rule, StorageClass
from bucket_lifecycle.rules.compiler import ALL_OBJECTS, EFFECT_DELIMITER, ID_DELIMITER
from bucket_lifecycle.rules.fingerprint import fingerprint

_STORAGE_CLASS_TOKENS = {
    StorageClass.GLACIER: "glacier",
    StorageClass.STANDARD_IA: "ia",
}


def _trigger(days: int | None, date: int | None, effect: str) -> str:
    if days is not None:
        return f"{days}d"
    if date is not None:
        return str(date)
    raise FormatError(f"{effect} must specify days or a date")


def render_effects(rule: Rule) -> str:
    """Render a rule's effects without the leading ID.

    Args:
        rule: The rule to render.

    Returns:
        The effect tokens joined with ``", "``.

    Raises:
        FormatError: If a noncurrent version effect has no day count, or any
            other effect has neither days nor a date.
    """

    prefix = rule.prefix or ALL_OBJECTS
    effects: list[str] = []

    if rule.abort_incomplete_multipart_upload is not None:
        days = rule.abort_incomplete_multipart_upload.days_after_initiation
        effects.append(f"mpu {prefix} {days}d")

    if rule.expiration is not None:
        trigger = _trigger(rule.expiration.days, rule.expiration.date, "Expiration")
        effects.append(f"expire {prefix} {trigger}")

    if rule.noncurrent_version_expiration is not None:
        days = rule.noncurrent_version_expiration.noncurrent_days
        if days is None:
            raise FormatError("Noncurrent version expiration must specify days")
        effects.append(f"expire version {prefix} {days}d")

    for transition in rule.transitions:
        token = _STORAGE_CLASS_TOKENS[transition.storage_class]
        trigger = _trigger(transition.days, transition.date, "Transition")
        effects.append(f"transition {prefix} {token} {trigger}")

    for transition in rule.noncurrent_version_transitions:
        if transition.noncurrent_days is None:
            raise FormatError("Noncurrent version transitions must specify days")
        token = _STORAGE_CLASS_TOKENS[transition.storage_class]
        effects.append(f"transition version {prefix} {token} {transition.noncurrent_days}d")

    return EFFECT_DELIMITER.join(effects)


def rule_id(rule: Rule) -> str:
    """Return the rule's ID, or the fingerprint of its rendered effects."""

    return rule.id or fingerprint(render_effects(rule))


def format_rule(rule: Rule) -> str:
    """Render a rule as ``"<id>: <effect>, <effect>, ..."``.

    Rules without an ID are labelled with the fingerprint of the rendered
    effects. This differs from the compiler, which fingerprints the whole
    input string, so an ID-less rule does not keep its ID across a
    compile/format cycle.

    Raises:
        FormatError: See :func:`render_effects`.
    """

    effects = render_effects(rule)
    return (rule.id or fingerprint(effects)) + ID_DELIMITER + effects
