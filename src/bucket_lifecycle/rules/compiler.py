"""Compile the compact text form of a rule into a Rule model.

Grammar::

    [<id>: ]<effect>(, <effect>)*
    effect ::= "mpu " prefix " " N "d"
             | "expire " ["version "] prefix " " N ["d"]
             | "transition " ["version "] prefix " " ("glacier"|"ia") " " N ["d"]

A number with a trailing ``d`` is a day count; a bare number is a date in
milliseconds since epoch. The prefix ``*`` stands for the empty prefix.
"""

from __future__ import annotations

import re

import structlog

from bucket_lifecycle.exceptions import ParseError
from bucket_lifecycle.models import (
    AbortIncompleteMultipartUpload,
    Expiration,
    NoncurrentVersionExpiration,
    NoncurrentVersionTransition,
    Rule,
    RuleStatus,
    StorageClass,
    Transition,
)
from bucket_lifecycle.rules.fingerprint import fingerprint

logger = structlog.get_logger()

ID_DELIMITER = ": "
EFFECT_DELIMITER = ", "
ALL_OBJECTS = "*"

_MPU = re.compile(r"mpu (?P<prefix>.*) (?P<n>\d+)d")
_EXPIRE = re.compile(r"expire (?P<version>version )?(?P<prefix>.*) (?P<n>\d+)(?P<days>d)?")
_TRANSITION = re.compile(
    r"transition (?P<version>version )?(?P<prefix>.*) (?P<cls>glacier|ia) (?P<n>\d+)(?P<days>d)?"
)

_STORAGE_CLASSES = {
    "glacier": StorageClass.GLACIER,
    "ia": StorageClass.STANDARD_IA,
}


def _split_id(text: str) -> tuple[str, str]:
    parts = text.split(ID_DELIMITER)
    if len(parts) == 2:
        return parts[0], parts[1]
    return fingerprint(text), text


def _apply_mpu(rule: Rule, match: re.Match[str]) -> None:
    rule.abort_incomplete_multipart_upload = AbortIncompleteMultipartUpload(
        days_after_initiation=int(match["n"])
    )


def _apply_expire(rule: Rule, match: re.Match[str]) -> None:
    n = int(match["n"])
    if match["version"]:
        if not match["days"]:
            raise ParseError("Noncurrent version expiration must specify days")
        rule.noncurrent_version_expiration = NoncurrentVersionExpiration(noncurrent_days=n)
    elif match["days"]:
        rule.expiration = Expiration(days=n)
    else:
        rule.expiration = Expiration(date=n)


def _apply_transition(rule: Rule, match: re.Match[str]) -> None:
    n = int(match["n"])
    storage_class = _STORAGE_CLASSES[match["cls"]]
    if match["version"]:
        if not match["days"]:
            raise ParseError("Noncurrent version transitions must specify days")
        rule.noncurrent_version_transitions.append(
            NoncurrentVersionTransition(noncurrent_days=n, storage_class=storage_class)
        )
    elif match["days"]:
        rule.transitions.append(Transition(days=n, storage_class=storage_class))
    else:
        rule.transitions.append(Transition(date=n, storage_class=storage_class))


_EFFECTS = (
    (_MPU, _apply_mpu),
    (_EXPIRE, _apply_expire),
    (_TRANSITION, _apply_transition),
)


def compile_rule(text: str) -> Rule:
    """Compile a rule string into a Rule.

    Effect tokens that match none of the known effects are skipped.

    Args:
        text: The rule in text form, e.g. ``"logs: expire logs/ 30d"``.

    Returns:
        Rule: The compiled rule, always with status ``Enabled``.

    Raises:
        ParseError: If effects disagree on prefix, a noncurrent effect uses a
            date, or no effect could be parsed at all.
    """

    rule_id, body = _split_id(text)
    rule = Rule(id=rule_id, status=RuleStatus.ENABLED)
    prefix: str | None = None

    for token in body.split(EFFECT_DELIMITER):
        for pattern, apply in _EFFECTS:
            match = pattern.fullmatch(token)
            if match is None:
                continue

            if prefix is None:
                prefix = match["prefix"]
            elif prefix != match["prefix"]:
                raise ParseError("Invalid rule string: all effects must share the same prefix")

            apply(rule, match)
            break
        else:
            logger.debug("rule_effect_ignored", token=token)

    if prefix is None:
        raise ParseError(f"Could not parse rule string: {text!r}")

    rule.prefix = "" if prefix == ALL_OBJECTS else prefix
    return rule
