"""Unit tests for the rule string compiler."""

import hashlib

import pytest

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
from bucket_lifecycle.rules import compile_rule

MARCH_20_2016_MS = 1458432000000


class TestCompileRule:
    """Test suite for compile_rule."""

    def test_mpu(self) -> None:
        rule = compile_rule("ebf39048aa22422f4027e8cb15d4809b: mpu test/ 1d")

        assert rule == Rule(
            id="ebf39048aa22422f4027e8cb15d4809b",
            prefix="test/",
            abort_incomplete_multipart_upload=AbortIncompleteMultipartUpload(
                days_after_initiation=1
            ),
            status=RuleStatus.ENABLED,
        )

    def test_expiration_days(self) -> None:
        assert compile_rule("test: expire test/ 1d") == Rule(
            id="test", prefix="test/", expiration=Expiration(days=1)
        )

    def test_expiration_date(self) -> None:
        assert compile_rule("test: expire test/ 1458432000000") == Rule(
            id="test", prefix="test/", expiration=Expiration(date=MARCH_20_2016_MS)
        )

    def test_noncurrent_expiration_days(self) -> None:
        assert compile_rule("test: expire version test/ 1d") == Rule(
            id="test",
            prefix="test/",
            noncurrent_version_expiration=NoncurrentVersionExpiration(noncurrent_days=1),
        )

    def test_noncurrent_expiration_date_rejected(self) -> None:
        with pytest.raises(ParseError, match="must specify days"):
            compile_rule("test: expire version test/ 1458432000000")

    @pytest.mark.parametrize(
        ("token", "storage_class"),
        [("glacier", StorageClass.GLACIER), ("ia", StorageClass.STANDARD_IA)],
    )
    def test_transition_days(self, token: str, storage_class: StorageClass) -> None:
        assert compile_rule(f"test: transition test/ {token} 1d") == Rule(
            id="test",
            prefix="test/",
            transitions=[Transition(days=1, storage_class=storage_class)],
        )

    def test_transition_date(self) -> None:
        assert compile_rule("test: transition test/ ia 1458432000000") == Rule(
            id="test",
            prefix="test/",
            transitions=[Transition(date=MARCH_20_2016_MS, storage_class=StorageClass.STANDARD_IA)],
        )

    def test_noncurrent_transitions_append_in_order(self) -> None:
        rule = compile_rule(
            "test: transition version test/ ia 1d, transition version test/ glacier 2d"
        )

        assert rule.noncurrent_version_transitions == [
            NoncurrentVersionTransition(noncurrent_days=1, storage_class=StorageClass.STANDARD_IA),
            NoncurrentVersionTransition(noncurrent_days=2, storage_class=StorageClass.GLACIER),
        ]

    def test_noncurrent_transition_date_rejected(self) -> None:
        with pytest.raises(ParseError, match="must specify days"):
            compile_rule("test: transition version test/ ia 1458432000000")

    def test_several_effects(self) -> None:
        rule = compile_rule(
            "test: mpu test/ 1d, expire test/ 3d, transition test/ ia 1d, transition test/ glacier 2d"
        )

        assert rule == Rule(
            id="test",
            prefix="test/",
            abort_incomplete_multipart_upload=AbortIncompleteMultipartUpload(
                days_after_initiation=1
            ),
            expiration=Expiration(days=3),
            transitions=[
                Transition(days=1, storage_class=StorageClass.STANDARD_IA),
                Transition(days=2, storage_class=StorageClass.GLACIER),
            ],
            status=RuleStatus.ENABLED,
        )

    def test_derives_id_from_whole_text_and_understands_star(self) -> None:
        rule = compile_rule("expire * 1d")

        assert rule.id == "fe7d820179ced32ed270d70549a974e0"
        assert rule.id == hashlib.md5(b"expire * 1d").hexdigest()
        assert rule.prefix == ""
        assert rule.expiration == Expiration(days=1)

    def test_more_than_one_id_delimiter_means_no_id(self) -> None:
        text = "expire a: b: c/ 1d"
        rule = compile_rule(text)

        assert rule.id == hashlib.md5(text.encode()).hexdigest()
        assert rule.prefix == "a: b: c/"

    def test_two_id_delimiters_before_effect_cannot_parse(self) -> None:
        with pytest.raises(ParseError):
            compile_rule("a: b: expire x/ 1d")

    def test_prefix_mismatch_rejected(self) -> None:
        with pytest.raises(ParseError, match="same prefix"):
            compile_rule("test: expire a/ 1d, transition b/ glacier 2d")

    def test_prefix_compared_before_star_normalization(self) -> None:
        with pytest.raises(ParseError, match="same prefix"):
            compile_rule("test: expire * 1d, mpu  2d")

    def test_nothing_parsed_rejected(self) -> None:
        with pytest.raises(ParseError, match="Could not parse rule string"):
            compile_rule("test: delete everything")

    def test_unrecognized_tokens_ignored(self) -> None:
        """Unknown effect tokens are skipped rather than rejected.

        This leniency is deliberate for now and may be tightened later.
        """
        rule = compile_rule("test: expire test/ 1d, archive test/ 2d, EXPIRE test/ 3d")

        assert rule == Rule(id="test", prefix="test/", expiration=Expiration(days=1))

    def test_status_always_enabled(self) -> None:
        assert compile_rule("x: mpu * 7d").status == RuleStatus.ENABLED
