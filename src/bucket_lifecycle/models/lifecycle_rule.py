"""Lifecycle rule and policy models.

Field names are snake_case in Python; every field also carries the S3 API
name as its alias so the same models accept the JSON a user types on the
command line and the dictionaries boto3 returns.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StorageClass(str, Enum):
    """Transition target storage class."""

    GLACIER = "GLACIER"
    STANDARD_IA = "STANDARD_IA"


class RuleStatus(str, Enum):
    """Rule status enumeration."""

    ENABLED = "Enabled"
    DISABLED = "Disabled"


def _to_epoch_millis(value: Any) -> Any:
    # S3 hands back datetimes; JSON input may carry ISO-8601 strings.
    if isinstance(value, str) and value and not value.isdigit():
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return round(value.timestamp() * 1000)
    return value


def _from_epoch_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class _LifecycleModel(BaseModel):
    # Unknown S3 fields are kept and written back untouched.
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class _DatedEffect(_LifecycleModel):
    date: int | None = Field(
        default=None, alias="Date", description="Trigger date in milliseconds since epoch"
    )

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return _to_epoch_millis(value)


class AbortIncompleteMultipartUpload(_LifecycleModel):
    """Abort multipart uploads that are still incomplete after N days."""

    days_after_initiation: int = Field(alias="DaysAfterInitiation")


class Expiration(_DatedEffect):
    """Expire current object versions after a day count or on a date."""

    days: int | None = Field(default=None, alias="Days")
    expired_object_delete_marker: bool | None = Field(
        default=None, alias="ExpiredObjectDeleteMarker"
    )


class NoncurrentVersionExpiration(_DatedEffect):
    """Expire noncurrent object versions.

    Only ``noncurrent_days`` is valid; ``date`` exists so that a rule carrying
    one can be loaded and then rejected when it is rendered.
    """

    noncurrent_days: int | None = Field(default=None, alias="NoncurrentDays")


class Transition(_DatedEffect):
    """Move current object versions to another storage class."""

    days: int | None = Field(default=None, alias="Days")
    storage_class: StorageClass = Field(alias="StorageClass")


class NoncurrentVersionTransition(_DatedEffect):
    """Move noncurrent object versions to another storage class."""

    noncurrent_days: int | None = Field(default=None, alias="NoncurrentDays")
    storage_class: StorageClass = Field(alias="StorageClass")


class Rule(_LifecycleModel):
    """A single lifecycle rule scoped to one key prefix.

    ``filter`` holds the rule's S3 ``Filter`` as stored. A filter that only
    names a prefix is rebuilt from ``prefix`` on write; any other filter (tags,
    object sizes, ``And``) is written back exactly as it was read.
    """

    id: str | None = Field(default=None, alias="ID", description="Rule ID, unique within a policy")
    prefix: str = Field(default="", alias="Prefix", description="Key prefix; empty means all objects")
    status: RuleStatus = Field(default=RuleStatus.ENABLED, alias="Status")
    filter: dict[str, Any] | None = Field(default=None, alias="Filter")

    abort_incomplete_multipart_upload: AbortIncompleteMultipartUpload | None = Field(
        default=None, alias="AbortIncompleteMultipartUpload"
    )
    expiration: Expiration | None = Field(default=None, alias="Expiration")
    noncurrent_version_expiration: NoncurrentVersionExpiration | None = Field(
        default=None, alias="NoncurrentVersionExpiration"
    )
    transitions: list[Transition] = Field(default_factory=list, alias="Transitions")
    noncurrent_version_transitions: list[NoncurrentVersionTransition] = Field(
        default_factory=list, alias="NoncurrentVersionTransitions"
    )

    @model_validator(mode="before")
    @classmethod
    def prefix_from_filter(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "Prefix" in data or "prefix" in data:
            return data
        rule_filter = data.get("Filter", data.get("filter"))
        if not isinstance(rule_filter, dict):
            return data
        if "Prefix" in rule_filter:
            return {**data, "Prefix": rule_filter["Prefix"]}
        conjunction = rule_filter.get("And")
        if isinstance(conjunction, dict) and "Prefix" in conjunction:
            return {**data, "Prefix": conjunction["Prefix"]}
        return data

    @field_validator("transitions", "noncurrent_version_transitions", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def narrowed_filter(self) -> bool:
        """Whether the stored filter selects objects by more than a key prefix."""

        return self.filter is not None and set(self.filter) - {"Prefix"} != set()

    def to_api(self) -> dict[str, Any]:
        """Render the rule as a PutBucketLifecycleConfiguration rule dict."""

        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        prefix = data.pop("Prefix")
        stored_filter = data.pop("Filter", None)
        data["Filter"] = stored_filter if self.narrowed_filter else {"Prefix": prefix}

        for key in ("Transitions", "NoncurrentVersionTransitions"):
            if not data[key]:
                del data[key]

        for effect in [data.get("Expiration"), *data.get("Transitions", [])]:
            if effect and "Date" in effect:
                effect["Date"] = _from_epoch_millis(effect["Date"])

        return data


class Policy(_LifecycleModel):
    """A bucket's full lifecycle configuration: an ordered list of rules."""

    # Response envelope keys such as ResponseMetadata are not part of the policy.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rules: list[Rule] = Field(default_factory=list, alias="Rules")
    transition_default_minimum_object_size: str | None = Field(
        default=None, alias="TransitionDefaultMinimumObjectSize"
    )

    def to_api(self) -> dict[str, Any]:
        """Render the policy as a LifecycleConfiguration dict."""

        return {"Rules": [rule.to_api() for rule in self.rules]}
