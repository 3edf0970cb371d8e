"""Lifecycle manager implementation.

This module provides the manager that reads a bucket's policy, applies a
single rule change and writes the whole policy back.
"""

from __future__ import annotations

import asyncio
import json

import structlog
from pydantic import ValidationError

from bucket_lifecycle.config import Settings
from bucket_lifecycle.exceptions import ParseError
from bucket_lifecycle.models import Policy, Rule
from bucket_lifecycle.policy.merge import remove_rule, upsert_rule
from bucket_lifecycle.rules import compile_rule, rule_id
from bucket_lifecycle.s3.client import LifecycleClient

logger = structlog.get_logger()


def parse_rule_argument(value: str) -> Rule:
    """Resolve a rule given as a JSON object or in text form.

    Raises:
        ParseError: If the value is neither a valid JSON rule nor a rule string.
    """

    try:
        data = json.loads(value)
    except json.JSONDecodeError:
        return compile_rule(value)

    if not isinstance(data, dict):
        return compile_rule(value)

    try:
        return Rule.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"Invalid JSON rule: {exc}") from exc


def parse_rule_id_argument(value: str) -> str:
    """Resolve the rule ID named by a JSON rule, a rule string, or a bare ID."""

    try:
        data = json.loads(value)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, dict):
        candidate = data.get("ID", data.get("id"))
        if isinstance(candidate, str):
            return candidate

    try:
        return rule_id(compile_rule(value))
    except ParseError:
        return value


class LifecycleManager:
    """Read-modify-write operations on bucket lifecycle policies.

    Changes to the same bucket made through one manager are serialized.
    Writers in other processes are not coordinated with; the last write wins.
    """

    def __init__(
        self,
        client: LifecycleClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the lifecycle manager.

        Args:
            client: S3 lifecycle client. If None, creates a new one.
            settings: Application settings. If None, uses default settings.
        """
        from bucket_lifecycle.config import get_settings

        self.settings = settings or get_settings()
        self.client = client or LifecycleClient(self.settings)
        self._locks: dict[str, asyncio.Lock] = {}
        logger.info("lifecycle_manager_initialized")

    async def read_policy(self, bucket: str) -> Policy:
        """Read a bucket's policy; a bucket without one yields an empty policy."""

        policy = await self.client.read_policy(bucket)
        return policy if policy is not None else Policy(rules=[])

    async def write_policy(self, bucket: str, policy: Policy) -> None:
        """Replace a bucket's whole policy."""

        await self.client.write_policy(bucket, policy)

    async def delete_policy(self, bucket: str) -> None:
        """Remove a bucket's lifecycle configuration."""

        await self.client.delete_policy(bucket)

    async def put_rule(self, bucket: str, rule: Rule | str) -> Policy:
        """Add or update one rule in a bucket's policy.

        Args:
            bucket: The bucket name.
            rule: A Rule, or a rule in text form.

        Returns:
            Policy: The policy that was written.

        Raises:
            ParseError: If a text rule cannot be compiled.
            FormatError: If a rule without an ID cannot be rendered to derive one.
            StorageAPIError: If reading or writing the policy fails.
        """

        if isinstance(rule, str):
            rule = compile_rule(rule)
        if rule.id is None:
            rule = rule.model_copy(update={"id": rule_id(rule)})

        async with self._lock_for(bucket):
            policy = upsert_rule(await self.read_policy(bucket), rule)
            await self.client.write_policy(bucket, policy)

        logger.info("lifecycle_rule_upserted", bucket=bucket, rule_id=rule.id, prefix=rule.prefix)
        return policy

    async def remove_rule(self, bucket: str, rule_id: str) -> Policy:
        """Remove one rule from a bucket's policy by ID.

        The policy is written back even when no rule matched.

        Returns:
            Policy: The policy that was written.

        Raises:
            StorageAPIError: If reading or writing the policy fails.
        """

        async with self._lock_for(bucket):
            current = await self.read_policy(bucket)
            policy = remove_rule(current, rule_id)
            await self.client.write_policy(bucket, policy)

        logger.info(
            "lifecycle_rule_removed",
            bucket=bucket,
            rule_id=rule_id,
            found=len(policy.rules) != len(current.rules),
        )
        return policy

    def _lock_for(self, bucket: str) -> asyncio.Lock:
        lock = self._locks.get(bucket)
        if lock is None:
            lock = self._locks[bucket] = asyncio.Lock()
        return lock
