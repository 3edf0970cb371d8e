"""S3 lifecycle configuration client.

This module provides a client for reading and writing a bucket's whole
lifecycle configuration.

Notes:
    boto3 is synchronous. This project wraps those calls using
    `asyncio.to_thread` so the rest of the codebase can remain async-friendly.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from bucket_lifecycle.config import Settings
from bucket_lifecycle.exceptions import (
    ConfigurationError,
    StorageAPIError,
    UnsupportedPolicyError,
)
from bucket_lifecycle.models import Policy

logger = structlog.get_logger()

NO_SUCH_LIFECYCLE_CONFIGURATION = "NoSuchLifecycleConfiguration"
DEFAULT_REGION = "us-east-1"

# GetBucketLocation reports legacy names for some regions.
_LEGACY_LOCATIONS = {
    None: DEFAULT_REGION,
    "": DEFAULT_REGION,
    "EU": "eu-west-1",
}


def region_from_location(location: str | None) -> str:
    """Map a GetBucketLocation LocationConstraint onto a region name."""

    return _LEGACY_LOCATIONS.get(location, location)  # type: ignore[arg-type]


def _error_code(exc: Exception) -> str | None:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


class LifecycleClient:
    """S3 client for bucket lifecycle configuration.

    One regional boto3 client is built per bucket and reused for the lifetime
    of this object.
    """

    def __init__(self, settings: Settings | None = None, s3_client: Any | None = None) -> None:
        """Initialize the lifecycle client.

        Args:
            settings: Application settings. If None, uses default settings.
            s3_client: A boto3 S3 client used for every bucket. If None,
                clients are built from settings.
        """
        from bucket_lifecycle.config import get_settings

        self.settings = settings or get_settings()
        self._s3_client = s3_client
        self._clients: dict[str, Any] = {}
        logger.info(
            "lifecycle_client_initialized",
            injected_client=s3_client is not None,
            resolve_bucket_region=self.settings.resolve_bucket_region,
        )

    async def read_policy(self, bucket: str) -> Policy | None:
        """Read a bucket's lifecycle configuration.

        Args:
            bucket: The bucket name.

        Returns:
            The policy, or None when the bucket has no lifecycle configuration.

        Raises:
            StorageAPIError: If the API request fails.
            UnsupportedPolicyError: If the stored configuration uses settings the
                models cannot hold, such as other storage classes.
        """

        s3 = await self._client_for(bucket)
        logger.info("reading_lifecycle_policy", bucket=bucket)

        try:
            response = await asyncio.to_thread(
                s3.get_bucket_lifecycle_configuration, Bucket=bucket
            )
        except ClientError as exc:
            if _error_code(exc) == NO_SUCH_LIFECYCLE_CONFIGURATION:
                logger.info("lifecycle_policy_absent", bucket=bucket)
                return None
            logger.exception("lifecycle_policy_read_failed", bucket=bucket, error=str(exc))
            raise StorageAPIError(str(exc), code=_error_code(exc)) from exc
        except BotoCoreError as exc:
            logger.exception("lifecycle_policy_read_failed", bucket=bucket, error=str(exc))
            raise StorageAPIError(str(exc)) from exc

        try:
            policy = Policy.model_validate(response)
        except ValidationError as exc:
            logger.exception("lifecycle_policy_unsupported", bucket=bucket, error=str(exc))
            raise UnsupportedPolicyError(
                f"Lifecycle configuration of {bucket} cannot be represented: {exc}"
            ) from exc

        logger.info("lifecycle_policy_read", bucket=bucket, rule_count=len(policy.rules))
        return policy

    async def write_policy(self, bucket: str, policy: Policy) -> None:
        """Replace a bucket's lifecycle configuration with ``policy``.

        Raises:
            StorageAPIError: If the API request fails.
        """

        s3 = await self._client_for(bucket)
        logger.info("writing_lifecycle_policy", bucket=bucket, rule_count=len(policy.rules))

        params: dict[str, Any] = {
            "Bucket": bucket,
            "LifecycleConfiguration": policy.to_api(),
        }
        if policy.transition_default_minimum_object_size is not None:
            params["TransitionDefaultMinimumObjectSize"] = (
                policy.transition_default_minimum_object_size
            )

        try:
            await asyncio.to_thread(s3.put_bucket_lifecycle_configuration, **params)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("lifecycle_policy_write_failed", bucket=bucket, error=str(exc))
            raise StorageAPIError(str(exc), code=_error_code(exc)) from exc

    async def delete_policy(self, bucket: str) -> None:
        """Remove all lifecycle configuration from a bucket.

        Raises:
            StorageAPIError: If the API request fails.
        """

        s3 = await self._client_for(bucket)
        logger.info("deleting_lifecycle_policy", bucket=bucket)

        try:
            await asyncio.to_thread(s3.delete_bucket_lifecycle, Bucket=bucket)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("lifecycle_policy_delete_failed", bucket=bucket, error=str(exc))
            raise StorageAPIError(str(exc), code=_error_code(exc)) from exc

    async def _client_for(self, bucket: str) -> Any:
        if self._s3_client is not None:
            return self._s3_client

        cached = self._clients.get(bucket)
        if cached is not None:
            return cached

        if self.settings.resolve_bucket_region:
            region = await self._resolve_region(bucket)
        else:
            region = self.settings.aws_region

        client = await asyncio.to_thread(self._build_client, region)
        self._clients[bucket] = client
        return client

    async def _resolve_region(self, bucket: str) -> str:
        locator = await asyncio.to_thread(self._build_client, self.settings.aws_region)
        try:
            response = await asyncio.to_thread(locator.get_bucket_location, Bucket=bucket)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("bucket_location_failed", bucket=bucket, error=str(exc))
            raise StorageAPIError(str(exc), code=_error_code(exc)) from exc

        region = region_from_location(response.get("LocationConstraint"))
        logger.info("bucket_region_resolved", bucket=bucket, region=region)
        return region

    def _build_client(self, region: str | None) -> Any:
        # Imported lazily to keep import-time cost low and tests fast.
        import boto3
        from botocore.config import Config

        try:
            session = boto3.session.Session(
                profile_name=self.settings.aws_profile,
                region_name=region,
            )
        except BotoCoreError as exc:
            raise ConfigurationError(f"Unable to create AWS session: {exc}") from exc

        return session.client(
            "s3",
            endpoint_url=self.settings.endpoint_url,
            config=Config(signature_version="s3v4"),
        )
