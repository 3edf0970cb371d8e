"""Pytest configuration and shared fixtures."""

import asyncio
import logging
from datetime import datetime, timezone

import pytest
import structlog

from bucket_lifecycle.models import Policy


class InMemoryLifecycleClient:
    """Stand-in for LifecycleClient that keeps policies in a dict."""

    def __init__(self, policies: dict[str, Policy] | None = None) -> None:
        self.policies: dict[str, Policy] = dict(policies or {})
        self.writes: list[tuple[str, Policy]] = []
        self.deleted: list[str] = []

    async def read_policy(self, bucket: str) -> Policy | None:
        policy = self.policies.get(bucket)
        # Yield so concurrent callers interleave between read and write.
        await asyncio.sleep(0)
        return policy.model_copy(deep=True) if policy is not None else None

    async def write_policy(self, bucket: str, policy: Policy) -> None:
        await asyncio.sleep(0)
        self.policies[bucket] = policy.model_copy(deep=True)
        self.writes.append((bucket, policy))

    async def delete_policy(self, bucket: str) -> None:
        self.policies.pop(bucket, None)
        self.deleted.append(bucket)


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Keep log lines out of captured stdout; undo any configuration a test applied."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))
    yield
    structlog.reset_defaults()


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from bucket_lifecycle.config import Settings

    return Settings(
        aws_region="us-east-1",
        resolve_bucket_region=False,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def memory_client() -> InMemoryLifecycleClient:
    """Provide an empty in-memory lifecycle client."""
    return InMemoryLifecycleClient()


@pytest.fixture
def sample_lifecycle_response() -> dict:
    """Provide a GetBucketLifecycleConfiguration response as boto3 returns it."""
    return {
        "ResponseMetadata": {"HTTPStatusCode": 200},
        "TransitionDefaultMinimumObjectSize": "all_storage_classes_128K",
        "Rules": [
            {
                "ID": "logs",
                "Filter": {"Prefix": "logs/"},
                "Status": "Enabled",
                "Expiration": {"Days": 30},
                "Transitions": [{"Days": 7, "StorageClass": "STANDARD_IA"}],
            },
            {
                "ID": "archive",
                "Filter": {"Prefix": ""},
                "Status": "Enabled",
                "Expiration": {"Date": datetime(2016, 3, 20, tzinfo=timezone.utc)},
                "NoncurrentVersionTransitions": [
                    {"NoncurrentDays": 5, "StorageClass": "GLACIER"}
                ],
                "AbortIncompleteMultipartUpload": {"DaysAfterInitiation": 2},
            },
        ],
    }
