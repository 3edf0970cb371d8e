"""S3 access for bucket lifecycle configuration."""

from .client import LifecycleClient, region_from_location

__all__ = ["LifecycleClient", "region_from_location"]
