"""bucket-lifecycle - S3 bucket lifecycle rules as compact strings.

This package compiles short rule strings such as
``"logs: expire logs/ 30d, transition logs/ glacier 7d"`` into S3 lifecycle
rules, renders stored rules back into that form, and adds or removes single
rules on a bucket without discarding the others.
"""

__version__ = "0.1.0"

from bucket_lifecycle.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
