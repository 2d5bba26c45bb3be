"""CloudX Deployment Validator.

Verifies a live CloudX image-store deployment: compliance of the instance,
subnet and bucket configuration, and the upload/download/list/delete path
of the bucket.
"""

__version__ = "1.0.0"

from cloudx_validator.cli import main

__all__ = ["main", "__version__"]
