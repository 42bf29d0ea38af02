"""
CCDB services.

Client and on-disk cache for the remote conditions database.
"""

from .client import CcdbClient
from .cache import BlobCache

__all__ = ["CcdbClient", "BlobCache"]
