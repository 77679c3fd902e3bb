"""px500 - Async client for the 500px photo API.

Provides typed access to the 500px REST API through:
- Paginated, cancellable, throttled page streams (photos, search, comments)
- One-shot calls (photo lookup, photo upload)
- Configuration management with environment overrides
- Structured logging and Prometheus metrics

Python Version: 3.10+ required
"""

# Logging Configuration - Configure before other imports
from .logging_config import StructuredFormatter, configure_logging

# Initialize structured logging on module import
configure_logging()

from .__version__ import __version__
from .cancellation import CancellationToken
from .client import Client
from .config import Px500Config, get_config, reset_config

# Errors
from .errors import APIError, DecodeError, Px500Error, TransportError, ValidationError

# Models
from .models import (
    Comment,
    CommentsPage,
    CommentsRequest,
    Feature,
    Gallery,
    GalleryKind,
    Image,
    LicenseType,
    ListRequest,
    Photo,
    PhotoPage,
    Profile,
    SearchRequest,
    Sex,
    Size,
    SortOrder,
    Store,
    UploadRequest,
    User,
)
from .pagination import normalize_items_per_page, normalize_page_number
from .streaming import EmptyPageMode, PageStream

__all__ = [
    # Client
    "Client",
    "PageStream",
    "EmptyPageMode",
    "CancellationToken",
    # Configuration
    "Px500Config",
    "get_config",
    "reset_config",
    # Logging
    "StructuredFormatter",
    "configure_logging",
    # Errors
    "Px500Error",
    "ValidationError",
    "TransportError",
    "APIError",
    "DecodeError",
    # Requests and pages
    "ListRequest",
    "SearchRequest",
    "CommentsRequest",
    "UploadRequest",
    "PhotoPage",
    "CommentsPage",
    # Entities
    "Photo",
    "User",
    "Comment",
    "Image",
    "Profile",
    "Gallery",
    # Enumerations
    "Feature",
    "SortOrder",
    "Store",
    "Size",
    "LicenseType",
    "GalleryKind",
    "Sex",
    # Pagination
    "normalize_page_number",
    "normalize_items_per_page",
    "__version__",
]
