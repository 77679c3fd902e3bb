"""Request validation.

Each ``validate_*`` function returns a list of problems (empty when the
request is usable) so callers can report every problem at once;
``require_valid`` turns a non-empty list into a ValidationError.
"""

from typing import Any, Optional

from .errors import ValidationError
from .models import CommentsRequest, ListRequest, SearchRequest, UploadRequest

__all__ = [
    "require_valid",
    "validate_comments_request",
    "validate_list_request",
    "validate_photo_id",
    "validate_search_request",
    "validate_upload_request",
]


def _check_type(request: Any, expected: type) -> Optional[str]:
    if request is None:
        return f"expecting a non-None {expected.__name__}"
    if not isinstance(request, expected):
        return f"expecting a {expected.__name__}, got {type(request).__name__}"
    return None


def validate_list_request(request: Any) -> list[str]:
    problem = _check_type(request, ListRequest)
    if problem:
        return [problem]
    errors = []
    if not str(getattr(request.feature, "value", request.feature)).strip():
        errors.append("expecting a non-empty feature")
    return errors


def validate_search_request(request: Any) -> list[str]:
    problem = _check_type(request, SearchRequest)
    return [problem] if problem else []


def validate_comments_request(request: Any) -> list[str]:
    problem = _check_type(request, CommentsRequest)
    if problem:
        return [problem]
    return validate_photo_id(request.photo_id)


def validate_photo_id(photo_id: Any) -> list[str]:
    if photo_id is None or not str(photo_id).strip():
        return ["expecting a non-empty photo_id"]
    return []


def validate_upload_request(request: Any) -> list[str]:
    problem = _check_type(request, UploadRequest)
    if problem:
        return [problem]
    errors = []
    if request.body is None:
        errors.append("expecting a non-None body")
    if request.photo_info is None:
        errors.append("expecting non-None photo information")
    return errors


def require_valid(errors: list[str]) -> None:
    """Raise ValidationError listing every problem, if there are any."""
    if errors:
        raise ValidationError("; ".join(errors))
