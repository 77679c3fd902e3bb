"""Data models for the 500px API.

Entities (Photo, User, Comment, Profile, Gallery) are pydantic models decoded
straight from API JSON; unknown fields are ignored. Requests and pages are
plain dataclasses: requests are snapshotted per call, pages carry either
items or a terminal error.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import IO, Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "Comment",
    "CommentsPage",
    "CommentsRequest",
    "Feature",
    "Gallery",
    "GalleryKind",
    "Image",
    "LicenseType",
    "ListRequest",
    "PhotoPage",
    "Photo",
    "Profile",
    "SearchRequest",
    "Sex",
    "Size",
    "SortOrder",
    "Store",
    "UploadRequest",
    "User",
]


# =============================================================================
# Enumerations
# =============================================================================


class Feature(str, Enum):
    """Photo stream to list. Required for photo listing.

    Note: Uses (str, Enum) so values compare equal to plain strings.
    """

    POPULAR = "popular"
    HIGHEST_RATED = "highest_rated"
    UPCOMING = "upcoming"
    EDITORS = "editors"
    FRESH_TODAY = "fresh_today"
    FRESH_YESTERDAY = "fresh_yesterday"
    FRESH_WEEK = "fresh_week"
    USER = "user"
    USER_FRIENDS = "user_friends"
    USER_FAVORITES = "user_favorites"


class SortOrder(str, Enum):
    CREATED_AT = "created_at"
    RATING = "rating"
    HIGHEST_RATING = "highest_rating"
    TIMES_VIEWED = "times_viewed"
    VOTES_COUNT = "votes_count"
    FAVORITES_COUNT = "favorites_count"
    COMMENTS_COUNT = "comments_count"
    TAKEN_AT = "taken_at"


class Store(str, Enum):
    DOWNLOAD = "store_download"
    PRINT = "store_print"


class Size(IntEnum):
    """Image size identifiers accepted by image_size."""

    SIZE_1 = 1
    SIZE_2 = 2
    SIZE_3 = 3
    SIZE_4 = 4


class LicenseType(IntEnum):
    STANDARD_500PX = 0
    CC_NON_COMMERCIAL_ATTRIBUTION = 1
    CC_NON_COMMERCIAL_NO_DERIVATIVES = 2
    CC_NON_COMMERCIAL_SHARE_ALIKE = 3
    CC_ATTRIBUTION = 4
    CC_NO_DERIVATIVES = 5
    CC_SHARE_ALIKE = 6
    CC_PUBLIC_DOMAIN_MARK_1_0 = 7
    CC_PUBLIC_DOMAIN_DEDICATION = 8


class GalleryKind(IntEnum):
    GENERAL = 0  # Any photo on 500px
    LIGHTBOX = 1  # Marketplace photos
    PORTFOLIO = 3  # Photos displayed on the portfolio page
    PROFILE = 4  # Photos uploaded by the gallery owner
    FAVORITE = 5  # Photos favorited by the gallery owner


class Sex(str, Enum):
    UNSPECIFIED = "0"
    MALE = "1"
    FEMALE = "2"


# =============================================================================
# Entities
# =============================================================================


class _Entity(BaseModel):
    """Base for API entities: tolerant of extra fields and numeric strings."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class User(_Entity):
    id: int = 0
    username: str = ""
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    profile_picture_url: Optional[str] = Field(default=None, alias="userpic_url")
    upgrade_status: int = 0
    follower_count: int = Field(default=0, alias="followers_count")
    affection: int = 0


class Image(_Entity):
    size: Optional[int] = None
    url: Optional[str] = None
    https_url: Optional[str] = None
    format: Optional[str] = None


class Comment(_Entity):
    id: int = 0
    body: str = ""
    author: Optional[User] = Field(default=None, alias="user")
    author_id: int = Field(default=0, alias="user_id")
    to_whom_user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    parent_id: Optional[int] = None
    flagged: bool = False
    rating: int = 0
    voted: bool = False
    # Populated only when comments are requested with nested=true
    replies: list["Comment"] = Field(default_factory=list)


class Photo(_Entity):
    id: int = 0
    user_id: int = 0
    title: Optional[str] = Field(default=None, alias="name")
    description: Optional[str] = None
    camera: Optional[str] = None
    lens: Optional[str] = None
    focal_length: Optional[str] = None
    iso: Optional[str] = None
    shutter_speed: Optional[str] = None
    aperture: Optional[str] = None
    view_count: int = Field(default=0, alias="times_viewed")
    rating: float = 0.0
    status: int = 0
    created_at: Optional[datetime] = None
    category: int = 0
    location: Optional[str] = None
    high_res_uploaded: int = 0
    private: bool = Field(default=False, alias="privacy")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    taken_at: Optional[datetime] = None
    for_sale: bool = False
    width: Optional[int] = None
    height: Optional[int] = None
    vote_count: int = Field(default=0, alias="votes_count")
    favorites_count: int = 0
    comment_count: int = Field(default=0, alias="comments_count")
    nsfw: bool = False
    sales_count: int = 0
    highest_rating: float = 0.0
    highest_rating_date: Optional[datetime] = None
    converted: bool = False
    images: list[Image] = Field(default_factory=list)
    author: Optional[User] = Field(default=None, alias="user")
    gallery_count: int = Field(default=0, alias="galleries_count")
    feature: Optional[str] = None
    canvas_print: bool = Field(default=False, alias="store_print")
    in_download: bool = Field(default=False, alias="store_download")
    # voted/purchased refer to the currently authenticated user
    voted: bool = False
    purchased: bool = False
    comments: list[Comment] = Field(default_factory=list)
    editors_choice: bool = False
    tags: list[str] = Field(default_factory=list)

    def upload_params(self) -> dict[str, Any]:
        """Fields set on this photo, keyed by their API names.

        Used as the query string of an upload request. Lists of scalars
        (tags) are kept and go out as repeated keys; nested objects (author,
        images, comments) are dropped.
        """
        dumped = self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude_defaults=True
        )
        params: dict[str, Any] = {}
        for key, value in dumped.items():
            if isinstance(value, dict):
                continue
            if isinstance(value, list) and any(isinstance(v, (dict, list)) for v in value):
                continue
            params[key] = value
        return params


class Profile(_Entity):
    id: int = 0
    username: str = ""
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    sex: Sex = Sex.UNSPECIFIED
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    registration_date: Optional[datetime] = None
    about: Optional[str] = None
    domain: Optional[str] = None
    locale: Optional[str] = None
    upgrade_status: int = 0
    content_filtering_disabled: bool = Field(default=False, alias="show_nude")
    profile_picture_url: Optional[str] = Field(default=None, alias="userpic_url")
    store_enabled: bool = Field(default=False, alias="store_on")
    contacts: dict[str, str] = Field(default_factory=dict)
    equipment: dict[str, list[str]] = Field(default_factory=dict)
    active_photo_count: int = Field(default=0, alias="photos_count")
    visible_galleries_count: int = Field(default=0, alias="galleries_count")
    friend_count: int = Field(default=0, alias="friends_count")
    follower_count: int = Field(default=0, alias="followers_count")
    admin: bool = False
    avatars: dict[str, Any] = Field(default_factory=dict)
    email: Optional[str] = None
    upload_limit: Optional[int] = None
    upload_limit_expiry: Optional[datetime] = None
    upgrade_expiry_date: Optional[datetime] = None
    following: bool = False

    @field_validator("sex", mode="before")
    @classmethod
    def unknown_sex_is_unspecified(cls, v: Any) -> Sex:
        try:
            return Sex(str(v))
        except ValueError:
            return Sex.UNSPECIFIED


class Gallery(_Entity):
    id: int = 0
    user_id: int = 0
    title: Optional[str] = Field(default=None, alias="name")
    description: Optional[str] = None
    subtitle: Optional[str] = None
    item_count: int = Field(default=0, alias="items_count")
    private: bool = Field(default=False, alias="privacy")
    kind: int = GalleryKind.GENERAL
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    custom_slug: Optional[str] = Field(default=None, alias="custom_path")
    featured_at: Optional[datetime] = None
    editors_choice: bool = False
    # Set only for a private gallery URL requested by the gallery owner
    token_signature: Optional[str] = Field(default=None, alias="token")
    last_added_photo: Optional[Photo] = None
    user: Optional[User] = None


class PhotoPageBody(_Entity):
    """Wire shape of GET /photos and GET /photos/search."""

    feature: Optional[str] = None
    filters: dict[str, Any] = Field(default_factory=dict)
    current_page: int = 0
    total_pages: int = Field(default=0, validation_alias=AliasChoices("total_pages", "total_page"))
    total_items: int = 0
    photos: Optional[list[Photo]] = None


class CommentsPageBody(_Entity):
    """Wire shape of GET /photos/{id}/comments."""

    media_type: Optional[str] = None
    current_page: int = 0
    total_pages: int = 0
    total_items: int = 0
    comments: Optional[list[Comment]] = None


class PhotoEnvelope(_Entity):
    """Wire shape of single-photo responses: {"photo": {...}}."""

    photo: Optional[Photo] = None


# =============================================================================
# Requests
# =============================================================================


@dataclass
class ListRequest:
    """Parameters for GET /photos.

    Attributes:
        feature: Photo stream to return (required)
        page_number: 1-based page to start from; values below 1 mean 1
        items_per_page: Results per page; clamped to [1, 100], default 20
        max_page_number: Last page to fetch; 0 streams until an empty page
    """

    feature: Union[Feature, str] = ""
    user_id: str = ""
    username: str = ""
    only: str = ""
    exclude: str = ""
    sort: Union[SortOrder, str] = ""
    image_size: Union[Size, int] = 0
    include_store: Union[Store, str] = ""
    tags: list[str] = field(default_factory=list)
    page_number: int = 0
    items_per_page: int = 0
    max_page_number: int = 0


@dataclass
class SearchRequest:
    """Parameters for GET /photos/search."""

    term: str = ""
    tag: str = ""
    only: int = 0
    exclude: int = 0
    exclude_nsfw: bool = False
    tags: list[str] = field(default_factory=list)
    user_id: str = ""
    image_sizes: list[Union[Size, int]] = field(default_factory=list)
    license_types: list[Union[LicenseType, int]] = field(default_factory=list)
    sort: Union[SortOrder, str] = ""
    page_number: int = 0
    items_per_page: int = 0
    max_page_number: int = 0


@dataclass
class CommentsRequest:
    """Parameters for GET /photos/{photo_id}/comments.

    Attributes:
        photo_id: Photo whose comments are listed (required)
        nested: Return comments with their replies nested
        page_number: 1-based page to start from
        max_page_number: Last page to fetch; 0 means unbounded
    """

    photo_id: str = ""
    nested: bool = False
    page_number: int = 0
    max_page_number: int = 0


@dataclass
class UploadRequest:
    """A photo upload: the file content plus the photo's metadata."""

    body: Optional[Union[bytes, IO[bytes]]] = None
    photo_info: Optional[Photo] = None
    filename: str = ""
    content_type: str = ""


# =============================================================================
# Pages
# =============================================================================


@dataclass
class PhotoPage:
    """One page of a photo listing or search.

    ``err`` is set instead of ``photos`` when the page failed; such a page is
    always the last one of its stream.
    """

    page_number: int = 0
    photos: list[Photo] = field(default_factory=list)
    feature: Optional[str] = None
    filters: dict[str, Any] = field(default_factory=dict)
    current_page: int = 0
    total_pages: int = 0
    total_items: int = 0
    err: Optional[BaseException] = None

    @property
    def items(self) -> list[Photo]:
        return self.photos

    @classmethod
    def from_json(cls, raw: bytes) -> "PhotoPage":
        body = PhotoPageBody.model_validate_json(raw)
        return cls(
            photos=body.photos or [],
            feature=body.feature,
            filters=body.filters,
            current_page=body.current_page,
            total_pages=body.total_pages,
            total_items=body.total_items,
        )

    @classmethod
    def from_error(cls, err: BaseException, page_number: int = 0) -> "PhotoPage":
        return cls(page_number=page_number, err=err)


@dataclass
class CommentsPage:
    """One page of a photo's comments."""

    page_number: int = 0
    comments: list[Comment] = field(default_factory=list)
    media_type: Optional[str] = None
    current_page: int = 0
    total_pages: int = 0
    total_items: int = 0
    err: Optional[BaseException] = None

    @property
    def items(self) -> list[Comment]:
        return self.comments

    @classmethod
    def from_json(cls, raw: bytes) -> "CommentsPage":
        body = CommentsPageBody.model_validate_json(raw)
        return cls(
            comments=body.comments or [],
            media_type=body.media_type,
            current_page=body.current_page,
            total_pages=body.total_pages,
            total_items=body.total_items,
        )

    @classmethod
    def from_error(cls, err: BaseException, page_number: int = 0) -> "CommentsPage":
        return cls(page_number=page_number, err=err)
