from __future__ import annotations
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel


def coerce_id(value: Any) -> Any:
    # marketplace ids arrive either as plain strings or as {"uuid": "..."}
    if isinstance(value, dict):
        value = value.get("uuid")
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


class Record(BaseModel):
    """Read-only snapshot base: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",  # ignore unexpected fields from the data layer
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # explicit nulls fall back to field defaults
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ------------------------------------------------------------
# Listing
# ------------------------------------------------------------
class ListingState(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pendingApproval"
    PUBLISHED = "published"
    CLOSED = "closed"


class Money(Record):
    amount: int
    currency: str


class LatLng(Record):
    lat: float
    lng: float


class PublicData(Record):
    model_config = ConfigDict(extra="allow")  # custom listing fields ride along

    listing_type: Optional[str] = None
    transaction_process_alias: Optional[str] = None
    unit_type: Optional[str] = None

    @field_validator("listing_type", "transaction_process_alias", "unit_type", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @property
    def is_complete(self) -> bool:
        return bool(self.listing_type and self.transaction_process_alias and self.unit_type)


class ListingAttributes(Record):
    title: str = ""
    description: str = ""
    price: Optional[Money] = None
    state: Optional[ListingState] = None
    public_data: PublicData = Field(default_factory=PublicData)
    metadata: dict[str, Any] = Field(default_factory=dict)
    geolocation: Optional[LatLng] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value)

    @field_validator("state", mode="before")
    @classmethod
    def _known_state(cls, value: Any) -> Optional[ListingState]:
        if isinstance(value, ListingState):
            return value
        if isinstance(value, str):
            try:
                return ListingState(value)
            except ValueError:
                return None
        return None

    @field_validator("metadata", mode="before")
    @classmethod
    def _mapping(cls, value: Any) -> dict[str, Any]:
        return dict(value) if isinstance(value, dict) else {}


# ------------------------------------------------------------
# User
# ------------------------------------------------------------
class ProfilePublicData(Record):
    model_config = ConfigDict(extra="allow")

    favorites: List[str] = Field(default_factory=list)

    @field_validator("favorites", mode="before")
    @classmethod
    def _unique_ids(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        seen: list[str] = []
        for item in value:
            listing_id = coerce_id(item)
            if listing_id and listing_id not in seen:
                seen.append(listing_id)
        return seen


class UserProfile(Record):
    display_name: str = ""
    abbreviated_name: str = ""
    public_data: ProfilePublicData = Field(default_factory=ProfilePublicData)


class UserAttributes(Record):
    banned: bool = False
    deleted: bool = False
    # payout readiness
    stripe_connected: bool = False
    profile: UserProfile = Field(default_factory=UserProfile)


class User(Record):
    id: Optional[str] = None
    type: str = "user"
    attributes: UserAttributes = Field(default_factory=UserAttributes)

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Optional[str]:
        return coerce_id(value)


class Listing(Record):
    id: Optional[str] = None
    type: Literal["listing", "ownListing"] = "listing"
    attributes: ListingAttributes = Field(default_factory=ListingAttributes)
    author: Optional[User] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Optional[str]:
        return coerce_id(value)

    @property
    def is_valid_for_display(self) -> bool:
        return self.attributes.public_data.is_complete


# ------------------------------------------------------------
# Routing
# ------------------------------------------------------------
class ListingVariant(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pendingApproval"


class RouteParams(Record):
    id: str
    slug: Optional[str] = None
    variant: Optional[ListingVariant] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Any:
        return coerce_id(value)

    @property
    def is_restricted_variant(self) -> bool:
        return self.variant is not None

    def public(self) -> "RouteParams":
        """Same listing, canonical public variant."""
        return self.model_copy(update={"variant": None})


# ------------------------------------------------------------
# Fetch outcome reported by the data layer
# ------------------------------------------------------------
class FetchPending(Record):
    kind: Literal["pending"] = "pending"


class FetchSuccess(Record):
    kind: Literal["success"] = "success"
    listing_present: bool = True


class FetchFailure(Record):
    kind: Literal["error"] = "error"
    status: int


FetchOutcome = Annotated[
    Union[FetchPending, FetchSuccess, FetchFailure], Field(discriminator="kind")
]

_fetch_outcome_adapter: TypeAdapter[Any] = TypeAdapter(FetchOutcome)


def parse_fetch_outcome(raw: Any) -> Union[FetchPending, FetchSuccess, FetchFailure]:
    """Validate the wire form ``{"kind": "pending" | "success" | "error", ...}``."""
    return _fetch_outcome_adapter.validate_python(raw)


# ------------------------------------------------------------
# Marketplace configuration
# ------------------------------------------------------------
class ListingTypeConfig(Record):
    listing_type: str
    label: str = ""
    transaction_process_alias: Optional[str] = None
    unit_type: Optional[str] = None
    require_listing_image: bool = True
