"""
Property-related schema models.

Field names are snake_case in Python and camelCase on the wire, matching the
shape the frontend and the persisted cache payloads use.

Provider records drift in type from one county to the next (numeric ZIP
codes, numbers sent as strings, lists where maps are documented), so record
fields coerce what they can and drop what they cannot rather than failing
the lookup.
"""

import math
from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Number = Union[int, float]


def lenient_text(value: Any) -> Optional[str]:
    """Strings pass, numbers are stringified, anything else is dropped."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def lenient_number(value: Any) -> Optional[Number]:
    """Numbers pass, numeric strings are parsed, anything else is dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip().replace(",", ""))
        except ValueError:
            return None
        if math.isfinite(value) and value.is_integer():
            return int(value)
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    return None


def lenient_int(value: Any) -> Optional[int]:
    number = lenient_number(value)
    if number is None or number != int(number):
        return None
    return int(number)


def lenient_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AssessedValue(CamelModel):
    """Assessed value of the latest assessment year."""

    model_config = ConfigDict(frozen=True)

    land: Number = 0
    building: Number = 0
    total: Number = 0

    @field_validator("land", "building", "total", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        number = lenient_number(v)
        return 0 if number is None else number


class TransformedProperty(CamelModel):
    """Normalized property record returned to callers and stored in the cache."""

    model_config = ConfigDict(frozen=True)

    # Address / location
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    county: Optional[str] = None
    latitude: Optional[Number] = None
    longitude: Optional[Number] = None
    neighborhood: Optional[str] = None
    subdivision: Optional[str] = None

    # Ownership
    owner_name: str = "N/A"
    owner_occupied: Optional[bool] = None

    # Structure
    property_type: str = "Residential"
    year_built: Optional[int] = None
    square_footage: Optional[Number] = None
    lot_size: Optional[Number] = None
    bedrooms: Optional[Number] = None
    bathrooms: Optional[Number] = None
    stories: Optional[Number] = None
    basement: Optional[bool] = None
    garage: Optional[Number] = None

    # Sale
    last_sale_date: Optional[str] = None
    last_sale_price: Optional[Number] = None

    # Assessment and tax (latest year)
    assessed_value: AssessedValue = Field(default_factory=AssessedValue)
    assessed_date: Optional[int] = None
    tax_amount: Optional[Number] = None

    # Misc
    hoa_fee: Optional[Number] = None
    zoning: Optional[str] = None
    assessor_id: Optional[str] = Field(None, alias="assessorID")
    legal_description: Optional[str] = None

    # Raw passthrough, stored as the provider sent it
    features: Optional[Any] = None
    tax_assessments: Optional[Any] = None
    property_taxes: Optional[Any] = None
    history: Optional[Any] = None

    @field_validator(
        "address", "city", "state", "zip_code", "county", "neighborhood", "subdivision",
        "last_sale_date", "zoning", "assessor_id", "legal_description",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return lenient_text(v)

    @field_validator(
        "latitude", "longitude", "square_footage", "lot_size", "bedrooms", "bathrooms",
        "stories", "garage", "last_sale_price", "tax_amount", "hoa_fee",
        mode="before",
    )
    @classmethod
    def coerce_number(cls, v):
        return lenient_number(v)

    @field_validator("year_built", "assessed_date", mode="before")
    @classmethod
    def coerce_year(cls, v):
        return lenient_int(v)

    @field_validator("owner_occupied", "basement", mode="before")
    @classmethod
    def coerce_flag(cls, v):
        return lenient_bool(v)

    @field_validator("owner_name", mode="before")
    @classmethod
    def coerce_owner_name(cls, v):
        return lenient_text(v) or "N/A"

    @field_validator("property_type", mode="before")
    @classmethod
    def coerce_property_type(cls, v):
        return lenient_text(v) or "Residential"

    @field_validator("tax_assessments", "property_taxes", "history", mode="before")
    @classmethod
    def stringify_keys(cls, v):
        """Year/date keys are stored as strings, as they are in JSON."""
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}
        return v

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready document for persistence and API responses."""
        return self.model_dump(mode="json", by_alias=True)


class PropertyLookupResponse(CamelModel):
    """Response model for an address lookup."""

    property: TransformedProperty
    cached: bool
    cached_at: Optional[datetime] = None


class CacheStatsResponse(CamelModel):
    """Cache statistics."""

    total_entries: int
    avg_access_count: float
    oldest_entry: Optional[datetime] = None
    newest_entry: Optional[datetime] = None


class CacheSweepResponse(CamelModel):
    """Result of a retention sweep."""

    deleted: int
    older_than_days: int
