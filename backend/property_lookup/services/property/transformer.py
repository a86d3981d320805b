"""
Property data transformation utilities.

Maps raw RentCast property records onto ``TransformedProperty``. Only the
latest assessment and tax year are lifted into top-level fields; the full
multi-year maps are passed through untouched.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError

from property_lookup.clients.base.exceptions import ClientConfigurationError
from property_lookup.core.address import normalize_address
from property_lookup.schema.property import AssessedValue, TransformedProperty

logger = logging.getLogger(__name__)

OWNER_NAME_FALLBACK = "N/A"
DEFAULT_PROPERTY_TYPE = "Residential"


def _year_of(key: Any) -> Optional[int]:
    if isinstance(key, bool):
        return None
    try:
        return int(str(key).strip())
    except (TypeError, ValueError):
        return None


def latest_year_entry(series: Any) -> Tuple[Optional[int], Optional[Dict[str, Any]]]:
    """Select the record of the numerically latest year in a year -> record mapping.

    Keys may be strings or numbers; keys that are not years are ignored.
    Returns ``(None, None)`` for an absent or empty mapping.
    """
    if not isinstance(series, Mapping) or not series:
        return None, None

    latest_key = None
    latest_year: Optional[int] = None
    for key in series:
        year = _year_of(key)
        if year is not None and (latest_year is None or year > latest_year):
            latest_key, latest_year = key, year

    if latest_year is None:
        return None, None

    record = series[latest_key]
    return latest_year, record if isinstance(record, Mapping) else None


def _owner_name(raw: Mapping[str, Any]) -> str:
    owner = raw.get("owner") or {}
    names = owner.get("names") if isinstance(owner, Mapping) else None
    if isinstance(names, str):
        names = [names]
    if not isinstance(names, (list, tuple)):
        return OWNER_NAME_FALLBACK
    return ", ".join(str(name) for name in names if name) or OWNER_NAME_FALLBACK


def _output_field_names() -> Dict[str, str]:
    """Map both the Python name and the wire alias of each output field to the alias."""
    names: Dict[str, str] = {}
    for name, info in TransformedProperty.model_fields.items():
        alias = info.alias or name
        names[name] = alias
        names[alias] = alias
    return names


class PropertyOverrides:
    """Table of field overrides applied to specific properties after transformation.

    Keys are provider record ids or addresses (matched case/whitespace
    insensitively against ``id``, ``formattedAddress`` and ``addressLine1``).
    Values map output field names to the value that replaces the provider's.
    Field names may be given as camelCase (``ownerName``) or snake_case
    (``owner_name``).

    Raises:
        ClientConfigurationError: a field name is not an output field, or a
            value does not fit its field
    """

    def __init__(self, table: Optional[Mapping[str, Mapping[str, Any]]] = None):
        known = _output_field_names()
        self._table: Dict[str, Dict[str, Any]] = {}

        for key, fields in (table or {}).items():
            if not isinstance(fields, Mapping):
                raise ClientConfigurationError(
                    f"Property override for '{key}' must map field names to values"
                )
            unknown = sorted(name for name in fields if name not in known)
            if unknown:
                raise ClientConfigurationError(
                    f"Unknown property override field(s) for '{key}': {', '.join(unknown)}"
                )

            resolved = {known[name]: value for name, value in fields.items()}
            try:
                TransformedProperty.model_validate(resolved)
            except ValidationError as e:
                raise ClientConfigurationError(
                    f"Invalid property override value for '{key}'", original_error=e
                )
            self._table[normalize_address(key)] = resolved

    def __len__(self) -> int:
        return len(self._table)

    def match(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        for field_name in ("id", "formattedAddress", "addressLine1"):
            candidate = raw.get(field_name)
            if isinstance(candidate, str):
                fields = self._table.get(normalize_address(candidate))
                if fields:
                    return fields
        return {}


def transform(
    raw: Mapping[str, Any], overrides: Optional[PropertyOverrides] = None
) -> TransformedProperty:
    """
    Transform a raw RentCast property record into the application format.

    Args:
        raw: Raw property record from the provider
        overrides: Optional per-property field overrides

    Returns:
        Immutable transformed property
    """
    assessment_year, assessment = latest_year_entry(raw.get("taxAssessments"))
    _, tax = latest_year_entry(raw.get("propertyTaxes"))
    assessment = assessment or {}
    features = raw.get("features") if isinstance(raw.get("features"), Mapping) else {}

    data: Dict[str, Any] = {
        "address": raw.get("addressLine1") or raw.get("formattedAddress"),
        "city": raw.get("city"),
        "state": raw.get("state"),
        "zipCode": raw.get("zipCode"),
        "county": raw.get("county"),
        "latitude": raw.get("latitude"),
        "longitude": raw.get("longitude"),
        "neighborhood": raw.get("neighborhood"),
        "subdivision": raw.get("subdivision"),
        "ownerName": _owner_name(raw),
        "ownerOccupied": raw.get("ownerOccupied"),
        "propertyType": raw.get("propertyType") or DEFAULT_PROPERTY_TYPE,
        "yearBuilt": raw.get("yearBuilt"),
        "squareFootage": raw.get("squareFootage"),
        "lotSize": raw.get("lotSize"),
        "bedrooms": raw.get("bedrooms"),
        "bathrooms": raw.get("bathrooms"),
        "stories": features.get("floorCount"),
        "basement": features.get("basement"),
        "garage": features.get("garageSpaces"),
        "lastSaleDate": raw.get("lastSaleDate"),
        "lastSalePrice": raw.get("lastSalePrice"),
        "assessedValue": AssessedValue(
            land=assessment.get("land") or 0,
            building=assessment.get("improvements") or 0,
            total=assessment.get("value") or 0,
        ),
        "assessedDate": assessment_year,
        "taxAmount": tax.get("total") if tax else None,
        "hoaFee": raw.get("hoaFee"),
        "zoning": raw.get("zoning"),
        "assessorID": raw.get("assessorID"),
        "legalDescription": raw.get("legalDescription"),
        "features": raw.get("features"),
        "taxAssessments": raw.get("taxAssessments"),
        "propertyTaxes": raw.get("propertyTaxes"),
        "history": raw.get("history"),
    }

    if overrides:
        fields = overrides.match(raw)
        if fields:
            logger.info(
                "Applying property overrides",
                extra={"property_id": raw.get("id"), "fields": sorted(fields)},
            )
            data.update(fields)

    return TransformedProperty.model_validate(data)
