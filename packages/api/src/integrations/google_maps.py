# This project was developed with assistance from AI tools.
"""Google Maps client: geocoding, reverse geocoding and drive time."""

import logging
import time

import httpx

from ..core.config import settings
from ..schemas.integrations import DriveTimeResult, GeocodeResult
from ..services.calculator import round_half_up
from . import IntegrationError

logger = logging.getLogger(__name__)

PROVIDER = "Google Maps"
BASE_URL = "https://maps.googleapis.com/maps/api"
METERS_TO_MILES = 0.000621371

_STATUS_MESSAGES = {
    "REQUEST_DENIED": "API not authorized. Please enable Geocoding API in Google Cloud Console.",
    "OVER_QUERY_LIMIT": "API quota exceeded. Please check your Google Cloud billing.",
    "ZERO_RESULTS": "Address not found. Please check the address and try again.",
}


async def _get(endpoint: str, params: dict) -> dict:
    try:
        async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
            response = await client.get(
                f"{BASE_URL}/{endpoint}/json",
                params={**params, "key": settings.GOOGLE_MAPS_API_KEY},
            )
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        logger.error("Google Maps API error: %s", exc.response.status_code)
        raise IntegrationError(PROVIDER, f"API error: {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        logger.error("Google Maps request failed: %s", exc)
        raise IntegrationError(PROVIDER, "Failed to reach Google Maps") from exc


def _component(components: list[dict], kind: str, short: bool = False) -> str | None:
    for c in components:
        if kind in c.get("types", []):
            return c["short_name"] if short else c["long_name"]
    return None


def _parse_geocode(data: dict) -> GeocodeResult:
    status = data.get("status")
    if status != "OK" or not data.get("results"):
        message = _STATUS_MESSAGES.get(
            status, data.get("error_message") or f"Geocoding failed: {status}"
        )
        logger.warning("Geocoding failed with status %s", status)
        raise IntegrationError(PROVIDER, message)

    result = data["results"][0]
    components = result.get("address_components", [])
    return GeocodeResult(
        formatted_address=result["formatted_address"],
        lat=result["geometry"]["location"]["lat"],
        lng=result["geometry"]["location"]["lng"],
        place_id=result.get("place_id", ""),
        street_number=_component(components, "street_number"),
        route=_component(components, "route"),
        city=_component(components, "locality") or _component(components, "sublocality"),
        county=_component(components, "administrative_area_level_2"),
        state=_component(components, "administrative_area_level_1"),
        state_code=_component(components, "administrative_area_level_1", short=True),
        zip=_component(components, "postal_code"),
        country=_component(components, "country"),
    )


def get_mock_geocode(address: str, city: str = "Charleston", state: str = "SC") -> GeocodeResult:
    parts = address.split(" ", 1)
    return GeocodeResult(
        formatted_address=f"{address}, {city}, {state} 29401",
        lat=32.7765,
        lng=-79.9311,
        place_id=f"mock-place-{int(time.time())}",
        street_number=parts[0],
        route=parts[1] if len(parts) > 1 else None,
        city=city,
        county="Charleston County",
        state=state,
        state_code=state,
        zip="29401",
        country="USA",
        is_mock=True,
    )


async def geocode(address: str) -> GeocodeResult:
    if not settings.google_maps_configured:
        return get_mock_geocode(address)
    return _parse_geocode(await _get("geocode", {"address": address}))


async def reverse_geocode(lat: float, lng: float) -> GeocodeResult:
    if not settings.google_maps_configured:
        result = get_mock_geocode("1 Mock Street")
        return result.model_copy(update={"lat": lat, "lng": lng})
    return _parse_geocode(await _get("geocode", {"latlng": f"{lat},{lng}"}))


async def validate_address(
    address: str, city: str, state: str, zip: str | None = None
) -> tuple[GeocodeResult | None, str | None]:
    """Geocode and check the city and state match the input.

    Returns ``(result, error)``; ``result.is_valid`` carries the verdict.
    """
    full = f"{address}, {city}, {state} {zip}" if zip else f"{address}, {city}, {state}"
    if not settings.google_maps_configured:
        return get_mock_geocode(address, city, state), None

    try:
        geocoded = await geocode(full)
    except IntegrationError as exc:
        return None, exc.message

    input_city, input_state = city.lower(), state.lower()
    got_city = (geocoded.city or "").lower()
    got_state = (geocoded.state_code or geocoded.state or "").lower()
    city_ok = bool(got_city) and (input_city in got_city or got_city in input_city)
    state_ok = got_state in (input_state, input_state[:2])

    is_valid = city_ok and state_ok
    geocoded = geocoded.model_copy(update={"is_valid": is_valid})
    error = None if is_valid else "Address validation failed - location may not match input"
    return geocoded, error


def get_mock_drive_time(origin: str, destination: str) -> DriveTimeResult:
    miles = 12.0
    minutes = round(miles * 2.5)
    return DriveTimeResult(
        origin_address=origin,
        destination_address=destination,
        distance_meters=round(miles * 1609.34),
        distance_miles=miles,
        duration_seconds=minutes * 60,
        duration_minutes=minutes,
        duration_text=f"{minutes} mins",
        distance_text=f"{miles} mi",
        is_mock=True,
    )


async def drive_time(origin: str, destination: str) -> DriveTimeResult:
    if not settings.google_maps_configured:
        return get_mock_drive_time(origin, destination)

    data = await _get(
        "distancematrix",
        {"origins": origin, "destinations": destination, "units": "imperial"},
    )
    if data.get("status") != "OK":
        raise IntegrationError(
            PROVIDER, data.get("error_message") or f"Distance Matrix failed: {data.get('status')}"
        )

    rows = data.get("rows") or [{}]
    elements = rows[0].get("elements") or [{}]
    element = elements[0]
    if element.get("status") != "OK" or "distance" not in element or "duration" not in element:
        raise IntegrationError(PROVIDER, "Could not calculate route between addresses")

    meters = element["distance"]["value"]
    seconds = element["duration"]["value"]
    return DriveTimeResult(
        origin_address=data["origin_addresses"][0],
        destination_address=data["destination_addresses"][0],
        distance_meters=meters,
        distance_miles=round_half_up(meters * METERS_TO_MILES, 1),
        duration_seconds=seconds,
        duration_minutes=int(round_half_up(seconds / 60)),
        duration_text=element["duration"]["text"],
        distance_text=element["distance"]["text"],
    )
