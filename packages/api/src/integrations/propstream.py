# This project was developed with assistance from AI tools.
"""PropStream client: property details and comparable sales.

ARV is estimated from the closest, most recent comps. Without an API key the
client returns a deterministic mock estimate flagged ``is_mock``.
"""

import logging
import statistics
from datetime import UTC, datetime, timedelta

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..schemas.integrations import ARVEstimate, Comp, CompsRequest
from ..services.calculator import round_half_up
from . import IntegrationError

logger = logging.getLogger(__name__)

PROVIDER = "PropStream"
MAX_COMPS = 6
MOCK_CONFIDENCE = 75

# (upper bound exclusive, bonus)
_DISTANCE_BONUS = [(0.25, 15), (0.5, 10), (1.0, 5)]
_RECENCY_BONUS_DAYS = [(90, 15), (180, 10), (270, 5)]


async def _request(endpoint: str, params: dict) -> dict:
    query = {k: v for k, v in params.items() if v is not None}
    try:
        async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
            response = await client.get(
                f"{settings.PROPSTREAM_BASE_URL}{endpoint}",
                params=query,
                headers={"Authorization": f"Bearer {settings.PROPSTREAM_API_KEY}"},
            )
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        logger.error("PropStream API error %s: %s", exc.response.status_code, exc.response.text)
        raise IntegrationError(PROVIDER, f"API error: {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        logger.error("PropStream request failed: %s", exc)
        raise IntegrationError(PROVIDER, "Failed to connect to PropStream API") from exc


def _parse_comp(raw: dict) -> Comp:
    try:
        return _build_comp(raw)
    except (KeyError, TypeError, ValidationError) as exc:
        logger.error("PropStream returned a malformed comp: %s", exc)
        raise IntegrationError(PROVIDER, "Malformed comparable sale in response") from exc


def _build_comp(raw: dict) -> Comp:
    return Comp(
        address=raw.get("address", ""),
        city=raw.get("city", ""),
        state=raw.get("state", ""),
        zip=raw.get("zip", ""),
        sale_price=raw["salePrice"],
        sale_date=raw["saleDate"],
        distance_miles=raw.get("distanceMiles", 0),
        bedrooms=raw.get("bedrooms"),
        bathrooms=raw.get("bathrooms"),
        sqft=raw.get("sqft"),
        year_built=raw.get("yearBuilt"),
        price_per_sqft=raw.get("pricePerSqft", 0),
        days_on_market=raw.get("daysOnMarket"),
    )


async def get_property_details(address: str, city: str, state: str, zip: str | None = None) -> dict:
    return await _request(
        "/property/details", {"address": address, "city": city, "state": state, "zip": zip}
    )


async def get_comps(
    request: CompsRequest,
    *,
    radius: float = 0.5,
    max_age_months: int = 6,
    limit: int = 10,
) -> list[Comp]:
    """Comparable sales within +-1 bed/bath and +-20% sqft of the subject."""
    beds, baths, sqft = request.beds, request.baths, request.sqft
    data = await _request(
        "/comps/search",
        {
            "address": request.address,
            "city": request.city,
            "state": request.state,
            "zip": request.zip,
            "radius": radius,
            "max_age_months": max_age_months,
            "min_beds": beds - 1 if beds else None,
            "max_beds": beds + 1 if beds else None,
            "min_baths": baths - 1 if baths else None,
            "max_baths": baths + 1 if baths else None,
            "min_sqft": sqft * 0.8 if sqft else None,
            "max_sqft": sqft * 1.2 if sqft else None,
            "limit": limit,
        },
    )
    return [_parse_comp(raw) for raw in data.get("comps", [])]


def _bonus(value: float, table: list[tuple[float, int]]) -> int:
    for bound, bonus in table:
        if value < bound:
            return bonus
    return 0


def calculate_arv_from_comps(comps: list[Comp], now: datetime | None = None) -> ARVEstimate | None:
    """Average the nearest (then newest) six comps into an ARV estimate.

    Confidence starts at 50 and gains up to 20 for comp count, 15 for
    average distance and 15 for average sale age. Returns None without comps.
    """
    if not comps:
        return None
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    ordered = sorted(comps, key=lambda c: (c.distance_miles, -c.sale_date.timestamp()))
    selected = ordered[:MAX_COMPS]
    count = len(selected)

    prices = [c.sale_price for c in selected]
    avg_distance = sum(c.distance_miles for c in selected) / count
    avg_age_days = sum((now - c.sale_date).total_seconds() / 86400 for c in selected) / count

    confidence = 50 + min(count * 4, 20)
    confidence += _bonus(avg_distance, _DISTANCE_BONUS)
    confidence += _bonus(avg_age_days, _RECENCY_BONUS_DAYS)

    return ARVEstimate(
        estimated_arv=int(round_half_up(sum(prices) / count)),
        confidence_score=min(confidence, 100),
        comps=selected,
        average_price_per_sqft=int(round_half_up(sum(c.price_per_sqft for c in selected) / count)),
        median_sale_price=int(round_half_up(statistics.median(prices))),
        comp_count=count,
    )


def get_mock_arv_estimate(
    sqft: int = 1800,
    beds: int = 3,
    baths: float = 2,
    now: datetime | None = None,
) -> ARVEstimate:
    now = now or datetime.now(UTC)
    arv = 350_000 + (sqft - 1800) * 150 + (beds - 3) * 15_000 + (baths - 2) * 10_000

    def comp(address: str, delta: int, days_ago: int, miles: float, sqft_delta: int, extra_bath=0):
        price = arv + delta
        comp_sqft = sqft + sqft_delta
        return Comp(
            address=address,
            city="Charleston",
            state="SC",
            zip="29401",
            sale_price=price,
            sale_date=now - timedelta(days=days_ago),
            distance_miles=miles,
            bedrooms=beds,
            bathrooms=baths + extra_bath,
            sqft=comp_sqft,
            year_built=2010,
            price_per_sqft=round_half_up(price / comp_sqft) if comp_sqft else 0,
        )

    comps = [
        comp("123 Oak Street", -15_000, 30, 0.2, -100),
        comp("456 Maple Avenue", 10_000, 45, 0.3, 50),
        comp("789 Pine Road", 5_000, 60, 0.4, 200, extra_bath=1),
    ]
    return ARVEstimate(
        estimated_arv=int(round_half_up(arv)),
        confidence_score=MOCK_CONFIDENCE,
        comps=comps,
        average_price_per_sqft=int(round_half_up(arv / sqft)) if sqft else 0,
        median_sale_price=int(round_half_up(arv)),
        comp_count=len(comps),
        is_mock=True,
    )


async def get_arv_estimate(request: CompsRequest) -> ARVEstimate:
    """Live estimate when configured, otherwise the labelled mock."""
    if not settings.propstream_configured:
        logger.info("PropStream not configured, returning mock ARV estimate")
        return get_mock_arv_estimate(request.sqft or 1800, request.beds or 3, request.baths or 2)

    comps = await get_comps(request)
    estimate = calculate_arv_from_comps(comps)
    if estimate is None:
        raise IntegrationError(PROVIDER, "Not enough comps to calculate ARV")
    return estimate
