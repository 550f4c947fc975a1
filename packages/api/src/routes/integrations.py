# This project was developed with assistance from AI tools.
"""Third-party integration proxies.

Every endpoint answers with mock data (``is_mock: true``) when the provider
is not configured. A configured provider that fails surfaces as 502.
"""

from fastapi import APIRouter, Query

from ..integrations import docusign, google_maps, propstream
from ..integrations.status import get_integration_status
from ..middleware.auth import CurrentUser, StaffUser
from ..schemas.integrations import (
    AddressValidationRequest,
    AddressValidationResponse,
    ARVEstimate,
    CompsRequest,
    DriveTimeRequest,
    DriveTimeResult,
    EnvelopeStatus,
    GeocodeResult,
    IntegrationStatusResponse,
    ReverseGeocodeRequest,
)

router = APIRouter()


@router.get("/status", response_model=IntegrationStatusResponse)
async def integration_status(_user: CurrentUser) -> IntegrationStatusResponse:
    return IntegrationStatusResponse(integrations=get_integration_status())


@router.post("/comps", response_model=ARVEstimate)
async def comps(body: CompsRequest, _user: StaffUser) -> ARVEstimate:
    """Comparable sales and the ARV estimate derived from them."""
    return await propstream.get_arv_estimate(body)


@router.get("/geocode", response_model=GeocodeResult)
async def geocode(
    _user: CurrentUser,
    address: str = Query(..., min_length=1),
) -> GeocodeResult:
    return await google_maps.geocode(address)


@router.post("/geocode/reverse", response_model=GeocodeResult)
async def reverse_geocode(body: ReverseGeocodeRequest, _user: CurrentUser) -> GeocodeResult:
    return await google_maps.reverse_geocode(body.lat, body.lng)


@router.post("/validate-address", response_model=AddressValidationResponse)
async def validate_address(
    body: AddressValidationRequest, _user: CurrentUser
) -> AddressValidationResponse:
    result, error = await google_maps.validate_address(body.address, body.city, body.state, body.zip)
    return AddressValidationResponse(
        is_valid=result is not None and result.is_valid,
        result=result,
        error=error,
    )


@router.post("/drive-time", response_model=DriveTimeResult)
async def drive_time(body: DriveTimeRequest, _user: CurrentUser) -> DriveTimeResult:
    return await google_maps.drive_time(body.origin, body.destination)


@router.get("/envelopes/{envelope_id}", response_model=EnvelopeStatus)
async def envelope_status(envelope_id: str, _user: StaffUser) -> EnvelopeStatus:
    return await docusign.get_envelope_status(envelope_id)
