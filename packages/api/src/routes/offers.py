# This project was developed with assistance from AI tools.
"""Offer document routes: draft, send for signature, sync and void."""

from db import get_db
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, StaffUser
from ..schemas.offer import OfferCreate, OfferListResponse, OfferResponse, OfferSend, OfferVoid
from ..services import offers as offer_service
from ._common import request_meta, send_notifications_later

router = APIRouter()

_NOT_FOUND = "Offer not found"


@router.get("/deals/{deal_id}/offers", response_model=OfferListResponse)
async def list_offers(
    deal_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> OfferListResponse:
    offers = await offer_service.list_offers(session, user, deal_id)
    if offers is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return OfferListResponse(data=[OfferResponse.model_validate(o) for o in offers])


@router.post(
    "/deals/{deal_id}/offers",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_offer(
    deal_id: int,
    body: OfferCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> OfferResponse:
    offer = await offer_service.create_offer(session, user, deal_id, body, request_meta(request))
    send_notifications_later(background_tasks, session)
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return OfferResponse.model_validate(offer)


@router.post("/offers/{offer_id}/send", response_model=OfferResponse)
async def send_offer(
    offer_id: int,
    body: OfferSend,
    request: Request,
    background_tasks: BackgroundTasks,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> OfferResponse:
    """Create the signature envelope and mark the deal offer_sent."""
    result = await offer_service.send_offer(session, user, offer_id, body, request_meta(request))
    send_notifications_later(background_tasks, session)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    offer, is_mock = result
    response = OfferResponse.model_validate(offer)
    response.is_mock = is_mock
    return response


@router.post("/offers/{offer_id}/sync", response_model=OfferResponse)
async def sync_offer(
    offer_id: int,
    background_tasks: BackgroundTasks,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> OfferResponse:
    offer = await offer_service.sync_offer_status(session, user, offer_id)
    send_notifications_later(background_tasks, session)
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return OfferResponse.model_validate(offer)


@router.post("/offers/{offer_id}/void", response_model=OfferResponse)
async def void_offer(
    offer_id: int,
    body: OfferVoid,
    request: Request,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> OfferResponse:
    offer = await offer_service.void_offer(
        session, user, offer_id, body.reason, request_meta(request)
    )
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return OfferResponse.model_validate(offer)
