"""
Price alert API endpoints.

Alerts compare a card's cached price against a target. Triggering is
one-way: a triggered alert stays triggered until it is reset with
`triggered: false`.
"""

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.analysis.alerts import current_price
from magicgest.api.cards import CardResponse
from magicgest.db import (
    check_alerts,
    create_alert,
    delete_alert,
    list_alerts,
    list_triggered_alerts,
    update_alert,
)
from magicgest.db.database import get_session
from magicgest.models.failure import NotFoundError
from magicgest.models.platform import DEFAULT_PRICE_SOURCE, PriceSource
from magicgest.models.price import AlertCondition, PriceAlert

router = APIRouter(prefix="/alerts", tags=["alerts"])


class AlertResponse(BaseModel):
    id: int
    card: CardResponse
    platform: PriceSource
    target_price: float
    condition: AlertCondition
    active: bool
    triggered: bool
    triggered_at: datetime | None = None
    created_at: datetime | None = None
    current_price: float | None = None

    @classmethod
    def from_alert(cls, alert: PriceAlert) -> "AlertResponse":
        return cls(
            id=alert.id,
            card=CardResponse.from_record(alert.card),
            platform=alert.platform,
            target_price=alert.target_price,
            condition=alert.condition,
            active=alert.active,
            triggered=alert.triggered,
            triggered_at=alert.triggered_at,
            created_at=alert.created_at,
            current_price=current_price(alert.card, alert.platform),
        )


class AlertCreateRequest(BaseModel):
    card_id: str = Field(..., min_length=1)
    platform: PriceSource = DEFAULT_PRICE_SOURCE
    target_price: float = Field(..., gt=0)
    condition: AlertCondition = AlertCondition.BELOW


class AlertUpdateRequest(BaseModel):
    """Partial update. `triggered: false` resets a triggered alert."""

    target_price: float | None = Field(default=None, gt=0)
    condition: AlertCondition | None = None
    active: bool | None = None
    triggered: Literal[False] | None = None


class AlertCheckResponse(BaseModel):
    checked: int
    triggered: int
    alerts: list[AlertResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


@router.get("", response_model=list[AlertResponse])
async def get_alerts(
    session: Annotated[AsyncSession, Depends(get_session)],
    active_only: bool = True,
) -> list[AlertResponse]:
    """Alerts, newest first. Pass active_only=false to include inactive ones."""
    alerts = await list_alerts(session, active_only=active_only)
    return [AlertResponse.from_alert(a) for a in alerts]


@router.post("", response_model=AlertResponse)
async def create_price_alert(
    request: AlertCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AlertResponse:
    """Create an active alert on a cached card."""
    alert = await create_alert(
        session,
        request.card_id,
        request.platform,
        request.target_price,
        condition=request.condition,
    )
    return AlertResponse.from_alert(alert)


@router.post("/check", response_model=AlertCheckResponse)
async def check_price_alerts(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AlertCheckResponse:
    """
    Evaluate every active, untriggered alert.

    Alerts without a price on their platform are skipped. Matching alerts
    are marked triggered and returned with the price that triggered them.
    """
    checked, triggered = await check_alerts(session)

    alerts: list[AlertResponse] = []
    for hit in triggered:
        response = AlertResponse.from_alert(hit.alert)
        response.current_price = hit.current_price
        alerts.append(response)

    return AlertCheckResponse(checked=checked, triggered=len(triggered), alerts=alerts)


@router.get("/triggered", response_model=list[AlertResponse])
async def get_triggered_alerts(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[AlertResponse]:
    """Triggered alerts, most recent trigger first."""
    alerts = await list_triggered_alerts(session)
    return [AlertResponse.from_alert(a) for a in alerts]


@router.put("/{alert_id}", response_model=AlertResponse)
async def update_price_alert(
    alert_id: int,
    request: AlertUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AlertResponse:
    """Change target, condition or active flag, or reset a triggered alert."""
    if not request.model_dump(exclude_unset=True, exclude_none=True):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    alert = await update_alert(
        session,
        alert_id,
        target_price=request.target_price,
        condition=request.condition,
        active=request.active,
        triggered=request.triggered,
    )
    return AlertResponse.from_alert(alert)


@router.delete("/{alert_id}", response_model=MessageResponse)
async def delete_price_alert(
    alert_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    if not await delete_alert(session, alert_id):
        raise NotFoundError("Alert not found")
    return MessageResponse(message="Alert deleted")
