"""HTTP routes for pantry items and reminder settings."""

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pantry_tracker.core.errors import ErrorCode
from pantry_tracker.domain.item import ItemIdentifier
from pantry_tracker.domain.notification import NotificationTime
from pantry_tracker.models.service_models import IngredientSummary, PantryActionResult, ProductLookupResult
from pantry_tracker.services.notification_scheduler import NotificationScheduler
from pantry_tracker.services.pantry_service import PantryService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["pantry"])

_ALERT_STATUS = {
    ErrorCode.ERR_INVALID_ITEM: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.ERR_ITEM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ERR_DUPLICATE_ITEM: status.HTTP_409_CONFLICT,
    ErrorCode.ERR_STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ScanRequest(BaseModel):
    """A scan result plus whatever the barcode lookup found."""

    scan_code: str = Field(..., min_length=1)
    product: ProductLookupResult | None = None


class ManualItemRequest(BaseModel):
    """Fields of the manual entry form."""

    title: str
    weight_label: str | None = None
    inline_image: str | None = None


class ExpirationRequest(BaseModel):
    """Either a picked calendar day or an exact instant; both absent clears it."""

    expiration_date: date | None = None
    expiration_instant: int | None = Field(default=None, ge=0)


class NotificationSettingsResponse(BaseModel):
    hour: int
    minute: int
    state: str
    scheduled: bool
    next_fire_time: datetime | None = None


def get_pantry_service(request: Request) -> PantryService:
    return request.app.state.pantry_service


def get_notification_scheduler(request: Request) -> NotificationScheduler:
    return request.app.state.notification_scheduler


def _respond(
    result: PantryActionResult,
    *,
    success_status: int = status.HTTP_200_OK,
    alert_as_error: bool = True,
) -> JSONResponse:
    status_code = success_status
    if result.alert is not None and alert_as_error:
        status_code = _ALERT_STATUS.get(result.alert.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True), status_code=status_code)


@router.get("/items")
async def list_items(service: PantryService = Depends(get_pantry_service)) -> JSONResponse:
    """List items in policy order. A failed load is an empty list with an alert."""
    result = await service.load_items()
    return _respond(result, alert_as_error=False)


@router.post("/items/scanned")
async def save_scanned_item(
    payload: ScanRequest,
    service: PantryService = Depends(get_pantry_service),
) -> JSONResponse:
    result = await service.save_scanned_item(scan_code=payload.scan_code, product=payload.product)
    if result.needs_manual_entry:
        return _respond(result)
    return _respond(result, success_status=status.HTTP_201_CREATED)


@router.post("/items/manual")
async def save_manual_item(
    payload: ManualItemRequest,
    service: PantryService = Depends(get_pantry_service),
) -> JSONResponse:
    result = await service.save_manual_item(
        title=payload.title,
        weight_label=payload.weight_label,
        inline_image=payload.inline_image,
    )
    return _respond(result, success_status=status.HTTP_201_CREATED)


@router.put("/items/{scan_code}/{creation_instant}/expiration")
async def set_item_expiration(
    scan_code: str,
    creation_instant: int,
    payload: ExpirationRequest,
    service: PantryService = Depends(get_pantry_service),
) -> JSONResponse:
    identifier = ItemIdentifier(scan_code, creation_instant)
    if payload.expiration_date is not None:
        result = await service.set_expiration(identifier=identifier, day=payload.expiration_date)
    else:
        result = await service.set_expiration_instant(
            identifier=identifier, expiration_instant=payload.expiration_instant
        )

    return _respond(result)


@router.delete("/items/{scan_code}/{creation_instant}")
async def delete_item(
    scan_code: str,
    creation_instant: int,
    service: PantryService = Depends(get_pantry_service),
) -> JSONResponse:
    result = await service.delete_item(identifier=ItemIdentifier(scan_code, creation_instant))
    return _respond(result)


@router.delete("/items")
async def clear_items(service: PantryService = Depends(get_pantry_service)) -> JSONResponse:
    result = await service.clear_items()
    return _respond(result)


@router.get("/items/ingredients", response_model=IngredientSummary)
async def ingredient_list(
    prioritize_expiring: bool = True,
    service: PantryService = Depends(get_pantry_service),
) -> IngredientSummary:
    """Ingredient list for recipe generation."""
    return await service.build_ingredient_list(prioritize_expiring=prioritize_expiring)


async def _settings_response(scheduler: NotificationScheduler, *, scheduled: bool) -> NotificationSettingsResponse:
    # The saved choice, which can differ from the armed trigger after a failed re-arm
    time_of_day = await scheduler.load_notification_time()
    return NotificationSettingsResponse(
        hour=time_of_day.hour,
        minute=time_of_day.minute,
        state=scheduler.state,
        scheduled=scheduled,
        next_fire_time=scheduler.next_fire_time(),
    )


@router.get("/settings/notification-time", response_model=NotificationSettingsResponse)
async def get_notification_time(
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
) -> NotificationSettingsResponse:
    return await _settings_response(scheduler, scheduled=scheduler.trigger_id is not None)


@router.put("/settings/notification-time", response_model=NotificationSettingsResponse)
async def update_notification_time(
    payload: NotificationTime,
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
) -> NotificationSettingsResponse:
    """Save the reminder time. A failed re-arm still reports the chosen time."""
    scheduled = await scheduler.reschedule(payload.hour, payload.minute)
    if not scheduled:
        logger.warning("Notification time %s saved but reminder not armed", payload)
    return await _settings_response(scheduler, scheduled=scheduled)


@router.post("/notifications/test")
async def send_test_notification(
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
) -> JSONResponse:
    sent = await scheduler.send_test_notification()
    return JSONResponse(content={"sent": sent}, status_code=status.HTTP_200_OK)
