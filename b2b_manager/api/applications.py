"""Wholesale application routes: public intake and merchant review."""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from b2b_manager.api.deps import (
    ShopifyClientFactory,
    get_shop,
    get_shopify_factory,
    rate_limit,
)
from b2b_manager.db.base import get_db
from b2b_manager.models.application import (
    ApplicationStatus,
    WholesaleApplication,
    WholesaleApplicationForm,
)
from b2b_manager.services.applications import WholesaleApplicationService

router = APIRouter(prefix="/applications", dependencies=[Depends(rate_limit("api"))])

form_router = APIRouter(prefix="/wholesale-form", dependencies=[Depends(rate_limit("form"))])


def get_application_service(db: Session = Depends(get_db)) -> WholesaleApplicationService:
    return WholesaleApplicationService(db)


@form_router.post("", status_code=status.HTTP_201_CREATED)
async def submit_application(
    form: WholesaleApplicationForm,
    service: WholesaleApplicationService = Depends(get_application_service),
) -> dict[str, Any]:
    """Storefront submission of a wholesale application."""
    application = service.submit(form)
    return {
        "success": True,
        "message": "Application submitted successfully! We'll review it and get back to you soon.",
        "application_id": application.id,
    }


@router.get("")
async def list_applications(
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    shop: str = Depends(get_shop),
    service: WholesaleApplicationService = Depends(get_application_service),
) -> dict[str, list[WholesaleApplication]]:
    """List applications, newest first."""
    return {"applications": service.list_applications(shop, status_filter)}


@router.post("/{application_id}/approve")
async def approve_application(
    application_id: str,
    shop: str = Depends(get_shop),
    service: WholesaleApplicationService = Depends(get_application_service),
    shopify_factory: ShopifyClientFactory = Depends(get_shopify_factory),
) -> dict[str, Any]:
    result = await service.approve(shop, application_id, shopify_factory(shop))
    return {"success": True, **result}


@router.post("/{application_id}/reject")
async def reject_application(
    application_id: str,
    shop: str = Depends(get_shop),
    service: WholesaleApplicationService = Depends(get_application_service),
) -> dict[str, Any]:
    return {"success": True, "application": service.reject(shop, application_id)}


@router.delete("/{application_id}")
async def delete_application(
    application_id: str,
    shop: str = Depends(get_shop),
    service: WholesaleApplicationService = Depends(get_application_service),
) -> dict[str, bool]:
    service.delete(shop, application_id)
    return {"success": True}
