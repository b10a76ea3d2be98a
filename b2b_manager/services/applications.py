"""Wholesale application intake and review."""

from typing import Any

from sqlalchemy.orm import Session

from b2b_manager.config import get_settings
from b2b_manager.db.repositories import WholesaleApplicationRepository
from b2b_manager.db.tables import WholesaleApplicationRow
from b2b_manager.models.application import (
    ApplicationStatus,
    WholesaleApplication,
    WholesaleApplicationForm,
)
from b2b_manager.services.shopify_client import ShopifyClient
from b2b_manager.utils.errors import AppError, NotFoundError
from b2b_manager.utils.logging import get_logger
from b2b_manager.utils.validation import (
    sanitize_string,
    validate_business_name,
    validate_email,
    validate_shop_domain,
)

logger = get_logger(__name__)


class WholesaleApplicationService:
    """Stores storefront applications and records merchant decisions."""

    def __init__(self, db: Session):
        self.repository = WholesaleApplicationRepository(db)
        self.settings = get_settings()

    def _get_or_404(self, shop: str, application_id: str) -> WholesaleApplicationRow:
        row = self.repository.get(shop, application_id)
        if row is None:
            raise NotFoundError("Application not found")
        return row

    def submit(self, form: WholesaleApplicationForm) -> WholesaleApplication:
        """Validate a public form submission and store it as pending."""
        shop = validate_shop_domain(form.shop)
        business_name = (
            validate_business_name(form.business_name) if form.business_name else None
        )

        row = self.repository.create(
            shop,
            customer_id=sanitize_string(form.customer_id) or None,
            customer_email=validate_email(form.customer_email),
            business_name=business_name,
            application_data={
                "company_size": sanitize_string(form.company_size) or None,
                "industry": sanitize_string(form.industry) or None,
                "expected_volume": sanitize_string(form.expected_volume) or None,
                "notes": sanitize_string(form.notes) or None,
            },
            status=ApplicationStatus.PENDING.value,
        )

        logger.info("application_submitted", shop=shop, application_id=row.id)
        return WholesaleApplication.model_validate(row)

    def list_applications(
        self, shop: str, status: ApplicationStatus | None = None
    ) -> list[WholesaleApplication]:
        rows = self.repository.list_for_shop(shop, status.value if status else None)
        return [WholesaleApplication.model_validate(row) for row in rows]

    async def approve(
        self,
        shop: str,
        application_id: str,
        shopify: ShopifyClient | None = None,
    ) -> dict[str, Any]:
        """Approve an application and tag the applicant as wholesale.

        The approval stands if tagging fails; the failure is returned as
        ``tag_error``.
        """
        row = self.repository.mark_reviewed(
            self._get_or_404(shop, application_id),
            ApplicationStatus.APPROVED.value,
            reviewer=shop,
        )
        application = WholesaleApplication.model_validate(row)
        logger.info("application_approved", shop=shop, application_id=application_id)

        result: dict[str, Any] = {"application": application, "tagged": False}
        if not application.customer_id or shopify is None:
            return result

        try:
            await shopify.add_customer_tags(
                application.customer_id, [self.settings.wholesale_tag]
            )
        except AppError as e:
            logger.error(
                "wholesale_tag_failed",
                shop=shop,
                application_id=application_id,
                customer_id=application.customer_id,
                error=e.message,
            )
            result["tag_error"] = e.message
            return result

        result["tagged"] = True
        return result

    def reject(self, shop: str, application_id: str) -> WholesaleApplication:
        row = self.repository.mark_reviewed(
            self._get_or_404(shop, application_id),
            ApplicationStatus.REJECTED.value,
            reviewer=shop,
        )
        logger.info("application_rejected", shop=shop, application_id=application_id)
        return WholesaleApplication.model_validate(row)

    def delete(self, shop: str, application_id: str) -> None:
        self.repository.delete(self._get_or_404(shop, application_id))
        logger.info("application_deleted", shop=shop, application_id=application_id)
