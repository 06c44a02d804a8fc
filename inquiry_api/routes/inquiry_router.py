from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from inquiry_api.core.config import MailConfig
from inquiry_api.core.exceptions import ConfigurationError, DeliveryError, ValidationError
from inquiry_api.core.logger import get_logger
from inquiry_api.models.inquiry_request import Inquiry
from inquiry_api.models.response import ErrorResponse, InquiryResponse
from inquiry_api.services.mail_service import deliver_inquiry

inquiry_router = APIRouter(prefix="/api", tags=["Inquiry"])

logger = get_logger(__name__)


def get_mail_config(request: Request) -> Optional[MailConfig]:
    """Mail configuration resolved at startup, or None when it was incomplete."""
    return getattr(request.app.state, "mail_config", None)


async def _read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        logger.warning("Inquiry body is not valid JSON")
        return None


@inquiry_router.post(
    "/send-inquiry",
    response_model=InquiryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def send_inquiry(
    request: Request,
    mail_config: Optional[MailConfig] = Depends(get_mail_config),
):
    payload = await _read_payload(request)

    try:
        inquiry = Inquiry.from_payload(payload)
    except ValidationError:
        logger.warning("Rejected inquiry with missing required fields")
        raise

    if mail_config is None:
        error = getattr(request.app.state, "mail_config_error", None) or ConfigurationError()
        logger.error(error.describe())
        raise error

    logger.info(f"Received inquiry from {inquiry.full_name} ({inquiry.company_name})")
    try:
        await deliver_inquiry(mail_config, inquiry)
    except DeliveryError as e:
        logger.error(f"Send inquiry error: {e.message}")
        raise
    except Exception as e:
        logger.exception("Send inquiry error")
        raise DeliveryError(str(e)) from e

    return InquiryResponse(success=True)
