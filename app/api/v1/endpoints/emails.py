"""Mail endpoints."""

from fastapi import APIRouter

from app.dependencies import EmailServiceDep
from app.schemas.usage import EmailResponse, WelcomeEmailRequest

router = APIRouter(prefix="/emails", tags=["emails"])


@router.post("/welcome", response_model=EmailResponse)
async def send_welcome_email(request: WelcomeEmailRequest, email_service: EmailServiceDep) -> EmailResponse:
    """Send the welcome email without touching the sent flag."""
    return await email_service.send_welcome(request.email, request.name)
