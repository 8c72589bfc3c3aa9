"""Tests for SMTP email delivery."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from app.config import settings
from app.core.exceptions import BadRequestException, EmailDeliveryException
from app.services.email_service import OTP_SUBJECT, EmailService, render_otp_email


@pytest.fixture
def smtp_service() -> EmailService:
    """Email service with SMTP credentials configured."""
    config = settings.model_copy(
        update={"smtp_user": "mailer@retailmedia.ai", "smtp_pass": "app-password", "smtp_host": "smtp.test"}
    )
    return EmailService(config)


def test_render_otp_email():
    """The code and greeting appear in the body."""
    html = render_otp_email("482913", "Ada")

    assert "482913" in html
    assert "Hi Ada," in html
    assert "Hi there," in render_otp_email("482913")


@pytest.mark.asyncio
async def test_send_is_simulated_without_credentials(email_service: EmailService):
    """No SMTP connection is opened without credentials."""
    with patch("app.services.email_service.smtplib.SMTP") as mock_smtp:
        result = await email_service.send_otp("a@x.com", "123456")

    mock_smtp.assert_not_called()
    assert result.success is True
    assert result.simulated is True


@pytest.mark.asyncio
async def test_send_over_smtp(smtp_service: EmailService):
    """Messages are sent with STARTTLS and login."""
    with patch("app.services.email_service.smtplib.SMTP") as mock_smtp:
        server = mock_smtp.return_value.__enter__.return_value

        result = await smtp_service.send_otp("a@x.com", "123456", "Ada")

    mock_smtp.assert_called_once_with("smtp.test", 587, timeout=30)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer@retailmedia.ai", "app-password")
    msg = server.send_message.call_args.args[0]
    assert msg["To"] == "a@x.com"
    assert msg["Subject"] == OTP_SUBJECT
    assert msg["From"] == '"RetailMediaAI" <mailer@retailmedia.ai>'
    assert result.simulated is False


@pytest.mark.asyncio
async def test_unknown_recipient_is_bad_request(smtp_service: EmailService):
    """An SMTP 550 reply means the address does not exist."""
    with patch("app.services.email_service.smtplib.SMTP") as mock_smtp:
        server = mock_smtp.return_value.__enter__.return_value
        server.send_message.side_effect = smtplib.SMTPDataError(550, b"5.1.1 User unknown")

        with pytest.raises(BadRequestException, match="does not exist"):
            await smtp_service.send_welcome("ghost@x.com")


@pytest.mark.asyncio
async def test_connection_failure_is_delivery_error(smtp_service: EmailService):
    """Network errors surface as delivery failures."""
    with patch("app.services.email_service.smtplib.SMTP", MagicMock(side_effect=OSError("refused"))):
        with pytest.raises(EmailDeliveryException):
            await smtp_service.send_password_reset("a@x.com", "http://localhost:3000/reset-password")
