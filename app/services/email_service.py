"""Transactional email delivery over SMTP."""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import structlog

from app.config import Settings, settings
from app.core.exceptions import BadRequestException, EmailDeliveryException
from app.schemas.usage import EmailResponse

logger = structlog.get_logger(__name__)

OTP_SUBJECT = "Your Verification Code"
WELCOME_SUBJECT = "Take a deep breath. Designing just got easy. ☕✨"
RESET_SUBJECT = "Reset your RetailMediaAI password 🔐"
REPORT_SUBJECT = "Your Weekly RetailMediaAI Report 🚀"


def render_otp_email(otp: str, name: str | None = None) -> str:
    """Generate HTML for the verification code email."""
    return f"""
    <div style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #4F46E5;">Verify your email</h2>
      <p>Hi {name or "there"},</p>
      <p>Use the following code to verify your email address for RetailMediaAI:</p>
      <div style="background-color: #f3f4f6; padding: 20px; text-align: center; border-radius: 8px;">
        <span style="font-size: 32px; font-weight: bold; letter-spacing: 5px;">{otp}</span>
      </div>
      <p>This code will expire in 10 minutes.</p>
      <p>If you didn't request this, you can safely ignore this email.</p>
    </div>
    """


def render_welcome_email(name: str, base_url: str) -> str:
    """Generate HTML for the welcome email."""
    return f"""
    <div style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto;">
      <h1 style="color: #2563EB;">Welcome to RetailMediaAI, {name}!</h1>
      <p>Upload a product photo, pick a template and let the AI do the heavy lifting.</p>
      <p><a href="{base_url}/dashboard">Create your first creative</a></p>
    </div>
    """


def render_reset_email(reset_link: str) -> str:
    """Generate HTML for the password reset email."""
    return f"""
    <div style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #111827;">Forgot your password? 🤔</h2>
      <p>Don't worry, it happens to the best of us! Click below to reset your password.</p>
      <p><a href="{reset_link}" style="background-color: #2563EB; color: white; padding: 12px 24px;">Reset Password</a></p>
      <p style="color: #6B7280;">If you didn't request this, you can safely ignore this email.</p>
    </div>
    """


def render_report_email(chart_url: str, message: str) -> str:
    """Generate HTML for the weekly usage report."""
    return f"""
    <div style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #2563EB;">Your week on RetailMediaAI</h2>
      <img src="{chart_url}" alt="Weekly activity chart" style="width: 100%;" />
      <p style="font-style: italic;">{message}</p>
    </div>
    """


class EmailService:
    """Sends HTML emails, or logs them when SMTP is not configured."""

    def __init__(self, config: Settings | None = None):
        self.config = config or settings

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> EmailResponse:
        """
        Send an email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Optional plain-text alternative

        Returns:
            Delivery result; ``simulated`` when no SMTP credentials are set

        Raises:
            BadRequestException: If the server rejects the recipient
            EmailDeliveryException: If delivery fails for any other reason
        """
        if not self.config.smtp_configured:
            logger.info("email_simulated", to=to, subject=subject)
            return EmailResponse(
                success=True,
                simulated=True,
                message="SMTP credentials not configured; email logged only",
            )

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f'"{self.config.email_from_name}" <{self.config.smtp_user}>'
        msg["To"] = to
        if text:
            msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))

        try:
            await asyncio.to_thread(self._deliver, msg)
        except smtplib.SMTPRecipientsRefused as e:
            logger.warning("email_recipient_refused", to=to, error=str(e))
            raise BadRequestException("This email address does not exist.") from e
        except smtplib.SMTPResponseException as e:
            logger.error("email_send_failed", to=to, smtp_code=e.smtp_code, error=str(e))
            if e.smtp_code == 550:
                raise BadRequestException("This email address does not exist.") from e
            raise EmailDeliveryException("Failed to send email") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_send_failed", to=to, error=str(e))
            raise EmailDeliveryException() from e

        logger.info("email_sent", to=to, subject=subject)
        return EmailResponse(success=True)

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as server:
            server.starttls()
            server.login(self.config.smtp_user or "", self.config.smtp_pass or "")
            server.send_message(msg)

    async def send_otp(self, to: str, otp: str, name: str | None = None) -> EmailResponse:
        if not self.config.smtp_configured:
            # Dev mode: the code is only visible in the logs
            logger.info("otp_simulated", to=to, otp=otp)
        return await self.send(to, OTP_SUBJECT, render_otp_email(otp, name))

    async def send_welcome(self, to: str, name: str | None = None) -> EmailResponse:
        display_name = name or to.split("@")[0]
        return await self.send(to, WELCOME_SUBJECT, render_welcome_email(display_name, self.config.base_url))

    async def send_password_reset(self, to: str, reset_link: str) -> EmailResponse:
        if not self.config.smtp_configured:
            logger.info("reset_link_simulated", to=to, link=reset_link)
        return await self.send(
            to,
            RESET_SUBJECT,
            render_reset_email(reset_link),
            text=f"Reset your RetailMediaAI password: {reset_link}",
        )

    async def send_weekly_report(self, to: str, chart_url: str, message: str) -> EmailResponse:
        return await self.send(to, REPORT_SUBJECT, render_report_email(chart_url, message))
