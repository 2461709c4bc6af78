import httpx
from datetime import datetime, timezone
from typing import Optional
import logging

from kitflow.config import settings
from kitflow.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Transactional email via the Resend HTTP API.

    Unlike the chat relay, delivery failures are not swallowed: the caller
    gets an EmailDeliveryError and decides what to tell the user.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.RESEND_API_KEY if api_key is None else api_key
        self.from_email = from_email or settings.RESEND_FROM_EMAIL
        self.api_url = api_url or settings.RESEND_API_URL
        self.transport = transport

    async def send_email(self, to_email: str, subject: str, html_content: str) -> str:
        """
        Send one email.

        Returns:
            Resend message id

        Raises:
            EmailDeliveryError: not configured, rejected, or unreachable
        """
        if not self.api_key:
            logger.error("Email not configured. RESEND_API_KEY missing.")
            raise EmailDeliveryError("Email is not configured (RESEND_API_KEY is not set)")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Network error sending email to {to_email}: {e}")
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        if response.status_code >= 300:
            logger.error(f"Resend rejected email to {to_email}: {response.status_code} {response.text}")
            raise EmailDeliveryError(f"Failed to send email: {response.text}")

        message_id = response.json().get("id", "")
        logger.info(f"Email sent successfully to {to_email}")
        return message_id

    async def send_sign_in_code(self, to_email: str, code: str) -> str:
        """Send a one-time sign-in code."""
        subject = f"Sign in to {settings.APP_NAME}"
        expiry = settings.OTP_EXPIRY_MINUTES
        validity = "1 hour" if expiry == 60 else f"{expiry} minutes"
        year = datetime.now(timezone.utc).year

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <style>
                body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
                .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
                .header {{ background: #4f46e5; color: white; padding: 20px; text-align: center; }}
                .content {{ padding: 30px; background: #f9f9f9; }}
                .code-box {{ background: #e5e7eb; padding: 20px; border-radius: 8px; text-align: center;
                            font-family: monospace; font-size: 32px; font-weight: bold; letter-spacing: 8px; }}
                .footer {{ padding: 20px; text-align: center; color: #666; font-size: 12px; }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header">
                    <h1>{settings.APP_NAME}</h1>
                </div>
                <div class="content">
                    <h2>Sign in to your account</h2>
                    <p>Enter the following verification code on the sign in page:</p>
                    <div class="code-box">{code}</div>
                    <p><strong>This code is valid for {validity}.</strong></p>
                    <p>If you didn't request this code, you can safely ignore this email.</p>
                </div>
                <div class="footer">
                    <p>&copy; {year} {settings.APP_NAME}. All rights reserved.</p>
                </div>
            </div>
        </body>
        </html>
        """

        return await self.send_email(to_email, subject, html_content)
