from __future__ import annotations

import html
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx


logger = logging.getLogger("medportal.notifications")

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM = "MedReminder <onboarding@resend.dev>"

_REMINDER_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <style>
      body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #f4f4f4; margin: 0; padding: 20px; }}
      .container {{ max-width: 500px; margin: 0 auto; background: white; border-radius: 12px; overflow: hidden; }}
      .header {{ background: #0d9488; padding: 30px; text-align: center; }}
      .header h1 {{ color: white; margin: 0; font-size: 24px; }}
      .content {{ padding: 30px; }}
      .medicine-name {{ font-size: 22px; font-weight: bold; color: #0d9488; margin-bottom: 8px; }}
      .dosage {{ font-size: 16px; color: #666; margin-bottom: 20px; }}
      .message {{ background: #f0fdfa; border-left: 4px solid #14b8a6; padding: 15px; margin: 20px 0; }}
      .footer {{ text-align: center; padding: 20px; color: #999; font-size: 12px; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h1>Medication Reminder</h1></div>
      <div class="content">
        <div style="text-align: center;">
          <div class="medicine-name">{medicine_name}</div>
          <div class="dosage">{dosage}</div>
        </div>
        <div class="message">
          <strong>Time to take your medication!</strong><br><br>
          Time to take <strong>{medicine_name}</strong> ({dosage}) as prescribed by your doctor.
        </div>
        <p style="color: #666; text-align: center;">Stay healthy and consistent with your medication schedule.</p>
      </div>
      <div class="footer">This is an automated reminder from your healthcare app.</div>
    </div>
  </body>
</html>
"""


class ConfigurationError(RuntimeError):
    pass


@dataclass
class EmailResult:
    success: bool
    status_code: Optional[int] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def _resend_config() -> dict:
    return {
        "api_key": os.getenv("RESEND_API_KEY", ""),
        "from_email": os.getenv("RESEND_FROM", DEFAULT_FROM),
        "api_url": os.getenv("RESEND_API_URL", RESEND_API_URL),
        "timeout": float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10")),
    }


def render_reminder_email(medicine_name: str, dosage: str) -> Tuple[str, str]:
    subject = f"Medication Reminder: {medicine_name}"
    body = _REMINDER_TEMPLATE.format(
        medicine_name=html.escape(medicine_name),
        dosage=html.escape(dosage),
    )
    return subject, body


class ResendEmailClient:
    def __init__(
        self,
        api_key: str,
        from_email: str = DEFAULT_FROM,
        api_url: str = RESEND_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("RESEND_API_KEY is not configured.")
        self._api_key = api_key
        self._from_email = from_email
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport

    def send(self, to_email: str, subject: str, html_body: str) -> EmailResult:
        payload = {
            "from": self._from_email,
            "to": [to_email],
            "subject": subject,
            "html": html_body,
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    self._api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.TimeoutException:
            logger.warning("email_send_timeout to=%s", to_email)
            return EmailResult(success=False, error="timeout")
        except httpx.HTTPError as exc:
            logger.warning("email_send_error to=%s error=%s", to_email, exc)
            return EmailResult(success=False, error=str(exc))

        try:
            data = response.json()
        except ValueError:
            data = None
        if response.is_success:
            return EmailResult(success=True, status_code=response.status_code, data=data)
        logger.warning(
            "email_send_rejected to=%s status=%s", to_email, response.status_code
        )
        return EmailResult(
            success=False,
            status_code=response.status_code,
            data=data,
            error=f"provider returned HTTP {response.status_code}",
        )

    def send_reminder(self, to_email: str, medicine_name: str, dosage: str) -> EmailResult:
        subject, html_body = render_reminder_email(medicine_name, dosage)
        return self.send(to_email, subject, html_body)


def email_client_from_env() -> ResendEmailClient:
    config = _resend_config()
    return ResendEmailClient(
        api_key=config["api_key"],
        from_email=config["from_email"],
        api_url=config["api_url"],
        timeout=config["timeout"],
    )
