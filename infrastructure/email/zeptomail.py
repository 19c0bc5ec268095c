"""ZeptoMail implementation of EmailProvider.

Renders Jinja2 templates from templates/emails and posts them to the
ZeptoMail transactional API through HttpClient.
"""

import os
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, hash_email

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.com/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "Laundry",
        app_url: str = "https://laundry.example",
        ttl_minutes: int = 10,
        reset_ttl_minutes: int = 10,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._app_url = app_url
        self._ttl_minutes = ttl_minutes
        self._reset_ttl_minutes = reset_ttl_minutes
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.error("email_send_failed", reason="token_not_configured")
            return False

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
        }
        if text_body:
            payload["textbody"] = text_body

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                email_hash=hash_email(to_email),
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code in (200, 201, 202):
            log.info("email_sent", email_hash=hash_email(to_email), subject=subject)
            return True
        log.error(
            "email_send_failed",
            email_hash=hash_email(to_email),
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return False

    def _render(self, template_name: str, **context) -> str:
        template = self._jinja.get_template(template_name)
        context.setdefault("ttl_minutes", self._ttl_minutes)
        return template.render(app_name=self._app_name, app_url=self._app_url, **context)

    async def send_verification_code(self, email: str, code: str) -> bool:
        subject = f"Your {self._app_name} verification code"
        html_body = self._render("verification.html", code=code)
        text_body = (
            f"Your {self._app_name} verification code is: {code}\n\n"
            f"This code expires in {self._ttl_minutes} minutes. "
            f"If you did not try to sign up, you can ignore this email."
        )
        return await self._send(email, None, subject, html_body, text_body)

    async def send_password_reset(self, email: str, reset_token: str) -> bool:
        subject = f"Reset your {self._app_name} password"
        reset_url = f"{self._app_url}/reset-password?token={reset_token}"
        html_body = self._render(
            "password_reset.html",
            reset_token=reset_token,
            reset_url=reset_url,
            ttl_minutes=self._reset_ttl_minutes,
        )
        text_body = (
            f"Reset your {self._app_name} password\n\n"
            f"Open this link to choose a new password: {reset_url}\n\n"
            f"The link expires in {self._reset_ttl_minutes} minutes."
        )
        return await self._send(email, None, subject, html_body, text_body)

    async def send_welcome_email(self, email: str, first_name: Optional[str]) -> bool:
        subject = f"Welcome to {self._app_name}!"
        html_body = self._render("welcome.html", first_name=first_name)
        text_body = (
            f"Welcome to {self._app_name}{f', {first_name}' if first_name else ''}!\n\n"
            f"Schedule your first pickup: {self._app_url}/schedule"
        )
        return await self._send(email, first_name, subject, html_body, text_body)
