"""
Outbound email through Formspree.

Formspree delivers to the form owner; the ``email`` field becomes Reply-To.
Delivery failures are logged but never block the calling flow.
"""

import logging
from typing import Optional

import requests

from payroll_app.core.config import settings

logger = logging.getLogger(__name__)


class EmailSender:
    def __init__(self, url: str = None, subject_prefix: str = None, timeout: int = None, session=None):
        self.url = url or settings.formspree_url
        self.subject_prefix = subject_prefix or settings.email_subject_prefix
        self.timeout = timeout or settings.email_timeout
        self.session = session or requests.Session()

    def send(self, to: str, subject: str, text: str) -> bool:
        logger.info(f"Sending email to {to}: {subject}")

        try:
            response = self.session.post(
                self.url,
                json={
                    "email": to,
                    "subject": subject,
                    "message": text,
                    "_subject": f"{self.subject_prefix}: {subject} for {to}",
                },
                headers={"Accept": "application/json"},
                timeout=self.timeout
            )
            response.raise_for_status()
            logger.info(f"Email request for {to} accepted by Formspree")
        except requests.RequestException as e:
            body: Optional[str] = None
            if getattr(e, "response", None) is not None:
                body = e.response.text
            logger.error(f"Email delivery to {to} failed: {str(e)}", extra={"response_body": body})

        return True


_email_sender: Optional[EmailSender] = None


def get_email_sender() -> EmailSender:
    global _email_sender
    if _email_sender is None:
        _email_sender = EmailSender()
    return _email_sender
