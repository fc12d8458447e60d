import logging
import time
from typing import Dict, List

from shopcart.config import settings

log = logging.getLogger("shopcart.mailer")


class MailerError(Exception):
    pass


class MockMailerAdapter:
    """
    Simple synchronous mock mail adapter.
    Messages are kept in `outbox` (newest last) instead of being delivered.
    """

    def __init__(self, delay_ms: int = 0, sender: str = None):
        self.delay = delay_ms / 1000.0
        self.sender = sender or settings.MAIL_FROM
        self.outbox: List[Dict] = []

    def send(self, to: str, subject: str, body: str) -> Dict:
        if not to:
            raise MailerError("Recipient address is required")
        # simulate latency
        time.sleep(self.delay)
        message = {"from": self.sender, "to": to, "subject": subject, "body": body}
        self.outbox.append(message)
        log.info("mail queued to=%s subject=%r", to, subject)
        return message

    def send_signup_otp(self, email: str, otp: str) -> Dict:
        return self.send(
            email,
            "Verify your email",
            f"Your signup code is {otp}. It expires in "
            f"{settings.OTP_TTL_SECONDS // 60} minutes.",
        )

    def send_password_reset_otp(self, email: str, otp: str) -> Dict:
        return self.send(
            email,
            "Reset your password",
            f"Your password reset code is {otp}. It expires in "
            f"{settings.OTP_TTL_SECONDS // 60} minutes.",
        )

    def health_check(self) -> bool:
        return True


mailer = MockMailerAdapter(delay_ms=settings.MAIL_MOCK_DELAY_MS)


def get_mailer() -> MockMailerAdapter:
    return mailer
