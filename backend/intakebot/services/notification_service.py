"""
Notification Service — Tells the human team about finished intakes (email simulation).
"""
import time
from typing import Dict, Any

from intakebot.config import get_settings
from intakebot.utils.logger import log


class NotificationService:
    @staticmethod
    def send_email(subject: str, body: str, to: str | None = None) -> Dict[str, Any]:
        """
        Simulates sending an email via an SMTP relay such as Gmail.
        """
        recipient = to or get_settings().NOTIFY_EMAIL
        log("EMAIL", f"Sending to {recipient} [{subject}]: {body}", filename="notifications.log")
        return {
            "success": True,
            "provider": "MockSMTP",
            "sid": f"EM{int(time.time())}",
            "status": "queued",
        }
