"""Web Push delivery using VAPID.

pywebpush is a blocking client, so each send runs in a worker thread to
keep the event loop free.
"""

import asyncio
import json
import logging
from typing import Optional

from pywebpush import WebPushException, webpush

from ..config import settings

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/icon-192.png"

# Push service answers for endpoints that will never accept messages again
GONE_STATUS_CODES = frozenset({404, 410})


class PushGoneError(Exception):
    """The push endpoint no longer exists and its subscription should be removed."""

    def __init__(self, endpoint: str, status_code: int):
        super().__init__(f"Push endpoint gone ({status_code}): {endpoint}")
        self.endpoint = endpoint
        self.status_code = status_code


class PushService:
    """
    Sends Web Push messages to browser subscriptions.

    When VAPID keys are not configured every send is a no-op.
    """

    def __init__(
        self,
        public_key: Optional[str] = None,
        private_key: Optional[str] = None,
        contact: Optional[str] = None,
    ):
        self.public_key = public_key if public_key is not None else settings.vapid_public_key
        self.private_key = private_key if private_key is not None else settings.vapid_private_key
        self.contact = contact or settings.vapid_contact

    @property
    def enabled(self) -> bool:
        return bool(self.public_key and self.private_key)

    @staticmethod
    def build_payload(title: str, body: str, icon: Optional[str] = None) -> dict:
        return {"title": title, "body": body, "icon": icon or DEFAULT_ICON}

    def _send_blocking(self, subscription_info: dict, data: str) -> None:
        webpush(
            subscription_info=subscription_info,
            data=data,
            vapid_private_key=self.private_key,
            vapid_claims={"sub": self.contact},
        )

    async def send(self, subscription_info: dict, payload: dict) -> bool:
        """
        Deliver one push message.

        Args:
            subscription_info: {"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}
            payload: JSON-serializable message body

        Returns:
            True if sent, False if push is disabled

        Raises:
            PushGoneError: If the push service reports the endpoint gone
            WebPushException: For any other push service failure
        """
        if not self.enabled:
            return False

        try:
            await asyncio.to_thread(
                self._send_blocking, subscription_info, json.dumps(payload)
            )
        except WebPushException as e:
            status_code = getattr(e.response, "status_code", None)
            if status_code in GONE_STATUS_CODES:
                raise PushGoneError(subscription_info.get("endpoint", ""), status_code) from e
            raise
        return True


# Global service instance
push_service = PushService()


def get_push_service() -> PushService:
    return push_service
