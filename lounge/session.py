from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from lounge.config import DEFAULT_SESSION_TTL_MINUTES
from lounge.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AdminSession:
    """Admin login state for one browser session.

    The password check runs in the app process against a shared secret, so
    this only decides which page is shown. It is not an access control layer.
    """

    authenticated: bool = False
    expires_at: Optional[datetime] = None
    ttl: timedelta = timedelta(minutes=DEFAULT_SESSION_TTL_MINUTES)

    def login(self, password: str, secret: Optional[str], now: Optional[datetime] = None) -> bool:
        if not secret:
            raise ConfigurationError("Admin password is not configured.")

        if not hmac.compare_digest((password or "").encode(), secret.encode()):
            logger.info("Admin login rejected")
            self.logout()
            return False

        now = now or _utcnow()
        self.authenticated = True
        self.expires_at = now + self.ttl
        logger.info("Admin logged in until %s", self.expires_at.isoformat())
        return True

    def is_active(self, now: Optional[datetime] = None) -> bool:
        if not self.authenticated:
            return False
        now = now or _utcnow()
        if self.expires_at is not None and now >= self.expires_at:
            logger.info("Admin session expired")
            self.logout()
            return False
        return True

    def logout(self) -> None:
        self.authenticated = False
        self.expires_at = None
