import logging
from typing import Callable

from dawak.core.clock import now_ms
from dawak.core.config import Settings, settings
from dawak.domain.errors import InvalidCredentialsError
from dawak.interfaces.IOrderStore import IOrderStore

logger = logging.getLogger(__name__)

class AuthGate:
    """Single pharmacy account, checked against configured credentials.

    The session marker lives in the same store as the orders, under its own
    key, so a logged-in pharmacist stays logged in across restarts.
    """

    def __init__(self, store: IOrderStore, config: Settings = settings, clock: Callable[[], int] = now_ms):
        self.store = store
        self.config = config
        self._clock = clock

    def is_active(self) -> bool:
        return bool(self.store.get(self.config.TOKEN_KEY))

    def login(self, email: str, password: str) -> str:
        if email != self.config.PHARMACY_EMAIL or password != self.config.PHARMACY_PASSWORD:
            logger.warning(f"⚠️ Rejected login for {email!r}")
            raise InvalidCredentialsError("Invalid credentials! Please use the provided pharmacy login.")

        token = f"pharmacy-token-{self._clock()}"
        self.store.set(self.config.TOKEN_KEY, token)
        logger.info("🔑 Pharmacy logged in")
        return token

    def logout(self):
        self.store.delete(self.config.TOKEN_KEY)
        logger.info("🔒 Pharmacy logged out")
