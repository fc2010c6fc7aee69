"""Authentication lifecycle with the signer extension."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import (
    AuthenticationRejectedError,
    SignerError,
    SignerKindError,
    SignerUnavailableError,
)
from .notices import NoticeBoard
from .signer import SignerExtension

logger = logging.getLogger(__name__)


class SessionStatus(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    REJECTED = "rejected"


@dataclass
class SessionState:
    """What the presentation layer reads: status and, once connected, the address."""

    status: SessionStatus = SessionStatus.DISCONNECTED
    address: Optional[str] = None

    def short_address(self) -> Optional[str]:
        if self.address is None:
            return None
        return f"{self.address[:4]}…{self.address[-4:]}"


class WalletSession:
    """Drive silent and interactive connection against a :class:`SignerExtension`.

    Both connect operations are idempotent while connected and return the
    current address. A connect attempt that arrives while another one is
    awaiting the signer returns ``None`` without touching the signer.
    """

    def __init__(self, signer: SignerExtension, notices: NoticeBoard) -> None:
        self.signer = signer
        self.notices = notices
        self.state = SessionState()

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def address(self) -> Optional[str]:
        return self.state.address

    @property
    def connected(self) -> bool:
        return self.state.status is SessionStatus.CONNECTED

    def _set(self, status: SessionStatus, address: Optional[str] = None) -> None:
        logger.debug(f"Session {self.state.status.value} -> {status.value}")
        self.state.status = status
        self.state.address = address

    async def try_auto_connect(self) -> Optional[str]:
        """Reconnect without prompting if the user granted access before.

        Failure is the normal case on a first visit, so it is only logged.
        """

        if self.connected:
            return self.address
        if self.status is SessionStatus.CONNECTING:
            return None

        if not self.signer.is_present():
            logger.info("No signer extension found; install one to connect")
            return None
        if not self.signer.is_expected_kind():
            logger.warning("Another wallet occupies the signer slot; silent connect skipped")
            return None

        previous = self.status
        self._set(SessionStatus.CONNECTING)
        try:
            address = await self.signer.authenticate_silently()
        except SignerError as exc:
            logger.info(f"Silent connect unavailable: {exc}")
            self._set(previous)
            return None
        except BaseException:
            self._set(previous)
            raise

        self._set(SessionStatus.CONNECTED, address)
        logger.info(f"Connected with public key {address}")
        return address

    async def connect_interactive(self) -> Optional[str]:
        """Prompt the user through the signer's consent UI."""

        if self.connected:
            return self.address
        if self.status is SessionStatus.CONNECTING:
            return None

        previous = self.status
        self._set(SessionStatus.CONNECTING)
        try:
            if not self.signer.is_present():
                raise SignerUnavailableError("No signer extension found. Install one and reload.")
            if not self.signer.is_expected_kind():
                raise SignerKindError("Another wallet occupies the signer slot. Disable it and reload.")
            address = await self.signer.authenticate_interactive()
        except AuthenticationRejectedError as exc:
            self._set(SessionStatus.REJECTED)
            self.notices.error("Connection rejected", str(exc))
            return None
        except SignerError as exc:
            self._set(SessionStatus.REJECTED)
            self.notices.error("Wallet unavailable", str(exc))
            return None
        except asyncio.CancelledError:
            self._set(previous)
            raise
        except BaseException:
            self._set(SessionStatus.REJECTED)
            raise

        self._set(SessionStatus.CONNECTED, address)
        logger.info(f"Connected with public key {address}")
        return address

    def disconnect(self) -> None:
        self._set(SessionStatus.DISCONNECTED)
