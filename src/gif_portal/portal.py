"""The portal context: one session, one gallery, one submission queue."""

from __future__ import annotations

import logging
from typing import Optional

from .config import PortalConfig
from .gallery import GalleryState, GalleryStatus
from .ledger import LedgerClient, SolanaLedgerClient
from .notices import NoticeBoard
from .session import WalletSession
from .signer import SignerExtension
from .submission import SubmissionController, SubmissionOutcome

logger = logging.getLogger(__name__)


class PortalContext:
    """Own every piece of mutable client state and sequence the user flows."""

    def __init__(self, signer: SignerExtension, ledger: LedgerClient) -> None:
        self.notices = NoticeBoard()
        self.ledger = ledger
        self.session = WalletSession(signer, self.notices)
        self.gallery = GalleryState(ledger, self.notices)
        self.submissions = SubmissionController(ledger, self.session, self.gallery, self.notices)

    @classmethod
    def from_config(cls, config: PortalConfig, signer: SignerExtension) -> "PortalContext":
        return cls(signer, SolanaLedgerClient(config, signer))

    async def startup(self) -> Optional[str]:
        """Page-load flow: silent connect, then load the gallery if it worked."""

        address = await self.session.try_auto_connect()
        if self.session.connected:
            logger.info("Fetching GIF list...")
            await self.gallery.refresh()
        return address

    async def connect(self) -> Optional[str]:
        """Connect-button flow."""

        address = await self.session.connect_interactive()
        if self.session.connected:
            await self.gallery.refresh()
        return address

    async def initialize(self) -> bool:
        if not self.session.connected or self.session.address is None:
            logger.debug("Initialize ignored: wallet not connected")
            return False
        return await self.gallery.initialize(self.session.address)

    async def submit(self, link: Optional[str] = None) -> SubmissionOutcome:
        return await self.submissions.submit(link)

    def needs_initialization(self) -> bool:
        return self.session.connected and self.gallery.status is GalleryStatus.UNINITIALIZED
