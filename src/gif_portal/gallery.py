"""Local view of the shared record, reconciled by wholesale refresh."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from .errors import (
    LedgerRpcError,
    RecordAlreadyInitializedError,
    RecordNotFoundError,
)
from .ledger import Entry, LedgerClient
from .notices import NoticeBoard

logger = logging.getLogger(__name__)


class GalleryStatus(enum.Enum):
    UNKNOWN = "unknown"
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    REFRESH_FAILED = "refresh_failed"


@dataclass
class GallerySnapshot:
    status: GalleryStatus = GalleryStatus.UNKNOWN
    entries: tuple[Entry, ...] = field(default_factory=tuple)
    total_entries: int = 0


class GalleryState:
    """Hold the last known record contents.

    Every refresh takes a ticket from a monotonically increasing counter and
    only the holder of the latest ticket may write, so a slow response can
    never overwrite a newer one.
    """

    def __init__(self, ledger: LedgerClient, notices: NoticeBoard) -> None:
        self.ledger = ledger
        self.notices = notices
        self.snapshot = GallerySnapshot()
        self._issued = 0
        self._initializing = False

    @property
    def status(self) -> GalleryStatus:
        return self.snapshot.status

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self.snapshot.entries

    @property
    def is_initializing(self) -> bool:
        return self._initializing

    def _next_ticket(self) -> int:
        self._issued += 1
        return self._issued

    def _is_latest(self, ticket: int) -> bool:
        if ticket != self._issued:
            logger.debug(f"Discarding stale refresh #{ticket}; latest is #{self._issued}")
            return False
        return True

    async def refresh(self) -> GalleryStatus:
        """Fetch the record and replace the local view with it."""

        ticket = self._next_ticket()
        try:
            record = await self.ledger.fetch_record()
        except RecordNotFoundError:
            if self._is_latest(ticket):
                logger.debug("Record not found; waiting for initialization")
                self.snapshot = GallerySnapshot(status=GalleryStatus.UNINITIALIZED)
            return self.status
        except LedgerRpcError as exc:
            if self._is_latest(ticket):
                logger.warning(f"Refresh failed, keeping {len(self.entries)} cached entries: {exc}")
                self.snapshot = GallerySnapshot(
                    status=GalleryStatus.REFRESH_FAILED,
                    entries=self.snapshot.entries,
                    total_entries=self.snapshot.total_entries,
                )
                self.notices.error("Refresh failed", f"Showing the last loaded gallery. {exc}")
            return self.status

        if self._is_latest(ticket):
            self.snapshot = GallerySnapshot(
                status=GalleryStatus.READY,
                entries=tuple(record.entries),
                total_entries=record.total_entries,
            )
            logger.debug(f"Gallery refreshed with {len(record.entries)} entries")
        return self.status

    def mark_uninitialized(self) -> None:
        """Drop the local view after the program reported the record missing."""

        self._next_ticket()
        self.snapshot = GallerySnapshot(status=GalleryStatus.UNINITIALIZED)

    async def initialize(self, signer_address: str) -> bool:
        """Create the shared record, then refresh.

        Returns True when the record is usable afterwards. Only acts while the
        gallery is uninitialized; otherwise reports whether it is ready.
        """

        if self.status is not GalleryStatus.UNINITIALIZED or self._initializing:
            return self.status is GalleryStatus.READY

        self._initializing = True
        try:
            await self.ledger.initialize_record(signer_address)
        except RecordAlreadyInitializedError:
            logger.info("Record was already initialized; treating as success")
        except LedgerRpcError as exc:
            logger.warning(f"Error creating record account: {exc}")
            self.notices.error("Initialization failed", str(exc))
            return False
        finally:
            self._initializing = False

        await self.refresh()
        return self.status is GalleryStatus.READY
