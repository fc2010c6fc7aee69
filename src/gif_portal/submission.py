"""Serialized link submission with optimistic input clearing."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .errors import LedgerRpcError, RecordUninitializedError
from .gallery import GalleryState, GalleryStatus
from .ledger import LedgerClient
from .notices import NoticeBoard
from .session import WalletSession

logger = logging.getLogger(__name__)


class SubmissionOutcome(enum.Enum):
    REJECTED = "rejected"
    APPENDED = "appended"
    UNINITIALIZED = "uninitialized"
    FAILED = "failed"


@dataclass(frozen=True)
class PendingSubmission:
    link: str
    started_at: float


class SubmissionController:
    """Append links to the record, at most one at a time.

    The input buffer is cleared as soon as a submission starts and is not
    restored if the append fails.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        session: WalletSession,
        gallery: GalleryState,
        notices: NoticeBoard,
    ) -> None:
        self.ledger = ledger
        self.session = session
        self.gallery = gallery
        self.notices = notices
        self.input_buffer = ""
        self.pending: Optional[PendingSubmission] = None

    def set_input(self, text: str) -> None:
        self.input_buffer = text

    def _refusal(self, link: str) -> Optional[str]:
        if not link:
            return "empty input"
        if self.pending is not None:
            return f"submission of {self.pending.link!r} still in flight"
        if not self.session.connected:
            return "wallet not connected"
        if self.gallery.status is not GalleryStatus.READY:
            return f"gallery is {self.gallery.status.value}"
        return None

    async def submit(self, link: Optional[str] = None) -> SubmissionOutcome:
        """Append ``link`` (default: the input buffer) and refresh the gallery."""

        link = (self.input_buffer if link is None else link).strip()
        reason = self._refusal(link)
        if reason is not None:
            logger.debug(f"Submission ignored: {reason}")
            return SubmissionOutcome.REJECTED

        logger.debug(f"Gif link: {link}")
        self.input_buffer = ""
        self.pending = PendingSubmission(link=link, started_at=time.time())
        try:
            await self.ledger.append_entry(link, self.session.address)
        except RecordUninitializedError:
            logger.warning("Append rejected: record is not initialized")
            self.gallery.mark_uninitialized()
            return SubmissionOutcome.UNINITIALIZED
        except LedgerRpcError as exc:
            logger.warning(f"Error sending GIF: {exc}")
            self.notices.error("Submission failed", str(exc))
            return SubmissionOutcome.FAILED
        finally:
            self.pending = None

        await self.gallery.refresh()
        return SubmissionOutcome.APPENDED
