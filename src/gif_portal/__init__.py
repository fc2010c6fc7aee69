"""Client-side session and synchronization core for the on-chain GIF portal."""

from .config import PortalConfig, configure_logging
from .gallery import GalleryState, GalleryStatus
from .ledger import Entry, LedgerClient, Record, SolanaLedgerClient
from .notices import Notice, NoticeBoard
from .portal import PortalContext
from .session import SessionStatus, WalletSession
from .signer import KeypairSigner, SignerExtension, TransactionDescriptor
from .submission import PendingSubmission, SubmissionController, SubmissionOutcome

__all__ = [
    "Entry",
    "GalleryState",
    "GalleryStatus",
    "KeypairSigner",
    "LedgerClient",
    "Notice",
    "NoticeBoard",
    "PendingSubmission",
    "PortalConfig",
    "PortalContext",
    "Record",
    "SessionStatus",
    "SignerExtension",
    "SolanaLedgerClient",
    "SubmissionController",
    "SubmissionOutcome",
    "TransactionDescriptor",
    "WalletSession",
    "configure_logging",
]
