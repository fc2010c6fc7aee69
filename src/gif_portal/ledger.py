"""Round trips against the remote GIF program: initialize, append, fetch."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solders.pubkey import Pubkey

from .config import PortalConfig
from .errors import (
    LedgerError,
    LedgerRpcError,
    RecordAlreadyInitializedError,
    RecordNotFoundError,
    RecordUninitializedError,
    SignerError,
)
from .program import Entry, Record, add_gif_instruction, decode_record, initialize_instruction
from .signer import SignerExtension, TransactionDescriptor

logger = logging.getLogger(__name__)

__all__ = ["Entry", "LedgerClient", "Record", "SolanaLedgerClient", "classify_rpc_failure"]

# Markers found in program logs / preflight messages.
ALREADY_IN_USE_MARKERS = ("already in use",)
NOT_INITIALIZED_MARKERS = ("AccountNotInitialized", "0xbc4", "custom program error: 3012")

RPC_FAILURES = (
    RPCException,
    SolanaRpcException,
    UnconfirmedTxError,
    TransactionExpiredBlockheightExceededError,
)


class LedgerClient(Protocol):
    """The three operations exposed by the remote program."""

    async def initialize_record(self, signer_address: str) -> None:
        ...

    async def append_entry(self, link: str, signer_address: str) -> None:
        ...

    async def fetch_record(self) -> Record:
        ...


def _failure_text(exc: BaseException) -> str:
    """Flatten an RPC exception (message plus any simulation logs) to searchable text."""

    parts = [str(exc), getattr(exc, "error_msg", "")]
    for detail in getattr(exc, "args", ()):
        message = getattr(detail, "message", None)
        if message:
            parts.append(str(message))
        logs: Iterable[str] = getattr(getattr(detail, "data", None), "logs", None) or []
        parts.extend(logs)
    return "\n".join(part for part in parts if part)


def classify_rpc_failure(exc: BaseException) -> LedgerError:
    """Translate a failed send into the matching :class:`LedgerError`."""

    text = _failure_text(exc)
    if any(marker in text for marker in ALREADY_IN_USE_MARKERS):
        return RecordAlreadyInitializedError("The record account already exists")
    if any(marker in text for marker in NOT_INITIALIZED_MARKERS):
        return RecordUninitializedError("The record account has not been initialized")
    return LedgerRpcError(text.splitlines()[0] if text else type(exc).__name__)


class SolanaLedgerClient:
    """Stateless client: every call opens its own RPC connection."""

    def __init__(self, config: PortalConfig, signer: SignerExtension) -> None:
        self.config = config
        self.signer = signer

    def _client(self) -> AsyncClient:
        return AsyncClient(
            self.config.endpoint,
            commitment=Commitment(self.config.preflight_commitment),
            timeout=self.config.rpc_timeout,
        )

    async def _send(self, descriptor: TransactionDescriptor) -> str:
        try:
            return await self.signer.sign_and_send(descriptor)
        except RPC_FAILURES as exc:
            raise classify_rpc_failure(exc) from exc
        except SignerError as exc:
            raise LedgerRpcError(f"Transaction was not signed: {exc}") from exc

    async def initialize_record(self, signer_address: str) -> None:
        instruction = initialize_instruction(
            self.config.program_pubkey,
            self.config.record_keypair.pubkey(),
            Pubkey.from_string(signer_address),
        )
        signature = await self._send(
            TransactionDescriptor(
                label="Initialize GIF record",
                instructions=[instruction],
                co_signers=[self.config.record_keypair],
            )
        )
        logger.info(f"Created record account {self.config.record_address} ({signature})")

    async def append_entry(self, link: str, signer_address: str) -> None:
        if not link:
            raise ValueError("link must be non-empty")
        instruction = add_gif_instruction(
            self.config.program_pubkey,
            self.config.record_keypair.pubkey(),
            Pubkey.from_string(signer_address),
            link,
        )
        signature = await self._send(TransactionDescriptor(label="Add GIF", instructions=[instruction]))
        logger.info(f"Appended {link!r} ({signature})")

    async def fetch_record(self) -> Record:
        try:
            async with self._client() as client:
                response = await client.get_account_info(self.config.record_keypair.pubkey())
        except RPC_FAILURES as exc:
            raise LedgerRpcError(f"Fetching record failed: {_failure_text(exc)}") from exc

        account = response.value
        if account is None:
            raise RecordNotFoundError(f"No account at {self.config.record_address}")
        if account.owner != self.config.program_pubkey:
            raise RecordNotFoundError(f"Account {self.config.record_address} is not owned by the program")
        try:
            return decode_record(bytes(account.data))
        except ValueError as exc:
            raise LedgerRpcError(f"Record account is unreadable: {exc}") from exc
