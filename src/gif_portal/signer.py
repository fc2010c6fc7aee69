"""Signer extension interface and an in-process keypair implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from .config import DEFAULT_COMMITMENT
from .errors import (
    AuthenticationRejectedError,
    SignerKindError,
    SignerUnavailableError,
)

logger = logging.getLogger(__name__)

EXPECTED_KIND = "phantom"


@dataclass
class TransactionDescriptor:
    """What the portal asks the signer to approve, sign and submit."""

    label: str
    instructions: Sequence[Instruction]
    co_signers: Sequence[Keypair] = field(default_factory=list)


class SignerExtension(Protocol):
    """The wallet the user authenticates with. Private keys never leave it."""

    def is_present(self) -> bool:
        ...

    def is_expected_kind(self) -> bool:
        ...

    async def authenticate_silently(self) -> str:
        ...

    async def authenticate_interactive(self) -> str:
        ...

    async def sign_and_send(self, descriptor: TransactionDescriptor) -> str:
        ...


def _always_approve(prompt: str) -> bool:
    return True


class KeypairSigner:
    """Signer backed by a locally held keypair.

    ``approve`` stands in for the extension's consent popup: it receives a
    prompt and returns whether the user accepted. Silent authentication only
    succeeds once the user has approved an interactive connection (or the
    signer was created ``trusted``).
    """

    def __init__(
        self,
        keypair: Optional[Keypair],
        endpoint: str,
        kind: str = EXPECTED_KIND,
        trusted: bool = False,
        approve: Callable[[str], bool] = _always_approve,
        commitment: str = DEFAULT_COMMITMENT,
        timeout: float = 10.0,
    ) -> None:
        self._keypair = keypair
        self.endpoint = endpoint
        self.kind = kind
        self.trusted = trusted
        self._approve = approve
        self.commitment = Commitment(commitment)
        self.timeout = timeout

    @property
    def address(self) -> Optional[str]:
        if self._keypair is None:
            return None
        return str(self._keypair.pubkey())

    def is_present(self) -> bool:
        return self._keypair is not None

    def is_expected_kind(self) -> bool:
        return self.kind == EXPECTED_KIND

    def revoke(self) -> None:
        """Forget the trust grant so the next silent connect fails."""

        self.trusted = False

    def _require_keypair(self) -> Keypair:
        if self._keypair is None:
            raise SignerUnavailableError("No signer extension is installed")
        if not self.is_expected_kind():
            raise SignerKindError(f"Installed signer is {self.kind!r}, expected {EXPECTED_KIND!r}")
        return self._keypair

    async def authenticate_silently(self) -> str:
        keypair = self._require_keypair()
        if not self.trusted:
            raise AuthenticationRejectedError("Silent connection has not been granted")
        return str(keypair.pubkey())

    async def authenticate_interactive(self) -> str:
        keypair = self._require_keypair()
        address = str(keypair.pubkey())
        if not self._approve(f"Connect {address} to this site?"):
            raise AuthenticationRejectedError("User rejected the connection request")
        self.trusted = True
        return address

    async def sign_and_send(self, descriptor: TransactionDescriptor) -> str:
        """Sign ``descriptor`` with the wallet key and co-signers, submit and confirm it.

        Returns the transaction signature as a base58 string.
        """

        payer = self._require_keypair()
        if not self._approve(f"Approve transaction: {descriptor.label}"):
            raise AuthenticationRejectedError("User rejected the transaction")

        async with AsyncClient(self.endpoint, commitment=self.commitment, timeout=self.timeout) as client:
            blockhash = (await client.get_latest_blockhash()).value.blockhash
            message = Message.new_with_blockhash(list(descriptor.instructions), payer.pubkey(), blockhash)
            transaction = Transaction([payer, *descriptor.co_signers], message, blockhash)
            response = await client.send_raw_transaction(
                bytes(transaction),
                opts=TxOpts(skip_preflight=False, preflight_commitment=self.commitment),
            )
            signature = response.value
            await client.confirm_transaction(signature, commitment=self.commitment)

        logger.debug(f"{descriptor.label} confirmed: {signature}")
        return str(signature)
