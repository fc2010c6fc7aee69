"""Error mapping and decoding in the Solana-backed ledger client (no network)."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException
from solders.keypair import Keypair

import gif_portal.ledger as ledger_module
from gif_portal.config import PortalConfig
from gif_portal.errors import (
    AuthenticationRejectedError,
    LedgerRpcError,
    RecordAlreadyInitializedError,
    RecordNotFoundError,
    RecordUninitializedError,
)
from gif_portal.ledger import SolanaLedgerClient, classify_rpc_failure
from gif_portal.program import Entry, Record, encode_record


def _preflight_failure(message: str, logs: list[str]) -> RPCException:
    return RPCException(SimpleNamespace(message=message, data=SimpleNamespace(logs=logs)))


class RaisingSigner:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.descriptors = []

    async def sign_and_send(self, descriptor) -> str:
        self.descriptors.append(descriptor)
        raise self.exc


class RecordingSigner:
    def __init__(self) -> None:
        self.descriptors = []

    async def sign_and_send(self, descriptor) -> str:
        self.descriptors.append(descriptor)
        return "5igNature"


@pytest.fixture
def config() -> PortalConfig:
    return PortalConfig(program_id=str(Keypair().pubkey()), record_keypair=Keypair())


@pytest.fixture
def user() -> str:
    return str(Keypair().pubkey())


def test_classify_already_in_use():
    exc = _preflight_failure(
        "Transaction simulation failed: Error processing Instruction 0: custom program error: 0x0",
        ["Allocate: account Address { address: Abc, base: None } already in use"],
    )

    assert isinstance(classify_rpc_failure(exc), RecordAlreadyInitializedError)


def test_classify_account_not_initialized():
    exc = _preflight_failure(
        "Transaction simulation failed: Error processing Instruction 0: custom program error: 0xbc4",
        ["Program log: AnchorError caused by account: base_account. Error Code: AccountNotInitialized."],
    )

    assert isinstance(classify_rpc_failure(exc), RecordUninitializedError)


def test_classify_other_failures_as_rpc_errors():
    error = classify_rpc_failure(SolanaRpcException(httpx.ReadTimeout("timed out"), "get_latest_blockhash"))

    assert type(error) is LedgerRpcError
    assert "ReadTimeout" in str(error)


@pytest.mark.asyncio
async def test_initialize_cosigns_with_record_key(config, user):
    signer = RecordingSigner()
    client = SolanaLedgerClient(config, signer)

    await client.initialize_record(user)

    (descriptor,) = signer.descriptors
    assert [kp.pubkey() for kp in descriptor.co_signers] == [config.record_keypair.pubkey()]
    assert descriptor.instructions[0].accounts[0].pubkey == config.record_keypair.pubkey()


@pytest.mark.asyncio
async def test_initialize_twice_maps_to_already_initialized(config, user):
    exc = _preflight_failure("simulation failed", ["account already in use"])
    client = SolanaLedgerClient(config, RaisingSigner(exc))

    with pytest.raises(RecordAlreadyInitializedError):
        await client.initialize_record(user)


@pytest.mark.asyncio
async def test_append_on_missing_record_maps_to_uninitialized(config, user):
    exc = _preflight_failure("custom program error: 0xbc4", [])
    client = SolanaLedgerClient(config, RaisingSigner(exc))

    with pytest.raises(RecordUninitializedError):
        await client.append_entry("http://x/a.gif", user)


@pytest.mark.asyncio
async def test_declined_signature_is_an_rpc_failure(config, user):
    client = SolanaLedgerClient(config, RaisingSigner(AuthenticationRejectedError("User rejected")))

    with pytest.raises(LedgerRpcError):
        await client.append_entry("http://x/a.gif", user)


@pytest.mark.asyncio
async def test_append_rejects_empty_link_locally(config, user):
    signer = RecordingSigner()
    client = SolanaLedgerClient(config, signer)

    with pytest.raises(ValueError):
        await client.append_entry("", user)
    assert signer.descriptors == []


class FakeAsyncClient:
    account = None
    error = None
    opened = 0

    def __init__(self, endpoint, commitment=None, timeout=None) -> None:
        self.endpoint = endpoint
        type(self).opened += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def get_account_info(self, pubkey):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(value=self.account)


@pytest.fixture
def fake_rpc(monkeypatch):
    FakeAsyncClient.account = None
    FakeAsyncClient.error = None
    FakeAsyncClient.opened = 0
    monkeypatch.setattr(ledger_module, "AsyncClient", FakeAsyncClient)
    return FakeAsyncClient


@pytest.mark.asyncio
async def test_fetch_record_decodes_account(config, user, fake_rpc):
    record = Record(entries=(Entry("http://x/a.gif", user),), total_entries=1)
    fake_rpc.account = SimpleNamespace(owner=config.program_pubkey, data=encode_record(record))
    client = SolanaLedgerClient(config, RecordingSigner())

    assert await client.fetch_record() == record
    assert await client.fetch_record() == record
    assert fake_rpc.opened == 2


@pytest.mark.asyncio
async def test_fetch_record_missing_account(config, fake_rpc):
    client = SolanaLedgerClient(config, RecordingSigner())

    with pytest.raises(RecordNotFoundError):
        await client.fetch_record()


@pytest.mark.asyncio
async def test_fetch_record_transport_failure(config, fake_rpc):
    fake_rpc.error = SolanaRpcException(httpx.ConnectError("connection refused"), "get_account_info")
    client = SolanaLedgerClient(config, RecordingSigner())

    with pytest.raises(LedgerRpcError) as raised:
        await client.fetch_record()
    assert "ConnectError" in str(raised.value)


@pytest.mark.asyncio
async def test_fetch_record_with_garbage_data(config, fake_rpc):
    fake_rpc.account = SimpleNamespace(owner=config.program_pubkey, data=b"\x00" * 20)
    client = SolanaLedgerClient(config, RecordingSigner())

    with pytest.raises(LedgerRpcError):
        await client.fetch_record()
