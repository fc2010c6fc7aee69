"""Static configuration for the GIF portal client: cluster, program and record key."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Union

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .errors import ConfigError

Network = Literal["Mainnet", "Testnet", "Devnet"]
NETWORKS: list[Network] = ["Mainnet", "Testnet", "Devnet"]

DEFAULT_ENDPOINTS: dict[Network, str] = {
    "Mainnet": "https://api.mainnet-beta.solana.com",
    "Testnet": "https://api.testnet.solana.com",
    "Devnet": "https://api.devnet.solana.com",
}

DEFAULT_COMMITMENT = "processed"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

PathLike = Union[str, Path]


@dataclass
class PortalConfig:
    """Everything the ledger client needs that never changes at runtime."""

    program_id: str
    record_keypair: Keypair = field(repr=False)
    network: Network = "Devnet"
    endpoint: Optional[str] = None
    preflight_commitment: str = DEFAULT_COMMITMENT
    rpc_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.network not in DEFAULT_ENDPOINTS:
            raise ConfigError(f"Unknown network: {self.network}")
        if self.endpoint is None:
            self.endpoint = DEFAULT_ENDPOINTS[self.network]
        try:
            Pubkey.from_string(self.program_id)
        except Exception as exc:  # noqa: BLE001 - solders parse errors vary by version
            raise ConfigError(f"Invalid program id: {self.program_id}") from exc

    @property
    def program_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.program_id)

    @property
    def record_address(self) -> str:
        """Address of the shared record account."""

        return str(self.record_keypair.pubkey())

    @classmethod
    def from_files(
        cls,
        idl_path: PathLike,
        keypair_path: PathLike,
        network: Network = "Devnet",
        endpoint: Optional[str] = None,
        rpc_timeout: float = 10.0,
    ) -> "PortalConfig":
        return cls(
            program_id=load_program_id(idl_path),
            record_keypair=load_record_keypair(keypair_path),
            network=network,
            endpoint=endpoint,
            rpc_timeout=rpc_timeout,
        )


def _read_json(path: PathLike) -> object:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Missing file: {path}")
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed JSON in {path}: {exc}") from exc


def load_program_id(idl_path: PathLike) -> str:
    """Return the deployed program address recorded in an Anchor IDL file."""

    idl = _read_json(idl_path)
    address = None
    if isinstance(idl, dict):
        metadata = idl.get("metadata")
        if isinstance(metadata, dict):
            address = metadata.get("address")
        # Newer IDLs keep the address at the top level.
        address = address or idl.get("address")
    if not isinstance(address, str) or not address:
        raise ConfigError(f"No program address in {idl_path}")
    return address


def load_record_keypair(path: PathLike) -> Keypair:
    """Load the record account keypair.

    Accepts the serialized web3.js shape (``{"_keypair": {"secretKey": {"0": ..}}}``)
    as well as the plain 64-integer list written by ``solana-keygen``.
    """

    raw = _read_json(path)
    if isinstance(raw, dict):
        serialized = raw.get("_keypair")
        secret = serialized.get("secretKey") if isinstance(serialized, dict) else None
        if isinstance(secret, dict):
            if not all(key.isdigit() for key in secret):
                raise ConfigError(f"Non-numeric secret key indices in {path}")
            # Object keys are string indices; order by index, not by insertion.
            secret = [secret[key] for key in sorted(secret, key=int)]
    else:
        secret = raw

    if not isinstance(secret, list) or len(secret) != 64:
        raise ConfigError(f"Unrecognized keypair format in {path}")
    try:
        return Keypair.from_bytes(bytes(secret))
    except Exception as exc:  # noqa: BLE001 - solders parse errors vary by version
        raise ConfigError(f"Invalid secret key in {path}") from exc


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install a console handler for the portal loggers."""

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(__package__).setLevel(level)
