"""Instruction builders and account decoding for the on-chain GIF program.

The program is an Anchor program exposing ``initialize`` and ``add_gif`` and a
single ``BaseAccount`` record::

    BaseAccount { total_gifs: u64, gif_list: Vec<ItemStruct> }
    ItemStruct  { gif_link: String, user_address: Pubkey }

Everything is borsh encoded behind an 8-byte Anchor discriminator.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32


@dataclass(frozen=True)
class Entry:
    """One link appended to the shared record."""

    link: str
    submitter_address: str


@dataclass(frozen=True)
class Record:
    """Decoded contents of the record account, in append order."""

    entries: tuple[Entry, ...]
    total_entries: int


def _discriminator(namespace: str, name: str) -> bytes:
    return hashlib.sha256(f"{namespace}:{name}".encode("utf-8")).digest()[:DISCRIMINATOR_SIZE]


INITIALIZE_DISCRIMINATOR = _discriminator("global", "initialize")
ADD_GIF_DISCRIMINATOR = _discriminator("global", "add_gif")
BASE_ACCOUNT_DISCRIMINATOR = _discriminator("account", "BaseAccount")


def encode_string(value: str) -> bytes:
    """Borsh string: little-endian u32 byte length followed by UTF-8 bytes."""

    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def initialize_instruction(program_id: Pubkey, record: Pubkey, user: Pubkey) -> Instruction:
    """Create the record account, paid for by ``user``. The record key must co-sign."""

    accounts = [
        AccountMeta(pubkey=record, is_signer=True, is_writable=True),
        AccountMeta(pubkey=user, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, INITIALIZE_DISCRIMINATOR, accounts)


def add_gif_instruction(program_id: Pubkey, record: Pubkey, user: Pubkey, link: str) -> Instruction:
    accounts = [
        AccountMeta(pubkey=record, is_signer=False, is_writable=True),
        AccountMeta(pubkey=user, is_signer=True, is_writable=True),
    ]
    return Instruction(program_id, ADD_GIF_DISCRIMINATOR + encode_string(link), accounts)


class _Reader:
    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ValueError(
                f"Record data truncated: wanted {size} bytes at offset {self.offset}, "
                f"have {len(self.data) - self.offset}"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    def string(self) -> str:
        return self.take(self.u32()).decode("utf-8")

    def pubkey(self) -> str:
        return str(Pubkey.from_bytes(self.take(PUBKEY_SIZE)))


def decode_record(data: bytes) -> Record:
    """Decode raw ``BaseAccount`` bytes into a :class:`Record`.

    Trailing bytes are ignored; the account is allocated larger than its
    current contents.
    """

    if bytes(data[:DISCRIMINATOR_SIZE]) != BASE_ACCOUNT_DISCRIMINATOR:
        raise ValueError("Account data is not a BaseAccount")

    reader = _Reader(bytes(data), DISCRIMINATOR_SIZE)
    total = reader.u64()
    count = reader.u32()
    entries = []
    for _ in range(count):
        link = reader.string()
        submitter = reader.pubkey()
        entries.append(Entry(link=link, submitter_address=submitter))
    return Record(entries=tuple(entries), total_entries=total)


def encode_record(record: Record) -> bytes:
    """Inverse of :func:`decode_record`, used to build fixtures."""

    parts = [
        BASE_ACCOUNT_DISCRIMINATOR,
        struct.pack("<Q", record.total_entries),
        struct.pack("<I", len(record.entries)),
    ]
    for entry in record.entries:
        parts.append(encode_string(entry.link))
        parts.append(bytes(Pubkey.from_string(entry.submitter_address)))
    return b"".join(parts)
