from __future__ import annotations

import json
import os
from typing import Sequence

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .errors import ConfigurationError

SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64


class Signer:
    """
    Signing capability for one identity, backed by a solders Keypair.

    Generated and loaded keys behave the same; only the factory differs.
    str(Keypair) is the base58 secret, so this wrapper's repr/str only
    ever show the pubkey and where the key came from.
    """

    def __init__(self, keypair: Keypair, source: str = "generated") -> None:
        self.keypair = keypair
        self.source = source

    @classmethod
    def generate(cls) -> "Signer":
        return cls(Keypair(), source="generated")

    @classmethod
    def from_seed(cls, seed: bytes | Sequence[int], source: str = "seed") -> "Signer":
        raw = bytes(seed)
        if len(raw) != SEED_LENGTH:
            raise ConfigurationError(f"Signing seed must be {SEED_LENGTH} bytes ({source}).")
        return cls(Keypair.from_seed(raw), source=source)

    @classmethod
    def from_bytes(cls, secret: bytes | Sequence[int], source: str = "bytes") -> "Signer":
        """
        64-byte secret key: 32-byte seed followed by the 32-byte public key.
        """
        raw = bytes(secret)
        if len(raw) != SECRET_KEY_LENGTH:
            raise ConfigurationError(
                f"Keypair must be {SECRET_KEY_LENGTH} bytes, got {len(raw)} ({source})."
            )
        try:
            keypair = Keypair.from_bytes(raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid keypair ({source}): {e}") from e
        if bytes(keypair.pubkey()) != raw[SEED_LENGTH:]:
            raise ConfigurationError(f"Keypair public half does not match its seed ({source}).")
        return cls(keypair, source=source)

    @classmethod
    def from_base58(cls, secret_b58: str) -> "Signer":
        """Wallet-export format: base58 of the 64-byte secret."""
        try:
            raw = base58.b58decode(secret_b58.strip())
        except ValueError as e:
            raise ConfigurationError(f"Secret key is not valid base58: {e}") from e
        return cls.from_bytes(raw, source="base58")

    @classmethod
    def from_json_file(cls, path: str) -> "Signer":
        """
        Solana CLI keypair file: JSON array of 64 integers.
        """
        path = os.path.expanduser(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read keypair file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Keypair file {path} is not valid JSON: {e}") from e

        if not isinstance(data, list) or not all(
            isinstance(b, int) and 0 <= b < 256 for b in data
        ):
            raise ConfigurationError(f"Keypair file {path} must hold a JSON array of bytes.")
        return cls.from_bytes(data, source=f"file:{path}")

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    def sign_message(self, message: bytes) -> bytes:
        return bytes(self.keypair.sign_message(message))

    def secret_bytes(self) -> bytes:
        """64-byte secret key, for writing a keypair file. Never log this."""
        return bytes(self.keypair)

    def __repr__(self) -> str:
        return f"Signer(pubkey={self.pubkey}, source={self.source})"

    __str__ = __repr__


def load_program_id(program_id: str | None, program_keypair_path: str | None) -> Pubkey:
    """Program id from a literal address, else from the deploy keypair file."""
    if program_id:
        try:
            return Pubkey.from_string(program_id)
        except ValueError as e:
            raise ConfigurationError(f"Program id is not a valid pubkey: {e}") from e
    if program_keypair_path:
        return Signer.from_json_file(program_keypair_path).pubkey
    raise ConfigurationError("No program id or program keypair path given.")
