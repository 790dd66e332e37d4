"""
Signer factories and Ed25519 signing (RFC 8032 test vector 1).
"""

from __future__ import annotations

import json

import base58
import pytest
from solders.signature import Signature

from solana_mint.errors import ConfigurationError
from solana_mint.keys import Signer, load_program_id

RFC8032_SEED = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")
RFC8032_PUBLIC = bytes.fromhex("d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a")
RFC8032_SIG_EMPTY = bytes.fromhex(
    "e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e06522490155"
    "5fb8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b"
)


def test_rfc8032_vector():
    signer = Signer.from_bytes(RFC8032_SEED + RFC8032_PUBLIC)
    assert bytes(signer.pubkey) == RFC8032_PUBLIC
    assert signer.sign_message(b"") == RFC8032_SIG_EMPTY
    assert Signature(RFC8032_SIG_EMPTY).verify(signer.pubkey, b"")


def test_from_seed_matches_from_bytes():
    signer = Signer.from_seed(RFC8032_SEED)
    assert bytes(signer.pubkey) == RFC8032_PUBLIC
    assert signer.secret_bytes() == RFC8032_SEED + RFC8032_PUBLIC


def test_from_seed_rejects_wrong_length():
    with pytest.raises(ConfigurationError):
        Signer.from_seed(RFC8032_SEED[:31])


def test_signature_is_deterministic_and_verifiable():
    signer = Signer.generate()
    sig = signer.sign_message(b"hello")
    assert sig == signer.sign_message(b"hello")
    assert Signature(sig).verify(signer.pubkey, b"hello")
    assert not Signature(sig).verify(signer.pubkey, b"hellO")
    assert not Signature(sig).verify(Signer.generate().pubkey, b"hello")


def test_generated_signers_differ():
    assert Signer.generate().pubkey != Signer.generate().pubkey


def test_from_bytes_rejects_mismatched_public_half():
    with pytest.raises(ConfigurationError):
        Signer.from_bytes(RFC8032_SEED + bytes(32))


def test_from_bytes_rejects_wrong_length():
    with pytest.raises(ConfigurationError):
        Signer.from_bytes(RFC8032_SEED)


def test_secret_bytes_round_trip():
    signer = Signer.generate()
    again = Signer.from_bytes(signer.secret_bytes())
    assert again.pubkey == signer.pubkey


def test_from_base58():
    signer = Signer.from_base58(base58.b58encode(RFC8032_SEED + RFC8032_PUBLIC).decode())
    assert bytes(signer.pubkey) == RFC8032_PUBLIC


def test_from_json_file(tmp_path):
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(RFC8032_SEED + RFC8032_PUBLIC)), encoding="utf-8")
    signer = Signer.from_json_file(str(path))
    assert bytes(signer.pubkey) == RFC8032_PUBLIC
    assert signer.source == f"file:{path}"


def test_from_json_file_missing(tmp_path):
    with pytest.raises(ConfigurationError):
        Signer.from_json_file(str(tmp_path / "nope.json"))


@pytest.mark.parametrize("content", ["not json", '{"a": 1}', "[1, 2, 300]"])
def test_from_json_file_bad_content(tmp_path, content):
    path = tmp_path / "id.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        Signer.from_json_file(str(path))


def test_repr_hides_secret():
    signer = Signer.from_bytes(RFC8032_SEED + RFC8032_PUBLIC)
    text = repr(signer) + str(signer)
    assert RFC8032_SEED.hex() not in text
    assert base58.b58encode(RFC8032_SEED).decode() not in text
    assert str(signer.pubkey) in text


def test_load_program_id_from_literal_and_file(tmp_path):
    signer = Signer.generate()
    assert load_program_id(str(signer.pubkey), None) == signer.pubkey

    path = tmp_path / "mint-keypair.json"
    path.write_text(json.dumps(list(signer.secret_bytes())), encoding="utf-8")
    assert load_program_id(None, str(path)) == signer.pubkey


def test_load_program_id_errors():
    with pytest.raises(ConfigurationError):
        load_program_id("not-a-key", None)
    with pytest.raises(ConfigurationError):
        load_program_id(None, None)
