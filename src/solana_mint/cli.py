from __future__ import annotations

import argparse
import json
import logging
import os

from solders.pubkey import Pubkey

from .config import Settings
from .confirm import ConfirmationPolicy
from .derive import derive_associated_token_address
from .errors import MintClientError
from .keys import Signer, load_program_id
from .mint import mint_token, verify_mint_result
from .project_constants import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID
from .rpc import RpcClient


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _write_keypair(path: str, signer: Signer) -> None:
    path = os.path.expanduser(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(list(signer.secret_bytes()), f)
    os.chmod(path, 0o600)


def cmd_mint(args: argparse.Namespace) -> int:
    settings = Settings.from_env(
        rpc_url_override=args.rpc_url,
        keypair_path_override=args.keypair,
        program_id_override=args.program_id,
        program_keypair_override=args.program_keypair,
        commitment_override=args.commitment,
    )
    settings.require_program_source()
    log = logging.getLogger("mint")

    wallet = Signer.from_json_file(settings.keypair_path)
    log.info("Local wallet loaded: %s", wallet.pubkey)
    program_id = load_program_id(settings.program_id, settings.program_keypair_path)
    log.info("Program ID: %s", program_id)

    mint_signer = Signer.generate()
    if args.mint_keypair_out:
        _write_keypair(args.mint_keypair_out, mint_signer)
        log.info("Wrote mint keypair: %s", args.mint_keypair_out)

    policy = ConfirmationPolicy(
        commitment=settings.commitment,
        timeout_s=settings.confirm_timeout_s,
    )

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        log.info("Connected to %s", settings.rpc_url)
        if log.isEnabledFor(logging.DEBUG):
            log.debug("Wallet balance: %d lamports", rpc.get_balance(str(wallet.pubkey)))
        result = mint_token(
            rpc,
            authority=wallet,
            program_id=program_id,
            mint_signer=mint_signer,
            policy=policy,
        )
        state = None
        if not args.no_verify:
            state = verify_mint_result(rpc, result, owner=wallet.pubkey, commitment=settings.commitment)
    finally:
        rpc.close()

    print("========================================")
    print("TOKEN MINTED")
    print("========================================")
    print(f"Mint          : {result.mint}")
    print(f"Token account : {result.token_account}")
    print(f"Owner         : {wallet.pubkey}")
    print(f"Signature     : {result.signature}")
    print(f"Status        : {result.confirmation.status.value} (slot {result.confirmation.slot})")
    if state is not None:
        print(f"Balance       : {state.amount}")
    return 0


def cmd_derive(args: argparse.Namespace) -> int:
    token_program = TOKEN_2022_PROGRAM_ID if args.token_2022 else TOKEN_PROGRAM_ID
    owner = Pubkey.from_string(args.owner)
    mint = Pubkey.from_string(args.mint)
    address, bump = derive_associated_token_address(owner, mint, token_program)
    print(f"Owner         : {owner}")
    print(f"Mint          : {mint}")
    print(f"Token program : {token_program}")
    print(f"Token account : {address}")
    print(f"Bump          : {bump}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        entry = rpc.get_signature_statuses([args.signature], search_history=True)[0]
    finally:
        rpc.close()

    if entry is None:
        print(f"{args.signature}: not found")
        return 1
    print(f"Signature     : {args.signature}")
    print(f"Slot          : {entry.get('slot')}")
    print(f"Status        : {entry.get('confirmationStatus')}")
    print(f"Error         : {entry.get('err')}")
    return 0 if entry.get("err") is None else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="solana-mint",
        description="Mint a new token through the on-chain mint program.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    m = sub.add_parser("mint", help="Build, sign, submit and confirm the mint transaction.")
    m.add_argument("--keypair", default=None, help="Wallet keypair JSON (else KEYPAIR_PATH).")
    m.add_argument("--program-id", default=None, help="Mint program address.")
    m.add_argument(
        "--program-keypair",
        default=None,
        help="Program deploy keypair JSON, used when --program-id is not given.",
    )
    m.add_argument(
        "--commitment",
        choices=("confirmed", "finalized"),
        default=None,
        help="Commitment that counts as success (default finalized).",
    )
    m.add_argument(
        "--mint-keypair-out",
        default=None,
        help="Save the generated mint keypair to this path.",
    )
    m.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip reading the token account back after confirmation.",
    )
    m.set_defaults(func=cmd_mint)

    d = sub.add_parser("derive", help="Print the associated token account for owner/mint.")
    d.add_argument("--owner", required=True, help="Owner wallet address.")
    d.add_argument("--mint", required=True, help="Mint address.")
    d.add_argument("--token-2022", action="store_true", help="Derive for Token-2022.")
    d.set_defaults(func=cmd_derive)

    s = sub.add_parser("status", help="Look up a transaction signature once.")
    s.add_argument("--signature", required=True, help="Transaction signature.")
    s.set_defaults(func=cmd_status)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except MintClientError as e:
        logging.getLogger("solana-mint").error("%s failed: %s", e.stage, e)
        code = 1
    except ValueError as e:
        logging.getLogger("solana-mint").error("%s", e)
        code = 2
    raise SystemExit(code)
