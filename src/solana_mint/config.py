from __future__ import annotations

import os
from dataclasses import dataclass

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .project_constants import (
    DEFAULT_CLI_CONFIG_PATH,
    DEFAULT_COMMITMENT,
    DEFAULT_CONFIRM_TIMEOUT_S,
    DEFAULT_KEYPAIR_PATH,
    DEFAULT_RPC_URL,
    SUCCESS_COMMITMENTS,
)


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    keypair_path: str
    program_id: str | None = None
    program_keypair_path: str | None = None
    commitment: str = DEFAULT_COMMITMENT
    confirm_timeout_s: float = DEFAULT_CONFIRM_TIMEOUT_S

    @staticmethod
    def from_env(
        rpc_url_override: str | None = None,
        keypair_path_override: str | None = None,
        program_id_override: str | None = None,
        program_keypair_override: str | None = None,
        commitment_override: str | None = None,
        cli_config_path: str = DEFAULT_CLI_CONFIG_PATH,
    ) -> "Settings":
        load_dotenv()

        # CLI flags win over the environment.
        rpc_url = rpc_url_override or os.getenv("RPC_URL", "").strip() or DEFAULT_RPC_URL
        # then the Solana CLI config, then the CLI's own default wallet
        keypair_path = (
            keypair_path_override
            or os.getenv("KEYPAIR_PATH", "").strip()
            or read_cli_keypair_path(cli_config_path)
            or DEFAULT_KEYPAIR_PATH
        )

        program_id = program_id_override or os.getenv("MINT_PROGRAM_ID", "").strip() or None
        program_keypair_path = (
            program_keypair_override
            or os.getenv("MINT_PROGRAM_KEYPAIR_PATH", "").strip()
            or None
        )

        commitment = (
            commitment_override or os.getenv("COMMITMENT", "").strip() or DEFAULT_COMMITMENT
        ).lower()
        if commitment not in SUCCESS_COMMITMENTS:
            raise ConfigurationError(
                f"COMMITMENT must be one of {', '.join(SUCCESS_COMMITMENTS)}, got {commitment!r}"
            )

        raw_timeout = os.getenv("CONFIRM_TIMEOUT_S", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_CONFIRM_TIMEOUT_S
        except ValueError as e:
            raise ConfigurationError(f"CONFIRM_TIMEOUT_S is not a number: {raw_timeout!r}") from e
        if timeout <= 0:
            raise ConfigurationError("CONFIRM_TIMEOUT_S must be positive.")

        return Settings(
            rpc_url=rpc_url,
            keypair_path=os.path.expanduser(keypair_path),
            program_id=program_id,
            program_keypair_path=(
                os.path.expanduser(program_keypair_path) if program_keypair_path else None
            ),
            commitment=commitment,
            confirm_timeout_s=timeout,
        )

    def require_program_source(self) -> None:
        if not self.program_id and not self.program_keypair_path:
            raise ConfigurationError(
                "Missing MINT_PROGRAM_ID (or MINT_PROGRAM_KEYPAIR_PATH). Put it in .env or export it."
            )


def read_cli_keypair_path(config_path: str) -> str | None:
    """
    keypair_path from the Solana CLI config.yml, or None when the file
    does not exist or does not set it.
    """
    path = os.path.expanduser(config_path)
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read Solana CLI config {path}: {e}") from e

    if data is None:
        return None
    if not isinstance(data, dict):
        raise ConfigurationError(f"Solana CLI config {path} is not a mapping.")
    value = data.get("keypair_path")
    if not value:
        return None
    return str(value).strip() or None
