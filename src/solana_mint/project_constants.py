"""
Fixed program identities and defaults for the one-shot mint transaction.

The program addresses below are cluster-wide constants. The mint program's
own id is deployment specific and comes from configuration.
"""

from solders.pubkey import Pubkey

SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
SYSVAR_RENT_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

DEFAULT_RPC_URL = "https://api.devnet.solana.com"

# Solana CLI config; its keypair_path names the default wallet
DEFAULT_CLI_CONFIG_PATH = "~/.config/solana/cli/config.yml"
# Used when the CLI config is absent or has no keypair_path
DEFAULT_KEYPAIR_PATH = "~/.config/solana/id.json"

# Commitment that counts as success unless overridden
DEFAULT_COMMITMENT = "finalized"
SUCCESS_COMMITMENTS = ("confirmed", "finalized")

DEFAULT_CONFIRM_TIMEOUT_S = 60.0

# The program creates a 0-decimal mint and mints exactly one token
MINTED_AMOUNT = 1
