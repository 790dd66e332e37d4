from __future__ import annotations

import pytest

from solana_mint.config import Settings, read_cli_keypair_path
from solana_mint.errors import ConfigurationError
from solana_mint.project_constants import DEFAULT_RPC_URL

ENV_VARS = (
    "RPC_URL",
    "KEYPAIR_PATH",
    "MINT_PROGRAM_ID",
    "MINT_PROGRAM_KEYPAIR_PATH",
    "COMMITMENT",
    "CONFIRM_TIMEOUT_S",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr("solana_mint.config.load_dotenv", lambda: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")
    s = Settings.from_env()
    assert s.rpc_url == DEFAULT_RPC_URL
    assert s.keypair_path == "/home/tester/.config/solana/id.json"
    assert s.commitment == "finalized"
    assert s.confirm_timeout_s == 60.0
    assert s.program_id is None


def test_env_values(monkeypatch):
    monkeypatch.setenv("RPC_URL", "https://env.rpc")
    monkeypatch.setenv("MINT_PROGRAM_ID", "11111111111111111111111111111111")
    monkeypatch.setenv("COMMITMENT", "Confirmed")
    monkeypatch.setenv("CONFIRM_TIMEOUT_S", "12.5")
    s = Settings.from_env()
    assert s.rpc_url == "https://env.rpc"
    assert s.program_id == "11111111111111111111111111111111"
    assert s.commitment == "confirmed"
    assert s.confirm_timeout_s == 12.5


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("RPC_URL", "https://env.rpc")
    monkeypatch.setenv("KEYPAIR_PATH", "/env/id.json")
    s = Settings.from_env(rpc_url_override="https://flag.rpc", keypair_path_override="/flag/id.json")
    assert s.rpc_url == "https://flag.rpc"
    assert s.keypair_path == "/flag/id.json"


@pytest.mark.parametrize(
    "name,value",
    [("COMMITMENT", "processed"), ("CONFIRM_TIMEOUT_S", "soon"), ("CONFIRM_TIMEOUT_S", "-1")],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_program_source_required():
    with pytest.raises(ConfigurationError):
        Settings.from_env().require_program_source()
    Settings.from_env(program_keypair_override="/x.json").require_program_source()


@pytest.fixture
def cli_config(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "---\n"
        "json_rpc_url: https://api.devnet.solana.com\n"
        "websocket_url: ''\n"
        "keypair_path: /cli/wallet.json\n"
        "commitment: confirmed\n",
        encoding="utf-8",
    )
    return str(path)


def test_cli_config_keypair_used(cli_config):
    s = Settings.from_env(cli_config_path=cli_config)
    assert s.keypair_path == "/cli/wallet.json"


def test_cli_config_is_in_default_location(tmp_path):
    config_dir = tmp_path / ".config" / "solana" / "cli"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yml").write_text("keypair_path: ~/keys/dev.json\n", encoding="utf-8")
    s = Settings.from_env()
    assert s.keypair_path == f"{tmp_path}/keys/dev.json"


def test_env_and_flag_beat_cli_config(monkeypatch, cli_config):
    monkeypatch.setenv("KEYPAIR_PATH", "/env/id.json")
    assert Settings.from_env(cli_config_path=cli_config).keypair_path == "/env/id.json"
    s = Settings.from_env(keypair_path_override="/flag/id.json", cli_config_path=cli_config)
    assert s.keypair_path == "/flag/id.json"


def test_missing_cli_config_falls_back_to_default(tmp_path):
    s = Settings.from_env(cli_config_path=str(tmp_path / "absent.yml"))
    assert s.keypair_path == f"{tmp_path}/.config/solana/id.json"


@pytest.mark.parametrize("content", ["", "json_rpc_url: https://x\n", "keypair_path: ''\n"])
def test_cli_config_without_keypair(tmp_path, content):
    path = tmp_path / "config.yml"
    path.write_text(content, encoding="utf-8")
    assert read_cli_keypair_path(str(path)) is None


@pytest.mark.parametrize("content", ["keypair_path: [unclosed\n", "- just\n- a list\n"])
def test_broken_cli_config_raises(tmp_path, content):
    path = tmp_path / "config.yml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        Settings.from_env(cli_config_path=str(path))
