"""Tests for ParamsResolver, chain settings, and the parameter checker."""

import json
import os
import sys
import pytest
from decimal import Decimal
from pathlib import Path

from eventfund.policy.params import PARAMS_FILENAME, ParamsResolver, chain_settings

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
TOOLS_DIR = Path(__file__).resolve().parents[1] / "tools"

CHAIN_VARS = (
    "EVENTFUND_RPC_URL",
    "EVENTFUND_PRIVATE_KEY",
    "EVENTFUND_TOKEN_ADDRESS",
    "EVENTFUND_CHAIN_ID",
)


@pytest.fixture
def resolver():
    return ParamsResolver.from_config_dir(CONFIG_DIR)


@pytest.fixture
def clean_env(monkeypatch):
    for name in CHAIN_VARS:
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
    # load_dotenv writes os.environ directly
    for name in CHAIN_VARS:
        os.environ.pop(name, None)


class TestResolver:
    def test_funding_params(self, resolver) -> None:
        f = resolver.funding_params()
        assert f.deposit_ratio == Decimal("0.10")
        assert f.max_raise_ratio == Decimal("1.20")
        assert f.event_token_decimals == 18
        assert f.min_duration_days == 1
        assert f.max_duration_days == 365
        assert f.protocol_treasury != f.escrow_account

    def test_liquidity_params(self, resolver) -> None:
        p = resolver.liquidity_params()
        assert p.pool_price_ratio == Decimal("1.2")
        assert p.tick_spacing == 60
        assert p.base_fee_pips == 3000

    def test_dynamic_fee_params(self, resolver) -> None:
        d = resolver.dynamic_fee_params()
        assert d.buy_fee_adjustment_pips < 0 < d.sell_fee_adjustment_pips
        assert d.max_fee_pips == 1_000_000

    def test_missing_config_dir(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            ParamsResolver.from_config_dir(tmp_path)

    def test_duration_defaults(self, resolver) -> None:
        raw = json.loads(json.dumps(resolver.raw))
        del raw["funding"]["min_duration_days"]
        del raw["funding"]["max_duration_days"]
        f = ParamsResolver(raw).funding_params()
        assert (f.min_duration_days, f.max_duration_days) == (1, 365)


class TestChainSettings:
    def test_from_env_file(self, tmp_path, clean_env) -> None:
        env = tmp_path / ".env"
        env.write_text(
            "EVENTFUND_RPC_URL=http://localhost:8545\n"
            "EVENTFUND_PRIVATE_KEY=0x" + "ab" * 32 + "\n"
            "EVENTFUND_TOKEN_ADDRESS=0x" + "55" * 20 + "\n",
            encoding="utf-8",
        )
        settings = chain_settings(env)
        assert settings.rpc_url == "http://localhost:8545"
        assert settings.token_address == "0x" + "55" * 20
        assert settings.chain_id == 84532

    def test_chain_id_override(self, clean_env) -> None:
        clean_env.setenv("EVENTFUND_RPC_URL", "http://rpc")
        clean_env.setenv("EVENTFUND_PRIVATE_KEY", "0x" + "01" * 32)
        clean_env.setenv("EVENTFUND_TOKEN_ADDRESS", "0x" + "55" * 20)
        clean_env.setenv("EVENTFUND_CHAIN_ID", "8453")
        assert chain_settings(Path("/nonexistent/.env")).chain_id == 8453

    def test_missing_values_reported(self, clean_env) -> None:
        clean_env.setenv("EVENTFUND_RPC_URL", "http://rpc")
        with pytest.raises(ValueError) as exc_info:
            chain_settings(Path("/nonexistent/.env"))
        message = str(exc_info.value)
        assert "EVENTFUND_PRIVATE_KEY" in message
        assert "EVENTFUND_TOKEN_ADDRESS" in message
        assert "EVENTFUND_RPC_URL" not in message


class TestCheckParams:
    @pytest.fixture
    def check(self):
        sys.path.insert(0, str(TOOLS_DIR))
        from check_params import check
        return check

    def _write(self, tmp_path, mutate) -> Path:
        params = json.loads((CONFIG_DIR / PARAMS_FILENAME).read_text(encoding="utf-8"))
        mutate(params)
        path = tmp_path / PARAMS_FILENAME
        path.write_text(json.dumps(params), encoding="utf-8")
        return path

    def test_shipped_params_pass(self, check) -> None:
        assert check(CONFIG_DIR / PARAMS_FILENAME) == 0

    def test_positive_buy_adjustment_fails(self, check, tmp_path, capsys) -> None:
        path = self._write(tmp_path, lambda p: p["dynamic_fee"].update(buy_fee_adjustment_pips=5))
        assert check(path) == 1
        assert "buy_fee_adjustment_pips must be negative" in capsys.readouterr().out

    def test_float_ratio_fails(self, check, tmp_path, capsys) -> None:
        path = self._write(tmp_path, lambda p: p["funding"].update(deposit_ratio=0.1))
        assert check(path) == 1
        assert "decimal string" in capsys.readouterr().out

    def test_max_raise_below_one_fails(self, check, tmp_path) -> None:
        path = self._write(tmp_path, lambda p: p["funding"].update(max_raise_ratio="0.9"))
        assert check(path) == 1

    def test_missing_section_fails(self, check, tmp_path) -> None:
        path = self._write(tmp_path, lambda p: p.pop("liquidity"))
        assert check(path) == 1
