"""Tests for the in-memory collaborators — allowances, caps, pools."""

import pytest

from eventfund.adapters.interfaces import CappedTokenEngine, PoolEngine, SettlementAsset
from eventfund.adapters.memory import (
    InMemoryPoolEngine,
    InMemorySettlementAsset,
    InMemoryTokenEngine,
    pseudo_address,
)
from eventfund.errors import CapExceeded, TransferFailed
from eventfund.models.liquidity import PoolKey

ESCROW = "escrow"


class TestProtocols:
    def test_in_memory_engines_satisfy_protocols(self) -> None:
        assert isinstance(InMemorySettlementAsset(ESCROW), SettlementAsset)
        assert isinstance(InMemoryTokenEngine(), CappedTokenEngine)
        assert isinstance(InMemoryPoolEngine(), PoolEngine)

    def test_pseudo_address_shape(self) -> None:
        addr = pseudo_address("seed")
        assert addr.startswith("0x") and len(addr) == 42
        assert addr == pseudo_address("seed")
        assert addr != pseudo_address("other")


class TestSettlementAsset:
    @pytest.fixture
    def asset(self) -> InMemorySettlementAsset:
        asset = InMemorySettlementAsset(ESCROW, decimals=6)
        asset.mint("alice", 1_000)
        return asset

    def test_pull_requires_allowance(self, asset) -> None:
        with pytest.raises(TransferFailed, match="allowance"):
            asset.transfer_from("alice", ESCROW, 100)
        asset.approve("alice", ESCROW, 100)
        asset.transfer_from("alice", ESCROW, 100)
        assert asset.balance_of(ESCROW) == 100
        assert asset.allowance("alice", ESCROW) == 0

    def test_operator_spends_own_funds(self, asset) -> None:
        asset.mint(ESCROW, 500)
        asset.transfer_from(ESCROW, "bob", 200)
        assert asset.balance_of("bob") == 200
        assert asset.balance_of(ESCROW) == 300

    def test_insufficient_balance(self, asset) -> None:
        asset.approve("alice", ESCROW, 5_000)
        with pytest.raises(TransferFailed, match="Insufficient balance") as exc_info:
            asset.transfer_from("alice", ESCROW, 5_000)
        assert exc_info.value.amount == 5_000
        assert asset.balance_of("alice") == 1_000

    def test_rejecting_recipient(self, asset) -> None:
        asset.mint(ESCROW, 500)
        asset.reject_transfers_to("bob")
        with pytest.raises(TransferFailed, match="rejected") as exc_info:
            asset.transfer_from(ESCROW, "bob", 100)
        assert exc_info.value.recipient == "bob"
        asset.accept_transfers_to("bob")
        asset.transfer_from(ESCROW, "bob", 100)
        assert asset.balance_of("bob") == 100

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount(self, asset, amount) -> None:
        with pytest.raises(TransferFailed):
            asset.transfer_from(ESCROW, "bob", amount)


class TestTokenEngine:
    @pytest.fixture
    def engine(self) -> InMemoryTokenEngine:
        return InMemoryTokenEngine()

    def test_deploy_distinct_ids(self, engine) -> None:
        a = engine.deploy("Fest", "FEST", 18)
        b = engine.deploy("Fest", "FEST", 18)
        assert a != b
        assert engine.total_supply(a) == 0
        assert engine.cap(a) is None

    def test_cap_enforced_after_set(self, engine) -> None:
        token = engine.deploy("Fest", "FEST", 18)
        engine.mint(token, "alice", 100)
        engine.set_cap(token, 150)
        engine.mint(token, "bob", 50)
        with pytest.raises(CapExceeded):
            engine.mint(token, "bob", 1)
        assert engine.total_supply(token) == 150

    def test_cap_set_once(self, engine) -> None:
        token = engine.deploy("Fest", "FEST", 18)
        engine.set_cap(token, 10)
        with pytest.raises(ValueError, match="already set"):
            engine.set_cap(token, 20)

    def test_cap_below_supply_rejected(self, engine) -> None:
        token = engine.deploy("Fest", "FEST", 18)
        engine.mint(token, "alice", 100)
        with pytest.raises(ValueError, match="below current supply"):
            engine.set_cap(token, 99)

    def test_unknown_token(self, engine) -> None:
        with pytest.raises(ValueError, match="Unknown token"):
            engine.total_supply("0xmissing")


class TestPoolEngine:
    def test_pool_lifecycle(self) -> None:
        pools = InMemoryPoolEngine()
        key = PoolKey("0x" + "11" * 20, "0x" + "22" * 20, 3000, 60, "0x" + "44" * 20)
        pool_id = pools.create_pool(key.currency1, key.currency0, -120, key)
        assert pool_id == key.pool_id
        assert pools.pool_account(pool_id) == pool_id

        pools.add_full_range_liquidity(pool_id, 1_000, 20)
        pool = pools.get_pool(pool_id)
        assert (pool.base_reserve, pool.quote_reserve) == (1_000, 20)
        assert not pool.token_is_currency0

    def test_unknown_pool(self) -> None:
        with pytest.raises(ValueError, match="Unknown pool"):
            InMemoryPoolEngine().pool_account("pool_missing")

    def test_pool_id_is_case_insensitive(self) -> None:
        a = PoolKey("0x" + "ab" * 20, "0x" + "cd" * 20, 3000, 60, "0x" + "44" * 20)
        b = PoolKey("0x" + "AB" * 20, "0x" + "CD" * 20, 3000, 60, "0x" + "44" * 20)
        assert a.pool_id == b.pool_id
