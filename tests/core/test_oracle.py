"""Tests for transmuter/core/oracle.py: price selection for mints and burns."""

import pytest

from transmuter.core.errors import NotCollateral
from transmuter.core.math import BASE_18
from transmuter.core.oracle import StaticOracle, get_burn_oracle, get_mint_oracle, oracle_config_hash
from transmuter.core.setters import add_collateral
from transmuter.state.ledger import initial_state

EUR = b'{"peg":"EUR"}'
USD = b'{"peg":"USD"}'


def _state():
    s = initial_state("agEUR")
    s = add_collateral(s, "EUROC", 6, oracle_config=EUR, oracle_storage=b"euroc")
    s = add_collateral(s, "bERNX", 18, oracle_config=EUR, oracle_storage=b"bernx")
    s = add_collateral(s, "USDC", 6, oracle_config=USD, oracle_storage=b"usdc")
    return s


def _oracle(**deviations):
    return StaticOracle(
        prices={b"euroc": BASE_18, b"bernx": 2 * BASE_18, b"usdc": 9 * BASE_18 // 10},
        deviations={k.encode(): v for k, v in deviations.items()},
    )


def test_config_hash_is_stable() -> None:
    assert oracle_config_hash(EUR) == oracle_config_hash(bytes(EUR))
    assert oracle_config_hash(EUR) != oracle_config_hash(USD)


def test_mint_price_is_own_reading() -> None:
    assert get_mint_oracle(_state(), "bERNX", _oracle()) == 2 * BASE_18


def test_unregistered_asset_rejected() -> None:
    with pytest.raises(NotCollateral):
        get_mint_oracle(_state(), "DAI", _oracle())
    with pytest.raises(NotCollateral):
        get_burn_oracle(_state(), "DAI", _oracle())


class TestBurnOracle:
    def test_on_peg(self):
        assert get_burn_oracle(_state(), "EUROC", _oracle()) == (BASE_18, BASE_18)

    def test_depegged_peer_drags_deviation(self):
        price, deviation = get_burn_oracle(_state(), "EUROC", _oracle(bernx=9 * BASE_18 // 10))
        assert price == BASE_18
        assert deviation == 9 * BASE_18 // 10

    def test_unrelated_group_ignored(self):
        price, deviation = get_burn_oracle(_state(), "EUROC", _oracle(usdc=BASE_18 // 2))
        assert (price, deviation) == (BASE_18, BASE_18)

    def test_own_deviation_counts(self):
        _, deviation = get_burn_oracle(_state(), "bERNX", _oracle(bernx=95 * BASE_18 // 100))
        assert deviation == 95 * BASE_18 // 100

    def test_deviation_capped_at_one(self):
        _, deviation = get_burn_oracle(_state(), "EUROC", _oracle(euroc=2 * BASE_18))
        assert deviation == BASE_18

    def test_minimum_over_group(self):
        _, deviation = get_burn_oracle(
            _state(), "EUROC", _oracle(euroc=97 * BASE_18 // 100, bernx=93 * BASE_18 // 100)
        )
        assert deviation == 93 * BASE_18 // 100

    def test_failing_peer_read_aborts(self):
        class FailingPeer(StaticOracle):
            def read_burn(self, config, storage):
                if storage == b"bernx":
                    raise RuntimeError("feed down")
                return super().read_burn(config, storage)

        with pytest.raises(RuntimeError, match="feed down"):
            get_burn_oracle(_state(), "EUROC", FailingPeer(prices={b"euroc": BASE_18}))


def test_static_oracle_missing_price() -> None:
    with pytest.raises(KeyError):
        StaticOracle().read_mint(b"", b"nothing")


def test_static_oracle_separate_burn_price() -> None:
    oracle = StaticOracle(prices={b"a": BASE_18}, burn_prices={b"a": BASE_18 - 1})
    assert oracle.read_burn(b"", b"a") == (BASE_18 - 1, BASE_18)
