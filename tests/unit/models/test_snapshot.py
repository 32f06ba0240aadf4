"""Tests for the pool snapshot models."""

import json

import pydantic
import pytest

from tests.helpers import E18, PRICE_ONE, make_crossing_pool
from v3sim.constants import UINT128_MAX, UINT160_MAX
from v3sim.errors import TickNotLoaded
from v3sim.models import PoolSnapshotModel, TickInfoModel, parse_int, parse_pool_snapshot
from v3sim.pool import TickInfo


class TestParseInt:
    """Tests for parse_int."""

    @pytest.mark.parametrize(
        "value,expected",
        [(5, 5), ("5", 5), (" -12 ", -12), ("0x10", 16), ("0XFF", 255), ("-0x10", -16)],
    )
    def test_accepted_forms(self, value, expected):
        assert parse_int(value) == expected

    @pytest.mark.parametrize("value", [True, 1.5, None, "abc", "0xZZ", ""])
    def test_rejected_forms(self, value):
        with pytest.raises(ValueError):
            parse_int(value)


class TestTickInfoModel:
    """Tests for TickInfoModel."""

    def test_camel_case_aliases(self):
        model = TickInfoModel.model_validate({"liquidityGross": "10", "liquidityNet": "-10"})
        assert model.to_tick_info() == TickInfo(liquidity_gross=10, liquidity_net=-10, initialized=True)

    def test_snake_case_names(self):
        model = TickInfoModel(liquidity_gross=10, liquidity_net=4)
        assert model.liquidity_net == 4

    def test_contradictory_initialized_flag_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            TickInfoModel.model_validate(
                {"liquidityGross": "0", "liquidityNet": "0", "initialized": True}
            )

    def test_net_larger_than_gross_rejected(self):
        """No set of positions produces |net| > gross."""
        with pytest.raises(pydantic.ValidationError):
            TickInfoModel.model_validate({"liquidityGross": "1", "liquidityNet": "-2"})

    def test_gross_beyond_uint128_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            TickInfoModel.model_validate(
                {"liquidityGross": str(UINT128_MAX + 1), "liquidityNet": "0"}
            )


class TestPoolSnapshotModel:
    """Tests for PoolSnapshotModel and parse_pool_snapshot."""

    def test_crossing_pool_fixture(self, load_pool):
        """The JSON fixture matches the builder's pool."""
        snapshot = load_pool("crossing_pool")
        expected = make_crossing_pool()
        assert snapshot.sqrt_price_x96 == expected.sqrt_price_x96
        assert snapshot.liquidity == 5 * E18
        assert dict(snapshot.ticks) == dict(expected.ticks)
        assert dict(snapshot.tick_bitmap) == dict(expected.tick_bitmap)
        assert snapshot.is_tick_loaded(-887272)

    def test_windowed_pool_fixture(self, load_pool):
        """Hex values, explicit bitmap and windows are honoured."""
        snapshot = load_pool("windowed_pool")
        assert snapshot.sqrt_price_x96 == PRICE_ONE
        assert snapshot.tick_bitmap == {-1: 1 << 246, 0: 1 << 10}
        assert snapshot.tick_windows == ((-1200, 1200),)
        assert snapshot.word_windows == ((-1, 0),)
        with pytest.raises(TickNotLoaded):
            snapshot.tick_info(1260)

    def test_derived_bitmap_matches_explicit(self, fixtures_dir):
        """Dropping tickBitmap derives the same words from the ticks."""
        data = json.loads((fixtures_dir / "pools" / "windowed_pool.json").read_text())
        explicit = parse_pool_snapshot(data)
        del data["tickBitmap"]
        derived = parse_pool_snapshot(data)
        assert dict(derived.tick_bitmap) == dict(explicit.tick_bitmap)

    def test_parse_from_json_text(self):
        text = json.dumps(
            {"sqrtPriceX96": str(PRICE_ONE), "tick": 0, "liquidity": "0", "fee": 500, "tickSpacing": 10}
        )
        snapshot = parse_pool_snapshot(text)
        assert snapshot.fee == 500
        assert snapshot.ticks == {}

    def test_snake_case_names(self):
        model = PoolSnapshotModel(
            sqrt_price_x96=PRICE_ONE, tick=0, liquidity=0, fee=3000, tick_spacing=60
        )
        assert model.to_snapshot().tick_spacing == 60

    def test_empty_windows_mean_nothing_loaded(self):
        snapshot = parse_pool_snapshot(
            {
                "sqrtPriceX96": str(PRICE_ONE),
                "tick": 0,
                "liquidity": "0",
                "fee": 3000,
                "tickSpacing": 60,
                "tickWindows": [],
                "wordWindows": [],
            }
        )
        assert not snapshot.is_tick_loaded(0)
        assert not snapshot.is_word_loaded(0)

    @pytest.mark.parametrize(
        "override",
        [
            {"sqrtPriceX96": str(UINT160_MAX + 1)},
            {"tick": 887273},
            {"fee": 1_000_000},
            {"tickSpacing": 0},
            {"liquidity": "-1"},
            {"ticks": {"30": {"liquidityGross": "1", "liquidityNet": "1"}}},
            {"ticks": {"60": {"liquidityGross": "0", "liquidityNet": "0"}}},
        ],
    )
    def test_invalid_data_rejected(self, override):
        data = {
            "sqrtPriceX96": str(PRICE_ONE),
            "tick": 0,
            "liquidity": "0",
            "fee": 3000,
            "tickSpacing": 60,
        }
        data.update(override)
        with pytest.raises(pydantic.ValidationError):
            parse_pool_snapshot(data)
