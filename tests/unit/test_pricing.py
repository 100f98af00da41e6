"""Unit tests for the constant-product quote functions."""

from fractions import Fraction

import pytest

from src.lp_common.errors import (
    DegenerateTradeError,
    InsufficientLiquidityError,
    ValidationError,
)
from src.lp_curve.domain.constants import (
    INITIAL_ALLOCATION,
    TARGET_RESERVE,
    VIRTUAL_RESERVE,
)
from src.lp_curve.domain.models import CurveState
from src.lp_curve.domain.pricing import quote_buy, quote_sell, validate_trade_amount

REF = "ST1OWNER.mat-dex"


def _state(real: int = 1_500_000_000, tokens: int = 45_000_000_000_000) -> CurveState:
    return CurveState(REF, real, VIRTUAL_RESERVE, tokens, TARGET_RESERVE)


def _fresh() -> CurveState:
    return _state(real=0, tokens=INITIAL_ALLOCATION)


class TestQuoteBuy:
    def test_reference_scenario(self) -> None:
        q = quote_buy(100_000_000, _state())
        assert q.fee_amount == 2_000_000
        total_after = 1_500_000_000 + 600_000_000 + 98_000_000
        expected_new_tokens = (45_000_000_000_000 * 2_100_000_000) // total_after
        assert q.new_token_reserve == expected_new_tokens
        assert q.output_amount == 45_000_000_000_000 - expected_new_tokens
        assert q.new_real_reserve == 1_598_000_000
        assert q.resulting_price == Fraction(total_after, expected_new_tokens)

    def test_fee_is_floored(self) -> None:
        q = quote_buy(49, _fresh())
        assert q.fee_amount == 0
        q = quote_buy(50, _fresh())
        assert q.fee_amount == 1

    def test_price_strictly_increases(self) -> None:
        state = _fresh()
        q = quote_buy(10_000_000, state)
        assert q.resulting_price > state.price

    def test_larger_input_never_yields_fewer_tokens(self) -> None:
        state = _fresh()
        outputs = [quote_buy(a, state).output_amount for a in range(1_000_000, 50_000_001, 7_000_000)]
        assert outputs == sorted(outputs)

    @pytest.mark.parametrize(
        ("state", "start"),
        [(_fresh(), 1), (_state(), 1), (_state(), 99_999_000), (_fresh(), 2_999_999_000)],
    )
    def test_adjacent_inputs_never_yield_fewer_tokens(
        self, state: CurveState, start: int
    ) -> None:
        # step of 1 crosses every fee-floor boundary (each multiple of 50)
        outputs = [quote_buy(a, state).output_amount for a in range(start, start + 2_000)]
        assert all(lo <= hi for lo, hi in zip(outputs, outputs[1:]))

    @pytest.mark.parametrize("amount", [1_000, 1_000_000, 250_000_000, 2_999_000_000])
    def test_k_preserved_within_one_unit(self, amount: int) -> None:
        state = _fresh()
        q = quote_buy(amount, state)
        total_after = q.new_real_reserve + state.virtual_reserve
        assert q.new_token_reserve * total_after <= state.k
        assert state.k < (q.new_token_reserve + 1) * total_after

    def test_empty_pool_rejected(self) -> None:
        with pytest.raises(InsufficientLiquidityError):
            quote_buy(1_000_000, _state(real=3_000_000_000, tokens=0))

    def test_buy_that_would_drain_pool_rejected(self) -> None:
        tiny = CurveState(REF, 0, 600, 1, 3_000)
        with pytest.raises(InsufficientLiquidityError):
            quote_buy(10_000, tiny)

    @pytest.mark.parametrize("bad", [0, -1, True, 1.5, "100"])
    def test_invalid_amount(self, bad: object) -> None:
        with pytest.raises(ValidationError):
            quote_buy(bad, _fresh())  # type: ignore[arg-type]


class TestQuoteSell:
    def test_fee_taken_from_gross_output(self) -> None:
        state = _state()
        q = quote_sell(1_000_000_000, state)
        k = state.k
        new_total = k // (state.token_reserve + 1_000_000_000)
        gross = state.total_base - new_total - 1
        assert q.fee_amount == gross * 200 // 10_000
        assert q.output_amount == gross - q.fee_amount
        assert q.new_real_reserve == state.real_reserve - gross

    def test_price_strictly_decreases(self) -> None:
        state = _state()
        q = quote_sell(1_000_000_000, state)
        assert q.resulting_price < state.price

    def test_k_preserved_within_one_unit(self) -> None:
        state = _state()
        q = quote_sell(5_000_000_000, state)
        new_total = state.k // q.new_token_reserve
        assert new_total * q.new_token_reserve <= state.k
        assert state.k < (new_total + 1) * q.new_token_reserve

    @pytest.mark.parametrize("start", [1_000_000, 7_654_321, 1_000_000_000])
    def test_adjacent_inputs_never_yield_less_base(self, start: int) -> None:
        state = _state()
        outputs = [quote_sell(a, state).output_amount for a in range(start, start + 2_000)]
        assert all(lo <= hi for lo, hi in zip(outputs, outputs[1:]))

    def test_dust_sell_is_degenerate(self) -> None:
        with pytest.raises(DegenerateTradeError):
            quote_sell(1, _state())

    def test_sell_beyond_raised_reserve_rejected(self) -> None:
        with pytest.raises(InsufficientLiquidityError):
            quote_sell(1_000_000_000_000, _fresh())

    def test_invalid_amount(self) -> None:
        with pytest.raises(ValidationError):
            quote_sell(0, _state())


class TestRoundTrip:
    @pytest.mark.parametrize("amount", [10_000_000, 100_000_000, 1_000_000_000])
    def test_buy_then_sell_never_returns_more_than_paid(self, amount: int) -> None:
        state = _state()
        bought = quote_buy(amount, state)
        after_buy = CurveState(
            REF, bought.new_real_reserve, VIRTUAL_RESERVE,
            bought.new_token_reserve, TARGET_RESERVE,
        )
        sold = quote_sell(bought.output_amount, after_buy)
        assert sold.output_amount <= amount


class TestValidateTradeAmount:
    def test_accepts_positive_int(self) -> None:
        validate_trade_amount(1)

    def test_message_names_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_trade_amount(-5, "token_amount_in")
        assert "token_amount_in" in exc_info.value.message
