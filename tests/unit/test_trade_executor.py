"""TradeExecutor: quote pre-check, confirmation, authoritative re-read."""

import pytest

from src.lp_chain.application.reader import CurveStateReader
from src.lp_common.errors import (
    DegenerateTradeError,
    InternalError,
    MarketNotFoundError,
    MarketUnavailableError,
    NotConnectedError,
    TradeFailedError,
    ValidationError,
)
from src.lp_curve.domain.pricing import quote_buy
from src.lp_trade.application.executor import TradeExecutor
from tests.fakes import OTHER, OWNER, FakeChain, InMemoryMarketRepository, seed_market


def _executor(chain: FakeChain, market_repo: InMemoryMarketRepository) -> TradeExecutor:
    return TradeExecutor(chain, chain, CurveStateReader(chain), repo=market_repo)


class TestBuy:
    async def test_persists_reserves_read_back_from_chain(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)

        updated = await _executor(chain, market_repo).execute_buy(db, market.id, 100_000_000)

        on_chain = chain.reserves[market.amm_contract_ref]
        assert updated.real_reserve == on_chain.real_reserve == 98_000_000
        assert updated.token_reserve == on_chain.token_reserve
        assert market_repo.markets[market.id] == updated
        assert chain.submitted == ["buy"]
        db.commit.assert_awaited_once()

    async def test_front_run_is_reflected_not_the_quote(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        quoted = quote_buy(100_000_000, market.curve())
        chain.front_run_buy = 50_000_000

        updated = await _executor(chain, market_repo).execute_buy(db, market.id, 100_000_000)

        assert updated.real_reserve == 49_000_000 + 98_000_000
        assert updated.token_reserve != quoted.new_token_reserve
        assert updated.token_reserve == chain.reserves[market.amm_contract_ref].token_reserve

    async def test_reads_chain_before_and_after(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        await _executor(chain, market_repo).execute_buy(db, market.id, 1_000_000)
        assert chain.reserve_queries == 2

    async def test_invalid_amount_makes_no_external_call(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        with pytest.raises(ValidationError):
            await _executor(chain, market_repo).execute_buy(db, market.id, 0)
        assert chain.reserve_queries == 0
        assert chain.submitted == []

    async def test_unknown_market(self, db, chain, market_repo) -> None:
        with pytest.raises(MarketNotFoundError):
            await _executor(chain, market_repo).execute_buy(db, "ST1.none", 1_000_000)

    async def test_requires_wallet(self, db, market_repo) -> None:
        chain = FakeChain(address=None)
        market = seed_market(chain, market_repo)
        with pytest.raises(NotConnectedError):
            await _executor(chain, market_repo).execute_buy(db, market.id, 1_000_000)
        assert chain.submitted == []

    async def test_wallet_must_match_trader(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        with pytest.raises(NotConnectedError):
            await _executor(chain, market_repo).execute_buy(
                db, market.id, 1_000_000, trader_address=OTHER
            )
        assert chain.submitted == []

    async def test_matching_trader_is_accepted(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        await _executor(chain, market_repo).execute_buy(
            db, market.id, 1_000_000, trader_address=OWNER
        )
        assert chain.submitted == ["buy"]

    async def test_store_failure_after_confirmation(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)

        async def broken_save(db, market):  # type: ignore[no-untyped-def]
            raise RuntimeError("connection reset")

        market_repo.save_market = broken_save  # type: ignore[method-assign]

        with pytest.raises(InternalError):
            await _executor(chain, market_repo).execute_buy(db, market.id, 1_000_000)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        assert market_repo.markets[market.id] is market

    async def test_rejected_signature_leaves_market_untouched(
        self, db, chain, market_repo
    ) -> None:
        market = seed_market(chain, market_repo)
        chain.reject.add("buy")

        with pytest.raises(TradeFailedError) as exc_info:
            await _executor(chain, market_repo).execute_buy(db, market.id, 1_000_000)

        assert exc_info.value.cause == "User rejected the request"
        assert market_repo.markets[market.id] is market
        db.commit.assert_not_awaited()

    async def test_aborted_transaction_is_trade_failure(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        chain.abort.add("buy")

        with pytest.raises(TradeFailedError):
            await _executor(chain, market_repo).execute_buy(db, market.id, 1_000_000)

        assert market_repo.markets[market.id] is market

    async def test_missing_amm_is_unavailable(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo)
        del chain.reserves[market.amm_contract_ref]
        with pytest.raises(MarketUnavailableError):
            await _executor(chain, market_repo).execute_buy(db, market.id, 1_000_000)
        assert chain.submitted == []


class TestSell:
    async def test_sell_after_buy(self, db, chain, market_repo) -> None:
        market = seed_market(chain, market_repo, real_reserve=1_500_000_000,
                             token_reserve=45_000_000_000_000)

        updated = await _executor(chain, market_repo).execute_sell(
            db, market.id, 1_000_000_000
        )

        assert updated.token_reserve == 45_001_000_000_000
        assert updated.real_reserve < 1_500_000_000
        assert chain.submitted == ["sell"]

    async def test_degenerate_sell_rejected_before_submission(
        self, db, chain, market_repo
    ) -> None:
        market = seed_market(chain, market_repo, real_reserve=1_500_000_000,
                             token_reserve=45_000_000_000_000)
        with pytest.raises(DegenerateTradeError):
            await _executor(chain, market_repo).execute_sell(db, market.id, 1)
        assert chain.submitted == []
