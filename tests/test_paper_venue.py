"""Paper venue tests: curve math, approvals and revert handling."""

import pytest

from core.helpers import from_base_units, to_base_units
from execution.order_utils import VenueError, deadline_from_now
from execution.paper_venue import PAPER_CURVE_ADDRESS, PaperVenue

WALLET = "0xwallet"


def _venue(**kwargs) -> PaperVenue:
    return PaperVenue.seeded_at_price(WALLET, 1e-8, **kwargs)


@pytest.mark.asyncio
async def test_seeded_spot_price():
    venue = _venue()
    assert venue.spot_price == pytest.approx(1e-8)
    assert venue.address == PAPER_CURVE_ADDRESS


@pytest.mark.asyncio
async def test_buy_moves_price_and_credits_wallet():
    venue = _venue()
    eth_in = to_base_units(0.1)
    quoted = await venue.simulate_buy(eth_in)

    tx = await venue.buy(eth_in, quoted, deadline_from_now(60))
    receipt = await venue.await_confirmation(tx)

    assert receipt.amount_out == quoted
    assert await venue.balance_of(WALLET) == quoted
    assert venue.spot_price > 1e-8
    # Small buy relative to reserves fills close to spot
    assert from_base_units(quoted) == pytest.approx(0.1 / 1e-8, rel=0.1)


@pytest.mark.asyncio
async def test_buy_then_sell_round_trip_loses_only_to_price_impact():
    venue = _venue()
    eth_in = to_base_units(0.1)
    tokens = (await venue.await_confirmation(
        await venue.buy(eth_in, 0, deadline_from_now(60)))).amount_out

    await venue.await_confirmation(await venue.approve(venue.address, tokens))
    quote = await venue.get_eth_for_tokens(tokens)
    receipt = await venue.await_confirmation(await venue.sell(tokens, quote, deadline_from_now(60)))

    assert receipt.amount_out == quote
    assert 0 < quote <= eth_in
    assert await venue.balance_of(WALLET) == 0
    assert await venue.allowance(WALLET, venue.address) == 0


@pytest.mark.asyncio
async def test_fee_reduces_output():
    no_fee = _venue()
    with_fee = _venue(fee_bps=100)
    eth_in = to_base_units(0.1)
    assert await with_fee.simulate_buy(eth_in) < await no_fee.simulate_buy(eth_in)


@pytest.mark.asyncio
async def test_sell_without_allowance_reverts():
    venue = _venue()
    tokens = (await venue.await_confirmation(
        await venue.buy(to_base_units(0.1), 0, deadline_from_now(60)))).amount_out

    tx = await venue.sell(tokens, 0, deadline_from_now(60))
    with pytest.raises(VenueError, match="allowance"):
        await venue.await_confirmation(tx)
    assert venue.transactions[-1]["reverted"]
    assert await venue.balance_of(WALLET) == tokens


@pytest.mark.asyncio
async def test_slippage_guard_reverts():
    venue = _venue()
    eth_in = to_base_units(0.1)
    quoted = await venue.simulate_buy(eth_in)
    tx = await venue.buy(eth_in, quoted + 1, deadline_from_now(60))
    with pytest.raises(VenueError, match="slippage"):
        await venue.await_confirmation(tx)


@pytest.mark.asyncio
async def test_expired_deadline_reverts():
    venue = _venue()
    tx = await venue.buy(to_base_units(0.1), 0, deadline_from_now(-10))
    with pytest.raises(VenueError, match="deadline"):
        await venue.await_confirmation(tx)


@pytest.mark.asyncio
async def test_graduated_curve_quotes_zero():
    venue = _venue()
    venue.graduated = True
    assert await venue.simulate_buy(to_base_units(0.1)) == 0


@pytest.mark.asyncio
async def test_wallet_eth_limit():
    venue = _venue(wallet_eth=0.05)
    tx = await venue.buy(to_base_units(0.1), 0, deadline_from_now(60))
    with pytest.raises(VenueError, match="insufficient ETH"):
        await venue.await_confirmation(tx)


@pytest.mark.asyncio
async def test_unknown_transaction():
    with pytest.raises(VenueError):
        await _venue().await_confirmation("0xdeadbeef")


def test_external_transfer_never_goes_negative():
    venue = _venue()
    venue.balances[WALLET] = 100
    venue.external_transfer(WALLET, 250)
    assert venue.balances[WALLET] == 0


def test_seeded_price_must_be_positive():
    with pytest.raises(ValueError):
        PaperVenue.seeded_at_price(WALLET, 0)
