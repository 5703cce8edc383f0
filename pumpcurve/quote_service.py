"""
Quote Service
Fetches a mint's bonding curve and prices buys and sells against it
"""

from dataclasses import dataclass

from solders.pubkey import Pubkey

from pumpcurve.fees import total_fee
from pumpcurve.logger import get_logger
from pumpcurve.metrics import get_metrics
from pumpcurve.params import ProtocolParameters
from pumpcurve.pricing import UNACHIEVABLE, gross_sell_quote, sol_for_tokens, tokens_for_sol
from pumpcurve.pumpfun_client import BondingCurveClient


logger = get_logger(__name__)


@dataclass(frozen=True)
class BuyQuote:
    """Quote for buying tokens with SOL

    tokens_out: base token units received
    sol_after_fee: lamports that reach the curve
    fee: lamports paid in protocol and creator fees
    """
    tokens_out: int
    sol_after_fee: int
    fee: int


@dataclass(frozen=True)
class SellQuote:
    """Quote for selling tokens: lamports received after fees, and the fee paid"""
    sol_out: int
    fee: int


class QuoteService:
    """
    Prices trades against live bonding curve state

    Every quote fetches a fresh snapshot; nothing is cached, and the
    snapshot may be stale by the time a trade lands, so callers still need
    slippage bounds downstream.

    Usage:
        service = QuoteService(BondingCurveClient(rpc), ProtocolParameters())
        quote = await service.quote_buy(mint, 100_000_000)  # 0.1 SOL
    """

    def __init__(self, client: BondingCurveClient, params: ProtocolParameters):
        self.client = client
        self.params = params

    async def quote_buy(self, mint: Pubkey, sol_amount: int) -> BuyQuote:
        """
        Tokens received for spending `sol_amount` lamports on an existing curve

        Raises:
            FetchError, AccountNotFound, MalformedAccount: From the account read
        """
        state = await self.client.fetch_curve_state(mint)

        tokens_out = tokens_for_sol(self.params, state, sol_amount)
        fee = total_fee(self.params, state, sol_amount, False)
        sol_after_fee = max(sol_amount - fee, 0)

        logger.debug(
            "buy_quote_calculated",
            mint=str(mint),
            sol_in=sol_amount,
            tokens_out=tokens_out,
            fee_lamports=fee
        )
        get_metrics().increment_counter("bonding_curve_buy_quotes")

        return BuyQuote(tokens_out=tokens_out, sol_after_fee=sol_after_fee, fee=fee)

    async def quote_sell(self, mint: Pubkey, token_amount: int) -> SellQuote:
        """
        Lamports received, and fee paid, for selling `token_amount` tokens

        Raises:
            FetchError, AccountNotFound, MalformedAccount: From the account read
        """
        state = await self.client.fetch_curve_state(mint)

        sol_out, fee = gross_sell_quote(self.params, state, token_amount)

        logger.debug(
            "sell_quote_calculated",
            mint=str(mint),
            tokens_in=token_amount,
            sol_out=sol_out,
            fee_lamports=fee
        )
        get_metrics().increment_counter("bonding_curve_sell_quotes")

        return SellQuote(sol_out=sol_out, fee=fee)

    async def quote_buy_exact_tokens(self, mint: Pubkey, token_amount: int) -> int:
        """
        Lamports (fees included) needed to buy `token_amount` tokens

        Returns UNACHIEVABLE when the request would drain the curve.
        """
        state = await self.client.fetch_curve_state(mint)

        sol_needed = sol_for_tokens(self.params, state, token_amount)
        if sol_needed == UNACHIEVABLE:
            logger.warning(
                "buy_exact_tokens_unachievable",
                mint=str(mint),
                tokens_requested=token_amount,
                virtual_token_reserves=state.virtual_token_reserves
            )
        else:
            logger.debug(
                "buy_exact_tokens_quote_calculated",
                mint=str(mint),
                tokens_requested=token_amount,
                sol_needed=sol_needed
            )
        get_metrics().increment_counter("bonding_curve_buy_exact_quotes")

        return sol_needed
