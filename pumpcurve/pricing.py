"""
Bonding Curve Pricing for Pump.fun
Constant product (x * y = k) quotes with exact integer math matching the on-chain program

Formulas (virtual reserves):
    tokens_out = virtual_token_reserves * sol_in / (virtual_sol_reserves + sol_in)
    sol_cost   = virtual_sol_reserves * tokens / (virtual_token_reserves - tokens) + 1
    sol_out    = virtual_sol_reserves * tokens_in / (virtual_token_reserves + tokens_in)

Fees:
    - buy by input: deducted from the SOL sent before the swap
    - buy by output: computed on the SOL cost and added on top
    - sell: computed on the SOL out and deducted from it

Every function here is pure. Amounts are u64; Python ints make the wide
intermediate products exact, and results are narrowed back to u64 after
division. Migrated or degenerate curves quote 0 instead of raising.

Usage:
    params = ProtocolParameters()
    tokens = tokens_for_sol(params, curve_state, 1_000_000_000)  # 1 SOL
    cost = sol_for_tokens(params, curve_state, tokens)
"""

from typing import Tuple

from pumpcurve.curve_state import CurveLike, CurveState, resolve_curve
from pumpcurve.fees import total_fee
from pumpcurve.params import U64_MAX, ProtocolParameters, require_u64


# Returned by sol_for_tokens when the request would drain the virtual token
# reserves; no finite SOL input achieves it. Compare against this constant
# rather than treating the value as a cost.
UNACHIEVABLE = U64_MAX


def tokens_for_sol(
    params: ProtocolParameters,
    curve: CurveLike,
    sol_amount: int
) -> int:
    """
    Tokens received for spending `sol_amount` lamports (buy)

    Args:
        params: Protocol parameters
        curve: Curve state, ExistingCurve/FreshCurve, or None for a fresh curve
        sol_amount: Lamports sent, fees included

    Returns:
        Token base units received, capped at the curve's real token reserves
    """
    require_u64(sol_amount, "sol_amount")
    if sol_amount == 0:
        return 0

    state, is_fresh = resolve_curve(params, curve)
    if state.is_migrated:
        return 0

    fee = total_fee(params, state, sol_amount, is_fresh)
    sol_after_fee = max(sol_amount - fee, 0)
    if sol_after_fee == 0:
        return 0

    tokens_out = (state.virtual_token_reserves * sol_after_fee) // (
        state.virtual_sol_reserves + sol_after_fee
    )

    return min(tokens_out, state.real_token_reserves)


def sol_for_tokens(
    params: ProtocolParameters,
    curve: CurveLike,
    token_amount: int
) -> int:
    """
    Lamports needed to buy exactly `token_amount` tokens, fees included

    The request is capped at the real token reserves. The swap cost is
    rounded up by one lamport so the quote never undercounts.

    Returns:
        Lamports to send, or UNACHIEVABLE when the request would take every
        virtual token. Saturates at u64 max.
    """
    require_u64(token_amount, "token_amount")
    if token_amount == 0:
        return 0

    state, is_fresh = resolve_curve(params, curve)
    if state.is_migrated:
        return 0

    capped_amount = min(token_amount, state.real_token_reserves)

    denominator = max(state.virtual_token_reserves - capped_amount, 0)
    if denominator == 0:
        return UNACHIEVABLE

    sol_cost = (state.virtual_sol_reserves * capped_amount) // denominator + 1
    sol_cost = min(sol_cost, U64_MAX)

    return min(sol_cost + total_fee(params, state, sol_cost, is_fresh), U64_MAX)


def sol_from_tokens(
    params: ProtocolParameters,
    curve: CurveLike,
    token_amount: int
) -> int:
    """
    Lamports received for selling `token_amount` tokens, after fees

    Returns 0 when either virtual reserve is empty.
    """
    require_u64(token_amount, "token_amount")
    if token_amount == 0:
        return 0

    state, is_fresh = resolve_curve(params, curve)
    if state.is_migrated or state.virtual_sol_reserves == 0:
        return 0

    sol_out = _gross_sol_out(state, token_amount)
    fee = total_fee(params, state, sol_out, is_fresh)
    return max(sol_out - fee, 0)


def gross_sell_quote(
    params: ProtocolParameters,
    curve_state: CurveState,
    token_amount: int
) -> Tuple[int, int]:
    """
    Sell quote on an existing curve that also reports the fee

    Same swap math as sol_from_tokens, but the curve is always treated as
    already created when applying the creator fee rule.

    Returns:
        (net_sol, fee) in lamports; (0, 0) for a zero amount or empty reserves
    """
    require_u64(token_amount, "token_amount")
    if token_amount == 0:
        return 0, 0
    if curve_state.is_migrated or curve_state.virtual_sol_reserves == 0:
        return 0, 0

    gross_sol = _gross_sol_out(curve_state, token_amount)
    fee = total_fee(params, curve_state, gross_sol, False)
    return max(gross_sol - fee, 0), fee


def _gross_sol_out(state: CurveState, token_amount: int) -> int:
    """SOL out of the swap before fees"""
    return (state.virtual_sol_reserves * token_amount) // (
        state.virtual_token_reserves + token_amount
    )
