"""
pumpcurve - quotes for pump.fun constant-product bonding curves
"""

from pumpcurve.curve_state import (
    CurveState,
    ExistingCurve,
    FreshCurve,
    decode_curve_state,
    decode_curve_state_b64,
)
from pumpcurve.errors import (
    AccountNotFound,
    FetchError,
    InvalidAccountEncoding,
    MalformedAccount,
    PumpCurveError,
)
from pumpcurve.fees import basis_point_fee, total_fee
from pumpcurve.params import U64_MAX, ProtocolParameters
from pumpcurve.pricing import (
    UNACHIEVABLE,
    gross_sell_quote,
    sol_for_tokens,
    sol_from_tokens,
    tokens_for_sol,
)

__all__ = [
    "AccountNotFound",
    "CurveState",
    "ExistingCurve",
    "FetchError",
    "FreshCurve",
    "InvalidAccountEncoding",
    "MalformedAccount",
    "ProtocolParameters",
    "PumpCurveError",
    "U64_MAX",
    "UNACHIEVABLE",
    "basis_point_fee",
    "decode_curve_state",
    "decode_curve_state_b64",
    "gross_sell_quote",
    "sol_for_tokens",
    "sol_from_tokens",
    "tokens_for_sol",
    "total_fee",
]
