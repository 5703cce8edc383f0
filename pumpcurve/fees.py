"""
Protocol and creator fees for bonding curve trades
"""

from pumpcurve.curve_state import CurveState
from pumpcurve.params import U64_MAX, ProtocolParameters


BPS_DENOMINATOR = 10_000


def basis_point_fee(amount: int, bps: int) -> int:
    """
    ceil(amount * bps / 10_000)

    Rounds up so a non-zero taxable amount never pays zero fee when bps > 0.
    The result saturates at u64 max.
    """
    fee = -(-(amount * bps) // BPS_DENOMINATOR)
    return min(fee, U64_MAX)


def total_fee(
    params: ProtocolParameters,
    curve_state: CurveState,
    amount: int,
    is_freshly_created: bool
) -> int:
    """
    Platform fee plus creator fee on `amount`

    The creator fee is charged on new curves and on existing curves that
    record a creator; older curves with the default creator key don't pay it.
    """
    fee = basis_point_fee(amount, params.fee_basis_points)
    if is_freshly_created or curve_state.has_creator:
        fee += basis_point_fee(amount, params.creator_fee_basis_points)
    return min(fee, U64_MAX)
