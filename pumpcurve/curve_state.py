"""
Bonding curve account state and its on-chain layout

Account layout (little-endian):
    [0, 8)    discriminator (ignored)
    [8, 16)   virtual_token_reserves   u64
    [16, 24)  virtual_sol_reserves     u64
    [24, 32)  real_token_reserves      u64
    [32, 40)  real_sol_reserves        u64
    [40, 48)  token_total_supply       u64
    [48]      complete                 bool (non-zero = true)
    [49, 81)  creator                  32-byte pubkey
"""

import base64
import struct
from dataclasses import dataclass, field, fields
from typing import Union

from solders.pubkey import Pubkey

from pumpcurve.errors import InvalidAccountEncoding, MalformedAccount
from pumpcurve.params import ProtocolParameters, require_u64


DISCRIMINATOR_SIZE = 8
RESERVES_OFFSET = 8
COMPLETE_OFFSET = 48
CREATOR_OFFSET = 49
CREATOR_SIZE = 32
BONDING_CURVE_ACCOUNT_SIZE = CREATOR_OFFSET + CREATOR_SIZE  # 81

# virtual_token, virtual_sol, real_token, real_sol, token_total_supply
_RESERVES = struct.Struct("<5Q")

DEFAULT_CREATOR = Pubkey.default()


@dataclass(frozen=True)
class CurveState:
    """Snapshot of a bonding curve account

    Token values are base token units (6 decimals), SOL values are lamports.
    `complete` is informational: pricing only looks at reserves.
    """
    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    real_sol_reserves: int
    token_total_supply: int
    complete: bool = False
    creator: Pubkey = field(default_factory=Pubkey.default)

    def __post_init__(self):
        for f in fields(self):
            if f.name not in ("complete", "creator"):
                require_u64(getattr(self, f.name), f.name)

    @classmethod
    def fresh(cls, params: ProtocolParameters) -> "CurveState":
        """State of a curve that has just been created, before any trade"""
        return cls(
            virtual_token_reserves=params.initial_virtual_token_reserves,
            virtual_sol_reserves=params.initial_virtual_sol_reserves,
            real_token_reserves=params.initial_real_token_reserves,
            real_sol_reserves=0,
            token_total_supply=params.token_total_supply,
            complete=False,
            creator=DEFAULT_CREATOR,
        )

    @property
    def is_migrated(self) -> bool:
        """No virtual token reserves left, so the curve can't be priced here"""
        return self.virtual_token_reserves == 0

    @property
    def has_creator(self) -> bool:
        return self.creator != DEFAULT_CREATOR


@dataclass(frozen=True)
class ExistingCurve:
    """A curve whose state was read from the ledger"""
    state: CurveState


@dataclass(frozen=True)
class FreshCurve:
    """A curve that does not exist yet; priced from protocol defaults"""


Curve = Union[ExistingCurve, FreshCurve]
CurveLike = Union[ExistingCurve, FreshCurve, CurveState, None]


def as_curve(curve: CurveLike) -> Curve:
    """
    Normalize the accepted curve arguments

    A bare CurveState means an existing curve, None means a fresh one.
    """
    if curve is None:
        return FreshCurve()
    if isinstance(curve, CurveState):
        return ExistingCurve(curve)
    if isinstance(curve, (ExistingCurve, FreshCurve)):
        return curve
    raise TypeError(f"Unsupported curve argument: {type(curve).__name__}")


def resolve_curve(params: ProtocolParameters, curve: CurveLike) -> tuple[CurveState, bool]:
    """Return (state, is_freshly_created) for a curve argument"""
    curve = as_curve(curve)
    if isinstance(curve, FreshCurve):
        return CurveState.fresh(params), True
    return curve.state, False


def decode_curve_state(data: bytes) -> CurveState:
    """
    Decode a bonding curve account

    Args:
        data: Raw account data; bytes past the fixed layout are ignored

    Returns:
        Decoded CurveState

    Raises:
        MalformedAccount: If data is shorter than 81 bytes
    """
    if len(data) < BONDING_CURVE_ACCOUNT_SIZE:
        raise MalformedAccount(len(data), BONDING_CURVE_ACCOUNT_SIZE)

    (
        virtual_token_reserves,
        virtual_sol_reserves,
        real_token_reserves,
        real_sol_reserves,
        token_total_supply,
    ) = _RESERVES.unpack_from(data, RESERVES_OFFSET)

    return CurveState(
        virtual_token_reserves=virtual_token_reserves,
        virtual_sol_reserves=virtual_sol_reserves,
        real_token_reserves=real_token_reserves,
        real_sol_reserves=real_sol_reserves,
        token_total_supply=token_total_supply,
        complete=data[COMPLETE_OFFSET] != 0,
        creator=Pubkey.from_bytes(bytes(data[CREATOR_OFFSET:BONDING_CURVE_ACCOUNT_SIZE])),
    )


def decode_curve_state_b64(data_b64: str) -> CurveState:
    """
    Decode the base64 payload returned by getAccountInfo

    Raises:
        InvalidAccountEncoding: If data_b64 is not valid base64
        MalformedAccount: If the decoded data is shorter than 81 bytes
    """
    try:
        data = base64.b64decode(data_b64, validate=True)
    except ValueError as e:
        raise InvalidAccountEncoding(f"Bonding curve data is not valid base64: {e}") from e
    return decode_curve_state(data)
