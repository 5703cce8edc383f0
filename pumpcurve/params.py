"""
Protocol parameters for the pump.fun bonding curve

Built once at startup (defaults or config file) and passed explicitly to
every pricing call.
"""

from dataclasses import dataclass, fields


U64_MAX = 2**64 - 1

# Global account values for a freshly created curve
INITIAL_VIRTUAL_TOKEN_RESERVES = 1_073_000_000_000_000  # 1.073B tokens (6 decimals)
INITIAL_VIRTUAL_SOL_RESERVES = 30_000_000_000  # 30 SOL in lamports
INITIAL_REAL_TOKEN_RESERVES = 793_100_000_000_000  # 793.1M tokens (6 decimals)
TOKEN_TOTAL_SUPPLY = 1_000_000_000_000_000  # 1B tokens (6 decimals)
FEE_BASIS_POINTS = 100  # 1%
CREATOR_FEE_BASIS_POINTS = 100  # 1%


def require_u64(value: int, name: str) -> int:
    """Return value unchanged if it fits in an unsigned 64-bit integer, else raise ValueError"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"{name} out of u64 range: {value}")
    return value


@dataclass(frozen=True)
class ProtocolParameters:
    """AMM configuration shared by every curve of the program

    All values are unsigned 64-bit. Basis points: 1 unit = 0.01%.
    """
    initial_virtual_token_reserves: int = INITIAL_VIRTUAL_TOKEN_RESERVES
    initial_virtual_sol_reserves: int = INITIAL_VIRTUAL_SOL_RESERVES
    initial_real_token_reserves: int = INITIAL_REAL_TOKEN_RESERVES
    token_total_supply: int = TOKEN_TOTAL_SUPPLY
    fee_basis_points: int = FEE_BASIS_POINTS
    creator_fee_basis_points: int = CREATOR_FEE_BASIS_POINTS

    def __post_init__(self):
        for field in fields(self):
            require_u64(getattr(self, field.name), field.name)

    @classmethod
    def from_dict(cls, data: dict) -> "ProtocolParameters":
        """
        Build parameters from a mapping, keeping defaults for missing keys

        Raises:
            ValueError: On unknown keys or out-of-range values
        """
        known = {field.name for field in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown protocol parameters: {', '.join(sorted(unknown))}")
        return cls(**data)
