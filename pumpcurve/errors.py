"""
Exception types raised by pumpcurve

Pricing functions never raise for in-range amounts; only decoding and
ledger access surface errors.
"""


class PumpCurveError(Exception):
    """Base class for pumpcurve errors"""


class MalformedAccount(PumpCurveError, ValueError):
    """Bonding curve account data is shorter than the fixed layout"""

    def __init__(self, length: int, expected: int):
        super().__init__(f"Bonding curve data too short: {length} bytes (need {expected})")
        self.length = length
        self.expected = expected


class FetchError(PumpCurveError):
    """Account data could not be fetched from any RPC endpoint"""


class AccountNotFound(FetchError):
    """The requested account does not exist on the ledger"""

    def __init__(self, address: str):
        super().__init__(f"Account not found: {address}")
        self.address = address


class InvalidAccountEncoding(PumpCurveError, ValueError):
    """Account data payload is not valid base64"""
