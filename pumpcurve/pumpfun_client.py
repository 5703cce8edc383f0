"""
Pump.fun Bonding Curve Client
Derives bonding curve addresses and fetches their account state over RPC
"""

import base64
from typing import Dict, Optional, Tuple

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from pumpcurve.config import PUMP_FUN_PROGRAM_ID_STR
from pumpcurve.curve_state import CurveState, decode_curve_state
from pumpcurve.errors import AccountNotFound, FetchError, MalformedAccount
from pumpcurve.logger import get_logger
from pumpcurve.metrics import get_metrics
from pumpcurve.rpc_client import RPCClient


logger = get_logger(__name__)


PUMP_FUN_PROGRAM_ID = Pubkey.from_string(PUMP_FUN_PROGRAM_ID_STR)

BONDING_CURVE_SEED = b"bonding-curve"


def derive_bonding_curve_pda(mint: Pubkey, program_id: Pubkey = PUMP_FUN_PROGRAM_ID) -> Tuple[Pubkey, int]:
    """
    Derive the bonding curve PDA for a mint

    Seeds: ["bonding-curve", mint]

    Returns:
        (bonding_curve_pda, bump)
    """
    return Pubkey.find_program_address([BONDING_CURVE_SEED, bytes(mint)], program_id)


def derive_associated_bonding_curve(bonding_curve: Pubkey, mint: Pubkey) -> Pubkey:
    """Token account holding the curve's real token reserves"""
    return get_associated_token_address(bonding_curve, mint)


class BondingCurveClient:
    """
    Reads bonding curve accounts from the ledger

    Features:
    - Bonding curve PDA derivation (cached per mint)
    - Raw account fetch via getAccountInfo (base64)
    - Decoding into CurveState

    Usage:
        async with RPCClient(rpc_config) as rpc:
            client = BondingCurveClient(rpc)
            state = await client.fetch_curve_state(mint)
    """

    def __init__(self, rpc_client: RPCClient, program_id: Optional[Pubkey] = None):
        """
        Args:
            rpc_client: RPC client used for account reads
            program_id: Pump.fun program id (defaults to mainnet)
        """
        self.rpc_client = rpc_client
        self.program_id = program_id or PUMP_FUN_PROGRAM_ID

        # mint -> bonding curve PDA
        self._pda_cache: Dict[Pubkey, Pubkey] = {}

        logger.info("bonding_curve_client_initialized", program_id=str(self.program_id))

    def derive_bonding_curve_pda(self, mint: Pubkey) -> Pubkey:
        """Bonding curve address for a mint (cached)"""
        if mint in self._pda_cache:
            return self._pda_cache[mint]

        pda, bump = derive_bonding_curve_pda(mint, self.program_id)
        self._pda_cache[mint] = pda

        logger.debug(
            "bonding_curve_pda_derived",
            mint=str(mint),
            pda=str(pda),
            bump=bump
        )

        return pda

    def clear_pda_cache(self) -> None:
        self._pda_cache.clear()

    async def fetch_account_data(self, address: Pubkey) -> bytes:
        """
        Fetch raw account data

        Args:
            address: Account address

        Returns:
            Account data bytes

        Raises:
            AccountNotFound: If the account does not exist
            FetchError: On transport failure or an unexpected response shape
        """
        response = await self.rpc_client.call_http_rpc(
            "getAccountInfo",
            [str(address), {"encoding": "base64"}]
        )

        result = response.get("result") or {}
        value = result.get("value")
        if not value:
            raise AccountNotFound(str(address))

        try:
            data_b64 = value["data"][0]
            return base64.b64decode(data_b64)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise FetchError(f"Unexpected account data for {address}: {e}") from e

    async def fetch_curve_state(self, mint: Pubkey) -> CurveState:
        """
        Fetch and decode the bonding curve of a mint

        Raises:
            AccountNotFound: If the curve account doesn't exist
            FetchError: If the RPC read fails
            MalformedAccount: If the account data is too short
        """
        metrics = get_metrics()
        bonding_curve = self.derive_bonding_curve_pda(mint)

        try:
            data = await self.fetch_account_data(bonding_curve)
        except AccountNotFound:
            logger.warning("bonding_curve_not_found", mint=str(mint), pda=str(bonding_curve))
            metrics.increment_counter("bonding_curve_not_found")
            raise

        try:
            state = decode_curve_state(data)
        except MalformedAccount as e:
            logger.error("bonding_curve_data_too_short", mint=str(mint), data_length=e.length)
            metrics.increment_counter("bonding_curve_decode_errors")
            raise

        logger.debug(
            "bonding_curve_fetched",
            mint=str(mint),
            virtual_token_reserves=state.virtual_token_reserves,
            virtual_sol_reserves=state.virtual_sol_reserves,
            real_token_reserves=state.real_token_reserves,
            complete=state.complete
        )
        metrics.increment_counter("bonding_curve_fetches")

        return state
