"""
HTTP JSON-RPC client for Solana
Posts requests to configured endpoints in priority order with failover
"""

import asyncio
import itertools
from typing import Any, Dict, List, Optional

import aiohttp

from pumpcurve.config import RPCConfig, RPCEndpoint
from pumpcurve.errors import FetchError
from pumpcurve.logger import get_logger
from pumpcurve.metrics import LatencyTimer, get_metrics


logger = get_logger(__name__)


class RPCResponseError(FetchError):
    """The endpoint answered with a JSON-RPC error object or a non-object body"""

    def __init__(self, endpoint: str, error: Any):
        message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
        super().__init__(f"RPC error from {endpoint}: {message}")
        self.endpoint = endpoint
        self.error = error


class RPCClient:
    """
    JSON-RPC over HTTP with endpoint failover

    Endpoints are tried in priority order (0 = highest). Transport errors,
    timeouts and JSON-RPC error responses move on to the next attempt;
    FetchError is raised once every endpoint has failed.

    Usage:
        async with RPCClient(rpc_config) as rpc:
            response = await rpc.call_http_rpc("getSlot", [])
    """

    def __init__(self, config: RPCConfig):
        """
        Args:
            config: RPC configuration
        """
        if not config.endpoints:
            raise ValueError("RPCClient needs at least one endpoint")

        self.config = config
        self._endpoints = sorted(config.endpoints, key=lambda ep: ep.priority)
        self._http_session: Optional[aiohttp.ClientSession] = None
        self._request_ids = itertools.count(1)

        logger.info(
            "rpc_client_initialized",
            endpoint_count=len(self._endpoints),
            endpoints=[ep.label for ep in self._endpoints]
        )

    async def start(self) -> None:
        """Open the HTTP session"""
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
            logger.debug("rpc_client_started")

    async def stop(self) -> None:
        """Close the HTTP session"""
        if self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            logger.debug("rpc_client_stopped")

    async def __aenter__(self) -> "RPCClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def call_http_rpc(self, method: str, params: List[Any]) -> Dict[str, Any]:
        """
        Make a JSON-RPC call, failing over across endpoints

        Args:
            method: JSON-RPC method name
            params: Method parameters

        Returns:
            Full JSON-RPC response dict (containing "result")

        Raises:
            FetchError: If every endpoint fails
        """
        metrics = get_metrics()
        last_error: Optional[Exception] = None

        for endpoint in self._endpoints:
            for attempt in range(1, self.config.max_retries_per_endpoint + 1):
                payload = {
                    "jsonrpc": "2.0",
                    "id": next(self._request_ids),
                    "method": method,
                    "params": params,
                }

                try:
                    with LatencyTimer(metrics, "http_rpc_call", {"endpoint": endpoint.label, "method": method}):
                        response = await asyncio.wait_for(
                            self._post(endpoint, payload),
                            timeout=endpoint.timeout_ms / 1000
                        )

                    if not isinstance(response, dict):
                        raise RPCResponseError(endpoint.label, response)

                    if "error" in response:
                        raise RPCResponseError(endpoint.label, response["error"])

                    metrics.increment_counter("http_rpc_success", labels={"endpoint": endpoint.label})
                    return response

                except (aiohttp.ClientError, asyncio.TimeoutError, RPCResponseError, ValueError) as e:
                    logger.warning(
                        "http_rpc_call_failed",
                        endpoint=endpoint.label,
                        method=method,
                        attempt=attempt,
                        error=str(e) or type(e).__name__
                    )
                    metrics.increment_counter("http_rpc_errors", labels={"endpoint": endpoint.label})
                    last_error = e

        logger.error("http_rpc_all_endpoints_failed", method=method, error=str(last_error))
        raise FetchError(f"All HTTP RPC endpoints failed. Last error: {last_error}") from last_error

    async def _post(self, endpoint: RPCEndpoint, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send one JSON-RPC request and decode the JSON body"""
        if self._http_session is None:
            raise FetchError("HTTP session not initialized. Call start() first.")

        async with self._http_session.post(endpoint.url, json=payload) as response:
            response.raise_for_status()
            return await response.json()
