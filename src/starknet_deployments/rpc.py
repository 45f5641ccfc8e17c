"""Plain JSON-RPC helpers for starknet-deployments library."""

from typing import Any

import requests

from .exceptions import NetworkError


def rpc_request(rpc_url: str, method: str, params: Any) -> Any:
    """
    Make a single Starknet JSON-RPC call.

    Args:
        rpc_url: RPC endpoint URL
        method: RPC method, e.g. "starknet_chainId"
        params: Positional list or named dict of parameters

    Returns:
        The "result" member of the response

    Raises:
        NetworkError: If the endpoint is unreachable, answers non-200 or
                      returns an RPC error
    """
    try:
        response = requests.post(
            rpc_url,
            json={"jsonrpc": "2.0", "method": method, "params": params, "id": 1},
            timeout=30,
        )
    except requests.RequestException as e:
        raise NetworkError(f"Network error during RPC call {method}: {e}") from e

    # Check for HTTP errors
    if response.status_code != 200:
        raise NetworkError(f"RPC request {method} failed with status {response.status_code}")

    try:
        result = response.json()
    except ValueError as e:
        raise NetworkError(f"RPC request {method} returned invalid JSON") from e

    # Check for RPC errors
    if "error" in result:
        raise NetworkError(f"RPC error from {method}: {result['error']}")

    return result["result"]


def get_chain_id(rpc_url: str) -> str:
    """
    Get the chain id served by an endpoint as a short string.

    Returns:
        e.g. "SN_SEPOLIA" or "SN_MAIN"
    """
    chain_id_hex = rpc_request(rpc_url, "starknet_chainId", [])
    return bytes.fromhex(chain_id_hex[2:]).decode("ascii")

