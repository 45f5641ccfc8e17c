"""Configuration constants for starknet-deployments library."""

# Universal Deployer Contract, same address on devnet, sepolia and mainnet
UDC_ADDRESS = 0x041A78E741E5AF2FEC34B695679BC6891742439F7AFB8484ECD7766661AD02BF

ETH_TOKEN_ADDRESS = 0x049D36570D4E46F48E99674BD3FCC84644DDD6B96F7C741B1562B82F9E004DC7
STRK_TOKEN_ADDRESS = 0x04718F5A0FC34CC1AF16A1CDEE98FFB20C31F5CD61D6AB07201858F4287C938D

# Fee ceiling = estimate * percent / 100
DEFAULT_FEE_MULTIPLIER_PERCENT = 200

DEFAULT_INCLUSION_TIMEOUT_SECONDS = 300

# Network configuration; env var names follow RPC_URL_<NETWORK> etc.
NETWORK_CONFIG = {
    "devnet": {
        "chain_id": "SN_SEPOLIA",  # starknet-devnet reports sepolia's chain id
        "default_rpc_url": "http://127.0.0.1:5050",
        # Predeployed devnet account
        "default_account_address": "0x39ef101f5d04a6679575799c4973ce68173aa789b1db7fbf148053c4665775d",
        "default_private_key": "0xf320712abb71d832640dda2144a55278",
        "rpc_env": "RPC_URL_DEVNET",
        "account_env": "ACCOUNT_ADDRESS_DEVNET",
        "private_key_env": "PRIVATE_KEY_DEVNET",
        "fee_tokens": {"eth": ETH_TOKEN_ADDRESS, "strk": STRK_TOKEN_ADDRESS},
    },
    "sepolia": {
        "chain_id": "SN_SEPOLIA",
        "rpc_env": "RPC_URL_SEPOLIA",
        "account_env": "ACCOUNT_ADDRESS_SEPOLIA",
        "private_key_env": "PRIVATE_KEY_SEPOLIA",
        "fee_tokens": {"eth": ETH_TOKEN_ADDRESS, "strk": STRK_TOKEN_ADDRESS},
    },
    "mainnet": {
        "chain_id": "SN_MAIN",
        "rpc_env": "RPC_URL_MAINNET",
        "account_env": "ACCOUNT_ADDRESS_MAINNET",
        "private_key_env": "PRIVATE_KEY_MAINNET",
        "fee_tokens": {"eth": ETH_TOKEN_ADDRESS, "strk": STRK_TOKEN_ADDRESS},
    },
}
