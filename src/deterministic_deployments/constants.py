"""Configuration constants for deterministic-deployments library."""

# Canonical deterministic deployment proxy (CREATE2 factory), present at the
# same address on every EVM network that has it.
# Calldata is salt (32 bytes) || creation code; return data is the new address.
DETERMINISTIC_FACTORY_ADDRESS = "0x4e59b44847b379578588920ca78fbf26c0b4956c"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ZERO_SALT = bytes(32)

# keccak256(b"")
EMPTY_CODE_HASH = "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"

# Seconds per RPC call
DEFAULT_TIMEOUT = 30

# Seconds to wait for a broadcast transaction to be mined
DEFAULT_RECEIPT_TIMEOUT = 180

DEFAULT_POLL_INTERVAL = 2.0

DEFAULT_PRIVATE_KEY_ENV = "DEPLOYER_PRIVATE_KEY"

RPC_TIMEOUT_ENV = "DEPLOY_RPC_TIMEOUT"

# Network configuration based on ethereum-lists/chains
# Network identifiers double as forge/foundry RPC aliases
NETWORK_CONFIG = {
    "mainnet": {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "block_explorer_url": "https://etherscan.io",
        "default_rpc_env": "ETH_RPC_URL",
    },
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "block_explorer_url": "https://sepolia.etherscan.io",
        "default_rpc_env": "SEP_RPC_URL",
    },
    "gnosis": {
        "chain_id": 100,
        "chain_name": "Gnosis Chain",
        "block_explorer_url": "https://gnosisscan.io",
        "default_rpc_env": "GNO_RPC_URL",
    },
    "optimism": {
        "chain_id": 10,
        "chain_name": "OP Mainnet",
        "block_explorer_url": "https://optimistic.etherscan.io",
        "default_rpc_env": "OP_RPC_URL",
    },
    "arbitrum": {
        "chain_id": 42161,
        "chain_name": "Arbitrum One",
        "block_explorer_url": "https://arbiscan.io",
        "default_rpc_env": "ARB_RPC_URL",
    },
    "base": {
        "chain_id": 8453,
        "chain_name": "Base",
        "block_explorer_url": "https://basescan.org",
        "default_rpc_env": "BASE_RPC_URL",
    },
    "polygon": {
        "chain_id": 137,
        "chain_name": "Polygon Mainnet",
        "block_explorer_url": "https://polygonscan.com",
        "default_rpc_env": "POLYGON_RPC_URL",
    },
}
