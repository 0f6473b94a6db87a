import os
from enum import Enum

from eth_typing import URI
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


class AppMode(Enum):
    PROD = "PROD"
    STAGING = "STAGING"
    LOCAL = "LOCAL"


class NetworkConfig(BaseModel):
    relay_base_url: URI | str
    bridge_contract: str
    rpc_endpoints: list[URI | str] = Field(default_factory=list)
    explorer_url: URI | str | None = None
    explorer_api_key: str | None = None
    backend_timeout: float = 5.0
    relay_timeout: float = 10.0
    balance_timeout: float = 5.0


class TrackerSettings(BaseModel):
    source_confirmations: int = 64
    destination_confirmations: int = 90
    poll_interval: float = 30.0
    hidden_poll_interval: float = 1.0
    max_consecutive_errors: int = 10
    max_burn_logs: int = 10
    burn_function_selector: str = "7a408454"
    burn_event_hash: str = (
        "0xc3599666213715dfabdf658c56a97b9adfad2cd9689690c70c79b20bc61940c9"
    )
    source_token_decimals: int = 8
    destination_coin_decimals: int = 18
    bridge_contract: str = ""


MODE = AppMode(os.getenv("BRIDGE_TRACKER_MODE", AppMode.PROD.value))
ETHERSCAN_API_KEY = os.getenv("ETHERSCAN_API_KEY")

POLL_TRANSFER_TIMEOUT = float(os.getenv("POLL_TRANSFER_TIMEOUT", 30))
POLL_TRANSFER_MAX_ERROR = int(os.getenv("POLL_TRANSFER_MAX_ERROR", 10))
POLL_HIDDEN_TIMEOUT = float(os.getenv("POLL_HIDDEN_TIMEOUT", 1))
CONFIRMATION_THOLD_SOURCE = int(os.getenv("CONFIRMATION_THOLD_SOURCE", 64))
CONFIRMATION_THOLD_DESTINATION = int(os.getenv("CONFIRMATION_THOLD_DESTINATION", 90))
TOKEN_BURN_TX_MAX_LOGS = int(os.getenv("TOKEN_BURN_TX_MAX_LOGS", 10))

LOG_PATH = os.getenv("BRIDGE_TRACKER_LOG_PATH")
LOG_LEVEL = os.getenv("BRIDGE_TRACKER_LOG_LEVEL", "INFO")

NETWORKS_CONFIG = {
    AppMode.PROD: NetworkConfig(
        relay_base_url="https://bridge-api.aion.network/",
        bridge_contract="0x4CEdA7906a5Ed2179785Cd3A40A69ee8bc99C466",
        rpc_endpoints=[
            "https://mainnet.infura.io/metamask",
            "https://api.myetherwallet.com/eth",
        ],
        explorer_url="https://api.etherscan.io/api",
        explorer_api_key=ETHERSCAN_API_KEY,
    ),
    AppMode.STAGING: NetworkConfig(
        relay_base_url="https://bridge-beta-api.aion.network/",
        bridge_contract="0x6b8b173f044B5F811D111aC4C6D152623f42cA33",
        rpc_endpoints=[
            "https://ropsten.infura.io/metamask",
            "https://api.myetherwallet.com/rop",
        ],
        explorer_url="https://api-ropsten.etherscan.io/api",
        explorer_api_key=ETHERSCAN_API_KEY,
    ),
    AppMode.LOCAL: NetworkConfig(
        relay_base_url=os.getenv("RELAY_BASE_URL", "http://127.0.0.1:8080/"),
        bridge_contract="0x6b8b173f044B5F811D111aC4C6D152623f42cA33",
        rpc_endpoints=[
            url
            for url in os.getenv("SOURCE_RPC_URLS", "http://127.0.0.1:8545").split(",")
            if url
        ],
    ),
}


def get_network(mode: AppMode = MODE) -> NetworkConfig:
    return NETWORKS_CONFIG[mode]


def load_settings(network: NetworkConfig | None = None) -> TrackerSettings:
    """Build tracker settings from the environment for the given network."""
    network = network or get_network()
    return TrackerSettings(
        source_confirmations=CONFIRMATION_THOLD_SOURCE,
        destination_confirmations=CONFIRMATION_THOLD_DESTINATION,
        poll_interval=POLL_TRANSFER_TIMEOUT,
        hidden_poll_interval=POLL_HIDDEN_TIMEOUT,
        max_consecutive_errors=POLL_TRANSFER_MAX_ERROR,
        max_burn_logs=TOKEN_BURN_TX_MAX_LOGS,
        bridge_contract=network.bridge_contract,
    )
