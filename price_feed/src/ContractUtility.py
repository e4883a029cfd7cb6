"""ContractUtility: Web3 initialization and contract ABI loading."""

import json
import os
from pathlib import Path

from web3 import Web3

NETWORKS = {
    "harmony": "https://api.s0.t.hmny.io",
    "harmony-testnet": "https://api.s0.b.hmny.io",
    "localnet": "http://localhost:8545",
}


class ContractUtility:
    """Utility for Web3 connection and contract ABI loading.

    :ivar network: Network RPC URL.
    :ivar w3: Configured Web3 instance.
    """

    def __init__(self, network_name: str) -> None:
        """Initialize the contract utility.

        :param network_name: Name of the network to connect to, or an RPC URL.
        """
        # RPC_URL env var overrides the default for the network
        self.network = os.environ.get("RPC_URL") or NETWORKS.get(network_name, network_name)
        self.w3 = Web3(Web3.HTTPProvider(self.network))

    def latest_block_timestamp(self) -> int:
        """Return the timestamp of the latest block.

        Freshness is judged against chain time rather than local wall-clock time.
        """
        return int(self.w3.eth.get_block("latest")["timestamp"])

    @staticmethod
    def get_contract(contract_name: str) -> list:
        """Fetch the ABI of a contract from the package's abi folder.

        :param contract_name: Name of the contract (e.g., "UniswapPairTwapOracle").
        :returns: Contract ABI.
        """
        output_path = (
            Path(__file__).parent.parent / "abi" / f"{contract_name}.json"
        ).resolve()

        with open(output_path, "r") as file:
            contract_data = json.load(file)

        return contract_data["abi"]
