from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from web3 import Web3

from dfdeploy.components import WHITELIST
from dfdeploy.constants import DEFAULT_GRAPH_NODE_ADMIN_URI
from dfdeploy.deployer import ComponentDeployer
from dfdeploy.exceptions import AuxiliaryServiceError
from dfdeploy.registry import AddressRegistry


def transfer_ownership(
    deployer: ComponentDeployer, registry: AddressRegistry, new_owner: Optional[str]
) -> List[str]:
    """Gives administration of every upgradeable component over to `new_owner`."""
    if not new_owner:
        return []
    transferred = list()
    for component in registry.upgradeable():
        deployer.transfer_admin(component, new_owner)
        transferred.append(component.name)
    print(f"Transferred administration of {', '.join(transferred)} to {new_owner}")
    return transferred


def fund_whitelist(deployer: ComponentDeployer, registry: AddressRegistry, amount) -> int:
    """Sends `amount` native currency units to the whitelist to fund its drips."""
    value = Web3.to_wei(Decimal(str(amount)), "ether")
    if value <= 0:
        return 0
    whitelist_address = registry[WHITELIST.name].address
    deployer.fund(whitelist_address, value)
    print(f"Sent {amount} to whitelist contract to fund drips")
    return value


class AuxiliaryService(ABC):
    """A service brought up once the artifact is persisted."""

    @abstractmethod
    def bring_up(self, name: str, artifact_filepath: Path) -> None:
        raise NotImplementedError


class GraphNodeService(AuxiliaryService):
    """Creates and deploys a subgraph through a graph-node admin JSON-RPC endpoint."""

    def __init__(self, ipfs_hash: str, node: str = DEFAULT_GRAPH_NODE_ADMIN_URI, timeout: int = 30):
        self.ipfs_hash = ipfs_hash
        self.node = node
        self.timeout = timeout
        self._request_id = 0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "GraphNodeService":
        ipfs_hash = config.get("ipfs_hash")
        if not ipfs_hash:
            raise ValueError("subgraph ipfs_hash is not set in params file.")
        return cls(ipfs_hash=ipfs_hash, node=config.get("node", DEFAULT_GRAPH_NODE_ADMIN_URI))

    def _call(self, method: str, params: Dict[str, Any]) -> Any:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}
        response = requests.post(self.node, json=payload, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        if data.get("error"):
            raise ValueError(f"{method} failed: {data['error'].get('message', data['error'])}")
        return data.get("result")

    def bring_up(self, name: str, artifact_filepath: Path) -> None:
        print(f"Bringing up subgraph {name} at {self.node}")
        try:
            self._call("subgraph_create", {"name": name})
            self._call("subgraph_deploy", {"name": name, "ipfs_hash": self.ipfs_hash})
        except (requests.RequestException, ValueError) as e:
            raise AuxiliaryServiceError(name, e) from e
