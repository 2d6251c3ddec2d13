from enum import Enum
from typing import NamedTuple

from dfdeploy.constants import LOCAL_BLOCKCHAIN_ENVIRONMENTS, LOCAL_NETWORK_NAME


class Environment(Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def from_network(cls, network_name: str) -> "Environment":
        if network_name in LOCAL_BLOCKCHAIN_ENVIRONMENTS:
            return cls.DEVELOPMENT
        return cls.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self is Environment.DEVELOPMENT


class NetworkMeta(NamedTuple):
    """Network information persisted alongside the deployed addresses."""

    name: str
    chain_id: int
    start_block: int

    @classmethod
    def build(
        cls, network_name: str, chain_id: int, environment: Environment, core_block_number
    ) -> "NetworkMeta":
        # development artifacts always start at block 0
        if environment.is_development:
            return cls(name=LOCAL_NETWORK_NAME, chain_id=int(chain_id), start_block=0)
        start_block = int(core_block_number or 0)
        return cls(name=network_name, chain_id=int(chain_id), start_block=start_block)


def is_local_network(network_name: str) -> bool:
    return Environment.from_network(network_name).is_development
