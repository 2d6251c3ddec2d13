from collections import OrderedDict

import pytest
from eth_utils import to_checksum_address
from web3 import Web3

from dfdeploy.components import COMPONENTS, DeployedComponent
from dfdeploy.deployer import ComponentDeployer
from dfdeploy.exceptions import FundingTransferError, OwnershipTransferError, VerificationError
from dfdeploy.networks import Environment
from dfdeploy.params import DeploymentParameters
from dfdeploy.pipeline import DeploymentPipeline
from dfdeploy.registry import AddressRegistry

# Common constants
DEPLOYER_ADDRESS = to_checksum_address("0x" + "d" * 40)
ADMIN_ADDRESS = to_checksum_address("0x" + "a" * 40)
CORE_BLOCK_OFFSET = 1000
LOCAL_CHAIN_ID = 31337

INITIALIZERS = OrderedDict(
    [
        ("PLANETHASH_KEY", 7330),
        ("SPACETYPE_KEY", 7331),
        ("BIOMEBASE_KEY", 7332),
        ("PERLIN_LENGTH_SCALE", 8192),
    ]
)


class FakeDeployer(ComponentDeployer):
    """Deploys nothing; hands out sequential addresses and records every call."""

    def __init__(
        self,
        balance=0,
        fail_on=(),
        fail_late_initialize=False,
        fail_transfer_admin=False,
        fail_fund=False,
        fail_balance=False,
        fail_finalize=False,
        artifact_filepath=None,
    ):
        self._balance = balance
        self.fail_on = set(fail_on)
        self.fail_late_initialize = fail_late_initialize
        self.fail_transfer_admin = fail_transfer_admin
        self.fail_fund = fail_fund
        self.fail_balance = fail_balance
        self.fail_finalize = fail_finalize
        self.artifact_filepath = artifact_filepath
        self.calls = list()
        self.deployed = OrderedDict()
        self.finalized = None

    @property
    def address(self):
        return DEPLOYER_ADDRESS

    def balance(self):
        self.calls.append(("balance",))
        if self.fail_balance:
            raise ConnectionError("provider unreachable")
        return self._balance

    def _artifact_exists(self):
        return bool(self.artifact_filepath and self.artifact_filepath.exists())

    def deploy(self, spec, inputs, config):
        self.calls.append(("deploy", spec.name, OrderedDict(inputs), dict(config)))
        if spec.name in self.fail_on:
            raise RuntimeError(f"{spec.contract} reverted")
        index = len(self.deployed) + 1
        component = DeployedComponent(
            name=spec.name,
            contract=spec.contract,
            address=to_checksum_address(f"0x{index:040x}"),
            block_number=CORE_BLOCK_OFFSET + index,
            inputs=tuple(inputs),
            upgradeable=spec.upgradeable,
        )
        self.deployed[spec.name] = component
        return component

    def late_initialize(self, component, core_address, owner_address):
        self.calls.append(("late_initialize", component.name, core_address, owner_address))
        if self.fail_late_initialize:
            raise RuntimeError("initialize reverted")

    def transfer_admin(self, component, new_owner):
        self.calls.append(("transfer_admin", component.name, new_owner, self._artifact_exists()))
        if self.fail_transfer_admin:
            raise OwnershipTransferError(component.name, new_owner, RuntimeError("not owner"))

    def fund(self, address, amount):
        self.calls.append(("fund", address, amount, self._artifact_exists()))
        if self.fail_fund:
            raise FundingTransferError(address, amount, RuntimeError("insufficient funds"))

    def finalize(self, components):
        self.finalized = [c.name for c in components]
        if self.fail_finalize:
            raise VerificationError(RuntimeError("explorer rejected the source"))

    def calls_of(self, kind):
        return [call for call in self.calls if call[0] == kind]


def to_wei(amount):
    return Web3.to_wei(amount, "ether")


def build_registry(skip=()):
    """A complete registry of every catalog component, minus `skip`."""
    registry = AddressRegistry()
    for index, (name, spec) in enumerate(COMPONENTS.items(), start=1):
        if name in skip:
            continue
        registry.add(
            DeployedComponent(
                name=name,
                contract=spec.contract,
                address=to_checksum_address(f"0x{index:040x}"),
                block_number=index,
                inputs=tuple(n for n in spec.inputs if n not in skip),
                upgradeable=spec.upgradeable,
            )
        )
    return registry


# Fixtures
@pytest.fixture
def artifact_filepath(tmp_path):
    return tmp_path / "contracts" / "index.ts"


@pytest.fixture
def params(artifact_filepath):
    return DeploymentParameters(
        name="localhost",
        chain_id=LOCAL_CHAIN_ID,
        artifact_filepath=artifact_filepath,
        initializers=OrderedDict(INITIALIZERS),
    )


@pytest.fixture
def deployer(artifact_filepath):
    return FakeDeployer(artifact_filepath=artifact_filepath)


@pytest.fixture
def make_pipeline(params):
    def _make_pipeline(deployer, environment=Environment.DEVELOPMENT, **kwargs):
        kwargs.setdefault("network_name", "local")
        kwargs.setdefault("chain_id", LOCAL_CHAIN_ID)
        return DeploymentPipeline(
            deployer=deployer, params=params, environment=environment, **kwargs
        )

    return _make_pipeline
