import typing
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ape import chain, compilers, networks, project
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.exceptions import ApeException
from ape.utils import EMPTY_BYTES32
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from dfdeploy.components import (
    COMPONENTS,
    ComponentName,
    ComponentSpec,
    DeployedComponent,
    resolve_initializer,
)
from dfdeploy.confirm import _confirm_resolution, _continue
from dfdeploy.constants import EIP1967_ADMIN_SLOT, OZ_DEPENDENCY_NAME, OZ_DEPENDENCY_VERSION
from dfdeploy.exceptions import (
    DeploymentError,
    FundingTransferError,
    OwnershipTransferError,
    VerificationError,
)
from dfdeploy.utils import check_etherscan_plugin, get_contract_container, verify_contracts


class ComponentDeployer(ABC):
    """
    Deploys named components and performs the few transactions
    the pipeline needs on them, all from a single account.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Address of the deploying account."""
        raise NotImplementedError

    @abstractmethod
    def balance(self) -> int:
        """Balance of the deploying account, in wei."""
        raise NotImplementedError

    @abstractmethod
    def deploy(
        self, spec: ComponentSpec, inputs: Dict[ComponentName, str], config: Dict[str, Any]
    ) -> DeployedComponent:
        raise NotImplementedError

    @abstractmethod
    def late_initialize(
        self, component: DeployedComponent, core_address: str, owner_address: str
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def transfer_admin(self, component: DeployedComponent, new_owner: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def fund(self, address: str, amount: int) -> None:
        raise NotImplementedError

    def finalize(self, components: List[DeployedComponent]) -> None:
        """Hook called once every component is deployed."""


def _oz_dependency():
    return project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue(action=f"{method.contract.contract_type.name}.{method}")

        # ape waits for the receipt before returning
        return method(*args, sender=self._account)


class ApeDeployer(Transactor, ComponentDeployer):
    """
    Deploys components with an ape account. Upgradeable components are deployed as a
    logic contract behind a TransparentUpgradeableProxy initialized in the same transaction.
    """

    def __init__(
        self,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        verify: bool = False,
    ):
        super().__init__(account, autosign)
        if verify:
            check_etherscan_plugin()
        self.verify = verify
        self._instances: Dict[ComponentName, ContractInstance] = dict()

    @property
    def address(self) -> str:
        return self._account.address

    def balance(self) -> int:
        return self._account.balance

    def _instance(self, name: ComponentName, address: str) -> ContractInstance:
        instance = self._instances.get(name)
        if instance is None:
            container = get_contract_container(COMPONENTS[name].contract)
            instance = container.at(address)
        return instance

    def _link_libraries(self, spec: ComponentSpec, inputs: Dict[ComponentName, str]) -> None:
        for library in spec.libraries:
            compilers.solidity.add_library(self._instance(library, inputs[library]))

    def deploy(
        self, spec: ComponentSpec, inputs: Dict[ComponentName, str], config: Dict[str, Any]
    ) -> DeployedComponent:
        try:
            self._link_libraries(spec, inputs)
            container = get_contract_container(spec.contract)
            resolved_params = resolve_initializer(spec, inputs, config)
            if not self._autosign:
                _confirm_resolution(resolved_params, spec.contract)
            if spec.upgradeable:
                instance, receipt = self._deploy_proxied(container, resolved_params)
            else:
                instance = self._account.deploy(container, *resolved_params.values())
                receipt = instance.receipt
        except (ApeException, ValueError) as e:
            raise DeploymentError(spec.name, e) from e

        self._instances[spec.name] = instance
        return DeployedComponent(
            name=spec.name,
            contract=spec.contract,
            address=to_checksum_address(instance.address),
            block_number=receipt.block_number,
            inputs=tuple(inputs),
            upgradeable=spec.upgradeable,
        )

    def _deploy_proxied(
        self, container: ContractContainer, resolved_params: typing.OrderedDict
    ) -> typing.Tuple[ContractInstance, ReceiptAPI]:
        contract_name = container.contract_type.name
        logic = self._account.deploy(container)

        data = b""
        if resolved_params:
            data = logic.initialize.encode_input(*resolved_params.values())

        proxy_container = _oz_dependency().TransparentUpgradeableProxy
        print(
            f"\nDeploying {proxy_container.contract_type.name} "
            f"contract to proxy {contract_name}."
        )
        proxy = self._account.deploy(proxy_container, logic.address, self._account.address, data)
        print(f"\nWrapping {contract_name} into {proxy.contract_type.name} at {proxy.address}.")
        return container.at(proxy.address), proxy.receipt

    def late_initialize(
        self, component: DeployedComponent, core_address: str, owner_address: str
    ) -> None:
        instance = self._instance(component.name, component.address)
        try:
            self.transact(instance.initialize, core_address, owner_address)
        except (ApeException, ValueError) as e:
            raise DeploymentError(component.name, e) from e

    def transfer_admin(self, component: DeployedComponent, new_owner: str) -> None:
        try:
            admin_slot = chain.provider.get_storage_at(
                address=component.address, slot=EIP1967_ADMIN_SLOT
            )
            if admin_slot == EMPTY_BYTES32:
                raise ValueError(
                    f"Admin slot for contract at {component.address} is empty. "
                    "Are you sure this is an EIP1967-compatible proxy?"
                )
            admin_address = to_checksum_address(admin_slot[-20:])
            proxy_admin = _oz_dependency().ProxyAdmin.at(admin_address)
            self.transact(proxy_admin.transferOwnership, new_owner)
        except (ApeException, ValueError) as e:
            raise OwnershipTransferError(component.name, new_owner, e) from e

    def fund(self, address: str, amount: int) -> None:
        print(f"\nSending {amount} wei to {address}")
        if not self._autosign:
            _continue(action=f"transfer of {amount} wei to {address}")
        try:
            self._account.transfer(address, amount)
        except (ApeException, ValueError) as e:
            raise FundingTransferError(address, amount, e) from e

    def finalize(self, components: List[DeployedComponent]) -> None:
        if not self.verify:
            return
        try:
            verify_contracts(contracts=[self._instances[c.name] for c in components])
        except (ApeException, ValueError) as e:
            raise VerificationError(e) from e

    def print_deployment_info(self, params_path) -> None:
        print(
            f"Account: {self.address}",
            f"Config: {params_path}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
