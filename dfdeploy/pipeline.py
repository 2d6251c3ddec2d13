"""
The deployment pipeline: a fixed, hand-ordered sequence of steps run as an explicit
state machine. Every step completes (including on-chain confirmation) before the next
begins, since later steps build their inputs from the addresses of earlier ones.

    NOT_STARTED -> PRECONDITION_CHECKED -> WHITELIST_DEPLOYED -> TOKENS_DEPLOYED
    -> LIBRARIES_DEPLOYED -> CORE_DEPLOYED -> TOKENS_LATE_INITIALIZED
    -> GETTERS_DEPLOYED -> CREDITS_DEPLOYED -> ARTIFACT_PERSISTED
    -> POST_ACTIONS_COMPLETE -> DONE

Any fatal error moves the pipeline to ABORTED. Nothing is retried or rolled back.
"""

import functools
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from dfdeploy.actions import AuxiliaryService, fund_whitelist, transfer_ownership
from dfdeploy.artifact import ArtifactWriter
from dfdeploy.components import (
    CORE,
    CREDITS,
    GETTERS,
    LIBRARIES,
    TOKENS,
    WHITELIST,
    ComponentSpec,
    DeployedComponent,
)
from dfdeploy.constants import (
    DEFAULT_WHITELIST_FUND,
    MIN_DEPLOYER_BALANCE,
    REQUIRED_INITIALIZER_KEYS,
)
from dfdeploy.deployer import ComponentDeployer
from dfdeploy.exceptions import (
    DeploymentError,
    DeploymentPipelineError,
    IllegalTransition,
    PreconditionError,
)
from dfdeploy.networks import Environment, NetworkMeta
from dfdeploy.params import DeploymentParameters
from dfdeploy.preconditions import check_deployer_funds, check_required_keys
from dfdeploy.registry import AddressRegistry


class PipelineState(Enum):
    NOT_STARTED = 0
    PRECONDITION_CHECKED = 1
    WHITELIST_DEPLOYED = 2
    TOKENS_DEPLOYED = 3
    LIBRARIES_DEPLOYED = 4
    CORE_DEPLOYED = 5
    TOKENS_LATE_INITIALIZED = 6
    GETTERS_DEPLOYED = 7
    CREDITS_DEPLOYED = 8
    ARTIFACT_PERSISTED = 9
    POST_ACTIONS_COMPLETE = 10
    DONE = 11
    ABORTED = -1


_ORDER = [state for state in PipelineState if state is not PipelineState.ABORTED]

TRANSITIONS = {current: following for current, following in zip(_ORDER, _ORDER[1:])}


def step(target: PipelineState):
    """Runs a pipeline step only if it is the next legal transition, then enters `target`."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            if TRANSITIONS.get(self.state) is not target:
                raise IllegalTransition(self.state, target)
            result = func(self, *args, **kwargs)
            self.state = target
            return result

        return wrapper

    return decorator


class PipelineResult(NamedTuple):
    registry: AddressRegistry
    network: NetworkMeta
    artifact_filepath: Path
    errors: List[DeploymentPipelineError]

    @property
    def succeeded(self) -> bool:
        return not self.errors


class DeploymentPipeline:
    def __init__(
        self,
        deployer: ComponentDeployer,
        params: DeploymentParameters,
        environment: Environment,
        network_name: str,
        chain_id: int,
        whitelist_enabled: bool = True,
        fund: float = DEFAULT_WHITELIST_FUND,
        auxiliary_service: Optional[AuxiliaryService] = None,
        subgraph: Optional[str] = None,
        min_balance: int = MIN_DEPLOYER_BALANCE,
        writer: Optional[ArtifactWriter] = None,
    ):
        self.deployer = deployer
        self.params = params
        self.environment = environment
        self.network_name = network_name
        self.chain_id = chain_id
        self.whitelist_enabled = whitelist_enabled
        self.fund = fund
        self.auxiliary_service = auxiliary_service
        self.subgraph = subgraph
        self.min_balance = min_balance
        self.writer = writer or ArtifactWriter(params.artifact_filepath)

        self.registry = AddressRegistry()
        self.state = PipelineState.NOT_STARTED
        self.abort_reason: Optional[Exception] = None
        self.aborted_after: Optional[PipelineState] = None
        self.errors: List[DeploymentPipelineError] = list()
        self.network: Optional[NetworkMeta] = None

        self.steps: List[Callable[[], Any]] = [
            self.check_preconditions,
            self.deploy_whitelist,
            self.deploy_tokens,
            self.deploy_libraries,
            self.deploy_core,
            self.late_initialize_tokens,
            self.deploy_getters,
            self.deploy_credits,
            self.persist_artifact,
            self.run_post_actions,
            self.bring_up_auxiliary_service,
        ]

    @property
    def controller(self) -> str:
        """Administrative address handed to every component's initializer."""
        return self.params.admin or self.deployer.address

    def _abort(self, reason: Exception) -> None:
        self.abort_reason = reason
        self.aborted_after = self.state
        self.state = PipelineState.ABORTED
        print(f"Aborting deployment! {reason}")

    def _config(self) -> Dict[str, Any]:
        return {
            "admin": self.controller,
            "whitelist_enabled": self.whitelist_enabled,
            "initializers": dict(self.params.initializers),
        }

    def _collect(self, action: Callable[[], Any]) -> None:
        """Runs `action`, keeping its non-fatal pipeline error instead of raising it."""
        try:
            action()
        except DeploymentPipelineError as e:
            if e.fatal:
                raise
            print(f"(!) {e}")
            self.errors.append(e)

    def _deploy(self, spec: ComponentSpec) -> DeployedComponent:
        try:
            inputs = self.registry.resolve(spec)
        except AddressRegistry.Invalid as e:
            raise DeploymentError(spec.name, e) from e

        try:
            component = self.deployer.deploy(spec, inputs, self._config())
        except DeploymentPipelineError:
            raise
        except Exception as e:
            raise DeploymentError(spec.name, e) from e

        if not component or not component.address:
            raise DeploymentError(spec.name, message="deployer returned no address")
        try:
            self.registry.add(component)
        except AddressRegistry.Invalid as e:
            raise DeploymentError(spec.name, e) from e

        print(f"{spec.contract} deployed to: {component.address}")
        return component

    #
    # Steps
    #

    @step(PipelineState.PRECONDITION_CHECKED)
    def check_preconditions(self) -> None:
        check_required_keys(self.params.initializers, REQUIRED_INITIALIZER_KEYS)
        try:
            balance = self.deployer.balance()
        except Exception as e:
            raise PreconditionError("deployer balance", e) from e
        check_deployer_funds(
            account=self.deployer.address,
            balance=balance,
            environment=self.environment,
            threshold=self.min_balance,
        )

    @step(PipelineState.WHITELIST_DEPLOYED)
    def deploy_whitelist(self) -> None:
        self._deploy(WHITELIST)

    @step(PipelineState.TOKENS_DEPLOYED)
    def deploy_tokens(self) -> None:
        self._deploy(TOKENS)

    @step(PipelineState.LIBRARIES_DEPLOYED)
    def deploy_libraries(self) -> None:
        for library in LIBRARIES:
            self._deploy(library)

    @step(PipelineState.CORE_DEPLOYED)
    def deploy_core(self) -> None:
        self._deploy(CORE)

    @step(PipelineState.TOKENS_LATE_INITIALIZED)
    def late_initialize_tokens(self) -> None:
        tokens = self.registry[TOKENS.name]
        core = self.registry[CORE.name]
        try:
            self.deployer.late_initialize(tokens, core.address, self.deployer.address)
        except DeploymentPipelineError:
            raise
        except Exception as e:
            raise DeploymentError(TOKENS.name, e) from e
        print(f"{TOKENS.contract} initialized with core {core.address}")

    @step(PipelineState.GETTERS_DEPLOYED)
    def deploy_getters(self) -> None:
        self._deploy(GETTERS)

    @step(PipelineState.CREDITS_DEPLOYED)
    def deploy_credits(self) -> None:
        self._deploy(CREDITS)

    @step(PipelineState.ARTIFACT_PERSISTED)
    def persist_artifact(self) -> None:
        self.network = NetworkMeta.build(
            network_name=self.network_name,
            chain_id=self.chain_id,
            environment=self.environment,
            core_block_number=self.registry[CORE.name].block_number,
        )
        self.writer.write(self.registry, self.network)

    @step(PipelineState.POST_ACTIONS_COMPLETE)
    def run_post_actions(self) -> None:
        # independent of each other; non-fatal failures are collected
        actions = [
            lambda: transfer_ownership(self.deployer, self.registry, self.params.admin),
            lambda: fund_whitelist(self.deployer, self.registry, self.fund),
        ]
        for action in actions:
            self._collect(action)

    @step(PipelineState.DONE)
    def bring_up_auxiliary_service(self) -> None:
        if self.subgraph and self.auxiliary_service:
            self._collect(
                lambda: self.auxiliary_service.bring_up(self.subgraph, self.writer.filepath)
            )

    def run(self) -> PipelineResult:
        if self.state is not PipelineState.NOT_STARTED:
            raise IllegalTransition(self.state, PipelineState.PRECONDITION_CHECKED)
        try:
            for pipeline_step in self.steps:
                pipeline_step()
            self._collect(lambda: self.deployer.finalize(list(self.registry)))
        except Exception as e:
            self._abort(e)
            raise

        return PipelineResult(
            registry=self.registry,
            network=self.network,
            artifact_filepath=self.writer.filepath,
            errors=list(self.errors),
        )
