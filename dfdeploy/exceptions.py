from typing import Iterable, Optional

from web3 import Web3


class DeploymentPipelineError(Exception):
    """Base class for every error surfaced by the deployment pipeline."""

    fatal = True


class MissingConfigurationError(DeploymentPipelineError, ValueError):
    def __init__(self, missing_keys: Iterable[str]):
        self.missing_keys = list(missing_keys)
        super().__init__(
            f"Missing required configuration key(s): {', '.join(self.missing_keys)}"
        )


class InsufficientFundsError(DeploymentPipelineError):
    def __init__(self, account: str, required: int, actual: int):
        self.account = account
        self.required = required
        self.actual = actual
        super().__init__(
            f"{account} requires ~{Web3.from_wei(required, 'ether')} "
            f"but has {Web3.from_wei(actual, 'ether')}; top up and rerun"
        )


class DeploymentError(DeploymentPipelineError):
    def __init__(self, component: str, cause: Optional[BaseException] = None, message: str = ""):
        self.component = component
        self.cause = cause
        reason = message or (f"{type(cause).__name__}: {cause}" if cause else "unknown cause")
        super().__init__(f"Deployment of '{component}' failed - {reason}")


class PersistenceError(DeploymentPipelineError):
    def __init__(self, filepath, cause: Optional[BaseException] = None, message: str = ""):
        self.filepath = filepath
        self.cause = cause
        reason = message or f"{type(cause).__name__}: {cause}"
        super().__init__(f"Cannot write artifact to {filepath} - {reason}")


class PreconditionError(DeploymentPipelineError):
    def __init__(self, check: str, cause: Optional[BaseException] = None):
        self.check = check
        self.cause = cause
        super().__init__(f"Cannot check {check} - {type(cause).__name__}: {cause}")


class OperatorAbortError(DeploymentPipelineError):
    """Raised when the operator declines a confirmation prompt."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Operator declined {action}")


class IllegalTransition(DeploymentPipelineError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Illegal pipeline transition {current.name} -> {target.name}")


#
# Non-fatal: reported to the operator after the artifact is persisted
#


class OwnershipTransferError(DeploymentPipelineError):
    fatal = False

    def __init__(self, component: str, new_owner: str, cause: Optional[BaseException] = None):
        self.component = component
        self.new_owner = new_owner
        self.cause = cause
        super().__init__(
            f"Cannot transfer administration of '{component}' to {new_owner} - {cause}"
        )


class FundingTransferError(DeploymentPipelineError):
    fatal = False

    def __init__(self, address: str, amount, cause: Optional[BaseException] = None):
        self.address = address
        self.amount = amount
        self.cause = cause
        super().__init__(f"Cannot send {amount} to {address} - {cause}")


class VerificationError(DeploymentPipelineError):
    fatal = False

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Cannot verify deployed contracts - {type(cause).__name__}: {cause}")


class AuxiliaryServiceError(DeploymentPipelineError):
    fatal = False

    def __init__(self, name: str, cause: Optional[BaseException] = None):
        self.name = name
        self.cause = cause
        super().__init__(f"Cannot bring up auxiliary service '{name}' - {cause}")
