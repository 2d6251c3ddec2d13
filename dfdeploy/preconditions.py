from typing import Iterable, Mapping

from dfdeploy.constants import MIN_DEPLOYER_BALANCE
from dfdeploy.exceptions import InsufficientFundsError, MissingConfigurationError
from dfdeploy.networks import Environment


def check_required_keys(mapping: Mapping, keys: Iterable[str]) -> None:
    """Checks that every required key is present before anything is deployed."""
    missing = [key for key in keys if key not in (mapping or {})]
    if missing:
        raise MissingConfigurationError(missing)


def check_deployer_funds(
    account: str,
    balance: int,
    environment: Environment,
    threshold: int = MIN_DEPLOYER_BALANCE,
) -> None:
    """
    Only when deploying to production, checks that the deployer
    holds enough to pay for all of the deployments.
    """
    if environment.is_development:
        return
    if balance < threshold:
        raise InsufficientFundsError(account=account, required=threshold, actual=balance)
