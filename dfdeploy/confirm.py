import typing
from typing import Any

from ape.utils import ZERO_ADDRESS

from dfdeploy.exceptions import OperatorAbortError


def _declined(question: str) -> bool:
    answer = input(f"{question} Y/N? ")
    return answer.lower().strip() == "n"


def _continue(action: str = "transaction") -> None:
    """Asks the operator to continue; declining aborts the deployment."""
    if _declined("Continue"):
        raise OperatorAbortError(action)


def _confirm_resolution(
    resolved_params: "typing.OrderedDict[str, Any]", contract_name: str
) -> None:
    """Shows the resolved initialization arguments of a component and asks to deploy it."""
    if resolved_params:
        print(f"\nInitialization arguments for {contract_name}")
        for name, resolved_value in resolved_params.items():
            print(f"\t{name}={resolved_value}")
    else:
        print(f"\n(i) No initialization arguments for {contract_name}")

    if _declined(f"Deploy {contract_name}"):
        raise OperatorAbortError(f"deployment of {contract_name}")

    zero_args = [name for name, value in resolved_params.items() if value == ZERO_ADDRESS]
    if zero_args and _declined(f"Zero address passed as {', '.join(zero_args)}. Continue"):
        raise OperatorAbortError(f"zero address argument(s) of {contract_name}")
