import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Optional

from eth_utils import to_checksum_address

from dfdeploy.constants import REQUIRED_INITIALIZER_KEYS
from dfdeploy.networks import Environment
from dfdeploy.preconditions import check_required_keys
from dfdeploy.utils import _load_yaml, get_artifact_filepath


class DeploymentParameters:
    """Represents the deployment parameters of a single network."""

    class Invalid(ValueError):
        """Raised when the deployment parameters are invalid"""

    def __init__(
        self,
        name: str,
        chain_id: int,
        artifact_filepath: Path,
        initializers: "typing.OrderedDict[str, Any]",
        admin: Optional[str] = None,
        subgraph: Optional[Dict[str, Any]] = None,
        path: Optional[Path] = None,
    ):
        self.name = name
        self.chain_id = chain_id
        self.artifact_filepath = artifact_filepath
        self.initializers = initializers
        self.admin = admin
        self.subgraph = subgraph or dict()
        self.path = path

    @classmethod
    def from_yaml(cls, filepath: Path) -> "DeploymentParameters":
        config = _load_yaml(filepath)
        return cls.from_config(config, path=filepath)

    @classmethod
    def from_config(cls, config: Dict, path: Optional[Path] = None) -> "DeploymentParameters":
        print("Validating parameters YAML...")
        if not isinstance(config, dict):
            raise cls.Invalid("Malformed deployment parameters YAML.")

        deployment = config.get("deployment")
        if not deployment:
            raise cls.Invalid("deployment is not set in params file.")

        chain_id = deployment.get("chain_id")
        if not chain_id:
            raise cls.Invalid("chain_id is not set in params file.")

        try:
            artifact_filepath = get_artifact_filepath(config=config)
        except ValueError as e:
            raise cls.Invalid(str(e)) from e

        initializers = OrderedDict(config.get("initializers") or {})
        check_required_keys(initializers, REQUIRED_INITIALIZER_KEYS)

        admin = config.get("admin")
        if admin:
            try:
                admin = to_checksum_address(admin)
            except ValueError as e:
                raise cls.Invalid(f"admin '{admin}' is not a valid address.") from e

        return cls(
            name=deployment.get("name", ""),
            chain_id=int(chain_id),
            artifact_filepath=artifact_filepath,
            initializers=initializers,
            admin=admin or None,
            subgraph=config.get("subgraph"),
            path=path,
        )

    def validate_chain(self, provider_chain_id: int, environment: Environment) -> None:
        """Checks that the params file targets the connected chain."""
        if environment.is_development:
            return
        if self.chain_id != int(provider_chain_id):
            raise self.Invalid(
                f"chain_id in params file ({self.chain_id}) does not match "
                f"chain_id of current network ({provider_chain_id})."
            )
