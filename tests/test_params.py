from pathlib import Path

import pytest
import yaml
from eth_utils import to_checksum_address

from dfdeploy.constants import CONSTRUCTOR_PARAMS_DIR, REQUIRED_INITIALIZER_KEYS
from dfdeploy.exceptions import MissingConfigurationError
from dfdeploy.networks import Environment
from dfdeploy.params import DeploymentParameters

CONFIG = {
    "deployment": {"name": "xdai", "chain_id": 100},
    "artifacts": {"dir": "./artifacts/", "filename": "xdai.ts"},
    "initializers": {"PLANETHASH_KEY": 1, "SPACETYPE_KEY": 2, "BIOMEBASE_KEY": 3},
    "admin": "0x" + "ab" * 20,
}


def write_params(tmp_path, config):
    filepath = tmp_path / "params.yml"
    with open(filepath, "w") as file:
        yaml.safe_dump(config, file, sort_keys=False)
    return filepath


def test_from_yaml(tmp_path):
    params = DeploymentParameters.from_yaml(write_params(tmp_path, CONFIG))
    assert params.name == "xdai"
    assert params.chain_id == 100
    assert params.artifact_filepath == Path("./artifacts/") / "xdai.ts"
    assert list(params.initializers) == REQUIRED_INITIALIZER_KEYS
    assert params.admin == to_checksum_address("0x" + "ab" * 20)
    assert params.subgraph == {}


@pytest.mark.parametrize("filename", ["localhost.yml", "xdai.yml"])
def test_bundled_params(filename):
    params = DeploymentParameters.from_yaml(CONSTRUCTOR_PARAMS_DIR / filename)
    assert params.artifact_filepath.suffix == ".ts"
    assert params.admin is None


@pytest.mark.parametrize("section", ["deployment", "artifacts"])
def test_missing_section(section):
    config = dict(CONFIG)
    del config[section]
    with pytest.raises(DeploymentParameters.Invalid):
        DeploymentParameters.from_config(config)


def test_missing_chain_id():
    config = dict(CONFIG, deployment={"name": "xdai"})
    with pytest.raises(DeploymentParameters.Invalid, match="chain_id"):
        DeploymentParameters.from_config(config)


def test_missing_initializer_keys():
    config = dict(CONFIG, initializers={"SPACETYPE_KEY": 2})
    with pytest.raises(MissingConfigurationError) as exc_info:
        DeploymentParameters.from_config(config)
    assert exc_info.value.missing_keys == ["PLANETHASH_KEY", "BIOMEBASE_KEY"]


def test_invalid_admin():
    config = dict(CONFIG, admin="not-an-address")
    with pytest.raises(DeploymentParameters.Invalid, match="admin"):
        DeploymentParameters.from_config(config)


def test_validate_chain():
    params = DeploymentParameters.from_config(CONFIG)
    params.validate_chain(provider_chain_id=100, environment=Environment.PRODUCTION)
    params.validate_chain(provider_chain_id=31337, environment=Environment.DEVELOPMENT)
    with pytest.raises(DeploymentParameters.Invalid, match="does not match"):
        params.validate_chain(provider_chain_id=1, environment=Environment.PRODUCTION)
