import pytest
import requests

from dfdeploy.actions import GraphNodeService, fund_whitelist, transfer_ownership
from dfdeploy.components import WHITELIST
from dfdeploy.exceptions import AuxiliaryServiceError
from tests.conftest import ADMIN_ADDRESS, FakeDeployer, build_registry


class FakeResponse:
    def __init__(self, data, status_code=200):
        self.data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.data


@pytest.fixture
def rpc_calls(monkeypatch):
    calls = list()

    def post(url, json, timeout):
        calls.append((url, json))
        return FakeResponse({"jsonrpc": "2.0", "id": json["id"], "result": {}})

    monkeypatch.setattr(requests, "post", post)
    return calls


def test_fund_whitelist_is_exact():
    deployer = FakeDeployer()
    registry = build_registry()
    value = fund_whitelist(deployer, registry, 0.1)
    assert value == 10**17
    assert deployer.calls_of("fund") == [("fund", registry[WHITELIST.name].address, 10**17, False)]


def test_fund_whitelist_skips_zero():
    deployer = FakeDeployer()
    assert fund_whitelist(deployer, build_registry(), 0) == 0
    assert not deployer.calls_of("fund")


def test_transfer_ownership():
    deployer = FakeDeployer()
    registry = build_registry()
    assert transfer_ownership(deployer, registry, None) == []
    assert not deployer.calls_of("transfer_admin")

    transferred = transfer_ownership(deployer, registry, ADMIN_ADDRESS)
    assert transferred == [c.name for c in registry.upgradeable()]
    assert "verifier_library" not in transferred


def test_graph_node_bring_up(rpc_calls, tmp_path):
    service = GraphNodeService(ipfs_hash="QmHash", node="http://graph:8020/")
    service.bring_up("darkforest", tmp_path / "index.ts")

    assert [call[0] for call in rpc_calls] == ["http://graph:8020/", "http://graph:8020/"]
    create, deploy = [call[1] for call in rpc_calls]
    assert create["method"] == "subgraph_create"
    assert create["params"] == {"name": "darkforest"}
    assert deploy["method"] == "subgraph_deploy"
    assert deploy["params"] == {"name": "darkforest", "ipfs_hash": "QmHash"}
    assert create["id"] != deploy["id"]


def test_graph_node_error(monkeypatch, tmp_path):
    def post(url, json, timeout):
        return FakeResponse({"jsonrpc": "2.0", "id": 1, "error": {"message": "already exists"}})

    monkeypatch.setattr(requests, "post", post)
    service = GraphNodeService(ipfs_hash="QmHash")
    with pytest.raises(AuxiliaryServiceError, match="already exists"):
        service.bring_up("darkforest", tmp_path / "index.ts")


def test_graph_node_unreachable(monkeypatch, tmp_path):
    def post(url, json, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "post", post)
    with pytest.raises(AuxiliaryServiceError):
        GraphNodeService(ipfs_hash="QmHash").bring_up("darkforest", tmp_path / "index.ts")


def test_graph_node_from_config():
    service = GraphNodeService.from_config({"node": "http://graph:8020/", "ipfs_hash": "QmHash"})
    assert service.node == "http://graph:8020/"
    with pytest.raises(ValueError):
        GraphNodeService.from_config({})
