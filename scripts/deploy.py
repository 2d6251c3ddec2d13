#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from dfdeploy.actions import GraphNodeService
from dfdeploy.deployer import ApeDeployer
from dfdeploy.networks import Environment
from dfdeploy.options import (
    admin_option,
    autosign_option,
    fund_option,
    params_option,
    subgraph_option,
    verify_option,
    whitelist_option,
)
from dfdeploy.params import DeploymentParameters
from dfdeploy.pipeline import DeploymentPipeline
from dfdeploy.report import run_and_report


@click.command(cls=ConnectedProviderCommand, name="deploy")
@account_option()
@network_option(required=True)
@params_option
@whitelist_option
@fund_option
@subgraph_option
@admin_option
@autosign_option
@verify_option
def cli(
    account,
    network,
    params_filepath,
    whitelist,
    fund,
    subgraph,
    admin,
    autosign,
    verify,
):
    """
    Deploy every Dark Forest contract in dependency order and write the address artifact.

    ape run deploy --network ethereum:local:test --params dfdeploy/constructor_params/localhost.yml
    """
    environment = Environment.from_network(network.name)
    click.echo(f"Connected to {network.name} network ({environment.value}).")

    params = DeploymentParameters.from_yaml(filepath=params_filepath)
    if admin:
        params.admin = admin
    params.validate_chain(provider_chain_id=network.chain_id, environment=environment)

    auxiliary_service = None
    if subgraph:
        auxiliary_service = GraphNodeService.from_config(params.subgraph)

    deployer = ApeDeployer(account=account, autosign=autosign, verify=verify)
    deployer.print_deployment_info(params_path=params_filepath)
    if not autosign:
        click.confirm(text="Deploy all contracts?", abort=True)

    pipeline = DeploymentPipeline(
        deployer=deployer,
        params=params,
        environment=environment,
        network_name=network.name,
        chain_id=network.chain_id,
        whitelist_enabled=whitelist,
        fund=fund,
        auxiliary_service=auxiliary_service,
        subgraph=subgraph,
    )
    run_and_report(pipeline)


if __name__ == "__main__":
    cli()
