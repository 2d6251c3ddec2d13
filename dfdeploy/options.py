from pathlib import Path

import click

from dfdeploy.constants import DEFAULT_WHITELIST_FUND
from dfdeploy.types import ChecksumAddress, MinFloat

params_option = click.option(
    "--params",
    "-p",
    "params_filepath",
    help="Filepath of the deployment parameters YAML.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)

whitelist_option = click.option(
    "--whitelist/--no-whitelist",
    help="Enable whitelist gating.",
    default=True,
    show_default=True,
)

fund_option = click.option(
    "--fund",
    "-f",
    help="Amount of native currency sent to the whitelist contract to fund drips.",
    type=MinFloat(0),
    default=DEFAULT_WHITELIST_FUND,
    show_default=True,
)

subgraph_option = click.option(
    "--subgraph",
    "-s",
    help="Bring up a subgraph with this name once the artifact is written.",
    type=str,
    required=False,
)

admin_option = click.option(
    "--admin",
    help="Administrative address; overrides the one in the params file.",
    type=ChecksumAddress(),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign every transaction without asking for confirmation.",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify",
    help="Publish the deployed contracts to the block explorer.",
    is_flag=True,
    default=False,
)

artifact_option = click.option(
    "--artifact",
    "-a",
    help="Filepath of a deployment artifact.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)
