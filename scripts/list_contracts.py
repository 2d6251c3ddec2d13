#!/usr/bin/python3

import click

from dfdeploy.artifact import SECTIONS, read_artifact
from dfdeploy.options import artifact_option


@click.command(name="list-contracts")
@artifact_option
def cli(artifact):
    """List the network information and contract addresses of a deployment artifact."""
    data = read_artifact(artifact)
    for title, fields in SECTIONS:
        click.secho(f"\n{title}", fg="green")
        for index, field in enumerate(fields, start=1):
            click.secho(f"    {index}. {field} {data.get(field, '<missing>')}", fg="cyan")


if __name__ == "__main__":
    cli()
