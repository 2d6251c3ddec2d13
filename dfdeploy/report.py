import click

from dfdeploy.pipeline import DeploymentPipeline, PipelineResult


def run_and_report(pipeline: DeploymentPipeline) -> PipelineResult:
    """
    Runs the pipeline and reports its outcome to the operator. Exits with
    status 1 when the pipeline aborts or any post-deployment action failed.
    """
    try:
        result = pipeline.run()
    except Exception as e:
        last_step = pipeline.aborted_after or pipeline.state
        click.secho(f"Deployment aborted after {last_step.name}: {e}", fg="red")
        raise SystemExit(1)

    click.secho("\nDeployed contracts", fg="green")
    for component in result.registry:
        click.secho(f"    {component.contract}: {component.address}", fg="cyan")
    click.secho(f"Artifact: {result.artifact_filepath}", fg="green")

    if not result.succeeded:
        for error in result.errors:
            click.secho(f"(!) {error}", fg="yellow")
        raise SystemExit(1)

    click.secho("Deployed successfully. Godspeed cadet.", fg="green")
    return result
