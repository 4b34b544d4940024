import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from artifact_probe.config import EnvConfigProvider, ScenarioConfig
from artifact_probe.errors import ArtifactProbeError, ArtifactVerificationFailed
from artifact_probe.logging_config import configure_logging
from artifact_probe.modules.api import PlatformClient
from artifact_probe.modules.verifier import ArtifactVerifier, ScenarioReport

logger = logging.getLogger("artifact_probe.cli")

console = Console()

EXIT_PASSED = 0
EXIT_ARTIFACTS_FAILED = 1
EXIT_SETUP_FAILED = 2

REQUIRED_OPTIONS = {"api_url": "API_URL", "namespace": "NAMESPACE", "pipeline_file": "PIPELINE_FILE"}


def load_config(options: dict) -> ScenarioConfig:
    """Read env config; required options may stand in for missing env vars."""
    environ = dict(os.environ)
    for option, name in REQUIRED_OPTIONS.items():
        if options.get(option):
            environ.setdefault(EnvConfigProvider.PREFIX + name, str(options[option]))
    return EnvConfigProvider(environ).get_scenario_config()


def apply_overrides(config: ScenarioConfig, **overrides) -> ScenarioConfig:
    """Apply CLI options that were actually given on top of env config."""
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "api_url":
            config.platform.api_url = value.rstrip("/")
        elif key == "run_timeout":
            config.platform.run_timeout = value
        elif key == "insecure":
            if value:
                config.platform.verify_tls = False
        elif key in ("kubeconfig", "context"):
            setattr(config.kubectl, key, value)
        else:
            setattr(config, key, value)
    return config


def render_report(report: ScenarioReport) -> None:
    table = Table(title=f"Artifacts of run {report.run_id}")
    table.add_column("Artifact", style="cyan")
    table.add_column("Result")
    table.add_column("Details", overflow="fold")

    for outcome in report.outcomes:
        result = "[green]PASS[/green]" if outcome.succeeded else "[red]FAIL[/red]"
        table.add_row(
            escape(outcome.artifact_id), result, escape(outcome.message or outcome.download_url or "")
        )

    console.print(table)
    if report.succeeded:
        console.print(f"[bold green]✅ {len(report.outcomes)} artifact(s) verified[/bold green]")
    else:
        console.print(
            f"[bold red]❌ {len(report.failures)} of {len(report.outcomes)} "
            f"artifact(s) failed verification[/bold red]"
        )


@click.command()
@click.option("--api-url", default=None, help="Platform API base URL")
@click.option("--namespace", default=None, help="Namespace of the platform deployment")
@click.option("--pipeline-name", default=None, help="Display name of the uploaded pipeline")
@click.option(
    "--pipeline-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Compiled pipeline definition to upload (required unless ARTIFACT_PROBE_PIPELINE_FILE is set)",
)
@click.option("--pod-selector", default=None, help="Label selector of the pod to curl from")
@click.option("--kubeconfig", default=None, help="kubeconfig for kubectl")
@click.option("--context", default=None, help="kubectl context")
@click.option("--run-timeout", default=None, type=float, help="Seconds to wait for the run")
@click.option("--max-workers", default=None, type=int, help="Artifacts verified in parallel")
@click.option("--fail-on-empty/--allow-empty", default=None, help="Fail if the run has no artifacts")
@click.option("--insecure", is_flag=True, default=None, help="Skip TLS verification for the API")
@click.option("--log-level", default="INFO", show_default=True)
def main(log_level: str, **options) -> None:
    """Verify that pipeline run artifacts can be downloaded from inside the cluster."""
    load_dotenv()
    configure_logging(log_level)

    try:
        config = apply_overrides(load_config(options), **options)
    except ValueError as e:
        raise click.UsageError(str(e))

    try:
        with PlatformClient(config.platform) as client:
            report = ArtifactVerifier(config, client=client).run()
    except ArtifactProbeError as e:
        logger.error(f"Scenario aborted: {e}")
        console.print(f"[bold red]❌ Scenario aborted: {type(e).__name__}: {escape(str(e))}[/bold red]")
        sys.exit(EXIT_SETUP_FAILED)

    render_report(report)
    if not report.succeeded:
        logger.error(str(ArtifactVerificationFailed(report.failures)))
        sys.exit(EXIT_ARTIFACTS_FAILED)
    sys.exit(EXIT_PASSED)


if __name__ == "__main__":
    main()
