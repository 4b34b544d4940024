"""
Artifact Verifier.

Drives the platform through upload -> run -> wait -> list, then checks
every listed artifact by resolving its download URL and fetching it with
curl from inside a platform pod.

Setup steps are fatal. Per-artifact failures are collected so that one
bad artifact never hides the state of the others.
"""

import logging
import shlex
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from artifact_probe.config import ScenarioConfig
from artifact_probe.errors import (
    AccessDenied,
    ArtifactProbeError,
    ArtifactVerificationFailed,
    MalformedResponse,
    NoArtifactsProduced,
    RunCreationFailure,
    SubmissionFailure,
    TransportFailure,
    UnexpectedStatus,
)
from artifact_probe.modules.api import (
    ArtifactSummary,
    PipelineSubmission,
    PlatformClient,
    Run,
    RunRequest,
    VerificationOutcome,
)
from artifact_probe.modules.cluster import (
    KubectlRunner,
    PodLocator,
    RemoteCommandExecutor,
    RemotePod,
)
from artifact_probe.modules.urls import normalize_download_url

logger = logging.getLogger(__name__)

ACCESS_DENIED_MARKER = "Access Denied"


def is_access_denied(output: str) -> bool:
    """Whether a download output is the storage backend's access-denied body."""
    return ACCESS_DENIED_MARKER in output


def download_command(url: str) -> str:
    """Shell command fetching url; the URL is quoted as a single word for sh -c."""
    return f"curl --insecure {shlex.quote(url)}"


class ScenarioState(str, Enum):
    """Progress of a verification scenario."""

    IDLE = "idle"
    PIPELINE_SUBMITTED = "pipeline_submitted"
    RUN_STARTED = "run_started"
    RUN_COMPLETED = "run_completed"
    ARTIFACTS_LISTED = "artifacts_listed"
    VERDICT = "verdict"


@dataclass
class ScenarioReport:
    """Outcome of one scenario: one VerificationOutcome per listed artifact."""
    run_id: Optional[str] = None
    pod: Optional[RemotePod] = None
    outcomes: List[VerificationOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[VerificationOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def succeeded(self) -> bool:
        """True iff no outcome failed (vacuously true for no artifacts)."""
        return not self.failures

    def raise_for_failures(self) -> None:
        """
        Raises:
            ArtifactVerificationFailed: Listing every failed artifact
        """
        if not self.succeeded:
            raise ArtifactVerificationFailed(self.failures)


class ArtifactVerifier:
    """Orchestrates the artifact verification scenario."""

    def __init__(
        self,
        config: ScenarioConfig,
        client: Optional[PlatformClient] = None,
        pod_locator: Optional[PodLocator] = None,
        executor: Optional[RemoteCommandExecutor] = None,
    ):
        """
        Initialize verifier.

        Args:
            config: Scenario configuration
            client: Platform API client (built from config.platform if omitted)
            pod_locator: Pod lookup (kubectl based if omitted)
            executor: Remote command executor (kubectl based if omitted)
        """
        self.config = config
        self.client = client or PlatformClient(config.platform)
        kubectl = KubectlRunner(config.kubectl)
        self.pod_locator = pod_locator or PodLocator(kubectl)
        self.executor = executor or RemoteCommandExecutor(kubectl)
        self.state = ScenarioState.IDLE

    def _transition(self, state: ScenarioState) -> None:
        logger.info(f"Scenario state: {self.state.value} -> {state.value}")
        self.state = state

    # Setup steps (fatal)

    def submit_pipeline(self) -> str:
        """Upload the pipeline definition and return its pipeline ID."""
        submission = PipelineSubmission(
            name=self.config.pipeline_name,
            definition_file=self.config.pipeline_file,
        )
        try:
            self.client.upload_pipeline(submission)
        except (TransportFailure, UnexpectedStatus) as e:
            raise SubmissionFailure(f"Uploading pipeline '{submission.name}' failed: {e}") from e

        pipeline_id = self.client.find_pipeline_id(submission.name)
        self._transition(ScenarioState.PIPELINE_SUBMITTED)
        return pipeline_id

    def start_run(self, pipeline_id: str) -> Run:
        request = RunRequest(pipeline_id=pipeline_id, display_name=self.config.pipeline_name)
        try:
            run = self.client.create_run(request)
        except (TransportFailure, UnexpectedStatus, MalformedResponse) as e:
            raise RunCreationFailure(f"Creating run for pipeline {pipeline_id} failed: {e}") from e

        self._transition(ScenarioState.RUN_STARTED)
        return run

    def wait_for_run(self, run: Run) -> Run:
        finished = self.client.wait_for_run(run.run_id)
        self._transition(ScenarioState.RUN_COMPLETED)
        return finished

    def list_artifacts(self) -> List[ArtifactSummary]:
        artifacts = self.client.list_artifacts(self.config.namespace)
        self._transition(ScenarioState.ARTIFACTS_LISTED)
        logger.info(f"Found {len(artifacts)} artifact(s) in {self.config.namespace}")
        return artifacts

    def resolve_pod(self) -> RemotePod:
        return self.pod_locator.locate_pod(self.config.namespace, self.config.label_selector)

    # Per-artifact steps (collected)

    def verify_artifact(self, artifact: ArtifactSummary, pod: RemotePod) -> VerificationOutcome:
        """
        Check one artifact: detail, download view, normalize, curl from the pod.

        Never raises ArtifactProbeError; failures become a failed outcome.
        """
        artifact_id = artifact.artifact_id
        download_url = None
        try:
            self.client.get_artifact(artifact_id)
            detail = self.client.get_artifact_download(artifact_id)
            download_url = normalize_download_url(detail.download_url)

            output = self.executor.exec_in_pod(
                pod.namespace, pod.name, download_command(download_url)
            )
            if is_access_denied(output):
                raise AccessDenied(artifact_id, output)
        except AccessDenied as e:
            logger.error(f"error downloading the artifact {artifact_id}: {e.output}")
            return VerificationOutcome(
                artifact_id=artifact_id, succeeded=False, message=str(e), download_url=download_url
            )
        except ArtifactProbeError as e:
            logger.error(f"Artifact {artifact_id} failed verification: {e}")
            return VerificationOutcome(
                artifact_id=artifact_id,
                succeeded=False,
                message=f"{type(e).__name__}: {e}",
                download_url=download_url,
            )

        logger.info(f"Artifact {artifact_id} downloaded from {pod.name}")
        return VerificationOutcome(artifact_id=artifact_id, succeeded=True, download_url=download_url)

    def verify_artifacts(
        self, artifacts: List[ArtifactSummary], pod: RemotePod
    ) -> List[VerificationOutcome]:
        """Verify every artifact; outcomes are returned in listing order."""
        if self.config.max_workers <= 1 or len(artifacts) <= 1:
            return [self.verify_artifact(artifact, pod) for artifact in artifacts]

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            return list(pool.map(lambda a: self.verify_artifact(a, pod), artifacts))

    # Scenario

    def run(self) -> ScenarioReport:
        """
        Run the full scenario.

        Returns:
            ScenarioReport; call raise_for_failures() for a pass/fail verdict

        Raises:
            SubmissionFailure, PipelineNotFound, RunCreationFailure,
            RunFailed, RunTimeout, TransportFailure, UnexpectedStatus,
            MalformedResponse, PodResolutionFailure, NoArtifactsProduced:
            On any fatal setup failure
        """
        pipeline_id = self.submit_pipeline()
        run = self.start_run(pipeline_id)
        self.wait_for_run(run)
        artifacts = self.list_artifacts()

        report = ScenarioReport(run_id=run.run_id)
        if not artifacts:
            if self.config.fail_on_empty:
                raise NoArtifactsProduced(
                    f"Run {run.run_id} produced no artifacts in {self.config.namespace}"
                )
            logger.warning(f"Run {run.run_id} produced no artifacts; nothing to verify")
        else:
            report.pod = self.resolve_pod()
            report.outcomes = self.verify_artifacts(artifacts, report.pod)

        self._transition(ScenarioState.VERDICT)
        if report.succeeded:
            logger.info(f"All {len(report.outcomes)} artifact(s) verified")
        else:
            logger.error(
                f"{len(report.failures)} of {len(report.outcomes)} artifact(s) failed verification"
            )
        return report
