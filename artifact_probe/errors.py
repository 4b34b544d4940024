"""Error taxonomy for artifact verification scenarios."""

from typing import Iterable, Optional


class ArtifactProbeError(Exception):
    """Base class for all artifact-probe failures."""


# Transport / decoding


class TransportFailure(ArtifactProbeError):
    """Network or connection error talking to the platform API."""


class UnexpectedStatus(ArtifactProbeError):
    """Platform API answered with a non-200 status."""

    def __init__(self, status_code: int, url: str, body: str = ""):
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(f"Unexpected status {status_code} from {url}: {body[:200]}")


class MalformedResponse(ArtifactProbeError):
    """Response body could not be decoded into the expected shape."""


class MalformedURL(ArtifactProbeError):
    """Download URL could not be parsed."""


# Cluster side


class PodResolutionFailure(ArtifactProbeError):
    """No usable pod could be resolved."""


class PodListFailure(PodResolutionFailure):
    """Listing pods failed (network, auth, API error)."""


class PodNotFound(PodResolutionFailure):
    """No pod matches the label selector."""


class ExecFailure(ArtifactProbeError):
    """Base class for remote command failures."""


class ExecSetupFailure(ExecFailure):
    """The exec session could not be established."""


class StreamFailure(ExecFailure):
    """The exec stream broke or timed out mid-execution."""


# Scenario steps


class SubmissionFailure(ArtifactProbeError):
    """Pipeline upload failed."""


class PipelineNotFound(ArtifactProbeError):
    """Uploaded pipeline could not be found by display name."""


class RunCreationFailure(ArtifactProbeError):
    """Run creation request failed."""


class RunFailed(ArtifactProbeError):
    """Run reached a non-successful terminal state."""

    def __init__(self, run_id: str, state: str):
        self.run_id = run_id
        self.state = state
        super().__init__(f"Run {run_id} finished in state {state}")


class RunTimeout(ArtifactProbeError):
    """Run did not reach a terminal state in time."""

    def __init__(self, run_id: str, timeout: float, last_state: Optional[str] = None):
        self.run_id = run_id
        self.timeout = timeout
        self.last_state = last_state
        super().__init__(
            f"Run {run_id} not finished after {timeout}s (last state: {last_state or 'unknown'})"
        )


class NoArtifactsProduced(ArtifactProbeError):
    """Run produced no artifacts and empty listings are configured to fail."""


# Verdict


class AccessDenied(ArtifactProbeError):
    """Artifact download returned an access-denied body."""

    def __init__(self, artifact_id: str, output: str):
        self.artifact_id = artifact_id
        self.output = output
        super().__init__(f"Access denied downloading artifact {artifact_id}: {output}")


class ArtifactVerificationFailed(ArtifactProbeError):
    """At least one artifact failed verification."""

    def __init__(self, failures: Iterable):
        self.failures = list(failures)
        lines = [f"{len(self.failures)} artifact(s) failed verification:"]
        for outcome in self.failures:
            lines.append(f"  - {outcome.artifact_id}: {outcome.message}")
        super().__init__("\n".join(lines))
