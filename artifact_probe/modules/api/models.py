"""
Platform wire models.

These models define the structure of the data exchanged with the
pipeline platform's v2beta1 REST API, plus the per-artifact outcome
produced by the verifier.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Enums


class RunState(str, Enum):
    """Runtime state of a pipeline run."""

    UNSPECIFIED = "RUNTIME_STATE_UNSPECIFIED"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"
    CANCELING = "CANCELING"
    CANCELED = "CANCELED"
    PAUSED = "PAUSED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = {RunState.SUCCEEDED, RunState.SKIPPED, RunState.FAILED, RunState.CANCELED}


# Request Models


class PipelineSubmission(BaseModel):
    """A pipeline definition to upload."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pipeline display name", min_length=1)
    definition_file: Path = Field(..., description="Compiled pipeline definition")


class RunRequest(BaseModel):
    """Request to start a run of an uploaded pipeline."""

    model_config = ConfigDict(frozen=True)

    pipeline_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)

    def to_body(self) -> Dict[str, Any]:
        """Render the v2beta1 run-creation body."""
        return {
            "display_name": self.display_name,
            "pipeline_version_reference": {"pipeline_id": self.pipeline_id},
        }


# Response Models


class Pipeline(BaseModel):
    """Pipeline entry of the pipeline listing."""

    pipeline_id: str
    display_name: str = ""


class PipelineListing(BaseModel):
    pipelines: List[Pipeline] = Field(default_factory=list)
    next_page_token: Optional[str] = None


class Run(BaseModel):
    """A pipeline run as reported by the platform."""

    run_id: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    state: RunState = RunState.UNSPECIFIED

    @field_validator("state", mode="before")
    @classmethod
    def coerce_state(cls, v):
        """Unknown or missing states are kept as unspecified."""
        if v is None:
            return RunState.UNSPECIFIED
        try:
            return RunState(v)
        except ValueError:
            return RunState.UNSPECIFIED


class ArtifactSummary(BaseModel):
    """Artifact entry of the artifact listing; download_url may be a placeholder."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str = Field(..., min_length=1)
    download_url: str = ""


class ArtifactListing(BaseModel):
    artifacts: List[ArtifactSummary] = Field(default_factory=list)

    @field_validator("artifacts", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        # The platform sends null instead of [] when a namespace has no artifacts
        return [] if v is None else v


class ArtifactDetail(BaseModel):
    """Artifact detail; with the download view, download_url is absolute."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str = Field(..., min_length=1)
    download_url: str = ""


# Outcome


class VerificationOutcome(BaseModel):
    """Result of verifying one artifact."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    succeeded: bool
    message: Optional[str] = None
    download_url: Optional[str] = None
