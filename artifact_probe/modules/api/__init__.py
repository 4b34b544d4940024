"""
API Module - Black Box Interface

Purpose: Talk to the pipeline platform's v2beta1 REST API
Interface: PlatformClient, wire models
Hidden: HTTP transport, retries, response decoding

Can be replaced with a generated KFP client.
"""

from .client import PlatformClient
from .models import (
    ArtifactDetail,
    ArtifactListing,
    ArtifactSummary,
    PipelineSubmission,
    Run,
    RunRequest,
    RunState,
    VerificationOutcome,
)

__all__ = [
    "PlatformClient",
    "ArtifactDetail",
    "ArtifactListing",
    "ArtifactSummary",
    "PipelineSubmission",
    "Run",
    "RunRequest",
    "RunState",
    "VerificationOutcome",
]
