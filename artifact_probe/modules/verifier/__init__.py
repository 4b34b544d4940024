"""
Verifier Module - Black Box Interface

Purpose: Run the artifact verification scenario end to end
Interface: ArtifactVerifier.run(), ScenarioReport, is_access_denied()
Hidden: Step ordering, failure aggregation, per-artifact concurrency
"""

from .verifier import (
    ACCESS_DENIED_MARKER,
    ArtifactVerifier,
    ScenarioReport,
    ScenarioState,
    download_command,
    is_access_denied,
)

__all__ = [
    "ACCESS_DENIED_MARKER",
    "ArtifactVerifier",
    "ScenarioReport",
    "ScenarioState",
    "download_command",
    "is_access_denied",
]
