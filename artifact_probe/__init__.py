"""
artifact-probe - Pipeline Artifact Verification

End-to-end check that artifacts produced by a pipeline run can be
listed through the platform API and downloaded from inside the cluster.

Architecture:
- Each module is self-contained with clear interfaces
- Cluster access goes through kubectl only
- Platform access goes through the v2beta1 REST API only

Modules:
- api: Platform REST client and wire models
- cluster: Pod lookup and remote command execution
- urls: Download URL normalization
- verifier: Scenario orchestration and verdict
"""

__version__ = "1.0.0"
