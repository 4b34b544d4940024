"""Pod Locator: resolve a running pod by label selector."""

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

from artifact_probe.errors import PodListFailure, PodNotFound

from .kubectl import KubectlRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemotePod:
    """Reference to a pod used for remote commands."""
    name: str
    namespace: str


class PodLocator:
    """Find a pod matching a label selector in a namespace."""

    def __init__(self, kubectl: Optional[KubectlRunner] = None):
        self.kubectl = kubectl or KubectlRunner()

    def locate_pod(self, namespace: str, label_selector: str) -> RemotePod:
        """
        Resolve the first pod matching label_selector.

        "First" is the first item in kubectl's listing order; no further
        ordering is applied and none is guaranteed by the API server.

        Args:
            namespace: Namespace to search
            label_selector: Selector such as app=ds-pipeline-<namespace>

        Returns:
            RemotePod with a non-empty name

        Raises:
            PodListFailure: If listing fails or returns unreadable output
            PodNotFound: If nothing matches
        """
        if not namespace:
            raise ValueError("namespace must not be empty")

        args = ["get", "pods", "-n", namespace, "-l", label_selector, "-o", "json"]
        try:
            process = self.kubectl.run(args)
        except subprocess.TimeoutExpired as e:
            raise PodListFailure(f"Listing pods in {namespace} timed out") from e
        except OSError as e:
            raise PodListFailure(f"Could not run kubectl: {e}") from e

        if process.returncode != 0:
            raise PodListFailure(
                f"failed to list pods in {namespace}: {process.stderr.strip()}"
            )

        try:
            items = json.loads(process.stdout).get("items") or []
        except (json.JSONDecodeError, AttributeError) as e:
            raise PodListFailure(f"Unreadable pod listing for {namespace}: {e}") from e

        if not items:
            raise PodNotFound(f"no pods found with the label {label_selector}")

        name = (items[0].get("metadata") or {}).get("name")
        if not name:
            raise PodNotFound(f"first pod matching {label_selector} has no name")

        if len(items) > 1:
            logger.debug(f"{len(items)} pods match {label_selector}, using {name}")
        logger.info(f"Resolved pod {namespace}/{name} for {label_selector}")
        return RemotePod(name=name, namespace=namespace)
