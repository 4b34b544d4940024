"""
Remote Command Executor.

Runs a shell command inside a pod through `kubectl exec` and classifies
failures. A non-zero exit of the remote command is not an error here;
callers inspect the output.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

from artifact_probe.errors import ExecSetupFailure, StreamFailure

from .kubectl import KubectlRunner

logger = logging.getLogger(__name__)

# kubectl reports the remote exit status this way and exits with that status
REMOTE_EXIT_MARKER = "command terminated with exit code"

STREAM_ERROR_MARKERS = (
    "connection reset",
    "unexpected eof",
    "broken pipe",
    "lost connection",
    "use of closed network connection",
    "error reading from error stream",
)


@dataclass
class ExecResult:
    """Captured streams of a remote command."""
    stdout: str
    stderr: str
    return_code: int


class RemoteCommandExecutor:
    """Execute shell commands inside pods."""

    def __init__(self, kubectl: Optional[KubectlRunner] = None):
        self.kubectl = kubectl or KubectlRunner()

    def build_args(self, namespace: str, pod_name: str, command: str) -> list:
        args = ["exec", "-n", namespace, pod_name]
        if self.kubectl.config.tty:
            args.append("-t")
        return args + ["--", "sh", "-c", command]

    def run(self, namespace: str, pod_name: str, command: str) -> ExecResult:
        """
        Run command via `sh -c` in the pod and capture both streams.

        Raises:
            ExecSetupFailure: kubectl missing, or the session never started
            StreamFailure: the stream broke or the exec timeout elapsed
        """
        args = self.build_args(namespace, pod_name, command)
        timeout = self.kubectl.config.exec_timeout
        try:
            process = self.kubectl.run(args, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise StreamFailure(
                f"Command in {namespace}/{pod_name} did not finish within {timeout}s"
            ) from e
        except OSError as e:
            raise ExecSetupFailure(f"Could not run kubectl: {e}") from e

        stdout = process.stdout or ""
        stderr = process.stderr or ""

        if process.returncode != 0 and REMOTE_EXIT_MARKER not in stderr:
            lowered = stderr.lower()
            if any(marker in lowered for marker in STREAM_ERROR_MARKERS):
                raise StreamFailure(
                    f"Exec stream to {namespace}/{pod_name} failed: {stderr.strip()}"
                )
            raise ExecSetupFailure(
                f"Could not exec into {namespace}/{pod_name}: {stderr.strip()}"
            )

        if process.returncode != 0:
            logger.debug(f"Remote command exited {process.returncode} in {pod_name}")

        return ExecResult(stdout=stdout, stderr=stderr, return_code=process.returncode)

    def exec_in_pod(self, namespace: str, pod_name: str, command: str) -> str:
        """Run command in the pod and return its stdout."""
        return self.run(namespace, pod_name, command).stdout
