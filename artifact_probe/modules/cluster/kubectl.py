"""kubectl subprocess runner shared by pod lookup and remote exec."""

import logging
import subprocess
from typing import List, Optional

from artifact_probe.config import KubectlConfig

logger = logging.getLogger(__name__)


class KubectlRunner:
    """Runs kubectl with the configured kubeconfig and context."""

    def __init__(self, config: Optional[KubectlConfig] = None):
        self.config = config or KubectlConfig()

    def base_command(self) -> List[str]:
        cmd = [self.config.binary]
        if self.config.kubeconfig:
            cmd += ["--kubeconfig", self.config.kubeconfig]
        if self.config.context:
            cmd += ["--context", self.config.context]
        return cmd

    def run(self, args: List[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        """
        Execute kubectl with args.

        Output is decoded as UTF-8 with undecodable bytes replaced, since
        exec stdout can be a binary download body.

        Raises whatever subprocess.run raises (OSError when kubectl is
        missing, subprocess.TimeoutExpired on timeout); callers classify.
        """
        cmd = self.base_command() + args
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout if timeout is not None else self.config.request_timeout,
        )
