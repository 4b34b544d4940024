"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Protocol

DEFAULT_COMPONENT = "ds-pipeline"
DEFAULT_PIPELINE_NAME = "Test Iris Pipeline"


def default_pod_selector(namespace: str, component: str = DEFAULT_COMPONENT) -> str:
    """Label selector for the platform pod of a namespace (app=<component>-<namespace>)."""
    return f"app={component}-{namespace}"


@dataclass
class PlatformConfig:
    """Platform API configuration."""
    api_url: str
    verify_tls: bool = True
    token: Optional[str] = None
    request_timeout: float = 30.0
    poll_interval: float = 5.0
    lookup_attempts: int = 10
    run_timeout: float = 900.0


@dataclass
class KubectlConfig:
    """kubectl invocation configuration."""
    binary: str = "kubectl"
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    request_timeout: float = 30.0
    exec_timeout: float = 60.0
    tty: bool = True


@dataclass
class ScenarioConfig:
    """Everything one verification scenario needs."""
    namespace: str
    platform: PlatformConfig
    pipeline_file: Path
    kubectl: KubectlConfig = field(default_factory=KubectlConfig)
    pipeline_name: str = DEFAULT_PIPELINE_NAME
    pod_selector: Optional[str] = None
    max_workers: int = 1
    fail_on_empty: bool = False

    @property
    def label_selector(self) -> str:
        """Pod selector, defaulting to the platform component of the namespace."""
        return self.pod_selector or default_pod_selector(self.namespace)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_platform_config(self) -> PlatformConfig:
        """Get platform API configuration."""
        ...

    def get_kubectl_config(self) -> KubectlConfig:
        """Get kubectl configuration."""
        ...

    def get_scenario_config(self) -> ScenarioConfig:
        """Get the full scenario configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    PREFIX = "ARTIFACT_PROBE_"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def _get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.environ.get(self.PREFIX + name, default)

    def _require(self, name: str) -> str:
        value = self._get(name)
        if not value:
            raise ValueError(
                f"{self.PREFIX}{name} environment variable is required."
            )
        return value

    def _flag(self, name: str, default: str) -> bool:
        return self._get(name, default).lower() == "true"

    def get_platform_config(self) -> PlatformConfig:
        """Get platform API configuration from environment variables."""
        return PlatformConfig(
            api_url=self._require("API_URL").rstrip("/"),
            verify_tls=self._flag("VERIFY_TLS", "true"),
            token=self._get("TOKEN"),
            request_timeout=float(self._get("REQUEST_TIMEOUT", "30")),
            poll_interval=float(self._get("POLL_INTERVAL", "5")),
            lookup_attempts=int(self._get("LOOKUP_ATTEMPTS", "10")),
            run_timeout=float(self._get("RUN_TIMEOUT", "900")),
        )

    def get_kubectl_config(self) -> KubectlConfig:
        """Get kubectl configuration from environment variables."""
        return KubectlConfig(
            binary=self._get("KUBECTL", "kubectl"),
            kubeconfig=self._get("KUBECONFIG") or self.environ.get("KUBECONFIG"),
            context=self._get("KUBE_CONTEXT"),
            request_timeout=float(self._get("KUBECTL_TIMEOUT", "30")),
            exec_timeout=float(self._get("EXEC_TIMEOUT", "60")),
            tty=self._flag("EXEC_TTY", "true"),
        )

    def get_scenario_config(self) -> ScenarioConfig:
        """Get the full scenario configuration from environment variables."""
        return ScenarioConfig(
            namespace=self._require("NAMESPACE"),
            platform=self.get_platform_config(),
            kubectl=self.get_kubectl_config(),
            pipeline_name=self._get("PIPELINE_NAME", DEFAULT_PIPELINE_NAME),
            pipeline_file=Path(self._require("PIPELINE_FILE")),
            pod_selector=self._get("POD_SELECTOR"),
            max_workers=int(self._get("MAX_WORKERS", "1")),
            fail_on_empty=self._flag("FAIL_ON_EMPTY", "false"),
        )
