"""
Shared pytest fixtures for artifact-probe tests.

This module provides common fixtures including:
- KubectlMocker: Mock kubectl subprocess calls with canned responses
- FakePlatform: In-process v2beta1 platform API behind httpx.MockTransport
- Scenario configuration pointing at both
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union
from unittest.mock import MagicMock, patch

import httpx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from artifact_probe.config import KubectlConfig, PlatformConfig, ScenarioConfig
from artifact_probe.modules.api import PlatformClient


# =============================================================================
# Kubectl Mocking Infrastructure
# =============================================================================

@dataclass
class KubectlResponse:
    """Represents a mocked kubectl command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    raises: Optional[BaseException] = None

    def to_completed_process(self) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        if self.raises is not None:
            raise self.raises
        result = MagicMock()
        result.stdout = self.stdout
        result.stderr = self.stderr
        result.returncode = self.returncode
        return result


@dataclass
class KubectlCall:
    """Record of a kubectl call made during testing."""
    command: List[str]
    full_command_str: str
    timeout: Optional[float] = None
    matched_pattern: Optional[str] = None
    response: Optional[KubectlResponse] = None


class KubectlMocker:
    """
    Mock kubectl subprocess calls with pattern-matched responses.

    This allows testing pod lookup and remote exec without a real
    Kubernetes cluster by intercepting subprocess.run calls.

    Usage:
        def test_locate(kubectl_mocker):
            kubectl_mocker.register("get pods", KubectlResponse(
                stdout=pod_list_json("ds-pipeline-dspa-test-1")
            ))

            pod = PodLocator().locate_pod("dspa-test", "app=ds-pipeline-dspa-test")

            assert kubectl_mocker.was_called_with("get pods")
    """

    def __init__(self):
        self._responses: List[Tuple[Union[str, Pattern], KubectlResponse, int]] = []
        self._call_history: List[KubectlCall] = []
        self._default_response = KubectlResponse(
            stderr="Error: mock not configured for this command",
            returncode=1
        )

    def register(
        self,
        pattern: Union[str, Pattern],
        response: KubectlResponse,
        priority: int = 0
    ) -> "KubectlMocker":
        """
        Register a response for commands matching the pattern.

        Args:
            pattern: String (substring match) or regex pattern
            response: KubectlResponse to return when matched
            priority: Higher priority patterns are checked first

        Returns:
            self for chaining
        """
        self._responses.append((pattern, response, priority))
        # Sort by priority (highest first)
        self._responses.sort(key=lambda x: x[2], reverse=True)
        return self

    def register_scenario(self, scenario_name: str) -> "KubectlMocker":
        """
        Register all responses for a named scenario.

        Args:
            scenario_name: One of the predefined scenario names

        Returns:
            self for chaining
        """
        from fixtures.kubectl_scenarios import SCENARIOS

        if scenario_name not in SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario_name}. "
                f"Available: {list(SCENARIOS.keys())}"
            )

        for pattern, response in SCENARIOS[scenario_name].items():
            self.register(pattern, response)

        return self

    def mock_run(
        self,
        cmd: List[str],
        capture_output: bool = True,
        text: bool = True,
        timeout: Optional[float] = None,
        **kwargs
    ) -> MagicMock:
        """
        Mock implementation of subprocess.run for kubectl commands.

        This method is used as a side_effect for patching subprocess.run.
        """
        cmd_str = " ".join(cmd)

        if cmd[0] != "kubectl":
            raise RuntimeError(f"Non-kubectl command blocked: {cmd_str}")

        kubectl_args = " ".join(cmd[1:])
        matched_pattern = None
        response = self._default_response

        for pattern, resp, _ in self._responses:
            if isinstance(pattern, str):
                if pattern in kubectl_args:
                    matched_pattern = pattern
                    response = resp
                    break
            else:  # Compiled regex
                if pattern.search(kubectl_args):
                    matched_pattern = pattern.pattern
                    response = resp
                    break

        self._call_history.append(KubectlCall(
            command=cmd,
            full_command_str=cmd_str,
            timeout=timeout,
            matched_pattern=matched_pattern,
            response=response
        ))

        return response.to_completed_process()

    @property
    def calls(self) -> List[KubectlCall]:
        """Get all kubectl calls made during the test."""
        return self._call_history

    @property
    def call_count(self) -> int:
        """Get the number of kubectl calls made."""
        return len(self._call_history)

    def was_called_with(self, pattern: str) -> bool:
        """Check if any call contained the given pattern."""
        return any(pattern in call.full_command_str for call in self._call_history)

    def get_calls_matching(self, pattern: str) -> List[KubectlCall]:
        """Get all calls containing the given pattern."""
        return [c for c in self._call_history if pattern in c.full_command_str]


@pytest.fixture
def kubectl_mocker():
    """
    Fixture that provides a KubectlMocker with subprocess.run patched.

    Usage:
        def test_something(kubectl_mocker):
            kubectl_mocker.register("get pods", KubectlResponse(stdout="..."))
            # Your test code that calls kubectl
            assert kubectl_mocker.was_called_with("get pods")
    """
    mocker = KubectlMocker()
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# Platform API Mocking Infrastructure
# =============================================================================

ResponseSpec = Union[httpx.Response, Exception]


@dataclass
class Route:
    method: str
    path: str
    params: Dict[str, str]
    responses: List[ResponseSpec] = field(default_factory=list)

    def matches(self, request: httpx.Request) -> bool:
        if request.method != self.method or request.url.path != self.path:
            return False
        return all(request.url.params.get(k) == v for k, v in self.params.items())

    def next_response(self) -> ResponseSpec:
        # Queued responses are consumed in order; the last one repeats
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FakePlatform:
    """
    In-process stand-in for the pipeline platform's v2beta1 API.

    Routes match on method, path and (optionally) query params; routes
    with params take precedence. Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes: List[Route] = []
        self.requests: List[httpx.Request] = []

    def route(
        self,
        method: str,
        path: str,
        *responses: ResponseSpec,
        params: Optional[Dict[str, str]] = None,
    ) -> "FakePlatform":
        self.routes.append(Route(method, path, params or {}, list(responses)))
        self.routes.sort(key=lambda r: len(r.params), reverse=True)
        return self

    def json(self, method: str, path: str, body: Any, status: int = 200, **kwargs) -> "FakePlatform":
        return self.route(method, path, httpx.Response(status, json=body), **kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for route in self.routes:
            if route.matches(request):
                response = route.next_response()
                if isinstance(response, Exception):
                    raise response
                # Fresh copy per request; the last queued response repeats
                return httpx.Response(
                    response.status_code, headers=response.headers, content=response.content
                )
        return httpx.Response(404, json={"error": "not found", "path": request.url.path})

    def calls(self, method: str, path: str, **params: str) -> List[httpx.Request]:
        """Requests seen for method + path whose query contains params."""
        return [
            r for r in self.requests
            if r.method == method and r.url.path == path
            and all(r.url.params.get(k) == v for k, v in params.items())
        ]

    def serve_scenario(
        self,
        artifacts: List[Dict[str, str]],
        pipeline_name: str = "Test Iris Pipeline",
        run_states: Tuple[str, ...] = ("RUNNING", "SUCCEEDED"),
        download_host: str = "https://minio-dspa-test.dspa-test.svc.cluster.local:9000",
    ) -> "FakePlatform":
        """Register a complete happy-path platform for the given artifact list."""
        self.json("POST", "/apis/v2beta1/pipelines/upload", {"pipeline_id": "p-123", "display_name": pipeline_name})
        self.json("GET", "/apis/v2beta1/pipelines", {"pipelines": [
            {"pipeline_id": "p-000", "display_name": "Some Other Pipeline"},
            {"pipeline_id": "p-123", "display_name": pipeline_name},
        ]})
        self.json("POST", "/apis/v2beta1/runs", {"run_id": "r-1", "display_name": pipeline_name, "state": "PENDING"})
        self.route("GET", "/apis/v2beta1/runs/r-1", *[
            httpx.Response(200, json={"run_id": "r-1", "state": state}) for state in run_states
        ])
        self.json("GET", "/apis/v2beta1/artifacts", {"artifacts": artifacts})
        for artifact in artifacts:
            artifact_id = artifact["artifact_id"]
            path = f"/apis/v2beta1/artifacts/{artifact_id}"
            self.json("GET", path, {"artifact_id": artifact_id, "download_url": ""})
            self.json("GET", path, {
                "artifact_id": artifact_id,
                "download_url": f"{download_host}/mlpipeline/{artifact_id}?X-Amz-Algorithm=AWS4-HMAC-SHA256&X-Amz-Signature=abc123",
            }, params={"view": "DOWNLOAD"})
        return self


@pytest.fixture
def platform():
    """A FakePlatform with no routes."""
    return FakePlatform()


@pytest.fixture
def platform_config():
    return PlatformConfig(
        api_url="http://ds-pipeline-dspa-test.dspa-test.svc:8888",
        poll_interval=0,
        lookup_attempts=3,
        run_timeout=5,
    )


@pytest.fixture
def client(platform, platform_config):
    """PlatformClient wired to the FakePlatform."""
    with PlatformClient(platform_config, transport=httpx.MockTransport(platform.handler)) as c:
        yield c


@pytest.fixture
def pipeline_file(tmp_path):
    path = tmp_path / "iris_pipeline_without_cache_compiled.yaml"
    path.write_text("pipelineInfo:\n  name: iris-training-pipeline\n")
    return path


@pytest.fixture
def scenario_config(platform_config, pipeline_file):
    return ScenarioConfig(
        namespace="dspa-test",
        platform=platform_config,
        kubectl=KubectlConfig(exec_timeout=15),
        pipeline_file=pipeline_file,
    )


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "kubectl_mock: Tests using mocked kubectl subprocess calls"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests across platform API and cluster mocks"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests requiring a real cluster"
    )
