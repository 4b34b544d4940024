"""
Platform REST client.

Thin httpx wrapper over the v2beta1 endpoints used by the verifier.
Every call requires HTTP 200; anything else is raised as a typed error
from artifact_probe.errors.
"""

import logging
import time
from typing import List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from artifact_probe.config import PlatformConfig
from artifact_probe.errors import (
    MalformedResponse,
    PipelineNotFound,
    RunFailed,
    RunTimeout,
    SubmissionFailure,
    TransportFailure,
    UnexpectedStatus,
)

from .models import (
    ArtifactDetail,
    ArtifactListing,
    ArtifactSummary,
    Pipeline,
    PipelineListing,
    PipelineSubmission,
    Run,
    RunRequest,
    RunState,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/apis/v2beta1"

ModelT = TypeVar("ModelT", bound=BaseModel)


class PlatformClient:
    """Client for the pipeline platform API."""

    def __init__(self, config: PlatformConfig, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize platform client.

        Args:
            config: Platform configuration (URL, TLS, timeouts, polling)
            transport: Optional httpx transport, used by tests
        """
        self.config = config
        headers = {}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"

        self._client = httpx.Client(
            base_url=config.api_url,
            headers=headers,
            verify=config.verify_tls,
            timeout=config.request_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PlatformClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Plumbing

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {path} failed: {e}") from e

        if response.status_code != 200:
            raise UnexpectedStatus(response.status_code, str(response.url), response.text)
        return response

    @staticmethod
    def _decode(response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponse(
                f"Could not decode {model.__name__} from {response.url}: {e}"
            ) from e

    # Pipelines

    def upload_pipeline(self, submission: PipelineSubmission) -> None:
        """
        Upload a compiled pipeline definition.

        Args:
            submission: Display name and definition file

        Raises:
            SubmissionFailure: If the definition file cannot be read
            TransportFailure, UnexpectedStatus: On HTTP failure
        """
        try:
            content = submission.definition_file.read_bytes()
        except OSError as e:
            raise SubmissionFailure(
                f"Cannot read pipeline definition {submission.definition_file}: {e}"
            ) from e

        files = {
            "uploadfile": (submission.definition_file.name, content, "application/octet-stream"),
        }
        logger.info(f"Uploading pipeline '{submission.name}' from {submission.definition_file}")
        self._request(
            "POST",
            f"{API_PREFIX}/pipelines/upload",
            params={"name": submission.name},
            files=files,
        )

    def list_pipelines(self) -> List[Pipeline]:
        """List all pipelines, following pagination."""
        pipelines = []
        page_token = None
        while True:
            params = {"page_token": page_token} if page_token else None
            response = self._request("GET", f"{API_PREFIX}/pipelines", params=params)
            listing = self._decode(response, PipelineListing)
            pipelines.extend(listing.pipelines)
            page_token = listing.next_page_token
            if not page_token:
                return pipelines

    def find_pipeline_id(self, name: str) -> str:
        """
        Look up a pipeline ID by display name.

        The pipeline may not be visible right after upload, so the lookup
        is retried config.lookup_attempts times.

        Raises:
            PipelineNotFound: If no pipeline matches after all attempts
        """
        attempts = max(1, self.config.lookup_attempts)
        for attempt in range(1, attempts + 1):
            for pipeline in self.list_pipelines():
                if pipeline.display_name == name:
                    logger.info(f"Resolved pipeline '{name}' to {pipeline.pipeline_id}")
                    return pipeline.pipeline_id

            logger.debug(f"Pipeline '{name}' not listed yet (attempt {attempt}/{attempts})")
            if attempt < attempts:
                time.sleep(self.config.poll_interval)

        raise PipelineNotFound(f"No pipeline named '{name}' after {attempts} attempts")

    # Runs

    def create_run(self, request: RunRequest) -> Run:
        """Start a run of an uploaded pipeline."""
        logger.info(f"Creating run '{request.display_name}' for pipeline {request.pipeline_id}")
        response = self._request("POST", f"{API_PREFIX}/runs", json=request.to_body())
        return self._decode(response, Run)

    def get_run(self, run_id: str) -> Run:
        response = self._request("GET", f"{API_PREFIX}/runs/{run_id}")
        return self._decode(response, Run)

    def wait_for_run(self, run_id: str) -> Run:
        """
        Poll a run until it reaches a terminal state.

        Returns:
            The succeeded run

        Raises:
            RunFailed: Run ended in FAILED, CANCELED or SKIPPED
            RunTimeout: No terminal state within config.run_timeout seconds
        """
        deadline = time.monotonic() + self.config.run_timeout
        while True:
            run = self.get_run(run_id)
            if run.state.is_terminal:
                if run.state != RunState.SUCCEEDED:
                    raise RunFailed(run_id, run.state.value)
                logger.info(f"Run {run_id} succeeded")
                return run

            if time.monotonic() >= deadline:
                raise RunTimeout(run_id, self.config.run_timeout, run.state.value)

            logger.debug(f"Run {run_id} is {run.state.value}, waiting")
            time.sleep(self.config.poll_interval)

    # Artifacts

    def list_artifacts(self, namespace: str) -> List[ArtifactSummary]:
        response = self._request("GET", f"{API_PREFIX}/artifacts", params={"namespace": namespace})
        return self._decode(response, ArtifactListing).artifacts

    def get_artifact(self, artifact_id: str) -> ArtifactDetail:
        response = self._request("GET", f"{API_PREFIX}/artifacts/{artifact_id}")
        return self._decode(response, ArtifactDetail)

    def get_artifact_download(self, artifact_id: str) -> ArtifactDetail:
        """Fetch the artifact with the download view; download_url is resolved."""
        response = self._request(
            "GET", f"{API_PREFIX}/artifacts/{artifact_id}", params={"view": "DOWNLOAD"}
        )
        logger.debug(f"Download view for {artifact_id}: {response.text}")
        return self._decode(response, ArtifactDetail)
