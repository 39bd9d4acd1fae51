"""Async-job image generation provider (submit, then poll for completion)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.errors import ApiError, TokenAcquisitionError
from backdrop.core.providers.base import DEFAULT_HEIGHT, DEFAULT_WIDTH
from backdrop.core.providers.direct import DirectGenerationProvider
from backdrop.core.providers.errors import (
    GenerationJobFailedError,
    GenerationSubmitError,
    GenerationTimeoutError,
    ProviderAuthError,
)
from backdrop.core.providers.extraction import extract_image_reference, find_image_reference
from backdrop.core.scenes.models import GenerationJob, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 2.0
DEFAULT_MAX_POLLS = 30


def _job_id(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for key in ("jobId", "job_id", "id"):
        value = data.get(key)
        if value:
            return str(value)
    return None


class AsyncJobGenerationProvider(DirectGenerationProvider):
    """Generation provider backed by an asynchronous job API.

    ``POST /generate`` returns a job id; ``GET /status/{job_id}`` is polled
    every ``poll_interval_s`` seconds for at most ``max_polls`` attempts.
    Polling sleeps before each status request.

    Status handling:
    - succeeded: extract the image from ``result`` (or the top level)
    - failed / cancelled: raise GenerationJobFailedError
    - running / cancel_pending: keep polling
    - HTTP error status on a poll: logged, polling continues (the attempt
      still counts toward ``max_polls``)

    Args:
        http_client: Client rooted at the generation service
        width: Output width in pixels
        height: Output height in pixels
        poll_interval_s: Delay before each status poll
        max_polls: Maximum number of status polls
        generate_path: Submit endpoint path
        status_path: Status endpoint template with ``{job_id}``
    """

    def __init__(
        self,
        http_client: AsyncApiClient,
        *,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        max_polls: int = DEFAULT_MAX_POLLS,
        generate_path: str = "/generate",
        status_path: str = "/status/{job_id}",
    ) -> None:
        super().__init__(http_client, width=width, height=height, generate_path=generate_path)
        if max_polls < 1:
            raise ValueError("max_polls must be >= 1")
        self._poll_interval_s = poll_interval_s
        self._max_polls = max_polls
        self._status_path = status_path

    @property
    def ceiling_s(self) -> float:
        """Total polling budget in seconds."""
        return self._max_polls * self._poll_interval_s

    async def _run(self, body: dict[str, Any]) -> str:
        data = await self._submit(body)

        # Some deployments answer synchronously even on the job endpoint.
        inline = find_image_reference(data)
        if inline:
            return inline

        job_id = _job_id(data)
        if not job_id:
            raise GenerationSubmitError("Generation submit response contained no job id")

        logger.debug("Submitted generation job %s", job_id)
        return await self._poll(job_id)

    async def _poll(self, job_id: str) -> str:
        path = self._status_path.format(job_id=job_id)

        for attempt in range(1, self._max_polls + 1):
            await asyncio.sleep(self._poll_interval_s)

            try:
                resp = await self._http.get(path)
                payload = self._http.json(resp)
            except TokenAcquisitionError as e:
                raise ProviderAuthError(f"Generation auth failed while polling: {e}") from e
            except ApiError as e:
                if e.status_code is None:
                    raise
                logger.warning(
                    "Status poll %d/%d for job %s failed: %s",
                    attempt,
                    self._max_polls,
                    job_id,
                    e,
                )
                continue

            job = self._parse_job(job_id, payload)
            logger.debug("Job %s poll %d: %s", job_id, attempt, job.status.value)
            if not job.status.is_terminal:
                continue

            if job.status == JobStatus.SUCCEEDED:
                if job.result:
                    ref = find_image_reference(job.result)
                    if ref:
                        return ref
                return extract_image_reference(payload)

            reason = job.message or job.error_code or "no reason given"
            raise GenerationJobFailedError(
                f"Generation job {job_id} {job.status.value}: {reason}",
                job_id=job_id,
                status=job.status.value,
            )

        raise GenerationTimeoutError(
            f"Generation job {job_id} did not finish within {self.ceiling_s:.0f}s "
            f"({self._max_polls} polls)",
            job_id=job_id,
            polls=self._max_polls,
            ceiling_s=self.ceiling_s,
        )

    def _parse_job(self, job_id: str, payload: Any) -> GenerationJob:
        if not isinstance(payload, dict):
            return GenerationJob(job_id=job_id, status=JobStatus.RUNNING)

        raw_status = str(payload.get("status", "running")).lower()
        try:
            status = JobStatus(raw_status)
        except ValueError:
            logger.warning("Unknown status %r for job %s, treating as running", raw_status, job_id)
            status = JobStatus.RUNNING

        error = payload.get("error")
        message = payload.get("message")
        error_code = payload.get("error_code") or payload.get("errorCode")
        if isinstance(error, dict):
            message = message or error.get("message")
            error_code = error_code or error.get("code")
        elif isinstance(error, str):
            message = message or error

        result = payload.get("result")
        try:
            return GenerationJob(
                job_id=job_id,
                status=status,
                message=message,
                error_code=str(error_code) if error_code is not None else None,
                result=result if isinstance(result, dict) else None,
            )
        except ValidationError:
            return GenerationJob(job_id=job_id, status=status)
