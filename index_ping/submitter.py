# index_ping/submitter.py
"""
Batch submitter: splits validated URLs into batches and POSTs them to the notifier
with a per-request timeout and retry/backoff.

Retry policy per batch: 5xx answers and transport errors are retried up to
``retry_count`` times with ``0.5 s * 2**attempt`` backoff; any other non-2xx
answer is final on the first attempt. A failed batch is logged and recorded,
the remaining batches are still sent.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from index_ping.config import IndexNowConfig
from index_ping.errors import (
    NETWORK_ERROR,
    NotifierError,
    NotifierRejection,
    NotifierTransientFailure,
    ValidationError,
)
from index_ping.logger import get_logger
from index_ping.models import BatchFailure, BatchOutcome, BatchSubmitted, SubmissionMode, SubmissionResult
from index_ping.utils import backoff_delay, split_into_batches, truncate_snippet, validate_and_normalize_urls

__all__ = ["MAX_URLS_PER_BATCH", "RETRY_BASE_DELAY", "BatchSubmitter", "submit"]

MAX_URLS_PER_BATCH = 1000
RETRY_BASE_DELAY = 0.5

_JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}
_REJECTED_FALLBACK = "IndexNow request failed"
_NETWORK_FALLBACK = "Network error while submitting to IndexNow"


class BatchSubmitter:
    """Sends URL batches to ``config.notifier_endpoint`` one after another."""

    def __init__(
        self,
        config: IndexNowConfig,
        session: Optional[ClientSession] = None,
        *,
        batch_size: int = MAX_URLS_PER_BATCH,
        retry_count: Optional[int] = None,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self.batch_size = batch_size
        self.retry_count = config.retry_count if retry_count is None else retry_count
        self.retry_base_delay = retry_base_delay
        self._timeout = ClientTimeout(total=config.request_timeout)
        self.logger = get_logger("submitter")

    async def __aenter__(self) -> BatchSubmitter:
        if self.session is None:
            self.session = ClientSession(timeout=self._timeout, raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _payload(self, urls: List[str]) -> Dict[str, Any]:
        return {
            "host": self.config.site_host,
            "key": self.config.shared_key,
            "keyLocation": self.config.key_verification_url,
            "urlList": urls,
        }

    async def submit(self, urls: Sequence[Any], mode: Any = SubmissionMode.UPDATED) -> SubmissionResult:
        """Normalize *urls*, send every batch and aggregate the outcomes.

        Raises ValidationError before any network call when *urls* is not a
        list/tuple or *mode* is not one of created/updated/deleted.
        """
        if not isinstance(urls, (list, tuple)):
            raise ValidationError("urls must be an array")
        submission_mode = SubmissionMode.parse(mode)

        normalized = validate_and_normalize_urls(urls, self.config.site_origin)
        batches = split_into_batches(normalized.valid, self.batch_size)
        result = SubmissionResult(
            mode=submission_mode,
            total_urls=len(urls),
            valid_urls=len(normalized.valid),
            invalid_urls=len(normalized.invalid),
        )
        self.logger.info(
            "Submitting %d URLs (%s) in %d batch(es), %d invalid",
            len(normalized.valid),
            submission_mode.value,
            len(batches),
            len(normalized.invalid),
        )

        for batch_index, batch in enumerate(batches):
            result.record(await self.submit_batch(batch_index, batch, submission_mode))

        self.logger.info(
            "Submission finished: %d URLs in %d batch(es) accepted, %d batch(es) failed",
            result.submitted_count,
            result.submitted_batches,
            len(result.failed_batches),
        )
        return result

    async def submit_batch(self, batch_index: int, urls: List[str], mode: SubmissionMode) -> BatchOutcome:
        payload = self._payload(urls)
        attempt = 0

        while True:
            try:
                status = await self._post(payload)
                return BatchSubmitted(batch_index=batch_index, count=len(urls), status=status)
            except NotifierRejection as exc:
                return self._failed(batch_index, mode, exc)
            except NotifierTransientFailure as exc:
                if attempt >= self.retry_count:
                    return self._failed(batch_index, mode, exc)
                delay = backoff_delay(attempt, self.retry_base_delay)
                self.logger.warning(
                    "Batch %d: transient failure (%s), retry %d/%d in %.2f s",
                    batch_index,
                    exc.status,
                    attempt + 1,
                    self.retry_count,
                    delay,
                )
                await asyncio.sleep(delay)
                attempt += 1

    def _failed(self, batch_index: int, mode: SubmissionMode, failure: NotifierError) -> BatchFailure:
        self.logger.error(
            "Batch submission failed: mode=%s batch=%d status=%s body=%s",
            mode.value,
            batch_index,
            failure.status,
            failure.snippet,
        )
        return BatchFailure(batch_index=batch_index, status=failure.status, error_snippet=failure.snippet)

    async def _post(self, payload: Dict[str, Any]) -> int:
        """One POST; returns the 2xx status or raises a NotifierError subclass."""
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.post(
                self.config.notifier_endpoint,
                json=payload,
                headers=_JSON_HEADERS,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                if 200 <= status < 300:
                    return status
                body = truncate_snippet(await resp.text(errors="replace"))
        except (ClientError, asyncio.TimeoutError) as exc:
            snippet = truncate_snippet(str(exc)) or _NETWORK_FALLBACK
            raise NotifierTransientFailure(NETWORK_ERROR, snippet) from exc

        if 500 <= status < 600:
            raise NotifierTransientFailure(status, body or _REJECTED_FALLBACK)
        raise NotifierRejection(status, body or _REJECTED_FALLBACK)


async def submit(
    urls: Sequence[Any],
    mode: Any,
    config: IndexNowConfig,
    *,
    session: Optional[ClientSession] = None,
    **options,
) -> SubmissionResult:
    """Shortcut: open a :class:`BatchSubmitter` for *config* and submit *urls*."""
    async with BatchSubmitter(config, session, **options) as submitter:
        return await submitter.submit(urls, mode)
