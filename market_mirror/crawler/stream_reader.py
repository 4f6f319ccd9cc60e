"""
Byte-capped reading of streamed HTTP bodies.

Seller pages can run to several hundred kilobytes while the parts we need sit
near the top. The reader buffers at most ``max_bytes``, can stop as soon as a
marker shows up in what it has buffered, and enforces a wall-clock budget
measured from the moment the stream is opened.
"""

import asyncio
import logging
import re
import time
from typing import Callable, List, Optional, Pattern, Union

import aiohttp

from ..models import StreamReadResult
from .exceptions import StreamTimeoutError

logger = logging.getLogger(__name__)

# Errors a socket raises once we have torn it down ourselves.
CONNECTION_DROP_ERRORS = (
    ConnectionResetError,
    aiohttp.ClientPayloadError,
    aiohttp.ClientConnectionError,
)

ABORT_MAX_BYTES = "max_bytes"
ABORT_EARLY = "early_abort"


def marker_predicate(marker: Union[str, Pattern[str]]) -> Callable[[str], bool]:
    """Build a content predicate that matches a regex marker (case-insensitive)."""
    pattern = re.compile(marker, re.IGNORECASE) if isinstance(marker, str) else marker
    return lambda text: pattern.search(text) is not None


class _ReadState:
    def __init__(self) -> None:
        self.chunks: List[bytes] = []
        self.buffered = 0
        self.byte_count = 0
        self.aborted: Optional[str] = None


class BoundedStreamReader:
    """Reads a streamed response body under a byte cap and a time budget."""

    def __init__(
        self,
        max_bytes: int,
        timeout_ms: int,
        early_abort: bool = False,
        early_abort_min_bytes: int = 8192,
        predicate: Optional[Callable[[str], bool]] = None,
    ):
        """
        Initialize the reader.

        Args:
            max_bytes: Hard cap on buffered bytes.
            timeout_ms: Wall-clock budget from stream start, in milliseconds.
            early_abort: Whether to stop once ``predicate`` matches.
            early_abort_min_bytes: Buffered size required before testing ``predicate``.
            predicate: Test applied to the buffered bytes decoded as UTF-8.
        """
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if early_abort and predicate is None:
            raise ValueError("early_abort requires a predicate")
        self.max_bytes = max_bytes
        self.timeout_ms = timeout_ms
        self.early_abort = early_abort
        self.early_abort_min_bytes = early_abort_min_bytes
        self.predicate = predicate

    async def read(self, response: aiohttp.ClientResponse) -> StreamReadResult:
        """
        Consume ``response.content`` until it ends, the cap is hit, or the
        early-abort marker is seen.

        A connection error raised after this reader closed the connection on
        purpose counts as a normal end of stream.

        Raises:
            StreamTimeoutError: If the body does not finish within ``timeout_ms``.
        """
        state = _ReadState()
        started = time.monotonic()
        try:
            await asyncio.wait_for(
                self._consume(response, state), timeout=self.timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            response.close()
            raise StreamTimeoutError(
                url=str(getattr(response, "url", "")) or None, timeout_ms=self.timeout_ms
            ) from None
        except CONNECTION_DROP_ERRORS as e:
            if state.aborted is None:
                raise
            logger.debug(f"Connection dropped after {state.aborted}: {type(e).__name__}")

        return StreamReadResult(
            buffer=b"".join(state.chunks),
            byte_count=state.byte_count,
            elapsed_ms=int((time.monotonic() - started) * 1000),
            aborted=state.aborted,
        )

    async def _consume(self, response: aiohttp.ClientResponse, state: _ReadState) -> None:
        async for chunk in response.content.iter_any():
            # After an abort the socket is closing; drain whatever is left
            # without keeping it.
            if state.aborted is not None:
                continue

            state.byte_count += len(chunk)
            if state.byte_count <= self.max_bytes:
                state.chunks.append(chunk)
                state.buffered += len(chunk)
            else:
                self._abort(response, state, ABORT_MAX_BYTES)
                continue

            if self.early_abort and state.buffered >= self.early_abort_min_bytes:
                preview = b"".join(state.chunks).decode("utf-8", errors="replace")
                if self.predicate(preview):
                    self._abort(response, state, ABORT_EARLY)

    def _abort(self, response: aiohttp.ClientResponse, state: _ReadState, reason: str) -> None:
        state.aborted = reason
        logger.debug(f"Aborting stream ({reason}) after {state.byte_count} bytes")
        response.close()
