"""A single open connection to a debate event stream."""

import itertools
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from .exceptions import StreamTransportError
from .frames import Frame, iter_frames

logger = logging.getLogger(__name__)

_connection_ids = itertools.count(1)


class StreamConnection:
    """Server-push connection yielding frames until closed.

    ``close()`` is idempotent and takes effect between frames: once it has
    been called no further frame is yielded, and bytes still unread on the
    wire are discarded rather than replayed anywhere.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ):
        self.id = next(_connection_ids)
        self._client = client
        self._method = method
        self._url = url
        self._params = params
        self._json = json
        self._timeout = httpx.Timeout(10.0, read=timeout)
        self._closed = False
        self._started = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop delivering frames from this connection."""
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Stream connection {self.id} closed")

    async def events(self) -> AsyncIterator[Frame]:
        """Open the stream and yield frames in arrival order."""
        if self._started:
            raise RuntimeError(f"Stream connection {self.id} was already consumed")
        self._started = True
        if self._closed:
            return

        logger.info(f"Opening stream connection {self.id}: {self._method} {self._url}")
        try:
            async with self._client.stream(
                self._method,
                self._url,
                params=self._params,
                json=self._json,
                headers={"Accept": "text/event-stream"},
                timeout=self._timeout,
            ) as response:
                if response.is_error:
                    await response.aread()
                    raise StreamTransportError(
                        f"Stream request failed with status {response.status_code}: {response.text[:200]}"
                    )

                async with aclosing(iter_frames(response.aiter_text())) as frames:
                    async for frame in frames:
                        if self._closed:
                            return
                        yield frame
                        if self._closed:
                            return
        except httpx.HTTPError as e:
            raise StreamTransportError(f"Stream connection {self.id} failed: {e}") from e
        finally:
            self._closed = True

        logger.info(f"Stream connection {self.id} ended by server")
