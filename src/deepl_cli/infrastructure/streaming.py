"""Request bodies produced on a background thread.

A ``StreamingBody`` runs a producer callable on its own thread. The producer
writes into a ``PipeWriter`` backed by a bounded queue while the HTTP layer
iterates the body and sends chunks as they arrive, so memory use stays at a
few chunks regardless of the source size.

Error hand-off: a production failure is stored before the end marker is
queued, and the iterator raises it instead of ending cleanly. After
``close()`` the producer thread has exited, so ``raise_for_error()`` sees the
final state and a production error always wins over a generic transport error.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Iterator, Optional

from deepl_cli.domain.errors import DocumentProductionError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_BUFFERED_CHUNKS = 4

_END = object()
_POLL_INTERVAL = 0.1


class _ProducerAborted(Exception):
    """Raised inside the producer when the consumer went away."""


class PipeWriter:
    """Write end of the pipe, handed to the producer."""

    def __init__(self, body: "StreamingBody"):
        self._body = body

    def write(self, data: bytes) -> int:
        """Queue ``data``, blocking while the buffer is full."""
        size = self._body.chunk_size
        view = memoryview(data)
        for offset in range(0, len(view), size):
            self._body._put(bytes(view[offset : offset + size]))
        return len(data)


class StreamingBody:
    """Iterable request body filled by a background producer.

    A body can be iterated once; create a new one for every attempt.
    """

    def __init__(
        self,
        produce: Callable[[PipeWriter], None],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_buffered_chunks: int = DEFAULT_MAX_BUFFERED_CHUNKS,
        name: str = "body-producer",
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        if max_buffered_chunks < 1:
            raise ValueError("max_buffered_chunks must be positive")
        self.chunk_size = chunk_size
        self._produce = produce
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max_buffered_chunks)
        self._aborted = threading.Event()
        self._error: Optional[DocumentProductionError] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._started = False
        self._consumed = False

    @property
    def error(self) -> Optional[DocumentProductionError]:
        return self._error

    def start(self) -> None:
        if not self._started:
            self._started = True
            self._thread.start()

    def __iter__(self) -> Iterator[bytes]:
        if self._consumed:
            raise RuntimeError("StreamingBody can only be iterated once")
        self._consumed = True
        self.start()
        return self._chunks()

    def _chunks(self) -> Iterator[bytes]:
        while True:
            item = self._queue.get()
            if item is _END:
                # Never report a clean end while a production error is pending
                self.raise_for_error()
                return
            yield item  # type: ignore[misc]

    def _run(self) -> None:
        finished = False
        try:
            self._produce(PipeWriter(self))
            finished = True
        except _ProducerAborted:
            finished = True
            logger.debug("Body producer stopped: consumer closed the stream")
        except DocumentProductionError as e:
            self._error = e
        except Exception as e:
            error = DocumentProductionError(f"error producing request body: {e}")
            error.__cause__ = e
            self._error = error
        finally:
            # SystemExit and friends propagate, but the consumer must not see a clean end
            if not finished and self._error is None:
                self._error = DocumentProductionError("request body production aborted")
            if self._error is not None:
                logger.debug(f"Body producer failed: {self._error}")
            try:
                self._put(_END)
            except _ProducerAborted:
                pass

    def _put(self, item: object) -> None:
        while True:
            if self._aborted.is_set():
                raise _ProducerAborted()
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        """Stop the producer and wait for it to release its resources."""
        self._aborted.set()
        if not self._started:
            return
        while self._thread.is_alive():
            self._drain()
            self._thread.join(_POLL_INTERVAL)
        self._drain()

    def _drain(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def raise_for_error(self) -> None:
        """Raise the production error, if any."""
        if self._error is not None:
            raise self._error

    def __enter__(self) -> "StreamingBody":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
