"""
Background PDF processing.

PdfWorker owns a thread and an inbox; it is reached only by messages:

    ProcessFilesRequest(id, files)  ->  ProgressEvent* then exactly one
                                        ResultEvent or ErrorEvent

PdfWorkerClient wraps that protocol in futures: one Future per request,
progress routed to the per-request callback. terminate() stops the worker
and fails every pending request with WorkerTerminated.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from ..contracts.processing import ProcessingResult
from ..contracts.uploads import UploadedFile
from .processor import PdfProcessor

logger = logging.getLogger(__name__)


class WorkerTerminated(RuntimeError):
    pass


class WorkerError(RuntimeError):
    """The worker reported an ErrorEvent for a request."""


# ----------------------------
# Messages
# ----------------------------


@dataclass(frozen=True)
class ProcessFilesRequest:
    id: str
    files: Tuple[UploadedFile, ...]


@dataclass(frozen=True)
class ProgressEvent:
    id: str
    current: int
    total: int
    file_name: str = ""


@dataclass(frozen=True)
class ResultEvent:
    id: str
    result: ProcessingResult


@dataclass(frozen=True)
class ErrorEvent:
    id: str
    error: str


WorkerEvent = Union[ProgressEvent, ResultEvent, ErrorEvent]
ProgressHandler = Callable[[ProgressEvent], None]

_STOP = object()


# ----------------------------
# Worker
# ----------------------------


class PdfWorker:
    """Processes one request at a time, in arrival order."""

    def __init__(
        self,
        processor: PdfProcessor,
        emit: Callable[[WorkerEvent], None],
        *,
        name: str = "pdf-worker",
    ) -> None:
        self._processor = processor
        self._emit = emit
        self._inbox: "queue.Queue[object]" = queue.Queue()
        self._stopping = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def post(self, request: ProcessFilesRequest) -> None:
        if self._stopping.is_set():
            raise WorkerTerminated("Worker has been terminated")
        self._inbox.put(request)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Queued requests are dropped; one already running finishes first."""
        self._stopping.set()
        self._inbox.put(_STOP)
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            msg = self._inbox.get()
            if msg is _STOP or self._stopping.is_set():
                break
            self._handle(msg)  # type: ignore[arg-type]
        logger.debug("%s stopped", self._thread.name)

    def _handle(self, request: ProcessFilesRequest) -> None:
        def on_progress(current: int, total: int, name: str) -> None:
            self._emit(ProgressEvent(request.id, current, total, name))

        try:
            result = self._processor.process_files(request.files, progress=on_progress)
        except Exception as e:  # noqa: BLE001
            logger.exception("request %s failed", request.id)
            self._emit(ErrorEvent(request.id, str(e) or type(e).__name__))
            return
        self._emit(ResultEvent(request.id, result))


# ----------------------------
# Client
# ----------------------------


@dataclass
class _Pending:
    future: "Future[ProcessingResult]"
    on_progress: Optional[ProgressHandler] = None
    last_progress: int = field(default=-1)


class PdfWorkerClient:
    def __init__(self, processor: Optional[PdfProcessor] = None) -> None:
        self._lock = threading.Lock()
        self._pending: Dict[str, _Pending] = {}
        self._ids = itertools.count(1)
        self._terminated = False
        self._worker = PdfWorker(processor or PdfProcessor(), self._dispatch)
        self._worker.start()

    def __enter__(self) -> "PdfWorkerClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.terminate()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def process_files(
        self,
        files: Sequence[UploadedFile],
        on_progress: Optional[ProgressHandler] = None,
    ) -> "Future[ProcessingResult]":
        fut: "Future[ProcessingResult]" = Future()
        with self._lock:
            if self._terminated:
                fut.set_exception(WorkerTerminated("Worker has been terminated"))
                return fut
            request_id = f"req-{next(self._ids)}"
            self._pending[request_id] = _Pending(fut, on_progress)

        try:
            self._worker.post(ProcessFilesRequest(request_id, tuple(files)))
        except WorkerTerminated:
            # terminate() raced us and has already failed the future
            pass
        return fut

    async def process_files_async(
        self,
        files: Sequence[UploadedFile],
        on_progress: Optional[ProgressHandler] = None,
    ) -> ProcessingResult:
        return await asyncio.wrap_future(self.process_files(files, on_progress))

    def terminate(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            if self._terminated:
                return
            self._terminated = True
            pending, self._pending = self._pending, {}

        for request_id, p in pending.items():
            if not p.future.done():
                p.future.set_exception(WorkerTerminated(f"Worker terminated before {request_id} finished"))
        self._worker.stop(timeout)
        logger.info("worker terminated; %d pending request(s) rejected", len(pending))

    # runs on the worker thread
    def _dispatch(self, event: WorkerEvent) -> None:
        with self._lock:
            if isinstance(event, ProgressEvent):
                p = self._pending.get(event.id)
            else:
                p = self._pending.pop(event.id, None)
        if p is None:
            return

        if isinstance(event, ProgressEvent):
            if event.current < p.last_progress:
                return
            p.last_progress = event.current
            if p.on_progress is not None:
                try:
                    p.on_progress(event)
                except Exception:  # noqa: BLE001
                    logger.warning("progress callback failed for %s", event.id, exc_info=True)
        elif isinstance(event, ResultEvent):
            p.future.set_result(event.result)
        else:
            p.future.set_exception(WorkerError(event.error))
