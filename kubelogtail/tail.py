"""Per-pod and per-container log tails.

A :class:`PodTail` owns one :class:`ContainerTail` per container of its pod.
Every tail runs on its own daemon thread and reports its outcome through a
:class:`concurrent.futures.Future`, so failures stay observable without one
container's error stopping its siblings.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, wait
from functools import partial
from typing import Callable, Iterable, Iterator, List, Optional

from kubelogtail.client import ClusterClient, LogStream
from kubelogtail.color import ColorAssigner
from kubelogtail.errors import StreamOpenError, StreamReadError, TailError
from kubelogtail.models import PodDescriptor
from kubelogtail.scope import Scope

ErrorCallback = Callable[[BaseException], None]
LinePrinter = Callable[[str, str], None]


def spawn(target: Callable[[], object], name: str) -> Future:
    """Run ``target`` on a daemon thread and return a future for its outcome."""
    future: Future = Future()
    future.set_running_or_notify_cancel()

    def runner() -> None:
        try:
            result = target()
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)

    threading.Thread(target=runner, name=name, daemon=True).start()
    return future


def _decode(raw: bytes) -> str:
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", errors="replace")


def iter_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    """Split a byte stream into lines; a trailing partial line is flushed at EOF."""
    buffer = bytearray()
    for chunk in chunks:
        if not chunk:
            continue
        buffer.extend(chunk)
        if b"\n" not in chunk:
            continue
        *lines, buffer = buffer.split(b"\n")
        for line in lines:
            yield _decode(line)
    if buffer:
        yield _decode(buffer)


class ContainerTail:
    def __init__(
        self,
        client: ClusterClient,
        pod: PodDescriptor,
        container: str,
        printer: LinePrinter,
        scope: Scope,
    ):
        self.client = client
        self.pod = pod
        self.container = container
        self.printer = printer
        self.scope = scope
        self.label = pod.container_label(container)

    def stop(self) -> None:
        self.scope.cancel()

    def run(self) -> None:
        """Stream the container's log until it ends, fails or is cancelled.

        Cancellation is not an error: the stream is closed from the
        cancelling thread, the blocked read returns and ``run`` exits quietly.
        """
        if self.scope.cancelled:
            return
        try:
            stream = self.client.open_log_stream(
                self.pod.namespace,
                self.pod.name,
                self.container,
                follow=True,
            )
        except TailError:
            raise
        except Exception as exc:
            raise StreamOpenError(self.label, exc) from exc

        unregister = self.scope.on_cancel(stream.close)
        try:
            for line in self._read(stream):
                if self.scope.cancelled:
                    break
                self.printer(self.label, line)
        finally:
            unregister()
            stream.close()

    def _read(self, stream: LogStream) -> Iterator[str]:
        # Only failures of the stream itself are read errors; printer
        # failures propagate unchanged.
        try:
            yield from iter_lines(stream.chunks())
        except Exception as exc:
            if not self.scope.cancelled:
                raise StreamReadError(self.label, exc) from exc


class PodTail:
    def __init__(
        self,
        pod: PodDescriptor,
        client: ClusterClient,
        assigner: ColorAssigner,
        scope: Scope,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.pod = pod
        self.client = client
        self.assigner = assigner
        self.scope = scope
        self.on_error = on_error
        self.future: Optional[Future] = None

    @property
    def key(self) -> str:
        return self.pod.key

    @property
    def stopped(self) -> bool:
        return self.scope.cancelled

    def stop(self) -> None:
        self.scope.cancel()

    def start(self) -> Future:
        self.future = spawn(self.run, name=f"pod-tail-{self.key}")
        return self.future

    def run(self) -> None:
        """Tail every container and wait for all of them.

        Each container failure is reported through ``on_error`` as it
        happens; once every container has finished the first failure, in
        container order, is raised.
        """
        futures: List[Future] = []
        try:
            for container in self.pod.containers:
                tail = ContainerTail(
                    client=self.client,
                    pod=self.pod,
                    container=container,
                    printer=self.assigner.get_function(),
                    scope=self.scope.child(),
                )
                future = spawn(tail.run, name=f"container-tail-{tail.label}")
                future.add_done_callback(partial(self._container_done, tail))
                futures.append(future)
            wait(futures)
        finally:
            self.scope.detach()
        for future in futures:
            exc = future.exception()
            if exc is not None:
                raise exc

    def _container_done(self, tail: ContainerTail, future: Future) -> None:
        tail.scope.detach()
        exc = future.exception()
        if exc is not None and self.on_error is not None:
            self.on_error(exc)
