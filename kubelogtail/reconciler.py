from __future__ import annotations

import time
from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from kubelogtail.client import ClusterClient
from kubelogtail.color import ColorAssigner
from kubelogtail.config import TailConfig
from kubelogtail.errors import ListError
from kubelogtail.logging import get_err_console, is_verbose
from kubelogtail.scope import Scope
from kubelogtail.tail import PodTail

SHUTDOWN_TIMEOUT = 5.0


@dataclass
class ReconcileResult:
    started: List[str] = field(default_factory=list)
    stopped: List[str] = field(default_factory=list)
    error: Optional[ListError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Reconciler:
    """Keeps one PodTail running per pod matched by the configured filter.

    ``run`` lists pods on a fixed interval, stops tails for pods that left
    the listing and starts tails for pods that joined it. The tracked map is
    only touched from the thread calling ``run``/``reconcile``; ``stop`` may
    be called from any thread.
    """

    def __init__(
        self,
        client: ClusterClient,
        config: TailConfig,
        assigner: ColorAssigner,
        console: Console | None = None,
        scope: Scope | None = None,
    ):
        self.client = client
        self.config = config
        self.assigner = assigner
        self.console = console or get_err_console()
        self.scope = scope or Scope()
        self._pods: Dict[str, PodTail] = {}

    @property
    def tracked(self) -> Dict[str, PodTail]:
        return dict(self._pods)

    def stop(self) -> None:
        self.scope.cancel()

    def run(self) -> None:
        interval = self.config.refresh_interval
        next_tick = time.monotonic()
        try:
            while not self.scope.cancelled:
                self.reconcile()
                now = time.monotonic()
                while next_tick <= now:
                    next_tick += interval
                if self.scope.wait(next_tick - now):
                    break
        finally:
            self.scope.cancel()
            self._drain()

    def reconcile(self) -> ReconcileResult:
        result = ReconcileResult()
        try:
            pods = self.client.list_pods(self.config.namespace, self.config.selector)
        except ListError as exc:
            self.console.print(f"[warn]failed to list pods:[/warn] {escape(str(exc))}")
            result.error = exc
            return result

        found = {pod.key: pod for pod in pods}

        for key in [key for key in self._pods if key not in found]:
            self._pods.pop(key).stop()
            result.stopped.append(key)
            if is_verbose():
                self.console.print(f"[info]removing[/info] {escape(key)}")

        for key, pod in found.items():
            if key in self._pods:
                continue
            if is_verbose():
                self.console.print(f"[info]adding[/info] {escape(key)}")
            tail = PodTail(
                pod=pod,
                client=self.client,
                assigner=self.assigner,
                scope=self.scope.child(),
                on_error=self._report_tail_error,
            )
            self._pods[key] = tail
            tail.start().add_done_callback(partial(self._pod_done, key))
            result.started.append(key)
        return result

    def _report_tail_error(self, exc: BaseException) -> None:
        self.console.print(f"[error]{escape(str(exc))}[/error]")

    def _pod_done(self, key: str, future: Future) -> None:
        if is_verbose():
            self.console.print(f"[info]finished tailing[/info] {escape(key)}")

    def _drain(self, timeout: float = SHUTDOWN_TIMEOUT) -> None:
        futures = [tail.future for tail in self._pods.values() if tail.future is not None]
        if futures:
            wait(futures, timeout=timeout)
