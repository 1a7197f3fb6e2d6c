from __future__ import annotations

from typing import Iterable, List, Protocol

from kubelogtail.models import PodDescriptor


class LogStream(Protocol):
    def chunks(self) -> Iterable[bytes]:
        ...

    def close(self) -> None:
        ...


class ClusterClient(Protocol):
    def list_pods(self, namespace: str, selector: str) -> List[PodDescriptor]:
        ...

    def open_log_stream(
        self,
        namespace: str,
        pod_name: str,
        container: str,
        follow: bool = True,
    ) -> LogStream:
        ...
