from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def pod_key(namespace: str, name: str) -> str:
    return f"{namespace}/{name}"


@dataclass(frozen=True)
class PodDescriptor:
    namespace: str
    name: str
    containers: Tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return pod_key(self.namespace, self.name)

    def container_label(self, container: str) -> str:
        return f"{self.namespace}/{self.name}/{container}"
