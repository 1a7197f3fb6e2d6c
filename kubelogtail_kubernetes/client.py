from __future__ import annotations

import os
import threading
from typing import Iterable, List

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from kubelogtail.errors import ClientConstructionError, ListError
from kubelogtail.models import PodDescriptor

STREAM_CHUNK_SIZE = 4096


class KubernetesLogStream:
    """A following pod log response from the API server."""

    def __init__(self, response: urllib3.HTTPResponse):
        self._response = response
        self._lock = threading.Lock()
        self._closed = False

    def chunks(self) -> Iterable[bytes]:
        return self._response.stream(STREAM_CHUNK_SIZE, decode_content=True)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        # close() alone leaves a reader blocked on a follow stream hanging;
        # shutdown() tears down the socket so the read returns.
        try:
            self._response.shutdown()
        except OSError:
            pass
        self._response.release_conn()
        self._response.close()


class KubernetesClusterClient:
    def __init__(self, kubeconfig: str | None = None, context: str | None = None):
        self.kubeconfig = kubeconfig
        self.context = context
        self.core_v1 = client.CoreV1Api(client.ApiClient(self._load_configuration()))

    def _load_configuration(self) -> client.Configuration:
        configuration = client.Configuration()
        default_path = config.KUBE_CONFIG_DEFAULT_LOCATION
        have_default = any(
            os.path.exists(os.path.expanduser(path))
            for path in default_path.split(os.pathsep)
            if path
        )
        try:
            if self.kubeconfig or self.context or have_default:
                config.load_kube_config(
                    config_file=self.kubeconfig,
                    context=self.context,
                    client_configuration=configuration,
                )
            else:
                config.load_incluster_config(client_configuration=configuration)
        except (ConfigException, OSError, TypeError, ValueError) as exc:
            source = self.kubeconfig or default_path
            raise ClientConstructionError(
                f"failed to create kubernetes client from {source}: {exc}"
            ) from exc
        return configuration

    def list_pods(self, namespace: str, selector: str) -> List[PodDescriptor]:
        try:
            if namespace:
                pods = self.core_v1.list_namespaced_pod(namespace, label_selector=selector)
            else:
                pods = self.core_v1.list_pod_for_all_namespaces(label_selector=selector)
            return [
                PodDescriptor(
                    namespace=pod.metadata.namespace,
                    name=pod.metadata.name,
                    containers=tuple(c.name for c in (pod.spec.containers or [])),
                )
                for pod in pods.items
            ]
        except ApiException as exc:
            raise ListError(str(exc).strip()) from exc
        except Exception as exc:
            # Deserialization, auth refresh and transport failures all skip
            # the tick the same way an API error does.
            raise ListError(f"{type(exc).__name__}: {exc}") from exc

    def open_log_stream(
        self,
        namespace: str,
        pod_name: str,
        container: str,
        follow: bool = True,
    ) -> KubernetesLogStream:
        response = self.core_v1.read_namespaced_pod_log(
            name=pod_name,
            namespace=namespace,
            container=container,
            follow=follow,
            _preload_content=False,
        )
        return KubernetesLogStream(response)
