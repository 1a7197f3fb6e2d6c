from kubelogtail_kubernetes.client import KubernetesClusterClient, KubernetesLogStream

__all__ = ["KubernetesClusterClient", "KubernetesLogStream"]
