from kubelogtail.color import ColorAssigner
from kubelogtail.config import TailConfig
from kubelogtail.models import PodDescriptor
from kubelogtail.reconciler import Reconciler
from kubelogtail.scope import Scope
from kubelogtail.tail import ContainerTail, PodTail

__version__ = "0.2.0"

__all__ = [
    "ColorAssigner",
    "ContainerTail",
    "PodDescriptor",
    "PodTail",
    "Reconciler",
    "Scope",
    "TailConfig",
    "__version__",
]
