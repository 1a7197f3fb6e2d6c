from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - py<3.11
    import tomli as tomllib

from kubelogtail.errors import ConfigError
from kubelogtail.selector import normalize_selector

CONFIG_DIR = Path.home() / ".kube-log-tail"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROFILE_ENV = "KUBE_LOG_TAIL_PROFILE"

DEFAULT_NAMESPACE = "default"
DEFAULT_REFRESH_SECONDS = 10.0
DEFAULT_COLOR_MODE = "pod"

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


@dataclass
class Profile:
    name: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class TailConfig:
    kubeconfig: str | None = None
    context: str | None = None
    namespace: str = DEFAULT_NAMESPACE
    selector: str = ""
    refresh_interval: float = DEFAULT_REFRESH_SECONDS
    color_mode: str = DEFAULT_COLOR_MODE


def load_config(path: Path | None = None) -> Dict[str, Any]:
    path = path or CONFIG_PATH
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc


def save_config(path: Path | None = None) -> Path:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        "# kube-log-tail configuration",
        "",
        "[profile.default]",
        "namespace = \"default\"",
        "selector = \"\"",
        "refresh = \"10s\"",
        "color = \"pod\"",
        "",
        "# [profile.staging]",
        "# kubeconfig = \"~/.kube/staging\"",
        "# context = \"staging\"",
        "# namespace = \"\"",
        "# selector = \"app=web\"",
        "",
    ]
    path.write_text("\n".join(lines))
    return path


def get_profile(name: str | None, path: Path | None = None) -> Profile:
    data = load_config(path)
    profiles = data.get("profile", {})
    explicit = name or os.environ.get(PROFILE_ENV)
    profile_name = explicit or "default"
    profile = profiles.get(profile_name)
    if profile is None:
        if explicit:
            raise ConfigError(f"Profile '{profile_name}' not found in {path or CONFIG_PATH}")
        return Profile(name=profile_name, data={})
    if not isinstance(profile, dict):
        raise ConfigError(f"Profile '{profile_name}' must be a table")
    return Profile(name=profile_name, data=dict(profile))


def parse_duration(value: str | float | int) -> float:
    """Parse a refresh interval into seconds.

    Accepts bare numbers (seconds) and Go-style durations such as ``10s``,
    ``1m30s`` or ``500ms``. The result must be positive.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            seconds = _parse_go_duration(text)
    if seconds <= 0:
        raise ConfigError(f"Refresh interval must be positive, got {value!r}")
    return seconds


def _parse_go_duration(text: str) -> float:
    if not text:
        raise ConfigError("Invalid duration: empty string")
    pos = 0
    total = 0.0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ConfigError(f"Invalid duration: {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return total


def build_config(
    profile: Profile,
    kubeconfig: str | None = None,
    context: str | None = None,
    namespace: str | None = None,
    selector: str | None = None,
    refresh: str | None = None,
    color_mode: str | None = None,
) -> TailConfig:
    data = profile.data

    kubeconfig = kubeconfig or os.environ.get("KUBECONFIG") or data.get("kubeconfig")
    if kubeconfig:
        kubeconfig = os.path.expanduser(kubeconfig)

    if namespace is None:
        namespace = data.get("namespace", DEFAULT_NAMESPACE)
    if selector is None:
        selector = data.get("selector", "")
    refresh_value = refresh if refresh is not None else data.get("refresh", DEFAULT_REFRESH_SECONDS)
    if color_mode is None:
        color_mode = data.get("color", DEFAULT_COLOR_MODE)

    return TailConfig(
        kubeconfig=kubeconfig or None,
        context=context or data.get("context") or None,
        namespace=str(namespace),
        selector=normalize_selector(str(selector)),
        refresh_interval=parse_duration(refresh_value),
        color_mode=str(color_mode),
    )
