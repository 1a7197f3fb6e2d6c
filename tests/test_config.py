from __future__ import annotations

from pathlib import Path

import pytest

from kubelogtail import config
from kubelogtail.config import (
    PROFILE_ENV,
    Profile,
    TailConfig,
    build_config,
    get_profile,
    parse_duration,
    save_config,
)
from kubelogtail.errors import ConfigError, InvalidSelectorError


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config.toml"
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    monkeypatch.delenv(PROFILE_ENV, raising=False)
    monkeypatch.delenv("KUBECONFIG", raising=False)
    return path


@pytest.mark.parametrize(
    ("value", "seconds"),
    [
        ("10s", 10.0),
        ("1m30s", 90.0),
        ("500ms", 0.5),
        ("1.5h", 5400.0),
        ("2", 2.0),
        (3, 3.0),
        (0.25, 0.25),
    ],
)
def test_parse_duration(value, seconds: float) -> None:
    assert parse_duration(value) == pytest.approx(seconds)


@pytest.mark.parametrize("value", ["", "abc", "10x", "0s", "-1", 0, "s10"])
def test_parse_duration_rejects_invalid(value) -> None:
    with pytest.raises(ConfigError):
        parse_duration(value)


def test_missing_default_profile_uses_defaults(config_path: Path) -> None:
    profile = get_profile(None)
    assert profile == Profile(name="default", data={})
    assert build_config(profile) == TailConfig()


def test_missing_named_profile_is_an_error(config_path: Path) -> None:
    with pytest.raises(ConfigError, match="staging"):
        get_profile("staging")


def test_profile_from_environment(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path.write_text(
        "[profile.staging]\n"
        "namespace = \"web\"\n"
        "selector = \"tier in (b,a)\"\n"
        "refresh = \"30s\"\n"
        "color = \"line\"\n"
        "context = \"staging\"\n"
    )
    monkeypatch.setenv(PROFILE_ENV, "staging")

    tail_config = build_config(get_profile(None))

    assert tail_config == TailConfig(
        kubeconfig=None,
        context="staging",
        namespace="web",
        selector="tier in (a,b)",
        refresh_interval=30.0,
        color_mode="line",
    )


def test_flags_override_profile(config_path: Path) -> None:
    profile = Profile(name="default", data={"namespace": "web", "color": "line"})

    tail_config = build_config(profile, namespace="", color_mode="off", refresh="1s")

    assert tail_config.namespace == ""
    assert tail_config.color_mode == "off"
    assert tail_config.refresh_interval == 1.0


def test_kubeconfig_precedence(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    profile = Profile(name="default", data={"kubeconfig": "/profile/config"})
    assert build_config(profile).kubeconfig == "/profile/config"

    monkeypatch.setenv("KUBECONFIG", "/env/config")
    assert build_config(profile).kubeconfig == "/env/config"
    assert build_config(profile, kubeconfig="/flag/config").kubeconfig == "/flag/config"


def test_invalid_selector_fails_build(config_path: Path) -> None:
    with pytest.raises(InvalidSelectorError):
        build_config(Profile(name="default", data={}), selector="app in ()")


def test_invalid_toml_is_a_config_error(config_path: Path) -> None:
    config_path.write_text("[profile.default\n")
    with pytest.raises(ConfigError):
        get_profile(None)


def test_saved_template_loads(config_path: Path) -> None:
    save_config(config_path)

    tail_config = build_config(get_profile(None))

    assert tail_config.namespace == "default"
    assert tail_config.selector == ""
    assert tail_config.refresh_interval == 10.0
    assert tail_config.color_mode == "pod"
