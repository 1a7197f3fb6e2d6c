from __future__ import annotations

import pytest

from kubelogtail.errors import ConfigError, InvalidSelectorError
from kubelogtail.selector import normalize_selector, parse_selector


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", ""),
        ("   ", ""),
        ("app=web", "app=web"),
        ("app = web", "app=web"),
        ("app==web", "app==web"),
        ("tier in (b, a),app=web", "app=web,tier in (a,b)"),
        ("env notin (prod,dev)", "env notin (dev,prod)"),
        ("!canary,env!=prod", "!canary,env!=prod"),
        ("environment", "environment"),
        ("version>2,build<10", "build<10,version>2"),
        ("app.kubernetes.io/name=web", "app.kubernetes.io/name=web"),
        ("track=", "track="),
    ],
)
def test_normalize_selector(text: str, expected: str) -> None:
    assert normalize_selector(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        "app=web=api",
        "app=web,",
        "app in ()",
        "app in (a",
        "-bad=x",
        "app=we b",
        "app=a/b",
        "version>abc",
        "in=x",
        "Bad_Prefix/name=x",
        "app (x)",
    ],
)
def test_invalid_selector_is_rejected(text: str) -> None:
    with pytest.raises(InvalidSelectorError):
        normalize_selector(text)


def test_invalid_selector_is_a_config_error() -> None:
    assert issubclass(InvalidSelectorError, ConfigError)


def test_parse_selector_deduplicates_set_values() -> None:
    (requirement,) = parse_selector("tier in (a,b,a)")
    assert requirement.operator == "in"
    assert requirement.values == ("a", "b")
