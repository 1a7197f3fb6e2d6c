"""Kubernetes label selector parsing.

Selectors are validated once at startup and rewritten into the canonical
form the API server expects: requirements ordered by key, set values sorted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from kubelogtail.errors import InvalidSelectorError

_TOKEN = re.compile(r"\s*(==|!=|[!=(),<>]|[^\s!=(),<>]+)")
_NAME = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_OPERATORS = {"=", "==", "!="}
_NUMERIC_OPERATORS = {">", "<"}
_SET_OPERATORS = {"in", "notin"}
_PUNCTUATION = {"!", "=", "==", "!=", "(", ")", ",", "<", ">"}


@dataclass(frozen=True)
class Requirement:
    key: str
    operator: str
    values: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.operator == "!":
            return f"!{self.key}"
        if self.operator == "exists":
            return self.key
        if self.operator in _SET_OPERATORS:
            return f"{self.key} {self.operator} ({','.join(sorted(self.values))})"
        return f"{self.key}{self.operator}{self.values[0]}"


def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        match = _TOKEN.match(text, pos)
        if match is None:
            raise InvalidSelectorError(f"failed to parse label selector: \"{text}\"")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


def _validate_key(key: str, selector: str) -> None:
    prefix, sep, name = key.rpartition("/")
    if sep:
        if not prefix or len(prefix) > 253 or not all(
            _DNS_LABEL.match(part) for part in prefix.split(".")
        ):
            raise InvalidSelectorError(
                f"invalid label key prefix \"{prefix}\" in selector \"{selector}\""
            )
    if not name or len(name) > 63 or not _NAME.match(name):
        raise InvalidSelectorError(f"invalid label key \"{key}\" in selector \"{selector}\"")


def _validate_value(value: str, selector: str) -> None:
    if value == "":
        return
    if len(value) > 63 or not _NAME.match(value):
        raise InvalidSelectorError(f"invalid label value \"{value}\" in selector \"{selector}\"")


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def _peek(self) -> str | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _next(self) -> str | None:
        token = self._peek()
        self.pos += 1
        return token

    def _fail(self, reason: str) -> InvalidSelectorError:
        return InvalidSelectorError(f"failed to parse label selector \"{self.text}\": {reason}")

    def _identifier(self, what: str) -> str:
        token = self._next()
        if token is None or token in _PUNCTUATION:
            raise self._fail(f"expected {what}, found {token or 'end of input'}")
        return token

    def parse(self) -> List[Requirement]:
        requirements: List[Requirement] = []
        if not self.tokens:
            return requirements
        while True:
            requirements.append(self._requirement())
            token = self._next()
            if token is None:
                return requirements
            if token != ",":
                raise self._fail(f"expected ',' or end of input, found '{token}'")

    def _requirement(self) -> Requirement:
        if self._peek() == "!":
            self._next()
            key = self._identifier("label key")
            _validate_key(key, self.text)
            return Requirement(key=key, operator="!")

        key = self._identifier("label key")
        if key in _SET_OPERATORS:
            raise self._fail(f"unexpected keyword '{key}'")
        _validate_key(key, self.text)

        token = self._peek()
        if token is None or token == ",":
            return Requirement(key=key, operator="exists")

        operator = self._next()
        if operator in _OPERATORS:
            value = ""
            if self._peek() not in (None, ","):
                value = self._identifier("label value")
            _validate_value(value, self.text)
            return Requirement(key=key, operator=operator, values=(value,))
        if operator in _NUMERIC_OPERATORS:
            value = self._identifier("integer value")
            if not re.match(r"^-?\d+$", value):
                raise self._fail(f"'{operator}' requires an integer value, found '{value}'")
            return Requirement(key=key, operator=operator, values=(value,))
        if operator in _SET_OPERATORS:
            return Requirement(key=key, operator=operator, values=self._value_set())
        raise self._fail(f"unexpected '{operator}' after key '{key}'")

    def _value_set(self) -> Tuple[str, ...]:
        if self._next() != "(":
            raise self._fail("expected '(' to open a value set")
        values: List[str] = []
        while True:
            token = self._peek()
            if token == ")":
                self._next()
                break
            if token == ",":
                # empty member, as in "in (a,,b)" or "in (,a)"
                values.append("")
                self._next()
                continue
            value = self._identifier("label value")
            _validate_value(value, self.text)
            values.append(value)
            closing = self._next()
            if closing == ")":
                break
            if closing != ",":
                raise self._fail(f"expected ',' or ')' in value set, found {closing or 'end of input'}")
        if not values:
            raise self._fail("values set can't be empty")
        return tuple(dict.fromkeys(values))


def parse_selector(text: str) -> List[Requirement]:
    return _Parser(text).parse()


def normalize_selector(text: str) -> str:
    """Validate ``text`` and return it in canonical form.

    >>> normalize_selector("tier in (b, a),app=web")
    'app=web,tier in (a,b)'
    """
    requirements = parse_selector(text or "")
    requirements.sort(key=lambda req: req.key)
    return ",".join(str(req) for req in requirements)
