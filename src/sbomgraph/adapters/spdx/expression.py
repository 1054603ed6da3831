"""Recursive-descent parser for SPDX license expressions.

Grammar, loosest binding first::

    expression := conjunction ("OR" conjunction)*
    conjunction := exception ("AND" exception)*
    exception := primary ("WITH" identifier)?
    primary := identifier | "(" expression ")"

Chains of one operator flatten into a single set, so ``A AND B AND C`` is one
conjunction with three members. Operators are matched in upper or lower case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sbomgraph.domain.errors import ConversionFormatError

_TOKEN = re.compile(r"\s*(\(|\)|[^\s()]+)")
_OPERATORS = frozenset({"AND", "OR", "WITH"})


@dataclass(frozen=True, slots=True)
class LicenseLeaf:
    identifier: str


@dataclass(frozen=True, slots=True)
class WithException:
    license: LicenseLeaf
    exception: str


@dataclass(frozen=True, slots=True)
class Conjunction:
    members: tuple[LicenseNode, ...]


@dataclass(frozen=True, slots=True)
class Disjunction:
    members: tuple[LicenseNode, ...]


type LicenseNode = LicenseLeaf | WithException | Conjunction | Disjunction


def tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    position = 0
    stripped = expression.rstrip()
    while position < len(stripped):
        match = _TOKEN.match(stripped, position)
        if match is None:
            raise ConversionFormatError(f"Cannot tokenize license expression {expression!r}")
        tokens.append(match.group(1))
        position = match.end()
    return tokens


def _operator(token: str) -> str | None:
    if token in _OPERATORS or token.upper() in _OPERATORS and token.islower():
        return token.upper()
    return None


class _Parser:
    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._tokens = tokenize(expression)
        self._index = 0

    def parse(self) -> LicenseNode:
        if not self._tokens:
            raise self._error("empty expression")
        node = self._disjunction()
        if self._index != len(self._tokens):
            raise self._error(f"unexpected {self._tokens[self._index]!r}")
        return node

    def _peek(self) -> str | None:
        return self._tokens[self._index] if self._index < len(self._tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of expression")
        self._index += 1
        return token

    def _accept(self, operator: str) -> bool:
        token = self._peek()
        if token is not None and _operator(token) == operator:
            self._index += 1
            return True
        return False

    def _disjunction(self) -> LicenseNode:
        members = [self._conjunction()]
        while self._accept("OR"):
            members.append(self._conjunction())
        return members[0] if len(members) == 1 else Disjunction(_flatten(members, Disjunction))

    def _conjunction(self) -> LicenseNode:
        members = [self._exception()]
        while self._accept("AND"):
            members.append(self._exception())
        return members[0] if len(members) == 1 else Conjunction(_flatten(members, Conjunction))

    def _exception(self) -> LicenseNode:
        node = self._primary()
        if not self._accept("WITH"):
            return node
        if not isinstance(node, LicenseLeaf):
            raise self._error("WITH must follow a single license identifier")
        return WithException(license=node, exception=self._identifier())

    def _primary(self) -> LicenseNode:
        if self._peek() == "(":
            self._take()
            node = self._disjunction()
            if self._take() != ")":
                raise self._error("missing closing parenthesis")
            return node
        return LicenseLeaf(self._identifier())

    def _identifier(self) -> str:
        token = self._take()
        if token in {"(", ")"} or _operator(token) is not None:
            raise self._error(f"expected a license identifier, got {token!r}")
        return token

    def _error(self, reason: str) -> ConversionFormatError:
        return ConversionFormatError(f"Invalid license expression {self._expression!r}: {reason}")


def _flatten(
    members: list[LicenseNode],
    kind: type[Conjunction] | type[Disjunction],
) -> tuple[LicenseNode, ...]:
    flat: list[LicenseNode] = []
    for member in members:
        if isinstance(member, kind):
            flat.extend(member.members)
        else:
            flat.append(member)
    return tuple(flat)


def parse_license_expression(expression: str) -> LicenseNode:
    """Parse ``expression`` or raise ``ConversionFormatError``."""

    return _Parser(expression).parse()


def license_identifiers(node: LicenseNode) -> tuple[str, ...]:
    """Every license identifier in ``node``, exceptions excluded, in order."""

    match node:
        case LicenseLeaf(identifier=identifier):
            return (identifier,)
        case WithException(license=leaf):
            return (leaf.identifier,)
        case Conjunction(members=members) | Disjunction(members=members):
            return tuple(item for member in members for item in license_identifiers(member))
