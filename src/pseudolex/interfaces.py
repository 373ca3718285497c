"""Contracts for the stages that consume the token stream.

The parser, type checker and code generators live outside this package. They
are described here so that implementations can be checked against a shared
shape; nothing in this module performs any parsing or emission.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol

from pseudolex.tokens import Token


class StatementKind(Enum):
    FOR = auto()
    WHILE = auto()
    IF = auto()
    ASSIGNMENT = auto()
    DO_UNTIL = auto()
    SWITCH = auto()


class Target(Enum):
    JAVASCRIPT = auto()
    LLVM_IR = auto()


class Parser(Protocol):
    """Builds a statement tree from the flat token stream.

    Operator precedence is not encoded in the tokens; the parser owns it.
    """

    def parse(self, tokens: list[Token]) -> Any: ...


@dataclass(frozen=True, slots=True)
class ScopePath:
    """Path of nested scopes a type is declared in, outermost first."""

    parts: tuple[str, ...] = ()

    def child(self, name: str) -> ScopePath:
        return ScopePath((*self.parts, name))


@dataclass(frozen=True, slots=True)
class Type:
    """A named type. Two types are the same type when name and scope match."""

    id: int = field(compare=False)
    name: str
    location: ScopePath


@dataclass
class TypeEnvironment:
    """Name to type bindings, empty when checking starts."""

    bindings: dict[str, Type] = field(default_factory=dict)

    def bind(self, name: str, ty: Type) -> None:
        self.bindings[name] = ty

    def lookup(self, name: str) -> Type | None:
        return self.bindings.get(name)


class TypeChecker(Protocol):
    def check(self, tree: Any, env: TypeEnvironment) -> Any: ...


class CodeGenerator(Protocol):
    """Emits target text for a (typed) tree, one entry point per construct."""

    target: Target

    def emit_function(self, node: Any) -> str: ...

    def emit_loop(self, node: Any) -> str: ...

    def emit_conditional(self, node: Any) -> str: ...

    def emit_assignment(self, node: Any) -> str: ...

    def emit_expression(self, node: Any) -> str: ...

    def emit_call(self, node: Any) -> str: ...

    def emit_operator(self, node: Any) -> str: ...
