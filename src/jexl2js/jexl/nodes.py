"""Jexl expression tree.

One frozen dataclass per node kind, mirroring the tree Jexl's compiler
produces. `JexlNode` is the closed union of all of them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal as Lit
from typing import TypeAlias

Pool: TypeAlias = Lit["functions", "transforms"]


@dataclass(frozen=True, slots=True)
class Literal:
	"""String, number or boolean literal."""

	value: str | float | bool


@dataclass(frozen=True, slots=True)
class Identifier:
	"""`name`, `parent.name` (from_ is the parent) or `.name` inside a filter."""

	value: str
	from_: JexlNode | None = None
	relative: bool = False


@dataclass(frozen=True, slots=True)
class UnaryExpression:
	operator: str
	right: JexlNode


@dataclass(frozen=True, slots=True)
class BinaryExpression:
	operator: str
	left: JexlNode
	right: JexlNode


@dataclass(frozen=True, slots=True)
class ConditionalExpression:
	test: JexlNode
	consequent: JexlNode
	alternate: JexlNode


@dataclass(frozen=True, slots=True)
class ArrayLiteral:
	value: Sequence[JexlNode] = ()


@dataclass(frozen=True, slots=True)
class ObjectLiteral:
	value: Mapping[str, JexlNode] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FilterExpression:
	"""`subject[expr]`.

	Relative filters select the elements of `subject` for which `expr` holds,
	with `.name` identifiers read from each element. Otherwise `expr` is an
	index or key into `subject`.
	"""

	subject: JexlNode
	expr: JexlNode
	relative: bool = False


@dataclass(frozen=True, slots=True)
class FunctionCall:
	"""`name(args)` (pool "functions") or `subject | name(args)` (pool
	"transforms", with the subject as the first argument)."""

	pool: Pool
	name: str
	args: Sequence[JexlNode] = ()


JexlNode: TypeAlias = (
	Literal
	| Identifier
	| UnaryExpression
	| BinaryExpression
	| ConditionalExpression
	| ArrayLiteral
	| ObjectLiteral
	| FilterExpression
	| FunctionCall
)
