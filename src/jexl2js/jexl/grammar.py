"""Jexl grammar: operator symbols, precedences and registered callables."""

from __future__ import annotations

import math
import operator
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias
from typing import Literal as Lit

ElementType: TypeAlias = Lit[
	"dot",
	"openBracket",
	"closeBracket",
	"pipe",
	"openCurl",
	"closeCurl",
	"colon",
	"comma",
	"openParen",
	"closeParen",
	"question",
	"binaryOp",
	"unaryOp",
]

UNARY_PRECEDENCE = math.inf


@dataclass(frozen=True, slots=True)
class Element:
	"""A grammar symbol. Operators carry a precedence and an implementation."""

	type: ElementType
	precedence: float = 0
	evaluate: Callable[..., Any] | None = None


@dataclass(slots=True)
class Grammar:
	"""Symbol table consumed by the parser and the translator."""

	elements: dict[str, Element] = field(default_factory=dict)
	functions: dict[str, Callable[..., Any]] = field(default_factory=dict)
	transforms: dict[str, Callable[..., Any]] = field(default_factory=dict)

	def copy(self) -> Grammar:
		return Grammar(dict(self.elements), dict(self.functions), dict(self.transforms))

	def lookup_operator(self, symbol: str, kind: Lit["binaryOp", "unaryOp"]) -> Element | None:
		element = self.elements.get(symbol)
		if element is None or element.type != kind:
			return None
		return element


def _floor_div(left: Any, right: Any) -> Any:
	return math.floor(left / right)


def _contains(left: Any, right: Any) -> bool:
	return left in right


def _and(left: Any, right: Any) -> Any:
	return left and right


def _or(left: Any, right: Any) -> Any:
	return left or right


def default_grammar() -> Grammar:
	"""Jexl's stock grammar."""
	return Grammar(
		elements={
			".": Element("dot"),
			"[": Element("openBracket"),
			"]": Element("closeBracket"),
			"|": Element("pipe"),
			"{": Element("openCurl"),
			"}": Element("closeCurl"),
			":": Element("colon"),
			",": Element("comma"),
			"(": Element("openParen"),
			")": Element("closeParen"),
			"?": Element("question"),
			"+": Element("binaryOp", 30, operator.add),
			"-": Element("binaryOp", 30, operator.sub),
			"*": Element("binaryOp", 40, operator.mul),
			"/": Element("binaryOp", 40, operator.truediv),
			"//": Element("binaryOp", 40, _floor_div),
			"%": Element("binaryOp", 40, operator.mod),
			"^": Element("binaryOp", 50, operator.pow),
			"==": Element("binaryOp", 20, operator.eq),
			"!=": Element("binaryOp", 20, operator.ne),
			">": Element("binaryOp", 20, operator.gt),
			">=": Element("binaryOp", 20, operator.ge),
			"<": Element("binaryOp", 20, operator.lt),
			"<=": Element("binaryOp", 20, operator.le),
			"&&": Element("binaryOp", 10, _and),
			"||": Element("binaryOp", 10, _or),
			"in": Element("binaryOp", 20, _contains),
			"!": Element("unaryOp", UNARY_PRECEDENCE, operator.not_),
		}
	)
