"""The Jexl expression language: grammar, parser and expression tree."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar, overload

from jexl2js.jexl.grammar import UNARY_PRECEDENCE as UNARY_PRECEDENCE
from jexl2js.jexl.grammar import Element as Element
from jexl2js.jexl.grammar import Grammar as Grammar
from jexl2js.jexl.grammar import default_grammar as default_grammar
from jexl2js.jexl.nodes import ArrayLiteral as ArrayLiteral
from jexl2js.jexl.nodes import BinaryExpression as BinaryExpression
from jexl2js.jexl.nodes import ConditionalExpression as ConditionalExpression
from jexl2js.jexl.nodes import FilterExpression as FilterExpression
from jexl2js.jexl.nodes import FunctionCall as FunctionCall
from jexl2js.jexl.nodes import Identifier as Identifier
from jexl2js.jexl.nodes import JexlNode as JexlNode
from jexl2js.jexl.nodes import Literal as Literal
from jexl2js.jexl.nodes import ObjectLiteral as ObjectLiteral
from jexl2js.jexl.nodes import Pool as Pool
from jexl2js.jexl.nodes import UnaryExpression as UnaryExpression
from jexl2js.jexl.parser import Parser as Parser
from jexl2js.jexl.parser import parse as parse

_F = TypeVar("_F", bound=Callable[..., Any])


class Jexl:
	"""Owns a grammar and parses expressions against it.

	Transforms and functions can be registered directly or with the
	decorator form:

		jexl = Jexl()

		@jexl.transform("upper")
		def upper(value):
			return value.upper()
	"""

	grammar: Grammar

	def __init__(self, grammar: Grammar | None = None) -> None:
		self.grammar = grammar.copy() if grammar is not None else default_grammar()

	# --- Registration ---------------------------------------------------------

	def add_transform(self, name: str, fn: Callable[..., Any]) -> None:
		self.grammar.transforms[name] = fn

	def add_transforms(self, transforms: Mapping[str, Callable[..., Any]]) -> None:
		self.grammar.transforms.update(transforms)

	def add_function(self, name: str, fn: Callable[..., Any]) -> None:
		self.grammar.functions[name] = fn

	def add_functions(self, functions: Mapping[str, Callable[..., Any]]) -> None:
		self.grammar.functions.update(functions)

	@overload
	def transform(self, name: str) -> Callable[[_F], _F]: ...

	@overload
	def transform(self, name: _F) -> _F: ...

	def transform(self, name: str | _F) -> Callable[[_F], _F] | _F:
		"""Decorator registering a transform, named after the function by default."""
		if isinstance(name, str):
			key = name

			def decorator(fn: _F) -> _F:
				self.add_transform(key, fn)
				return fn

			return decorator
		self.add_transform(name.__name__, name)
		return name

	@overload
	def function(self, name: str) -> Callable[[_F], _F]: ...

	@overload
	def function(self, name: _F) -> _F: ...

	def function(self, name: str | _F) -> Callable[[_F], _F] | _F:
		"""Decorator registering a function, named after the function by default."""
		if isinstance(name, str):
			key = name

			def decorator(fn: _F) -> _F:
				self.add_function(key, fn)
				return fn

			return decorator
		self.add_function(name.__name__, name)
		return name

	def add_binary_op(
		self, operator: str, precedence: float, fn: Callable[[Any, Any], Any]
	) -> None:
		self.grammar.elements[operator] = Element("binaryOp", precedence, fn)

	def add_unary_op(self, operator: str, fn: Callable[[Any], Any]) -> None:
		self.grammar.elements[operator] = Element("unaryOp", UNARY_PRECEDENCE, fn)

	def remove_op(self, operator: str) -> None:
		element = self.grammar.elements.get(operator)
		if element is not None and element.type in ("binaryOp", "unaryOp"):
			del self.grammar.elements[operator]

	# --- Parsing --------------------------------------------------------------

	def parse(self, expression: str) -> JexlNode:
		"""Parse expression text into a Jexl tree. Raises JexlSyntaxError."""
		return parse(self.grammar, expression)
