"""Errors raised while translating Jexl expressions to JavaScript."""

from __future__ import annotations

from typing import Literal


class TranslateError(Exception):
	"""Base class for every error raised by the translator."""


class UnknownOperatorError(TranslateError):
	"""An operator has no static mapping and no inlinable implementation."""

	operator: str
	kind: Literal["unary", "binary"]

	def __init__(self, operator: str, kind: Literal["unary", "binary"]) -> None:
		self.operator = operator
		self.kind = kind
		super().__init__(f"Unknown {kind} operator: {operator}")


class FunctionSourceError(TranslateError):
	"""The printed source of a custom implementation could not be parsed."""


class JexlSyntaxError(TranslateError):
	"""Invalid Jexl expression text."""

	expression: str
	position: int

	def __init__(self, message: str, expression: str, position: int) -> None:
		self.expression = expression
		self.position = position
		super().__init__(f"{message} at position {position} in {expression!r}")


class LooseEqualityWarning(UserWarning):
	"""Jexl `==`/`!=` were translated to strict JavaScript equality.

	Jexl compares with JavaScript's loose equality, which coerces operands of
	different types. The translation emits `===`/`!==`, so expressions that
	rely on coercion (e.g. `"1" == 1`) change meaning.
	"""
