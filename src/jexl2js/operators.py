"""Static mapping of Jexl operators onto JavaScript."""

from __future__ import annotations

import warnings
from collections.abc import Callable

from jexl2js.errors import LooseEqualityWarning
from jexl2js.nodes import Binary, Call, Expr, Identifier, Logical, Member, Unary

# Symbols that mean the same thing in both languages
NATIVE_BINARY_OPS: frozenset[str] = frozenset(
	{
		"===",
		"!==",
		"<",
		"<=",
		">",
		">=",
		"<<",
		">>",
		">>>",
		"+",
		"-",
		"*",
		"/",
		"%",
		"&",
		"|",
		"instanceof",
		"**",
	}
)

LOGICAL_OPS: frozenset[str] = frozenset({"&&", "||"})

NATIVE_UNARY_OPS: frozenset[str] = frozenset({"!"})

# Jexl compares loosely; JavaScript gets the strict operator
LOOSE_EQUALITY_OPS: dict[str, str] = {"==": "===", "!=": "!=="}

BinaryBuilder = Callable[[Expr, Expr], Expr]


def _strict_equal(left: Expr, right: Expr) -> Expr:
	return Binary(left, "===", right)


def _strict_not_equal(left: Expr, right: Expr) -> Expr:
	return Binary(left, "!==", right)


def _power(left: Expr, right: Expr) -> Expr:
	return Binary(left, "**", right)


def _floor_divide(left: Expr, right: Expr) -> Expr:
	return Call(Member(Identifier("Math"), "floor"), [Binary(left, "/", right)])


def _contains(left: Expr, right: Expr) -> Expr:
	# Assumes `right` is an array or string
	return Call(Member(right, "includes"), [left])


# Jexl operators with a different spelling or a call form in JavaScript
REWRITTEN_BINARY_OPS: dict[str, BinaryBuilder] = {
	"==": _strict_equal,
	"!=": _strict_not_equal,
	"^": _power,
	"//": _floor_divide,
	"in": _contains,
}


def build_binary(op: str, left: Expr, right: Expr) -> Expr | None:
	"""Translate a built-in binary operator, or None if `op` is not one."""
	if op in LOGICAL_OPS:
		return Logical(left, op, right)
	if op in NATIVE_BINARY_OPS:
		return Binary(left, op, right)
	builder = REWRITTEN_BINARY_OPS.get(op)
	if builder is not None:
		return builder(left, right)
	return None


def build_unary(op: str, operand: Expr) -> Expr | None:
	"""Translate a built-in unary operator, or None if `op` is not one."""
	if op in NATIVE_UNARY_OPS:
		return Unary(op, operand)
	return None


def warn_loose_equality(jexl_op: str, stacklevel: int = 1) -> None:
	"""Warn that `jexl_op` was translated to its strict counterpart.

	`stacklevel` counts from the caller of this function, as in `warnings.warn`.
	"""
	warnings.warn(
		f"Jexl `{jexl_op}` translated to strict `{LOOSE_EQUALITY_OPS[jexl_op]}`; "
		+ "operands of different types no longer compare by coercion",
		LooseEqualityWarning,
		stacklevel=stacklevel + 1,
	)
