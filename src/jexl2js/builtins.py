"""Python builtins and stdlib helpers -> JavaScript equivalents.

Each emitter receives the raw Python AST arguments of the call plus the
converter (`ctx`), and returns the JavaScript expression for the call.
"""

from __future__ import annotations

import ast
from collections.abc import Callable
from typing import TYPE_CHECKING

from jexl2js.errors import FunctionSourceError
from jexl2js.nodes import (
	Arrow,
	Binary,
	Call,
	Expr,
	Identifier,
	Literal,
	Member,
)

if TYPE_CHECKING:
	from jexl2js.pyfunc import FunctionConverter

Builtin = Callable[..., Expr]


def _math(name: str) -> Expr:
	return Member(Identifier("Math"), name)


# =============================================================================
# Builtin functions
# =============================================================================


def emit_print(*args: ast.expr, ctx: FunctionConverter) -> Expr:
	"""print(*args) -> console.log(...)"""
	return Call(Member(Identifier("console"), "log"), [ctx.emit_expr(a) for a in args])


def emit_len(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	"""len(x) -> x.length"""
	return Member(ctx.emit_expr(x), "length")


def emit_min(*args: ast.expr, ctx: FunctionConverter) -> Expr:
	"""min(a, b, ...) -> Math.min(a, b, ...)"""
	if len(args) < 2:
		raise FunctionSourceError("min() over a single iterable is not supported")
	return Call(_math("min"), [ctx.emit_expr(a) for a in args])


def emit_max(*args: ast.expr, ctx: FunctionConverter) -> Expr:
	"""max(a, b, ...) -> Math.max(a, b, ...)"""
	if len(args) < 2:
		raise FunctionSourceError("max() over a single iterable is not supported")
	return Call(_math("max"), [ctx.emit_expr(a) for a in args])


def emit_abs(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	return Call(_math("abs"), [ctx.emit_expr(x)])


def emit_round(
	number: ast.expr, ndigits: ast.expr | None = None, *, ctx: FunctionConverter
) -> Expr:
	"""round(x) -> Math.round(x); round(x, n) -> Number(x.toFixed(n))"""
	value = ctx.emit_expr(number)
	if ndigits is None:
		return Call(_math("round"), [value])
	fixed = Call(Member(value, "toFixed"), [ctx.emit_expr(ndigits)])
	return Call(Identifier("Number"), [fixed])


def emit_pow(base: ast.expr, exp: ast.expr, *, ctx: FunctionConverter) -> Expr:
	return Binary(ctx.emit_expr(base), "**", ctx.emit_expr(exp))


def emit_str(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	return Call(Identifier("String"), [ctx.emit_expr(x)])


def emit_int(*args: ast.expr, ctx: FunctionConverter) -> Expr:
	"""int(x) or int(x, base) -> parseInt(...)"""
	if not 1 <= len(args) <= 2:
		raise FunctionSourceError("int() expects one or two arguments")
	return Call(Identifier("parseInt"), [ctx.emit_expr(a) for a in args])


def emit_float(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	return Call(Identifier("parseFloat"), [ctx.emit_expr(x)])


def emit_bool(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	return Call(Identifier("Boolean"), [ctx.emit_expr(x)])


def emit_list(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	"""list(x) -> Array.from(x)"""
	return Call(Member(Identifier("Array"), "from"), [ctx.emit_expr(x)])


def _mapped_predicate(x: Expr) -> tuple[Expr, Expr] | None:
	# `iterable.map(fn)` -> (iterable, fn)
	if (
		isinstance(x, Call)
		and isinstance(x.callee, Member)
		and x.callee.prop == Identifier("map")
		and len(x.args) == 1
	):
		return x.callee.obj, x.args[0]
	return None


def emit_any(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	"""any(iterable) -> iterable.some((v) => v)"""
	value = ctx.emit_expr(x)
	mapped = _mapped_predicate(value)
	if mapped is not None:
		return Call(Member(mapped[0], "some"), [mapped[1]])
	return Call(Member(value, "some"), [Arrow(["v"], Identifier("v"))])


def emit_all(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
	"""all(iterable) -> iterable.every((v) => v)"""
	value = ctx.emit_expr(x)
	mapped = _mapped_predicate(value)
	if mapped is not None:
		return Call(Member(mapped[0], "every"), [mapped[1]])
	return Call(Member(value, "every"), [Arrow(["v"], Identifier("v"))])


def emit_sum(*args: ast.expr, ctx: FunctionConverter) -> Expr:
	"""sum(iterable, start=0) -> iterable.reduce((a, b) => a + b, start)"""
	if not 1 <= len(args) <= 2:
		raise FunctionSourceError("sum() expects one or two arguments")
	start = ctx.emit_expr(args[1]) if len(args) == 2 else Literal(0)
	reducer = Arrow(["a", "b"], Binary(Identifier("a"), "+", Identifier("b")))
	return Call(Member(ctx.emit_expr(args[0]), "reduce"), [reducer, start])


BUILTINS: dict[str, Builtin] = {
	"print": emit_print,
	"len": emit_len,
	"min": emit_min,
	"max": emit_max,
	"abs": emit_abs,
	"round": emit_round,
	"pow": emit_pow,
	"str": emit_str,
	"int": emit_int,
	"float": emit_float,
	"bool": emit_bool,
	"list": emit_list,
	"any": emit_any,
	"all": emit_all,
	"sum": emit_sum,
}


# =============================================================================
# Stdlib modules
# =============================================================================


def _math_function(name: str) -> Builtin:
	def emit(x: ast.expr, *, ctx: FunctionConverter) -> Expr:
		return Call(_math(name), [ctx.emit_expr(x)])

	return emit


def emit_json_loads(s: ast.expr, *, ctx: FunctionConverter) -> Expr:
	"""json.loads(s) -> JSON.parse(s)"""
	return Call(Member(Identifier("JSON"), "parse"), [ctx.emit_expr(s)])


def emit_json_dumps(
	obj: ast.expr, *, indent: ast.expr | None = None, ctx: FunctionConverter
) -> Expr:
	"""json.dumps(obj, indent=n) -> JSON.stringify(obj, null, n)"""
	args = [ctx.emit_expr(obj)]
	if indent is not None:
		args += [Literal(None), ctx.emit_expr(indent)]
	return Call(Member(Identifier("JSON"), "stringify"), args)


MODULE_FUNCTIONS: dict[tuple[str, str], Builtin] = {
	("math", "floor"): _math_function("floor"),
	("math", "ceil"): _math_function("ceil"),
	("math", "sqrt"): _math_function("sqrt"),
	("math", "trunc"): _math_function("trunc"),
	("json", "loads"): emit_json_loads,
	("json", "dumps"): emit_json_dumps,
}

MODULE_CONSTANTS: dict[tuple[str, str], Callable[[], Expr]] = {
	("math", "pi"): lambda: _math("PI"),
	("math", "e"): lambda: _math("E"),
	("math", "inf"): lambda: Identifier("Infinity"),
}


# =============================================================================
# Methods and constructors
# =============================================================================

# Python method name -> JavaScript method name. Other methods keep their name.
METHOD_RENAMES: dict[str, str] = {
	"upper": "toUpperCase",
	"lower": "toLowerCase",
	"strip": "trim",
	"lstrip": "trimStart",
	"rstrip": "trimEnd",
	"startswith": "startsWith",
	"endswith": "endsWith",
	"append": "push",
}

# Calling one of these produces `new Name(...)`
CONSTRUCTORS: frozenset[str] = frozenset(
	{"Date", "Array", "Map", "Set", "RegExp", "Error", "Promise", "WeakMap", "WeakSet"}
)
