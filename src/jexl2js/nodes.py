"""JavaScript expression tree produced by the translator.

Nodes are plain dataclasses. Every node knows how to emit itself as
JavaScript source, and `NodeTransformer` rebuilds trees for the passes that
run after the initial translation.
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, fields, replace
from typing import Any, TypeAlias, TypeVar, override
from typing import Literal as Lit

_N = TypeVar("_N", bound="Node")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


# =============================================================================
# Base classes
# =============================================================================
class Node(ABC):
	"""Base class for all target tree nodes."""

	__slots__: tuple[str, ...] = ()

	@abstractmethod
	def emit(self, out: list[str]) -> None:
		"""Emit this node as JavaScript code into the output buffer."""


class Expr(Node, ABC):
	"""Base class for expression nodes."""

	__slots__: tuple[str, ...] = ()

	def precedence(self) -> int:
		"""Operator precedence (higher = binds tighter). Default: primary (20)."""
		return 20


class Stmt(Node, ABC):
	"""Base class for statement nodes."""

	__slots__: tuple[str, ...] = ()


# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass(slots=True)
class Identifier(Expr):
	"""JS identifier: x, foo, myFunc"""

	name: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.name)


@dataclass(slots=True)
class Literal(Expr):
	"""JS literal: 42, "hello", true, null"""

	value: int | float | str | bool | None

	@override
	def precedence(self) -> int:
		# A negative number prints with a leading minus, like a unary expression
		if _is_number(self.value) and (self.value < 0 or _is_negative_zero(self.value)):
			return _PRECEDENCE["-u"]
		return 20

	@override
	def emit(self, out: list[str]) -> None:
		if self.value is None:
			out.append("null")
		elif isinstance(self.value, bool):
			out.append("true" if self.value else "false")
		elif isinstance(self.value, str):
			out.append('"')
			out.append(_escape_string(self.value))
			out.append('"')
		else:
			out.append(format_number(self.value))


@dataclass(slots=True)
class Undefined(Expr):
	"""JS undefined.

	Literal(None) emits `null`. Undefined also marks call arguments that were
	missing at an inlined call site.
	"""

	@override
	def emit(self, out: list[str]) -> None:
		out.append("undefined")


@dataclass(slots=True)
class Array(Expr):
	"""JS array: [a, b, c]"""

	elements: Sequence[Expr]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("[")
		for i, e in enumerate(self.elements):
			if i > 0:
				out.append(", ")
			e.emit(out)
		out.append("]")


@dataclass(slots=True)
class Object(Expr):
	"""JS object: {key: value}"""

	props: Sequence[tuple[str, Expr]]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("{")
		for i, (k, v) in enumerate(self.props):
			if i > 0:
				out.append(", ")
			if _IDENTIFIER_RE.match(k):
				out.append(k)
			else:
				out.append('"')
				out.append(_escape_string(k))
				out.append('"')
			out.append(": ")
			v.emit(out)
		out.append("}")


@dataclass(slots=True)
class Member(Expr):
	"""JS member access: obj.prop, obj[prop], obj?.prop, obj?.[prop]

	A string property is shorthand for an Identifier property.
	"""

	obj: Expr
	prop: Expr
	computed: bool = False
	optional: bool = False

	def __init__(
		self,
		obj: Expr,
		prop: Expr | str,
		computed: bool = False,
		optional: bool = False,
	) -> None:
		self.obj = obj
		self.prop = Identifier(prop) if isinstance(prop, str) else prop
		self.computed = computed
		self.optional = optional

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.obj, out, member=not self.computed)
		if self.computed:
			out.append("?.[" if self.optional else "[")
			self.prop.emit(out)
			out.append("]")
		else:
			out.append("?." if self.optional else ".")
			self.prop.emit(out)


@dataclass(slots=True)
class Call(Expr):
	"""JS function call: fn(args)"""

	callee: Expr
	args: Sequence[Expr]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.callee, out)
		_emit_args(self.args, out)


@dataclass(slots=True)
class New(Expr):
	"""JS new expression: new Ctor(args)"""

	ctor: Expr
	args: Sequence[Expr]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("new ")
		if isinstance(self.ctor, (Call, New)):
			out.append("(")
			self.ctor.emit(out)
			out.append(")")
		else:
			_emit_primary(self.ctor, out)
		_emit_args(self.args, out)


@dataclass(slots=True)
class Unary(Expr):
	"""JS unary expression: -x, !x, typeof x"""

	op: str
	operand: Expr

	@override
	def precedence(self) -> int:
		return _PRECEDENCE.get(self._tag(), 17)

	def _tag(self) -> str:
		# Unary plus and minus share their symbol with the binary operators
		return {"+": "+u", "-": "-u"}.get(self.op, self.op)

	@override
	def emit(self, out: list[str]) -> None:
		if self.op in {"typeof", "void", "delete"}:
			out.append(self.op)
			out.append(" ")
		else:
			out.append(self.op)
		# `- -x` must not collapse into the `--` operator
		if self.op in {"-", "+"} and _starts_with(self.operand, self.op):
			out.append("(")
			self.operand.emit(out)
			out.append(")")
			return
		_emit_paren(self.operand, self._tag(), "unary", out)


@dataclass(slots=True)
class Binary(Expr):
	"""JS binary expression: x + y, a === b"""

	left: Expr
	op: str
	right: Expr

	@override
	def precedence(self) -> int:
		return _PRECEDENCE.get(self.op, 0)

	@override
	def emit(self, out: list[str]) -> None:
		# Special: ** with a unary (or negative literal) on the left needs parens
		force_left = self.op == "**" and self.left.precedence() == _PRECEDENCE["-u"]
		if force_left:
			out.append("(")
			self.left.emit(out)
			out.append(")")
		else:
			_emit_paren(self.left, self.op, "left", out)
		out.append(" ")
		out.append(self.op)
		out.append(" ")
		_emit_paren(self.right, self.op, "right", out)


@dataclass(slots=True)
class Logical(Binary):
	"""JS logical expression: a && b, a || b, a ?? b"""


@dataclass(slots=True)
class Ternary(Expr):
	"""JS conditional expression: cond ? a : b"""

	cond: Expr
	then: Expr
	else_: Expr

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["?:"]

	@override
	def emit(self, out: list[str]) -> None:
		if self.cond.precedence() <= _PRECEDENCE["?:"]:
			out.append("(")
			self.cond.emit(out)
			out.append(")")
		else:
			self.cond.emit(out)
		out.append(" ? ")
		self.then.emit(out)
		out.append(" : ")
		self.else_.emit(out)


@dataclass(slots=True)
class ObjectPattern(Node):
	"""Destructuring parameter: {a, b}"""

	names: Sequence[str]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("{")
		out.append(", ".join(self.names))
		out.append("}")


Param: TypeAlias = str | ObjectPattern


@dataclass(slots=True)
class Arrow(Expr):
	"""JS arrow function: (x) => expr or (x) => { ... }"""

	params: Sequence[Param]
	body: Expr | Block

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["=>"]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_params(self.params, out)
		out.append(" => ")
		if isinstance(self.body, Object):
			out.append("(")
			self.body.emit(out)
			out.append(")")
		else:
			self.body.emit(out)


# =============================================================================
# Statement Nodes
# =============================================================================


@dataclass(slots=True)
class Return(Stmt):
	"""JS return statement: return expr;"""

	value: Expr | None = None

	@override
	def emit(self, out: list[str]) -> None:
		out.append("return")
		if self.value is not None:
			out.append(" ")
			self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class ExprStmt(Stmt):
	"""JS expression statement: expr;"""

	expr: Expr

	@override
	def emit(self, out: list[str]) -> None:
		if isinstance(self.expr, Object):
			out.append("(")
			self.expr.emit(out)
			out.append(")")
		else:
			self.expr.emit(out)
		out.append(";")


@dataclass(slots=True)
class Assign(Stmt):
	"""JS assignment: let x = expr; or x = expr; or x += expr;

	declare: "let", "const", or None (reassignment)
	value: None for a bare declaration (let x;)
	op: None for =, or "+", "-", etc. for augmented assignment
	"""

	target: str
	value: Expr | None
	declare: Lit["let", "const"] | None = None
	op: str | None = None

	@override
	def emit(self, out: list[str]) -> None:
		if self.declare:
			out.append(self.declare)
			out.append(" ")
		out.append(self.target)
		if self.value is None:
			out.append(";")
			return
		if self.op:
			out.append(" ")
			out.append(self.op)
			out.append("= ")
		else:
			out.append(" = ")
		self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class If(Stmt):
	"""JS if statement: if (cond) { ... } else { ... }"""

	cond: Expr
	then: Sequence[Stmt]
	else_: Sequence[Stmt] = ()

	@override
	def emit(self, out: list[str]) -> None:
		out.append("if (")
		self.cond.emit(out)
		out.append(") {\n")
		for stmt in self.then:
			stmt.emit(out)
			out.append("\n")
		out.append("}")
		if self.else_:
			out.append(" else {\n")
			for stmt in self.else_:
				stmt.emit(out)
				out.append("\n")
			out.append("}")


@dataclass(slots=True)
class Block(Stmt):
	"""JS block: { ... } - a sequence of statements."""

	body: Sequence[Stmt]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("{\n")
		for stmt in self.body:
			stmt.emit(out)
			out.append("\n")
		out.append("}")


@dataclass(slots=True)
class FunctionDecl(Stmt):
	"""JS function declaration: function name(params) { ... }"""

	name: str
	params: Sequence[Param]
	body: Block

	@override
	def emit(self, out: list[str]) -> None:
		out.append("function ")
		out.append(self.name)
		_emit_params(self.params, out)
		out.append(" ")
		self.body.emit(out)


@dataclass(slots=True)
class Program(Node):
	"""Top-level statement list, as returned by a function parser."""

	body: Sequence[Stmt]

	@override
	def emit(self, out: list[str]) -> None:
		for i, stmt in enumerate(self.body):
			if i > 0:
				out.append("\n")
			stmt.emit(out)


# =============================================================================
# Tree rebuilding
# =============================================================================


class NodeTransformer:
	"""Rebuilds a tree, dispatching to `visit_<ClassName>` methods.

	Mirrors `ast.NodeTransformer`, except that nodes are never mutated:
	`generic_visit` returns a fresh copy of the node with visited children,
	so the result never shares nodes with the input.
	"""

	def visit(self, node: _N) -> _N:
		method = getattr(self, "visit_" + type(node).__name__, self.generic_visit)
		return method(node)

	def generic_visit(self, node: _N) -> _N:
		changes = {f.name: self._visit_value(getattr(node, f.name)) for f in fields(node)}  # pyright: ignore[reportArgumentType]
		return replace(node, **changes)  # pyright: ignore[reportArgumentType]

	def _visit_value(self, value: Any) -> Any:
		if isinstance(value, Node):
			return self.visit(value)
		if isinstance(value, tuple):
			return tuple(self._visit_value(v) for v in value)  # pyright: ignore[reportUnknownVariableType]
		if isinstance(value, list):
			return [self._visit_value(v) for v in value]  # pyright: ignore[reportUnknownVariableType]
		return value


def iter_child_nodes(node: Node) -> list[Node]:
	"""Direct children of a node, in field order."""
	children: list[Node] = []

	def collect(value: Any) -> None:
		if isinstance(value, Node):
			children.append(value)
		elif isinstance(value, (list, tuple)):
			for v in value:  # pyright: ignore[reportUnknownVariableType]
				collect(v)

	for f in fields(node):  # pyright: ignore[reportArgumentType]
		collect(getattr(node, f.name))
	return children


def walk(node: Node) -> list[Node]:
	"""All nodes of a tree, parents before children."""
	result: list[Node] = []
	stack: list[Node] = [node]
	while stack:
		current = stack.pop()
		result.append(current)
		stack.extend(reversed(iter_child_nodes(current)))
	return result


# =============================================================================
# Emit logic
# =============================================================================


def emit(node: Node) -> str:
	"""Emit a node as JavaScript code."""
	out: list[str] = []
	node.emit(out)
	return "".join(out)


# Operator precedence table (higher = binds tighter)
_PRECEDENCE: dict[str, int] = {
	# Primary
	".": 20,
	"[]": 20,
	"()": 20,
	# Unary
	"!": 17,
	"+u": 17,
	"-u": 17,
	"~": 17,
	"typeof": 17,
	"void": 17,
	# Exponentiation (right-assoc)
	"**": 16,
	# Multiplicative
	"*": 15,
	"/": 15,
	"%": 15,
	# Additive
	"+": 14,
	"-": 14,
	# Shift
	"<<": 13,
	">>": 13,
	">>>": 13,
	# Relational
	"<": 12,
	"<=": 12,
	">": 12,
	">=": 12,
	"instanceof": 12,
	"in": 12,
	# Equality
	"==": 11,
	"!=": 11,
	"===": 11,
	"!==": 11,
	# Bitwise
	"&": 10,
	"^": 9,
	"|": 8,
	# Logical
	"&&": 7,
	"||": 6,
	"??": 6,
	# Ternary
	"?:": 4,
	# Arrow functions
	"=>": 2,
}

_RIGHT_ASSOC = {"**"}


def format_number(value: int | float) -> str:
	"""Format a number the way JavaScript's Number#toString does."""
	if isinstance(value, int) and abs(value) < 2**53:
		return str(value)
	value = float(value)
	if math.isnan(value):
		return "NaN"
	if math.isinf(value):
		return "Infinity" if value > 0 else "-Infinity"
	if value == 0:
		return "0"
	if value < 0:
		return "-" + format_number(-value)

	# repr() gives the shortest round-tripping digits, same as JS
	mantissa, _, exp = repr(value).partition("e")
	int_part, _, frac_part = mantissa.partition(".")
	raw = int_part + frac_part
	stripped = raw.lstrip("0")
	digits = stripped.rstrip("0")
	# value == 0.<digits> * 10**n
	n = len(int_part) - (len(raw) - len(stripped)) + (int(exp) if exp else 0)
	k = len(digits)

	if k <= n <= 21:
		return digits + "0" * (n - k)
	if 0 < n <= 21:
		return digits[:n] + "." + digits[n:]
	if -6 < n <= 0:
		return "0." + "0" * -n + digits
	e = n - 1
	sign = "+" if e >= 0 else "-"
	if k == 1:
		return f"{digits}e{sign}{abs(e)}"
	return f"{digits[0]}.{digits[1:]}e{sign}{abs(e)}"


def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_negative_zero(value: Any) -> bool:
	return isinstance(value, float) and value == 0 and math.copysign(1.0, value) < 0


def _starts_with(node: Expr, op: str) -> bool:
	if isinstance(node, Unary):
		return node.op == op
	if op == "-" and isinstance(node, Literal):
		return node.precedence() == _PRECEDENCE["-u"]
	return False


def _escape_string(s: str) -> str:
	"""Escape for double-quoted JS string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def _emit_paren(node: Expr, parent_op: str, side: str, out: list[str]) -> None:
	"""Emit child with parens if needed for precedence."""
	needs_parens = False
	if isinstance(node, (Ternary, Arrow)):
		needs_parens = True
	else:
		child_prec = node.precedence()
		parent_prec = _PRECEDENCE.get(parent_op, 17)
		if child_prec < parent_prec:
			needs_parens = True
		elif child_prec == parent_prec and isinstance(node, Binary):
			# Handle associativity
			if parent_op in _RIGHT_ASSOC:
				needs_parens = side == "left"
			else:
				needs_parens = side == "right"

	if needs_parens:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_primary(node: Expr, out: list[str], member: bool = False) -> None:
	"""Emit with parens if not primary precedence."""
	# `1.toString()` is a syntax error, `(1).toString()` is not
	bare_number = member and isinstance(node, Literal) and _is_number(node.value)
	if node.precedence() < 20 or bare_number:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_args(args: Sequence[Expr], out: list[str]) -> None:
	out.append("(")
	for i, a in enumerate(args):
		if i > 0:
			out.append(", ")
		a.emit(out)
	out.append(")")


def _emit_params(params: Sequence[Param], out: list[str]) -> None:
	out.append("(")
	for i, p in enumerate(params):
		if i > 0:
			out.append(", ")
		if isinstance(p, str):
			out.append(p)
		else:
			p.emit(out)
	out.append(")")

