"""
Python function source -> JavaScript tree.

This is the bundled function parser: it turns the printed source of a
Python lambda or `def` into a `Program` holding one arrow function or
function declaration, which the inliner then splices into translated
expressions. Only a restricted subset of Python is accepted; anything
outside it raises `FunctionSourceError`.
"""

from __future__ import annotations

import ast
import inspect
import textwrap
from collections.abc import Callable

from jexl2js.builtins import (
	BUILTINS,
	CONSTRUCTORS,
	METHOD_RENAMES,
	MODULE_CONSTANTS,
	MODULE_FUNCTIONS,
	Builtin,
)
from jexl2js.errors import FunctionSourceError
from jexl2js.nodes import (
	Array,
	Arrow,
	Assign,
	Binary,
	Block,
	Call,
	Expr,
	ExprStmt,
	FunctionDecl,
	Identifier,
	If,
	Literal,
	Logical,
	Member,
	New,
	Object,
	Program,
	Return,
	Stmt,
	Ternary,
	Unary,
)

ALLOWED_BINOPS: dict[type[ast.operator], str] = {
	ast.Add: "+",
	ast.Sub: "-",
	ast.Mult: "*",
	ast.Div: "/",
	ast.Mod: "%",
	ast.Pow: "**",
	ast.BitAnd: "&",
	ast.BitOr: "|",
	ast.BitXor: "^",
	ast.LShift: "<<",
	ast.RShift: ">>",
}

ALLOWED_UNOPS: dict[type[ast.unaryop], str] = {
	ast.UAdd: "+",
	ast.USub: "-",
	ast.Not: "!",
	ast.Invert: "~",
}

ALLOWED_CMPOPS: dict[type[ast.cmpop], str] = {
	ast.Eq: "===",
	ast.NotEq: "!==",
	ast.Lt: "<",
	ast.LtE: "<=",
	ast.Gt: ">",
	ast.GtE: ">=",
}

# Stdlib modules whose functions have JavaScript equivalents
MODULES: frozenset[str] = frozenset(module for module, _ in MODULE_FUNCTIONS)


def parse_python_function(source: str) -> Program:
	"""Parse the printed source of a Python function into a `Program`.

	A lambda becomes `ExprStmt(Arrow)`; a `def` becomes a `FunctionDecl`
	with its docstring dropped and its decorators ignored.
	"""
	module = _parse(source)
	if not module.body:
		raise FunctionSourceError("No function found in source")
	first = module.body[0]

	if isinstance(first, ast.FunctionDef):
		return Program([FunctionConverter.from_def(first)])
	if isinstance(first, ast.AsyncFunctionDef):
		raise FunctionSourceError("Async functions cannot be inlined")

	# `lambda ...` on its own, or `name = lambda ...`
	value: ast.expr | None = None
	if isinstance(first, ast.Expr):
		value = first.value
	elif isinstance(first, ast.Assign):
		value = first.value
	if isinstance(value, ast.Lambda):
		return Program([ExprStmt(FunctionConverter([]).emit_lambda(value))])

	raise FunctionSourceError(
		f"Expected a lambda or function definition, got {type(first).__name__}"
	)


def _parse(source: str) -> ast.Module:
	src = textwrap.dedent(source)
	try:
		return ast.parse(src)
	except SyntaxError as err:
		# A lambda spanning several lines only parses inside brackets
		try:
			return ast.parse(f"({src})")
		except SyntaxError:
			pass
		raise FunctionSourceError(f"Invalid function source: {err.msg}") from err


def _params(args: ast.arguments) -> list[str]:
	if args.vararg or args.kwarg or args.kwonlyargs:
		raise FunctionSourceError("Only positional parameters are supported")
	if args.defaults:
		raise FunctionSourceError("Default parameter values are not supported")
	return [a.arg for a in (*args.posonlyargs, *args.args)]


def _block_scoped_locals(stmts: list[ast.stmt], params: list[str]) -> list[str]:
	"""Locals whose first assignment sits inside an `if` block, in source order."""
	seen = set(params)
	hoisted: list[str] = []

	def scan(body: list[ast.stmt], nested: bool) -> None:
		for s in body:
			if isinstance(s, ast.Assign):
				targets = s.targets
			elif isinstance(s, ast.AnnAssign):
				targets = [s.target]
			elif isinstance(s, ast.If):
				scan(s.body, True)
				scan(s.orelse, True)
				continue
			else:
				continue
			for t in targets:
				if isinstance(t, ast.Name) and t.id not in seen:
					seen.add(t.id)
					if nested:
						hoisted.append(t.id)

	scan(stmts, False)
	return hoisted


class FunctionConverter:
	"""Converts one Python function body into JavaScript nodes.

	Names bound in the function (parameters, assigned locals, lambda and
	comprehension variables) are tracked in `locals`. Any other name is
	assumed to be a JavaScript global (`Date`, `console`, ...) unless it is
	a supported Python builtin or stdlib module.
	"""

	locals: set[str]

	def __init__(self, params: list[str]) -> None:
		self.locals = set(params)

	@classmethod
	def from_def(cls, node: ast.FunctionDef) -> FunctionDecl:
		params = _params(node.args)
		converter = cls(params)
		body = node.body
		# Skip docstrings
		if (
			body
			and isinstance(body[0], ast.Expr)
			and isinstance(body[0].value, ast.Constant)
			and isinstance(body[0].value.value, str)
		):
			body = body[1:]
		# `let` is block scoped: locals first bound inside an `if` are declared first
		hoisted = _block_scoped_locals(body, params)
		converter.locals.update(hoisted)
		decls: list[Stmt] = [Assign(name, None, declare="let") for name in hoisted]
		stmts = [*decls, *converter.emit_body(body)]
		return FunctionDecl(node.name, params, Block(stmts))

	# --- Statements ----------------------------------------------------------

	def emit_body(self, stmts: list[ast.stmt]) -> list[Stmt]:
		out: list[Stmt] = []
		for s in stmts:
			emitted = self.emit_stmt(s)
			if emitted is not None:
				out.append(emitted)
		return out

	def emit_stmt(self, node: ast.stmt) -> Stmt | None:
		"""Emit a statement. `pass` emits nothing."""
		if isinstance(node, ast.Return):
			return Return(self.emit_expr(node.value) if node.value else None)

		if isinstance(node, ast.Pass):
			return None

		if isinstance(node, ast.Expr):
			return ExprStmt(self.emit_expr(node.value))

		if isinstance(node, ast.AugAssign):
			if not isinstance(node.target, ast.Name):
				raise FunctionSourceError("Only simple augmented assignments supported")
			op_type = type(node.op)
			if op_type not in ALLOWED_BINOPS:
				raise FunctionSourceError(
					f"Unsupported augmented assignment operator: {op_type.__name__}"
				)
			value = self.emit_expr(node.value)
			return Assign(node.target.id, value, op=ALLOWED_BINOPS[op_type])

		if isinstance(node, (ast.Assign, ast.AnnAssign)):
			if isinstance(node, ast.Assign):
				if len(node.targets) != 1:
					raise FunctionSourceError("Multiple assignment targets not supported")
				target = node.targets[0]
			else:
				target = node.target
			if not isinstance(target, ast.Name):
				raise FunctionSourceError("Only assignments to local names supported")
			value = Literal(None) if node.value is None else self.emit_expr(node.value)
			if target.id in self.locals:
				return Assign(target.id, value)
			self.locals.add(target.id)
			return Assign(target.id, value, declare="let")

		if isinstance(node, ast.If):
			cond = self.emit_expr(node.test)
			return If(cond, self.emit_body(node.body), self.emit_body(node.orelse))

		raise FunctionSourceError(f"Unsupported statement: {type(node).__name__}")

	# --- Expressions ---------------------------------------------------------

	def emit_expr(self, node: ast.expr | None) -> Expr:
		"""Emit an expression."""
		if node is None:
			return Literal(None)

		if isinstance(node, ast.Constant):
			return self._emit_constant(node)

		if isinstance(node, ast.Name):
			return self._emit_name(node)

		if isinstance(node, (ast.List, ast.Tuple)):
			return Array([self.emit_expr(e) for e in node.elts])

		if isinstance(node, ast.Set):
			return New(Identifier("Set"), [Array([self.emit_expr(e) for e in node.elts])])

		if isinstance(node, ast.Dict):
			return self._emit_dict(node)

		if isinstance(node, ast.BinOp):
			return self._emit_binop(node)

		if isinstance(node, ast.UnaryOp):
			op = type(node.op)
			if op not in ALLOWED_UNOPS:
				raise FunctionSourceError(f"Unsupported unary operator: {op.__name__}")
			return Unary(ALLOWED_UNOPS[op], self.emit_expr(node.operand))

		if isinstance(node, ast.BoolOp):
			bool_op = "&&" if isinstance(node.op, ast.And) else "||"
			values = [self.emit_expr(v) for v in node.values]
			result = values[0]
			for v in values[1:]:
				result = Logical(result, bool_op, v)
			return result

		if isinstance(node, ast.Compare):
			return self._emit_compare(node)

		if isinstance(node, ast.IfExp):
			return Ternary(
				self.emit_expr(node.test),
				self.emit_expr(node.body),
				self.emit_expr(node.orelse),
			)

		if isinstance(node, ast.Call):
			return self._emit_call(node)

		if isinstance(node, ast.Attribute):
			return self._emit_attribute(node)

		if isinstance(node, ast.Subscript):
			return self._emit_subscript(node)

		if isinstance(node, ast.Lambda):
			return self.emit_lambda(node)

		if isinstance(node, (ast.ListComp, ast.GeneratorExp)):
			return self._emit_comprehension(node)

		raise FunctionSourceError(f"Unsupported expression: {type(node).__name__}")

	def _emit_constant(self, node: ast.Constant) -> Expr:
		v = node.value
		if v is None or isinstance(v, (bool, int, float, str)):
			return Literal(v)
		raise FunctionSourceError(f"Unsupported constant type: {type(v).__name__}")

	def _emit_name(self, node: ast.Name) -> Expr:
		name = node.id
		if name in self.locals:
			return Identifier(name)
		if name in BUILTINS:
			raise FunctionSourceError(f"Builtin {name}() can only be called directly")
		if name in MODULES:
			raise FunctionSourceError(f"Module {name} can only be used as {name}.<name>")
		return Identifier(name)

	def _emit_dict(self, node: ast.Dict) -> Expr:
		props: list[tuple[str, Expr]] = []
		for k, v in zip(node.keys, node.values, strict=True):
			if not (isinstance(k, ast.Constant) and isinstance(k.value, str)):
				raise FunctionSourceError("Only string keys are supported in dict literals")
			props.append((k.value, self.emit_expr(v)))
		return Object(props)

	def _emit_binop(self, node: ast.BinOp) -> Expr:
		left = self.emit_expr(node.left)
		right = self.emit_expr(node.right)
		if isinstance(node.op, ast.FloorDiv):
			return Call(Member(Identifier("Math"), "floor"), [Binary(left, "/", right)])
		op = type(node.op)
		if op not in ALLOWED_BINOPS:
			raise FunctionSourceError(f"Unsupported binary operator: {op.__name__}")
		return Binary(left, ALLOWED_BINOPS[op], right)

	def _emit_compare(self, node: ast.Compare) -> Expr:
		operands: list[ast.expr] = [node.left, *node.comparators]
		exprs = [self.emit_expr(e) for e in operands]
		parts = [
			self._build_comparison(exprs[i], operands[i], op, exprs[i + 1], operands[i + 1])
			for i, op in enumerate(node.ops)
		]
		# a < b < c -> a < b && b < c
		result = parts[0]
		for part in parts[1:]:
			result = Logical(result, "&&", part)
		return result

	def _build_comparison(
		self,
		left: Expr,
		left_node: ast.expr,
		op: ast.cmpop,
		right: Expr,
		right_node: ast.expr,
	) -> Expr:
		if isinstance(op, (ast.Is, ast.IsNot)):
			negate = isinstance(op, ast.IsNot)
			if _is_none(right_node) or _is_none(left_node):
				subject = right if _is_none(left_node) else left
				return Binary(subject, "!=" if negate else "==", Literal(None))
			return Binary(left, "!==" if negate else "===", right)

		if isinstance(op, (ast.In, ast.NotIn)):
			contains = Call(Member(right, "includes"), [left])
			return Unary("!", contains) if isinstance(op, ast.NotIn) else contains

		op_type = type(op)
		if op_type not in ALLOWED_CMPOPS:
			raise FunctionSourceError(f"Unsupported comparison operator: {op_type.__name__}")
		return Binary(left, ALLOWED_CMPOPS[op_type], right)

	def _emit_call(self, node: ast.Call) -> Expr:
		if any(isinstance(a, ast.Starred) for a in node.args):
			raise FunctionSourceError("Star arguments are not supported")
		if any(kw.arg is None for kw in node.keywords):
			raise FunctionSourceError("**kwargs arguments are not supported")

		func = node.func
		if isinstance(func, ast.Name) and func.id not in self.locals:
			builtin = BUILTINS.get(func.id)
			if builtin is not None:
				return self._emit_builtin(func.id, builtin, node)
			if func.id in CONSTRUCTORS:
				self._no_keywords(node, func.id)
				return New(Identifier(func.id), [self.emit_expr(a) for a in node.args])

		if isinstance(func, ast.Attribute):
			if (
				isinstance(func.value, ast.Name)
				and func.value.id in MODULES
				and func.value.id not in self.locals
			):
				name = f"{func.value.id}.{func.attr}"
				emitter = MODULE_FUNCTIONS.get((func.value.id, func.attr))
				if emitter is None:
					raise FunctionSourceError(f"Unsupported function: {name}()")
				return self._emit_builtin(name, emitter, node)
			self._no_keywords(node, func.attr)
			obj = self.emit_expr(func.value)
			method = METHOD_RENAMES.get(func.attr, func.attr)
			return Call(Member(obj, method), [self.emit_expr(a) for a in node.args])

		self._no_keywords(node, ast.unparse(func))
		return Call(self.emit_expr(func), [self.emit_expr(a) for a in node.args])

	def _emit_builtin(self, name: str, emitter: Builtin, node: ast.Call) -> Expr:
		kwargs: dict[str, ast.expr] = {kw.arg: kw.value for kw in node.keywords if kw.arg}
		try:
			inspect.signature(emitter).bind(*node.args, ctx=self, **kwargs)
		except TypeError as err:
			raise FunctionSourceError(f"Invalid call to {name}(): {err}") from err
		return emitter(*node.args, ctx=self, **kwargs)

	def _no_keywords(self, node: ast.Call, name: str) -> None:
		if node.keywords:
			raise FunctionSourceError(f"Keyword arguments not supported for {name}()")

	def _emit_attribute(self, node: ast.Attribute) -> Expr:
		if (
			isinstance(node.value, ast.Name)
			and node.value.id in MODULES
			and node.value.id not in self.locals
		):
			constant = MODULE_CONSTANTS.get((node.value.id, node.attr))
			if constant is None:
				raise FunctionSourceError(
					f"Unsupported attribute: {node.value.id}.{node.attr}"
				)
			return constant()
		return Member(self.emit_expr(node.value), node.attr)

	def _emit_subscript(self, node: ast.Subscript) -> Expr:
		value = self.emit_expr(node.value)

		if isinstance(node.slice, ast.Slice):
			if node.slice.step is not None:
				raise FunctionSourceError("Slice steps are not supported")
			lower, upper = node.slice.lower, node.slice.upper
			args: list[Expr] = []
			if lower is not None or upper is not None:
				args.append(self.emit_expr(lower) if lower is not None else Literal(0))
			if upper is not None:
				args.append(self.emit_expr(upper))
			return Call(Member(value, "slice"), args)

		# Negative index: use .at()
		if isinstance(node.slice, ast.UnaryOp) and isinstance(node.slice.op, ast.USub):
			return Call(Member(value, "at"), [self.emit_expr(node.slice)])

		if isinstance(node.slice, ast.Tuple):
			raise FunctionSourceError("Multiple indices not supported in subscript")

		return Member(value, self.emit_expr(node.slice), computed=True)

	def emit_lambda(self, node: ast.Lambda) -> Arrow:
		"""Emit a lambda expression as an arrow function."""
		params = _params(node.args)
		saved_locals = set(self.locals)
		self.locals.update(params)
		try:
			body = self.emit_expr(node.body)
		finally:
			self.locals = saved_locals
		return Arrow(params, body)

	def _emit_comprehension(self, node: ast.ListComp | ast.GeneratorExp) -> Expr:
		"""[elt for x in it if cond] -> it.filter((x) => cond).map((x) => elt)

		Nested generators chain with flatMap.
		"""
		saved_locals = set(self.locals)

		def build(generators: list[ast.comprehension], last: Callable[[], Expr]) -> Expr:
			gen = generators[0]
			if gen.is_async:
				raise FunctionSourceError("Async comprehensions are not supported")
			if not isinstance(gen.target, ast.Name):
				raise FunctionSourceError("Only name targets supported in comprehensions")
			iterable = self.emit_expr(gen.iter)
			self.locals.add(gen.target.id)
			base = iterable
			if gen.ifs:
				conds = [self.emit_expr(test) for test in gen.ifs]
				cond = conds[0]
				for c in conds[1:]:
					cond = Logical(cond, "&&", c)
				base = Call(Member(base, "filter"), [Arrow([gen.target.id], cond)])

			if len(generators) == 1:
				return Call(Member(base, "map"), [Arrow([gen.target.id], last())])
			inner = build(generators[1:], last)
			return Call(Member(base, "flatMap"), [Arrow([gen.target.id], inner)])

		try:
			return build(node.generators, lambda: self.emit_expr(node.elt))
		finally:
			self.locals = saved_locals


def _is_none(node: ast.expr) -> bool:
	return isinstance(node, ast.Constant) and node.value is None
