"""Inline custom implementations at their call sites.

A transform, function or custom operator implemented in Python is turned
into JavaScript by the function parser, then its parameters are replaced
by the translated call-site arguments:

	length = lambda val: len(val)        # x | length   ->  x.length
	def every(values, match):            # a | every(1) ->  a.every((v) => v === 1)
		return all(v == match for v in values)

Substitution is a pure rebuild: the parsed template is never mutated, and
every substitution site receives its own copy of the argument tree.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from jexl2js.nodes import (
	Arrow,
	Assign,
	Block,
	Call,
	Expr,
	ExprStmt,
	FunctionDecl,
	Identifier,
	Member,
	Node,
	NodeTransformer,
	ObjectPattern,
	Param,
	Program,
	Return,
	Undefined,
	iter_child_nodes,
	walk,
)
from jexl2js.options import FunctionParser
from jexl2js.source import function_source

logger = logging.getLogger(__name__)


def inline_function(
	fn: Callable[..., Any],
	args: Sequence[Expr],
	parser: FunctionParser | None,
) -> Expr | None:
	"""Inline `fn` called with `args`, or None when it cannot be inlined.

	Errors raised by `parser` propagate: they mean the implementation is
	malformed, not merely unavailable.
	"""
	if parser is None:
		logger.debug("Not inlining %r: no function parser configured", fn)
		return None
	source = function_source(fn)
	if source is None:
		logger.debug("Not inlining %r: source code unavailable", fn)
		return None
	result = inline_program(parser(source), args)
	if result is None:
		logger.debug("Not inlining %r: unsupported function shape", fn)
	return result


def inline_program(program: Program, args: Sequence[Expr]) -> Expr | None:
	"""Inline the first function of a parsed program with `args`."""
	if not program.body:
		return None
	first: Node = program.body[0]
	if isinstance(first, ExprStmt):
		first = first.expr
	if not isinstance(first, (Arrow, FunctionDecl)):
		return None

	substitutions: dict[str, Expr] = {}
	for i, param in enumerate(first.params):
		# Destructured parameters keep their position but bind no single name
		if isinstance(param, str):
			substitutions[param] = args[i] if i < len(args) else Undefined()

	# A parameter replaced by an expression cannot be assigned to
	if any(isinstance(n, Assign) and n.target in substitutions for n in walk(first.body)):
		return None

	reserved: set[str] = set()
	for arg in args:
		reserved |= referenced_names(arg)
	taken = reserved | referenced_names(first.body)

	body = _Substituter(substitutions, {}, reserved, taken).visit_scope(first.body, ())
	body = _TrailingUndefinedPruner().visit(body)

	if isinstance(body, Block):
		stmts = body.body
		if len(stmts) == 1 and isinstance(stmts[0], Return) and stmts[0].value is not None:
			return stmts[0].value
		return Call(Arrow([], body), [])
	return body


def referenced_names(node: Node) -> set[str]:
	"""Names an expression reads or binds. Member property names are not names."""
	names: set[str] = set()
	stack: list[Node] = [node]
	while stack:
		current = stack.pop()
		if isinstance(current, Identifier):
			names.add(current.name)
			continue
		if isinstance(current, Member) and not current.computed:
			stack.append(current.obj)
			continue
		if isinstance(current, Arrow):
			names.update(_param_names(current.params))
		elif isinstance(current, Assign):
			names.add(current.target)
		stack.extend(iter_child_nodes(current))
	return names


def _param_names(params: Sequence[Param]) -> list[str]:
	names: list[str] = []
	for p in params:
		if isinstance(p, str):
			names.append(p)
		else:
			names.extend(p.names)
	return names


def _declared_names(body: Expr | Block) -> list[str]:
	"""`let`/`const` names declared in a function body, outside nested arrows."""
	names: list[str] = []
	stack: list[Node] = [body]
	while stack:
		node = stack.pop()
		if isinstance(node, Arrow):
			continue
		if isinstance(node, Assign) and node.declare and node.target not in names:
			names.append(node.target)
		stack.extend(iter_child_nodes(node))
	return names


class _Substituter(NodeTransformer):
	"""Replaces parameter references with argument trees, one scope at a time.

	`substitutions` maps parameter names to the expressions replacing them.
	`renames` maps local bindings that would capture a name used by an
	argument to their fresh names.
	"""

	substitutions: Mapping[str, Expr]
	renames: Mapping[str, str]
	reserved: set[str]
	taken: set[str]

	def __init__(
		self,
		substitutions: Mapping[str, Expr],
		renames: Mapping[str, str],
		reserved: set[str],
		taken: set[str],
	) -> None:
		self.substitutions = substitutions
		self.renames = renames
		self.reserved = reserved
		# Shared between scopes, so fresh names never repeat
		self.taken = taken

	def visit_scope(self, body: Expr | Block, params: Sequence[Param]) -> Expr | Block:
		return self._enter(params, body).visit(body)

	def _enter(self, params: Sequence[Param], body: Expr | Block) -> _Substituter:
		declared = _declared_names(body)
		local = [*_param_names(params), *declared]
		if not local:
			return self
		substitutions = {k: v for k, v in self.substitutions.items() if k not in local}
		renames = {k: v for k, v in self.renames.items() if k not in local}
		# Destructured names stay as they are: renaming them changes the pattern
		renamable = [p for p in params if isinstance(p, str)] + declared
		for name in renamable:
			if name in self.reserved:
				renames[name] = self._fresh(name)
		return _Substituter(substitutions, renames, self.reserved, self.taken)

	def _fresh(self, name: str) -> str:
		i = 1
		while f"{name}_{i}" in self.taken:
			i += 1
		fresh = f"{name}_{i}"
		self.taken.add(fresh)
		return fresh

	def visit_Identifier(self, node: Identifier) -> Expr:
		if node.name in self.renames:
			return Identifier(self.renames[node.name])
		replacement = self.substitutions.get(node.name)
		if replacement is not None:
			return NodeTransformer().visit(replacement)
		return Identifier(node.name)

	def visit_Member(self, node: Member) -> Member:
		obj = self.visit(node.obj)
		prop = self.visit(node.prop) if node.computed else NodeTransformer().visit(node.prop)
		return Member(obj, prop, node.computed, node.optional)

	def visit_Arrow(self, node: Arrow) -> Arrow:
		scope = self._enter(node.params, node.body)
		params: list[Param] = []
		for p in node.params:
			if isinstance(p, str):
				params.append(scope.renames.get(p, p))
			else:
				params.append(ObjectPattern(list(p.names)))
		return Arrow(params, scope.visit(node.body))

	def visit_Assign(self, node: Assign) -> Assign:
		target = self.renames.get(node.target, node.target)
		value = None if node.value is None else self.visit(node.value)
		return Assign(target, value, node.declare, node.op)


class _TrailingUndefinedPruner(NodeTransformer):
	"""Drops trailing `undefined` arguments: `f(a, undefined)` -> `f(a)`."""

	def visit_Call(self, node: Call) -> Call:
		node = self.generic_visit(node)
		args = list(node.args)
		while args and _is_undefined(args[-1]):
			args.pop()
		return Call(node.callee, args)


def _is_undefined(node: Expr) -> bool:
	return isinstance(node, Undefined) or node == Identifier("undefined")
