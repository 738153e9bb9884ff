"""
Jexl tree -> JavaScript tree.

The rewriter walks a Jexl expression tree bottom-up and builds the
equivalent JavaScript expression. Built-in operators go through the static
operator table; custom operators, transforms and functions are resolved to
their Python implementations and inlined when possible. The finished tree
then gets optional chaining on every member access that may read from an
undefined value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from jexl2js.errors import UnknownOperatorError
from jexl2js.inline import inline_function
from jexl2js.jexl import nodes as jx
from jexl2js.jexl.grammar import Grammar
from jexl2js.nodes import (
	Array,
	Arrow,
	Call,
	Expr,
	Identifier,
	Literal,
	Member,
	Object,
	ObjectPattern,
	Ternary,
	emit,
)
from jexl2js.operators import (
	LOOSE_EQUALITY_OPS,
	build_binary,
	build_unary,
	warn_loose_equality,
)
from jexl2js.optional import annotate_optional
from jexl2js.options import TranslateOptions
from jexl2js.resolver import Kind, Resolver

if TYPE_CHECKING:
	from jexl2js.jexl import Jexl

logger = logging.getLogger(__name__)


class Rewriter:
	"""Translates Jexl trees.

	Besides its configuration it records, in `loose_equality`, the loose
	equality operators it has rewritten to strict ones, so the entry points
	can warn on behalf of their caller.
	"""

	grammar: Grammar
	options: TranslateOptions
	resolver: Resolver
	loose_equality: list[str]

	def __init__(
		self,
		grammar: Grammar,
		options: TranslateOptions | None = None,
		resolver: Resolver | None = None,
	) -> None:
		self.grammar = grammar
		self.options = options or TranslateOptions()
		self.resolver = resolver or Resolver.default(grammar, self.options)
		self.loose_equality = []

	def rewrite(self, node: jx.JexlNode) -> Expr:
		if isinstance(node, jx.Literal):
			return Literal(node.value)

		if isinstance(node, jx.Identifier):
			if node.from_ is not None:
				return Member(self.rewrite(node.from_), node.value)
			return Identifier(node.value)

		if isinstance(node, jx.UnaryExpression):
			operand = self.rewrite(node.right)
			built = build_unary(node.operator, operand)
			if built is not None:
				return built
			return self._custom_operator("unaryOp", node.operator, [operand])

		if isinstance(node, jx.BinaryExpression):
			left = self.rewrite(node.left)
			right = self.rewrite(node.right)
			op = node.operator
			if op in LOOSE_EQUALITY_OPS and op not in self.loose_equality:
				self.loose_equality.append(op)
			built = build_binary(op, left, right)
			if built is not None:
				return built
			return self._custom_operator("binaryOp", op, [left, right])

		if isinstance(node, jx.ConditionalExpression):
			return Ternary(
				self.rewrite(node.test),
				self.rewrite(node.consequent),
				self.rewrite(node.alternate),
			)

		if isinstance(node, jx.ArrayLiteral):
			return Array([self.rewrite(v) for v in node.value])

		if isinstance(node, jx.ObjectLiteral):
			return Object([(k, self.rewrite(v)) for k, v in node.value.items()])

		if isinstance(node, jx.FilterExpression):
			return self._filter(node)

		if isinstance(node, jx.FunctionCall):
			return self._call(node)

		assert_never(node)

	def _filter(self, node: jx.FilterExpression) -> Expr:
		subject = self.rewrite(node.subject)
		if not node.relative:
			# Plain index or key lookup
			return Member(subject, self.rewrite(node.expr), computed=True)
		names = relative_identifiers(node.expr)
		logger.debug("Relative filter destructures %s", names)
		predicate = Arrow([ObjectPattern(names)], self.rewrite(node.expr))
		return Call(Member(subject, "filter"), [predicate])

	def _call(self, node: jx.FunctionCall) -> Expr:
		args = [self.rewrite(a) for a in node.args]
		found = self.resolver.resolve_with_source(node.pool, node.name)
		if found is None:
			logger.debug("No implementation for %s %r", node.pool, node.name)
		else:
			impl, origin = found
			inlined = inline_function(impl, args, self.options.function_parser)
			if inlined is not None:
				return inlined
			logger.debug("Emitting plain call to %s %r (%s)", node.pool, node.name, origin)
		return Call(Identifier(node.name), args)

	def _custom_operator(self, kind: Kind, operator: str, operands: list[Expr]) -> Expr:
		impl = self.resolver.resolve(kind, operator)
		if impl is not None:
			inlined = inline_function(impl, operands, self.options.function_parser)
			if inlined is not None:
				return inlined
		raise UnknownOperatorError(operator, "unary" if kind == "unaryOp" else "binary")


def relative_identifiers(node: jx.JexlNode) -> list[str]:
	"""Names of the relative identifiers (`.name`) anywhere under `node`.

	Order of first appearance, without duplicates.
	"""
	found: list[str] = []

	def visit(n: jx.JexlNode) -> None:
		if isinstance(n, jx.Literal):
			return
		if isinstance(n, jx.Identifier):
			if n.relative and n.value not in found:
				found.append(n.value)
			if n.from_ is not None:
				visit(n.from_)
		elif isinstance(n, jx.UnaryExpression):
			visit(n.right)
		elif isinstance(n, jx.BinaryExpression):
			visit(n.left)
			visit(n.right)
		elif isinstance(n, jx.ConditionalExpression):
			visit(n.test)
			visit(n.consequent)
			visit(n.alternate)
		elif isinstance(n, jx.ArrayLiteral):
			for v in n.value:
				visit(v)
		elif isinstance(n, jx.ObjectLiteral):
			for v in n.value.values():
				visit(v)
		elif isinstance(n, jx.FilterExpression):
			visit(n.subject)
			visit(n.expr)
		elif isinstance(n, jx.FunctionCall):
			for a in n.args:
				visit(a)
		else:
			assert_never(n)

	visit(node)
	return found


# =============================================================================
# Entry points
# =============================================================================


def transpile_ast(
	grammar: Grammar, tree: jx.JexlNode, options: TranslateOptions | None = None
) -> Expr:
	"""Translate a parsed Jexl tree into a JavaScript expression tree.

	Raises:
		UnknownOperatorError: an operator has no static mapping and no
			inlinable implementation.
		FunctionSourceError: a custom implementation could not be parsed.
	"""
	return _translate(grammar, tree, options)


def transpile(jexl: Jexl, source: str, options: TranslateOptions | None = None) -> Expr:
	"""Parse a Jexl expression with `jexl` and translate it."""
	return _translate(jexl.grammar, jexl.parse(source), options)


def transpile_to_string(
	jexl: Jexl, source: str, options: TranslateOptions | None = None
) -> str:
	"""Translate a Jexl expression straight to JavaScript source."""
	return emit(_translate(jexl.grammar, jexl.parse(source), options))


def _translate(
	grammar: Grammar, tree: jx.JexlNode, options: TranslateOptions | None
) -> Expr:
	options = options or TranslateOptions()
	rewriter = Rewriter(grammar, options)
	translated = rewriter.rewrite(tree)
	# Attributed to the caller of the public entry point
	for op in rewriter.loose_equality:
		warn_loose_equality(op, stacklevel=3)
	return annotate_optional(translated, options.is_identifier_always_defined)
