"""Jexl parser: recursive descent over the lexer's tokens.

Grammar, loosest binding first:

	Expression  = Binary ( '?' Expression ':' Expression )?
	Binary      = Unary ( binaryOp Unary )*        (grammar precedences, left-assoc)
	Unary       = unaryOp Unary | Postfix
	Postfix     = Primary ( '.' name | '[' Expression ']' | '|' name Args? )*
	Primary     = literal | name Args? | '.' name | '(' Expression ')'
	            | '[' Expression,* ']' | '{' Key ':' Expression,* '}'
"""

from __future__ import annotations

import math

from jexl2js.errors import JexlSyntaxError
from jexl2js.jexl.grammar import Element, Grammar
from jexl2js.jexl.lexer import Lexer, Token
from jexl2js.jexl.nodes import (
	ArrayLiteral,
	BinaryExpression,
	ConditionalExpression,
	FilterExpression,
	FunctionCall,
	Identifier,
	JexlNode,
	Literal,
	ObjectLiteral,
	UnaryExpression,
)


class Parser:
	"""Parses one expression string against a grammar."""

	grammar: Grammar
	expression: str
	tokens: list[Token]
	pos: int
	# One entry per open filter bracket: whether it saw a relative identifier
	_relative: list[bool]

	def __init__(self, grammar: Grammar, expression: str) -> None:
		self.grammar = grammar
		self.expression = expression
		self.tokens = Lexer(grammar).tokenize(expression)
		self.pos = 0
		self._relative = []

	# ── Helpers ──────────────────────────────────────────────

	def current(self) -> Token | None:
		if self.pos < len(self.tokens):
			return self.tokens[self.pos]
		return None

	def advance(self) -> Token:
		tok = self.current()
		if tok is None:
			raise self.error("Unexpected end of expression")
		self.pos += 1
		return tok

	def at_type(self, type_: str) -> bool:
		tok = self.current()
		return tok is not None and tok.type == type_

	def expect_type(self, type_: str, what: str) -> Token:
		if not self.at_type(type_):
			raise self.error(f"Expected {what}")
		return self.advance()

	def error(self, msg: str) -> JexlSyntaxError:
		tok = self.current()
		if tok is None:
			return JexlSyntaxError(msg, self.expression, len(self.expression))
		return JexlSyntaxError(f"{msg}, got {tok.raw!r}", self.expression, tok.position)

	# ── Entry point ──────────────────────────────────────────

	def parse(self) -> JexlNode:
		if not self.tokens:
			raise self.error("Empty expression")
		node = self.parse_expression()
		if self.current() is not None:
			raise self.error("Unexpected token")
		return node

	# ── Expressions ──────────────────────────────────────────

	def parse_expression(self) -> JexlNode:
		test = self.parse_binary(-math.inf)
		if not self.at_type("question"):
			return test
		self.advance()
		consequent = self.parse_expression()
		self.expect_type("colon", "':' in conditional expression")
		alternate = self.parse_expression()
		return ConditionalExpression(test, consequent, alternate)

	def parse_binary(self, min_precedence: float) -> JexlNode:
		left = self.parse_unary()
		while True:
			tok = self.current()
			element = self._binary_element(tok)
			if tok is None or element is None or element.precedence <= min_precedence:
				return left
			self.advance()
			right = self.parse_binary(element.precedence)
			left = BinaryExpression(str(tok.value), left, right)

	def parse_unary(self) -> JexlNode:
		if self.at_type("unaryOp"):
			op = self.advance()
			return UnaryExpression(str(op.value), self.parse_unary())
		return self.parse_postfix()

	def parse_postfix(self) -> JexlNode:
		node = self.parse_primary()
		while True:
			if self.at_type("dot"):
				self.advance()
				name = self.expect_type("identifier", "identifier after '.'")
				node = Identifier(str(name.value), from_=node)
			elif self.at_type("openBracket"):
				self.advance()
				self._relative.append(False)
				expr = self.parse_expression()
				relative = self._relative.pop()
				self.expect_type("closeBracket", "']'")
				node = FilterExpression(node, expr, relative)
			elif self.at_type("pipe"):
				self.advance()
				name = self.expect_type("identifier", "transform name after '|'")
				args = [node]
				if self.at_type("openParen"):
					args.extend(self.parse_args())
				node = FunctionCall("transforms", str(name.value), args)
			else:
				return node

	def parse_primary(self) -> JexlNode:
		tok = self.current()
		if tok is None:
			raise self.error("Unexpected end of expression")

		if tok.type == "literal":
			self.advance()
			return Literal(tok.value)

		if tok.type == "identifier":
			self.advance()
			if self.at_type("openParen"):
				return FunctionCall("functions", str(tok.value), self.parse_args())
			return Identifier(str(tok.value))

		if tok.type == "dot":
			self.advance()
			name = self.expect_type("identifier", "identifier after '.'")
			if not self._relative:
				raise JexlSyntaxError(
					"Relative identifier outside of a filter",
					self.expression,
					tok.position,
				)
			self._relative[-1] = True
			return Identifier(str(name.value), relative=True)

		if tok.type == "openParen":
			self.advance()
			node = self.parse_expression()
			self.expect_type("closeParen", "')'")
			return node

		if tok.type == "openBracket":
			self.advance()
			elements: list[JexlNode] = []
			if not self.at_type("closeBracket"):
				elements.append(self.parse_expression())
				while self.at_type("comma"):
					self.advance()
					elements.append(self.parse_expression())
			self.expect_type("closeBracket", "']' to close array")
			return ArrayLiteral(elements)

		if tok.type == "openCurl":
			return self.parse_object()

		raise self.error("Unexpected token")

	def parse_object(self) -> ObjectLiteral:
		self.advance()
		entries: dict[str, JexlNode] = {}
		if not self.at_type("closeCurl"):
			while True:
				key = self.current()
				if key is None or not (
					key.type == "identifier"
					or (key.type == "literal" and isinstance(key.value, str))
				):
					raise self.error("Expected object key")
				self.advance()
				self.expect_type("colon", "':' after object key")
				entries[str(key.value)] = self.parse_expression()
				if not self.at_type("comma"):
					break
				self.advance()
		self.expect_type("closeCurl", "'}' to close object")
		return ObjectLiteral(entries)

	def parse_args(self) -> list[JexlNode]:
		self.expect_type("openParen", "'('")
		args: list[JexlNode] = []
		if not self.at_type("closeParen"):
			args.append(self.parse_expression())
			while self.at_type("comma"):
				self.advance()
				args.append(self.parse_expression())
		self.expect_type("closeParen", "')' to close argument list")
		return args

	def _binary_element(self, tok: Token | None) -> Element | None:
		if tok is None or tok.type != "binaryOp":
			return None
		return self.grammar.lookup_operator(str(tok.value), "binaryOp")


def parse(grammar: Grammar, expression: str) -> JexlNode:
	"""Parse Jexl expression text into a tree."""
	return Parser(grammar, expression).parse()
