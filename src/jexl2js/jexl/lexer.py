"""Jexl tokenizer."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TypeAlias

from jexl2js.errors import JexlSyntaxError
from jexl2js.jexl.grammar import ElementType, Grammar

TokenType: TypeAlias = ElementType | str
TokenValue: TypeAlias = str | float | bool

_LETTER = "A-Za-z_$À-ÖØ-öø-ÿ"
_IDENTIFIER_RE = re.compile(f"[{_LETTER}][{_LETTER}0-9]*")
_NUMBER_RE = re.compile(r"[0-9]*\.[0-9]+|[0-9]+")

# A '-' right after one of these (or at the start) negates the next number
_NEGATE_AFTER: set[str] = {
	"binaryOp",
	"unaryOp",
	"openParen",
	"openBracket",
	"question",
	"colon",
	"comma",
}


@dataclass(frozen=True, slots=True)
class Token:
	type: TokenType
	value: TokenValue
	raw: str
	position: int


class Lexer:
	"""Splits expression text into tokens, using the grammar's symbols."""

	grammar: Grammar
	_symbols: list[str]

	def __init__(self, grammar: Grammar) -> None:
		self.grammar = grammar
		# Longest first, so `//` wins over `/` and `..` over `.`
		self._symbols = sorted(
			(s for s in grammar.elements if not _IDENTIFIER_RE.fullmatch(s)),
			key=len,
			reverse=True,
		)

	def tokenize(self, expression: str) -> list[Token]:
		tokens: list[Token] = []
		pos = 0
		while pos < len(expression):
			ch = expression[pos]
			if ch.isspace():
				pos += 1
				continue

			if ch in "'\"":
				token, end = self._string(expression, pos)
			elif ch.isdigit():
				match = _NUMBER_RE.match(expression, pos)
				assert match is not None
				end = match.end()
				value = float(match.group())
				if self._negates(tokens):
					minus = tokens.pop()
					token = Token(
						"literal", -value, expression[minus.position : end], minus.position
					)
				else:
					token = Token("literal", value, match.group(), pos)
			elif match := _IDENTIFIER_RE.match(expression, pos):
				token = self._word(match.group(), pos)
				end = match.end()
			else:
				token = self._symbol(expression, pos)
				end = pos + len(token.raw)

			tokens.append(token)
			pos = end
		return tokens

	def _negates(self, tokens: list[Token]) -> bool:
		if not tokens or tokens[-1].type != "binaryOp" or tokens[-1].value != "-":
			return False
		return len(tokens) == 1 or tokens[-2].type in _NEGATE_AFTER

	def _string(self, expression: str, start: int) -> tuple[Token, int]:
		quote = expression[start]
		chars: list[str] = []
		pos = start + 1
		while pos < len(expression):
			ch = expression[pos]
			if ch == "\\" and pos + 1 < len(expression):
				nxt = expression[pos + 1]
				if nxt == quote or nxt == "\\":
					chars.append(nxt)
					pos += 2
					continue
			if ch == quote:
				raw = expression[start : pos + 1]
				return Token("literal", "".join(chars), raw, start), pos + 1
			chars.append(ch)
			pos += 1
		raise JexlSyntaxError("Unterminated string", expression, start)

	def _word(self, word: str, pos: int) -> Token:
		if word == "true" or word == "false":
			return Token("literal", word == "true", word, pos)
		element = self.grammar.elements.get(word)
		if element is not None:
			return Token(element.type, word, word, pos)
		return Token("identifier", word, word, pos)

	def _symbol(self, expression: str, pos: int) -> Token:
		for symbol in self._symbols:
			if expression.startswith(symbol, pos):
				return Token(self.grammar.elements[symbol].type, symbol, symbol, pos)
		raise JexlSyntaxError(f"Invalid character {expression[pos]!r}", expression, pos)
