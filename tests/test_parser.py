"""
Tests for the Jexl tokenizer and parser.
"""

import re

import pytest
from jexl2js import Jexl, JexlSyntaxError, default_grammar
from jexl2js.jexl import (
	ArrayLiteral,
	BinaryExpression,
	ConditionalExpression,
	FilterExpression,
	FunctionCall,
	Identifier,
	Literal,
	ObjectLiteral,
	UnaryExpression,
)
from jexl2js.jexl.lexer import Lexer


def tokens(expression: str) -> list[tuple[str, object]]:
	return [(t.type, t.value) for t in Lexer(default_grammar()).tokenize(expression)]


# =============================================================================
# Lexer
# =============================================================================


class TestLexer:
	def test_literals(self):
		assert tokens("'a' \"b\" 1 2.5 true false") == [
			("literal", "a"),
			("literal", "b"),
			("literal", 1.0),
			("literal", 2.5),
			("literal", True),
			("literal", False),
		]

	def test_escaped_quotes(self):
		assert tokens(r"'it\'s' " + r'"a \"b\" \\"') == [
			("literal", "it's"),
			("literal", 'a "b" \\'),
		]

	def test_other_escapes_are_kept(self):
		assert tokens(r"'a\nb'") == [("literal", r"a\nb")]

	def test_negative_number_at_start(self):
		assert tokens("-1") == [("literal", -1.0)]

	def test_negative_number_after_operator(self):
		assert tokens("2 * -1") == [
			("literal", 2.0),
			("binaryOp", "*"),
			("literal", -1.0),
		]

	def test_negative_number_after_open_paren_and_comma(self):
		assert tokens("f(-1, -2)") == [
			("identifier", "f"),
			("openParen", "("),
			("literal", -1.0),
			("comma", ","),
			("literal", -2.0),
			("closeParen", ")"),
		]

	def test_minus_after_operand_is_subtraction(self):
		assert tokens("a -1") == [
			("identifier", "a"),
			("binaryOp", "-"),
			("literal", 1.0),
		]

	def test_longest_symbol_wins(self):
		assert tokens("a // b >= c") == [
			("identifier", "a"),
			("binaryOp", "//"),
			("identifier", "b"),
			("binaryOp", ">="),
			("identifier", "c"),
		]

	def test_word_operator(self):
		assert tokens("a in b") == [
			("identifier", "a"),
			("binaryOp", "in"),
			("identifier", "b"),
		]

	def test_word_operator_prefix_is_identifier(self):
		assert tokens("index insert") == [
			("identifier", "index"),
			("identifier", "insert"),
		]

	def test_identifier_characters(self):
		assert tokens("$el _x été") == [
			("identifier", "$el"),
			("identifier", "_x"),
			("identifier", "été"),
		]

	def test_raw_and_position(self):
		toks = Lexer(default_grammar()).tokenize("a == -2")
		assert [(t.raw, t.position) for t in toks] == [("a", 0), ("==", 2), ("-2", 5)]

	def test_unterminated_string(self):
		with pytest.raises(JexlSyntaxError, match="Unterminated string") as exc:
			tokens("a + 'abc")
		assert exc.value.position == 4

	def test_invalid_character(self):
		with pytest.raises(JexlSyntaxError, match="Invalid character '#'") as exc:
			tokens("a # b")
		assert exc.value.position == 2
		assert exc.value.expression == "a # b"


# =============================================================================
# Parser
# =============================================================================


class TestParser:
	def test_literal(self):
		assert Jexl().parse("'x'") == Literal("x")

	def test_identifier_chain(self):
		assert Jexl().parse("a.b.c") == Identifier(
			"c", from_=Identifier("b", from_=Identifier("a"))
		)

	def test_precedence(self):
		assert Jexl().parse("1 + 2 * 3") == BinaryExpression(
			"+", Literal(1.0), BinaryExpression("*", Literal(2.0), Literal(3.0))
		)

	def test_left_associative(self):
		assert Jexl().parse("1 - 2 - 3") == BinaryExpression(
			"-", BinaryExpression("-", Literal(1.0), Literal(2.0)), Literal(3.0)
		)

	def test_parentheses(self):
		assert Jexl().parse("(1 + 2) * 3") == BinaryExpression(
			"*", BinaryExpression("+", Literal(1.0), Literal(2.0)), Literal(3.0)
		)

	def test_logical_binds_loosest(self):
		assert Jexl().parse("a == 1 && b") == BinaryExpression(
			"&&",
			BinaryExpression("==", Identifier("a"), Literal(1.0)),
			Identifier("b"),
		)

	def test_unary_binds_tighter_than_binary(self):
		assert Jexl().parse("!a && b") == BinaryExpression(
			"&&", UnaryExpression("!", Identifier("a")), Identifier("b")
		)

	def test_unary_applies_to_member_chain(self):
		assert Jexl().parse("!a.b") == UnaryExpression(
			"!", Identifier("b", from_=Identifier("a"))
		)

	def test_conditional_nests_right(self):
		assert Jexl().parse("a ? b : c ? d : e") == ConditionalExpression(
			Identifier("a"),
			Identifier("b"),
			ConditionalExpression(Identifier("c"), Identifier("d"), Identifier("e")),
		)

	def test_array_and_object(self):
		assert Jexl().parse("[1, {a: 2, 'b c': []}]") == ArrayLiteral(
			[
				Literal(1.0),
				ObjectLiteral({"a": Literal(2.0), "b c": ArrayLiteral([])}),
			]
		)

	def test_empty_object(self):
		assert Jexl().parse("{}") == ObjectLiteral({})

	def test_function_call(self):
		assert Jexl().parse("f(1, x)") == FunctionCall(
			"functions", "f", [Literal(1.0), Identifier("x")]
		)

	def test_transform_chain(self):
		assert Jexl().parse("x | a | b(1)") == FunctionCall(
			"transforms",
			"b",
			[FunctionCall("transforms", "a", [Identifier("x")]), Literal(1.0)],
		)

	def test_transform_binds_tighter_than_binary(self):
		assert Jexl().parse("a < b | c") == BinaryExpression(
			"<", Identifier("a"), FunctionCall("transforms", "c", [Identifier("b")])
		)

	def test_absolute_filter(self):
		assert Jexl().parse("a[0]") == FilterExpression(Identifier("a"), Literal(0.0))

	def test_relative_filter(self):
		assert Jexl().parse("a[.b > 1]") == FilterExpression(
			Identifier("a"),
			BinaryExpression(">", Identifier("b", relative=True), Literal(1.0)),
			relative=True,
		)

	def test_relative_flag_belongs_to_innermost_filter(self):
		tree = Jexl().parse("a[b[.c]]")
		assert isinstance(tree, FilterExpression)
		assert not tree.relative
		assert isinstance(tree.expr, FilterExpression)
		assert tree.expr.relative

	def test_member_after_filter(self):
		assert Jexl().parse("a[.b].c") == Identifier(
			"c",
			from_=FilterExpression(
				Identifier("a"), Identifier("b", relative=True), relative=True
			),
		)


class TestParseErrors:
	@pytest.mark.parametrize(
		("source", "message"),
		[
			("", "Empty expression"),
			("   ", "Empty expression"),
			("(1", "Expected ')'"),
			("{a 1}", "Expected ':' after object key"),
			("{1: 2}", "Expected object key"),
			("1 +", "Unexpected end of expression"),
			("a b", "Unexpected token"),
			("a ? b", "Expected ':' in conditional expression"),
			("a.", "Expected identifier after '.'"),
			("x |", "Expected transform name"),
			("[1, 2", "Expected ']' to close array"),
			("f(1,", "Unexpected end of expression"),
		],
	)
	def test_invalid(self, source: str, message: str):
		with pytest.raises(JexlSyntaxError, match=re.escape(message)):
			Jexl().parse(source)

	def test_relative_identifier_outside_filter(self):
		with pytest.raises(JexlSyntaxError, match="Relative identifier outside of a filter"):
			Jexl().parse(".a + 1")

	def test_position_is_reported(self):
		with pytest.raises(JexlSyntaxError) as exc:
			Jexl().parse("a + * b")
		assert exc.value.position == 4
		assert "at position 4" in str(exc.value)


# =============================================================================
# Grammar changes
# =============================================================================


class TestGrammar:
	def test_custom_binary_operator(self):
		jexl = Jexl()
		jexl.add_binary_op("<>", 20, lambda a, b: a + b)
		assert jexl.parse("a <> b + 1") == BinaryExpression(
			"<>", Identifier("a"), BinaryExpression("+", Identifier("b"), Literal(1.0))
		)

	def test_word_binary_operator(self):
		jexl = Jexl()
		jexl.add_binary_op("and", 10, lambda a, b: a and b)
		assert jexl.parse("a and b") == BinaryExpression(
			"and", Identifier("a"), Identifier("b")
		)

	def test_custom_unary_operator(self):
		jexl = Jexl()
		jexl.add_unary_op("~", lambda value: not value)
		assert jexl.parse("~a") == UnaryExpression("~", Identifier("a"))

	def test_remove_op(self):
		jexl = Jexl()
		jexl.remove_op("^")
		with pytest.raises(JexlSyntaxError, match="Invalid character"):
			jexl.parse("a ^ 2")

	def test_remove_op_ignores_punctuation(self):
		jexl = Jexl()
		jexl.remove_op("[")
		assert jexl.parse("a[0]") == FilterExpression(Identifier("a"), Literal(0.0))

	def test_instances_do_not_share_grammar(self):
		first = Jexl()
		first.add_transform("t", lambda v: v)
		second = Jexl(first.grammar)
		second.add_transform("u", lambda v: v)
		assert "u" not in first.grammar.transforms
		assert "t" in second.grammar.transforms

	def test_registration_helpers(self):
		jexl = Jexl()
		jexl.add_functions({"f": len})
		jexl.add_transforms({"t": abs})

		@jexl.function
		def g(value):
			return value

		@jexl.transform("renamed")
		def h(value):
			return value

		assert jexl.grammar.functions == {"f": len, "g": g}
		assert jexl.grammar.transforms == {"t": abs, "renamed": h}
