"""
Tests for implementation lookup.
"""

from jexl2js import Jexl, Resolver, Strategy, TranslateOptions, emit, parse_python_function
from jexl2js.jexl import FunctionCall, Identifier
from jexl2js.rewriter import Rewriter


def grammar_impl(value):
	return value


def override_impl(value):
	return value


def make_jexl() -> Jexl:
	jexl = Jexl()
	jexl.add_transform("t", grammar_impl)
	jexl.add_function("f", grammar_impl)
	jexl.add_binary_op("<>", 20, grammar_impl)
	jexl.add_unary_op("~", grammar_impl)
	return jexl


class TestDefaultResolver:
	def test_grammar_lookup(self):
		jexl = make_jexl()
		resolver = Resolver.default(jexl.grammar, TranslateOptions())
		assert resolver.resolve("transforms", "t") is grammar_impl
		assert resolver.resolve("functions", "f") is grammar_impl
		assert resolver.resolve("binaryOp", "<>") is grammar_impl
		assert resolver.resolve("unaryOp", "~") is grammar_impl

	def test_builtin_operators_resolve_to_their_implementation(self):
		jexl = make_jexl()
		resolver = Resolver.default(jexl.grammar, TranslateOptions())
		assert resolver.resolve("binaryOp", "+") is not None
		assert resolver.resolve("unaryOp", "!") is not None

	def test_kind_must_match(self):
		jexl = make_jexl()
		resolver = Resolver.default(jexl.grammar, TranslateOptions())
		assert resolver.resolve("functions", "t") is None
		assert resolver.resolve("transforms", "f") is None
		assert resolver.resolve("unaryOp", "<>") is None
		assert resolver.resolve("binaryOp", "~") is None
		assert resolver.resolve("binaryOp", "[") is None

	def test_unknown_name(self):
		resolver = Resolver.default(make_jexl().grammar, TranslateOptions())
		assert resolver.resolve("transforms", "missing") is None
		assert resolver.resolve_with_source("transforms", "missing") is None

	def test_override_wins(self):
		options = TranslateOptions(
			translate_transforms={"t": override_impl},
			translate_functions={"f": override_impl},
			translate_binary_ops={"<>": override_impl},
			translate_unary_ops={"~": override_impl},
		)
		resolver = Resolver.default(make_jexl().grammar, options)
		assert resolver.resolve_with_source("transforms", "t") == (override_impl, "override")
		assert resolver.resolve_with_source("functions", "f") == (override_impl, "override")
		assert resolver.resolve("binaryOp", "<>") is override_impl
		assert resolver.resolve("unaryOp", "~") is override_impl

	def test_override_for_one_name_only(self):
		options = TranslateOptions(translate_transforms={"t": override_impl})
		resolver = Resolver.default(make_jexl().grammar, options)
		assert resolver.resolve_with_source("functions", "f") == (grammar_impl, "grammar")


class TestCustomStrategies:
	def test_order_is_respected(self):
		calls: list[str] = []

		def first(kind, name):
			calls.append("first")
			return None

		def second(kind, name):
			calls.append("second")
			return override_impl

		def third(kind, name):
			calls.append("third")
			return grammar_impl

		resolver = Resolver(
			[Strategy("first", first), Strategy("second", second), Strategy("third", third)]
		)
		assert resolver.resolve_with_source("functions", "x") == (override_impl, "second")
		assert calls == ["first", "second"]

	def test_no_strategies(self):
		assert Resolver([]).resolve("functions", "x") is None

	def test_rewriter_uses_given_resolver(self):
		resolver = Resolver([Strategy("fixed", lambda kind, name: lambda v: v + 1)])
		options = TranslateOptions(function_parser=parse_python_function)
		rewriter = Rewriter(Jexl().grammar, options, resolver)
		tree = FunctionCall("functions", "anything", [Identifier("a")])
		assert emit(rewriter.rewrite(tree)) == "a + 1"
