"""
Tests for recovering the printed source of Python callables.
"""

import functools

from jexl2js import function_source


def add_one(a):
	return a + 1


def tagged(fn):
	return fn


@tagged
def decorated(a):
	return a


class Greeter:
	def greet(self, name):
		return "hi " + name


class TestNamedFunctions:
	def test_module_function(self):
		assert function_source(add_one) == "def add_one(a):\n\treturn a + 1\n"

	def test_nested_function_is_dedented(self):
		def inner(a):
			return a * 2

		assert function_source(inner) == "def inner(a):\n\treturn a * 2\n"

	def test_decorators_are_included(self):
		assert function_source(decorated) == "@tagged\ndef decorated(a):\n\treturn a\n"

	def test_unbound_method(self):
		source = function_source(Greeter.greet)
		assert source is not None
		assert source.startswith("def greet(self, name):")


class TestLambdas:
	def test_assigned_lambda(self):
		fn = lambda a: a * 2  # noqa: E731
		assert function_source(fn) == "lambda a: a * 2"

	def test_lambda_argument(self):
		def source_of(fn):
			return function_source(fn)

		assert source_of(lambda value: value.upper()) == "lambda value: value.upper()"

	def test_two_lambdas_on_one_line(self):
		first, second = (lambda a: a + 1), (lambda a: a - 1)
		assert function_source(first) == "lambda a: a + 1"
		assert function_source(second) == "lambda a: a - 1"

	def test_nested_lambdas(self):
		outer = lambda a: a.map(lambda b: b + 1)  # noqa: E731
		assert function_source(outer) == "lambda a: a.map(lambda b: b + 1)"

	def test_multiline_lambda(self):
		fn = lambda a: (  # noqa: E731
			a + 1
		)
		assert function_source(fn) == "lambda a: (  # noqa: E731\n\t\t\ta + 1\n\t\t)"


class TestNoSource:
	def test_builtin(self):
		assert function_source(len) is None

	def test_builtin_method(self):
		assert function_source("abc".upper) is None

	def test_bound_method(self):
		assert function_source(Greeter().greet) is None

	def test_partial(self):
		assert function_source(functools.partial(add_one, 1)) is None

	def test_class(self):
		assert function_source(Greeter) is None

	def test_exec_function(self):
		namespace: dict[str, object] = {}
		exec("def f(a):\n\treturn a", namespace)
		assert function_source(namespace["f"]) is None  # pyright: ignore[reportArgumentType]

	def test_exec_lambda(self):
		namespace: dict[str, object] = {}
		exec("g = lambda a: a", namespace)
		assert function_source(namespace["g"]) is None  # pyright: ignore[reportArgumentType]
