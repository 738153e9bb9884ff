"""Shared Jexl instance and translation options.

Implementations are written against JavaScript globals (`Date`, `Array`)
where the translated code needs them; they are only ever translated, never
called.
"""

# pyright: reportUndefinedVariable=false

import json
import math
from collections.abc import Sequence

import pytest
from jexl2js import Jexl, TranslateOptions, parse_python_function


def every(values, match_value):
	return all(v == match_value for v in values)


def print_value(value):
	"""Log a value and pass."""
	print(value)
	return True


TRANSLATE_TRANSFORMS = {
	"prefix": lambda value, arg: arg + value,
}

TRANSLATE_FUNCTIONS = {
	"dateString": lambda value: Date(value).toString(),  # noqa: F821
}


def is_identifier_always_defined(path: Sequence[str]) -> bool:
	if len(path) == 1:
		return path[0] in {
			"console",
			"MyArrayWhichIsAlwaysDefined",
			"MyObjectWhichIsAlwaysDefined",
		}
	if len(path) == 2:
		return list(path) == [
			"MyObjectWhichIsAlwaysDefined",
			"MyObjectWhichIsAlwaysDefined",
		]
	return False


def make_jexl() -> Jexl:
	jexl = Jexl()
	jexl.add_transforms(
		{
			"length": lambda val: len(val),
			"some": lambda values, match_value: any(v == match_value for v in values),
			"every": every,
			"parseInt": lambda val, radix: int(val, radix),
			"fromJSON": lambda json_string: json.loads(json_string),
			"toJSON": lambda obj: json.dumps(obj),
			"prettyJSON": lambda obj, indent: json.dumps(obj, indent=indent),
			"floor": lambda value: math.floor(value),
			"ceil": lambda value: math.ceil(value),
			"round": lambda value: round(value),
			"abs": lambda value: abs(value),
		}
	)
	jexl.add_function("now", lambda: Date.now())  # noqa: F821
	jexl.add_function("print", print_value)
	jexl.add_unary_op("~", lambda value: not not value)
	jexl.add_binary_op("<>", 20, lambda a, b: a + b)
	jexl.add_binary_op("..", 20, lambda a, b: Array(b - a).fill(0).map(lambda _, i: a + i))  # noqa: F821
	return jexl


@pytest.fixture
def jexl() -> Jexl:
	return make_jexl()


@pytest.fixture
def options() -> TranslateOptions:
	return TranslateOptions(
		function_parser=parse_python_function,
		translate_transforms=TRANSLATE_TRANSFORMS,
		translate_functions=TRANSLATE_FUNCTIONS,
		is_identifier_always_defined=is_identifier_always_defined,
	)
