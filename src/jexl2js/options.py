"""Translation settings."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from jexl2js.nodes import Program

FunctionParser = Callable[[str], Program]
"""Turns the printed source of a callable into a target `Program`."""

IdentifierPredicate = Callable[[Sequence[str]], bool]


def never_defined(path: Sequence[str]) -> bool:
	"""Default definedness predicate: nothing is known to be defined."""
	return False


@dataclass(frozen=True, slots=True)
class TranslateOptions:
	"""Settings for one translation.

	Attributes:
		function_parser: Parses the printed source of custom transforms,
			functions and operators so they can be inlined. Without one,
			every custom call is emitted as a plain call by name.
		translate_transforms: Implementations used instead of the grammar's
			transforms, for translation only.
		translate_functions: Same, for functions.
		translate_binary_ops: Same, for custom binary operators.
		translate_unary_ops: Same, for custom unary operators.
		is_identifier_always_defined: Called with a dotted identifier path
			(`["console"]`, `["a", "b"]`). Returning True disables optional
			chaining on accesses off that path.
	"""

	function_parser: FunctionParser | None = None
	translate_transforms: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
	translate_functions: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
	translate_binary_ops: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
	translate_unary_ops: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
	is_identifier_always_defined: IdentifierPredicate = never_defined
