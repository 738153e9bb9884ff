"""Finds the implementation behind a custom operator, transform or function.

Lookups go through an explicit list of strategies, tried in order. The
default order is: caller overrides from `TranslateOptions`, then the
grammar's registered implementations. The first strategy that knows the
name wins; when none does, the name is unresolved.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias
from typing import Literal as Lit

from jexl2js.jexl.grammar import Grammar
from jexl2js.options import TranslateOptions

Kind: TypeAlias = Lit["transforms", "functions", "binaryOp", "unaryOp"]
Implementation: TypeAlias = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Strategy:
	"""One source of implementations, e.g. "override" or "grammar"."""

	name: str
	lookup: Callable[[Kind, str], Implementation | None]


def override_strategy(options: TranslateOptions) -> Strategy:
	tables: dict[Kind, Mapping[str, Implementation]] = {
		"transforms": options.translate_transforms,
		"functions": options.translate_functions,
		"binaryOp": options.translate_binary_ops,
		"unaryOp": options.translate_unary_ops,
	}

	def lookup(kind: Kind, name: str) -> Implementation | None:
		return tables[kind].get(name)

	return Strategy("override", lookup)


def grammar_strategy(grammar: Grammar) -> Strategy:
	def lookup(kind: Kind, name: str) -> Implementation | None:
		if kind == "transforms":
			return grammar.transforms.get(name)
		if kind == "functions":
			return grammar.functions.get(name)
		element = grammar.lookup_operator(name, kind)
		return element.evaluate if element is not None else None

	return Strategy("grammar", lookup)


class Resolver:
	strategies: Sequence[Strategy]

	def __init__(self, strategies: Sequence[Strategy]) -> None:
		self.strategies = tuple(strategies)

	@classmethod
	def default(cls, grammar: Grammar, options: TranslateOptions) -> Resolver:
		"""Overrides first, then the grammar."""
		return cls([override_strategy(options), grammar_strategy(grammar)])

	def resolve(self, kind: Kind, name: str) -> Implementation | None:
		found = self.resolve_with_source(kind, name)
		return found[0] if found is not None else None

	def resolve_with_source(
		self, kind: Kind, name: str
	) -> tuple[Implementation, str] | None:
		"""Like `resolve`, also naming the strategy that answered."""
		for strategy in self.strategies:
			impl = strategy.lookup(kind, name)
			if impl is not None:
				return impl, strategy.name
		return None
