"""Optional chaining.

Jexl resolves missing properties to undefined instead of failing, so a
translated `a.b.c` has to read `a?.b?.c`. This pass makes that decision
for every member access of a finished tree, leaving accesses off values
that are known to exist non-optional:

- `new X(...)` results and array, object, string, number and boolean
  literals;
- the ECMAScript globals below (`Math.floor`, `JSON.parse`);
- identifier paths accepted by the caller's `is_identifier_always_defined`
  predicate, which receives the full dotted path (`["a"]` for `a.b`,
  `["a", "b"]` for `a.b.c`).
"""

from __future__ import annotations

from jexl2js.nodes import (
	Array,
	Expr,
	Identifier,
	Literal,
	Member,
	New,
	NodeTransformer,
	Object,
)
from jexl2js.options import IdentifierPredicate, never_defined

ALWAYS_DEFINED_GLOBALS: frozenset[str] = frozenset(
	{
		"Array",
		"BigInt",
		"Boolean",
		"Date",
		"Error",
		"Intl",
		"JSON",
		"Map",
		"Math",
		"Number",
		"Object",
		"Promise",
		"Proxy",
		"Reflect",
		"RegExp",
		"Set",
		"String",
		"Symbol",
		"WeakMap",
		"WeakSet",
		"globalThis",
	}
)


def identifier_path(node: Expr) -> list[str] | None:
	"""`a.b.c` -> ["a", "b", "c"]. None for anything that is not a plain path."""
	if isinstance(node, Identifier):
		return [node.name]
	if isinstance(node, Member) and not node.computed and isinstance(node.prop, Identifier):
		parent = identifier_path(node.obj)
		if parent is not None:
			return [*parent, node.prop.name]
	return None


class OptionalChaining(NodeTransformer):
	is_identifier_always_defined: IdentifierPredicate

	def __init__(self, is_identifier_always_defined: IdentifierPredicate = never_defined) -> None:
		self.is_identifier_always_defined = is_identifier_always_defined

	def visit_Member(self, node: Member) -> Member:
		obj = self.visit(node.obj)
		prop = self.visit(node.prop)
		return Member(obj, prop, node.computed, optional=not self.is_defined(obj))

	def is_defined(self, obj: Expr) -> bool:
		if isinstance(obj, (New, Array, Object)):
			return True
		if isinstance(obj, Literal):
			return obj.value is not None
		path = identifier_path(obj)
		if path is None:
			return False
		if len(path) == 1 and path[0] in ALWAYS_DEFINED_GLOBALS:
			return True
		return self.is_identifier_always_defined(path)


def annotate_optional(
	node: Expr, is_identifier_always_defined: IdentifierPredicate = never_defined
) -> Expr:
	"""Return a copy of `node` with the optional flag set on every member access."""
	return OptionalChaining(is_identifier_always_defined).visit(node)

