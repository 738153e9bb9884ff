"""Printed source of Python callables."""

from __future__ import annotations

import ast
import inspect
import linecache
import textwrap
from collections.abc import Callable
from types import CodeType
from typing import Any


def function_source(fn: Callable[..., Any]) -> str | None:
	"""Return the source text of a function, or None if it has none.

	Named functions give their dedented `def` block (decorators included).
	Lambdas give exactly the text of the `lambda` expression, even when
	several lambdas share a line. Builtins, C functions, bound methods and
	functions defined in the REPL or via `exec` return None.
	"""
	if not inspect.isfunction(fn):
		return None
	if fn.__name__ == "<lambda>":
		return _lambda_source(fn.__code__, fn.__globals__)
	try:
		src = inspect.getsource(fn)
	except (OSError, TypeError):
		return None
	return textwrap.dedent(src)


def _lambda_source(code: CodeType, module_globals: dict[str, Any]) -> str | None:
	filename = code.co_filename
	lines = linecache.getlines(filename, module_globals)
	if not lines:
		return None
	text = "".join(lines)
	try:
		tree = ast.parse(text)
	except SyntaxError:
		return None

	params = list(code.co_varnames[: code.co_argcount + code.co_kwonlyargcount])
	candidates = [
		node
		for node in ast.walk(tree)
		if isinstance(node, ast.Lambda)
		and node.lineno == code.co_firstlineno
		and _lambda_params(node) == params
	]
	if not candidates:
		return None
	# Several lambdas with the same signature on one line: pick the one whose
	# body covers the code object's instruction positions
	best = max(candidates, key=lambda node: _covered_positions(node, code))
	return ast.get_source_segment(text, best)


def _lambda_params(node: ast.Lambda) -> list[str]:
	args = node.args
	return [a.arg for a in (*args.posonlyargs, *args.args, *args.kwonlyargs)]


def _covered_positions(node: ast.Lambda, code: CodeType) -> int:
	body = node.body
	if body.end_lineno is None or body.end_col_offset is None:
		return 0
	start = (body.lineno, body.col_offset)
	end = (body.end_lineno, body.end_col_offset)
	count = 0
	for line, end_line, col, end_col in code.co_positions():
		if line is None or end_line is None or col is None or end_col is None:
			continue
		if start <= (line, col) and (end_line, end_col) <= end:
			count += 1
	return count
