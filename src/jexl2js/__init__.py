"""Translate Jexl expressions into JavaScript expression trees."""

# Errors
from jexl2js.errors import FunctionSourceError as FunctionSourceError
from jexl2js.errors import JexlSyntaxError as JexlSyntaxError
from jexl2js.errors import LooseEqualityWarning as LooseEqualityWarning
from jexl2js.errors import TranslateError as TranslateError
from jexl2js.errors import UnknownOperatorError as UnknownOperatorError

# Inlining
from jexl2js.inline import inline_function as inline_function
from jexl2js.inline import inline_program as inline_program

# Jexl
from jexl2js.jexl import Grammar as Grammar
from jexl2js.jexl import Jexl as Jexl
from jexl2js.jexl import default_grammar as default_grammar

# Expression nodes
from jexl2js.nodes import Array as Array
from jexl2js.nodes import Arrow as Arrow
from jexl2js.nodes import Binary as Binary
from jexl2js.nodes import Call as Call
from jexl2js.nodes import Expr as Expr
from jexl2js.nodes import Identifier as Identifier
from jexl2js.nodes import Literal as Literal
from jexl2js.nodes import Logical as Logical
from jexl2js.nodes import Member as Member
from jexl2js.nodes import New as New
from jexl2js.nodes import Node as Node
from jexl2js.nodes import NodeTransformer as NodeTransformer
from jexl2js.nodes import Object as Object
from jexl2js.nodes import ObjectPattern as ObjectPattern
from jexl2js.nodes import Ternary as Ternary
from jexl2js.nodes import Unary as Unary
from jexl2js.nodes import Undefined as Undefined

# Statement nodes
from jexl2js.nodes import Assign as Assign
from jexl2js.nodes import Block as Block
from jexl2js.nodes import ExprStmt as ExprStmt
from jexl2js.nodes import FunctionDecl as FunctionDecl
from jexl2js.nodes import If as If
from jexl2js.nodes import Program as Program
from jexl2js.nodes import Return as Return

# Printing
from jexl2js.nodes import emit as emit

# Optional chaining
from jexl2js.optional import ALWAYS_DEFINED_GLOBALS as ALWAYS_DEFINED_GLOBALS
from jexl2js.optional import annotate_optional as annotate_optional

# Configuration
from jexl2js.options import TranslateOptions as TranslateOptions

# Function parser
from jexl2js.pyfunc import parse_python_function as parse_python_function

# Resolution
from jexl2js.resolver import Resolver as Resolver
from jexl2js.resolver import Strategy as Strategy

# Entry points
from jexl2js.rewriter import Rewriter as Rewriter
from jexl2js.rewriter import transpile as transpile
from jexl2js.rewriter import transpile_ast as transpile_ast
from jexl2js.rewriter import transpile_to_string as transpile_to_string

# Printed source
from jexl2js.source import function_source as function_source
