# swiftdemangle/__init__.py
"""swiftdemangle – Swift symbol demangler.

This package provides:
- A grammar engine for the current (`$s`, `_T0`, ...) and legacy (`_T`) mangling families
- A demangle tree (Kind / Node) with per-kind arity checks
- A node printer driven by PrintOptions bit flags
- Read-only tree queries and a JSON record for tooling
"""

from .grammar.ast import Kind, Node
from .grammar.errors import (
    DemangleError, MalformedInput, UnknownProduction, InvalidSubstitution,
    InvalidIdentifierEncoding, SymbolTooComplex, UnsupportedManglingVersion,
)
from .grammar.parser import parse
from .lex import Limits, DEFAULT_LIMITS
from .codegen.options import PrintOptions
from .codegen.printer import print_node


def demangle(mangled: str, options: PrintOptions = PrintOptions.DEFAULT, is_type: bool = False) -> str:
    """parse + print_node. 실패는 DemangleError."""
    return print_node(parse(mangled, is_type), options)
