# swiftdemangle/grammar/__init__.py
"""Grammar engine: cursor-driven productions that build the demangle tree."""

from .ast import Kind, Node, node
from .parser import parse, Demangler
from .legacy import LegacyDemangler, is_legacy_symbol
