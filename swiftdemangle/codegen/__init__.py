# swiftdemangle/codegen/__init__.py
"""Tree consumers: printer, print options, queries."""

from .options import PrintOptions, CORPUS_OPTIONS
from .printer import NodePrinter, print_node
from .query import identifier, test_name, module, type_name, to_dict
