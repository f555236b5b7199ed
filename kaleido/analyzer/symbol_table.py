"""
Symbol table for Kaleido code generation.

The only named values in the language are function parameters, so there is
a single flat scope: the parameters of the function being generated. The
table is rebuilt from scratch on every function entry.

Author: xwest
"""

from typing import Any, Dict, Iterable, Iterator, Optional

from ..parser.ast_nodes import ASTNode
from .errors import create_duplicate_parameter_error


class SymbolTable:
    """Maps parameter names to backend values for the current function."""

    def __init__(self):
        self._symbols: Dict[str, Any] = {}

    def reset(self):
        """Forget every binding."""
        self._symbols.clear()

    def define(self, name: str, value: Any, node: Optional[ASTNode] = None):
        """
        Bind `name` to `value`.

        Raises:
            RedefinitionError: If `name` is already bound
        """
        if name in self._symbols:
            raise create_duplicate_parameter_error(name, node)
        self._symbols[name] = value

    def lookup(self, name: str) -> Optional[Any]:
        """Return the value bound to `name`, or None."""
        return self._symbols.get(name)

    def bind_parameters(self, names: Iterable[str], values: Iterable[Any],
                        node: Optional[ASTNode] = None):
        """Replace all bindings with `names` bound positionally to `values`."""
        self.reset()
        for name, value in zip(names, values):
            self.define(name, value, node)

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)
