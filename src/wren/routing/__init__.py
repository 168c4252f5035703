"""Routing — pattern compiler and ordered route table.

Routes are compiled when registered, so a bad pattern fails at setup
time. Lookup is a linear first-match scan in registration order.
"""

from wren.routing.compiler import WILDCARD, CompiledPattern, compile_pattern
from wren.routing.route import CompiledRoute, RouteMatch
from wren.routing.router import HTTP_METHODS, Router

__all__ = [
    "HTTP_METHODS",
    "WILDCARD",
    "CompiledPattern",
    "CompiledRoute",
    "RouteMatch",
    "Router",
    "compile_pattern",
]
