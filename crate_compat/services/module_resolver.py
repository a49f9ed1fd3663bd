"""
Rebuilds the module tree of a crate from its library root file.

Only `pub mod` declarations are followed; a private or `pub(crate)` module cannot
contribute to the public API. Inline modules (`pub mod a { ... }`) are walked without
any I/O, out-of-line ones (`pub mod a;`) are read through a SourceProvider and parsed.

Any missing file or parse error aborts the whole resolution: the caller never receives
a partial tree.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from tree_sitter import Node

from crate_compat.models.schemas import SourcePath, show_path
from crate_compat.services.rust_parser import ident_name, is_fully_public, parse_items
from crate_compat.services.source_provider import SourceProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedModule:
    """A module with its raw item nodes, before public surface extraction."""
    path: SourcePath
    origin: str
    items: Tuple[Node, ...]


def child_module_declarations(items: Sequence[Node]) -> List[Tuple[str, Optional[Node]]]:
    """
    Returns (name, body) for every public `mod` item; body is the inline
    declaration list, or None for an out-of-line module.
    """
    children = []
    for node in items:
        if node.type != "mod_item" or not is_fully_public(node):
            continue
        name_node = node.child_by_field_name("name")
        if name_node is None:
            continue
        children.append((ident_name(name_node), node.child_by_field_name("body")))
    return children


class ModuleTreeResolver:
    """Walks module declarations recursively, reading out-of-line modules from `provider`."""

    def __init__(self, provider: SourceProvider):
        self.provider = provider

    def resolve(self, root_items: Sequence[Node], origin: str) -> List[ParsedModule]:
        modules: List[ParsedModule] = []
        self._visit(ParsedModule((), origin, tuple(root_items)), modules)
        logger.info("Resolved %d modules from %s", len(modules), origin)
        return modules

    def _visit(self, module: ParsedModule, acc: List[ParsedModule]) -> None:
        acc.append(module)
        for name, body in child_module_declarations(module.items):
            path = module.path + (name,)
            if body is not None:
                child = ParsedModule(path, module.origin, tuple(body.named_children))
            else:
                source = self.provider.open(path)
                child = ParsedModule(path, source.origin, tuple(parse_items(source.text, source.origin)))
            logger.debug("Visiting %s (%s)", show_path(path), child.origin)
            self._visit(child, acc)


def resolve_crate(provider: SourceProvider) -> List[ParsedModule]:
    """Parses the library root file of `provider` and resolves every public module below it."""
    root = provider.open(())
    items = parse_items(root.text, root.origin)
    return ModuleTreeResolver(provider).resolve(items, root.origin)
