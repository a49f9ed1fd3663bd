"""
This module wraps the tree-sitter Rust grammar.

It turns source text into a list of top-level item nodes and provides the helpers the
resolver and the extractor share:
- `parse_items(text, origin)`: parses a source unit, raising `ParseFailure` on any
  syntax error so that no partial module tree is ever built.
- `is_fully_public(node)`: True only for a plain `pub` visibility modifier.
- `canonical_text(node)`: whitespace- and comment-insensitive rendering of a node,
  used as the normalized signature of types and binding patterns.
"""

import logging
from typing import Iterator, List, Optional

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from crate_compat.core.errors import ParseFailure

logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(tree_sitter_rust.language())

_COMMENT_TYPES = {"line_comment", "block_comment"}


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            # children pushed in reverse so the leftmost error is found first
            stack.extend(reversed(node.children))
    return None


def parse_items(text: str, origin: str) -> List[Node]:
    """
    Parses one Rust source unit and returns its top-level item nodes.

    A new Parser is built for every call; parser objects keep state between parses and
    must not be shared by concurrent readers.

    Raises:
        ParseFailure: if the syntax tree contains an error or a missing token.
    """
    parser = Parser(RUST_LANGUAGE)
    tree = parser.parse(text.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root) or root
        row, column = bad.start_point
        raise ParseFailure(f"failed to parse {origin}:{row + 1}:{column + 1}: unexpected syntax")
    logger.debug("Parsed %s (%d items)", origin, root.named_child_count)
    return list(root.named_children)


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def _leaf_tokens(node: Node) -> Iterator[str]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _COMMENT_TYPES:
            continue
        if current.child_count == 0:
            text = node_text(current)
            if text:
                yield text
            continue
        stack.extend(reversed(current.children))


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def canonical_text(node: Optional[Node]) -> str:
    """
    Renders a node as its tokens joined without whitespace, except for a single space
    between two word-like tokens (`&'a mut Self`, `dyn Fn(u8)->bool`).
    """
    if node is None:
        return ""
    out: List[str] = []
    for token in _leaf_tokens(node):
        if out and _is_word(out[-1][-1]) and _is_word(token[0]):
            out.append(" ")
        out.append(token)
    return "".join(out)


def visibility_of(node: Node) -> Optional[Node]:
    for child in node.children:
        if child.type == "visibility_modifier":
            return child
    return None


def is_fully_public(node: Node) -> bool:
    """
    True when the item is visible outside the crate.

    `pub(crate)`, `pub(super)`, `pub(self)`, `pub(in path)` and the 2015 `crate`
    modifier are restricted and do not count.
    """
    vis = visibility_of(node)
    return vis is not None and canonical_text(vis) == "pub"


def has_child_of_type(node: Node, child_type: str) -> bool:
    return any(child.type == child_type for child in node.children)


def ident_name(node: Node) -> str:
    """Identifier text without the raw identifier prefix (`r#type` -> `type`)."""
    text = node_text(node)
    return text[2:] if text.startswith("r#") else text
