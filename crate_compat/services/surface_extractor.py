"""
Public surface extraction.

Turns the raw item nodes of one module into the normalized Declaration values the
comparator works on. Only fully public (`pub`) items are kept; everything else cannot be
reached by external callers. Items outside the eight supported kinds (impl blocks, traits,
`use` declarations, extern blocks, macro invocations) are ignored.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from tree_sitter import Node

from crate_compat.models.schemas import (
    UNIT_TYPE,
    ConstantDecl,
    Declaration,
    EnumDecl,
    FieldShape,
    FunctionDecl,
    FunctionShape,
    MacroDecl,
    Module,
    NamedField,
    NamedFields,
    Parameter,
    PositionalFields,
    ReceiverParam,
    SourcePath,
    StaticDecl,
    StructDecl,
    TypeAliasDecl,
    TypedParam,
    UnionDecl,
    UnitFields,
    show_path,
)
from crate_compat.services.rust_parser import canonical_text, has_child_of_type, ident_name, is_fully_public

logger = logging.getLogger(__name__)

# tokens of a parameter list that are not parameters
_PARAMETER_PUNCTUATION = {"(", ")", ",", "attribute_item", "line_comment", "block_comment"}


def _name(node: Node) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    return ident_name(name_node) if name_node is not None else None


def _type_of(node: Node) -> str:
    return canonical_text(node.child_by_field_name("type"))


# ----------------------------------------------------------------------------------
# Field shapes
# ----------------------------------------------------------------------------------

def named_fields(body: Node, inherited_public: bool = False) -> NamedFields:
    """
    Shape of a `{ a: T, pub b: U }` body.

    Enum variant fields carry no visibility of their own and are as public as the enum,
    so the caller passes `inherited_public=True` for them.
    """
    fields = {}
    for child in body.named_children:
        if child.type != "field_declaration":
            continue
        name = _name(child)
        if name is None:
            continue
        fields[name] = NamedField(
            is_public=inherited_public or is_fully_public(child),
            type=_type_of(child),
        )
    return NamedFields(fields=fields)


def positional_fields(body: Node) -> PositionalFields:
    return PositionalFields(types=tuple(canonical_text(t) for t in body.children_by_field_name("type")))


def field_shape(body: Optional[Node], inherited_public: bool = False) -> FieldShape:
    if body is None:
        return UnitFields()
    if body.type == "field_declaration_list":
        return named_fields(body, inherited_public)
    if body.type == "ordered_field_declaration_list":
        return positional_fields(body)
    return UnitFields()


# ----------------------------------------------------------------------------------
# Function shapes
# ----------------------------------------------------------------------------------

def _receiver_from_shorthand(node: Node) -> ReceiverParam:
    is_reference = has_child_of_type(node, "&")
    is_mutable = has_child_of_type(node, "mutable_specifier")
    ty = "Self"
    if is_reference:
        lifetime = next((canonical_text(c) for c in node.children if c.type == "lifetime"), "")
        ty = "&" + (lifetime + " " if lifetime else "") + ("mut " if is_mutable else "") + "Self"
    return ReceiverParam(is_reference=is_reference, is_mutable=is_mutable, type=ty)


def parameter_shape(node: Node) -> Parameter:
    if node.type == "self_parameter":
        return _receiver_from_shorthand(node)

    if node.type == "parameter":
        pattern = node.child_by_field_name("pattern")
        is_mutable = has_child_of_type(node, "mutable_specifier")
        if pattern is not None and pattern.type == "self":
            return ReceiverParam(is_reference=False, is_mutable=is_mutable, type=_type_of(node))
        binding = canonical_text(pattern)
        if is_mutable:
            binding = "mut " + binding
        return TypedParam(pattern=binding, type=_type_of(node))

    # `_`, a bare type or a variadic `...`
    return TypedParam(pattern="", type=canonical_text(node))


def function_shape(node: Node) -> FunctionShape:
    modifiers = set()
    for child in node.children:
        if child.type == "function_modifiers":
            modifiers.update(c.type for c in child.children)

    parameters = []
    params_node = node.child_by_field_name("parameters")
    if params_node is not None:
        for child in params_node.children:
            if child.type in _PARAMETER_PUNCTUATION:
                continue
            parameters.append(parameter_shape(child))

    return_node = node.child_by_field_name("return_type")
    return FunctionShape(
        parameters=tuple(parameters),
        return_type=canonical_text(return_node) if return_node is not None else UNIT_TYPE,
        is_const="const" in modifiers,
        is_async="async" in modifiers,
        is_unsafe="unsafe" in modifiers,
    )


# ----------------------------------------------------------------------------------
# Per kind extraction
# ----------------------------------------------------------------------------------

def _const(node: Node, name: str) -> Declaration:
    return ConstantDecl(name=name, type=_type_of(node))


def _static(node: Node, name: str) -> Declaration:
    return StaticDecl(name=name, type=_type_of(node), is_mutable=has_child_of_type(node, "mutable_specifier"))


def _type_alias(node: Node, name: str) -> Declaration:
    return TypeAliasDecl(name=name, type=_type_of(node))


def _struct(node: Node, name: str) -> Declaration:
    return StructDecl(name=name, fields=field_shape(node.child_by_field_name("body")))


def _union(node: Node, name: str) -> Declaration:
    body = node.child_by_field_name("body")
    return UnionDecl(name=name, fields=named_fields(body) if body is not None else NamedFields())


def _enum(node: Node, name: str) -> Declaration:
    variants: Dict[str, FieldShape] = {}
    body = node.child_by_field_name("body")
    if body is not None:
        for variant in body.named_children:
            if variant.type != "enum_variant":
                continue
            variant_name = _name(variant)
            if variant_name is not None:
                variants[variant_name] = field_shape(variant.child_by_field_name("body"), inherited_public=True)
    return EnumDecl(name=name, variants=variants)


def _function(node: Node, name: str) -> Declaration:
    return FunctionDecl(name=name, signature=function_shape(node))


_EXTRACTORS: Dict[str, Callable[[Node, str], Declaration]] = {
    "const_item": _const,
    "static_item": _static,
    "type_item": _type_alias,
    "struct_item": _struct,
    "union_item": _union,
    "enum_item": _enum,
    "function_item": _function,
}


def extract_declaration(node: Node) -> Optional[Declaration]:
    """Normalizes one item node, or returns None if it is not part of the public surface."""
    if node.type == "macro_definition":
        # macro_rules! has no visibility modifier; every named definition is kept
        name = _name(node)
        return MacroDecl(name=name) if name else None

    extractor = _EXTRACTORS.get(node.type)
    if extractor is None or not is_fully_public(node):
        return None
    name = _name(node)
    if name is None:
        return None
    return extractor(node, name)


def extract_public_surface(items: Sequence[Node]) -> List[Declaration]:
    """
    Returns the public declarations of a module in source order, at most one per
    identity key (the first one wins, e.g. between `#[cfg]` alternatives).
    """
    declarations: List[Declaration] = []
    seen = set()
    for node in items:
        decl = extract_declaration(node)
        if decl is None:
            continue
        if decl.identity_key in seen:
            logger.debug("Ignoring duplicate %s at line %d", decl.show_name(), node.start_point[0] + 1)
            continue
        seen.add(decl.identity_key)
        declarations.append(decl)
    return declarations


def extract_module(path: SourcePath, items: Sequence[Node]) -> Module:
    module = Module(path=tuple(path), declarations=tuple(extract_public_surface(items)))
    logger.debug("%s: %d public declarations", show_path(module.path), len(module.declarations))
    return module
