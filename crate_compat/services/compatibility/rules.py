"""
Per kind compatibility policy.

`evaluate(old, new)` is only called for two declarations with the same identity key
(kind, name) and answers whether `new` keeps every guarantee external callers relied
on in `old`. Generics, trait implementations, attributes and documentation are not
compared.
"""

from typing import Callable, Dict

from crate_compat.models.schemas import (
    ConstantDecl,
    Declaration,
    EnumDecl,
    FunctionDecl,
    StaticDecl,
    StructDecl,
    TypeAliasDecl,
    UnionDecl,
)
from .shapes import fields_compatible, signature_compatible


def _const(old: ConstantDecl, new: ConstantDecl) -> bool:
    return old.type == new.type


def _static(old: StaticDecl, new: StaticDecl) -> bool:
    return old.type == new.type and old.is_mutable == new.is_mutable


def _type_alias(old: TypeAliasDecl, new: TypeAliasDecl) -> bool:
    return old.type == new.type


def _union(old: UnionDecl, new: UnionDecl) -> bool:
    return fields_compatible(old.fields, new.fields)


def _struct(old: StructDecl, new: StructDecl) -> bool:
    return fields_compatible(old.fields, new.fields)


def _enum(old: EnumDecl, new: EnumDecl) -> bool:
    # Added variants are accepted even though they break exhaustive matches downstream.
    for name, old_shape in old.variants.items():
        new_shape = new.variants.get(name)
        if new_shape is None or not fields_compatible(old_shape, new_shape):
            return False
    return True


def _function(old: FunctionDecl, new: FunctionDecl) -> bool:
    return signature_compatible(old.signature, new.signature)


def _macro(old: Declaration, new: Declaration) -> bool:
    # the body of a macro is never inspected
    return True


_RULES: Dict[str, Callable[[Declaration, Declaration], bool]] = {
    "const": _const,
    "static": _static,
    "type": _type_alias,
    "union": _union,
    "struct": _struct,
    "enum": _enum,
    "fn": _function,
    "macro": _macro,
}


def evaluate(old: Declaration, new: Declaration) -> bool:
    """
    Returns True when `new` is a compatible replacement for `old`.

    Raises:
        ValueError: if the two declarations do not share the same identity key.
    """
    if old.identity_key != new.identity_key:
        raise ValueError(f"cannot compare {old.show_name()} with {new.show_name()}")
    return _RULES[old.kind](old, new)
