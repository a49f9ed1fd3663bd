"""
Structural equality of field layouts and function signatures.

Type signatures are compared as canonical text; no alias resolution is attempted, so
`type Id = u32;` used in place of `u32` is reported as a change.
"""

from typing import Sequence

from crate_compat.models.schemas import (
    FieldShape,
    FunctionShape,
    NamedFields,
    Parameter,
    PositionalFields,
    ReceiverParam,
    TypedParam,
    UnitFields,
)


def fields_compatible(old: FieldShape, new: FieldShape) -> bool:
    """
    Checks that `new` can replace `old`.

    - Unit: both must be unit.
    - Positional: same arity and the same type at every position.
    - Named: every field that was public in `old` must still exist in `new` with the
      same type. Added fields, and changes to fields that were not public in `old`,
      are accepted.
    A change of style (e.g. positional to named) is never compatible.
    """
    if isinstance(old, UnitFields) and isinstance(new, UnitFields):
        return True

    if isinstance(old, PositionalFields) and isinstance(new, PositionalFields):
        if len(old.types) != len(new.types):
            return False
        return all(old_ty == new_ty for old_ty, new_ty in zip(old.types, new.types))

    if isinstance(old, NamedFields) and isinstance(new, NamedFields):
        for name, old_field in old.fields.items():
            if not old_field.is_public:
                continue
            new_field = new.fields.get(name)
            if new_field is None or new_field.type != old_field.type:
                return False
        return True

    return False


def parameter_compatible(old: Parameter, new: Parameter) -> bool:
    if isinstance(old, ReceiverParam) and isinstance(new, ReceiverParam):
        return (
            old.is_reference == new.is_reference
            and old.is_mutable == new.is_mutable
            and old.type == new.type
        )
    if isinstance(old, TypedParam) and isinstance(new, TypedParam):
        return old.pattern == new.pattern and old.type == new.type
    return False


def parameters_compatible(old: Sequence[Parameter], new: Sequence[Parameter]) -> bool:
    if len(old) != len(new):
        return False
    return all(parameter_compatible(o, n) for o, n in zip(old, new))


def signature_compatible(old: FunctionShape, new: FunctionShape) -> bool:
    """Modifiers, every parameter and the return type must match exactly."""
    return (
        old.is_const == new.is_const
        and old.is_async == new.is_async
        and old.is_unsafe == new.is_unsafe
        and parameters_compatible(old.parameters, new.parameters)
        and old.return_type == new.return_type
    )
