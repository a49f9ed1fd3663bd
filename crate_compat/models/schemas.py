"""
Data model shared by the resolver, the extractor and the comparator.

All models are frozen: a snapshot is built once per run and never mutated afterwards.
Type signatures are plain canonical strings produced by `rust_parser.canonical_text`,
so equality between two signatures is textual equality.
"""

from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# Ordered module-name segments; the empty tuple is the crate root.
SourcePath = Tuple[str, ...]

UNIT_TYPE = "()"


def show_path(path: SourcePath) -> str:
    """Renders a SourcePath the way Rust writes it, e.g. `crate::net::tcp`."""
    return "::".join(("crate",) + tuple(path))


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ----------------------------------------------------------------------------------
# Field shapes
# ----------------------------------------------------------------------------------

class UnitFields(_Frozen):
    style: Literal["unit"] = "unit"


class PositionalFields(_Frozen):
    style: Literal["positional"] = "positional"
    types: Tuple[str, ...] = ()


class NamedField(_Frozen):
    is_public: bool
    type: str


class NamedFields(_Frozen):
    style: Literal["named"] = "named"
    fields: Dict[str, NamedField] = Field(default_factory=dict)


FieldShape = Annotated[Union[UnitFields, PositionalFields, NamedFields], Field(discriminator="style")]


# ----------------------------------------------------------------------------------
# Function shapes
# ----------------------------------------------------------------------------------

class ReceiverParam(_Frozen):
    """`self`, `&self`, `&mut self` or a typed `self: T` receiver."""
    style: Literal["receiver"] = "receiver"
    is_reference: bool = False
    is_mutable: bool = False
    type: str = "Self"


class TypedParam(_Frozen):
    style: Literal["typed"] = "typed"
    pattern: str
    type: str


Parameter = Annotated[Union[ReceiverParam, TypedParam], Field(discriminator="style")]


class FunctionShape(_Frozen):
    parameters: Tuple[Parameter, ...] = ()
    return_type: str = UNIT_TYPE
    is_const: bool = False
    is_async: bool = False
    is_unsafe: bool = False


# ----------------------------------------------------------------------------------
# Declarations
# ----------------------------------------------------------------------------------

DeclarationKind = Literal["const", "static", "union", "type", "struct", "enum", "fn", "macro"]


class _DeclarationBase(_Frozen):
    name: str

    @property
    def identity_key(self) -> Tuple[str, str]:
        return (self.kind, self.name)  # type: ignore[attr-defined]

    def show_name(self) -> str:
        return f"{self.kind} {self.name}"  # type: ignore[attr-defined]


class ConstantDecl(_DeclarationBase):
    kind: Literal["const"] = "const"
    type: str


class StaticDecl(_DeclarationBase):
    kind: Literal["static"] = "static"
    type: str
    is_mutable: bool = False


class UnionDecl(_DeclarationBase):
    kind: Literal["union"] = "union"
    fields: NamedFields


class TypeAliasDecl(_DeclarationBase):
    kind: Literal["type"] = "type"
    type: str


class StructDecl(_DeclarationBase):
    kind: Literal["struct"] = "struct"
    fields: FieldShape


class EnumDecl(_DeclarationBase):
    kind: Literal["enum"] = "enum"
    # variant name -> shape, in declaration order
    variants: Dict[str, FieldShape] = Field(default_factory=dict)


class FunctionDecl(_DeclarationBase):
    kind: Literal["fn"] = "fn"
    signature: FunctionShape


class MacroDecl(_DeclarationBase):
    kind: Literal["macro"] = "macro"


Declaration = Annotated[
    Union[ConstantDecl, StaticDecl, UnionDecl, TypeAliasDecl, StructDecl, EnumDecl, FunctionDecl, MacroDecl],
    Field(discriminator="kind"),
]


class Module(_Frozen):
    path: SourcePath = ()
    declarations: Tuple[Declaration, ...] = ()

    def find(self, key: Tuple[str, str]) -> Optional[Declaration]:
        for decl in self.declarations:
            if decl.identity_key == key:
                return decl
        return None


# ----------------------------------------------------------------------------------
# Verdicts
# ----------------------------------------------------------------------------------

VerdictStatus = Literal["compatible", "incompatible", "missing", "module_missing"]


class Verdict(_Frozen):
    """
    Outcome for one old declaration, or for a whole old module with no counterpart.

    `new` is set only for `incompatible` verdicts; `old` is unset only for
    `module_missing`.
    """
    module_path: SourcePath
    status: VerdictStatus
    old: Optional[Declaration] = None
    new: Optional[Declaration] = None


class CompatibilityReport(_Frozen):
    """Non-compatible verdicts in emission order, plus counters for logging."""
    verdicts: Tuple[Verdict, ...] = ()
    checked_count: int = 0
    compatible_count: int = 0

    @property
    def is_compatible(self) -> bool:
        return not self.verdicts


# ----------------------------------------------------------------------------------
# Manifest
# ----------------------------------------------------------------------------------

class ManifestInfo(_Frozen):
    # path of the library root file, relative to the manifest directory (posix form)
    library_entry: str
    is_workspace: bool = False
