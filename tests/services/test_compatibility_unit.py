"""
test: services/compatibility/

Unit tests for the compatibility comparator. Snapshots are built from real Rust
snippets through the extractor so that every rule is exercised on the shapes the tool
actually produces.

The suite covers:
1. Per kind rules (const, static, type, struct, union, enum, fn, macro).
2. Asymmetric named-field rule and tolerated additive enum variants.
3. Module matching by exact path, missing modules and missing declarations.
4. Deterministic output.
"""

import pytest

from crate_compat.models.schemas import (
    ConstantDecl,
    FunctionDecl,
    FunctionShape,
    NamedField,
    NamedFields,
    PositionalFields,
    ReceiverParam,
    StaticDecl,
    TypedParam,
    UnitFields,
)
from crate_compat.services.compatibility import check_compatibility, rules
from crate_compat.services.compatibility.shapes import fields_compatible


@pytest.fixture
def compare(module_of):
    """Compares one old and one new crate root snippet and returns the report."""
    def _compare(old_source: str, new_source: str):
        return check_compatibility([module_of(old_source)], [module_of(new_source)])
    return _compare


def _statuses(report):
    return [(v.old.show_name() if v.old else None, v.status) for v in report.verdicts]


# ==================================================================================
#                                UNCHANGED SURFACE
# ==================================================================================

def test_identical_surface_is_compatible(compare):
    source = (
        "pub const C: u8 = 1;\n"
        "pub static S: u8 = 1;\n"
        "pub type T = Vec<u8>;\n"
        "pub struct P(pub i32);\n"
        "pub struct N { pub a: i32 }\n"
        "pub union U { pub a: u32 }\n"
        "pub enum E { A, B(u8), C { x: u8 } }\n"
        "pub fn f(x: i32) -> bool { true }\n"
        "macro_rules! m { () => {} }\n"
    )

    report = compare(source, source)

    assert report.verdicts == ()
    assert report.checked_count == 9
    assert report.compatible_count == 9
    assert report.is_compatible


# ==================================================================================
#                              VALUE ITEMS AND ALIASES
# ==================================================================================

def test_const_type_change(compare):
    report = compare("pub const C: u8 = 1;", "pub const C: u16 = 1;")

    assert _statuses(report) == [("const C", "incompatible")]
    assert report.verdicts[0].new == ConstantDecl(name="C", type="u16")


def test_const_value_change_is_compatible(compare):
    assert compare("pub const C: u8 = 1;", "pub const C: u8 = 2;").verdicts == ()


def test_static_mutability_change(compare):
    report = compare("pub static S: u8 = 0;", "pub static mut S: u8 = 0;")

    assert _statuses(report) == [("static S", "incompatible")]
    assert report.verdicts[0].new == StaticDecl(name="S", type="u8", is_mutable=True)


def test_type_alias_target_change(compare):
    report = compare("pub type Id = u32;", "pub type Id = u64;")

    assert _statuses(report) == [("type Id", "incompatible")]


def test_no_alias_resolution(compare):
    """A type written through an alias is a different signature."""
    report = compare("pub const C: u32 = 1;", "pub type Id = u32;\npub const C: Id = 1;")

    assert _statuses(report) == [("const C", "incompatible")]


# ==================================================================================
#                                  STRUCTS / UNIONS
# ==================================================================================

def test_private_retype_and_added_public_field_are_compatible(compare):
    report = compare(
        "pub struct S { pub a: i32, b: i32 }",
        "pub struct S { pub a: i32, b: String, pub c: bool }",
    )

    assert report.verdicts == ()


def test_removed_public_field(compare):
    report = compare("pub struct S { pub a: i32 }", "pub struct S {}")

    assert _statuses(report) == [("struct S", "incompatible")]


def test_public_field_retyped(compare):
    report = compare("pub struct S { pub a: i32 }", "pub struct S { pub a: i64 }")

    assert _statuses(report) == [("struct S", "incompatible")]


def test_public_field_made_private(compare):
    """The field is still found by name with the same type; visibility of new fields is not compared."""
    report = compare("pub struct S { pub a: i32 }", "pub struct S { a: i32 }")

    assert report.verdicts == ()


def test_tuple_struct_arity_and_types(compare):
    assert _statuses(compare("pub struct P(pub u8);", "pub struct P(pub u8, pub u8);")) == [("struct P", "incompatible")]
    assert _statuses(compare("pub struct P(pub u8);", "pub struct P(pub i8);")) == [("struct P", "incompatible")]


def test_struct_style_change(compare):
    assert _statuses(compare("pub struct S;", "pub struct S {}")) == [("struct S", "incompatible")]
    assert _statuses(compare("pub struct S(pub u8);", "pub struct S { pub a: u8 }")) == [("struct S", "incompatible")]


def test_union_uses_named_field_rule(compare):
    assert compare("pub union U { pub a: u32 }", "pub union U { pub a: u32, pub b: f32 }").verdicts == ()
    assert _statuses(compare("pub union U { pub a: u32 }", "pub union U { pub b: f32 }")) == [("union U", "incompatible")]


@pytest.mark.parametrize("old, new, expected", [
    (UnitFields(), UnitFields(), True),
    (PositionalFields(types=("u8",)), PositionalFields(types=("u8",)), True),
    (PositionalFields(types=()), UnitFields(), False),
    (NamedFields(fields={"a": NamedField(is_public=False, type="u8")}), NamedFields(), True),
])
def test_fields_compatible(old, new, expected):
    assert fields_compatible(old, new) is expected


# ==================================================================================
#                                     ENUMS
# ==================================================================================

def test_added_variant_is_compatible(compare):
    report = compare("pub enum E { A, B }", "pub enum E { A, B, C }")

    assert report.verdicts == ()


def test_removed_variant(compare):
    assert _statuses(compare("pub enum E { A, B }", "pub enum E { A }")) == [("enum E", "incompatible")]


def test_variant_shape_change(compare):
    assert _statuses(compare("pub enum E { A(u8) }", "pub enum E { A(u16) }")) == [("enum E", "incompatible")]
    assert _statuses(compare("pub enum E { A { x: u8 } }", "pub enum E { A { y: u8 } }")) == [("enum E", "incompatible")]


def test_variant_reorder_is_compatible(compare):
    assert compare("pub enum E { A, B }", "pub enum E { B, A }").verdicts == ()


# ==================================================================================
#                                   FUNCTIONS
# ==================================================================================

def test_parameter_type_change(compare):
    report = compare("pub fn f(x: i32) -> bool { true }", "pub fn f(x: i64) -> bool { true }")

    assert _statuses(report) == [("fn f", "incompatible")]


def test_parameter_pattern_change(compare):
    report = compare("pub fn f(x: i32) {}", "pub fn f(y: i32) {}")

    assert _statuses(report) == [("fn f", "incompatible")]


def test_every_parameter_is_compared(compare):
    """A change in the first parameter is caught even when the last one is unchanged."""
    report = compare("pub fn f(a: u8, b: u8) {}", "pub fn f(a: u16, b: u8) {}")

    assert _statuses(report) == [("fn f", "incompatible")]


def test_parameter_added(compare):
    assert _statuses(compare("pub fn f(a: u8) {}", "pub fn f(a: u8, b: u8) {}")) == [("fn f", "incompatible")]


def test_return_type_change(compare):
    assert _statuses(compare("pub fn f() {}", "pub fn f() -> u8 { 0 }")) == [("fn f", "incompatible")]


@pytest.mark.parametrize("old, new", [
    ("pub fn f() {}", "pub const fn f() {}"),
    ("pub fn f() {}", "pub async fn f() {}"),
    ("pub fn f() {}", "pub unsafe fn f() {}"),
    ("pub unsafe fn f() {}", "pub fn f() {}"),
])
def test_modifier_change(compare, old, new):
    assert _statuses(compare(old, new)) == [("fn f", "incompatible")]


def test_receiver_rules():
    by_ref = FunctionDecl(name="f", signature=FunctionShape(parameters=(ReceiverParam(is_reference=True, type="&Self"),)))
    by_mut = FunctionDecl(name="f", signature=FunctionShape(
        parameters=(ReceiverParam(is_reference=True, is_mutable=True, type="&mut Self"),)))
    typed = FunctionDecl(name="f", signature=FunctionShape(parameters=(TypedParam(pattern="s", type="&Self"),)))

    assert rules.evaluate(by_ref, by_ref) is True
    assert rules.evaluate(by_ref, by_mut) is False
    assert rules.evaluate(by_ref, typed) is False


# ==================================================================================
#                                    MACROS
# ==================================================================================

def test_macro_body_is_not_inspected(compare):
    report = compare("macro_rules! m { () => { 1 } }", "macro_rules! m { ($x:expr) => { $x } }")

    assert report.verdicts == ()


def test_evaluate_rejects_different_identity():
    with pytest.raises(ValueError):
        rules.evaluate(ConstantDecl(name="A", type="u8"), ConstantDecl(name="B", type="u8"))


# ==================================================================================
#                            MODULE AND DECLARATION MATCHING
# ==================================================================================

def test_missing_declaration(compare):
    report = compare("pub fn gone() {}\npub fn kept() {}", "pub fn kept() {}")

    assert _statuses(report) == [("fn gone", "missing")]
    assert report.verdicts[0].new is None


def test_kind_change_is_missing(compare):
    """Identity is (kind, name): a struct turned into an enum is a missing struct."""
    assert _statuses(compare("pub struct X;", "pub enum X {}")) == [("struct X", "missing")]


def test_declaration_made_private_is_missing(compare):
    assert _statuses(compare("pub fn f() {}", "pub(crate) fn f() {}")) == [("fn f", "missing")]


def test_new_declarations_are_not_reported(compare):
    assert compare("", "pub fn added() {}").verdicts == ()


def test_missing_module_skips_its_declarations(module_of):
    old = [module_of("pub mod a;"), module_of("pub fn f() {}", path=("a",))]
    new = [module_of("")]

    report = check_compatibility(old, new)

    assert [(v.module_path, v.status) for v in report.verdicts] == [(("a",), "module_missing")]
    assert report.checked_count == 0


def test_modules_are_matched_by_exact_path(module_of):
    """`a::b::f` is never compared with `a::c::f`."""
    old = [module_of("pub fn f(x: u8) {}", path=("a", "b"))]
    new = [module_of("pub fn f(x: u8) {}", path=("a", "c"))]

    report = check_compatibility(old, new)

    assert [(v.module_path, v.status) for v in report.verdicts] == [(("a", "b"), "module_missing")]


def test_same_name_in_other_module_does_not_hide_change(module_of):
    old = [module_of("pub fn f(x: u8) {}", path=("a",)), module_of("pub fn f(x: u8) {}", path=("b",))]
    new = [module_of("pub fn f(x: u16) {}", path=("a",)), module_of("pub fn f(x: u8) {}", path=("b",))]

    report = check_compatibility(old, new)

    assert [(v.module_path, v.status) for v in report.verdicts] == [(("a",), "incompatible")]


def test_output_is_deterministic(module_of):
    old = [
        module_of("pub fn z() {}\npub fn y(a: u8) {}", path=("m",)),
        module_of("pub struct S { pub a: u8 }"),
        module_of("", path=("gone",)),
    ]
    new = [
        module_of("pub fn y(a: u16) {}", path=("m",)),
        module_of("pub struct S {}"),
    ]

    first = check_compatibility(old, new)
    second = check_compatibility(list(reversed(old)), list(reversed(new)))

    assert first == second
    assert [(v.module_path, v.status) for v in first.verdicts] == [
        ((), "incompatible"),
        (("gone",), "module_missing"),
        (("m",), "missing"),
        (("m",), "incompatible"),
    ]
