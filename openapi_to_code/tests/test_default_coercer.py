"""
Tests for default literal coercion.
"""

from __future__ import annotations

import datetime

import pytest

from openapi_to_code.pipeline.analyzer import (
    DefaultKind,
    DefaultValueCoercer,
    EnumKey,
    EnumMember,
    SchemaDescriptor,
    SchemaKind,
    StringKey,
    TypeKind,
    TypeRef,
)
from openapi_to_code.pipeline.analyzer.default_coercer import NULL_DEFAULT, UNDEFINED_DEFAULT, kotlin_string
from openapi_to_code.pipeline.errors import IncompatibleDefaultError, UnknownEnumDefaultError

STATUS = SchemaDescriptor(
    name="Status",
    kind=SchemaKind.ENUM,
    enum_members=(EnumMember("ACTIVE", "ACTIVE"), EnumMember("INACTIVE", "INACTIVE")),
)


@pytest.fixture
def coercer():
    return DefaultValueCoercer(lambda name: STATUS if name == "Status" else None)


def primitive(name: str, format: str | None = None) -> TypeRef:
    return TypeRef(kind=TypeKind.PRIMITIVE, name=name, format=format)


@pytest.mark.parametrize(
    "value,type_ref,expected",
    [
        ("hello", primitive("string"), '"hello"'),
        ('a"b$c\n', primitive("string"), '"a\\"b\\$c\\n"'),
        ("2024-01-02", primitive("string", "date"), 'LocalDate.parse("2024-01-02")'),
        (datetime.date(2024, 1, 2), primitive("string", "date"), 'LocalDate.parse("2024-01-02")'),
        ("2024-01-02T10:00:00Z", primitive("string", "date-time"), 'OffsetDateTime.parse("2024-01-02T10:00:00Z")'),
        ("https://example.com", primitive("string", "uri"), 'URI("https://example.com")'),
        (42, primitive("integer"), "42"),
        (42, primitive("integer", "int64"), "42L"),
        (3.0, primitive("integer"), "3"),
        (1.5, primitive("number"), 'BigDecimal("1.5")'),
        (1.5, primitive("number", "float"), "1.5f"),
        (2, primitive("number", "double"), "2.0"),
        (False, primitive("boolean"), "false"),
    ],
)
def test_literals(coercer, value, type_ref, expected):
    default = coercer.coerce_literal(value, type_ref)
    assert default.expression == expected
    assert default.kind == DefaultKind.LITERAL
    assert default.source == value


@pytest.mark.parametrize(
    "value,type_ref",
    [
        ("42", primitive("integer")),
        (True, primitive("integer")),
        (1.5, primitive("integer")),
        ("yes", primitive("boolean")),
        (1, primitive("string")),
        (True, primitive("number")),
    ],
)
def test_incompatible_literals(coercer, value, type_ref):
    with pytest.raises(IncompatibleDefaultError):
        coercer.coerce_literal(value, type_ref, "Pet", "field")


class TestEnumDefaults:
    def test_member(self, coercer):
        default = coercer.coerce_literal("ACTIVE", TypeRef(kind=TypeKind.ENUM, name="Status"))
        assert default.expression == "Status.ACTIVE"
        assert default.kind == DefaultKind.ENUM_MEMBER
        assert default.enum_member == "ACTIVE"

    def test_unknown_member(self, coercer):
        with pytest.raises(UnknownEnumDefaultError) as exc_info:
            coercer.coerce_literal("UNKNOWN", TypeRef(kind=TypeKind.ENUM, name="Status"), "Account", "status")
        assert exc_info.value.members == ["ACTIVE", "INACTIVE"]
        assert exc_info.value.property_name == "status"

    def test_membership_is_case_sensitive(self, coercer):
        with pytest.raises(UnknownEnumDefaultError):
            coercer.coerce_literal("active", TypeRef(kind=TypeKind.ENUM, name="Status"))


class TestConstructorDefaults:
    def test_required_has_no_default(self, coercer):
        literal = coercer.coerce_literal("x", primitive("string"))
        assert coercer.constructor_default(literal, is_required=True, merge_patch=False) is None
        assert coercer.constructor_default(None, is_required=True, merge_patch=True) is None

    def test_absent_optional(self, coercer):
        assert coercer.constructor_default(None, is_required=False, merge_patch=False) == NULL_DEFAULT
        assert coercer.constructor_default(None, is_required=False, merge_patch=True) == UNDEFINED_DEFAULT

    def test_literal(self, coercer):
        literal = coercer.coerce_literal("x", primitive("string"))
        assert coercer.constructor_default(literal, is_required=False, merge_patch=False) is literal

    def test_wrapped_literal(self, coercer):
        literal = coercer.coerce_literal("ACTIVE", TypeRef(kind=TypeKind.ENUM, name="Status"))
        default = coercer.constructor_default(literal, is_required=False, merge_patch=True)
        assert default.expression == "JsonNullable.of(Status.ACTIVE)"
        assert default.is_wrapped
        assert default.enum_member == "ACTIVE"


def test_discriminator_defaults(coercer):
    assert coercer.discriminator_default(StringKey("dog")).expression == '"dog"'
    enum_default = coercer.discriminator_default(EnumKey(value="dog", enum_name="AnimalType", member_name="DOG"))
    assert enum_default.expression == "AnimalType.DOG"
    assert enum_default.kind == DefaultKind.ENUM_MEMBER


def test_kotlin_string():
    assert kotlin_string("tab\there") == '"tab\\there"'
    assert kotlin_string("back\\slash") == '"back\\\\slash"'


if __name__ == "__main__":
    pytest.main([__file__])
