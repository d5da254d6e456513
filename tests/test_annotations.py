"""Tests for the default annotation and attribute producers."""

from __future__ import annotations

import pytest

from classtrace.annotations import (
    AnnotationRenderer,
    Attribute,
    CharLiteral,
    DefaultValueRenderer,
    FloatLiteral,
    TypeLiteral,
    format_float,
    format_literal,
    render_attribute,
)
from classtrace.errors import OutOfOrderCallback
from classtrace.members import MemberDescriptor, MethodRenderer


def test_annotation_with_nested_values() -> None:
    annotation = AnnotationRenderer("La/Config;", True, indent="  ")
    annotation.visit("name", "demo")
    annotation.visit("flag", False)
    annotation.visit("letter", CharLiteral("x"))
    annotation.visit("type", TypeLiteral("Ljava/lang/String;"))
    annotation.visit_enum("mode", "La/Mode;", "FAST")
    nested = annotation.visit_annotation("inner", "La/Inner;")
    nested.visit("value", 7)
    array = annotation.visit_array("sizes")
    array.visit(None, 1)
    array.visit(None, 2)
    array.finish()

    text = annotation.finish().render()
    assert text == (
        '  @La/Config;(name="demo", flag=false, letter=\'x\', '
        "type=Ljava/lang/String;.class, mode=La/Mode;.FAST, "
        "inner=@La/Inner;(value=7), sizes={1, 2})\n"
    )


def test_finish_is_idempotent_and_closes_the_annotation() -> None:
    annotation = AnnotationRenderer("La/A;", False)
    first = annotation.finish().render()
    assert annotation.finish().render() == first == "@La/A;() // invisible\n"
    with pytest.raises(OutOfOrderCallback):
        annotation.visit("late", 1)


def test_parameter_annotation_and_default_value() -> None:
    method = MethodRenderer(MemberDescriptor(0x0401, "value", "()I"))
    method.visit_annotation_default().visit(None, 42)
    method.visit_parameter_annotation(1, "La/NotNull;", True)
    method.visit_attribute(Attribute("Custom", b"\x00\x01"))
    fragment = method.finish()
    assert fragment.render() == (
        "    default=42\n"
        "    @La/NotNull;() // parameter 1\n"
        "    ATTRIBUTE Custom : 2 bytes\n"
    )


def test_default_value_renderer_without_value() -> None:
    assert DefaultValueRenderer(indent=" ").finish().render() == " default=\n"


@pytest.mark.parametrize(
    "value, expected",
    [("text", '"text"'), (3, "3"), (-1, "-1"), (1.5, "1.5"), (True, "true")],
)
def test_format_literal(value: object, expected: str) -> None:
    assert format_literal(value) == expected


def test_render_attribute() -> None:
    assert render_attribute(Attribute("X"), "\t") == "\tATTRIBUTE X : 0 bytes\n"


@pytest.mark.parametrize(
    "literal, expected",
    [
        (FloatLiteral(0.10000000149011612, 32), "0.1"),
        (FloatLiteral(3.0, 32), "3.0"),
        (FloatLiteral(1e-5, 64), "1.0E-5"),
        (FloatLiteral(float("inf"), 32), "Infinity"),
        (FloatLiteral(float("nan"), 64), "NaN"),
    ],
)
def test_float_literals(literal: FloatLiteral, expected: str) -> None:
    assert str(literal) == expected
    assert format_literal(literal) == expected


def test_bare_float_is_formatted_as_double() -> None:
    assert format_float(0.1) == "0.1"
    assert format_literal(float("-inf")) == "-Infinity"
