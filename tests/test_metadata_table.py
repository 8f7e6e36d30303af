"""
Tests for metadata table construction and value resolution.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
from dataclasses import dataclass

import pytest
from response_error import response, response_error
from response_error.errors import DetailsFieldError, GrammarError, StructuralError
from response_error.parser.ast import SumTypeDecl, VariantDecl
from response_error.parser.ir import MetadataRecord, build_table, details_path
from response_error.parser.parser import parse_type_annotation, parse_variant_annotation


def make_decl(name="ApiError", options=None, target=None, **variants):
    decl = SumTypeDecl(name=name, target=target)
    if options:
        decl.options = parse_type_annotation(options, name)
    for variant, text in variants.items():
        entries = parse_variant_annotation(text, f"{name}.{variant}") if text else []
        decl.variants.append(VariantDecl(name=variant, entries=entries))
    return decl


@response_error
class Classified(Exception):
    class Only:
        pass


# Status

def test_status_literal():
    """A valid literal becomes its integer source."""
    table = build_table(make_decl(NotFound="status = 404"))
    assert table.status == {"NotFound": "404"}


def test_status_path_passes_through():
    """Identifier paths are not re-validated."""
    table = build_table(make_decl(NotFound="status = status.HTTP_404_NOT_FOUND"))
    assert table.status["NotFound"] == "status.HTTP_404_NOT_FOUND"


@pytest.mark.parametrize("text,expected", [("status = 100", "100"), ("status = 999", "999")])
def test_status_range_is_inclusive(text, expected):
    """Both ends of the three-digit range are accepted."""
    assert build_table(make_decl(Edge=text)).status == {"Edge": expected}


@pytest.mark.parametrize("text", ["status = 42", "status = 99", "status = 1000", "status = 0.0", 'status = "404"'])
def test_invalid_status(text):
    """Out-of-range, float and string status literals are rejected."""
    with pytest.raises(GrammarError) as exc:
        build_table(make_decl(Bad=text))
    assert exc.value.code == "E010"
    assert "ApiError.Bad" in exc.value.message


# Reason and type

def test_reason_literal_and_path():
    """Literals are embedded as Python literals, paths as-is."""
    table = build_table(make_decl(A='reason = "NOT_FOUND"', B="reason = codes.DENIED"))
    assert table.reason == {"A": "'NOT_FOUND'", "B": "codes.DENIED"}


def test_type_literal():
    """`type` accepts a string literal."""
    table = build_table(make_decl(A="type = 'lookup'"))
    assert table.type == {"A": "'lookup'"}


def test_type_invalid():
    """`type` rejects numeric literals."""
    with pytest.raises(GrammarError) as exc:
        build_table(make_decl(InvalidType="type = 10"))
    assert exc.value.code == "E012"


def test_reason_invalid():
    """`reason` rejects numeric literals."""
    with pytest.raises(GrammarError) as exc:
        build_table(make_decl(InvalidReason="reason = 10"))
    assert exc.value.code == "E011"


# Details

def test_details_field_is_rewritten():
    """"{0.code}" becomes a field access on the positional payload."""
    table = build_table(make_decl(A='details = "{0.code}"', B='details = "{0.error.code}"', C='details = "{0}"'))
    assert table.details == {
        "A": "self.args[0].code",
        "B": "self.args[0].error.code",
        "C": "self.args[0]",
    }


@pytest.mark.parametrize("value", ['"code"', '"{1.code}"', '"{0.code} "', '"{0.}"', '"x{0.code}"', "payload.code"])
def test_details_field_not_found(value):
    """Anything not anchored as {0...} fails generation."""
    with pytest.raises(DetailsFieldError) as exc:
        build_table(make_decl(A=f"details = {value}"))
    assert exc.value.code == "E013"
    assert "details field not found" in exc.value.message


def test_details_path_helper():
    assert details_path("self.args[0]") == ()
    assert details_path("self.args[0].error.code") == ("error", "code")


@dataclass
class Violation:
    field: str
    problem: str


def details_decl(text, payload_type):
    decl = SumTypeDecl(name="ApiError")
    entries = parse_variant_annotation(text, "ApiError.Invalid")
    decl.variants.append(VariantDecl(name="Invalid", entries=entries, payload_type=payload_type))
    return decl


@pytest.mark.parametrize("payload_type", [Violation, str, ValueError])
def test_details_field_missing_on_declared_payload(payload_type):
    """Declared payload classes with known fields are checked at generation."""
    with pytest.raises(DetailsFieldError) as exc:
        build_table(details_decl('details = "{0.code}"', payload_type))
    assert exc.value.code == "E013"
    assert f"{payload_type.__qualname__} has no field `code`" in exc.value.message


@pytest.mark.parametrize("payload_type", [Violation, None, "Violation"])
def test_details_field_on_declared_payload(payload_type):
    """Present fields, undeclared and string-annotated payloads pass."""
    table = build_table(details_decl('details = "{0.field}"', payload_type))
    assert table.details == {"Invalid": "self.args[0].field"}


# Duplicates

def test_duplicate_last_wins(caplog):
    """The later occurrence overwrites the earlier one and is logged."""
    with caplog.at_level(logging.WARNING, logger="response_error.parser.ir"):
        table = build_table(make_decl(A='reason = "FIRST", status = 400, reason = "SECOND"'))
    assert table.reason == {"A": "'SECOND'"}
    assert table.status == {"A": "400"}
    assert any("Duplicate `reason`" in r.getMessage() for r in caplog.records)


def test_duplicate_strict():
    """Strict mode rejects duplicates."""
    with pytest.raises(GrammarError) as exc:
        build_table(make_decl(A="status = 400, status = 401"), strict=True)
    assert exc.value.code == "E020"


# Flags

def test_forward_and_internal_sets():
    """Flags populate their sets without touching the maps."""
    table = build_table(make_decl(A="forward", B="internal", C="forward, status = 418"))
    assert table.forwards == {"A", "C"}
    assert table.internals == {"B"}
    assert table.status == {"C": "418"}


def test_forward_payload_must_be_classifiable():
    """A declared payload type without the capability is structural."""
    decl = make_decl()
    decl.variants.append(VariantDecl(
        name="Wrapped",
        entries=parse_variant_annotation("forward", "ApiError.Wrapped"),
        payload_type=ValueError,
    ))
    with pytest.raises(StructuralError) as exc:
        build_table(decl)
    assert exc.value.code == "E101"
    assert "ApiError.Wrapped" in exc.value.message


def test_forward_payload_classifiable_or_unknown():
    """Derived payload types and string annotations are accepted."""
    decl = make_decl()
    for name, payload in [("Known", Classified), ("Later", "Classified"), ("Undeclared", None)]:
        decl.variants.append(VariantDecl(
            name=name,
            entries=parse_variant_annotation("forward", f"ApiError.{name}"),
            payload_type=payload,
        ))
    assert build_table(decl).forwards == {"Known", "Later", "Undeclared"}


# Sum-type options

def test_transform_custom():
    """`transform = custom` requires a transform method on the target."""
    class WithTransform(Exception):
        def transform(self, name, error, status, reason, type_, details):
            return None

    table = build_table(make_decl(options="transform = custom", target=WithTransform))
    assert table.transform == "custom"


def test_transform_custom_without_method():
    """A custom transform that does not exist cannot be resolved."""
    with pytest.raises(GrammarError) as exc:
        build_table(make_decl(options="transform = custom", target=Exception))
    assert exc.value.code == "E015"


@pytest.mark.parametrize("value", ["invalid", "custom.thing", '"custom"'])
def test_transform_unknown_target(value):
    """Only `custom` is a transform target."""
    with pytest.raises(GrammarError) as exc:
        build_table(make_decl(options=f"transform = {value}"))
    assert exc.value.code == "E014"


# Table shape

def test_unannotated_variants():
    """Variants without annotations are listed but absent from every map."""
    table = build_table(make_decl(A=None, B=None))
    assert table.variants == ["A", "B"]
    assert not (table.status or table.reason or table.type or table.details or table.forwards)


def test_record_and_to_dict():
    """Per-variant records and the JSON view agree with the maps."""
    table = build_table(make_decl(A='status = 404, reason = "NOT_FOUND"', B="forward"))
    assert table.record("A") == MetadataRecord(status_expr="404", reason_expr="'NOT_FOUND'")
    assert table.record("B") == MetadataRecord()

    data = table.to_dict()
    assert data["name"] == "ApiError"
    assert data["variants"]["A"] == {
        "status_expr": "404",
        "reason_expr": "'NOT_FOUND'",
        "forward": False,
        "internal": False,
    }
    assert data["variants"]["B"]["forward"] is True
