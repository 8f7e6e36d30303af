import inspect
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ..errors import DetailsFieldError, GrammarError, StructuralError
from .ast import Entry, Literal, Path, SumTypeDecl, VariantDecl

logger = logging.getLogger(__name__)

# Range accepted by the HTTP status code type (three digits)
STATUS_MIN, STATUS_MAX = 100, 999

# "{0}" or "{0.field.nested}", anchored at both ends
DETAILS_RE = re.compile(r"^\{0((?:\.[A-Za-z_][A-Za-z0-9_]*)*)\}$")

PAYLOAD_EXPR = "self.args[0]"

TRANSFORM_TARGETS = ("custom",)


@dataclass
class MetadataRecord:
    """Explicit metadata of one variant. None means not specified."""
    status_expr: Optional[str] = None
    reason_expr: Optional[str] = None
    type_expr: Optional[str] = None
    details_expr: Optional[str] = None


@dataclass
class MetadataTable:
    name: str
    variants: List[str] = field(default_factory=list)
    status: Dict[str, str] = field(default_factory=dict)
    reason: Dict[str, str] = field(default_factory=dict)
    type: Dict[str, str] = field(default_factory=dict)
    details: Dict[str, str] = field(default_factory=dict)
    forwards: Set[str] = field(default_factory=set)
    internals: Set[str] = field(default_factory=set)
    transform: Optional[str] = None

    def record(self, variant: str) -> MetadataRecord:
        return MetadataRecord(
            status_expr=self.status.get(variant),
            reason_expr=self.reason.get(variant),
            type_expr=self.type.get(variant),
            details_expr=self.details.get(variant),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "transform": self.transform,
            "variants": {
                v: {
                    **{k: e for k, e in self.record(v).__dict__.items() if e is not None},
                    "forward": v in self.forwards,
                    "internal": v in self.internals,
                }
                for v in self.variants
            },
        }


# --- value resolvers -------------------------------------------------------

def resolve_status(value, owner: str) -> str:
    if isinstance(value, Path):
        # Not re-validated; the host resolves it
        return value.dotted
    if value.kind == "int" and STATUS_MIN <= value.value <= STATUS_MAX:
        return str(value.value)
    raise GrammarError(
        code="E010",
        message=f"Invalid `status` in #[response] of {owner}: invalid status code {value.text}",
        hint=f"Use an integer between {STATUS_MIN} and {STATUS_MAX} or a status constant"
    )


def _resolve_text(value, key: str, code: str, owner: str) -> str:
    if isinstance(value, Path):
        return value.dotted
    if value.kind == "str":
        return repr(value.value)
    raise GrammarError(
        code=code,
        message=f"Invalid `{key}` in #[response] of {owner}: expected a string or a path, got {value.text}",
    )


def resolve_reason(value, owner: str) -> str:
    return _resolve_text(value, "reason", "E011", owner)


def resolve_type(value, owner: str) -> str:
    return _resolve_text(value, "type", "E012", owner)


def resolve_details(value, owner: str) -> str:
    """Rewrite "{0.code}" into a field access on the positional payload."""
    if isinstance(value, Literal) and value.kind == "str":
        m = DETAILS_RE.match(value.value)
        if m:
            return PAYLOAD_EXPR + m.group(1)
        shown = value.text
    else:
        shown = value.dotted if isinstance(value, Path) else value.text
    raise DetailsFieldError(
        code="E013",
        message=f"Invalid `details` in #[response] of {owner}: details field not found in {shown}",
        hint='Reference the payload as "{0}" or "{0.field}"'
    )


def details_path(expr: str) -> Tuple[str, ...]:
    """Attribute names read from the payload by a resolved details expression."""
    return tuple(expr[len(PAYLOAD_EXPR):].split(".")[1:])


RESOLVERS = {
    "status": resolve_status,
    "reason": resolve_reason,
    "type": resolve_type,
    "details": resolve_details,
}


# --- table builder ---------------------------------------------------------

def is_classifiable(obj) -> bool:
    """True for derived sum-types and their instances."""
    target = obj if isinstance(obj, type) else type(obj)
    return isinstance(getattr(target, "__response_table__", None), MetadataTable)


def _resolve_transform(decl: SumTypeDecl, entry: Entry) -> str:
    value = entry.value
    target = value.dotted if isinstance(value, Path) else None
    if target not in TRANSFORM_TARGETS:
        shown = target if target is not None else value.text
        raise GrammarError(
            code="E014",
            message=f"Unknown `transform` target for {decl.name}: {shown}",
            loc=entry.loc,
            hint="Only `transform = custom` is supported"
        )
    if decl.target is not None and not callable(getattr(decl.target, "transform", None)):
        raise GrammarError(
            code="E015",
            message=f"{decl.name} declares `transform = custom` but defines no transform method",
            loc=entry.loc,
            hint="def transform(self, name, error, status, reason, type_, details) -> Response"
        )
    return target


def _check_forward(decl: SumTypeDecl, variant: VariantDecl):
    payload = variant.payload_type
    # String annotations are forward references; checked when followed
    if isinstance(payload, type) and not is_classifiable(payload):
        raise StructuralError(
            code="E101",
            message=(
                f"{decl.name}.{variant.name} is marked `forward` but its payload "
                f"{payload.__qualname__} is not a response error"
            ),
            hint="Decorate the payload type with @response_error"
        )


def _annotations(klass: type) -> Dict[str, Any]:
    return dict(inspect.get_annotations(klass))


def _declared_fields(cls: type) -> Optional[Set[str]]:
    """
    Attribute names every instance of cls carries, or None when they cannot
    be known from the class alone (attributes assigned in __init__).
    """
    names = set(dir(cls))
    declared = cls.__module__ == "builtins"
    for klass in cls.__mro__:
        if klass is object:
            continue
        annotations = _annotations(klass)
        if annotations or "__slots__" in vars(klass):
            declared = True
        names.update(annotations)
    return names if declared else None


def _field_type(cls: type, name: str):
    for klass in cls.__mro__:
        annotation = _annotations(klass).get(name)
        if annotation is not None:
            return annotation
    return None


def _check_details(decl: SumTypeDecl, variant: VariantDecl, expr: str, entry: Entry):
    owner = f"{decl.name}.{variant.name}"
    payload = variant.payload_type
    for name in details_path(expr):
        if not isinstance(payload, type):
            return
        try:
            fields = _declared_fields(payload)
        except NameError:
            # Unresolved forward reference in the payload's annotations
            return
        if fields is None:
            return
        if name not in fields:
            raise DetailsFieldError(
                code="E013",
                message=(
                    f"Invalid `details` in #[response] of {owner}: details field not found: "
                    f"{payload.__qualname__} has no field `{name}`"
                ),
                loc=entry.loc,
            )
        payload = _field_type(payload, name)


def build_table(decl: SumTypeDecl, strict: bool = False) -> MetadataTable:
    """
    Fold the parsed annotations of every variant into a metadata table.

    Args:
        decl: Parsed sum-type declaration
        strict: Reject duplicate options instead of letting the last one win

    Returns:
        MetadataTable with one expression map per field, plus the
        forward and internal sets

    Raises:
        GrammarError: On invalid values or duplicates in strict mode
        StructuralError: If a forward payload lacks the capability
    """
    table = MetadataTable(name=decl.name, variants=[v.name for v in decl.variants])

    for entry in decl.options:
        if entry.key == "transform":
            table.transform = _resolve_transform(decl, entry)

    for variant in decl.variants:
        owner = f"{decl.name}.{variant.name}"
        for entry in variant.entries:
            if entry.key == "forward":
                table.forwards.add(variant.name)
                _check_forward(decl, variant)
                continue
            if entry.key == "internal":
                table.internals.add(variant.name)
                continue

            mapping = getattr(table, entry.key)
            expr = RESOLVERS[entry.key](entry.value, owner)
            if entry.key == "details":
                _check_details(decl, variant, expr, entry)
            if variant.name in mapping:
                if strict:
                    raise GrammarError(
                        code="E020",
                        message=f"Duplicate `{entry.key}` in #[response] of {owner}",
                        loc=entry.loc,
                    )
                logger.warning(
                    f"Duplicate `{entry.key}` on {owner}: {mapping[variant.name]} replaced by {expr}"
                )
            mapping[variant.name] = expr

    return table
