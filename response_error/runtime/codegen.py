"""
Dispatch generator.

Emits Python source for the classification and response-conversion methods
of one sum-type, then execs it against the globals of the module that
defines the sum-type, so identifier paths in annotations resolve there.
Path roots bound in an enclosing function are passed to the factory as
parameters and become closure variables of the generated methods.

Copyright (c) 2025 Graziano Labs Corp.
"""

import keyword
import logging
import sys
from typing import Dict, List, Mapping, Optional, Sequence

from fastapi.encoders import jsonable_encoder

from ..parser.ir import PAYLOAD_EXPR, MetadataTable, details_path
from .registry import REGISTRY
from .resolution import Present, payload_field, resolve_field, value_of

logger = logging.getLogger(__name__)

# Names handed to the generated factory; prefixed to stay clear of user globals
HELPERS = (
    "_re_present",
    "_re_encode",
    "_re_payload_field",
    "_re_resolve_field",
    "_re_value_of",
    "_re_registry",
    "_re_logger",
)

GENERATED_METHODS = (
    "response_status",
    "response_reason",
    "response_type",
    "response_details",
    "response_forward",
    "status_code",
    "error_response",
)

# Fields serialized with jsonable_encoder before they leave the error
ENCODED_FIELDS = {"reason", "details"}

# Fields whose values may be identifier paths
PATH_FIELDS = ("status", "reason", "type")

# Names bound inside the generated lookups
RESERVED = {*HELPERS, "self", "_variant", "_found"}


def _indent(lines: List[str], level: int) -> List[str]:
    return [("    " * level + line) if line else "" for line in lines]


def path_roots(table: MetadataTable) -> List[str]:
    """First segment of every identifier path in the table, sorted."""
    roots = set()
    for field in PATH_FIELDS:
        for expr in getattr(table, field).values():
            root = expr.split(".")[0]
            if root.isidentifier() and not keyword.iskeyword(root):
                roots.add(root)
    return sorted(roots)


def closure_names(table: MetadataTable, localns: Optional[Mapping[str, object]]) -> Dict[str, object]:
    """Path roots bound in localns, with their values."""
    if not localns:
        return {}
    return {
        root: localns[root]
        for root in path_roots(table)
        if root in localns and root not in RESERVED
    }


def _arm(field: str, variant: str, expr: str) -> List[str]:
    if field == "details":
        path = details_path(expr)
        return [
            f"if _variant == {variant!r}:",
            f"    _found = _re_payload_field(self, {path!r})",
            "    return _re_present(_re_encode(_found.value)) if _found is not None else None",
        ]
    if field in ENCODED_FIELDS:
        expr = f"_re_encode({expr})"
    return [f"if _variant == {variant!r}:", f"    return _re_present({expr})"]


def _lookup(field: str, mapping: Dict[str, str], variants: List[str]) -> List[str]:
    body = []
    for variant in variants:
        if variant in mapping:
            body += _arm(field, variant, mapping[variant])
    if body:
        body.insert(0, "_variant = self.__variant__")
    body.append("return None")
    return [f"def response_{field}(self):"] + _indent(body, 1)


def _forward(table: MetadataTable) -> List[str]:
    body = []
    for variant in table.variants:
        if variant in table.forwards:
            body += [
                f"if _variant == {variant!r}:",
                f"    return {PAYLOAD_EXPR} if self.args else None",
            ]
    if body:
        body.insert(0, "_variant = self.__variant__")
    body.append("return None")
    return ["def response_forward(self):"] + _indent(body, 1)


def _conversion(table: MetadataTable) -> List[str]:
    name = table.name
    if table.transform == "custom":
        target = "self.transform"
    else:
        target = "policy.transform"

    return [
        "def status_code(self):",
        "    found = _re_resolve_field(self, 'status')",
        "    if found is not None:",
        "        return found.value",
        "    return _re_registry.current().default_status()",
        "",
        "def error_response(self):",
        "    policy = _re_registry.current()",
        "    found = _re_resolve_field(self, 'status')",
        "    status = found.value if found is not None else policy.default_status()",
        "    reason = _re_value_of(_re_resolve_field(self, 'reason'))",
        "    type_ = _re_value_of(_re_resolve_field(self, 'type'))",
        "    details = _re_value_of(_re_resolve_field(self, 'details'))",
        f'    _re_logger.error(f"Response error: {{self}}\\n\\t{name}({{self!r}})")',
        f"    return {target}({name!r}, self, status, reason, type_, details)",
    ]


def generate_source(table: MetadataTable, closure: Sequence[str] = ()) -> str:
    """
    Emit the factory source for one sum-type.

    The factory takes the runtime helpers, then the closure names, and
    returns the generated methods in GENERATED_METHODS order. Arms follow
    variant declaration order.
    """
    body: List[str] = []
    for field in ("status", "reason", "type", "details"):
        body += _lookup(field, getattr(table, field), table.variants) + [""]
    body += _forward(table) + [""]
    body += _conversion(table) + [""]
    body.append(f"return ({', '.join(GENERATED_METHODS)},)")

    params = ", ".join((*HELPERS, *closure))
    lines = [f"def __create_fn__({params}):"] + _indent(body, 1)
    return "\n".join(lines) + "\n"


def install(
    cls: type,
    table: MetadataTable,
    source: Optional[str] = None,
    closure: Optional[Dict[str, object]] = None
) -> type:
    """Compile the generated source and bind its methods onto cls."""
    closure = closure or {}
    if source is None:
        source = generate_source(table, tuple(closure))

    module = sys.modules.get(cls.__module__)
    globals_ = module.__dict__ if module is not None else {}
    ns: Dict[str, object] = {}
    code = compile(source, f"<response_error {cls.__qualname__}>", "exec")
    exec(code, globals_, ns)

    methods = ns["__create_fn__"](
        _re_present=Present,
        _re_encode=jsonable_encoder,
        _re_payload_field=payload_field,
        _re_resolve_field=resolve_field,
        _re_value_of=value_of,
        _re_registry=REGISTRY,
        _re_logger=logger,
        **closure,
    )
    for fn in methods:
        fn.__qualname__ = f"{cls.__qualname__}.{fn.__name__}"
        setattr(cls, fn.__name__, fn)

    cls.__response_table__ = table
    cls.__response_source__ = source
    return cls
