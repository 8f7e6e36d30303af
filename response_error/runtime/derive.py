"""
Derive classification and response conversion for exception sum-types.

A sum-type is an exception class whose variants are the public classes
nested in its body:

    @response_error
    class ApiError(Exception):
        @response('status = 404, reason = "NOT_FOUND"')
        class NotFound:
            pass

        @response("forward")
        class Upstream:
            inner: UpstreamError

        class Other:
            pass

    raise ApiError.NotFound("no such user")

Each nested class is rebuilt as a subclass of the sum-type. The exception
args are the positional payload: `{0.code}` in `details` and the `forward`
delegate both read `self.args[0]`.

Copyright (c) 2025 Graziano Labs Corp.
"""

import inspect
import logging
import sys
from typing import Callable, Dict, List, Optional, Tuple

from ..config import ResponseErrorConfig, get_default_config
from ..errors import StructuralError
from ..parser.ast import SumTypeDecl, VariantDecl
from ..parser.ir import build_table
from ..parser.parser import parse_type_annotation, parse_variant_annotation
from .codegen import closure_names, generate_source, install

logger = logging.getLogger(__name__)

ANNOTATIONS_ATTR = "__response_annotations__"

# Class-dict entries that belong to the declaring class and are not copied
_SKIPPED = {
    "__dict__", "__weakref__",
    "__annotations__", "__annotate__", "__annotate_func__", "__annotations_cache__",
}


def response(annotation: str) -> Callable[[type], type]:
    """Attach a response annotation to a nested variant class."""
    if not isinstance(annotation, str):
        raise TypeError("@response expects an annotation string, e.g. @response('status = 404')")

    def wrap(cls: type) -> type:
        # Decorators apply bottom-up; store in source order
        pending = cls.__dict__.get(ANNOTATIONS_ATTR, ())
        setattr(cls, ANNOTATIONS_ATTR, (annotation,) + tuple(pending))
        return cls
    return wrap


def response_error(target=None, /):
    """
    Derive response conversion for an exception sum-type.

    Usable as @response_error, @response_error() or
    @response_error("transform = custom").
    """
    localns = _caller_locals(1)
    if isinstance(target, str):
        annotation = target
        return lambda cls: derive(cls, annotation, localns=localns)
    if target is None:
        return lambda cls: derive(cls, localns=localns)
    return derive(target, localns=localns)


def _caller_locals(depth: int) -> Optional[Dict[str, object]]:
    # Same frame lookup typing uses for forward references
    frame = sys._getframe(depth + 1)
    if frame.f_locals is frame.f_globals:
        return None
    return dict(frame.f_locals)


def _own_annotations(member: type) -> dict:
    try:
        return dict(inspect.get_annotations(member))
    except NameError:
        # Unresolved forward reference; the forward is checked when followed
        return {}


def _variant_members(cls: type) -> List[Tuple[str, type]]:
    return [
        (name, member)
        for name, member in vars(cls).items()
        if isinstance(member, type) and not name.startswith("_")
    ]


def _make_variant(cls: type, name: str, member: type) -> type:
    ns = {k: v for k, v in vars(member).items() if k not in _SKIPPED}
    annotations = _own_annotations(member)
    if annotations:
        ns["__annotations__"] = annotations
    ns.update(
        __module__=cls.__module__,
        __qualname__=f"{cls.__qualname__}.{name}",
        __variant__=name,
    )
    bases = (cls,) + tuple(b for b in member.__bases__ if b is not object)
    try:
        return type(cls)(name, bases, ns)
    except TypeError as e:
        raise StructuralError(
            code="E100",
            message=f"Cannot build variant {cls.__name__}.{name}: {e}",
        ) from e


def derive(
    cls: type,
    annotation: Optional[str] = None,
    config: Optional[ResponseErrorConfig] = None,
    localns: Optional[Dict[str, object]] = None
) -> type:
    """
    Parse, build the metadata table, generate and install dispatch for cls.

    localns holds the names of the enclosing function scope, if any. Identifier
    paths rooted there are bound when cls is derived; all others resolve
    against the defining module when a method runs.

    Raises:
        StructuralError: If cls is not an exception class (E100)
        GrammarError: On any annotation error; nothing is installed
    """
    if not (isinstance(cls, type) and issubclass(cls, BaseException)):
        raise StructuralError(
            code="E100",
            message=f"@response_error only supports exception sum-types, got {cls!r}",
            hint="Declare variants as classes nested in an Exception subclass"
        )
    config = config or get_default_config()

    members = _variant_members(cls)
    decl = SumTypeDecl(name=cls.__name__, target=cls)
    if annotation is not None:
        decl.options = parse_type_annotation(annotation, cls.__name__)

    for name, member in members:
        owner = f"{cls.__name__}.{name}"
        entries = []
        for text in member.__dict__.get(ANNOTATIONS_ATTR, ()):
            entries.extend(parse_variant_annotation(text, owner))
        payload = next(iter(_own_annotations(member).values()), None)
        decl.variants.append(VariantDecl(name=name, entries=entries, payload_type=payload))

    table = build_table(decl, strict=config.strict_duplicates)
    closure = closure_names(table, localns)
    source = generate_source(table, tuple(closure))

    cls.__variant__ = None
    variants = {}
    for name, member in members:
        variants[name] = _make_variant(cls, name, member)
        setattr(cls, name, variants[name])
    cls.__response_variants__ = variants

    if config.dump_source:
        logger.debug(f"Generated dispatch for {cls.__qualname__}:\n{source}")

    return install(cls, table, source, closure)
