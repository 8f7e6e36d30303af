import ast
from functools import lru_cache
from pathlib import Path as FilePath
from typing import FrozenSet, List

from lark import Lark, Transformer, Token
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from ..errors import GrammarError
from .ast import Entry, Literal, Path

GRAMMAR_PATH = FilePath(__file__).resolve().parents[1] / "spec" / "annotation_v0_1.lark"

VARIANT_FLAGS = frozenset({"internal", "forward"})
VARIANT_KEYS = frozenset({"status", "reason", "type", "details"})
TYPE_FLAGS: FrozenSet[str] = frozenset()
TYPE_KEYS = frozenset({"transform"})


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(GRAMMAR_PATH.read_text(), start="start", parser="lalr")


class ToEntries(Transformer):
    def start(self, items):
        return items[0]

    def options(self, items):
        return list(items)

    def entry(self, items):
        key: Token = items[0]
        value = items[1] if len(items) > 1 else None
        return Entry(key=key.value, value=value, loc=(key.line, key.column))

    def path(self, items):
        return Path(segments=[tok.value for tok in items])

    def number(self, items):
        text = items[0].value
        if text.isdigit():
            return Literal(kind="int", value=int(text), text=text)
        return Literal(kind="float", value=float(text), text=text)

    def string(self, items):
        text = items[0].value
        return Literal(kind="str", value=ast.literal_eval(text), text=text)


def _loc(e: UnexpectedInput):
    line, column = getattr(e, "line", None), getattr(e, "column", None)
    if isinstance(line, int) and line > 0:
        return (line, column)
    return None


def _describe(token: Token) -> str:
    if token.type == "$END":
        return "end of annotation"
    return repr(token.value)


def parse_annotation(
    text: str,
    owner: str,
    flags: FrozenSet[str] = VARIANT_FLAGS,
    keys: FrozenSet[str] = VARIANT_KEYS,
) -> List[Entry]:
    """
    Parse one annotation payload into option entries.

    Args:
        text: Annotation payload, e.g. 'status = 404, reason = "NOT_FOUND"'
        owner: Name of the annotated declaration, used in diagnostics
        flags: Options accepted without a value
        keys: Options that require `= value`

    Returns:
        Entries in source order

    Raises:
        GrammarError: On malformed punctuation (E001), unknown options (E002),
            a key without `=` (E003) or a flag given a value (E004)
    """
    try:
        tree = _parser().parse(text)
    except UnexpectedCharacters as e:
        raise GrammarError(
            code="E001",
            message=f"Invalid #[response] options on {owner}: at token {e.char!r}",
            loc=_loc(e),
            hint="Options are separated by `,`"
        ) from e
    except UnexpectedToken as e:
        raise GrammarError(
            code="E001",
            message=f"Invalid #[response] options on {owner}: at token {_describe(e.token)}",
            loc=_loc(e),
            hint="Options are separated by `,` and values follow `=`"
        ) from e
    except UnexpectedInput as e:
        raise GrammarError(
            code="E001",
            message=f"Invalid #[response] options on {owner}",
            loc=_loc(e),
        ) from e

    try:
        entries = ToEntries().transform(tree)
    except VisitError as e:
        # Only string literals can fail here (bad escape sequence)
        raise GrammarError(
            code="E001",
            message=f"Invalid string literal in #[response] options on {owner}: {e.orig_exc}",
        ) from e.orig_exc

    _check_entries(entries, owner, flags, keys)
    return entries


def _check_entries(entries: List[Entry], owner: str, flags, keys):
    for entry in entries:
        if entry.key in flags:
            if not entry.is_flag:
                raise GrammarError(
                    code="E004",
                    message=f"#[response] option `{entry.key}` on {owner} takes no value",
                    loc=entry.loc,
                )
        elif entry.key in keys:
            if entry.is_flag:
                raise GrammarError(
                    code="E003",
                    message=f"Invalid #[response] options on {owner}: `{entry.key}` must be followed by `=`",
                    loc=entry.loc,
                    hint=f"Write `{entry.key} = <value>`"
                )
        else:
            raise GrammarError(
                code="E002",
                message=f"Unknown #[response] option: {entry.key}",
                loc=entry.loc,
                hint=f"Known options: {', '.join(sorted(flags | keys))}"
            )


def parse_variant_annotation(text: str, owner: str) -> List[Entry]:
    return parse_annotation(text, owner, VARIANT_FLAGS, VARIANT_KEYS)


def parse_type_annotation(text: str, owner: str) -> List[Entry]:
    return parse_annotation(text, owner, TYPE_FLAGS, TYPE_KEYS)
