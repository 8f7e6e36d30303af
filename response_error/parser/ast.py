from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


@dataclass
class Literal:
    kind: str  # "int" | "float" | "str"
    value: Union[int, float, str]
    text: str


@dataclass
class Path:
    """Dotted identifier path, resolved by the host at call time."""
    segments: List[str]

    @property
    def dotted(self) -> str:
        return ".".join(self.segments)


@dataclass
class Entry:
    """One annotation option: a bare flag or a key = value pair."""
    key: str
    value: Optional[Union[Literal, Path]] = None
    loc: Optional[Tuple[int, int]] = None

    @property
    def is_flag(self) -> bool:
        return self.value is None


@dataclass
class VariantDecl:
    name: str
    entries: List[Entry] = field(default_factory=list)
    # First annotated attribute of the nested class, if any (may be a string)
    payload_type: object = None


@dataclass
class SumTypeDecl:
    name: str
    variants: List[VariantDecl] = field(default_factory=list)
    options: List[Entry] = field(default_factory=list)
    # Sum-type class, used to resolve `transform = custom`
    target: Optional[type] = None
