from .ast import Entry, Literal, Path, SumTypeDecl, VariantDecl
from .ir import MetadataRecord, MetadataTable, build_table
from .parser import parse_annotation, parse_type_annotation, parse_variant_annotation

__all__ = [
    "Entry",
    "Literal",
    "Path",
    "SumTypeDecl",
    "VariantDecl",
    "MetadataRecord",
    "MetadataTable",
    "build_table",
    "parse_annotation",
    "parse_type_annotation",
    "parse_variant_annotation",
]
