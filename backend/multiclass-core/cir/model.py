from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Literal, Optional, Tuple

Visibility = Literal["public", "protected", "private", "package"]
TypeKind = Literal["class", "interface", "enum"]

# (offset, length, replacement) applied to CompilationUnit.code
Edit = Tuple[int, int, str]


class EntryPointPolicy(str, Enum):
    """What merge does when more than one file declares a public main."""
    LAST = "last"
    FIRST = "first"
    FAIL = "fail"


@dataclass(frozen=True)
class ImportDecl:
    name: str                 # fully qualified, e.g. java.util.List or java.util.*
    is_static: bool = False

    @property
    def text(self) -> str:
        static = "static " if self.is_static else ""
        return f"import {static}{self.name};"

    @property
    def is_wildcard(self) -> bool:
        return self.name.endswith(".*")

    @property
    def simple_name(self) -> Optional[str]:
        if self.is_wildcard:
            return None
        return self.name.rsplit(".", 1)[-1]

    @property
    def owner_name(self) -> Optional[str]:
        """
        Type that a static import reaches into:
          import static a.b.Util.max;  -> Util
          import static a.b.Util.*;    -> Util
        """
        parts = self.name.split(".")
        if len(parts) < 2:
            return None
        return parts[-2]


@dataclass
class TypeDecl:
    name: str
    kind: TypeKind
    visibility: Visibility = "package"
    modifiers: Tuple[str, ...] = ()
    declares_main: bool = False

    # 1-based source line numbers
    header_line: int = 0                    # first token of the declaration (annotations included)
    keyword_line: int = 0                   # line holding class / interface / enum
    visibility_line: Optional[int] = None
    anchor: Tuple[int, str] = (0, "")       # where "public " is inserted when missing

    # character offsets into CompilationUnit.code
    span: Tuple[int, int] = (0, 0)          # header up to the next header (or end of text)
    visibility_offset: Optional[int] = None
    anchor_offset: int = 0
    body_lines: Tuple[str, ...] = ()

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_entry_point(self) -> bool:
        return self.declares_main and self.is_public


@dataclass
class CompilationUnit:
    code: str
    package: Optional[str] = None
    imports: List[ImportDecl] = field(default_factory=list)
    types: List[TypeDecl] = field(default_factory=list)
    directive_spans: Tuple[Tuple[int, int], ...] = ()   # package/import declarations, as offsets
    lead_lines: Tuple[str, ...] = ()                     # non-directive text before the first type

    @property
    def lines(self) -> List[str]:
        return self.code.split("\n")

    @property
    def public_types(self) -> List[TypeDecl]:
        return [t for t in self.types if t.is_public]

    @property
    def entry_points(self) -> List[TypeDecl]:
        return [t for t in self.types if t.is_entry_point]

    def text(self, start: int, end: int, edits: Iterable[Edit] = ()) -> str:
        """code[start:end] without package/import declarations, `edits` applied."""
        return render_span(self.code, start, end, self.directive_spans, edits)

    def body_lines(self, edits: Iterable[Edit] = ()) -> List[str]:
        """Everything except package/import declarations, blank edges trimmed."""
        return trim_blank_edges(self.text(0, len(self.code), edits).split("\n"))


@dataclass
class SplitFileSet:
    files: Dict[str, str] = field(default_factory=dict)   # "<Name>.java" -> text
    type_names: List[str] = field(default_factory=list)


@dataclass
class MergeResult:
    content: str
    main_class_name: str
    imports: List[str] = field(default_factory=list)
    other_class_names: List[str] = field(default_factory=list)
    demoted_entry_points: List[str] = field(default_factory=list)
    source_files: List[str] = field(default_factory=list)


def render_span(
    code: str,
    start: int,
    end: int,
    cuts: Iterable[Tuple[int, int]] = (),
    edits: Iterable[Edit] = (),
) -> str:
    """
    code[start:end] with the `cuts` ranges removed and `edits` applied.
    Cuts and edits must not overlap each other.
    """
    points = [(a, b - a, "") for a, b in cuts if a < end and b > start]
    points += [e for e in edits if start <= e[0] < end]

    out: List[str] = []
    pos = start
    for offset, length, replacement in sorted(points):
        stop = offset + length
        offset = max(offset, pos)
        out.append(code[pos:offset])
        out.append(replacement)
        pos = max(pos, stop)
    if pos < end:
        out.append(code[pos:end])
    return "".join(out)


def trim_blank_edges(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]
