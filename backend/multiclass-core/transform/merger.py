from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

import config
from adapters.java_adapter import JavaAdapter
from cir.model import EntryPointPolicy, ImportDecl, MergeResult
from errors import InputNotFound, InvalidPolicy, MultipleEntryPoints, NoEntryPoint, NoSourceFiles, WriteFailure
from registry import java_adapter, read_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileExtract:
    """Pass-2 view of one split file."""
    path: str
    imports: Tuple[ImportDecl, ...]
    type_names: Tuple[str, ...]          # top-level types, source order
    main_class_name: Optional[str]       # public type declaring main, if any
    body: Tuple[str, ...]                # verbatim, imports/package removed
    demoted_body: Tuple[str, ...]        # same, `public` stripped from top-level headers


# ---------------- Pass 1: names ----------------

def collect_type_names(sources: Mapping[str, str], adapter: Optional[JavaAdapter] = None) -> FrozenSet[str]:
    adapter = adapter or java_adapter
    names: set[str] = set()
    for code in sources.values():
        names |= adapter.collect_type_names(code)
    return frozenset(names)


# ---------------- Pass 2: extraction ----------------

def is_self_import(imp: ImportDecl, defined: FrozenSet[str]) -> bool:
    """An import that points at a type which becomes local after merging."""
    if imp.is_static:
        return imp.owner_name in defined
    return imp.simple_name is not None and imp.simple_name in defined


def extract_file(
    path: str,
    code: str,
    defined: FrozenSet[str],
    adapter: Optional[JavaAdapter] = None,
) -> FileExtract:
    adapter = adapter or java_adapter
    unit = adapter.parse_unit(code)

    kept = tuple(imp for imp in unit.imports if not is_self_import(imp, defined))
    entry = next((t for t in unit.types if t.is_entry_point), None)

    return FileExtract(
        path=path,
        imports=kept,
        type_names=tuple(t.name for t in unit.types),
        main_class_name=entry.name if entry else None,
        body=tuple(unit.body_lines()),
        demoted_body=tuple(adapter.demoted_body(unit)),
    )


def resolve_policy(policy: EntryPointPolicy | str | None) -> EntryPointPolicy:
    """Per-call policy, else the configured one."""
    value = policy or config.ENTRY_POINT_POLICY
    try:
        return EntryPointPolicy(value)
    except ValueError as e:
        choices = ", ".join(p.value for p in EntryPointPolicy)
        raise InvalidPolicy(f"Unknown entry point policy {value!r}; expected one of {choices}") from e


def _pick_entry_point(candidates: List[FileExtract], policy: EntryPointPolicy) -> FileExtract:
    if len(candidates) == 1:
        return candidates[0]

    names = [f"{c.main_class_name} ({c.path})" for c in candidates]
    if policy is EntryPointPolicy.FAIL:
        raise MultipleEntryPoints(
            f"More than one class with a main method: {', '.join(names)}",
            candidates=[c.path for c in candidates],
        )

    chosen = candidates[0] if policy is EntryPointPolicy.FIRST else candidates[-1]
    logger.warning(
        "Several classes declare main (%s); policy '%s' keeps %s",
        ", ".join(names), policy.value, chosen.main_class_name,
    )
    return chosen


def assemble(imports: List[str], others: List[Tuple[str, ...]], main_body: Tuple[str, ...]) -> str:
    parts: List[str] = []
    if imports:
        parts.append("\n".join(imports))
    parts.extend("\n".join(body) for body in others)
    parts.append("\n".join(main_body))
    return "\n\n".join(parts) + "\n"


def merge_sources(
    sources: Mapping[str, str],
    policy: EntryPointPolicy | str | None = None,
    adapter: Optional[JavaAdapter] = None,
) -> MergeResult:
    """
    Split file texts (in enumeration order) -> one submission file.

    Exactly one type stays public: the one declaring main. Imports of types
    that are defined among the sources are dropped; the rest are sorted and
    deduplicated.
    """
    adapter = adapter or java_adapter
    policy = resolve_policy(policy)

    if not sources:
        raise NoSourceFiles("No source files to merge.")

    defined = collect_type_names(sources, adapter)
    extracts = [extract_file(path, code, defined, adapter) for path, code in sources.items()]

    candidates = [e for e in extracts if e.main_class_name]
    if not candidates:
        raise NoEntryPoint("No class with main method found.")
    chosen = _pick_entry_point(candidates, policy)

    imports = sorted({imp.text for e in extracts for imp in e.imports})
    others = [e for e in extracts if e is not chosen and e.demoted_body]

    return MergeResult(
        content=assemble(imports, [e.demoted_body for e in others], chosen.body),
        main_class_name=chosen.main_class_name or "",
        imports=imports,
        other_class_names=[name for e in others for name in e.type_names],
        demoted_entry_points=[c.main_class_name for c in candidates if c is not chosen],
        source_files=[e.path for e in extracts],
    )


def list_source_files(input_dir: str | Path, extension: str = config.SOURCE_EXTENSION) -> List[Path]:
    """Recursive, sorted so the enumeration order (and `last`/`first`) is stable."""
    return sorted(p for p in Path(input_dir).rglob(f"*{extension}") if p.is_file())


def merge(
    input_dir: str | Path,
    output_file_path: str | Path,
    policy: EntryPointPolicy | str | None = None,
) -> MergeResult:
    src_dir = Path(input_dir)
    out = Path(output_file_path)

    if not src_dir.is_dir():
        raise InputNotFound(f"Input directory does not exist: {src_dir}", path=str(src_dir))

    files = list_source_files(src_dir)
    if not files:
        raise NoSourceFiles(f"No {config.SOURCE_EXTENSION} files found in {src_dir}", path=str(src_dir))

    sources: Dict[str, str] = {}
    for p in files:
        sources[str(p.relative_to(src_dir))] = read_source(p)

    result = merge_sources(sources, policy)

    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.content, encoding="utf-8")
    except OSError as e:
        raise WriteFailure(f"Cannot write {out}: {e}", path=str(out)) from e

    logger.info("Merged file created: %s (main class %s)", out, result.main_class_name)
    return result
