from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from adapters.java_adapter import JavaAdapter
from cir.model import SplitFileSet
from errors import InputNotFound, WriteFailure
from registry import java_adapter, read_source

logger = logging.getLogger(__name__)


def split_source(code: str, adapter: Optional[JavaAdapter] = None) -> SplitFileSet:
    """
    Merged source text -> one file text per top-level type.

    Each file is the shared import block, a blank line, then the type body
    with its header forced to public. Imports keep their original order.
    Package declarations and lines before the first type are dropped.
    """
    adapter = adapter or java_adapter
    unit = adapter.parse_unit(code)
    import_lines = [imp.text for imp in unit.imports]

    result = SplitFileSet()
    for decl in unit.types:
        filename = f"{decl.name}{adapter.extension}"
        if filename in result.files:
            logger.warning("Type %s declared more than once; keeping the last declaration", decl.name)
        else:
            result.type_names.append(decl.name)

        body = adapter.public_body(unit, decl)
        parts = import_lines + [""] + body if import_lines else body
        result.files[filename] = "\n".join(parts) + "\n"

    return result


def split(merged_file_path: str | Path, output_dir: str | Path) -> List[Path]:
    """
    Split a merged file into `<Type>.java` files under `output_dir`.
    Returns the written paths (empty when the file declares no types).
    """
    src = Path(merged_file_path)
    out = Path(output_dir)

    if not src.is_file():
        raise InputNotFound(f"File not found: {src}", path=str(src))

    code = read_source(src)
    file_set = split_source(code)

    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteFailure(f"Cannot create output directory {out}: {e}", path=str(out)) from e

    if not file_set.files:
        logger.warning("No top-level types found in %s; nothing to split", src)
        return []

    written: List[Path] = []
    for filename, text in file_set.files.items():
        target = out / filename
        try:
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise WriteFailure(f"Cannot write {target}: {e}", path=str(target)) from e
        logger.info("Created file: %s", target)
        written.append(target)

    return written
