from pathlib import Path
from typing import Optional

from adapters.java_adapter import JavaAdapter
from errors import SourceDecodeError

java_adapter = JavaAdapter()

# extension -> adapter able to split/merge that language
ADAPTERS = {java_adapter.extension: java_adapter}


def adapter_for(filename: str | Path | None) -> Optional[JavaAdapter]:
    if not filename:
        return None
    return ADAPTERS.get(Path(filename).suffix.lower())


def read_source(path: str | Path) -> str:
    """UTF-8 source text; a leading BOM is dropped."""
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceDecodeError(f"{path} is not valid UTF-8: {e.reason} at byte {e.start}", path=str(path)) from e
