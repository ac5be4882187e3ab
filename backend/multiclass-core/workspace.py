from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import Dict, List, Optional

import config
from cir.model import EntryPointPolicy, MergeResult
from registry import adapter_for
from transform.merger import list_source_files, merge
from transform.splitter import split

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# One lock per merged file: split and merge of the same submission never overlap
# -----------------------------------------------------------------------------
_LOCKS: Dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock


def split_dir_for(merged_path: str | Path) -> Path:
    """`<dir>/<base>.java` -> `<dir>/<base>/`"""
    p = Path(merged_path)
    return p.parent / p.stem


class SubmissionWorkspace:
    """
    Owns one problem's merged submission file and its split directory.
    Decides when to split (opening for editing) and when to merge
    (before the file is read for upload). Languages without an adapter
    are passed through untouched.
    """

    def __init__(
        self,
        problem_id: int,
        problem_name: str,
        extension: str = config.SOURCE_EXTENSION,
        skeleton: str = "",
        root: Optional[Path] = None,
    ) -> None:
        self.problem_id = problem_id
        self.problem_name = problem_name
        self.extension = extension
        self.skeleton = skeleton
        self.root = Path(root) if root else config.get_submissions_folder()

    @property
    def path(self) -> Path:
        name = self.problem_name.strip().replace(" ", "_")
        return self.root / f"{self.problem_id}_{name}{self.extension or '.tmp'}"

    @property
    def split_dir(self) -> Path:
        return split_dir_for(self.path)

    @property
    def splittable(self) -> bool:
        return adapter_for(self.path) is not None

    def create_submission_file(self, override: bool = False) -> bool:
        """Write the skeleton unless the file exists. Returns True when written."""
        if self.path.exists() and not override:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.skeleton, encoding="utf-8")
        return True

    def split_files(self) -> List[Path]:
        if not self.split_dir.is_dir():
            return []
        return list_source_files(self.split_dir, self.extension)

    def open_for_editing(self, override: bool = False) -> List[Path]:
        """
        Make sure the merged file exists and return the files to edit.

        For splittable languages the merged file is split into the split
        directory. An existing split directory is reused unless `override`
        is set, in which case it is deleted and rebuilt from the skeleton.
        """
        with lock_for(self.path):
            self.create_submission_file(override)
            if not self.splittable:
                return [self.path]

            if override and self.split_dir.exists():
                shutil.rmtree(self.split_dir)

            existing = self.split_files()
            if existing:
                logger.info("Reusing %d split files in %s", len(existing), self.split_dir)
                return existing

            written = split(self.path, self.split_dir)
            logger.info("Problem split in %d files.", len(written))
            return sorted(written)

    def prepare_submission(self, policy: EntryPointPolicy | str | None = None) -> Optional[MergeResult]:
        """Merge the split directory back into the merged file (no-op for other languages)."""
        if not self.splittable:
            return None
        with lock_for(self.path):
            return merge(self.split_dir, self.path, policy)

    def read_submission(self, policy: EntryPointPolicy | str | None = None) -> bytes:
        # never opened for editing: nothing to merge yet
        if self.split_dir.is_dir():
            self.prepare_submission(policy)
        self.create_submission_file()
        return self.path.read_bytes()
