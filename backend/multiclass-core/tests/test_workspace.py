import os
import sys
from pathlib import Path

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import config
from workspace import SubmissionWorkspace, lock_for, split_dir_for

SKELETON = """import java.util.Scanner;

class Reader {
    Scanner in = new Scanner(System.in);
}

public class Main {
    public static void main(String[] args) {
    }
}
"""


def test_paths_are_derived_from_problem(tmp_path):
    ws = SubmissionWorkspace(12, " Two Sum ", root=tmp_path)
    assert ws.path == tmp_path / "12_Two_Sum.java"
    assert ws.split_dir == tmp_path / "12_Two_Sum"
    assert split_dir_for("/work/3_Graph.java") == Path("/work/3_Graph")


def test_submissions_folder_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SUBMISSIONS_FOLDER", str(tmp_path))
    assert SubmissionWorkspace(1, "A").root == tmp_path

    monkeypatch.delenv("SUBMISSIONS_FOLDER")
    assert config.get_submissions_folder() == Path.home() / "lambdachecker"


def test_open_splits_and_prepare_merges(tmp_path):
    ws = SubmissionWorkspace(5, "Reader", skeleton=SKELETON, root=tmp_path)

    files = ws.open_for_editing()
    assert [f.name for f in files] == ["Main.java", "Reader.java"]

    reader = ws.split_dir / "Reader.java"
    reader.write_text(reader.read_text(encoding="utf-8").replace("Scanner in", "Scanner input"), encoding="utf-8")

    result = ws.prepare_submission()
    merged = ws.path.read_text(encoding="utf-8")

    assert result.main_class_name == "Main"
    assert "Scanner input = new Scanner(System.in);" in merged
    assert "\nclass Reader {" in merged


def test_reopen_keeps_edits_unless_override(tmp_path):
    ws = SubmissionWorkspace(5, "Reader", skeleton=SKELETON, root=tmp_path)
    ws.open_for_editing()
    main = ws.split_dir / "Main.java"
    main.write_text(main.read_text(encoding="utf-8").replace("String[] args", "String[] argv"), encoding="utf-8")

    ws.open_for_editing()
    assert "argv" in main.read_text(encoding="utf-8")

    ws.open_for_editing(override=True)
    assert "argv" not in main.read_text(encoding="utf-8")
    assert ws.path.read_text(encoding="utf-8") == SKELETON


def test_other_languages_are_passed_through(tmp_path):
    ws = SubmissionWorkspace(9, "Valgrind Me", extension=".c", skeleton="int main(){}\n", root=tmp_path)

    assert ws.open_for_editing() == [ws.path]
    assert not ws.split_dir.exists()
    assert ws.prepare_submission() is None
    assert ws.read_submission() == b"int main(){}\n"


def test_read_submission_merges_first(tmp_path):
    ws = SubmissionWorkspace(5, "Reader", skeleton=SKELETON, root=tmp_path)
    ws.open_for_editing()

    data = ws.read_submission().decode("utf-8")
    assert data.startswith("import java.util.Scanner;\n\nclass Reader {")


def test_lock_is_shared_per_path(tmp_path):
    a = lock_for(tmp_path / "x.java")
    b = lock_for(tmp_path / "." / "x.java")
    assert a is b
    assert lock_for(tmp_path / "y.java") is not a
