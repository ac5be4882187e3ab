import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from errors import InputNotFound, SourceDecodeError
from registry import java_adapter
from transform.splitter import split, split_source

MERGED = """import java.util.Scanner;
import java.util.ArrayList;

class Helper {
    int twice(int x) {
        return 2 * x;
    }
}

public class Main {
    public static void main(String[] a) {
        Scanner in = new Scanner(System.in);
        System.out.println(new Helper().twice(in.nextInt()));
    }
}
"""


def test_split_writes_one_public_file_per_type(tmp_path):
    src = tmp_path / "1_Two_Sum.java"
    src.write_text(MERGED, encoding="utf-8")
    out = tmp_path / "1_Two_Sum"

    written = split(src, out)

    assert sorted(p.name for p in written) == ["Helper.java", "Main.java"]
    helper = (out / "Helper.java").read_text(encoding="utf-8")
    assert helper == (
        "import java.util.Scanner;\n"
        "import java.util.ArrayList;\n"
        "\n"
        "public class Helper {\n"
        "    int twice(int x) {\n"
        "        return 2 * x;\n"
        "    }\n"
        "}\n"
    )

    main = (out / "Main.java").read_text(encoding="utf-8")
    assert main.startswith("import java.util.Scanner;\nimport java.util.ArrayList;\n\npublic class Main {")


def test_every_split_file_has_a_public_header():
    code = """import java.util.List;

interface Shape { double area(); }

abstract class Base implements Shape {}

final class Square extends Base {
    public double area() { return 1; }
}

enum Kind { A, B }

public class Main {
    public static void main(String[] args) {}
}
"""
    files = split_source(code).files

    assert sorted(files) == ["Base.java", "Kind.java", "Main.java", "Shape.java", "Square.java"]
    for text in files.values():
        unit = java_adapter.parse_unit(text)
        assert len(unit.types) == 1
        assert unit.types[0].is_public
    assert "public abstract class Base implements Shape {}" in files["Base.java"]
    assert "public final class Square extends Base {" in files["Square.java"]


def test_package_and_lead_lines_are_dropped():
    code = """// Problem 12
package judge;

import java.io.*;

public class Main {
    public static void main(String[] args) {}
}
"""
    files = split_source(code).files
    assert files["Main.java"] == (
        "import java.io.*;\n"
        "\n"
        "public class Main {\n"
        "    public static void main(String[] args) {}\n"
        "}\n"
    )


def test_no_imports_means_no_leading_blank_line():
    files = split_source("class A {}\n").files
    assert files == {"A.java": "public class A {}\n"}


def test_header_on_an_import_line_is_kept():
    files = split_source(
        "import java.util.*; public class Main {\n"
        "    public static void main(String[] a) {}\n"
        "}\n"
    ).files
    assert files == {
        "Main.java": (
            "import java.util.*;\n"
            "\n"
            "public class Main {\n"
            "    public static void main(String[] a) {}\n"
            "}\n"
        )
    }


def test_types_on_one_line_split_into_separate_files():
    result = split_source("class A {} class B {}\n")

    assert result.files == {"A.java": "public class A {}\n", "B.java": "public class B {}\n"}
    for name, text in result.files.items():
        unit = java_adapter.parse_unit(text)
        assert [(t.name, t.visibility) for t in unit.types] == [(name[:-5], "public")]


def test_nested_types_stay_with_their_owner():
    code = """public class Main {
    static class Node {}
    public static void main(String[] args) {}
}
"""
    result = split_source(code)
    assert result.type_names == ["Main"]
    assert "static class Node {}" in result.files["Main.java"]


def test_split_without_types_creates_empty_directory(tmp_path):
    src = tmp_path / "empty.java"
    src.write_text("// nothing to see\nimport java.util.List;\n", encoding="utf-8")
    out = tmp_path / "empty"

    assert split(src, out) == []
    assert out.is_dir()
    assert list(out.iterdir()) == []


def test_split_missing_file(tmp_path):
    with pytest.raises(InputNotFound):
        split(tmp_path / "missing.java", tmp_path / "out")


def test_split_rejects_undecodable_input(tmp_path):
    src = tmp_path / "latin1.java"
    src.write_bytes(b"class A { String s = \"\xe9t\xe9\"; }\n")

    with pytest.raises(SourceDecodeError) as exc:
        split(src, tmp_path / "out")
    assert exc.value.path == str(src)
    assert not (tmp_path / "out").exists()
