import javalang  # type: ignore
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from cir.model import CompilationUnit, Edit, ImportDecl, TypeDecl, render_span, trim_blank_edges
from errors import SourceLexError


class JavaAdapter:
    """
    Java source -> CompilationUnit (structural view only).

    Works on the javalang token stream rather than raw lines, so comments and
    string literals never look like declarations. Brace depth is tracked:
      - depth 0 items are package / import / top-level type declarations
      - nested and local types stay inside their enclosing type's body
      - a main method counts only when it is a direct member (depth 1)

    Each type owns the text from its first token up to the next type, cut by
    character offset, so two declarations sharing a line still split apart.
    Visibility edits land on the modifier token itself, never on a lookalike
    inside a comment or string on the same line.
    """

    language = "java"
    extension = ".java"

    TYPE_KEYWORDS = {"class", "interface", "enum"}
    VISIBILITY_MODIFIERS = ("public", "protected", "private")

    # ---------------- Token helpers ----------------

    def tokenize(self, code: str) -> List[Any]:
        try:
            return list(javalang.tokenizer.tokenize(code))
        except javalang.tokenizer.LexerError as e:
            raise SourceLexError(f"Java lexer error: {e}") from e
        except Exception as e:
            raise SourceLexError(f"Failed to tokenize Java code: {e}") from e

    @staticmethod
    def _is_sep(tok, value: str) -> bool:
        return isinstance(tok, javalang.tokenizer.Separator) and tok.value == value

    @staticmethod
    def _is_keyword(tok, value: str) -> bool:
        return isinstance(tok, javalang.tokenizer.Keyword) and tok.value == value

    def _is_type_keyword(self, tokens: List[Any], i: int) -> bool:
        tok = tokens[i]
        if not isinstance(tok, javalang.tokenizer.Keyword) or tok.value not in self.TYPE_KEYWORDS:
            return False
        # Foo.class literal
        if i > 0 and self._is_sep(tokens[i - 1], "."):
            return False
        return True

    @staticmethod
    def _line_starts(lines: List[str]) -> List[int]:
        starts, pos = [], 0
        for line in lines:
            starts.append(pos)
            pos += len(line) + 1
        return starts

    @staticmethod
    def _offset(lines: List[str], line_starts: List[int], tok) -> int:
        """
        Character offset of `tok` in the normalized text. javalang columns are
        1-based; unicode escapes earlier on the line shift them, so the nearest
        occurrence of the token text wins when the column does not match.
        """
        line_no, col = tok.position.line, tok.position.column
        text = lines[line_no - 1]
        value = tok.value
        for guess in (col - 1, col):
            if guess >= 0 and text[guess:guess + len(value)] == value:
                return line_starts[line_no - 1] + guess
        hits = []
        i = text.find(value)
        while i != -1:
            hits.append(i)
            i = text.find(value, i + 1)
        best = min(hits, key=lambda h: abs(h - (col - 1))) if hits else max(col - 1, 0)
        return line_starts[line_no - 1] + best

    @staticmethod
    def _join_values(tokens: List[Any]) -> str:
        return "".join(t.value for t in tokens if t.value != ";")

    # ---------------- Depth-0 items ----------------

    def _top_level_items(self, tokens: List[Any]) -> List[List[Any]]:
        """
        Group tokens into depth-0 declarations. An item ends at a depth-0 ';'
        or at the '}' that closes a type body. Braces that appear before the
        type keyword (annotation array values) do not end an item.
        """
        items: List[List[Any]] = []
        current: List[Any] = []
        depth = 0
        is_type = False

        for i, tok in enumerate(tokens):
            current.append(tok)
            if depth == 0 and self._is_type_keyword(tokens, i):
                is_type = True
            if not isinstance(tok, javalang.tokenizer.Separator):
                continue

            if tok.value == "{":
                depth += 1
            elif tok.value == "}":
                depth = max(depth - 1, 0)
                if depth == 0 and is_type:
                    items.append(current)
                    current, is_type = [], False
            elif tok.value == ";" and depth == 0:
                items.append(current)
                current, is_type = [], False

        if current:
            items.append(current)
        return items

    def _import_from_item(self, item: List[Any]) -> ImportDecl:
        rest = item[1:]
        is_static = bool(rest) and isinstance(rest[0], javalang.tokenizer.Modifier) and rest[0].value == "static"
        if is_static:
            rest = rest[1:]
        return ImportDecl(name=self._join_values(rest), is_static=is_static)

    def _describe_type(self, item: List[Any], offset: Callable[[Any], int]) -> Optional[Dict[str, Any]]:
        """
        Header facts of a depth-0 type declaration, or None when the item
        is not one (stray statements, empty ';').
        """
        paren = brace = 0
        k = None
        for i, tok in enumerate(item):
            if isinstance(tok, javalang.tokenizer.Separator):
                if tok.value == "(":
                    paren += 1
                elif tok.value == ")":
                    paren = max(paren - 1, 0)
                elif tok.value == "{":
                    if paren == 0 and brace == 0:
                        break
                    brace += 1
                elif tok.value == "}":
                    brace = max(brace - 1, 0)
                continue
            if paren == 0 and brace == 0 and self._is_type_keyword(item, i):
                k = i
                break

        if k is None or k + 1 >= len(item):
            return None
        name_tok = item[k + 1]
        if not isinstance(name_tok, javalang.tokenizer.Identifier):
            return None

        modifiers: List[str] = []
        visibility_tok = None
        anchor_tok = None
        paren = 0
        for tok in item[:k]:
            if self._is_sep(tok, "("):
                paren += 1
                continue
            if self._is_sep(tok, ")"):
                paren = max(paren - 1, 0)
                continue
            if paren or not isinstance(tok, javalang.tokenizer.Modifier):
                continue
            modifiers.append(tok.value)
            if tok.value in self.VISIBILITY_MODIFIERS:
                if visibility_tok is None:
                    visibility_tok = tok
            elif anchor_tok is None:
                anchor_tok = tok

        keyword = item[k]
        annotation_type = k > 0 and isinstance(item[k - 1], javalang.tokenizer.Annotation)
        if anchor_tok is None:
            anchor_tok = item[k - 1] if annotation_type else keyword
        anchor_word = "@interface" if anchor_tok.value == "@" else anchor_tok.value

        return {
            "name": name_tok.value,
            "kind": keyword.value,
            "visibility": visibility_tok.value if visibility_tok is not None else "package",
            "visibility_line": visibility_tok.position.line if visibility_tok is not None else None,
            "modifiers": tuple(modifiers),
            "header_line": item[0].position.line,
            "keyword_line": keyword.position.line,
            "visibility_offset": offset(visibility_tok) if visibility_tok is not None else None,
            "anchor": (anchor_tok.position.line, anchor_word),
            "anchor_offset": offset(anchor_tok),
            "declares_main": self._declares_main(item, k),
        }

    def _declares_main(self, item: List[Any], start: int) -> bool:
        """
        True when the type body has a direct member
        `public static void main(` (modifier order free, annotations allowed).
        """
        depth = 0
        mods: Set[str] = set()
        for i in range(start, len(item)):
            tok = item[i]
            if isinstance(tok, javalang.tokenizer.Separator):
                if tok.value in ("{", "}"):
                    depth += 1 if tok.value == "{" else -1
                    mods = set()
                elif tok.value == ";" and depth == 1:
                    mods = set()
                continue
            if depth != 1:
                continue
            if isinstance(tok, javalang.tokenizer.Modifier):
                mods.add(tok.value)
            elif (
                self._is_keyword(tok, "void")
                and i + 2 < len(item)
                and isinstance(item[i + 1], javalang.tokenizer.Identifier)
                and item[i + 1].value == "main"
                and self._is_sep(item[i + 2], "(")
                and {"public", "static"} <= mods
            ):
                return True
        return False

    # ---------------- Parsing entry points ----------------

    def parse_unit(self, code: str) -> CompilationUnit:
        code = code.replace("\r\n", "\n").replace("\r", "\n")
        lines = code.split("\n")
        line_starts = self._line_starts(lines)
        items = self._top_level_items(self.tokenize(code))

        def offset(tok) -> int:
            return self._offset(lines, line_starts, tok)

        package = None
        imports: List[ImportDecl] = []
        cuts: List[Tuple[int, int]] = []
        headers: List[Dict[str, Any]] = []
        prev_end = 0

        for item in items:
            first = item[0]
            item_end = offset(item[-1]) + len(item[-1].value)
            if self._is_keyword(first, "package"):
                package = self._join_values(item[1:])
                cuts.append(self._directive_span(code, offset(first), item_end, cuts))
            elif self._is_keyword(first, "import"):
                imports.append(self._import_from_item(item))
                cuts.append(self._directive_span(code, offset(first), item_end, cuts))
            else:
                info = self._describe_type(item, offset)
                if info:
                    info["start"] = self._type_start(code, offset(first), prev_end)
                    headers.append(info)
            prev_end = item_end

        bounds = [info.pop("start") for info in headers] + [len(code)]
        types: List[TypeDecl] = []
        for idx, info in enumerate(headers):
            span = (bounds[idx], bounds[idx + 1])
            body = render_span(code, span[0], span[1], cuts).rstrip()
            types.append(TypeDecl(span=span, body_lines=tuple(body.split("\n")), **info))

        lead = render_span(code, 0, bounds[0], cuts)

        return CompilationUnit(
            code=code,
            package=package,
            imports=imports,
            types=types,
            directive_spans=tuple(cuts),
            lead_lines=tuple(trim_blank_edges(lead.split("\n"))),
        )

    @staticmethod
    def _type_start(code: str, first: int, prev_end: int) -> int:
        """
        Where a type's text begins: the start of its header line, or right
        after the previous declaration when that one ends on the same line.
        """
        line_start = code.rfind("\n", 0, first) + 1
        if prev_end <= line_start:
            return line_start
        start = prev_end
        while start < first and code[start] in " \t":
            start += 1
        return start

    @staticmethod
    def _directive_span(code: str, start: int, end: int, cuts: List[Tuple[int, int]]) -> Tuple[int, int]:
        """
        Range removed for a package/import declaration. A declaration alone on
        its line takes the whole line with it; one that shares the line with
        other code only takes its own tokens and the blanks after them.
        """
        line_start = code.rfind("\n", 0, start) + 1
        owns_line = not code[line_start:start].strip() or (
            bool(cuts) and cuts[-1][0] <= line_start and cuts[-1][1] == start
        )
        while end < len(code) and code[end] in " \t":
            end += 1
        if owns_line:
            if cuts and cuts[-1][1] == start:
                line_start = start
            if end == len(code) or code[end] == "\n":
                return (line_start, min(end + 1, len(code)))
            return (line_start, end)
        return (start, end)

    def collect_type_names(self, code: str) -> Set[str]:
        """
        Every declared type name, nested and local ones included.
        """
        tokens = self.tokenize(code.replace("\r\n", "\n"))
        names: Set[str] = set()
        for i in range(len(tokens) - 1):
            if self._is_type_keyword(tokens, i) and isinstance(tokens[i + 1], javalang.tokenizer.Identifier):
                names.add(tokens[i + 1].value)
        return names

    # ---------------- Visibility rewrite ----------------

    def public_edit(self, decl: TypeDecl) -> Optional[Edit]:
        """
        Edit giving `decl` a public header, None when it already has one.
        private/protected are replaced, a missing modifier is inserted before
        the first non-visibility modifier (or the kind keyword).
        """
        if decl.is_public:
            return None
        if decl.visibility_offset is not None:
            return (decl.visibility_offset, len(decl.visibility), "public")
        return (decl.anchor_offset, 0, "public ")

    def strip_public_edit(self, code: str, decl: TypeDecl) -> Optional[Edit]:
        """Edit dropping `public` (and the blanks after it) from the header."""
        if not decl.is_public or decl.visibility_offset is None:
            return None
        end = decl.visibility_offset + len("public")
        while end < len(code) and code[end] in " \t":
            end += 1
        return (decl.visibility_offset, end - decl.visibility_offset, "")

    def public_body(self, unit: CompilationUnit, decl: TypeDecl) -> List[str]:
        edit = self.public_edit(decl)
        text = unit.text(decl.span[0], decl.span[1], [edit] if edit else [])
        return text.rstrip().split("\n")

    def demoted_body(self, unit: CompilationUnit) -> List[str]:
        """The unit's body with `public` stripped from every top-level type."""
        edits = [self.strip_public_edit(unit.code, decl) for decl in unit.types]
        return unit.body_lines([e for e in edits if e])
