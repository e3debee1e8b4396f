"""Line-oriented transliteration of Java, JavaScript and C-family code to Python.

Braces drive indentation: a header ending in ``{`` opens a block and a
leading ``}`` closes one. Lines no rule recognizes are kept as comments
marked for manual conversion, so every source line shows up in the output.
"""
import ast
import re

from app.services.detection import canonical_language

INDENT = "    "
MANUAL = "TODO: convert manually"

_STRING_RE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`')
_TEMPLATE_EXPR_RE = re.compile(r"\$\{([^}]*)\}")
_QUOTES = "\"'`"

# Applied outside string literals, in order
_OPERATOR_SUBS = [
    (re.compile(r"!=="), "!="),
    (re.compile(r"==="), "=="),
    (re.compile(r"\s*&&\s*"), " and "),
    (re.compile(r"\s*\|\|\s*"), " or "),
    (re.compile(r"!(?!=)\s*"), "not "),
    (re.compile(r"\btrue\b"), "True"),
    (re.compile(r"\bfalse\b"), "False"),
    (re.compile(r"\b(?:null|nullptr|NULL|undefined)\b"), "None"),
    (re.compile(r"\bthis\."), "self."),
    (re.compile(r"\bnew\s+(?=[A-Z]\w*\s*\()"), ""),
    (re.compile(r"(\b[\w.]+)\.(?:length|size)\(\)"), r"len(\1)"),
    (re.compile(r"(\b[\w.]+)\.(?:length|Length|Count)\b"), r"len(\1)"),
]

# (pattern, replacement, module to import)
_CALL_SUBS = [
    (r"\bMath\.max\(", "max(", None),
    (r"\bMath\.min\(", "min(", None),
    (r"\bMath\.abs\(", "abs(", None),
    (r"\bMath\.pow\(", "pow(", None),
    (r"\bMath\.round\(", "round(", None),
    (r"\bMath\.(sqrt|floor|ceil|log|sin|cos|tan)\(", r"math.\1(", "math"),
    (r"\bMath\.PI\b", "math.pi", "math"),
    (r"\bMath\.random\(\)", "random.random()", "random"),
    (r"\b(?:Integer\.parseInt|parseInt|int\.Parse|stoi|atoi)\(", "int(", None),
    (r"\b(?:Double\.parseDouble|parseFloat|double\.Parse|stod|atof)\(", "float(", None),
    (r"\b(?:String\.valueOf|to_string)\(", "str(", None),
    (r"\bJSON\.stringify\(", "json.dumps(", "json"),
    (r"\bJSON\.parse\(", "json.loads(", "json"),
    (r"\.(?:toUpperCase|ToUpper)\(\)", ".upper()", None),
    (r"\.(?:toLowerCase|ToLower)\(\)", ".lower()", None),
    (r"\.(?:trim|Trim)\(\)", ".strip()", None),
    (r"\.push\(", ".append(", None),
]
_CALL_SUBS = [(re.compile(p), r, m) for p, r, m in _CALL_SUBS]

_FOR_OF_RE = re.compile(r"^(?:const|let|var)\s+(?P<target>\w+|\[[^\]]*\])\s+(?:of|in)\s+(?P<iterable>.+)$")
_FOR_COLON_RE = re.compile(r"^(?:final\s+|const\s+)?[\w:<>,\[\]]+\s*[&*]?\s+(?P<target>\w+)\s*:\s*(?P<iterable>.+)$")
_FOREACH_IN_RE = re.compile(r"^(?:var|[\w<>,\[\]]+)\s+(?P<target>\w+)\s+in\s+(?P<iterable>.+)$")
_FOR_INIT_RE = re.compile(r"^(?:[\w:<>]+\s+)?(?P<var>\w+)\s*=\s*(?P<start>.+)$")
_FOR_COND_RE = re.compile(r"^(?P<var>\w+)\s*(?P<op><=|<|>=|>)\s*(?P<end>.+)$")
_FOR_STEP_RE = re.compile(
    r"^(?:(?P<var>\w+)\s*(?P<post>\+\+|--)|(?P<pre>\+\+|--)\s*(?P<var2>\w+)"
    r"|(?P<var3>\w+)\s*(?P<aop>[+-])=\s*(?P<amount>\d+))$"
)
_CASE_RE = re.compile(r"^(?:case\s+(?P<value>.+?)|default)\s*:(?!:)(?P<rest>.*)$")
_INCREMENT_RE = re.compile(r"^(?P<pre>\+\+|--)?(?P<target>[\w.\[\]]+?)(?P<post>\+\+|--)?$")
_ASSIGN_RE = re.compile(r"^(?P<target>[\w.\[\]\"']+)\s*(?P<op>[+\-*/%^&|]|<<|>>)?=(?!=)\s*(?P<value>.+)$")
_CALL_RE = re.compile(r"^(?:await\s+)?[\w.$]+(?:\[[^\]]*\])*\s*\(.*\)$")

_ACCESS = {"public", "private", "protected", "internal"}
_NOT_TYPES = {"return", "new", "else", "throw", "case", "await", "delete", "goto", "yield", "typeof"}
_NUMERIC_TYPES = {"int", "long", "short", "byte", "double", "float", "size_t", "decimal", "unsigned"}
_LIST_TYPES = {"vector", "list", "ArrayList", "LinkedList", "List", "Vector", "Array", "deque"}
_MAP_TYPES = {"map", "unordered_map", "Map", "HashMap", "TreeMap", "Dictionary", "LinkedHashMap"}
_SET_TYPES = {"set", "unordered_set", "Set", "HashSet", "TreeSet"}

_TYPE_NAMES = (
    r"(?:long\s+long|unsigned\s+\w+|long|int|short|byte|double|float|char|bool|boolean|auto|var|string"
    r"|size_t|decimal|object|dynamic|(?:std::)?\w+\s*<[^=;]*>|std::\w+|[A-Z]\w*)"
)
_DECL_RE = re.compile(
    r"^(?:(?:const|final|static|readonly|private|public|protected|internal|volatile|constexpr)\s+)*"
    rf"(?P<type>{_TYPE_NAMES}(?:\s*\[\s*\])*)(?:\s*[*&]+\s*|\s+)(?P<name>\w+)\s*"
    r"(?:\[(?P<size>[^\]]*)\])?\s*(?:=\s*(?P<value>.+))?$"
)
_TYPED_FUNCTION_RE = re.compile(
    r"^(?P<mods>(?:(?:public|private|protected|internal|static|final|abstract|synchronized|virtual"
    r"|override|async|inline|extern|const|unsafe)\s+)*)"
    r"(?P<rtype>[\w:<>\[\],]+(?:\s*[*&]+)?)\s+[*&]*(?P<name>[\w:~]+)\s*\((?P<params>[^)]*)\)"
    r"(?:\s*const)?(?:\s*throws\s+[\w.,\s]+)?$"
)
_TYPED_CLASS_RE = re.compile(
    r"^(?:(?:public|private|protected|internal|static|final|abstract|sealed|partial)\s+)*"
    r"(?:class|struct|interface)\s+(?P<name>\w+)(?:<[^>]*>)?"
    r"(?:\s*(?::|extends)\s*(?:public\s+)?(?P<base>[\w.]+))?"
)
_MAIN_RE = re.compile(r"static\s+(?:async\s+)?[\w<>]+\s+[mM]ain\s*\(")

# Source constructs with no line-level Python rendering: lambdas, ternaries, function expressions
_FOREIGN_RE = re.compile(r"=>|->|\?|\bfunction\b\s*\*?\s*\(|\[[&=]?\]\s*\(")
# unary address-of / dereference
_POINTER_RE = re.compile(r"(?:^|[=(,\[]|\breturn\b)\s*[*&]\s*[\w(]")

# Block headers that only parse next to their sibling clause
_HEADER_BEFORE = {
    "elif": "if 0:\n    pass\n",
    "else": "if 0:\n    pass\n",
    "except": "try:\n    pass\n",
    "finally": "try:\n    pass\n",
}
_HEADER_AFTER = {"try": "\nexcept Exception:\n    pass"}


def _walk(text: str):
    """Yield (index, char, depth) for characters outside string literals."""
    depth, quote, i = 0, None, 0
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        else:
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
            yield i, ch, depth
        i += 1


def _split_top(text: str, sep: str) -> list[str]:
    """Split on `sep` where it appears outside strings and brackets."""
    parts, start, skip_until = [], 0, -1
    for i, _, depth in _walk(text):
        if i < skip_until:
            continue
        if depth == 0 and text.startswith(sep, i):
            parts.append(text[start:i])
            start = skip_until = i + len(sep)
    parts.append(text[start:])
    return parts


def _take_parens(text: str, start: int) -> tuple[str, str]:
    """Return the contents of the parenthesis opened at `start` and what follows it."""
    for i, ch, depth in _walk(text):
        if i > start and ch == ")" and depth == 0:
            return text[start + 1:i].strip(), text[i + 1:].strip()
    return text[start + 1:].strip(), ""


def _take_block(text: str) -> tuple[str, str, bool]:
    """Split ``{ body } rest``; the flag is False when the brace never closes."""
    for i, ch, depth in _walk(text):
        if i > 0 and ch == "}" and depth == 0:
            return text[1:i].strip(), text[i + 1:].strip(), True
    return text[1:].strip(), "", False


def _open_braces(text: str) -> int:
    return sum(1 if ch == "{" else -1 for _, ch, _ in _walk(text) if ch in "{}")


def _parses(line: str) -> bool:
    """Whether one emitted line is valid Python; block headers get a stub body."""
    text = line.strip()
    if not text or text.startswith(("#", "@")):
        return True
    if _FOREIGN_RE.search(_STRING_RE.sub('""', text)):
        return False
    if text.endswith(":"):
        keyword = re.match(r"\w*", text).group(0)
        if keyword == "case":
            text = f"match _:\n    {text}\n        pass"
        elif keyword == "match":
            text += "\n    case _:\n        pass"
        else:
            text = _HEADER_BEFORE.get(keyword, "") + text + "\n    pass" + _HEADER_AFTER.get(keyword, "")
    try:
        ast.parse(text)
    except (SyntaxError, ValueError):
        return False
    return True


def _split_comment(line: str) -> tuple[str, str]:
    for i, _, _ in _walk(line):
        if line.startswith("//", i):
            return line[:i].rstrip(), line[i + 2:].strip()
    return line, ""


def _map_code(text: str, fn) -> str:
    """Apply `fn` to the parts of `text` outside string literals."""
    out, pos = [], 0
    for m in _STRING_RE.finditer(text):
        out.append(fn(text[pos:m.start()]))
        out.append(m.group(0))
        pos = m.end()
    out.append(fn(text[pos:]))
    return "".join(out)


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def _literal_body(literal: str) -> str:
    body = literal[1:-1]
    if literal[0] == "'":
        body = body.replace("\\'", "'").replace('"', '\\"')
    return _escape_braces(body)


def _is_literal(text: str) -> bool:
    return bool(_STRING_RE.fullmatch(text)) and not text.startswith("`")


def _template_to_fstring(literal: str, convert) -> str:
    body = literal[1:-1]
    out, pos = [], 0
    for m in _TEMPLATE_EXPR_RE.finditer(body):
        out.append(_escape_braces(body[pos:m.start()]).replace('"', '\\"'))
        out.append("{" + convert(m.group(1)) + "}")
        pos = m.end()
    out.append(_escape_braces(body[pos:]).replace('"', '\\"'))
    return 'f"' + "".join(out) + '"'


def _concat_to_fstring(expr: str, convert) -> str:
    """`"a" + b + "c"` becomes f"a{b}c"; leading non-string terms stay one addition."""
    parts = [p.strip() for p in _split_top(expr, "+")]
    literal_at = [i for i, p in enumerate(parts) if _is_literal(p)]
    if len(parts) < 2 or not literal_at or "" in parts:
        return convert(expr)
    first = literal_at[0]
    if first > 1:
        parts = [" + ".join(parts[:first]), *parts[first:]]
    pieces = []
    for part in parts:
        pieces.append(_literal_body(part) if _is_literal(part) else "{" + convert(part) + "}")
    return 'f"' + "".join(pieces) + '"'


def _shift(expr: str, delta: int) -> str:
    if re.fullmatch(r"-?\d+", expr):
        return str(int(expr) + delta)
    return f"{expr} + 1" if delta > 0 else f"{expr} - 1"


def _base_type(type_name: str) -> str:
    name = re.sub(r"^std::", "", type_name.strip())
    return re.split(r"[\s<\[]", name, maxsplit=1)[0]


def _zero(type_name: str) -> str:
    base = _base_type(type_name)
    if base in _NUMERIC_TYPES or type_name.startswith("unsigned"):
        return "0"
    if base in ("bool", "boolean"):
        return "False"
    if base in ("char", "string", "String"):
        return '""'
    return "None"


def _default_for(type_name: str) -> str:
    if type_name.rstrip().endswith("]"):
        return "[]"
    base = _base_type(type_name)
    if base in _LIST_TYPES:
        return "[]"
    if base in _MAP_TYPES:
        return "{}"
    if base in _SET_TYPES:
        return "set()"
    return _zero(type_name)


def _param_names(params: str) -> list[str]:
    names = []
    for param in _split_top(params, ","):
        param = param.split("=", 1)[0].strip()
        if not param or param == "void":
            continue
        words = re.findall(r"\w+", param)
        if words:
            names.append(("*" if "..." in param else "") + words[-1])
    return names


class _Block:
    __slots__ = ("kind", "start", "header_at", "visible", "name", "trailer")

    def __init__(self, kind, start, header_at=None, visible=True, name=None, trailer=()):
        self.kind = kind
        self.start = start
        self.header_at = header_at
        self.visible = visible
        self.name = name
        self.trailer = list(trailer)


class BraceTranslator:
    """Shared machinery for brace-delimited languages.

    Subclasses supply the language-specific hooks: convert_special,
    convert_class, convert_function, convert_output and convert_declaration.
    Each hook emits its own lines and returns True when it handled the
    statement.
    """

    entry_point = None
    extra_subs: list = []

    def __init__(self, language: str):
        self.language = language
        self.lines: list[str] = []
        self.blocks: list[_Block] = []
        self.imports: set[str] = set()
        self.functions: list[str] = []
        self.statements = 0
        self.in_comment = False

    def translate(self, code: str) -> str:
        self.prepare(code)
        for raw in code.split("\n"):
            self.feed(raw.strip())
        while self.blocks:
            self.close_block()
        return self.render()

    def prepare(self, code: str) -> None:
        pass

    # output

    @property
    def depth(self) -> int:
        return sum(1 for block in self.blocks if block.visible)

    def emit(self, text: str, statement: bool = True, offset: int = 0) -> None:
        self.lines.append(INDENT * (self.depth + offset) + text)
        if statement:
            self.statements += 1

    def comment(self, text: str) -> None:
        if text:
            self.emit("# " + text, statement=False)

    def open_block(self, header: str, kind: str = "block", name=None, trailer=()) -> None:
        self.emit(header)
        self.blocks.append(_Block(kind, self.statements, len(self.lines) - 1, name=name, trailer=trailer))

    def open_hidden(self, kind: str, name=None) -> None:
        self.blocks.append(_Block(kind, self.statements, visible=False, name=name))

    def close_block(self) -> _Block:
        block = self.blocks.pop()
        if block.visible:
            for text, offset in block.trailer:
                self.emit(text, offset=offset)
            if self.statements == block.start:
                self.emit("pass", offset=1)
        return block

    def close_scope(self) -> None:
        if self.blocks and self.blocks[-1].kind == "case":
            self.close_block()
        if self.blocks:
            self.close_block()

    def enclosing_class(self):
        if self.blocks and self.blocks[-1].kind == "class" and self.blocks[-1].visible:
            return self.blocks[-1]
        return None

    def render(self) -> str:
        while self.lines and not self.lines[-1].strip():
            self.lines.pop()
        while self.lines and not self.lines[0].strip():
            self.lines.pop(0)
        out = [f"# Translated from {self.language} to Python", ""]
        if self.imports:
            out += [f"import {module}" for module in sorted(self.imports)] + ["", ""]
        out += self.lines or ["pass"]
        if self.entry_point and self.entry_point in self.functions:
            out += ["", "", 'if __name__ == "__main__":', f"{INDENT}{self.entry_point}()"]
        return "\n".join(out)

    # expressions

    def expr(self, text: str) -> str:
        return _map_code(text.strip(), self._convert_code)

    def _convert_code(self, chunk: str) -> str:
        for pattern, replacement in _OPERATOR_SUBS:
            chunk = pattern.sub(replacement, chunk)
        for pattern, replacement, module in [*_CALL_SUBS, *self.extra_subs]:
            chunk, count = pattern.subn(replacement, chunk)
            if count and module:
                self.imports.add(module)
        return chunk

    def value(self, text: str) -> str:
        return self.expr(text)

    def concat(self, text: str) -> str:
        return _concat_to_fstring(text, self.expr)

    # statements

    def feed(self, line: str) -> None:
        if self.in_comment:
            if "*/" in line:
                self.in_comment = False
                line = line.split("*/", 1)[0]
            self.comment(line.strip("/* "))
            return
        if not line:
            if self.lines and self.lines[-1] != "":
                self.lines.append("")
            return
        if line.startswith("/*"):
            self.in_comment = "*/" not in line
            self.comment(line[2:].split("*/", 1)[0].strip("* "))
            return
        if line.startswith("//"):
            self.comment(line[2:].strip())
            return

        line, trailing = _split_comment(line)
        before = len(self.lines)
        self.feed_code(line)
        if trailing:
            if len(self.lines) > before:
                self.lines[-1] += "  # " + trailing
            else:
                self.comment(trailing)

    def feed_code(self, line: str) -> None:
        while line.startswith("}"):
            rest = line[1:].lstrip()
            m = re.match(r"while\s*\(", rest)
            if m and self.blocks and self.blocks[-1].kind == "do":
                cond, _ = _take_parens(rest, m.end() - 1)
                self.blocks[-1].trailer = self.do_trailer(cond)
                rest = ""
            self.close_scope()
            line = "" if re.fullmatch(r"[);,\s]*", rest) else rest
        if not line or line == "{":
            return

        segments = [s.strip() for s in _split_top(line, ";")]
        for index, segment in enumerate(segments):
            if segment:
                self.statement(segment, terminated=index < len(segments) - 1)

    def accepts(self, line: str) -> bool:
        return _parses(line)

    def statement(self, code: str, terminated: bool = True) -> None:
        opens = code.endswith("{")
        if opens:
            code = code[:-1].rstrip()
        if not code:
            return
        mark = (len(self.lines), self.statements, list(self.blocks), set(self.imports), len(self.functions))
        if self.convert(code, opens, terminated) and all(self.accepts(line) for line in self.lines[mark[0]:]):
            return

        # undo whatever the failed conversion emitted and keep the source line instead
        lines_at, self.statements, self.blocks, self.imports, functions_at = mark
        del self.lines[lines_at:]
        del self.functions[functions_at:]
        self.emit(f"# {code}{' {' if opens else ''}  # {MANUAL}", statement=False)
        for _ in range(opens + max(_open_braces(code), 0)):
            self.open_hidden("unknown")

    def header(self, text: str, rest: str, opens: bool, terminated: bool, kind: str = "block", **kw) -> None:
        self.open_block(text, kind, **kw)
        if rest.startswith("{"):
            self.inline_body(rest, opens, terminated)
        elif rest:
            self.statement(rest)
            if not opens:
                self.close_block()
        elif not opens and terminated:
            self.close_block()

    def inline_body(self, rest: str, opens: bool, terminated: bool) -> None:
        """`{ a; b; } tail` on the header's line: the statements go inside the block just opened."""
        body, tail, closed = _take_block(rest)
        self.feed_code(body)
        if not closed:
            # the closing brace comes on a later line
            return
        m = re.match(r"while\s*\(", tail)
        if m and self.blocks[-1].kind == "do":
            cond, tail = _take_parens(tail, m.end() - 1)
            self.blocks[-1].trailer = self.do_trailer(cond)
        self.close_scope()
        if tail:
            self.statement(tail + (" {" if opens else ""), terminated)

    def do_trailer(self, cond: str) -> list:
        check = f"if not ({self.expr(cond)}):"
        if not self.accepts(check):
            return [(f"# while ({cond})  # {MANUAL}", 1), ("break", 1)]
        return [(check, 1), ("break", 2)]

    def convert(self, code: str, opens: bool, terminated: bool) -> bool:
        if self.convert_special(code, opens, terminated):
            return True

        m = re.match(r"else\s+if\s*\(", code)
        if m:
            cond, rest = _take_parens(code, m.end() - 1)
            self.header(f"elif {self.expr(cond)}:", rest, opens, terminated)
            return True
        if code == "else" or code.startswith("else "):
            self.header("else:", code[4:].strip(), opens, terminated)
            return True
        m = re.match(r"(if|while)\s*\(", code)
        if m:
            cond, rest = _take_parens(code, m.end() - 1)
            self.header(f"{m.group(1)} {self.expr(cond)}:", rest, opens, terminated)
            return True
        m = re.match(r"(?:for|foreach)\s*\(", code)
        if m:
            inner, rest = _take_parens(code, m.end() - 1)
            return self.convert_for(inner, rest, opens, terminated)
        m = re.fullmatch(r"do\s*(\{.*)?", code)
        if m:
            self.header("while True:", m.group(1) or "", opens, False, kind="do")
            return True
        m = re.match(r"switch\s*\(", code)
        if m:
            value, rest = _take_parens(code, m.end() - 1)
            self.header(f"match {self.expr(value)}:", rest if rest.startswith("{") else "", opens, False, kind="switch")
            return True
        m = _CASE_RE.match(code)
        if m and self.blocks and self.blocks[-1].kind in ("switch", "case"):
            self.convert_case(m["value"], m["rest"].strip())
            return True
        if code in ("try", "finally"):
            self.header(f"{code}:", "", opens, False)
            return True
        if re.match(r"catch\b", code):
            params = _take_parens(code, code.index("("))[0] if "(" in code else ""
            names = re.findall(r"\w+", params)
            target = f" as {names[-1]}" if names else ""
            self.header(f"except Exception{target}:", "", opens, False)
            return True

        m = re.match(r"return\b\s*(.*)$", code)
        if m:
            self.emit(f"return {self.value(m.group(1))}".rstrip() if m.group(1) else "return")
            return True
        if code in ("break", "continue"):
            if not (code == "break" and self.blocks and self.blocks[-1].kind == "case"):
                self.emit(code)
            return True
        m = re.match(r"throw\s+new\s+[\w.]+\s*\((.*)\)$", code)
        if m:
            self.emit(f"raise Exception({self.expr(m.group(1))})")
            return True
        m = re.match(r"throw\s+(.+)$", code)
        if m:
            self.emit(f"raise {self.expr(m.group(1))}")
            return True

        if opens or not terminated:
            if self.convert_class(code, opens) or self.convert_function(code, opens):
                return True
        if self.convert_output(code):
            return True
        if self.convert_declaration(code):
            return True

        if opens:
            # an assignment or call that opens a block holds a function expression
            return False
        python = self.simple_statement(code)
        if python is not None:
            self.emit(python)
            return True
        return False

    def simple_statement(self, code: str):
        m = _INCREMENT_RE.match(code)
        if m and bool(m["pre"]) != bool(m["post"]):
            op = "+=" if "+" in (m["pre"] or m["post"]) else "-="
            return f"{self.expr(m['target'])} {op} 1"
        m = _ASSIGN_RE.match(code)
        if m:
            return f"{self.expr(m['target'])} {m['op'] or ''}= {self.value(m['value'])}"
        if _CALL_RE.match(code):
            return self.expr(code)
        return None

    def convert_for(self, inner: str, rest: str, opens: bool, terminated: bool) -> bool:
        m = _FOR_OF_RE.match(inner) or _FOREACH_IN_RE.match(inner) or _FOR_COLON_RE.match(inner)
        if m:
            target = m["target"].strip("[]")
            self.header(f"for {target} in {self.expr(m['iterable'])}:", rest, opens, terminated)
            return True

        parts = [p.strip() for p in _split_top(inner, ";")]
        if len(parts) != 3:
            return False
        init, cond, step = parts
        loop = self.range_loop(init, cond, step)
        if loop:
            self.header(f"for {loop[0]} in range({loop[1]}):", rest, opens, terminated)
            return True

        if init:
            self.statement(init)
        trailer = []
        if step:
            python = self.simple_statement(step)
            trailer.append((python if python and self.accepts(python) else f"# {step}  # {MANUAL}", 1))
        self.header(f"while {self.expr(cond) if cond else 'True'}:", rest, opens, terminated, trailer=trailer)
        return True

    def range_loop(self, init: str, cond: str, step: str):
        mi, mc, ms = _FOR_INIT_RE.match(init), _FOR_COND_RE.match(cond), _FOR_STEP_RE.match(step)
        if not (mi and mc and ms):
            return None
        var = mi["var"]
        if mc["var"] != var or (ms["var"] or ms["var2"] or ms["var3"]) != var:
            return None

        descending = "-" in (ms["post"] or ms["pre"] or ms["aop"])
        if descending != (mc["op"] in (">", ">=")):
            return None
        amount = ms["amount"] or "1"
        step_value = f"-{amount}" if descending else amount

        start, end = self.expr(mi["start"]), self.expr(mc["end"])
        stop = {"<": end, ">": end, "<=": _shift(end, 1), ">=": _shift(end, -1)}[mc["op"]]
        if step_value == "1":
            return var, stop if start == "0" else f"{start}, {stop}"
        return var, f"{start}, {stop}, {step_value}"

    def convert_case(self, value, rest: str) -> None:
        label = self.expr(value) if value is not None else "_"
        top = self.blocks[-1]
        if top.kind == "case":
            if self.statements == top.start and value is not None and top.name != "_":
                # stacked labels share one body
                top.name = f"{top.name} | {label}"
                self.lines[top.header_at] = INDENT * (self.depth - 1) + f"case {top.name}:"
                if rest:
                    self.statement(rest)
                return
            self.close_block()
        self.open_block(f"case {label}:", kind="case", name=label)
        if rest:
            self.statement(rest)

    def open_function(self, name, params, is_async=False, method=False, static=False) -> None:
        if method and static:
            self.emit("@staticmethod")
        elif method:
            params = ["self", *params]
        self.functions.append(name)
        prefix = "async def" if is_async else "def"
        self.open_block(f"{prefix} {name}({', '.join(params)}):", kind="function", name=name)

    # language hooks

    def convert_special(self, code: str, opens: bool, terminated: bool) -> bool:
        return False

    def convert_class(self, code: str, opens: bool) -> bool:
        return False

    def convert_function(self, code: str, opens: bool) -> bool:
        return False

    def convert_output(self, code: str) -> bool:
        return False

    def convert_declaration(self, code: str) -> bool:
        return False


class TypedTranslator(BraceTranslator):
    """Statically typed languages: declarations carry a type, main() is the entry point."""

    entry_point = "main"

    def prepare(self, code: str) -> None:
        # the innermost class still open where main() is declared
        self.main_class = None
        main = _MAIN_RE.search(code)
        if main:
            for m in re.finditer(r"\b(?:class|struct)\s+(\w+)", code[:main.start()]):
                between = code[m.end():main.start()]
                if between.count("{") > between.count("}"):
                    self.main_class = m.group(1)

    def value(self, text: str) -> str:
        text = text.strip()
        m = re.fullmatch(r"(?:new\s+[\w<>]+\s*\[\s*\]\s*)?\{(.*)\}", text)
        if m:
            items = [self.expr(p) for p in _split_top(m.group(1), ",") if p.strip()]
            return "[" + ", ".join(items) + "]"
        m = re.fullmatch(r"new\s+(\w+)\s*\[(.+)\]", text)
        if m:
            return f"[{_zero(m.group(1))}] * {self.expr(m.group(2))}"
        m = re.fullmatch(r"new\s+(\w+)\s*(?:<.*>)?\s*\((.*)\)", text)
        if m:
            name, args = m.groups()
            if name in _LIST_TYPES:
                return f"list({self.expr(args)})" if args.strip() else "[]"
            if name in _MAP_TYPES:
                return "{}"
            if name in _SET_TYPES:
                return f"set({self.expr(args)})" if args.strip() else "set()"
            return f"{name}({self.expr(args)})"
        return self.expr(text)

    def convert_class(self, code: str, opens: bool) -> bool:
        m = _TYPED_CLASS_RE.match(code)
        if not m:
            return False
        if m["name"] == self.main_class and self.enclosing_class() is None:
            # the class holding main() is flattened into module-level functions
            self.open_hidden("class", name=m["name"])
            return True
        base = f"({m['base']})" if m["base"] else ""
        self.open_block(f"class {m['name']}{base}:", kind="class", name=m["name"])
        return True

    def convert_function(self, code: str, opens: bool) -> bool:
        m = _TYPED_FUNCTION_RE.match(code)
        if not m or m["rtype"] in _NOT_TYPES:
            return False
        name = m["name"].split("::")[-1]
        mods = m["mods"].split()
        owner = self.enclosing_class()

        if m["rtype"] in _ACCESS or (owner is not None and name == owner.name):
            name = "__init__"
        elif name.startswith("~"):
            name = "__del__"
        is_main = name.lower() == "main" and owner is None
        params = [] if is_main else _param_names(m["params"])
        self.open_function(
            "main" if is_main else name,
            params,
            is_async="async" in mods,
            method=owner is not None,
            static="static" in mods,
        )
        return True

    def convert_declaration(self, code: str) -> bool:
        m = _DECL_RE.match(code)
        if not m or m["type"] in _NOT_TYPES:
            return False
        if m["value"] is not None:
            value = self.value(m["value"])
        elif m["size"] is not None:
            value = f"[{_zero(m['type'])}] * {self.expr(m['size'])}" if m["size"].strip() else "[]"
        else:
            value = _default_for(m["type"])
        self.emit(f"{m['name']} = {value}")
        return True

    def printf(self, args: str, newline: bool = False) -> str:
        parts = [p.strip() for p in _split_top(args, ",")]
        fmt = re.sub(r"%l([dfi])", r"%\1", parts[0]).replace("%n", "\\n")
        if fmt.endswith('\\n"'):
            fmt, newline = fmt[:-3] + '"', True
        values = [self.expr(p.lstrip("&")) for p in parts[1:]]
        call = fmt if not values else f"{fmt} % ({', '.join(values)}{',' if len(values) == 1 else ''})"
        return f"print({call})" if newline else f'print({call}, end="")'


class JavaTranslator(TypedTranslator):
    extra_subs = [(re.compile(r"\.add\("), ".append(", None)]

    def convert_special(self, code: str, opens: bool, terminated: bool) -> bool:
        # package and import lines have no Python counterpart
        return bool(re.match(r"(?:package|import)\s+[\w.*]+$", code)) or code.startswith("@")

    def convert_output(self, code: str) -> bool:
        m = re.fullmatch(r"System\.(?:out|err)\.(println|print|printf|format)\s*\((.*)\)", code)
        if not m:
            return False
        kind, args = m.groups()
        if kind in ("printf", "format"):
            self.emit(self.printf(args))
        elif kind == "println":
            self.emit(f"print({self.concat(args)})" if args.strip() else "print()")
        else:
            self.emit(f'print({self.concat(args)}, end="")')
        return True


class CFamilyTranslator(TypedTranslator):
    """C and C++."""

    _ENDL = {"endl", "std::endl", '"\\n"', "'\\n'"}

    def expr(self, text: str) -> str:
        return super().expr(re.sub(r"\bstd::", "", text))

    def accepts(self, line: str) -> bool:
        text = line.strip()
        if text.startswith("#"):
            return True
        return super().accepts(text) and not _POINTER_RE.search(_STRING_RE.sub('""', text))

    def convert_special(self, code: str, opens: bool, terminated: bool) -> bool:
        m = re.match(r"#\s*define\s+(\w+)\s+(.+)$", code)
        if m:
            self.emit(f"{m.group(1)} = {self.expr(m.group(2))}")
            return True
        if code.startswith("#") or re.match(r"using\s+(?:namespace\s+)?[\w:]+$", code):
            return True
        return bool(re.fullmatch(r"(?:public|private|protected)\s*:", code))

    def convert_output(self, code: str) -> bool:
        m = re.fullmatch(r"printf\s*\((.*)\)", code)
        if m:
            self.emit(self.printf(m.group(1)))
            return True
        m = re.fullmatch(r"puts\s*\((.*)\)", code)
        if m:
            self.emit(f"print({self.expr(m.group(1))})")
            return True
        m = re.fullmatch(r"scanf\s*\((.*)\)", code)
        if m:
            parts = [p.strip() for p in _split_top(m.group(1), ",")]
            targets = [self.expr(p.lstrip("&")) for p in parts[1:]]
            cast = "int" if "%d" in parts[0] else "float" if "%f" in parts[0] or "%lf" in parts[0] else None
            if len(targets) == 1:
                self.emit(f"{targets[0]} = {cast}(input())" if cast else f"{targets[0]} = input()")
            else:
                reader = f"map({cast}, input().split())" if cast else "input().split()"
                self.emit(f"{', '.join(targets)} = {reader}")
            return True
        if re.match(r"(?:std::)?cout\s*<<", code):
            self.emit(self._cout(code))
            return True
        if re.match(r"(?:std::)?cin\s*>>", code):
            targets = [self.expr(p) for p in _split_top(code, ">>")[1:]]
            if len(targets) == 1:
                self.emit(f"{targets[0]} = input()")
            else:
                self.emit(f"{', '.join(targets)} = input().split()")
            return True
        return False

    def _cout(self, code: str) -> str:
        parts = [p.strip() for p in _split_top(code, "<<")[1:]]
        newline = bool(parts) and parts[-1] in self._ENDL
        if newline:
            parts = parts[:-1]
        args = ['"\\n"' if p in self._ENDL else self.expr(p) for p in parts]
        kwargs = []
        if len(args) > 1:
            kwargs.append('sep=""')
        if not newline:
            kwargs.append('end=""')
        return f"print({', '.join(args + kwargs)})"


class CSharpTranslator(TypedTranslator):
    extra_subs = [
        (re.compile(r"\bConsole\.ReadLine\(\)"), "input()", None),
        (re.compile(r"\.Add\("), ".append(", None),
    ]

    def expr(self, text: str) -> str:
        text = re.sub(r'\$(?=")', "f", text)
        return super().expr(re.sub(r'@(?=")', "r", text))

    def convert_special(self, code: str, opens: bool, terminated: bool) -> bool:
        if re.match(r"using\s+[\w.=\s]+$", code):
            return True
        m = re.match(r"namespace\s+([\w.]+)$", code)
        if m:
            if opens:
                self.open_hidden("namespace", name=m.group(1))
            return True
        return False

    def convert_output(self, code: str) -> bool:
        m = re.fullmatch(r"Console\.(WriteLine|Write)\s*\((.*)\)", code)
        if not m:
            return False
        kind, args = m.groups()
        if kind == "WriteLine":
            self.emit(f"print({self.concat(args)})" if args.strip() else "print()")
        else:
            self.emit(f'print({self.concat(args)}, end="")')
        return True


class JavaScriptTranslator(BraceTranslator):
    """JavaScript, and TypeScript once its annotations are stripped."""

    extra_subs = [
        (re.compile(r"\bObject\.keys\((\w+)\)"), r"list(\1)", None),
        (re.compile(r"\bObject\.values\((\w+)\)"), r"list(\1.values())", None),
        (re.compile(r"\bObject\.entries\((\w+)\)"), r"\1.items()", None),
        (re.compile(r"\b([\w.]+)\.includes\(([\w.]+)\)"), r"(\2 in \1)", None),
    ]

    _FUNCTION_RE = re.compile(
        r"^(?:export\s+(?:default\s+)?)?(?P<async>async\s+)?function\s*\*?\s*(?P<name>\w+)\s*"
        r"\((?P<params>.*)\)(?:\s*:\s*[\w<>\[\]|. ]+)?$"
    )
    _METHOD_RE = re.compile(r"^(?P<static>static\s+)?(?P<async>async\s+)?(?P<name>\w+)\s*\((?P<params>.*)\)(?:\s*:\s*[\w<>\[\]|. ]+)?$")
    _CLASS_RE = re.compile(r"^(?:export\s+(?:default\s+)?)?class\s+(?P<name>\w+)(?:\s+extends\s+(?P<base>[\w.]+))?")
    _DECL_RE = re.compile(
        r"^(?:export\s+)?(?:const|let|var)\s+(?P<target>\w+|\[[^\]]*\])(?:\s*:\s*[\w<>\[\]|. ]+)?"
        r"\s*(?:=\s*(?P<value>.+))?$"
    )
    _ARROW_RE = re.compile(r"^(?P<async>async\s+)?(?:\((?P<params>[^)]*)\)|(?P<param>\w+))(?:\s*:\s*[\w<>\[\]|]+)?\s*=>\s*(?P<body>.*)$")
    _FOREACH_RE = re.compile(
        r"^(?P<items>[\w.\[\]]+)\.forEach\(\s*(?:\((?P<params>[^)]*)\)\s*=>|(?P<param>\w+)\s*=>"
        r"|function\s*\((?P<fparams>[^)]*)\))$"
    )

    def expr(self, text: str) -> str:
        text = _STRING_RE.sub(
            lambda m: _template_to_fstring(m.group(0), self.expr) if m.group(0).startswith("`") else m.group(0),
            text.strip(),
        )
        return super().expr(text)

    def params(self, params: str) -> list[str]:
        names = []
        for param in _split_top(params, ","):
            param = param.strip()
            if not param:
                continue
            name, _, default = param.partition("=")
            name = name.split(":")[0].strip().rstrip("?")
            if name.startswith("..."):
                name = "*" + name[3:]
            names.append(f"{name}={self.expr(default)}" if default.strip() else name)
        return names

    def value(self, text: str) -> str:
        text = text.strip()
        if text.startswith("{"):
            text = _map_code(text, lambda chunk: re.sub(r"([{,]\s*)(\w+)\s*:", r'\1"\2":', chunk))
        m = re.fullmatch(r"new\s+(Map|Set|Array)\s*\((.*)\)", text)
        if m:
            name, args = m.groups()
            if name == "Map":
                return "{}"
            if name == "Set":
                return f"set({self.expr(args)})" if args.strip() else "set()"
            return f"[None] * {self.expr(args)}" if args.strip() else "[]"
        return self.expr(text)

    def convert_special(self, code: str, opens: bool, terminated: bool) -> bool:
        if code in ('"use strict"', "'use strict'"):
            return True
        m = self._FOREACH_RE.match(code)
        if m:
            params = self.params(m["params"] or m["param"] or m["fparams"] or "")
            items = self.expr(m["items"])
            if len(params) >= 2:
                self.header(f"for {params[1]}, {params[0]} in enumerate({items}):", "", opens, False)
            else:
                self.header(f"for {params[0] if params else '_'} in {items}:", "", opens, False)
            return True
        return False

    def convert_class(self, code: str, opens: bool) -> bool:
        m = self._CLASS_RE.match(code)
        if not m:
            return False
        base = f"({m['base']})" if m["base"] else ""
        self.open_block(f"class {m['name']}{base}:", kind="class", name=m["name"])
        return True

    def convert_function(self, code: str, opens: bool) -> bool:
        m = self._FUNCTION_RE.match(code)
        if m:
            self.open_function(m["name"], self.params(m["params"]), is_async=bool(m["async"]))
            return True
        if self.enclosing_class() is not None:
            m = self._METHOD_RE.match(code)
            if m and m["name"] not in ("if", "for", "while", "switch", "catch"):
                name = "__init__" if m["name"] == "constructor" else m["name"]
                self.open_function(
                    name,
                    self.params(m["params"]),
                    is_async=bool(m["async"]),
                    method=True,
                    static=bool(m["static"]),
                )
                return True
        return False

    def convert_output(self, code: str) -> bool:
        if code == "console.clear()":
            self.imports.add("os")
            self.emit('os.system("cls" if os.name == "nt" else "clear")')
            return True
        m = re.fullmatch(r"console\.(log|info|debug|error|warn)\s*\((.*)\)", code)
        if not m:
            return False
        level, args = m.groups()
        parts = [self.concat(p) for p in _split_top(args, ",") if p.strip()]
        if level in ("error", "warn"):
            self.imports.add("sys")
            parts.append("file=sys.stderr")
        self.emit(f"print({', '.join(parts)})")
        return True

    def convert_declaration(self, code: str) -> bool:
        m = self._DECL_RE.match(code)
        if not m:
            return False
        target = m["target"].strip("[]").strip()
        value = m["value"]
        if value is None:
            self.emit(f"{target} = None")
            return True
        if "require(" in value:
            return False

        arrow = self._ARROW_RE.match(value.strip())
        if arrow:
            params = self.params(arrow["params"] or arrow["param"] or "")
            body = arrow["body"].strip()
            if not body:
                self.open_function(target, params, is_async=bool(arrow["async"]))
            else:
                self.emit(f"{target} = lambda {', '.join(params)}: {self.expr(body)}".replace("lambda :", "lambda:"))
            return True
        m = re.fullmatch(r"(async\s+)?function\s*\((.*)\)", value.strip())
        if m:
            self.open_function(target, self.params(m.group(2)), is_async=bool(m.group(1)))
            return True

        self.emit(f"{target} = {self.value(value)}")
        return True


TRANSLATORS = {
    "Java": JavaTranslator,
    "JavaScript": JavaScriptTranslator,
    "TypeScript": JavaScriptTranslator,
    "C": CFamilyTranslator,
    "C++": CFamilyTranslator,
    "C#": CSharpTranslator,
}


def translate_to_python(code: str, language: str) -> str:
    language = canonical_language(language)
    if language == "Python":
        return code
    translator = TRANSLATORS.get(language)
    if translator is None:
        return (
            f"# Translated from {language} to Python\n"
            "# Original code structure preserved\n\n"
            f"{code}\n\n"
            f"# TODO: Manual conversion needed for {language} specific syntax"
        )
    return translator(language).translate(code)


_IMPORT_RE = re.compile(r"^\s*(?:import\s+([\w.]+)|from\s+([\w.]+)\s+import\b)", re.MULTILINE)


def extract_python_dependencies(python_code: str) -> list[str]:
    """Top-level module names imported by the code, in first-seen order."""
    modules = []
    for plain, source in _IMPORT_RE.findall(python_code):
        module = (plain or source).split(".")[0]
        if module and module not in modules:
            modules.append(module)
    return modules
