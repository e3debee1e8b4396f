"""Offline responders: build analysis, debug and translation results without a model."""
import operator
import re

from fastapi.concurrency import run_in_threadpool

from app.services.complexity import determine_complexity
from app.services.detection import canonical_language, detect_language
from app.services.diagnostics import debug_issues, detect_common_errors, fix_code
from app.services.explainer import explain_code
from app.services.providers import Provider
from app.services.transliterate import extract_python_dependencies, translate_to_python

MAX_COMPONENTS = 8
MAX_SUGGESTIONS = 8

_ARITHMETIC_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([+\-*/])\s*(\d+(?:\.\d+)?)$")
_OPERATORS = {"+": operator.add, "-": operator.sub, "*": operator.mul, "/": operator.truediv}
_STRING_LITERAL_RE = re.compile(r"""^(["']).*\1$""")

# language -> regex capturing the printed argument
_PRINT_PATTERNS = {
    "JavaScript": re.compile(r"console\.log\s*\(\s*(.+?)\s*\)\s*;?$"),
    "TypeScript": re.compile(r"console\.log\s*\(\s*(.+?)\s*\)\s*;?$"),
    "Python": re.compile(r"print\s*\(\s*(.+?)\s*\)$"),
    "Java": re.compile(r"System\.out\.print(?:ln)?\s*\(\s*(.+?)\s*\)\s*;?$"),
    "C#": re.compile(r"Console\.Write(?:Line)?\s*\(\s*(.+?)\s*\)\s*;?$"),
    "Go": re.compile(r"fmt\.Print(?:ln|f)?\s*\(\s*(.+?)\s*\)$"),
    "Rust": re.compile(r"println!\s*\(\s*(.+?)\s*\)\s*;?$"),
}
_COUT_RE = re.compile(r"cout\s*<<\s*(.+?)\s*;")
_PRINTF_RE = re.compile(r"printf\s*\(\s*\"([^\"]*)\"(?:\s*,\s*(.+?))?\s*\)")


def _evaluate(expression: str, language: str) -> str | None:
    """Evaluate `<number> <op> <number>`; anything else returns None."""
    m = _ARITHMETIC_RE.match(expression)
    if not m:
        return None
    left, op, right = m.groups()
    try:
        result = _OPERATORS[op](float(left), float(right))
    except ZeroDivisionError:
        return None
    if result.is_integer() and not (op == "/" and language == "Python") and "." not in left + right:
        return str(int(result))
    return str(result)


def _render_printed(argument: str, language: str) -> str:
    if _STRING_LITERAL_RE.match(argument):
        return argument[1:-1]
    if language == "Python" and re.match(r"^f[\"'].*[\"']$", argument):
        return f"[F-string: {argument}]"
    value = _evaluate(argument, language)
    if value is not None:
        return value
    if re.fullmatch(r"\w+", argument):
        return f"[Variable: {argument}]"
    if "+" in argument:
        return f"[String concatenation: {argument}]"
    return f"[Expression: {argument}]"


def predict_output(code: str, language: str) -> str:
    """Best-effort console output: literals printed as-is, simple arithmetic evaluated."""
    outputs = []
    pattern = _PRINT_PATTERNS.get(language)
    for line in code.split("\n"):
        trimmed = line.strip()
        if pattern:
            m = pattern.search(trimmed)
            if m:
                outputs.append(_render_printed(m.group(1), language))
        if language in ("JavaScript", "TypeScript"):
            m = re.search(r"alert\s*\(\s*(.+?)\s*\)", trimmed)
            if m:
                outputs.append(f"[Alert: {m.group(1)}]")
        if language in ("C", "C++"):
            m = _COUT_RE.search(trimmed)
            if m:
                parts = [p.strip() for p in m.group(1).split("<<")]
                parts = [p for p in parts if p not in ("endl", "std::endl")]
                outputs.append("".join(_render_printed(p, language) for p in parts))
            m = _PRINTF_RE.search(trimmed)
            if m:
                fmt, args = m.groups()
                fmt = fmt.replace("\\n", "")
                outputs.append(f"[Printf format: {fmt} with args: {args}]" if args else fmt)

    if outputs:
        return "\n".join(outputs)
    if "return " in code and "console.log" not in code and "print(" not in code:
        return "[Function returns a value - no console output]"
    if any(tok in code for tok in ("function ", "def ", "class ")):
        return "[Code defines functions/classes - no direct output]"
    return "[No output statements detected]"


def detect_entry_point(code: str, language: str) -> dict:
    result = {"found": False, "type": "code snippet", "explanation": ""}

    if language == "Java":
        if re.search(r"public\s+static\s+void\s+main\s*\(\s*String\s*\[\s*\]\s*\w+\s*\)", code):
            result.update(
                found=True,
                type="standalone application",
                explanation="The program has a public static void main(String[] args) method as its entry point, "
                "so it can be run directly from the command line.",
            )
        elif "class " in code:
            result.update(
                type="class definition",
                explanation="This defines a Java class without a main method, so it is meant to be used by other code.",
            )
    elif language == "Python":
        if re.search(r"if\s+__name__\s*==\s*['\"]__main__['\"]\s*:", code):
            result.update(
                found=True,
                type="script with module capability",
                explanation="The __name__ == '__main__' guard lets the file run as a script while staying importable.",
            )
        elif "def " in code:
            result.update(
                type="function definitions",
                explanation="This defines functions without a main guard; top-level statements run on import.",
            )
        elif "class " in code:
            result.update(
                type="class definition",
                explanation="This defines classes without a main block, so it is a module meant to be imported.",
            )
    elif language == "C#":
        if re.search(r"static\s+(?:async\s+)?\w+\s+Main\s*\(", code):
            result.update(
                found=True,
                type="console application",
                explanation="The static Main() method is the standard entry point of a C# console application.",
            )
        elif "class " in code:
            result.update(
                type="class definition",
                explanation="This defines a C# class without a Main method, so it is a library component.",
            )
    elif language in ("C", "C++"):
        if re.search(r"int\s+main\s*\(", code):
            result.update(
                found=True,
                type="executable program",
                explanation=f"The int main() function is the entry point, following standard {language} conventions.",
            )
        elif "#include" in code:
            result.update(
                type="header or library code",
                explanation="This looks like header or library code without a main function.",
            )
    elif language in ("JavaScript", "TypeScript"):
        if "function " in code or "=>" in code:
            result.update(
                type="function definitions",
                explanation="This code defines functions; JavaScript has no single main function, so execution "
                "depends on how the code is loaded and called.",
            )
        elif "console.log" in code or "document." in code:
            result.update(
                found=True,
                type="script with immediate execution",
                explanation="The statements run as soon as the script is loaded.",
            )
    elif language == "Go" and re.search(r"func\s+main\s*\(\s*\)", code):
        result.update(found=True, type="executable program", explanation="func main() in package main is the entry point.")
    elif language == "Rust" and re.search(r"fn\s+main\s*\(\s*\)", code):
        result.update(found=True, type="executable program", explanation="fn main() is where the Rust program starts.")

    return result


def _param_summary(params: str) -> str:
    count = len([p for p in params.split(",") if p.strip()])
    return f"accepts {count} parameter(s): {params.strip()}" if count else "takes no parameters"


def _python_value_kind(value: str) -> tuple[str, str]:
    if _STRING_LITERAL_RE.match(value):
        return "string", "text data storage and manipulation"
    if re.fullmatch(r"\d+", value):
        return "integer", "whole number calculations and counting"
    if re.fullmatch(r"\d*\.\d+", value):
        return "float", "decimal number calculations and measurements"
    if value in ("True", "False"):
        return "boolean", "conditional logic and state tracking"
    if value.startswith("[") and value.endswith("]"):
        return "list", "ordered collection of items"
    if value.startswith("{") and value.endswith("}"):
        return "dictionary", "key-value data mapping"
    if "input(" in value:
        return "string (user input)", "capturing user-provided data"
    if "range(" in value:
        return "range object", "generating sequences of numbers for loops"
    return "dynamic", "general data storage"


def _line_components(line: str, number: int, language: str) -> list[dict]:
    found = []

    m = re.search(r"function\s+(\w+)\s*\(([^)]*)\)", line) if language in ("JavaScript", "TypeScript") else None
    if m:
        found.append({"type": "function", "name": m.group(1),
                      "explanation": f"A JavaScript function that {_param_summary(m.group(2))}."})
    m = re.search(r"def\s+(\w+)\s*\(([^)]*)\)", line) if language == "Python" else None
    if m:
        found.append({"type": "function", "name": m.group(1),
                      "explanation": f"A Python function that {_param_summary(m.group(2))}."})
    if language in ("Java", "C#"):
        m = re.match(r"(public|private|protected)\s+(static\s+)?([\w<>\[\]]+)\s+(\w+)\s*\(([^)]*)\)", line)
        if m:
            visibility, static, rtype, name, params = m.groups()
            found.append({
                "type": "method",
                "name": name,
                "explanation": f"A {visibility} {'static ' if static else ''}method that returns {rtype} and "
                f"{_param_summary(params)}.",
            })

    m = re.search(r"\b(?:class|struct)\s+(\w+)", line)
    if m:
        found.append({"type": "class", "name": m.group(1),
                      "explanation": "A blueprint for creating objects that bundles data and behavior together."})

    if language in ("JavaScript", "TypeScript"):
        m = re.match(r"(var|let|const)\s+(\w+)(?:\s*=\s*(.+?))?;?$", line)
        if m:
            keyword, name, value = m.group(1), m.group(2), m.group(3) or "undefined"
            scope = "function-scoped" if keyword == "var" else "block-scoped"
            mutability = "reassignable" if keyword != "const" else "constant"
            found.append({"type": "variable", "name": name,
                          "explanation": f"A {scope}, {mutability} variable initialized with: {value}."})
    elif language in ("Java", "C#"):
        m = re.match(r"(int|double|float|String|string|char|boolean|bool|var)\s+(\w+)(?:\s*=\s*(.+?))?;?$", line)
        if m:
            explanation = f"A {m.group(1)} variable" + (f" initialized with: {m.group(3)}." if m.group(3) else ".")
            found.append({"type": "variable", "name": m.group(2), "explanation": explanation})
    elif language == "Python":
        m = re.match(r"(\w+)\s*=\s*(.+)$", line)
        if m:
            kind, purpose = _python_value_kind(m.group(2))
            found.append({"type": "variable", "name": m.group(1),
                          "explanation": f"A Python variable (inferred type: {kind}) used for {purpose}."})

    if re.search(r"\bfor\b|\bwhile\b|forEach", line):
        kind = "while loop" if "while" in line else "for loop"
        found.append({"type": kind, "name": f"Line {number}",
                      "explanation": f"A {kind} that repeats its body for each iteration."})

    if re.match(r"(?:}\s*)?(?:if|else|elif|switch)\b", line):
        kind = (
            "switch statement" if line.startswith("switch")
            else "else-if statement" if "else if" in line or line.startswith("elif")
            else "else statement" if "else" in line
            else "if statement"
        )
        found.append({"type": kind, "name": f"Line {number}",
                      "explanation": f"An {kind} that branches on a condition." if kind[0] in "aeiou"
                      else f"A {kind} that branches on a value."})

    if "main(" in line or re.search(r"if\s+__name__\s*==", line):
        found.append({"type": "main entry point", "name": "main",
                      "explanation": "The starting point of program execution."})

    if language == "JavaScript":
        m = re.search(r"\b(\w+)\.(?:onclick|addEventListener)", line)
        if m:
            found.append({"type": "event handler", "name": f"{m.group(1)} event",
                          "explanation": f"Runs a function when the user interacts with {m.group(1)}."})
        m = re.search(r"createElement\(['\"](\w+)['\"]\)", line)
        if m:
            found.append({"type": "DOM creation", "name": f"{m.group(1)} element",
                          "explanation": f"Creates a new {m.group(1)} element that can be inserted into the page."})

    m = re.search(r"(?:\bimport\b|require\(|#include|\busing\b)\s*['\"<]?([^'\">\s);]+)", line)
    if m:
        found.append({"type": "import/library", "name": m.group(1),
                      "explanation": "External code library that provides additional functionality."})
    return found


def extract_key_components(code: str, language: str) -> list[dict]:
    components, seen = [], set()
    for number, line in enumerate(code.split("\n"), start=1):
        trimmed = line.strip()
        if not trimmed:
            continue
        for component in _line_components(trimmed, number, language):
            key = component["name"], component["type"]
            # one variable entry per name, one conditional entry per kind
            dedupe = component["type"] if component["type"].endswith("statement") else key
            if key in seen or dedupe in seen:
                continue
            seen.update({key, dedupe})
            components.append(component)
    return components[:MAX_COMPONENTS]


def code_purpose(code: str, language: str) -> str:
    lower = code.lower()

    if language == "JavaScript":
        if any(tok in lower for tok in ("document.", "getelementby", "queryselector")):
            return "DOM manipulation and web page interaction"
        if any(tok in lower for tok in ("addeventlistener", "onclick", "onchange")):
            return "event handling and user interaction"
        if any(tok in lower for tok in ("fetch", "axios", "xmlhttprequest")):
            return "API communication and data fetching"
        if any(tok in lower for tok in ("async", "await", "promise")):
            return "asynchronous operations and promise handling"
        if any(tok in lower for tok in ("localstorage", "sessionstorage", "cookie")):
            return "client-side data storage and management"

    if any(tok in lower for tok in ("api", "fetch", "axios", "request")):
        return "API integration or web service communication"
    if any(tok in lower for tok in ("database", "sql", "query")):
        return "database operations and data management"
    if any(tok in lower for tok in ("button", "click", "dom")):
        return "user interface interactions and DOM manipulation"
    if any(tok in lower for tok in ("algorithm", "sort", "search")):
        return "algorithmic processing and data manipulation"
    if any(tok in lower for tok in ("test", "assert", "expect")):
        return "testing and quality assurance"
    if any(tok in lower for tok in ("class", "object", "method")):
        return "object-oriented programming and class definitions"
    return "general programming logic and functionality"


def detailed_suggestions(code: str, language: str) -> list[str]:
    suggestions = []
    lower = code.lower()
    lines = code.split("\n")
    comment_lines = sum(1 for line in lines if line.strip().startswith(("//", "#", "/*")))
    code_lines = sum(1 for line in lines if line.strip() and not line.strip().startswith(("//", "#")))

    if comment_lines / max(code_lines, 1) < 0.1:
        suggestions.append("Add comments to explain complex logic (aim for a 10-20% comment ratio)")
    if code_lines > 5 and not any(tok in lower for tok in ("try", "catch", "except")):
        suggestions.append("Add error handling so failures are reported instead of crashing the program")

    if language == "JavaScript":
        if "var " in code:
            suggestions.append('Replace "var" with "const" or "let" for block scoping')
        if "==" in code and "===" not in code:
            suggestions.append("Use strict equality (===) instead of loose equality (==) to avoid type coercion bugs")
        if "console.log" in lower:
            suggestions.append("Replace console.log with a logging library for production code")
    elif language == "Python":
        if "def " in code and "__main__" not in code:
            suggestions.append('Add an if __name__ == "__main__": guard so the script can be imported as a module')
        if "print(" in lower and "logging" not in lower:
            suggestions.append("Use the logging module instead of print for diagnostics")
        if "def " in code and '"""' not in code and "'''" not in code:
            suggestions.append("Add docstrings describing what each function does and returns")
    elif language in ("Java", "C#"):
        if "final" not in lower and "readonly" not in lower:
            suggestions.append("Mark values that never change as final/readonly")
        if "private" not in lower and "public" not in lower:
            suggestions.append("Declare access modifiers (private, public, protected) explicitly")

    depth = max((len(line) - len(line.lstrip(" "))) // 2 for line in lines) if lines else 0
    if depth > 4:
        suggestions.append(f"Reduce nesting depth by extracting nested logic into functions (current max depth: {depth})")
    if code_lines > 50:
        suggestions.append("Split this code into smaller, focused functions or classes")
    if any(tok in lower for tok in ("password", "secret", "key")):
        suggestions.append("Keep passwords and API keys out of source code")
    if "test" not in lower and "assert" not in lower:
        suggestions.append("Add unit tests to catch regressions")
    if any((len(line) - len(line.lstrip(" "))) % 2 for line in lines):
        suggestions.append("Use consistent indentation (2 or 4 spaces) and an automatic formatter")

    suggestions.append("Configure an OpenAI API key for AI-powered analysis")

    errors = detect_common_errors(code, language)
    if errors:
        suggestions.insert(0, "Potential issues detected: " + ", ".join(errors))
    return suggestions[:MAX_SUGGESTIONS]


def heuristic_analysis(code: str, language: str) -> dict:
    detection = detect_language(code, language)
    detected = detection["language"]
    level = determine_complexity(code)
    purpose = code_purpose(code, detected)
    line_count = sum(1 for line in code.split("\n") if line.strip())

    return {
        "language": detected,
        "overview": f"This {detected} code ({line_count} non-empty lines) is mainly about {purpose}. "
        f"Its complexity level is {level}.",
        "lineByLineAnalysis": explain_code(code, detected),
        "output": predict_output(code, detected),
        "summary": f"{detected} code for {purpose}, rated {level}. This is an offline analysis; configure an "
        "OpenAI API key for a detailed AI explanation.",
        "suggestions": detailed_suggestions(code, detected),
        "keyComponents": extract_key_components(code, detected),
        "complexity": level,
        "languageFeatures": detection["features"],
        "entryPoint": detect_entry_point(code, detected),
        "detection": {
            "declared": language,
            "detected": detected,
            "confidence": detection["confidence"],
        },
    }


def heuristic_debug(code: str, language: str) -> dict:
    language = canonical_language(language)
    issues = debug_issues(code, language)
    found = [issue for issue in issues if issue["type"] != "general"]
    return {
        "language": language,
        "issues": issues,
        "suggestions": [
            "Configure a Gemini or OpenAI API key for AI-powered debugging analysis",
            "Add error handling and input validation",
            "Review the code for performance optimizations",
        ],
        "fixedCode": fix_code(code, language),
        "summary": f"Offline debugging analysis of {language} code found {len(found)} potential issue(s).",
    }


def heuristic_translation(code: str, language: str) -> dict:
    language = canonical_language(language)
    python_code = translate_to_python(code, language)
    return {
        "language": "Python",
        "translatedCode": python_code,
        "dependencies": extract_python_dependencies(python_code),
        "notes": f"Translated from {language} to Python using pattern matching. Lines marked TODO need manual "
        "conversion; configure a Hugging Face or OpenAI API key for model-based translation.",
    }


class HeuristicProvider(Provider):
    """Always-available last tier; the rule passes are CPU-bound and run in the threadpool."""

    name = "heuristic"

    @property
    def available(self) -> bool:
        return True

    async def analyze(self, code: str, language: str) -> dict:
        return await run_in_threadpool(heuristic_analysis, code, language)

    async def debug(self, code: str, language: str) -> dict:
        return await run_in_threadpool(heuristic_debug, code, language)

    async def translate(self, code: str, language: str) -> dict:
        return await run_in_threadpool(heuristic_translation, code, language)
