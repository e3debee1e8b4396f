"""Regex error/style detection and the offline debug report."""
import re

JS_FAMILY = {"JavaScript", "TypeScript"}

_CONTINUATION_TOKENS = ("if ", "else", "for ", "while ")
_WHILE_TRUE = ("while(true)", "while (true)", "while True:")
_DECLARATION_RE = re.compile(r"(?:var|let|const|int|String)\s+(\w+)")
_PY_BLOCK_STARTS = ("if ", "else", "for ", "while ", "def ", "class ")


def _count_missing_semicolons(lines: list[str], skip: tuple[str, ...], statement_markers: tuple[str, ...]) -> int:
    count = 0
    for line in lines:
        trimmed = line.strip()
        if not trimmed or trimmed.endswith((";", "{", "}")) or trimmed.startswith("//"):
            continue
        if any(tok in trimmed for tok in _CONTINUATION_TOKENS + skip):
            continue
        if any(tok in trimmed for tok in statement_markers):
            count += 1
    return count


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _unused_declarations(code: str) -> int:
    unused = 0
    for name in _DECLARATION_RE.findall(code):
        if len(re.findall(rf"\b{re.escape(name)}\b", code)) == 1:
            unused += 1
    return unused


def detect_common_errors(code: str, language: str) -> list[str]:
    """Short human-readable descriptions of likely mistakes, in detection order."""
    errors = []
    lines = code.split("\n")

    if language == "JavaScript":
        missing = _count_missing_semicolons(lines, ("function ",), ("=", "console.log", "return"))
        if missing:
            errors.append(f"{missing} missing semicolons")
        if "var " in code and ("let " in code or "const " in code):
            errors.append("mixed var/let/const usage")
        if "==" in code and "===" not in code:
            errors.append("loose equality operators")

    elif language == "Python":
        if any(_leading_spaces(line) % 4 for line in lines):
            errors.append("inconsistent indentation")
        missing = sum(
            1
            for line in lines
            if line.strip().startswith(_PY_BLOCK_STARTS) and not line.strip().endswith(":")
        )
        if missing:
            errors.append(f"{missing} missing colons")

    elif language == "Java":
        missing = _count_missing_semicolons(lines, ("public ", "private "), ("=", "System.out", "return"))
        if missing:
            errors.append(f"{missing} missing semicolons")
        if "public" not in code and "private" not in code and "class" in code:
            errors.append("missing access modifiers")

    if code.count("{") != code.count("}"):
        errors.append("unmatched brackets")
    if code.count("(") != code.count(")"):
        errors.append("unmatched parentheses")
    if any(tok in code for tok in _WHILE_TRUE) and "break" not in code:
        errors.append("potential infinite loop")

    unused = _unused_declarations(code)
    if unused:
        errors.append(f"{unused} potentially unused variables")

    return errors


def debug_issues(code: str, language: str) -> list[dict]:
    """Typed issues found without a provider; never empty."""
    non_empty = [line for line in code.split("\n") if line.strip()]
    issues = []

    if "console.log" in code and len(non_empty) > 10:
        issues.append({
            "type": "debugging",
            "severity": "low",
            "line": "multiple",
            "description": "Multiple console.log statements found",
            "suggestion": "Consider using a proper logging library for production code",
        })

    if language in JS_FAMILY and re.search(r"\bvar\s", code):
        issues.append({
            "type": "syntax",
            "severity": "medium",
            "line": "multiple",
            "description": "Usage of 'var' keyword found",
            "suggestion": "Use 'let' or 'const' instead of 'var' for better scoping",
        })

    if "try" not in code and ("JSON.parse" in code or "fetch" in code):
        issues.append({
            "type": "runtime",
            "severity": "high",
            "line": "multiple",
            "description": "Potential unhandled errors in async operations",
            "suggestion": "Add try-catch blocks around operations that might throw errors",
        })

    for error in detect_common_errors(code, language):
        issues.append({
            "type": "style",
            "severity": "low",
            "line": "N/A",
            "description": error[0].upper() + error[1:],
            "suggestion": "Review the code for " + error,
        })

    if not issues:
        issues.append({
            "type": "general",
            "severity": "low",
            "line": "N/A",
            "description": "No obvious issues detected in offline mode",
            "suggestion": "Configure a Gemini or OpenAI API key for comprehensive debugging analysis",
        })
    return issues


def fix_code(code: str, language: str) -> str:
    """var to let and loose to strict equality; other languages come back unchanged."""
    if language not in JS_FAMILY:
        return code
    fixed = re.sub(r"\bvar(\s)", r"let\1", code)
    fixed = re.sub(r"!=(?!=)", "!==", fixed)
    fixed = re.sub(r"(?<![=!<>])==(?!=)", "===", fixed)
    return fixed
