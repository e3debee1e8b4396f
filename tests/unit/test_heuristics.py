import asyncio
import threading
import time

from app.services import heuristics
from app.services.heuristics import (
    MAX_COMPONENTS,
    MAX_SUGGESTIONS,
    HeuristicProvider,
    code_purpose,
    detailed_suggestions,
    detect_entry_point,
    extract_key_components,
    heuristic_analysis,
    heuristic_debug,
    heuristic_translation,
    predict_output,
)

JAVA_MAIN = """public class Main {
    public static void main(String[] args) {
        System.out.println("Hello");
    }
}"""


class TestPredictOutput:
    def test_string_literal(self):
        assert predict_output("print('hi')", "Python") == "hi"

    def test_arithmetic_is_evaluated(self):
        assert predict_output("console.log(2 + 3);", "JavaScript") == "5"

    def test_python_division_is_float(self):
        assert predict_output("print(4 / 2)", "Python") == "2.0"

    def test_division_by_zero_not_evaluated(self):
        assert predict_output("print(1 / 0)", "Python") == "[Expression: 1 / 0]"

    def test_variable(self):
        assert predict_output("print(name)", "Python") == "[Variable: name]"

    def test_java_println(self):
        assert predict_output(JAVA_MAIN, "Java") == "Hello"

    def test_cout_chain(self):
        assert predict_output('cout << "a" << "b" << endl;', "C++") == "ab"

    def test_function_without_output(self):
        assert predict_output("def f():\n    return 1", "Python") == "[Function returns a value - no console output]"

    def test_nothing_detected(self):
        assert predict_output("x = 1", "Python") == "[No output statements detected]"


class TestEntryPoint:
    def test_java_main(self):
        result = detect_entry_point(JAVA_MAIN, "Java")
        assert result["found"] is True
        assert result["type"] == "standalone application"

    def test_python_guard(self):
        code = 'def main():\n    pass\n\nif __name__ == "__main__":\n    main()'
        assert detect_entry_point(code, "Python")["type"] == "script with module capability"

    def test_python_functions_only(self):
        result = detect_entry_point("def f():\n    pass", "Python")
        assert result["found"] is False
        assert result["type"] == "function definitions"

    def test_snippet(self):
        assert detect_entry_point("x = 1", "Python")["type"] == "code snippet"


class TestKeyComponents:
    def test_javascript_function_and_variable(self):
        components = extract_key_components("function greet(name) {\n  const msg = 'hi';\n}", "JavaScript")
        kinds = {(c["type"], c["name"]) for c in components}
        assert ("function", "greet") in kinds
        assert ("variable", "msg") in kinds

    def test_limited_and_deduplicated(self):
        code = "\n".join(f"v{i} = {i}" for i in range(20)) + "\nv0 = 5"
        components = extract_key_components(code, "Python")
        assert len(components) == MAX_COMPONENTS
        assert len({(c["type"], c["name"]) for c in components}) == len(components)


class TestPurposeAndSuggestions:
    def test_javascript_fetch(self):
        assert code_purpose("fetch('/items')", "JavaScript") == "API communication and data fetching"

    def test_generic_fallback(self):
        assert code_purpose("x = 1", "Python") == "general programming logic and functionality"

    def test_detected_issues_come_first(self):
        suggestions = detailed_suggestions("var x = 1\nlet y = x", "JavaScript")
        assert suggestions[0].startswith("Potential issues detected:")
        assert len(suggestions) <= MAX_SUGGESTIONS


class TestHeuristicResults:
    def test_analysis_shape(self):
        result = heuristic_analysis("print('hi')", "Python")
        assert result["language"] == "Python"
        assert any("print" in item["line"] for item in result["lineByLineAnalysis"])
        assert result["output"] == "hi"
        assert result["complexity"] == "beginner"
        for key in ("overview", "summary", "suggestions", "keyComponents", "entryPoint", "detection"):
            assert key in result

    def test_debug_fixes_javascript(self):
        result = heuristic_debug("var x = 1;", "javascript")
        assert result["language"] == "JavaScript"
        assert result["fixedCode"] == "let x = 1;"

    def test_translation_reports_dependencies(self):
        result = heuristic_translation("let r = Math.sqrt(9);", "JavaScript")
        assert result["language"] == "Python"
        assert "r = math.sqrt(9)" in result["translatedCode"]
        assert result["dependencies"] == ["math"]

    def test_provider_is_always_available(self):
        provider = HeuristicProvider()
        assert provider.available
        result = asyncio.run(provider.debug("x", "Go"))
        assert result["issues"][0]["type"] == "general"

    def test_provider_runs_rules_off_the_event_loop(self, monkeypatch):
        threads = {}

        def fake_analysis(code, language):
            threads["rules"] = threading.get_ident()
            return {"language": language}

        monkeypatch.setattr(heuristics, "heuristic_analysis", fake_analysis)

        async def analyze():
            threads["loop"] = threading.get_ident()
            return await HeuristicProvider().analyze("x", "Go")

        assert asyncio.run(analyze()) == {"language": "Go"}
        assert threads["rules"] != threads["loop"]

    def test_long_single_line_is_linear(self):
        for code in ("a" * 10_000, "a1" * 5_000, "ab(" + "a" * 9_990):
            started = time.perf_counter()
            result = heuristic_analysis(code, "JavaScript")
            assert time.perf_counter() - started < 1.0
            assert result["lineByLineAnalysis"][0]["line"] == code
