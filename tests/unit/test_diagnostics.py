from app.services.diagnostics import debug_issues, detect_common_errors, fix_code


class TestDetectCommonErrors:
    def test_javascript_missing_semicolons_and_mixed_declarations(self):
        errors = detect_common_errors("var a = 1\nlet b = a\nconsole.log(b)", "JavaScript")
        assert "3 missing semicolons" in errors
        assert "mixed var/let/const usage" in errors

    def test_python_missing_colon(self):
        assert "1 missing colons" in detect_common_errors("if ready\n    go()", "Python")

    def test_infinite_loop(self):
        assert "potential infinite loop" in detect_common_errors("while (true) {\n  tick();\n}", "Java")

    def test_unbalanced_brackets(self):
        errors = detect_common_errors("function f() {", "JavaScript")
        assert "unmatched brackets" in errors

    def test_unused_variable(self):
        assert "1 potentially unused variables" in detect_common_errors("const x = 1;", "JavaScript")


class TestDebugIssues:
    def test_var_is_a_syntax_issue(self):
        issues = debug_issues("var x = 1;", "JavaScript")
        syntax = [i for i in issues if i["type"] == "syntax"]
        assert syntax and "var" in syntax[0]["description"]

    def test_var_not_flagged_outside_javascript(self):
        assert not [i for i in debug_issues("var x = 1", "Go") if i["type"] == "syntax"]

    def test_unguarded_json_parse(self):
        issues = debug_issues("const data = JSON.parse(text);\nuse(data);", "JavaScript")
        assert any(i["type"] == "runtime" for i in issues)

    def test_style_issue_per_common_error(self):
        issues = debug_issues("while (true) {\n  tick();\n}", "Java")
        assert any(i["type"] == "style" and i["description"] == "Potential infinite loop" for i in issues)

    def test_clean_code_gets_placeholder(self):
        issues = debug_issues("x", "Go")
        assert len(issues) == 1
        assert issues[0]["type"] == "general"


class TestFixCode:
    def test_javascript_rewrites(self):
        fixed = fix_code("var a = 1;\nif (a == 1 && b != 2) {}", "JavaScript")
        assert fixed == "let a = 1;\nif (a === 1 && b !== 2) {}"

    def test_strict_equality_untouched(self):
        assert fix_code("if (a === b) {}", "JavaScript") == "if (a === b) {}"

    def test_other_languages_unchanged(self):
        assert fix_code("if a == 1:\n    pass", "Python") == "if a == 1:\n    pass"
