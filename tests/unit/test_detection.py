from app.services.detection import (
    DECLARED_LANGUAGE_BONUS,
    GENERIC_FEATURES,
    canonical_language,
    detect_language,
    get_language_features,
    score_languages,
)


class TestDetectLanguage:
    def test_python_print(self):
        result = detect_language("print('hi')", "Python")
        assert result["language"] == "Python"
        assert result["confidence"] > DECLARED_LANGUAGE_BONUS

    def test_code_overrides_wrong_declaration(self):
        code = "public class Main {\n    public static void main(String[] args) {\n        System.out.println(1);\n    }\n}"
        assert detect_language(code, "Python")["language"] == "Java"

    def test_tie_keeps_declared_language(self):
        assert detect_language("", "Go")["language"] == "Go"

    def test_declared_language_gets_bonus(self):
        assert score_languages("", "Rust")["Rust"] == DECLARED_LANGUAGE_BONUS
        assert score_languages("", "Rust")["Go"] == 0

    def test_features_profile_attached(self):
        result = detect_language("console.log(1);", "JavaScript")
        assert result["features"] == get_language_features("JavaScript")

    def test_redetecting_is_stable(self):
        samples = [
            "def greet(name):\n    print(f\"hi {name}\")",
            "const add = (a, b) => a + b;\nconsole.log(add(1, 2));",
            "public class Main {\n    public static void main(String[] args) {}\n}",
            "#include <iostream>\nint main() { std::cout << 1; }",
            "package main\nimport \"fmt\"\nfunc main() { fmt.Println(1) }",
            "fn main() {\n    let mut x = 1;\n    println!(\"{}\", x);\n}",
            "using System;\nConsole.WriteLine(\"hi\");",
            "",
        ]
        for code in samples:
            for declared in ("Python", "JavaScript", "Go"):
                first = detect_language(code, declared)
                again = detect_language(code, first["language"])
                assert again["language"] == first["language"]
                assert again["features"] == first["features"]


class TestCanonicalLanguage:
    def test_case_insensitive(self):
        assert canonical_language("javascript") == "JavaScript"
        assert canonical_language(" PYTHON ") == "Python"

    def test_aliases(self):
        assert canonical_language("cpp") == "C++"
        assert canonical_language("csharp") == "C#"

    def test_unknown_passes_through(self):
        assert canonical_language("Brainfuck") == "Brainfuck"

    def test_unknown_language_gets_generic_features(self):
        assert get_language_features("Brainfuck") == GENERIC_FEATURES
