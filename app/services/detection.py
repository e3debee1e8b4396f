"""Keyword/pattern scoring language detector and per-language feature profiles."""
import re

# Languages offered to the client
SUPPORTED_LANGUAGES = [
    "JavaScript",
    "Python",
    "Java",
    "C++",
    "C#",
    "Go",
    "Rust",
    "Kotlin",
    "TypeScript",
    "HTML",
    "CSS",
    "SQL",
    "R",
    "MATLAB",
    "Scala",
    "Perl",
    "Lua",
]

# Score weights
KEYWORD_WEIGHT = 2
PATTERN_WEIGHT = 3
DECLARED_LANGUAGE_BONUS = 5

# language -> (substring keywords, regex patterns); insertion order breaks ties
LANGUAGE_SIGNATURES: dict[str, tuple[list[str], list[re.Pattern]]] = {
    "JavaScript": (
        ["function", "var", "let", "const", "console.log", "document.", "window.", "=>", "async", "await"],
        [re.compile(p) for p in (r"function\s+\w+\s*\(", r"console\.log\s*\(", r"document\.\w+", r"=>\s*{?", r"require\s*\(")],
    ),
    "Python": (
        ["def", "print(", "import", "from", "if __name__", "elif", "True", "False", "None"],
        [re.compile(p) for p in (r"def\s+\w+\s*\(", r"print\s*\(", r"if\s+__name__\s*==", r"import\s+\w+", r"from\s+\w+\s+import")],
    ),
    "Java": (
        ["public class", "private", "public static void main", "System.out.println", "import java"],
        [re.compile(p) for p in (r"public\s+class\s+\w+", r"public\s+static\s+void\s+main", r"System\.out\.print", r"import\s+java\.")],
    ),
    "C#": (
        ["using System", "public class", "Console.WriteLine", "namespace", "static void Main"],
        [re.compile(p) for p in (r"using\s+System", r"Console\.WriteLine", r"namespace\s+\w+", r"static\s+void\s+Main")],
    ),
    "C++": (
        ["#include", "using namespace std", "cout <<", "cin >>", "int main()", "std::", "endl", "vector<", "string"],
        [
            re.compile(p)
            for p in (
                r"#include\s*<",
                r"using\s+namespace\s+std",
                r"cout\s*<<",
                r"cin\s*>>",
                r"int\s+main\s*\(",
                r"std::",
                r"endl",
                r"vector\s*<",
                r"string\s+\w+",
            )
        ],
    ),
    "C": (
        ["#include <stdio.h>", "printf(", "scanf(", "int main()", "malloc("],
        [re.compile(p) for p in (r"#include\s*<stdio\.h>", r"printf\s*\(", r"int\s+main\s*\(", r"malloc\s*\(")],
    ),
    "Go": (
        ["package main", "func main()", "import", "fmt.Println", "var", "func ", "go ", "chan ", "defer"],
        [
            re.compile(p)
            for p in (
                r"package\s+main",
                r"func\s+main\s*\(\s*\)",
                r"fmt\.Print",
                r"func\s+\w+\s*\(",
                r"go\s+\w+",
                r"chan\s+\w+",
                r"defer\s+",
            )
        ],
    ),
    "Rust": (
        ["fn main()", "println!", "let mut", "let ", "use ", "mod ", "impl ", "struct ", "enum "],
        [
            re.compile(p)
            for p in (
                r"fn\s+main\s*\(\s*\)",
                r"println!\s*\(",
                r"let\s+mut\s+",
                r"let\s+\w+",
                r"use\s+\w+",
                r"struct\s+\w+",
                r"impl\s+\w+",
                r"enum\s+\w+",
            )
        ],
    ),
    "TypeScript": (
        ["interface ", "type ", ": string", ": number", ": boolean", "export ", "import ", "class ", "function "],
        [
            re.compile(p)
            for p in (
                r"interface\s+\w+",
                r"type\s+\w+\s*=",
                r":\s*string",
                r":\s*number",
                r":\s*boolean",
                r"export\s+",
                r"import\s+.*from",
                r"class\s+\w+",
            )
        ],
    ),
}

LANGUAGE_FEATURES = {
    "JavaScript": {
        "type": "Dynamic, interpreted programming language",
        "paradigm": "Multi-paradigm (object-oriented, functional, procedural)",
        "features": [
            "Dynamic typing with type coercion",
            "First-class functions and closures",
            "Prototype-based object orientation",
            "Event-driven and asynchronous programming",
            "Automatic memory management (garbage collection)",
        ],
        "strengths": "Web development, real-time applications, rapid prototyping",
        "syntax": "C-style syntax with flexible variable declarations",
    },
    "Python": {
        "type": "High-level, interpreted programming language",
        "paradigm": "Multi-paradigm (object-oriented, functional, procedural)",
        "features": [
            "Dynamic typing with duck typing",
            "Indentation-based code blocks",
            "Extensive standard library",
            "Interactive interpreter (REPL)",
            "Automatic memory management",
        ],
        "strengths": "Data science, AI/ML, web development, automation, scientific computing",
        "syntax": "Clean, readable syntax emphasizing code readability",
    },
    "Java": {
        "type": "Statically-typed, compiled programming language",
        "paradigm": "Object-oriented with functional programming features",
        "features": [
            "Static typing with compile-time type checking",
            "Platform independence (Write Once, Run Anywhere)",
            "Automatic memory management with garbage collection",
            "Extensive standard library (Java API)",
            "Multithreading support",
        ],
        "strengths": "Enterprise applications, Android development, web services",
        "syntax": "Verbose, explicit syntax with mandatory class structure",
    },
    "C#": {
        "type": "Statically-typed, compiled programming language",
        "paradigm": "Multi-paradigm (object-oriented, functional, generic)",
        "features": [
            "Static typing with type inference",
            ".NET integration",
            "LINQ (Language Integrated Query)",
            "Properties and events",
            "Generics and nullable types",
        ],
        "strengths": "Windows applications, web development, game development",
        "syntax": "C-style syntax with modern language features",
    },
    "C++": {
        "type": "Statically-typed, compiled programming language",
        "paradigm": "Multi-paradigm (procedural, object-oriented, generic)",
        "features": [
            "Manual memory management",
            "Low-level memory control with pointers",
            "Multiple inheritance",
            "Template metaprogramming",
            "Operator overloading",
        ],
        "strengths": "System programming, game development, performance-critical applications",
        "syntax": "C-style syntax with object-oriented extensions",
    },
    "C": {
        "type": "Statically-typed, compiled programming language",
        "paradigm": "Procedural programming",
        "features": [
            "Manual memory management",
            "Low-level system access",
            "Minimal runtime overhead",
            "Direct memory manipulation with pointers",
        ],
        "strengths": "System programming, embedded systems, operating systems",
        "syntax": "Simple, procedural syntax with explicit memory management",
    },
    "Go": {
        "type": "Statically-typed, compiled programming language",
        "paradigm": "Procedural with concurrent programming features",
        "features": [
            "Static typing with type inference",
            "Built-in concurrency with goroutines and channels",
            "Garbage collection",
            "Fast compilation",
        ],
        "strengths": "Web services, microservices, cloud applications",
        "syntax": "Clean, minimalist syntax inspired by C",
    },
    "Rust": {
        "type": "Statically-typed, compiled systems programming language",
        "paradigm": "Multi-paradigm (functional, imperative, generic)",
        "features": [
            "Memory safety without garbage collection",
            "Ownership system for memory management",
            "Pattern matching and algebraic data types",
            "Trait-based generics",
        ],
        "strengths": "System programming, web backends, game engines",
        "syntax": "Modern syntax with a powerful type system",
    },
    "TypeScript": {
        "type": "Statically-typed superset of JavaScript",
        "paradigm": "Multi-paradigm (object-oriented, functional, procedural)",
        "features": [
            "Static type checking with optional typing",
            "Generics and union types",
            "Interfaces and abstract classes",
            "Full JavaScript compatibility",
        ],
        "strengths": "Large-scale JavaScript applications, React/Angular apps",
        "syntax": "JavaScript syntax enhanced with type annotations",
    },
}

GENERIC_FEATURES = {
    "type": "Programming language",
    "paradigm": "Various paradigms supported",
    "features": ["Language-specific features"],
    "strengths": "General-purpose programming",
    "syntax": "Language-specific syntax rules",
}

_CANONICAL = {name.lower(): name for name in [*SUPPORTED_LANGUAGES, "C"]}
_CANONICAL.update({"js": "JavaScript", "py": "Python", "cpp": "C++", "csharp": "C#", "ts": "TypeScript", "golang": "Go"})


def canonical_language(language: str) -> str:
    """Map a user-supplied language name onto the spelling used in rule tables."""
    cleaned = (language or "").strip()
    return _CANONICAL.get(cleaned.lower(), cleaned)


def score_languages(code: str, declared: str) -> dict[str, int]:
    scores = {}
    for lang, (keywords, patterns) in LANGUAGE_SIGNATURES.items():
        score = sum(KEYWORD_WEIGHT for kw in keywords if kw in code)
        score += sum(PATTERN_WEIGHT for p in patterns if p.search(code))
        if lang == declared:
            score += DECLARED_LANGUAGE_BONUS
        scores[lang] = score
    return scores


def get_language_features(language: str) -> dict:
    return LANGUAGE_FEATURES.get(language, GENERIC_FEATURES)


def detect_language(code: str, declared: str) -> dict:
    """Return {language, confidence, features}; ties keep the declared language."""
    declared = canonical_language(declared)
    scores = score_languages(code, declared)

    detected = declared
    best = scores.get(declared, 0)
    for lang, score in scores.items():
        if score > best:
            best = score
            detected = lang

    return {
        "language": detected,
        "confidence": best,
        "features": get_language_features(detected),
    }
