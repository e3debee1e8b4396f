"""Line-by-line explanations from per-language (pattern, template) rule tables.

Each table is an ordered list; the first rule whose pattern matches the
stripped line wins and its template is formatted with the match's named
groups. A template may also be a callable taking the match. Lines no table
rule matches fall through to :func:`classify_line`.
"""
import re
from typing import Callable, Union

Template = Union[str, Callable[[re.Match], str]]
Rule = tuple[re.Pattern, Template]

MAX_EXPLAINED_LINES = 40

CPP_TYPE_DESCRIPTIONS = {
    "int": "integer (whole numbers)",
    "float": "single-precision floating-point number",
    "double": "double-precision floating-point number (more precise than float)",
    "char": "single character",
    "bool": "boolean (true/false)",
    "string": "text string",
    "auto": "automatically deduced type",
}


def _rules(*pairs: tuple[str, Template]) -> list[Rule]:
    return [(re.compile(pattern), template) for pattern, template in pairs]


def _cpp_variable(m: re.Match) -> str:
    kind = CPP_TYPE_DESCRIPTIONS[m["type"]]
    if m["value"]:
        return (
            f"This declares a variable '{m['name']}' of type {m['type']} ({kind}) and initializes it "
            f"with the value {m['value'].strip()}. C++ requires explicit type declarations for memory "
            "allocation and type safety."
        )
    return (
        f"This declares a variable '{m['name']}' of type {m['type']} ({kind}). The variable is allocated "
        "memory but not initialized, so it holds an indeterminate value until assigned."
    )


def _rust_let(m: re.Match) -> str:
    typed = f"of type {m['type']} " if m["type"] else ""
    value = f"initialized with {m['value'].rstrip(';').strip()}" if m["value"] else ""
    if m["mut"]:
        return (
            f"This declares a mutable variable '{m['name']}' {typed}{value}. The 'mut' keyword is required "
            "in Rust to make variables modifiable after declaration."
        ).replace("  ", " ")
    return (
        f"This declares an immutable variable '{m['name']}' {typed}{value}. By default, Rust variables are "
        "immutable, which prevents accidental modification."
    ).replace("  ", " ")


CPP_RULES = _rules(
    (r"#include\s*[<\"]iostream[>\"]",
     "This preprocessor directive includes the iostream header file, which provides input/output stream "
     "functionality like cout (console output) and cin (console input)."),
    (r"#include\s*[<\"]vector[>\"]",
     "This includes the vector header, providing access to std::vector, a dynamic array that can grow "
     "and shrink at runtime."),
    (r"#include\s*[<\"]string[>\"]",
     "This includes the string header, enabling the std::string class for handling text with automatic "
     "memory management."),
    (r"#include\s*[<\"](?P<header>[^>\"]+)[>\"]",
     "This preprocessor directive includes the {header} header file, making its functions, classes, and "
     "definitions available in this source file."),
    (r"using\s+namespace\s+(?P<ns>\w+)",
     "This using directive brings all identifiers from the {ns} namespace into the current scope, so you "
     "can write cout instead of std::cout. It can cause name conflicts in larger programs."),
    (r"\bint\s+main\s*\(",
     "This declares the main function, the entry point of every C++ program. The 'int' return type means "
     "it returns a status code (0 for success). Program execution begins here."),
    (r"^(?P<rtype>int|void|float|double|bool|string|char)\s+(?P<name>\w+)\s*\(",
     "This defines a function named '{name}' that returns a {rtype}. C++ functions must declare their "
     "return type explicitly."),
    (r"^(?P<type>int|float|double|char)\s+(?P<name>\w+)\s*\[\s*(?P<size>\d+)\s*\]",
     "This declares an array named '{name}' of type {type} with {size} elements stored in contiguous "
     "memory and accessed with zero-based indexes."),
    (r"^(?P<type>int|float|double|char|void)\s*\*\s*(?P<name>\w+)",
     "This declares a pointer named '{name}' that can point to a {type} value. Pointers store memory "
     "addresses and allow direct memory manipulation."),
    (r"^(?P<type>int|float|double|char|bool|string|auto)\s+(?P<name>\w+)(?:\s*=\s*(?P<value>[^;]+))?",
     _cpp_variable),
    (r"cout\s*<<\s*(?P<content>.+?)\s*<<\s*endl",
     "This uses cout (console output) to print {content} to standard output, followed by endl which "
     "writes a newline and flushes the output buffer."),
    (r"cout\s*<<\s*(?P<content>[^;]+)",
     "This uses cout (console output) with the insertion operator (<<) to send {content} to the standard "
     "output stream."),
    (r"cin\s*>>\s*(?P<name>\w+)",
     "This uses cin (console input) with the extraction operator (>>) to read user input into the "
     "variable '{name}'. The program pauses until input arrives."),
    (r"\bfor\s*\(\s*(?P<init>[^;]*);\s*(?P<cond>[^;]*);\s*(?P<step>[^)]*)\)",
     "This is a C++ for loop with three parts: initialization ({init}), condition check ({cond}), and "
     "update ({step}). It repeats the block while the condition holds."),
    (r"\bfor\s*\(",
     "This is a C++ for loop that repeatedly executes a block of code, typically over a range of values."),
    (r"\breturn\s+0\s*;",
     "This return statement exits the function and returns 0, which from main() signals successful "
     "program termination."),
    (r"\breturn\s+(?P<value>[^;]+)",
     "This return statement exits the current function and returns {value} to the caller. The value must "
     "match the declared return type."),
    (r"\bwhile\s*\(\s*(?P<cond>.+?)\s*\)",
     "This is a while loop that keeps executing its block as long as {cond} remains true."),
    (r"\bswitch\s*\(\s*(?P<var>.+?)\s*\)",
     "This is a switch statement that evaluates {var} and jumps to the matching case label."),
    (r"\bcase\s+(?P<value>.+?):",
     "This is a case label that runs when the switch value equals {value}. It usually ends with break to "
     "prevent fall-through."),
    (r"\bbreak\s*;",
     "This break statement immediately exits the enclosing loop or switch statement."),
    (r"\bcontinue\s*;",
     "This continue statement skips the rest of the current loop iteration and starts the next one."),
)

GO_RULES = _rules(
    (r"^package\s+(?P<name>\w+)",
     "This declares the package name as '{name}'. Every Go source file belongs to a package; 'main' "
     "defines a standalone executable."),
    (r"^import\s+[\"`](?P<module>[^\"`]+)[\"`]",
     "This imports the '{module}' package, making its exported functions and types available in this "
     "file."),
    (r"\bfunc\s+main\s*\(",
     "This defines the main function, the entry point of a Go program. It takes no parameters and "
     "returns nothing."),
    (r"\bfunc\s+(?P<name>\w+)\s*\(",
     "This defines a function named '{name}'. Go functions can return multiple values; names starting "
     "with a capital letter are exported."),
    (r"\bvar\s+(?P<name>\w+)\s+(?P<type>[\w\[\]]+)\s*=\s*(?P<value>.+)",
     "This declares a variable '{name}' of type {type} and initializes it with {value}."),
    (r"\bvar\s+(?P<name>\w+)\s+(?P<type>[\w\[\]]+)",
     "This declares a variable '{name}' of type {type}. Uninitialized Go variables get their zero value "
     "(0, \"\", or nil)."),
    (r"\bvar\s+(?P<name>\w+)\s*=\s*(?P<value>.+)",
     "This declares a variable '{name}' whose type is inferred from its initial value {value}."),
    (r"^(?P<name>\w+)\s*:=\s*(?P<value>.+)",
     "This uses Go's short variable declaration to declare and initialize '{name}' with {value}; the := "
     "operator infers the type."),
    (r"fmt\.Print\w*\s*\(\s*(?P<content>.*)\)",
     "This uses Go's fmt package to print {content} to standard output."),
    (r"^go\s+(?P<name>\w+)",
     "This launches a goroutine to execute {name} concurrently. Goroutines are lightweight threads "
     "managed by the Go runtime."),
    (r"\bchan\s",
     "This declares a channel for communication between goroutines."),
    (r"<-",
     "This performs a channel operation: the <- operator sends a value to or receives a value from a "
     "channel."),
)

RUST_RULES = _rules(
    (r"\bfn\s+main\s*\(",
     "This defines the main function, the entry point of a Rust program where execution begins."),
    (r"\bfn\s+(?P<name>\w+)",
     "This defines a function named '{name}'. Rust functions use the 'fn' keyword and obey ownership "
     "rules checked at compile time."),
    (r"\blet\s+(?P<mut>mut\s+)?(?P<name>\w+)(?:\s*:\s*(?P<type>[\w<>]+))?(?:\s*=\s*(?P<value>.+))?",
     _rust_let),
    (r"println!\s*\(\s*(?P<content>.*)\)",
     "This uses the println! macro to print {content} followed by a newline. The ! marks a macro, which "
     "expands at compile time."),
    (r"^use\s+(?P<path>[^;]+);",
     "This brings {path} into scope so its items can be used without fully qualified names."),
    (r"\bstruct\s+(?P<name>\w+)",
     "This defines a struct named '{name}', a custom data type that groups related fields together."),
    (r"\bimpl\s+(?P<name>\w+)",
     "This begins an implementation block for {name}, defining its methods and associated functions."),
    (r"\bmatch\s+(?P<value>\w+)",
     "This starts a match expression on {value}. Match requires every possible case to be handled."),
)

TYPESCRIPT_RULES = _rules(
    (r"\binterface\s+(?P<name>\w+)",
     "This defines an interface named '{name}' that describes the shape of objects for compile-time type "
     "checking."),
    (r"\btype\s+(?P<name>\w+)\s*=",
     "This defines a type alias named '{name}', giving a reusable name to a type expression."),
    (r"\bfunction\s+(?P<name>\w+).*(?::\s|=>)",
     "This defines a TypeScript function named '{name}' with type annotations, so argument and return "
     "types are checked at compile time."),
    (r"\b(?:let|const|var)\s+(?P<name>\w+)\s*:\s*(?P<type>[\w\[\]<>]+)",
     "This declares a variable '{name}' with explicit type annotation '{type}'."),
    (r"\bclass\s+(?P<name>\w+).*\bextends\b",
     "This defines a TypeScript class '{name}' that extends another class and inherits its members."),
    (r"\bclass\s+(?P<name>\w+).*\bimplements\b",
     "This defines a TypeScript class '{name}' that implements an interface, so it must provide every "
     "member the interface declares."),
    (r"\bimport\s+.*\s+from\s+['\"](?P<module>[^'\"]+)['\"]",
     "This imports functionality from the '{module}' module using ES module syntax."),
    (r"^export\s",
     "This exports a declaration so other modules can import it."),
)

CSHARP_RULES = _rules(
    (r"^using\s+(?P<ns>[^;]+);",
     "This using directive imports the '{ns}' namespace, making its types available without fully "
     "qualified names."),
    (r"\bnamespace\s+(?P<name>\w+(?:\.\w+)*)",
     "This declares a namespace called '{name}', which groups related classes and avoids naming "
     "conflicts."),
    (r"\b(?:public|private|internal)\s+class\s+(?P<name>\w+)",
     "This declares a C# class named '{name}', a blueprint that bundles data and behavior."),
    (r"\bstatic\s+(?:async\s+)?\w+\s+Main\s*\(",
     "This declares the Main method, the entry point of a C# console application."),
    (r"\{\s*get;\s*(?:set;\s*)?\}",
     "This declares a C# property with get/set accessors that encapsulate the underlying value."),
    (r"Console\.Write(?:Line)?\s*\(\s*(?P<content>.*)\)",
     "This uses Console.WriteLine to output {content} to the console."),
    (r"\.(?:Where|Select|OrderBy)\(",
     "This uses LINQ (Language Integrated Query) to filter, project, or sort a collection."),
    (r"^try\b",
     "This begins a try block whose exceptions can be handled by the catch blocks that follow."),
    (r"^catch\s*\(\s*(?P<type>\w+)",
     "This catch block handles exceptions of type {type} so the program can recover instead of crashing."),
    (r"\bawait\s",
     "This await expression waits for a task to complete without blocking the thread."),
    (r"^(?:public|private|protected|internal)\s+(?:static\s+)?(?:async\s+)?(?:virtual\s+)?(?:override\s+)?"
     r"(?P<rtype>[\w<>\[\]]+)\s+(?P<name>\w+)\s*\(",
     "This declares a C# method named '{name}' that returns {rtype}. The access modifier controls where "
     "it can be called from."),
    (r"^(?:public|private|protected|internal)\s+(?P<name>\w+)\s*\(",
     "This defines a constructor for the '{name}' class, run whenever a new instance is created."),
    (r"^(?:(?:public|private|protected|internal)\s+)?(?:static\s+)?(?:readonly\s+)?"
     r"(?P<type>[\w<>\[\]]+)\s+(?P<name>\w+)\s*=\s*(?P<value>[^;]+);",
     "This declares a C# variable '{name}' of type {type} and initializes it with {value}."),
)

PYTHON_RULES = _rules(
    (r"^from\s+(?P<module>[\w.]+)\s+import\s+(?P<names>.+)",
     "This imports {names} from the '{module}' module so they can be used directly by name."),
    (r"^import\s+(?P<module>[\w.]+)",
     "This imports the '{module}' module, making its functions and classes available as "
     "{module}.<name>."),
    (r"^if\s+__name__\s*==\s*['\"]__main__['\"]",
     "This guard runs the block below only when the file is executed directly, not when it is imported "
     "as a module."),
    (r"^(?:async\s+)?def\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)",
     "This defines a function named '{name}' taking ({params}). The indented block below is its body."),
    (r"^class\s+(?P<name>\w+)",
     "This defines a class named '{name}', a blueprint for objects that bundles data and methods."),
    (r"^print\s*\(\s*f['\"](?P<content>.*)['\"]\s*\)",
     "This prints an f-string to the console; expressions inside {{ }} are evaluated and inserted into "
     "the text: {content}"),
    (r"^print\s*\((?P<content>.*)\)",
     "This prints {content} to the console. print() writes its arguments to standard output followed by "
     "a newline."),
    (r"^for\s+(?P<var>\w+)\s+in\s+range\((?P<args>[^)]*)\)",
     "This for loop iterates over range({args}), assigning each number to '{var}' in turn."),
    (r"^for\s+(?P<var>[\w, ]+?)\s+in\s+(?P<iterable>.+):",
     "This for loop iterates over {iterable}, binding each item to '{var}'."),
    (r"^while\s+(?P<cond>.+):",
     "This while loop repeats its block as long as {cond} is true."),
    (r"^return\s+(?P<value>.+)",
     "This return statement ends the function and hands {value} back to the caller."),
    (r"^(?P<name>\w+)\s*=\s*input\((?P<prompt>.*)\)",
     "This reads a line of user input (prompting with {prompt}) and stores it as a string in '{name}'."),
    (r"^(?P<name>\w+)\s*=\s*(?P<value>.+)",
     "This assigns {value} to the variable '{name}'. Python infers the type from the value."),
)

JAVASCRIPT_RULES = _rules(
    (r"^(?:const|let|var)\s+(?P<name>\w+)\s*=\s*require\(\s*['\"](?P<module>[^'\"]+)['\"]\s*\)",
     "This loads the '{module}' module with require() and stores its exports in '{name}'."),
    (r"^import\s+.*\s+from\s+['\"](?P<module>[^'\"]+)['\"]",
     "This imports functionality from the '{module}' module using ES module syntax."),
    (r"^(?:const|let|var)\s+(?P<name>\w+)\s*=\s*(?:async\s+)?\((?P<params>[^)]*)\)\s*=>",
     "This defines an arrow function stored in '{name}' taking ({params}). Arrow functions inherit 'this' "
     "from the surrounding scope."),
    (r"^(?:async\s+)?function\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)",
     "This declares a function named '{name}' taking ({params}). Function declarations are hoisted, so "
     "they can be called before this line."),
    (r"console\.log\s*\((?P<content>.*)\)",
     "This logs {content} to the console, which is the usual way to inspect values while debugging."),
    (r"(?<![\w.])(?P<target>[\w.]+)\.addEventListener\(\s*['\"](?P<event>\w+)['\"]",
     "This registers a handler that runs whenever a '{event}' event fires on {target}."),
    (r"^for\s*\(\s*(?:const|let|var)\s+(?P<var>\w+)\s+of\s+(?P<iterable>[^)]+)\)",
     "This for...of loop visits each value of {iterable}, binding it to '{var}'."),
    (r"^for\s*\(\s*(?P<init>[^;]*);\s*(?P<cond>[^;]*);\s*(?P<step>[^)]*)\)",
     "This for loop starts with {init}, repeats while {cond}, and runs {step} after each iteration."),
    (r"\.forEach\(",
     "This calls forEach to run a callback once for every element of the array."),
    (r"^const\s+(?P<name>\w+)\s*=\s*(?P<value>[^;]+)",
     "This declares a block-scoped constant '{name}' set to {value}; it cannot be reassigned."),
    (r"^let\s+(?P<name>\w+)\s*=\s*(?P<value>[^;]+)",
     "This declares a block-scoped variable '{name}' initialized to {value}."),
    (r"^var\s+(?P<name>\w+)\s*=\s*(?P<value>[^;]+)",
     "This declares a function-scoped variable '{name}' initialized to {value}. Prefer let or const, "
     "which are block-scoped."),
)

JAVA_RULES = _rules(
    (r"^import\s+(?P<module>[\w.*]+);",
     "This imports {module} so its classes can be used without the full package name."),
    (r"\bpublic\s+static\s+void\s+main\s*\(",
     "This declares the main method, the entry point the JVM calls when the program starts."),
    (r"\b(?:public\s+)?(?:abstract\s+|final\s+)?class\s+(?P<name>\w+)",
     "This declares a Java class named '{name}'. All Java code lives inside classes."),
    (r"System\.out\.println\s*\((?P<content>.*)\)",
     "This prints {content} to standard output followed by a newline."),
    (r"System\.out\.print\s*\((?P<content>.*)\)",
     "This prints {content} to standard output without a trailing newline."),
    (r"^for\s*\(\s*(?P<type>\w+)\s+(?P<var>\w+)\s*:\s*(?P<iterable>[^)]+)\)",
     "This enhanced for loop visits each element of {iterable}, binding it to '{var}'."),
    (r"^for\s*\(\s*(?P<init>[^;]*);\s*(?P<cond>[^;]*);\s*(?P<step>[^)]*)\)",
     "This for loop starts with {init}, repeats while {cond}, and runs {step} after each iteration."),
    (r"^(?:(?:public|private|protected)\s+)?(?:static\s+)?(?P<rtype>[\w<>\[\]]+)\s+(?P<name>\w+)\s*\([^)]*\)\s*\{?$",
     "This declares a method named '{name}' that returns {rtype}."),
    (r"^(?:final\s+)?(?P<type>int|long|short|byte|double|float|char|boolean|String)\s+(?P<name>\w+)\s*=\s*(?P<value>[^;]+)",
     "This declares a {type} variable '{name}' initialized to {value}. Java variables must declare their "
     "type."),
)

LANGUAGE_RULES: dict[str, list[Rule]] = {
    "C++": CPP_RULES,
    "C": CPP_RULES,
    "Go": GO_RULES,
    "Rust": RUST_RULES,
    "TypeScript": TYPESCRIPT_RULES,
    "C#": CSHARP_RULES,
    "Python": PYTHON_RULES,
    "JavaScript": JAVASCRIPT_RULES,
    "Java": JAVA_RULES,
}


def _render(template: Template, match: re.Match) -> str:
    if callable(template):
        return template(match)
    return template.format(**{k: (v or "").strip() for k, v in match.groupdict().items()})


def classify_line(line: str, language: str) -> tuple[str, str]:
    """Generic classifier for lines no language table recognizes.

    Returns (kind, explanation) where kind is one of function, print,
    variable, assignment, conditional, loop, import, class, return, comment,
    brace or unknown.
    """
    if any(tok in line for tok in ("function", "def ", "public ", "private ")):
        m = re.search(r"(?:function\s+|def\s+|public\s+\w+\s+|private\s+\w+\s+)(\w+)", line)
        name = m.group(1) if m else "unnamed"
        return "function", (
            f"This line defines a function named '{name}'. Functions are reusable blocks of code that can "
            "accept parameters and return values."
        )
    if any(tok in line for tok in ("console.log", "print(", "System.out")):
        m = re.search(r"(?:console\.log|print|System\.out\.print(?:ln)?)\s*\(\s*(.+?)\s*\)", line)
        content = m.group(1) if m else "some value"
        return "print", (
            f"This line outputs {content} to the console. Output statements show results and help with "
            "debugging."
        )
    if any(tok in line for tok in ("var ", "let ", "const ")):
        m = re.search(r"(?:var|let|const)\s+(\w+)(?:\s*=\s*(.+))?", line)
        name = m.group(1) if m else "variable"
        if m and m.group(2):
            return "variable", (
                f"This line declares a variable named '{name}' and assigns it the value "
                f"{m.group(2).rstrip(';').strip()}."
            )
        return "variable", f"This line declares a variable named '{name}' without assigning a value."
    if "=" in line and "==" not in line and "!=" not in line:
        m = re.search(r"\b(\w+)\s*=\s*(.+)", line)
        name, value = (m.group(1), m.group(2).rstrip(";").strip()) if m else ("variable", "a value")
        return "assignment", (
            f"This line assigns {value} to the variable '{name}', replacing any previous value."
        )
    if "if " in line or "else" in line or "elif" in line:
        m = re.search(r"if\s*\(\s*(.+?)\s*\)", line)
        condition = m.group(1) if m else "a condition"
        if "else if" in line or "elif" in line:
            return "conditional", (
                "This is an else-if branch that checks another condition only when the previous ones "
                "were false."
            )
        if "if " in line:
            return "conditional", (
                f"This is an if statement that checks whether {condition} is true and runs the following "
                "block only in that case."
            )
        return "conditional", "This is an else branch that runs when all previous conditions were false."
    if "for " in line or "while " in line or "forEach" in line:
        if "while " in line:
            m = re.search(r"while\s*\(\s*(.+?)\s*\)", line)
            condition = m.group(1) if m else "a condition"
            return "loop", f"This is a while loop that keeps running as long as {condition} remains true."
        if "for " in line:
            return "loop", "This is a for loop that repeats a block for each item or a fixed number of times."
        return "loop", "This is a forEach loop that runs a function for every element of a collection."
    if any(tok in line for tok in ("import ", "require(", "#include", "using ")):
        m = re.search(r"(?:import|require\(|#include|using)\s*['\"<]?([^'\">\s)]+)", line)
        module = m.group(1) if m else "a module"
        return "import", f"This line imports the '{module}' library/module, making its features available."
    if "class " in line or "struct " in line:
        m = re.search(r"(?:class|struct)\s+(\w+)", line)
        name = m.group(1) if m else "unnamed"
        return "class", f"This defines a class named '{name}', a blueprint that groups data and behavior."
    if "return " in line:
        m = re.search(r"return\s+(.+)", line)
        value = m.group(1).rstrip(";").strip() if m else "a value"
        return "return", f"This return statement sends {value} back to the caller and ends the function."
    if line.startswith(("//", "#", "/*", "*")):
        return "comment", "This is a comment for human readers; it is ignored when the program runs."
    if "{" in line or "}" in line:
        return "brace", (
            f"These curly braces delimit a code block in {language}; everything between them shares one scope."
        )
    return "unknown", (
        f"This line contains {language} syntax that performs one step of the program's logic."
    )


def explain_line(line: str, language: str) -> str:
    stripped = line.strip()
    for pattern, template in LANGUAGE_RULES.get(language, ()):
        match = pattern.search(stripped)
        if match:
            return _render(template, match)
    return classify_line(stripped, language)[1]


def explain_code(code: str, language: str, limit: int = MAX_EXPLAINED_LINES) -> list[dict]:
    """Explain each non-empty line, up to `limit` lines."""
    lines = [line.strip() for line in code.splitlines() if line.strip()]
    items = [{"line": line, "explanation": explain_line(line, language)} for line in lines[:limit]]
    if len(lines) > limit:
        items.append({
            "line": f"... and {len(lines) - limit} more lines",
            "explanation": "Only the first %d lines are explained in offline mode." % limit,
        })
    return items
