"""Weighted complexity score and its beginner..expert bucket."""
import re

# feature -> (pattern, weight); line count is weighted separately
FEATURE_PATTERNS = {
    "functions": (re.compile(r"function|def |public |private |method"), 3),
    "loops": (re.compile(r"for |while |forEach|do\s+\{"), 4),
    "conditions": (re.compile(r"if |else|elif|switch|case"), 2),
    "classes": (re.compile(r"class |struct |interface"), 5),
    "recursion": (re.compile(r"return\s+\w+\s*\("), 6),
    "async_operations": (re.compile(r"async|await|Promise|callback"), 5),
    "error_handling": (re.compile(r"try|catch|except|finally|throw"), 3),
    "nesting": (re.compile(r"(?<!\s)\s{4,}(?:if|for|while)"), 4),
    "data_structures": (re.compile(r"Map|Set|Array|List|Dictionary|\[\]|\{\}"), 2),
}
LINE_WEIGHT = 0.5

# (upper bound, level); anything at or above the last bound is "expert"
LEVELS = [
    (15, "beginner"),
    (40, "intermediate"),
    (80, "advanced"),
]


def complexity_features(code: str) -> dict[str, int]:
    features = {"lines": sum(1 for line in code.splitlines() if line.strip())}
    for name, (pattern, _) in FEATURE_PATTERNS.items():
        features[name] = len(pattern.findall(code))
    return features


def complexity_score(features: dict[str, int]) -> float:
    """All weights are positive, so more of any feature never lowers the score."""
    score = features.get("lines", 0) * LINE_WEIGHT
    for name, (_, weight) in FEATURE_PATTERNS.items():
        score += features.get(name, 0) * weight
    return score


def level_for(score: float) -> str:
    for bound, level in LEVELS:
        if score < bound:
            return level
    return "expert"


def determine_complexity(code: str) -> str:
    return level_for(complexity_score(complexity_features(code)))
