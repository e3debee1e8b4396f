from app.services.complexity import complexity_features, complexity_score, determine_complexity, level_for


class TestLevels:
    def test_bucket_bounds(self):
        assert level_for(0) == "beginner"
        assert level_for(14.5) == "beginner"
        assert level_for(15) == "intermediate"
        assert level_for(40) == "advanced"
        assert level_for(80) == "expert"

    def test_single_assignment_is_beginner(self):
        assert determine_complexity("x = 1") == "beginner"

    def test_large_program_is_expert(self):
        block = "class A:\n    async def f(self):\n        for i in range(3):\n            if i:\n                try:\n                    pass\n                except Exception:\n                    pass\n"
        assert determine_complexity(block * 5) == "expert"


class TestScore:
    def test_lines_weighted_half(self):
        assert complexity_score({"lines": 4}) == 2

    def test_more_features_never_lower_score(self):
        base = complexity_features("x = 1\ny = 2")
        more = dict(base, loops=base["loops"] + 1)
        assert complexity_score(more) > complexity_score(base)

    def test_counts_loops(self):
        assert complexity_features("for x in y:\n    pass\nwhile True:\n    pass")["loops"] == 2
