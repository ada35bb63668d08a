import pytest

from allocator import (
    allocation_to_configs,
    clamp_chapter_count,
    default_chapter_count,
    distribute_questions,
)


class TestDistributeQuestions:
    def test_small_chapter_overflow_goes_to_the_others(self):
        assert distribute_questions(10, [("A", 3), ("B", 20)]) == {"A": 3, "B": 7}

    def test_not_enough_questions_takes_everything(self):
        assert distribute_questions(10, [("A", 2), ("B", 2)]) == {"A": 2, "B": 2}

    def test_even_split(self):
        assert distribute_questions(9, [("A", 5), ("B", 5), ("C", 5)]) == {"A": 3, "B": 3, "C": 3}

    def test_remainder_goes_to_earliest_chapters(self):
        assert distribute_questions(5, [("A", 5), ("B", 5), ("C", 5)]) == {"A": 2, "B": 2, "C": 1}

    def test_empty_chapters_are_left_out(self):
        assert distribute_questions(4, [("A", 0), ("B", 10)]) == {"B": 4}

    def test_redistribution_over_several_rounds(self):
        result = distribute_questions(12, [("A", 1), ("B", 2), ("C", 20)])
        assert result == {"A": 1, "B": 2, "C": 9}

    def test_zero_required(self):
        assert distribute_questions(0, [("A", 3)]) == {}

    def test_no_chapters(self):
        assert distribute_questions(5, []) == {}

    @pytest.mark.parametrize("required,caps", [
        (7, [3, 3, 3]),
        (20, [1, 4, 9, 2]),
        (3, [10, 0, 10, 10, 10]),
        (50, [5, 5]),
    ])
    def test_total_and_caps(self, required, caps):
        chapters = [(f"c{i}", cap) for i, cap in enumerate(caps)]
        result = distribute_questions(required, chapters)
        assert sum(result.values()) == min(required, sum(caps))
        for chapter_id, cap in chapters:
            assert result.get(chapter_id, 0) <= cap
        assert all(n > 0 for n in result.values())

    def test_negative_required(self):
        with pytest.raises(ValueError, match="negative"):
            distribute_questions(-1, [("A", 3)])

    def test_negative_available(self):
        with pytest.raises(ValueError, match="negative available"):
            distribute_questions(3, [("A", -1)])

    def test_duplicate_chapter(self):
        with pytest.raises(ValueError, match="more than once"):
            distribute_questions(3, [("A", 2), ("A", 2)])


class TestChapterCounts:
    def test_default_count_fills_the_remaining_need(self):
        assert default_chapter_count(available=10, required=8, configured=5) == 3

    def test_default_count_limited_by_available(self):
        assert default_chapter_count(available=2, required=8, configured=0) == 2

    def test_default_count_when_already_satisfied(self):
        assert default_chapter_count(available=6, required=5, configured=5) == 6

    def test_default_count_is_at_least_one(self):
        assert default_chapter_count(available=0, required=5, configured=0) == 1

    def test_clamp(self):
        assert clamp_chapter_count(12, 5) == 5
        assert clamp_chapter_count(-2, 5) == 0
        assert clamp_chapter_count(3, 5) == 3

    def test_configs(self):
        assert allocation_to_configs({"A": 3, "B": 7}) == [
            {"chapter_id": "A", "question_count": 3},
            {"chapter_id": "B", "question_count": 7},
        ]
