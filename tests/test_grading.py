import pytest

from grading import check_answer, exam_stats, option_index, requires_manual_grading, to_boolean


class TestCheckAnswer:
    def test_mcq_single(self):
        data = {"options": ["a", "b", "c", "d"], "correct": 2}
        assert check_answer("mcq_single", data, 2) is True
        assert check_answer("mcq_single", data, "2") is True
        assert check_answer("mcq_single", data, "C") is True
        assert check_answer("mcq_single", data, 1) is False

    def test_mcq_two_ignores_order(self):
        data = {"options": ["a", "b", "c", "d"], "correct": [0, 2]}
        assert check_answer("mcq_two", data, [2, 0]) is True
        assert check_answer("mcq_two", data, ["A", "C"]) is True
        assert check_answer("mcq_two", data, [0]) is False
        assert check_answer("mcq_two", data, 0) is False

    def test_true_false(self):
        assert check_answer("true_false", {"correct": False}, "false") is True
        assert check_answer("true_false", {"correct": True}, True) is True
        assert check_answer("true_false", {"correct": True}, "maybe") is False

    def test_fill_blank_single_string(self):
        data = {"blanks": [["HyperText Markup Language", "Hyper Text Markup Language"]]}
        assert check_answer("fill_blank", data, "  hypertext   markup language ") is True
        assert check_answer("fill_blank", data, "Hyper Text Markup Language") is True
        assert check_answer("fill_blank", data, "markup") is False

    def test_fill_blank_list_must_match_length(self):
        data = {"blanks": ["red", "blue"]}
        assert check_answer("fill_blank", data, ["Red", "BLUE"]) is True
        assert check_answer("fill_blank", data, ["red"]) is False

    def test_match(self):
        data = {"pairs": [{"left": "HTTP", "right": "Web pages"}, {"left": "SMTP", "right": "Email"}]}
        assert check_answer("match", data, {"HTTP": "Web pages", "SMTP": "Email"}) is True
        assert check_answer("match", data, {"HTTP": "Email", "SMTP": "Web pages"}) is False

    def test_answer_data_as_json_string(self):
        assert check_answer("mcq_single", '{"options": ["x", "y"], "correct": 1}', 1) is True

    @pytest.mark.parametrize("question_type", ["short_answer", "long_answer", "programming"])
    def test_manual_types(self, question_type):
        assert requires_manual_grading(question_type)
        assert check_answer(question_type, {"model_answer": "x"}, "anything") is None

    @pytest.mark.parametrize("answer", [None, ""])
    def test_unanswered_is_wrong(self, answer):
        assert check_answer("mcq_single", {"correct": 0}, answer) is False

    def test_missing_answer_data(self):
        assert check_answer("mcq_single", None, 0) is False
        assert check_answer("mcq_single", "not json", 0) is False


class TestHelpers:
    def test_option_index(self):
        assert option_index("b") == 1
        assert option_index(3) == 3
        assert option_index(True) is None
        assert option_index("Z") is None

    def test_to_boolean(self):
        assert to_boolean("Yes") is True
        assert to_boolean(0) is False
        assert to_boolean(None) is None


class TestExamStats:
    def test_counts_and_percentage(self):
        answers = [
            {"user_answer": 1, "is_correct": True, "marks_obtained": 2},
            {"user_answer": 0, "is_correct": False, "marks_obtained": 0},
            {"user_answer": None, "is_correct": False, "marks_obtained": 0},
            {"user_answer": "essay", "is_correct": None, "marks_obtained": 0},
        ]
        stats = exam_stats(answers, total_marks=8, passing_percentage=35)
        assert stats["total_questions"] == 4
        assert stats["attempted_questions"] == 3
        assert stats["correct_answers"] == 1
        assert stats["wrong_answers"] == 2
        assert stats["unanswered"] == 1
        assert stats["obtained_marks"] == 2
        assert stats["percentage"] == 25
        assert stats["is_passing"] is False

    def test_zero_total_marks(self):
        stats = exam_stats([], total_marks=0)
        assert stats["percentage"] == 0
        assert stats["is_passing"] is False
