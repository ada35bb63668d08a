import io

import pandas as pd
import pytest

from sheet_import import (
    XLSX_TYPE,
    SheetImportError,
    is_csv,
    parse_correct_answer,
    read_rows,
    rows_to_questions,
)
from utils import normalize_question_type

CSV = (
    "Question (Marathi),Question (English),Option A,Option B,Option C,Option D,Correct Answer,Difficulty,Marks,Type\n"
    "HTML म्हणजे?,What is HTML?,Markup,Style,Script,Data,A,Easy,2,mcq_single\n"
    ",,,,,,,,,\n"
    ",Pick the true statement,Yes,No,,,1,HARD,x,tf\n"
).encode("utf-8")


class TestReadRows:
    def test_csv(self):
        rows = read_rows(CSV, "bank.csv", "text/csv")
        assert len(rows) == 3
        assert rows[0]["question (english)"] == "What is HTML?"
        assert rows[0]["option a"] == "Markup"
        assert rows[1]["question (english)"] == ""

    def test_xlsx(self):
        buffer = io.BytesIO()
        pd.DataFrame([{"question_en": "What is CSS?", "A": "Markup", "B": "Style", "Correct": 1}]).to_excel(
            buffer, index=False
        )
        rows = read_rows(buffer.getvalue(), "bank.xlsx", XLSX_TYPE)
        assert rows == [{"question_en": "What is CSS?", "a": "Markup", "b": "Style", "correct": "1"}]

    def test_errors(self):
        with pytest.raises(SheetImportError, match="empty"):
            read_rows(b"", "bank.csv", "text/csv")
        with pytest.raises(SheetImportError, match="xls"):
            read_rows(b"data", "bank.xls", "application/vnd.ms-excel")
        with pytest.raises(SheetImportError, match="Failed to parse"):
            read_rows(b"not a workbook", "bank.xlsx", XLSX_TYPE)

    def test_format_detection(self):
        assert is_csv("bank.csv", "application/vnd.ms-excel") is True
        assert is_csv("bank.xlsx", "text/csv") is False
        assert is_csv(None, "text/csv") is True
        assert is_csv(None, XLSX_TYPE) is False


class TestRowsToQuestions:
    def test_shapes_questions(self):
        questions = rows_to_questions(read_rows(CSV, "bank.csv", "text/csv"))
        assert len(questions) == 2

        first = questions[0]
        assert first["question_number"] == 1
        assert first["question_text_mr"] == "HTML म्हणजे?"
        assert first["question_text_en"] == "What is HTML?"
        assert first["options"] == ["Markup", "Style", "Script", "Data"]
        assert first["correct_answer"] == 0
        assert (first["difficulty"], first["marks"]) == ("easy", 2)
        assert first["parsing_errors"] == []

        second = questions[1]
        assert second["question_number"] == 3
        assert second["question_text_mr"] is None
        assert second["question_type"] == "true_false"
        assert second["correct_answer"] == 1
        assert (second["difficulty"], second["marks"]) == ("hard", 1)
        assert second["parsing_errors"] == []

    def test_short_mcq_is_padded_and_flagged(self):
        [question] = rows_to_questions([{"question_en": "Q?", "a": "x", "b": "y", "type": "essay"}])
        assert question["question_type"] == "mcq_single"
        assert question["options"] == ["x", "y", "", ""]
        assert question["parsing_errors"] == ["Expected 4 options, found 2"]
        assert question["correct_answer"] is None

    @pytest.mark.parametrize("value,expected", [("0", 0), ("3", 3), ("b", 1), ("D", 3), ("4", None), ("E", None), ("", None)])
    def test_correct_answer(self, value, expected):
        assert parse_correct_answer(value) == expected

    def test_question_type_aliases(self):
        assert normalize_question_type("MCQ_DOUBLE") == "mcq_two"
        assert normalize_question_type("fib") == "fill_blank"
        assert normalize_question_type("match") == "match"
        assert normalize_question_type("essay") is None
