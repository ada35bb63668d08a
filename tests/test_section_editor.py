import pytest

from section_editor import (
    CONFIGURE,
    REVIEW,
    SOURCE,
    SectionDraft,
    SectionValidationError,
    apply_section,
    section_totals,
)


class TestSectionDraft:
    def test_new_draft_defaults(self):
        draft = SectionDraft(order_index=3)
        assert draft.step == CONFIGURE
        assert draft.question_type == "mcq_single"
        assert draft.question_count == 1
        assert draft.marks_per_question == 1
        assert draft.total_marks == 1

    def test_loads_existing_section(self):
        draft = SectionDraft({
            "id": "q4", "name_en": "MCQ (Two Correct)", "question_type": "mcq_two",
            "question_count": 10, "marks_per_question": 2, "order_index": 4,
        })
        assert draft.total_marks == 20
        assert draft.order_index == 4

    def test_step_navigation_is_clamped(self):
        draft = SectionDraft()
        assert draft.prev_step() == CONFIGURE
        assert draft.next_step() == SOURCE
        assert draft.next_step() == REVIEW
        assert draft.next_step() == REVIEW
        assert draft.go_to(SOURCE) == SOURCE

    def test_go_to_unknown_step(self):
        with pytest.raises(ValueError):
            SectionDraft().go_to(7)

    def test_step_status(self):
        draft = SectionDraft()
        steps = draft.step_status()
        assert [s["id"] for s in steps] == [CONFIGURE, SOURCE, REVIEW]
        assert steps[0]["current"] is True
        assert steps[0]["complete"] is False
        assert steps[1]["complete"] is False

        draft.update(name_en="True or False", chapter_configs=[{"chapter_id": "c1", "question_count": 2}])
        steps = draft.step_status()
        assert steps[0]["complete"] is True
        assert steps[1]["complete"] is True

    def test_update_ignores_none_and_unknown(self):
        draft = SectionDraft({"name_en": "Fill in the Blanks"})
        draft.update(name_en=None, bogus=1, step=REVIEW, question_count=5)
        assert draft.name_en == "Fill in the Blanks"
        assert draft.step == CONFIGURE
        assert draft.question_count == 5
        assert not hasattr(draft, "bogus")


class TestToSection:
    def test_fills_ids_and_totals(self):
        draft = SectionDraft(order_index=2)
        draft.update(name_en="  Short Answers ", question_type="short_answer",
                     question_count=5, marks_per_question=2)
        section = draft.to_section()
        assert section["id"] == "s2"
        assert section["code"] == "s2"
        assert section["name_en"] == "Short Answers"
        assert section["total_marks"] == 10
        assert "chapter_configs" not in section
        assert "selected_question_ids" not in section

    def test_keeps_original_keys(self):
        draft = SectionDraft({"id": "q1", "code": "Q1", "name_en": "Blanks", "custom": "x",
                              "chapter_configs": [{"chapter_id": "c1", "question_count": 1}]})
        draft.update(chapter_configs=[])
        section = draft.to_section()
        assert section["id"] == "q1"
        assert section["code"] == "Q1"
        assert section["custom"] == "x"
        assert "chapter_configs" not in section

    @pytest.mark.parametrize("changes,message", [
        ({"name_en": "   "}, "section name"),
        ({"name_en": "A", "question_type": "essay"}, "Unknown question type"),
        ({"name_en": "A", "question_count": 0}, "Question count"),
        ({"name_en": "A", "marks_per_question": 0}, "Marks per question"),
    ])
    def test_validation(self, changes, message):
        draft = SectionDraft()
        draft.update(**changes)
        with pytest.raises(SectionValidationError, match=message):
            draft.to_section()

    @pytest.mark.parametrize("section,message", [
        ({"name_en": "A", "question_count": 0}, "Question count must be at least 1"),
        ({"name_en": "A", "marks_per_question": 0}, "Marks per question must be at least 1"),
        ({"name_en": "A", "question_count": -2}, "Question count must be at least 1"),
    ])
    def test_zero_counts_from_a_stored_section(self, section, message):
        with pytest.raises(SectionValidationError, match=message):
            SectionDraft(section).to_section()

    @pytest.mark.parametrize("value", ["abc", 2.5, True, [3]])
    def test_counts_must_be_whole_numbers(self, value):
        with pytest.raises(SectionValidationError, match="Question count must be a whole number"):
            SectionDraft({"name_en": "A", "question_count": value})

    def test_numeric_strings_and_missing_counts(self):
        draft = SectionDraft({"name_en": "A", "question_count": "5", "marks_per_question": None})
        assert (draft.question_count, draft.marks_per_question) == (5, 1)


class TestApplySection:
    SECTIONS = [
        {"id": "q1", "question_count": 10, "marks_per_question": 1, "total_marks": 10},
        {"id": "q2", "question_count": 10, "marks_per_question": 2, "total_marks": 20},
    ]

    def test_totals(self):
        assert section_totals(self.SECTIONS) == (20, 30)

    def test_totals_without_total_marks(self):
        assert section_totals([{"question_count": 4, "marks_per_question": 3}]) == (4, 12)

    def test_replace(self):
        new = {"id": "q2", "question_count": 5, "marks_per_question": 1, "total_marks": 5}
        sections, questions, marks = apply_section(self.SECTIONS, 1, new)
        assert sections[1] == new
        assert (questions, marks) == (15, 15)
        assert self.SECTIONS[1]["question_count"] == 10

    def test_append(self):
        new = {"id": "q3", "question_count": 1, "marks_per_question": 4, "total_marks": 4}
        sections, questions, marks = apply_section(self.SECTIONS, 2, new)
        assert len(sections) == 3
        assert (questions, marks) == (21, 34)

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            apply_section(self.SECTIONS, 5, {})
