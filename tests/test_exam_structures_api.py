API = "/api/v1/exam-structures"

SECTIONS = [
    {"nameEn": "Fill in the Blanks", "nameMr": "रिकाम्या जागा भरा", "questionType": "fill_blank",
     "questionCount": 10, "marksPerQuestion": 1},
    {"name_en": "MCQ (Two Correct)", "name_mr": "बहुपर्यायी (दोन योग्य)", "question_type": "mcq_two",
     "question_count": 10, "marks_per_question": 2},
]


class TestStructures:
    def test_create_recomputes_totals(self, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS, total_marks=80, duration_minutes=180)
        assert structure["total_questions"] == 20
        assert structure["total_marks"] == 30
        assert [s["id"] for s in structure["sections"]] == ["s1", "s2"]
        assert structure["sections"][1]["total_marks"] == 20
        assert structure["sections"][0]["question_type"] == "fill_blank"

    def test_without_sections_keeps_given_totals(self, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], total_marks=25, total_questions=20)
        assert (structure["total_marks"], structure["total_questions"]) == (25, 20)

    def test_rules(self, client, make):
        subject = make.subject("Information Technology")
        base = {"subject_id": subject["id"], "name_en": "X", "name_mr": "X"}
        assert client.post(API, json={**base, "duration_minutes": 0}).status_code == 400
        assert client.post(API, json={**base, "total_marks": 0}).status_code == 400
        assert client.post(API, json={**base, "passing_percentage": 101}).status_code == 400

    def test_invalid_section(self, client, make):
        subject = make.subject("Information Technology")
        resp = client.post(API, json={
            "subject_id": subject["id"], "name_en": "X", "name_mr": "X",
            "sections": [{"name_en": "", "question_type": "mcq_single"}],
        })
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Section 1:")

    def test_zero_and_non_numeric_section_counts(self, client, make):
        subject = make.subject("Information Technology")
        base = {"subject_id": subject["id"], "name_en": "X", "name_mr": "X"}
        zero = {"name_en": "MCQ", "question_type": "mcq_single", "question_count": 0, "marks_per_question": 0}
        resp = client.post(API, json={**base, "sections": [zero]})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Section 1: Question count must be at least 1"

        word = {"name_en": "MCQ", "question_type": "mcq_single", "question_count": "abc"}
        resp = client.post(API, json={**base, "sections": [SECTIONS[0], word]})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Section 2: Question count must be a whole number"

        structure = make.structure(subject["id"], sections=SECTIONS)
        resp = client.patch(f"{API}/{structure['id']}", json={"sections": [{**SECTIONS[1], "marks_per_question": 0}]})
        assert resp.status_code == 400
        assert client.get(f"{API}/{structure['id']}").json()["total_marks"] == 30

    def test_section_totals_win_over_given_totals(self, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS, total_marks=0)
        assert structure["total_marks"] == 30

    def test_null_fields_rejected_on_update(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"])
        url = f"{API}/{structure['id']}"
        for field in ("total_marks", "durationMinutes", "name_en", "sections", "is_active"):
            assert client.patch(url, json={field: None}).status_code == 422, field
        assert client.get(url).json()["total_marks"] == 100
        assert client.patch(url, json={"description_en": None, "class_level_id": None}).status_code == 200

    def test_clearing_sections(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS)
        url = f"{API}/{structure['id']}"
        assert client.patch(url, json={"sections": []}).status_code == 400

        body = client.patch(url, json={"sections": [], "total_questions": 40, "total_marks": 80}).json()
        assert body["sections"] == []
        assert (body["total_questions"], body["total_marks"]) == (40, 80)

        body = client.patch(url, json={"sections": SECTIONS[:1]}).json()
        assert (body["total_questions"], body["total_marks"]) == (10, 10)

    def test_unknown_subject(self, client):
        resp = client.post(API, json={"subject_id": "missing", "name_en": "X", "name_mr": "X"})
        assert resp.status_code == 404

    def test_list_get_update_delete(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], is_template=True)
        make.structure(subject["id"], name_en="Draft pattern")

        assert len(client.get(API, params={"subject_id": subject["id"]}).json()) == 2
        templates = client.get(API, params={"is_template": True}).json()
        assert [s["id"] for s in templates] == [structure["id"]]

        resp = client.patch(f"{API}/{structure['id']}", json={"passingPercentage": 40})
        assert resp.json()["passing_percentage"] == 40
        assert client.patch(f"{API}/{structure['id']}", json={"duration_minutes": -5}).status_code == 400

        client.delete(f"{API}/{structure['id']}")
        assert client.get(f"{API}/{structure['id']}").status_code == 404

    def test_available(self, client, make):
        subject = make.subject("Information Technology")
        class_12 = make.class_level("class-12")
        class_11 = make.class_level("class-11")
        make.structure(subject["id"], name_en="Any class")
        make.structure(subject["id"], name_en="Class 12 only", class_level_id=class_12["id"])
        make.structure(subject["id"], name_en="Class 11 only", class_level_id=class_11["id"])

        assert client.get(f"{API}/available").status_code == 400
        rows = client.get(f"{API}/available", params={
            "subject_id": subject["id"], "class_level_id": class_12["id"],
        }).json()
        assert {r["name_en"] for r in rows} == {"Any class", "Class 12 only"}


class TestSectionEditor:
    def test_get_existing_section(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS)
        body = client.get(f"{API}/{structure['id']}/sections/1").json()
        assert body["is_new"] is False
        assert body["section"]["name_en"] == "MCQ (Two Correct)"
        assert body["total_marks"] == 20
        assert [s["complete"] for s in body["steps"]] == [True, False, True]

    def test_new_section_slot(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS)
        body = client.get(f"{API}/{structure['id']}/sections/2").json()
        assert body["is_new"] is True
        assert body["section"] == {}
        assert client.get(f"{API}/{structure['id']}/sections/3").status_code == 404

    def test_save_existing_section(self, client, make):
        subject = make.subject("Information Technology")
        chapter = make.chapter(subject["slug"])
        structure = make.structure(subject["id"], sections=SECTIONS)
        resp = client.put(f"{API}/{structure['id']}/sections/0", json={
            "questionCount": 5,
            "chapterConfigs": [{"chapterId": chapter["id"], "questionCount": 5}],
        })
        assert resp.status_code == 200
        body = resp.json()
        first = body["sections"][0]
        assert first["id"] == "s1"
        assert first["name_en"] == "Fill in the Blanks"
        assert first["total_marks"] == 5
        assert first["chapter_configs"] == [{"chapter_id": chapter["id"], "question_count": 5}]
        assert (body["total_questions"], body["total_marks"]) == (15, 25)

    def test_append_section(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS)
        body = client.put(f"{API}/{structure['id']}/sections/2", json={
            "name_en": "Short Answers", "question_type": "short_answer",
            "question_count": 4, "marks_per_question": 4,
        }).json()
        assert len(body["sections"]) == 3
        assert body["sections"][2]["id"] == "s3"
        assert body["total_marks"] == 46

    def test_save_rejects_bad_input(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], sections=SECTIONS)
        url = f"{API}/{structure['id']}/sections"
        assert client.put(f"{url}/2", json={"question_type": "mcq_single"}).status_code == 400
        assert client.put(f"{url}/0", json={"question_count": 0}).status_code == 400
        assert client.put(f"{url}/0", json={
            "chapter_configs": [{"chapter_id": "missing", "question_count": 1}],
        }).status_code == 400
        assert client.put(f"{url}/7", json={"name_en": "X"}).status_code == 404
