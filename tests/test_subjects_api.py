API = "/api/v1"


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


class TestSubjects:
    def test_create_derives_slug(self, make):
        subject = make.subject("Information Technology")
        assert subject["slug"] == "information-technology"
        assert subject["is_active"] is True

    def test_camel_case_body(self, client):
        resp = client.post(f"{API}/subjects", json={"nameEn": "Geography", "nameMr": "भूगोल", "orderIndex": 4})
        assert resp.status_code == 201
        assert resp.json()["order_index"] == 4

    def test_duplicate_slug(self, client, make):
        make.subject("History")
        resp = client.post(f"{API}/subjects", json={"name_en": "History", "name_mr": "इतिहास"})
        assert resp.status_code == 409

    def test_missing_fields(self, client):
        assert client.post(f"{API}/subjects", json={"name_en": "History"}).status_code == 422

    def test_lookup_by_slug_alternate_slug_and_id(self, client, make):
        subject = make.subject("Information Technology")
        for key in ("information-technology", "information_technology", subject["id"]):
            resp = client.get(f"{API}/subjects/{key}")
            assert resp.status_code == 200
            assert resp.json()["id"] == subject["id"]

    def test_unknown_subject(self, client):
        assert client.get(f"{API}/subjects/nope").status_code == 404

    def test_update(self, client, make):
        subject = make.subject("History")
        resp = client.patch(f"{API}/subjects/{subject['id']}", json={"icon": "📜"})
        assert resp.status_code == 200
        assert resp.json()["icon"] == "📜"
        assert resp.json()["name_en"] == "History"

    def test_update_to_taken_slug(self, client, make):
        make.subject("History")
        other = make.subject("Geography")
        resp = client.patch(f"{API}/subjects/{other['id']}", json={"slug": "history"})
        assert resp.status_code == 409

    def test_soft_delete_hides_subject(self, client, make):
        subject = make.subject("History")
        assert client.delete(f"{API}/subjects/{subject['id']}").json()["deleted"] is True
        assert client.get(f"{API}/subjects/history").status_code == 404
        assert client.get(f"{API}/subjects").json() == []

    def test_list_filters(self, client, make):
        parent = make.subject("Scholarship", is_category=True)
        client.post(f"{API}/subjects/scholarship/children", json={"name_en": "Mathematics", "name_mr": "गणित"})
        make.subject("Information Technology")

        assert len(client.get(f"{API}/subjects").json()) == 3
        roots = client.get(f"{API}/subjects", params={"root_only": True}).json()
        assert {s["slug"] for s in roots} == {"scholarship", "information-technology"}
        children = client.get(f"{API}/subjects", params={"parent_id": parent["id"]}).json()
        assert [s["slug"] for s in children] == ["scholarship-mathematics"]


class TestChildren:
    def test_create_child_under_category(self, client, make):
        make.subject("Scholarship", is_category=True)
        resp = client.post(
            f"{API}/subjects/scholarship/children",
            json={"name_en": "Marathi / First Language", "name_mr": "मराठी / प्रथम भाषा", "paperNumber": "I"},
        )
        assert resp.status_code == 201
        child = resp.json()
        assert child["slug"] == "scholarship-marathi-first-language"
        assert child["order_index"] == 1
        assert child["paper_number"] == "I"

        second = client.post(f"{API}/subjects/scholarship/children",
                             json={"name_en": "Mathematics", "name_mr": "गणित"}).json()
        assert second["order_index"] == 2

        detail = client.get(f"{API}/subjects/scholarship").json()
        assert [c["slug"] for c in detail["children"]] == [
            "scholarship-marathi-first-language", "scholarship-mathematics",
        ]
        listed = client.get(f"{API}/subjects/scholarship/children").json()
        assert len(listed) == 2

    def test_parent_must_be_category(self, client, make):
        make.subject("History")
        resp = client.post(f"{API}/subjects/history/children", json={"name_en": "Ancient", "name_mr": "प्राचीन"})
        assert resp.status_code == 400

    def test_duplicate_child(self, client, make):
        make.subject("Scholarship", is_category=True)
        body = {"name_en": "Mathematics", "name_mr": "गणित"}
        assert client.post(f"{API}/subjects/scholarship/children", json=body).status_code == 201
        assert client.post(f"{API}/subjects/scholarship/children", json=body).status_code == 409


class TestSubjectOverview:
    def test_stats(self, client, make):
        make.subject("Scholarship", is_category=True)
        subject = make.subject("Information Technology")
        make.chapter(subject["slug"])
        make.question(subject["slug"])
        stats = client.get(f"{API}/subjects/stats").json()
        assert stats == {"total_categories": 1, "root_subjects": 2, "total_chapters": 1, "total_questions": 1}

    def test_with_class_counts(self, client, make):
        subject = make.subject("Information Technology")
        make.subject("History")
        for slug in ("class-11", "class-12"):
            make.class_level(slug)
            client.post(f"{API}/class-levels/{slug}/subjects", json={"subject_id": subject["id"]})
        rows = {s["slug"]: s["class_count"] for s in client.get(f"{API}/subjects/with-class-counts").json()}
        assert rows == {"information-technology": 2, "history": 0}

    def test_default_exam_structure(self, client, make):
        make.subject("Information Technology")
        blueprint = client.get(f"{API}/subjects/information-technology/exam-structure").json()
        assert blueprint["id"] is None
        assert [s["code"] for s in blueprint["sections"]] == [f"q{i}" for i in range(1, 9)]
        assert blueprint["total_questions"] == 37
        assert blueprint["total_marks"] == 90
        assert blueprint["duration_minutes"] == 150

    def test_saved_exam_structure_wins(self, client, make):
        subject = make.subject("Information Technology")
        structure = make.structure(subject["id"], name_en="Board Pattern")
        got = client.get(f"{API}/subjects/information-technology/exam-structure").json()
        assert got["id"] == structure["id"]


def test_update_rejects_null_for_required_fields(client, make):
    subject = make.subject("History")
    url = f"{API}/subjects/{subject['id']}"
    for field in ("name_en", "slug", "isActive", "order_index"):
        assert client.patch(url, json={field: None}).status_code == 422, field
    assert client.patch(url, json={"icon": None}).json()["icon"] is None
    assert client.get(f"{API}/subjects/history").json()["name_en"] == "History"


class TestSectionPractice:
    URL = f"{API}/subjects/information-technology/section-practice"

    def _bank(self, make):
        subject = make.subject("Information Technology")
        for i in range(3):
            make.question("information-technology", text=f"MCQ {i}")
        make.question("information-technology", text="HTML is a language", question_type="true_false",
                      answer_data={"correct": True})
        return subject

    def test_default_blueprint_codes(self, client, make):
        self._bank(make)
        body = client.get(self.URL, params={"section": "Q3", "count": 2}).json()
        assert body["question_type"] == "mcq_single"
        assert len(body["questions"]) == 2
        assert {q["question_type"] for q in body["questions"]} == {"mcq_single"}
        assert body["questions"][0]["answer_data"]["correct"] == 2

        body = client.get(self.URL, params={"section": "Section 2"}).json()
        assert [q["question_text"] for q in body["questions"]] == ["HTML is a language"]

    def test_type_names_and_aliases(self, client, make):
        self._bank(make)
        assert client.get(self.URL, params={"section": "tf"}).json()["question_type"] == "true_false"
        body = client.get(self.URL, params={"section": "mcq_double"}).json()
        assert (body["question_type"], body["questions"]) == ("mcq_two", [])

    def test_structure_codes_win(self, client, make):
        subject = self._bank(make)
        make.structure(subject["id"], sections=[
            {"code": "Q2", "name_en": "MCQ", "question_type": "mcq_single", "question_count": 3, "marks_per_question": 1},
        ])
        body = client.get(self.URL, params={"section": "q2"}).json()
        assert body["question_type"] == "mcq_single"
        assert len(body["questions"]) == 3

    def test_bad_requests(self, client, make):
        self._bank(make)
        assert client.get(self.URL).status_code == 400
        assert client.get(self.URL, params={"section": "essay"}).status_code == 400
        assert client.get(self.URL, params={"section": "q1", "count": 0}).status_code == 422
        assert client.get(f"{API}/subjects/missing/section-practice", params={"section": "q1"}).status_code == 404
