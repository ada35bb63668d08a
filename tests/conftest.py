import os
import tempfile

# db.py reads DATABASE_URL at import time
_tmp_dir = tempfile.mkdtemp(prefix="examdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"

import pytest
from fastapi.testclient import TestClient

from db import Base, engine
from main import app


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make(client):
    """Small factories that go through the API, returning the JSON body."""

    class Factory:
        def subject(self, name_en="Information Technology", **extra):
            body = {"name_en": name_en, "name_mr": extra.pop("name_mr", name_en), **extra}
            resp = client.post("/api/v1/subjects", json=body)
            assert resp.status_code == 201, resp.text
            return resp.json()

        def chapter(self, subject_slug, name_en="Web Publishing", **extra):
            body = {"name_en": name_en, "name_mr": extra.pop("name_mr", name_en), **extra}
            resp = client.post(f"/api/v1/subjects/{subject_slug}/chapters", json=body)
            assert resp.status_code == 201, resp.text
            return resp.json()

        def question(self, subject_slug, text="Which symbol starts a PHP variable?",
                     question_type="mcq_single", answer_data=None, **extra):
            body = {
                "question_text": text,
                "question_type": question_type,
                "answer_data": answer_data or {"options": ["#", "@", "$", "&"], "correct": 2},
                **extra,
            }
            resp = client.post(f"/api/v1/subjects/{subject_slug}/questions", json=body)
            assert resp.status_code == 201, resp.text
            return resp.json()

        def class_level(self, slug="class-12", **extra):
            number = slug.rsplit("-", 1)[-1]
            body = {"slug": slug, "name_en": f"Class {number}", "name_mr": f"इयत्ता {number}", **extra}
            resp = client.post("/api/v1/class-levels", json=body)
            assert resp.status_code == 201, resp.text
            return resp.json()

        def structure(self, subject_id, sections=None, **extra):
            body = {
                "subject_id": subject_id,
                "name_en": extra.pop("name_en", "Unit Test"),
                "name_mr": extra.pop("name_mr", "घटक चाचणी"),
                "sections": sections or [],
                **extra,
            }
            resp = client.post("/api/v1/exam-structures", json=body)
            assert resp.status_code == 201, resp.text
            return resp.json()

        def user(self, email="student@example.com", **extra):
            resp = client.post("/api/v1/users", json={"email": email, "name": "Student", **extra})
            assert resp.status_code == 201, resp.text
            return resp.json()

        def school(self, name="New English School", city="Satara", **extra):
            resp = client.post("/api/v1/schools", json={"name": name, "location_city": city, **extra})
            assert resp.status_code == 201, resp.text
            return resp.json()

    return Factory()
