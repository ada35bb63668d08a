API = "/api/v1"


class TestSchools:
    def test_create_normalises_name(self, make):
        school = make.school("  New   English  School ")
        assert school["name"] == "New English School"
        assert school["name_search"] == "new english school"
        assert school["location_country"] == "India"

    def test_duplicate_in_same_city(self, client, make):
        make.school("New English School", "Satara")
        resp = client.post(f"{API}/schools", json={"name": "new english school", "location_city": "Satara"})
        assert resp.status_code == 409
        assert client.post(f"{API}/schools", json={"name": "New English School", "location_city": "Pune"}).status_code == 201

    def test_validation(self, client):
        assert client.post(f"{API}/schools", json={"name": "X"}).status_code == 422
        assert client.post(f"{API}/schools", json={"name": "School", "founded_year": "19"}).status_code == 422

    def test_list_filters_and_pages(self, client, make):
        make.school("Jnana Prabodhini Prashala", "Pune", is_verified=True)
        make.school("Modern College", "Pune")
        make.school("New English School", "Satara", is_verified=True)

        page = client.get(f"{API}/schools", params={"page_size": 2}).json()
        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert [s["name"] for s in page["items"]] == ["Jnana Prabodhini Prashala", "Modern College"]

        assert client.get(f"{API}/schools", params={"city": "Pune"}).json()["total"] == 2
        assert client.get(f"{API}/schools", params={"verified": True}).json()["total"] == 2
        found = client.get(f"{API}/schools", params={"search": "ENGLISH"}).json()
        assert [s["name"] for s in found["items"]] == ["New English School"]

    def test_search_puts_verified_first(self, client, make):
        make.school("Adarsh Vidyalaya", "Pune")
        make.school("Vidyalaya Zilla Parishad", "Satara", is_verified=True)
        assert client.get(f"{API}/schools/search", params={"q": "v"}).json() == []
        rows = client.get(f"{API}/schools/search", params={"q": "vidyalaya"}).json()
        assert [s["name"] for s in rows] == ["Vidyalaya Zilla Parishad", "Adarsh Vidyalaya"]

    def test_suggest(self, client, make):
        make.school("Modern College", "Pune")
        make.school("Model English School", "Satara")
        make.school("New Model School", "Pune")
        rows = client.get(f"{API}/schools/suggest", params={"q": "mod"}).json()
        assert {s["name"] for s in rows} == {"Modern College", "Model English School"}
        assert set(rows[0]) == {"id", "name", "location_city", "is_verified"}

    def test_update_and_delete(self, client, make):
        school = make.school("Modern College", "Pune")
        make.school("Fergusson College", "Pune")
        url = f"{API}/schools/{school['id']}"
        assert client.patch(url, json={"name": "Fergusson College"}).status_code == 409
        updated = client.patch(url, json={"name": "Modern  College of Arts", "isVerified": True}).json()
        assert updated["name_search"] == "modern college of arts"
        assert updated["is_verified"] is True

        client.delete(url)
        assert client.get(url).status_code == 404


class TestUsers:
    def test_create_and_school_count(self, client, make):
        school = make.school()
        user = make.user(school_id=school["id"], role="student", preferredLanguage="mr")
        assert user["preferred_language"] == "mr"
        assert user["school_id"] == school["id"]
        assert client.get(f"{API}/schools/{school['id']}").json()["student_count"] == 1

    def test_email_or_phone_required(self, client):
        assert client.post(f"{API}/users", json={"name": "Nobody"}).status_code == 400
        assert client.post(f"{API}/users", json={"phone": "9876543210"}).status_code == 201

    def test_invalid_fields(self, client):
        assert client.post(f"{API}/users", json={"email": "not-an-email"}).status_code == 422
        assert client.post(f"{API}/users", json={"email": "a@b.in", "role": "parent"}).status_code == 422

    def test_duplicates(self, client, make):
        make.user("student@example.com", phone="9876543210")
        assert client.post(f"{API}/users", json={"email": "student@example.com"}).status_code == 409
        assert client.post(f"{API}/users", json={"email": "x@example.com", "phone": "9876543210"}).status_code == 409

    def test_unknown_school(self, client):
        resp = client.post(f"{API}/users", json={"email": "a@b.in", "school_id": "missing"})
        assert resp.status_code == 400

    def test_list_filters(self, client, make):
        make.user("teacher@example.com", role="teacher", name="Teacher")
        make.user("student@example.com")
        assert client.get(f"{API}/users").json()["total"] == 2
        teachers = client.get(f"{API}/users", params={"role": "teacher"}).json()["items"]
        assert [u["email"] for u in teachers] == ["teacher@example.com"]
        found = client.get(f"{API}/users", params={"search": "student@"}).json()["items"]
        assert [u["email"] for u in found] == ["student@example.com"]

    def test_update_and_delete(self, client, make):
        user = make.user()
        other = make.user("other@example.com")
        url = f"{API}/users/{user['id']}"
        assert client.patch(url, json={"email": other["email"]}).status_code == 409
        assert client.patch(url, json={"name": "Renamed", "classLevel": "class-8"}).json()["class_level"] == "class-8"

        client.delete(url)
        assert client.get(url).status_code == 404
        assert client.get(f"{API}/users").json()["total"] == 1


def test_updates_reject_null_for_required_fields(client, make):
    school = make.school()
    user = make.user(school_id=school["id"])
    assert client.patch(f"{API}/schools/{school['id']}", json={"name": None}).status_code == 422
    assert client.patch(f"{API}/schools/{school['id']}", json={"isVerified": None}).status_code == 422
    assert client.patch(f"{API}/users/{user['id']}", json={"role": None}).status_code == 422
    assert client.patch(f"{API}/users/{user['id']}", json={"preferred_language": None}).status_code == 422
    assert client.patch(f"{API}/users/{user['id']}", json={"name": None}).json()["name"] is None
    assert client.patch(f"{API}/users/{user['id']}", json={"email": None}).status_code == 400
