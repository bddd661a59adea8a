class TestProfile:

    def test_read_profile(self, client, patient_headers):
        response = client.get("/api/v1/profile/me", headers=patient_headers)
        assert response.status_code == 200
        assert response.json()["first_name"] == "Pat"

    def test_partial_update(self, client, patient_headers):
        response = client.patch(
            "/api/v1/profile/me",
            json={"phone": "555-0199", "birthdate": "1990-04-01"},
            headers=patient_headers,
        )
        assert response.status_code == 200

        data = response.json()
        assert data["phone"] == "555-0199"
        assert data["birthdate"] == "1990-04-01"
        # Untouched fields keep their values
        assert data["first_name"] == "Pat"
        assert data["last_name"] == "Smith"

    def test_update_requires_authentication(self, client):
        response = client.patch("/api/v1/profile/me", json={"phone": "1"})
        assert response.status_code in (401, 403)

class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"
