"""Tests for review and target routes."""

import pytest

from checks.models import VersionRecord


@pytest.fixture
def flagged_id(store, resolve_target):
    return store.insert_version_record(
        VersionRecord(
            software_id="resolve",
            version="25.1",
            requires_manual_review=True,
            validation_notes="Likely wrong product.",
        )
    )


class TestReviewRoutes:
    def test_list(self, client, auth_headers, flagged_id):
        res = client.get("/api/review", headers=auth_headers)
        assert res.status_code == 200
        assert [r["id"] for r in res.json()] == [flagged_id]

    def test_approve(self, client, auth_headers, store, flagged_id):
        res = client.post(f"/api/review/{flagged_id}/approve", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["newsletter_verified"] is True
        assert store.list_flagged() == []

    def test_edit(self, client, auth_headers, flagged_id):
        res = client.put(
            f"/api/review/{flagged_id}",
            json={"version": "19.1", "release_date": "2024-11-12"},
            headers=auth_headers,
        )
        assert res.status_code == 200
        body = res.json()
        assert body["version"] == "19.1"
        assert body["confidence_score"] == 100
        assert body["extraction_method"] == "manual"

    def test_edit_bad_date(self, client, auth_headers, flagged_id):
        res = client.put(
            f"/api/review/{flagged_id}", json={"release_date": "Nov 12"}, headers=auth_headers
        )
        assert res.status_code == 422

    def test_edit_conflicting_version(self, client, auth_headers, store, flagged_id):
        store.insert_version_record(VersionRecord(software_id="resolve", version="19.2"))
        res = client.put(
            f"/api/review/{flagged_id}", json={"version": "19.2"}, headers=auth_headers
        )
        assert res.status_code == 409
        assert store.get_version_record(flagged_id).version == "25.1"

    def test_override(self, client, auth_headers, store, flagged_id):
        res = client.post(f"/api/review/{flagged_id}/override", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["is_current_override"] is True
        assert store.get_target("resolve").current_version == "25.1"

    def test_reject(self, client, auth_headers, store, flagged_id):
        res = client.delete(f"/api/review/{flagged_id}", headers=auth_headers)
        assert res.status_code == 200
        assert store.get_version_record(flagged_id) is None

    def test_missing(self, client, auth_headers):
        assert client.post("/api/review/999/approve", headers=auth_headers).status_code == 404
        assert client.delete("/api/review/999", headers=auth_headers).status_code == 404
        assert client.post("/api/review/999/override", headers=auth_headers).status_code == 404

    def test_requires_auth(self, client, flagged_id):
        assert client.get("/api/review").status_code == 401


class TestTargetRoutes:
    def test_list(self, client, auth_headers, resolve_target):
        res = client.get("/api/targets", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()[0]["current_version"] == "19.0"

    def test_versions(self, client, auth_headers, flagged_id):
        res = client.get("/api/targets/resolve/versions", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()[0]["version"] == "25.1"

    def test_versions_unknown_target(self, client, auth_headers):
        assert client.get("/api/targets/ghost/versions", headers=auth_headers).status_code == 404
