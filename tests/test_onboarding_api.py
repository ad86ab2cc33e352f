from __future__ import annotations

from datetime import timedelta

import pytest

from edufund.models.onboarding import InvestorOnboarding, StudentOnboarding
from edufund.models.profile import UserProfileModel
from edufund.services import onboarding_service


def _session(client):
    return client.app.state.registry.connections.acquire()


def _counts(client) -> tuple[int, int, int]:
    with _session(client) as db:
        return (
            db.query(UserProfileModel).count(),
            db.query(StudentOnboarding).count(),
            db.query(InvestorOnboarding).count(),
        )


def test_student_onboarding_creates_profile_and_linked_record(client, auth_headers) -> None:
    payload = {
        "role": "student",
        "personalDetails": {"name": "A"},
        "education": {"level": "BSc"},
        "fundingNeedReason": "Tuition",
    }
    r = client.post("/api/onboarding", json=payload, headers=auth_headers("user_1"))
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Onboarding data saved successfully for student."
    assert body["data"] == {
        "userId": "user_1",
        "personalDetails": {"name": "A"},
        "education": {"level": "BSc"},
        "skills": {},
        "career": {},
    }

    with _session(client) as db:
        profile = db.query(UserProfileModel).one()
        assert profile.user_id == "user_1"
        assert profile.personal_details["name"] == "A"

        record = db.query(StudentOnboarding).one()
        assert record.clerk_id == "user_1"
        assert record.user_id == profile.id
        assert record.completed_at is not None
        assert record.current_education_level == "BSc"
        assert record.funding_need_reason == "Tuition"
        assert record.onboarding_data == payload

        assert db.query(InvestorOnboarding).count() == 0


def test_investor_onboarding_stores_role_fields(client, auth_headers) -> None:
    payload = {
        "role": "investor",
        "personalDetails": {"name": "Ivy", "location": "Berlin"},
        "investmentFocus": "edtech",
        "preferredStages": ["seed", "series-a"],
        "companyName": "Acme Ventures",
        "linkedInProfile": "https://linkedin.example/ivy",
        "accreditationStatus": "accredited",
        "somethingNew": {"kept": True},
    }
    r = client.post("/api/onboarding", json=payload, headers=auth_headers("inv_1"))
    assert r.status_code == 200
    assert r.json()["message"] == "Onboarding data saved successfully for investor."
    assert "investmentFocus" not in r.json()["data"]

    with _session(client) as db:
        record = db.query(InvestorOnboarding).one()
        assert record.investment_focus == ["edtech"]
        assert record.preferred_stages == ["seed", "series-a"]
        assert record.company_name == "Acme Ventures"
        assert record.linked_in_profile == "https://linkedin.example/ivy"
        assert record.accreditation_status == "accredited"
        assert record.onboarding_data["somethingNew"] == {"kept": True}
        assert db.query(StudentOnboarding).count() == 0


def test_missing_identity_returns_401_without_writes(client) -> None:
    r = client.post("/api/onboarding", json={"role": "student"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Unauthorized"}
    assert _counts(client) == (0, 0, 0)


def test_bad_token_returns_401(client, auth_headers) -> None:
    r = client.post("/api/onboarding", json={"role": "student"}, headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401

    expired = auth_headers("user_1", expires_delta=timedelta(minutes=-10))
    r = client.post("/api/onboarding", json={"role": "student"}, headers=expired)
    assert r.status_code == 401
    assert _counts(client) == (0, 0, 0)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"role": "other"},
        {"role": None, "personalDetails": {"name": "A"}},
        {"personalDetails": {"name": "A"}},
        ["student"],
    ],
)
def test_missing_or_unknown_role_returns_400_without_writes(client, auth_headers, payload) -> None:
    r = client.post("/api/onboarding", json=payload, headers=auth_headers())
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert "role" in body["message"]
    assert _counts(client) == (0, 0, 0)


def test_malformed_section_returns_400(client, auth_headers) -> None:
    r = client.post(
        "/api/onboarding",
        json={"role": "student", "skills": {"interests": {"not": "a list"}}},
        headers=auth_headers(),
    )
    assert r.status_code == 400
    assert "skills.interests" in r.json()["message"]
    assert _counts(client) == (0, 0, 0)


def test_unauthenticated_check_happens_before_role_check(client) -> None:
    r = client.post("/api/onboarding", json={"role": "other"})
    assert r.status_code == 401


def test_identical_resubmission_is_idempotent(client, auth_headers) -> None:
    payload = {
        "role": "student",
        "personalDetails": {"name": "A", "bio": "hi"},
        "skills": {"selectedSkills": ["python"], "interests": ["ml"]},
        "educationalGoals": "MSc",
        "skillsToDevelop": ["statistics"],
    }

    def snapshot():
        with _session(client) as db:
            profile = db.query(UserProfileModel).one()
            record = db.query(StudentOnboarding).one()
            return (
                profile.id,
                profile.personal_details,
                profile.education,
                profile.skills,
                profile.career,
                record.id,
                record.user_id,
                record.educational_goals,
                record.skills_to_develop,
                record.onboarding_data,
            )

    assert client.post("/api/onboarding", json=payload, headers=auth_headers()).status_code == 200
    first = snapshot()
    assert client.post("/api/onboarding", json=payload, headers=auth_headers()).status_code == 200
    second = snapshot()

    assert first == second
    assert _counts(client) == (1, 1, 0)


def test_resubmission_replaces_supplied_sections_and_keeps_others(client, auth_headers) -> None:
    first = {
        "role": "student",
        "personalDetails": {"name": "A", "bio": "first"},
        "education": {"level": "BSc", "major": "Physics"},
    }
    second = {"role": "student", "personalDetails": {"name": "B"}}
    assert client.post("/api/onboarding", json=first, headers=auth_headers()).status_code == 200
    r = client.post("/api/onboarding", json=second, headers=auth_headers())
    assert r.status_code == 200

    data = r.json()["data"]
    # Sections are replaced wholesale, not deep-merged.
    assert data["personalDetails"] == {"name": "B"}
    assert data["education"] == {"level": "BSc", "major": "Physics"}

    with _session(client) as db:
        profile = db.query(UserProfileModel).one()
        assert profile.updated_at >= profile.created_at


def test_role_fields_absent_from_resubmission_are_kept(client, auth_headers) -> None:
    first = {
        "role": "student",
        "educationalGoals": "BSc",
        "fundingNeedReason": "Tuition",
        "education": {"level": "A-level", "major": "Maths"},
    }
    second = {"role": "student", "educationalGoals": "MSc", "careerAspirations": None}
    assert client.post("/api/onboarding", json=first, headers=auth_headers()).status_code == 200
    assert client.post("/api/onboarding", json=second, headers=auth_headers()).status_code == 200

    with _session(client) as db:
        record = db.query(StudentOnboarding).one()
        assert record.educational_goals == "MSc"
        assert record.funding_need_reason == "Tuition"
        assert record.career_aspirations is None
        assert record.current_education_level == "A-level"
        assert record.field_of_study == "Maths"
        assert record.onboarding_data == second


def test_student_and_investor_records_coexist(client, auth_headers) -> None:
    headers = auth_headers("user_9")
    assert client.post("/api/onboarding", json={"role": "student", "educationalGoals": "BSc"}, headers=headers).status_code == 200

    with _session(client) as db:
        student_before = db.query(StudentOnboarding).one()
        student_snapshot = (student_before.completed_at, student_before.onboarding_data)

    assert client.post("/api/onboarding", json={"role": "investor", "companyName": "Acme"}, headers=headers).status_code == 200

    with _session(client) as db:
        profile = db.query(UserProfileModel).one()
        student = db.query(StudentOnboarding).one()
        investor = db.query(InvestorOnboarding).one()
        assert (student.completed_at, student.onboarding_data) == student_snapshot
        assert student.user_id == profile.id
        assert investor.user_id == profile.id
        assert investor.company_name == "Acme"


def test_role_store_failure_rolls_back_profile(client, auth_headers, monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("role store unavailable")

    monkeypatch.setattr(onboarding_service, "_upsert_role_record", boom)

    r = client.post(
        "/api/onboarding",
        json={"role": "student", "personalDetails": {"name": "A"}},
        headers=auth_headers(),
    )
    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "message": "Failed to save onboarding data",
        "error": "role store unavailable",
    }
    assert _counts(client) == (0, 0, 0)


def test_session_cookie_is_accepted(client, settings) -> None:
    from edufund.utils.jwt_handler import create_identity_token

    token = create_identity_token(settings, "cookie_user")
    r = client.post("/api/onboarding", json={"role": "investor"}, headers={"Cookie": f"__session={token}"})
    assert r.status_code == 200
    assert r.json()["data"]["userId"] == "cookie_user"


def test_read_onboarding_status(client, auth_headers) -> None:
    r = client.get("/api/onboarding", headers=auth_headers("user_2"))
    assert r.status_code == 404
    assert r.json()["success"] is False

    client.post(
        "/api/onboarding",
        json={"role": "student", "career": {"goals": "teach", "preferredIndustries": "education"}},
        headers=auth_headers("user_2"),
    )
    r = client.get("/api/onboarding", headers=auth_headers("user_2"))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["userId"] == "user_2"
    assert data["career"] == {"goals": "teach", "preferredIndustries": ["education"]}
    assert [item["role"] for item in data["roles"]] == ["student"]
    assert data["roles"][0]["completedAt"]


def test_concurrent_first_submission_is_retried_as_update(client, auth_headers, monkeypatch) -> None:
    real_upsert = onboarding_service._upsert_profile
    calls = []

    def racing_upsert(db, external_id, sections, now):
        calls.append(external_id)
        if len(calls) == 1:
            # Another request wins the insert between our lookup and our write.
            with _session(client) as other:
                other.add(
                    UserProfileModel(
                        user_id=external_id,
                        personal_details={"name": "other"},
                        education={},
                        skills={},
                        career={},
                    )
                )
                other.commit()
            db.add(UserProfileModel(user_id=external_id, personal_details={}, education={}, skills={}, career={}))
            db.flush()
        return real_upsert(db, external_id, sections, now)

    monkeypatch.setattr(onboarding_service, "_upsert_profile", racing_upsert)

    r = client.post(
        "/api/onboarding",
        json={"role": "student", "personalDetails": {"name": "A"}},
        headers=auth_headers("racer"),
    )
    assert r.status_code == 200
    assert r.json()["data"]["personalDetails"] == {"name": "A"}
    assert len(calls) == 2
    assert _counts(client) == (1, 1, 0)
    with _session(client) as db:
        profile = db.query(UserProfileModel).one()
        assert profile.user_id == "racer"
        assert profile.personal_details == {"name": "A"}
        assert db.query(StudentOnboarding).one().user_id == profile.id


def test_unexpected_read_failure_returns_json_envelope(client, auth_headers, monkeypatch) -> None:
    from fastapi.testclient import TestClient

    from edufund.routers import onboarding as onboarding_router

    def broken_status(db, external_id):
        raise RuntimeError("db down")

    monkeypatch.setattr(onboarding_router, "get_onboarding_status", broken_status)

    quiet = TestClient(client.app, raise_server_exceptions=False)
    r = quiet.get("/api/onboarding", headers=auth_headers())
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"success": False, "message": "Internal server error", "error": "db down"}


def test_malformed_json_without_identity_returns_401(client) -> None:
    r = client.post(
        "/api/onboarding",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 401
    assert _counts(client) == (0, 0, 0)


def test_malformed_json_with_identity_returns_400(client, auth_headers) -> None:
    r = client.post(
        "/api/onboarding",
        content=b"{not json",
        headers={**auth_headers(), "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    body = r.json()
    assert body == {"success": False, "message": "Request body must be valid JSON"}
    assert _counts(client) == (0, 0, 0)
