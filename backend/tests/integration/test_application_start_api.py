"""Integration tests for starting applications

Tests the eligibility gate at the HTTP boundary:
- Individual applications on the mature and young entry paths
- Form validation (age, names) vs eligibility rejections
- Organization applications and the PREA register lookup
- Creation side effects: naming series id, fee, history row, notification
"""

from datetime import datetime, timezone

from models import Member, MembershipStatus

from fixtures.builders import API, individual_payload, organization_payload, years_ago


YEAR = datetime.now(timezone.utc).year


class TestIndividualStart:
    def test_mature_applicant(self, client, notifier):
        response = client.post(f"{API}/individual/start", json=individual_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["applicationId"] == f"IND-APP-{YEAR}-0001"
        assert data["applicationType"] == "individual"
        assert data["status"] == "draft"
        assert data["matureEntry"] is True
        assert data["feeAmount"] == 75.0
        assert data["feeCurrency"] == "USD"
        assert data["feeStatus"] == "pending"
        assert data["memberId"] is None
        assert data["requirements"] == [
            "Upload certified O-Level certificate",
            "Upload valid ID or Passport",
            "Upload birth certificate",
        ]

        assert len(notifier.to("tendai.moyo@example.com")) == 1

    def test_young_applicant_with_a_levels(self, client):
        response = client.post(
            f"{API}/individual/start",
            json=individual_payload(dob=years_ago(22), a_level_passes=2),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["matureEntry"] is False
        assert data["feeAmount"] == 50.0
        assert data["requirements"][0] == "Provide certified A-Level certificate"

    def test_young_applicant_without_a_levels_is_rejected(self, client, notifier):
        response = client.post(f"{API}/individual/start", json=individual_payload(dob=years_ago(22)))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ELIGIBILITY_FAILED"
        assert "A-Level" in body["detail"]
        assert notifier.sent == []

    def test_too_few_o_level_passes(self, client):
        response = client.post(f"{API}/individual/start", json=individual_payload(passes=4))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ELIGIBILITY_FAILED"
        assert body["detail"] == "Must have at least 5 O-Level passes"

    def test_minor_fails_form_validation(self, client):
        response = client.post(f"{API}/individual/start", json=individual_payload(dob=years_ago(17)))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert any(error["field"] == "personal.dob" for error in body["errors"])

    def test_short_name_fails_form_validation(self, client):
        payload = individual_payload()
        payload["personal"]["firstName"] = "T"

        response = client.post(f"{API}/individual/start", json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_invalid_email_fails_form_validation(self, client):
        response = client.post(f"{API}/individual/start", json=individual_payload(email="not-an-email"))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_rejection_does_not_consume_an_id(self, client):
        client.post(f"{API}/individual/start", json=individual_payload(passes=4))

        response = client.post(f"{API}/individual/start", json=individual_payload())

        assert response.json()["applicationId"] == f"IND-APP-{YEAR}-0001"

    def test_ids_are_sequential(self, client):
        first = client.post(f"{API}/individual/start", json=individual_payload()).json()
        second = client.post(
            f"{API}/individual/start",
            json=individual_payload(email="chipo.dube@example.com"),
        ).json()

        assert first["applicationId"] == f"IND-APP-{YEAR}-0001"
        assert second["applicationId"] == f"IND-APP-{YEAR}-0002"

    def test_creation_history_row(self, client):
        application_id = client.post(f"{API}/individual/start", json=individual_payload()).json()["applicationId"]

        summary = client.get(f"{API}/{application_id}").json()

        assert len(summary["statusHistory"]) == 1
        row = summary["statusHistory"][0]
        assert row["fromStatus"] is None
        assert row["toStatus"] == "draft"
        assert row["comment"] == "Application created"

    def test_summary_omits_payload(self, client):
        application_id = client.post(f"{API}/individual/start", json=individual_payload()).json()["applicationId"]

        summary = client.get(f"{API}/{application_id}").json()

        assert summary["status"] == "draft"
        assert "personal" not in summary
        assert summary["documents"] == []

    def test_unknown_application(self, client):
        response = client.get(f"{API}/IND-APP-2020-9999")

        assert response.status_code == 404
        assert response.json()["code"] == "APPLICATION_NOT_FOUND"


class TestOrganizationStart:
    def test_with_active_prea(self, client, active_prea, notifier):
        response = client.post(f"{API}/organization/start", json=organization_payload())

        assert response.status_code == 201
        data = response.json()
        assert data["applicationId"] == f"ORG-APP-{YEAR}-0001"
        assert data["applicationType"] == "organization"
        assert data["status"] == "draft"
        assert data["feeAmount"] == 150.0
        assert data["directorCount"] == 2
        assert data["requirements"][0] == "Upload all required documents:"
        assert "Verify that the PREA is listed as a director in CR6 form" in data["warnings"]

        assert len(notifier.to("info@msasarealty.co.zw")) == 1

    def test_unknown_prea(self, client):
        response = client.post(f"{API}/organization/start", json=organization_payload())

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ELIGIBILITY_FAILED"
        assert body["detail"] == "Principal Registered Estate Agent must be an active individual member"

    def test_suspended_prea(self, client, db_session, active_prea):
        active_prea.membership_status = MembershipStatus.SUSPENDED.value
        db_session.commit()

        response = client.post(f"{API}/organization/start", json=organization_payload())

        assert response.status_code == 400
        assert response.json()["code"] == "ELIGIBILITY_FAILED"

    def test_firm_cannot_be_prea(self, client, db_session):
        db_session.add(Member(
            member_number="EAC-ORG-2024-0003",
            full_name="Kopje Properties",
            member_type="organization",
            membership_status=MembershipStatus.ACTIVE.value,
        ))
        db_session.commit()

        response = client.post(f"{API}/organization/start", json=organization_payload(prea="EAC-ORG-2024-0003"))

        assert response.status_code == 400
        assert response.json()["code"] == "ELIGIBILITY_FAILED"

    def test_no_directors(self, client, active_prea):
        response = client.post(f"{API}/organization/start", json=organization_payload(directors=[]))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ELIGIBILITY_FAILED"
        assert body["detail"] == "At least one director must be listed"

    def test_resume_payload_keeps_directors(self, client, active_prea):
        application_id = client.post(f"{API}/organization/start", json=organization_payload()).json()["applicationId"]

        summary = client.get(f"{API}/{application_id}").json()

        assert summary["directorCount"] == 2
        assert "directors" not in summary


class TestDocumentTypes:
    def test_catalogue(self, client):
        response = client.get(f"{API}/document-types")

        assert response.status_code == 200
        catalogue = response.json()
        assert catalogue["legal"][0]["docType"] == "certificate_incorporation"
