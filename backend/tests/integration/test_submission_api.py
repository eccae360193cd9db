"""Integration tests for application submission

The guard reports the first failing precondition in a fixed order:
state (409), fee (402), documents (400).
"""

from fixtures.builders import (
    API,
    MATURE_INDIVIDUAL_DOCUMENTS,
    ready_to_submit,
    start_individual,
    upload,
    upload_fee_proof,
    years_ago,
)


class TestSubmit:
    def test_fee_is_checked_before_documents(self, client):
        application_id = start_individual(client)["applicationId"]

        response = client.post(f"{API}/{application_id}/submit")

        assert response.status_code == 402
        body = response.json()
        assert body["code"] == "FEE_REQUIRED"
        assert body["feeAmount"] == 75.0
        assert [option["method"] for option in body["paymentOptions"]] == ["paynow", "proof_upload"]

    def test_missing_documents(self, client, blob_store):
        application_id = start_individual(client)["applicationId"]
        upload_fee_proof(client, blob_store, application_id)
        upload(client, blob_store, application_id, "o_level_cert")

        response = client.post(f"{API}/{application_id}/submit")

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "MISSING_DOCUMENTS"
        assert body["missingDocuments"]

    def test_submits_for_eligibility_review(self, client, blob_store, notifier):
        application_id = ready_to_submit(client, blob_store)
        history_before = client.get(f"{API}/{application_id}").json()["statusHistory"]

        response = client.post(f"{API}/{application_id}/submit")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "eligibility_review"
        assert data["submittedAt"] is not None

        summary = client.get(f"{API}/{application_id}").json()
        assert len(summary["statusHistory"]) == len(history_before) + 1
        assert summary["statusHistory"][-1]["comment"] == "Application submitted for review"
        assert summary["statusHistory"][-1]["fromStatus"] == "draft"
        assert summary["statusHistory"][-1]["toStatus"] == "eligibility_review"
        assert len(notifier.to("tendai.moyo@example.com")) == 2

    def test_resubmission_is_refused(self, client, blob_store):
        application_id = ready_to_submit(client, blob_store)
        client.post(f"{API}/{application_id}/submit")

        response = client.post(f"{API}/{application_id}/submit")

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INVALID_APPLICATION_STATE"
        assert body["currentStatus"] == "eligibility_review"
        assert body["allowedStatuses"] == ["draft", "needs_applicant_action"]

    def test_young_applicant_needs_a_level_certificate(self, client, blob_store):
        application_id = start_individual(client, dob=years_ago(22), a_level_passes=2)["applicationId"]
        upload_fee_proof(client, blob_store, application_id)
        for doc_type in MATURE_INDIVIDUAL_DOCUMENTS:
            upload(client, blob_store, application_id, doc_type)

        blocked = client.post(f"{API}/{application_id}/submit")
        upload(client, blob_store, application_id, "a_level_cert")
        submitted = client.post(f"{API}/{application_id}/submit")

        assert blocked.status_code == 400
        assert blocked.json()["code"] == "MISSING_DOCUMENTS"
        assert submitted.status_code == 200

    def test_unknown_application(self, client):
        response = client.post(f"{API}/IND-APP-2020-9999/submit")

        assert response.status_code == 404
