"""Integration tests for the application fee

Tests the Paynow flow (initiate → signed status notification), repeated
notifications, and proof-of-payment upload and verification.
"""

from fixtures.builders import (
    API,
    PAYNOW_INTEGRATION_ID,
    ready_to_submit,
    signed_notification,
    start_individual,
    upload_fee_proof,
)


def _reference(application_id: str) -> str:
    return f"EACZ-FEE-{application_id}"


def _paid_notification(application_id: str, status: str = "Paid"):
    return signed_notification(
        reference=_reference(application_id),
        paynowreference="987654",
        amount="75.00",
        status=status,
        pollurl=f"https://paynow.test/poll/{_reference(application_id)}",
    )


def _history_comments(client, application_id):
    return [row["comment"] for row in client.get(f"{API}/{application_id}").json()["statusHistory"]]


class TestInitiate:
    def test_opens_gateway_transaction(self, client, paynow_stub):
        application_id = start_individual(client)["applicationId"]

        response = client.post(f"{API}/{application_id}/fee/initiate", json={"amount": 75})

        assert response.status_code == 200
        data = response.json()
        assert data["reference"] == _reference(application_id)
        assert data["paymentUrl"] == f"https://paynow.test/payment/{_reference(application_id)}"
        assert data["pollUrl"] == f"https://paynow.test/poll/{_reference(application_id)}"

        sent = paynow_stub.requests[0]
        assert sent["id"] == PAYNOW_INTEGRATION_ID
        assert sent["amount"] == "75.00"
        assert sent["authemail"] == "tendai.moyo@example.com"
        assert sent["resulturl"].endswith(f"/api/public/applications/{application_id}/fee/callback")

    def test_wrong_amount(self, client, paynow_stub):
        application_id = start_individual(client)["applicationId"]

        response = client.post(f"{API}/{application_id}/fee/initiate", json={"amount": 50})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PAYMENT_AMOUNT"
        assert paynow_stub.requests == []

    def test_gateway_refusal(self, client, paynow_stub):
        paynow_stub.reply_status = "Error"
        application_id = start_individual(client)["applicationId"]

        response = client.post(f"{API}/{application_id}/fee/initiate", json={"amount": 75})

        assert response.status_code == 502
        assert response.json()["code"] == "PAYMENT_INIT_ERROR"
        assert client.get(f"{API}/{application_id}").json()["feeStatus"] == "pending"

    def test_already_settled(self, client):
        application_id = start_individual(client)["applicationId"]
        client.post(f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id))

        response = client.post(f"{API}/{application_id}/fee/initiate", json={"amount": 75})

        assert response.status_code == 409
        assert response.json()["code"] == "FEE_ALREADY_SETTLED"

    def test_unknown_application(self, client):
        response = client.post(f"{API}/IND-APP-2020-9999/fee/initiate", json={"amount": 75})

        assert response.status_code == 404


class TestCallback:
    def test_paid_settles_fee(self, client):
        application_id = start_individual(client)["applicationId"]

        response = client.post(f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id))

        assert response.status_code == 200
        assert response.text == "OK"
        summary = client.get(f"{API}/{application_id}").json()
        assert summary["feeStatus"] == "settled"
        assert summary["status"] == "draft"
        assert summary["statusHistory"][-1]["fromStatus"] == "draft"
        assert summary["statusHistory"][-1]["toStatus"] == "draft"

    def test_repeated_notification_is_recorded_once(self, client):
        application_id = start_individual(client)["applicationId"]

        for _ in range(3):
            response = client.post(
                f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id)
            )
            assert response.status_code == 200

        comments = _history_comments(client, application_id)
        assert comments.count("Application fee payment confirmed") == 1

    def test_cancelled_marks_fee_failed(self, client):
        application_id = start_individual(client)["applicationId"]

        client.post(f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id, "Cancelled"))

        assert client.get(f"{API}/{application_id}").json()["feeStatus"] == "failed"

    def test_new_payment_after_failure(self, client):
        application_id = start_individual(client)["applicationId"]
        client.post(f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id, "Cancelled"))

        response = client.post(f"{API}/{application_id}/fee/initiate", json={"amount": 75})

        assert response.status_code == 200
        assert client.get(f"{API}/{application_id}").json()["feeStatus"] == "pending"

    def test_pending_status_is_ignored(self, client):
        application_id = start_individual(client)["applicationId"]

        client.post(f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id, "Sent"))

        assert client.get(f"{API}/{application_id}").json()["feeStatus"] == "pending"

    def test_tampered_notification(self, client):
        application_id = start_individual(client)["applicationId"]
        notification = _paid_notification(application_id)
        notification["amount"] = "0.01"

        response = client.post(f"{API}/{application_id}/fee/callback", data=notification)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PAYMENT_NOTIFICATION"
        assert client.get(f"{API}/{application_id}").json()["feeStatus"] == "pending"

    def test_reference_of_another_application(self, client):
        first_id = start_individual(client)["applicationId"]
        second_id = start_individual(client, email="chipo.dube@example.com")["applicationId"]

        response = client.post(f"{API}/{second_id}/fee/callback", data=_paid_notification(first_id))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PAYMENT_NOTIFICATION"

    def test_settled_fee_unblocks_submission(self, client):
        application_id = start_individual(client)["applicationId"]
        client.post(f"{API}/{application_id}/fee/callback", data=_paid_notification(application_id))

        response = client.post(f"{API}/{application_id}/submit")

        assert response.json()["code"] == "MISSING_DOCUMENTS"


class TestProofOfPayment:
    def test_upload_marks_proof_pending_verification(self, client, blob_store):
        application_id = start_individual(client)["applicationId"]

        response = upload_fee_proof(client, blob_store, application_id)

        assert response.status_code == 200
        assert response.json()["docType"] == "application_fee_pop"
        summary = client.get(f"{API}/{application_id}").json()
        assert summary["feeStatus"] == "proof_uploaded"
        assert summary["feeProofDocumentId"] == response.json()["documentId"]
        assert "Proof of payment uploaded - pending verification" in _history_comments(client, application_id)

    def test_verification_settles_fee(self, client, blob_store, staff_headers):
        application_id = start_individual(client)["applicationId"]
        document_id = upload_fee_proof(client, blob_store, application_id).json()["documentId"]

        response = client.put(
            f"/api/admin/applications/{application_id}/documents/{document_id}/verify",
            json={"status": "verified"},
            headers=staff_headers,
        )

        assert response.status_code == 200
        assert client.get(f"{API}/{application_id}").json()["feeStatus"] == "settled"
        assert "Proof of payment verified - application fee settled" in _history_comments(client, application_id)

    def test_rejected_proof_no_longer_unblocks_submission(self, client, blob_store, staff_headers):
        application_id = ready_to_submit(client, blob_store)
        document_id = client.get(f"{API}/{application_id}").json()["feeProofDocumentId"]

        response = client.put(
            f"/api/admin/applications/{application_id}/documents/{document_id}/verify",
            json={"status": "rejected", "notes": "Receipt does not match the fee"},
            headers=staff_headers,
        )

        assert response.status_code == 200
        summary = client.get(f"{API}/{application_id}").json()
        assert summary["feeStatus"] == "pending"
        assert summary["feeProofDocumentId"] is None
        assert "Proof of payment rejected - application fee outstanding" in _history_comments(client, application_id)

        submit = client.post(f"{API}/{application_id}/submit")

        assert submit.status_code == 402
        assert submit.json()["code"] == "FEE_REQUIRED"
        assert client.get(f"{API}/{application_id}").json()["status"] == "draft"
