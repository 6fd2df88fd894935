"""Integration tests for the identity webhook endpoint."""

import json
import os
from datetime import datetime, timezone

from svix.webhooks import Webhook

import repositories.db_models as db_models

URL = "/api/webhooks/identity"


def _signed(event: dict, msg_id: str = "msg_2Lh9") -> tuple[bytes, dict]:
    body = json.dumps(event).encode()
    sent_at = datetime.now(timezone.utc)
    webhook = Webhook(os.environ["IDENTITY_WEBHOOK_SECRET"])
    headers = {
        "svix-id": msg_id,
        "svix-timestamp": str(int(sent_at.timestamp())),
        "svix-signature": webhook.sign(msg_id, sent_at, body.decode()),
        "Content-Type": "application/json",
    }
    return body, headers


def _user_event(event_type: str, user_id: str = "user_webhook01") -> dict:
    return {
        "type": event_type,
        "data": {
            "id": user_id,
            "first_name": "Lina",
            "last_name": "Park",
            "primary_email_address_id": "idn_2",
            "email_addresses": [
                {"id": "idn_1", "email_address": "old@civicsync.org"},
                {"id": "idn_2", "email_address": "lina@civicsync.org"},
            ],
        },
    }


class TestIdentityWebhook:
    def test_user_created(self, client, db_session):
        body, headers = _signed(_user_event("user.created"))

        response = client.post(URL, content=body, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["handled"] is True
        assert data["detail"]["created"] is True

        user = (
            db_session.query(db_models.User)
            .filter(db_models.User.external_id == "user_webhook01")
            .one()
        )
        assert user.email == "lina@civicsync.org"

    def test_user_deleted_deactivates(self, client, db_session, test_user):
        event = {"type": "user.deleted", "data": {"id": test_user.external_id}}
        body, headers = _signed(event)

        response = client.post(URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["detail"] == {"deactivated": True}
        db_session.refresh(test_user)
        assert test_user.is_active is False

    def test_unhandled_event_type(self, client):
        body, headers = _signed({"type": "session.created", "data": {}})
        response = client.post(URL, content=body, headers=headers)
        assert response.status_code == 200
        assert response.json()["handled"] is False

    def test_missing_signature_headers(self, client):
        body, headers = _signed(_user_event("user.created"))
        del headers["svix-signature"]

        response = client.post(URL, content=body, headers=headers)

        assert response.status_code == 400
        assert "svix-signature" in response.json()["error"]

    def test_tampered_body(self, client):
        body, headers = _signed(_user_event("user.created"))
        tampered = body.replace(b"lina@", b"mallory@")

        response = client.post(URL, content=tampered, headers=headers)

        assert response.status_code == 400
