"""Integration tests for votes, comments and feedback endpoints."""

import repositories.db_models as db_models


class TestVotesRouter:
    def test_vote_and_duplicate(self, client, other_auth_headers, test_complaint):
        url = f"/api/complaints/{test_complaint.id}/votes"

        first = client.post(url, headers=other_auth_headers)
        assert first.status_code == 200
        assert first.json() == {
            "complaint_id": test_complaint.id,
            "votes": 1,
            "has_voted": True,
        }

        second = client.post(url, headers=other_auth_headers)
        assert second.status_code == 409
        assert "already voted" in second.json()["error"]

    def test_vote_status_anonymous(self, client, other_auth_headers, test_complaint):
        url = f"/api/complaints/{test_complaint.id}/votes"
        client.post(url, headers=other_auth_headers)

        response = client.get(url)
        assert response.status_code == 200
        assert response.json()["votes"] == 1
        assert response.json()["has_voted"] is False

        check = client.get(f"{url}/check", headers=other_auth_headers)
        assert check.json() == {"has_voted": True}

    def test_unvote_without_vote_is_404(self, client, auth_headers, test_complaint):
        response = client.delete(
            f"/api/complaints/{test_complaint.id}/votes", headers=auth_headers
        )
        assert response.status_code == 404

    def test_vote_requires_auth(self, client, test_complaint):
        response = client.post(f"/api/complaints/{test_complaint.id}/votes")
        assert response.status_code == 401


class TestCommentsRouter:
    def test_add_and_list(self, client, other_auth_headers, test_complaint):
        url = f"/api/complaints/{test_complaint.id}/comments"
        response = client.post(
            url, json={"content": "  Same on my street.  "}, headers=other_auth_headers
        )

        assert response.status_code == 201
        assert response.json()["content"] == "Same on my street."
        assert response.json()["author_name"] == "Omar Haddad"

        listing = client.get(url)
        assert listing.status_code == 200
        assert [c["content"] for c in listing.json()] == ["Same on my street."]

    def test_blank_comment_is_400(self, client, auth_headers, test_complaint):
        response = client.post(
            f"/api/complaints/{test_complaint.id}/comments",
            json={"content": "   "},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_comment_on_missing_complaint(self, client, auth_headers):
        response = client.post(
            "/api/complaints/4242/comments",
            json={"content": "Hello"},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestFeedbackRouter:
    def _complete(self, db_session, complaint):
        complaint.status = db_models.ComplaintStatus.COMPLETED
        db_session.commit()

    def test_feedback_on_pending_complaint(self, client, auth_headers, test_complaint):
        response = client.post(
            "/api/feedback",
            json={"complaint_id": test_complaint.id, "rating": 4},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_submit_and_filter_by_complaint(
        self, client, db_session, auth_headers, other_auth_headers, test_complaint
    ):
        self._complete(db_session, test_complaint)

        response = client.post(
            "/api/feedback",
            json={
                "complaint_id": test_complaint.id,
                "rating": 5,
                "comment": "Fixed within a week",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["rating"] == 5

        listing = client.get(
            "/api/feedback",
            params={"complaintId": test_complaint.id},
            headers=other_auth_headers,
        )
        assert listing.status_code == 200
        assert [f["comment"] for f in listing.json()] == ["Fixed within a week"]

        own = client.get("/api/feedback", headers=other_auth_headers)
        assert own.json() == []

    def test_duplicate_feedback(self, client, db_session, auth_headers, test_complaint):
        self._complete(db_session, test_complaint)
        body = {"complaint_id": test_complaint.id, "rating": 3}

        assert client.post("/api/feedback", json=body, headers=auth_headers).status_code == 201
        duplicate = client.post("/api/feedback", json=body, headers=auth_headers)
        assert duplicate.status_code == 409

    def test_rating_out_of_range(self, client, db_session, auth_headers, test_complaint):
        self._complete(db_session, test_complaint)
        response = client.post(
            "/api/feedback",
            json={"complaint_id": test_complaint.id, "rating": 6},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "rating" in response.json()["error"]


class TestHiddenComplaintSubresources:
    def _hide(self, client, admin_auth_headers, complaint_id):
        response = client.post(
            f"/api/complaints/{complaint_id}/toggle-visibility",
            headers=admin_auth_headers,
        )
        assert response.json()["is_visible"] is False

    def test_strangers_get_404(
        self, client, auth_headers, other_auth_headers, admin_auth_headers, test_complaint
    ):
        base = f"/api/complaints/{test_complaint.id}"
        client.post(
            f"{base}/comments", json={"content": "Private detail"}, headers=auth_headers
        )
        self._hide(client, admin_auth_headers, test_complaint.id)

        assert client.get(f"{base}/comments").status_code == 404
        assert client.get(f"{base}/votes").status_code == 404
        assert client.post(f"{base}/votes", headers=other_auth_headers).status_code == 404
        assert (
            client.post(
                f"{base}/comments", json={"content": "Hi"}, headers=other_auth_headers
            ).status_code
            == 404
        )
        assert client.get(f"{base}/votes", headers=auth_headers).json()["votes"] == 0

    def test_owner_still_sees_thread(
        self, client, auth_headers, admin_auth_headers, test_complaint
    ):
        base = f"/api/complaints/{test_complaint.id}"
        client.post(
            f"{base}/comments", json={"content": "Private detail"}, headers=auth_headers
        )
        self._hide(client, admin_auth_headers, test_complaint.id)

        response = client.get(f"{base}/comments", headers=auth_headers)
        assert response.status_code == 200
        assert [c["content"] for c in response.json()] == ["Private detail"]
