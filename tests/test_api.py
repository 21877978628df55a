from fastapi.testclient import TestClient

from app.main import app
from shared.domain.reference import new_reference

client = TestClient(app)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_malformed_video_id_is_bad_request():
    response = client.get("/videos/not-a-reference")
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_reference"


def test_anonymous_toggle_is_forbidden():
    response = client.post(f"/subscriptions/c/{new_reference()}")
    assert response.status_code == 403
    assert response.json()["kind"] == "forbidden"


def test_tweet_like_is_not_implemented():
    response = client.post(f"/likes/toggle/t/{new_reference()}", headers={"X-User-Id": new_reference()})
    assert response.status_code == 501
    assert response.json() == {
        "kind": "unsupported_target_kind",
        "message": "Liking a tweet is not supported yet",
    }
