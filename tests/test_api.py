"""HTTP surface: routing, preconditions, auth and error mapping."""

import asyncio

from friendships.utils.auth import create_token


async def test_send_accept_and_view_profile(client, auth_headers, edge_status):
    r = await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))
    assert r.status_code == 200
    assert r.json() == {"message": "Friendship request sent successfully"}

    r = await client.post("/friendship-request/accept", json={"friendUserId": 1}, headers=auth_headers(2))
    assert r.status_code == 200
    assert r.json() == {"message": "Friendship accepted successfully"}

    assert await edge_status(1, 2) == "accepted"
    assert await edge_status(2, 1) == "accepted"

    r = await client.get("/my-friend/2", headers=auth_headers(1))
    assert r.status_code == 200
    assert r.json() == {
        "id": 2,
        "full_name": "Alan Turing",
        "phone_number": "+44 2000",
        "total_friend_count": 1,
        "mutual_friend_count": 0,
    }


async def test_duplicate_send_is_bad_request(client, auth_headers):
    await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))
    r = await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))

    assert r.status_code == 400
    assert r.json() == {
        "detail": "A friendship request is already in progress or has been accepted.",
        "kind": "invalid_transition",
    }


async def test_send_to_unknown_user_is_not_found(client, auth_headers, edge_status):
    r = await client.post("/friendship-request/send", json={"friendUserId": 999}, headers=auth_headers(1))

    assert r.status_code == 404
    assert r.json()["kind"] == "not_found"
    assert await edge_status(1, 999) is None


async def test_send_to_self_is_bad_request(client, auth_headers):
    r = await client.post("/friendship-request/send", json={"friendUserId": 1}, headers=auth_headers(1))
    assert r.status_code == 400


async def test_invalid_friend_user_id_is_rejected(client, auth_headers):
    r = await client.post("/friendship-request/send", json={"friendUserId": 0}, headers=auth_headers(1))
    assert r.status_code == 422

    r = await client.post("/friendship-request/send", json={}, headers=auth_headers(1))
    assert r.status_code == 422


async def test_accept_without_request_is_not_found(client, auth_headers, edge_status):
    r = await client.post("/friendship-request/accept", json={"friendUserId": 1}, headers=auth_headers(2))

    assert r.status_code == 404
    assert await edge_status(2, 1) is None


async def test_decline_then_resend(client, auth_headers, edge_status):
    await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))

    r = await client.post("/friendship-request/decline", json={"friendUserId": 1}, headers=auth_headers(2))
    assert r.status_code == 200
    assert r.json() == {"message": "Friendship request declined successfully"}
    assert await edge_status(1, 2) == "declined"
    assert await edge_status(2, 1) is None

    # a declined request cannot be declined or accepted again
    r = await client.post("/friendship-request/decline", json={"friendUserId": 1}, headers=auth_headers(2))
    assert r.status_code == 404
    r = await client.post("/friendship-request/accept", json={"friendUserId": 1}, headers=auth_headers(2))
    assert r.status_code == 404

    r = await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))
    assert r.status_code == 200
    assert await edge_status(1, 2) == "requested"


async def test_retried_accept_succeeds(client, auth_headers, edge_status):
    await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))

    for _ in range(2):
        r = await client.post("/friendship-request/accept", json={"friendUserId": 1}, headers=auth_headers(2))
        assert r.status_code == 200

    assert await edge_status(1, 2) == "accepted"
    assert await edge_status(2, 1) == "accepted"


async def test_profile_hidden_without_accepted_edge(client, auth_headers):
    await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))

    r = await client.get("/my-friend/2", headers=auth_headers(1))
    assert r.status_code == 404
    r = await client.get("/my-friend/1", headers=auth_headers(2))
    assert r.status_code == 404


async def test_requests_without_valid_token_are_unauthorized(client):
    r = await client.post("/friendship-request/send", json={"friendUserId": 2})
    assert r.status_code == 401

    r = await client.get("/my-friend/2", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401

    forged = create_token({"sub": "1"}, secret="some-other-secret")
    r = await client.get("/my-friend/2", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401


async def test_token_for_unknown_user_is_unauthorized(client, auth_headers):
    r = await client.get("/my-friend/2", headers=auth_headers(42))
    assert r.status_code == 401


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_storage_failure_is_service_unavailable(client, auth_headers, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from friendships.relationship import repo

    async def broken_get_edge(session, owner_id, target_id):
        raise OperationalError("SELECT", {}, Exception("server closed the connection"))

    monkeypatch.setattr(repo, "get_edge", broken_get_edge)

    r = await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))
    assert r.status_code == 503
    assert r.headers["retry-after"] == "1"
    assert r.json()["kind"] == "storage_unavailable"


async def test_concurrent_accepts_over_http_all_succeed(client, auth_headers, edge_status):
    await client.post("/friendship-request/send", json={"friendUserId": 2}, headers=auth_headers(1))

    responses = await asyncio.gather(*(
        client.post("/friendship-request/accept", json={"friendUserId": 1}, headers=auth_headers(2))
        for _ in range(3)
    ))

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert await edge_status(1, 2) == "accepted"
    assert await edge_status(2, 1) == "accepted"


async def test_profile_response_model_reads_attributes():
    from friendships.relationship.queries import FriendProfile
    from friendships.schemas.friendship import FriendProfileOut

    profile = FriendProfile(
        id=2, full_name="Alan Turing", phone_number="+44 2000",
        total_friend_count=1, mutual_friend_count=0,
    )
    out = FriendProfileOut.model_validate(profile)

    assert out.model_dump() == {
        "id": 2,
        "full_name": "Alan Turing",
        "phone_number": "+44 2000",
        "total_friend_count": 1,
        "mutual_friend_count": 0,
    }
    assert FriendProfileOut.model_config["from_attributes"] is True
