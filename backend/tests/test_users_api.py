import inspect

from fastapi.routing import APIRoute

from moviebooking.main import app


SIGN_UP = {
    "email_address": "a@b.com",
    "password": "p",
    "first_name": "A",
    "last_name": "B",
}


def test_end_to_end_session_lifecycle(client, basic_auth):
    signup = client.post("/api/users", json=SIGN_UP)
    assert signup.status_code == 201

    login = client.get("/api/users/login", headers=basic_auth("ab", "p"))
    assert login.status_code == 200
    token = login.headers["access-token"]
    body = login.json()
    assert body["isLoggedIn"] is True
    assert body["access-token"] == token
    assert body["username"] == "ab"

    lookup = client.get("/api/users/token", headers={"Authorization": f"Bearer {token}"})
    assert lookup.status_code == 200
    assert lookup.json() == {
        "id": body["id"],
        "username": "ab",
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "isLoggedIn": True,
    }

    logout = client.put(f"/api/users/logout/{body['id']}")
    assert logout.status_code == 200
    assert logout.json() == {"message": "User logged out successfully"}

    lookup = client.get("/api/users/token", headers={"Authorization": f"Bearer {token}"})
    assert lookup.status_code == 404


def test_sign_up_response_is_redacted(client):
    response = client.post("/api/users", json={
        **SIGN_UP,
        "mobile_number": "5550100",
        "coupens": [{"code": "WELCOME"}],
        "bookingRequests": ["req-1"],
    })
    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == 1
    assert body["username"] == "ab"
    assert body["contact"] == "5550100"
    assert body["role"] == "user"
    assert body["is_logged_in"] is False
    assert body["coupens"] == [{"code": "WELCOME"}]
    assert body["bookingRequests"] == ["req-1"]
    assert "password_hash" not in body
    assert "password" not in body
    assert "access_token" not in body


def test_sign_up_sequential_ids(client):
    first = client.post("/api/users", json=SIGN_UP)
    second = client.post("/api/users", json={**SIGN_UP, "username": "other"})
    assert first.json()["user_id"] == 1
    assert second.json()["user_id"] == 2


def test_sign_up_missing_fields(client):
    response = client.post("/api/users", json={"email_address": "a@b.com", "password": "p"})
    assert response.status_code == 400
    assert response.json() == {
        "message": "Email, password, first name, and last name are required!"
    }


def test_sign_up_invalid_email(client):
    response = client.post("/api/users", json={**SIGN_UP, "email_address": "not-an-email"})
    assert response.status_code == 400
    assert "message" in response.json()


def test_sign_up_duplicate_username(client):
    client.post("/api/users", json=SIGN_UP)
    response = client.post("/api/users", json=SIGN_UP)
    assert response.status_code == 400
    assert response.json()["message"] == "Username already exists"


def test_login_without_header(client, signed_up_user):
    response = client.get("/api/users/login")
    assert response.status_code == 400
    assert response.json() == {"message": "Authentication header is required!"}


def test_login_missing_password(client, signed_up_user, basic_auth):
    response = client.get("/api/users/login", headers=basic_auth("ab", ""))
    assert response.status_code == 400
    assert response.json() == {"message": "Username and password are required!"}


def test_login_invalid_credentials(client, signed_up_user, basic_auth):
    wrong_password = client.get("/api/users/login", headers=basic_auth("ab", "nope"))
    unknown_user = client.get("/api/users/login", headers=basic_auth("zz", "p"))
    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"message": "Invalid credentials"}


def test_second_login_replaces_token(client, signed_up_user, basic_auth):
    first = client.get("/api/users/login", headers=basic_auth("ab", "p")).headers["access-token"]
    second = client.get("/api/users/login", headers=basic_auth("ab", "p")).headers["access-token"]

    old = client.get("/api/users/token", headers={"Authorization": f"Bearer {first}"})
    new = client.get("/api/users/token", headers={"Authorization": f"Bearer {second}"})
    assert old.status_code == 404
    assert new.status_code == 200


def test_token_lookup_without_token(client):
    response = client.get("/api/users/token")
    assert response.status_code == 401
    assert response.json() == {"message": "Authentication token is required!"}

    response = client.get("/api/users/token", headers={"Authorization": "Bearer"})
    assert response.status_code == 401


def test_token_lookup_unknown_token(client):
    response = client.get("/api/users/token", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 404


def test_logout_unknown_session(client):
    response = client.put("/api/users/logout/8c1a3f0e-0000-4000-8000-000000000000")
    assert response.status_code == 404


def test_get_user_by_identifiers(client, signed_up_user, basic_auth):
    session_id = client.get("/api/users/login", headers=basic_auth("ab", "p")).json()["id"]

    for identifier in ("1", "ab", session_id):
        response = client.get(f"/api/users/{identifier}")
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["username"] == "ab"
        assert body["coupens"] == []
        assert body["bookingRequests"] == []
        assert "password_hash" not in body["user"]

    assert client.get("/api/users/missing").status_code == 404


def test_list_users(client, signed_up_user):
    client.post("/api/users", json={**SIGN_UP, "username": "second"})
    body = client.get("/api/users").json()
    assert [u["username"] for u in body["users"]] == ["ab", "second"]
    assert body["total"] == 2
    assert body["limit"] == 2
    assert body["page"] == 1


def test_update_user(client, signed_up_user):
    response = client.put("/api/users/1", json={"first_name": "Zed", "coupens": [{"code": "X"}]})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "User updated successfully"
    assert body["user"]["first_name"] == "Zed"
    assert body["user"]["coupens"] == [{"code": "X"}]


def test_update_user_errors(client, signed_up_user):
    assert client.put("/api/users/1", json={}).status_code == 400
    assert client.put("/api/users/9", json={"first_name": "Zed"}).status_code == 404
    assert client.put("/api/users/abc", json={"first_name": "Zed"}).status_code == 400


def test_delete_user(client, signed_up_user):
    assert client.delete("/api/users/1").json() == {"message": "User deleted successfully"}
    assert client.delete("/api/users/1").status_code == 404
    assert client.get("/api/users/ab").status_code == 404


def test_coupons_need_login(client, basic_auth):
    client.post("/api/users", json={**SIGN_UP, "coupens": [{"code": "X10"}]})

    assert client.get("/api/users/1/coupons").status_code == 401

    client.get("/api/users/login", headers=basic_auth("ab", "p"))
    body = client.get("/api/users/1/coupons").json()
    assert body == {"coupens": [{"code": "X10"}], "page": 1, "limit": 1, "total": 1}

    assert client.get("/api/users/7/coupons").status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_sign_up_blank_email_counts_as_missing(client):
    for blank in ("", "   "):
        response = client.post("/api/users", json={**SIGN_UP, "email_address": blank})
        assert response.status_code == 400
        assert response.json() == {
            "message": "Email, password, first name, and last name are required!"
        }


def test_update_blank_email_is_ignored(client, signed_up_user):
    response = client.put("/api/users/1", json={"email": ""})
    assert response.status_code == 400
    assert response.json() == {"message": "Data to update cannot be empty!"}


def test_out_of_range_user_ids_are_rejected(client, signed_up_user):
    huge = "99999999999999999999"
    assert client.get(f"/api/users/{huge}/coupons").status_code == 400
    assert client.put(f"/api/users/{huge}", json={"first_name": "Zed"}).status_code == 400
    assert client.delete(f"/api/users/{huge}").status_code == 400
    # The identifier lookup falls through to the username matcher
    assert client.get(f"/api/users/{huge}").status_code == 404


def test_api_handlers_run_in_threadpool():
    api_routes = [
        route for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api")
    ]
    assert api_routes
    assert [
        route.path for route in api_routes
        if inspect.iscoroutinefunction(route.endpoint)
    ] == []
