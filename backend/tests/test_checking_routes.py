from conftest import add_identity, auth

ADMIN = auth(1, is_admin=True)


def submit(client, **fields):
    body = {"studentId": "2020001", "name": "Alice", "college": "计算机学院"}
    body.update(fields)
    return client.post("/checking/approvals", json=body, headers=ADMIN)


def test_admin_routes_reject_regular_users(client):
    r = client.get("/checking/approvals", headers=auth(2))
    assert r.status_code == 403
    r = client.post("/checking/approvals", json={}, headers=auth(2))
    assert r.status_code == 403


def test_submit_and_fetch(client, db):
    add_identity(db, uid=7, student_id="2020001", realname="Alice", oa_certified=True)
    r = submit(client, major="软件工程", approvedTime="2020-09-01T08:00:00")
    assert r.status_code == 200
    record = r.json()["data"]
    assert record["studentId"] == "2020001"
    assert record["certStatus"] is True
    assert record["approvedTime"] == "2020-09-01T08:00:00"

    r = client.get(f"/checking/approvals/{record['id']}", headers=ADMIN)
    assert r.json()["data"]["id"] == record["id"]

    r = client.get("/checking/me", headers=auth(7))
    assert r.status_code == 200
    assert r.json()["data"]["id"] == record["id"]


def test_me_errors(client, db):
    r = client.get("/checking/me", headers=auth(8))
    assert r.status_code == 403
    assert r.json() == {"code": 1003, "message": "需要先实名认证"}

    add_identity(db, uid=8, student_id="2020008", realname="Bob")
    r = client.get("/checking/me", headers=auth(8))
    assert r.status_code == 404
    assert r.json()["code"] == 1001


def test_list_search_and_delete(client):
    ids = []
    for i in range(3):
        r = submit(client, studentId=f"200{i}", name=f"张{i}", college="机械学院",
                   approvedTime=f"2020-09-0{i + 1}T08:00:00")
        ids.append(r.json()["data"]["id"])

    r = client.get("/checking/approvals", params={"college": "机械", "index": 1, "count": 2},
                   headers=ADMIN)
    assert [a["id"] for a in r.json()["data"]] == [ids[2], ids[1]]
    r = client.get("/checking/approvals", params={"index": 2, "count": 2}, headers=ADMIN)
    assert [a["id"] for a in r.json()["data"]] == [ids[0]]

    r = client.get("/checking/approvals/search", params={"q": "张1"}, headers=ADMIN)
    assert [a["id"] for a in r.json()["data"]] == [ids[1]]

    r = client.delete(f"/checking/approvals/{ids[1]}", headers=ADMIN)
    assert r.json() == {"code": 0}
    r = client.get(f"/checking/approvals/{ids[1]}", headers=ADMIN)
    assert r.status_code == 404
    assert r.json()["code"] == 1001


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_admin_rejection_has_error_code(client):
    r = client.get("/checking/approvals", headers=auth(2))
    assert r.json() == {"code": 1002, "message": "需要管理员权限"}


def test_invalid_parameters_have_error_code(client):
    r = client.get("/checking/approvals", params={"index": 0}, headers=ADMIN)
    assert r.status_code == 422
    assert r.json()["code"] == 2

    r = client.post("/checking/approvals", json={"name": "Alice"}, headers=ADMIN)
    assert r.status_code == 422
    assert r.json()["code"] == 2


def test_unknown_route_has_error_code(client):
    r = client.get("/no/such/route")
    assert r.status_code == 404
    assert r.json()["code"] == 404
    assert "message" in r.json()
