from modules.workflow.models import Request, RequestStatus

from conftest import auth_headers, pdf_bytes


def create_signature(client, user, reason="renew license", token="Municipio"):
    resp = client.post("/signatures", json={"reason": reason, "token": token}, headers=auth_headers(user))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["signature"]


def test_edit_request_flow_over_http(client, db_session, common_user, admin_user):
    user_headers = auth_headers(common_user)
    admin_headers = auth_headers(admin_user)
    s1 = create_signature(client, common_user)
    assert s1["server_name"] == "Ana Souza"

    created = client.post(
        "/requests", json={"type": "EDIT", "signature_id": s1["id"], "reason": "typo fix"}, headers=user_headers
    )
    assert created.status_code == 201, created.text
    request_id = created.json()["data"]["request"]["id"]
    assert created.json()["data"]["request"]["status"] == "PENDING"

    duplicate = client.post(
        "/requests", json={"type": "DELETE", "signature_id": s1["id"], "reason": "outra"}, headers=user_headers
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    denied = client.put(f"/admin/requests/{request_id}", json={"status": "APPROVED"}, headers=user_headers)
    assert denied.status_code == 403

    approved = client.put(f"/admin/requests/{request_id}", json={"status": "APPROVED"}, headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["data"]["request"]["status"] == "APPROVED"
    assert approved.json()["data"]["request"]["responded_by"]["id"] == admin_user.id

    again = client.put(f"/admin/requests/{request_id}", json={"status": "REJECTED"}, headers=admin_headers)
    assert again.status_code == 409

    can_edit = client.get(f"/signatures/{s1['id']}/can-edit", headers=user_headers).json()["data"]
    assert can_edit["can_edit"] is True
    assert can_edit["request_id"] == request_id

    edited = client.put(
        f"/signatures/{s1['id']}/edit", json={"reason": "renewed license", "token": "Municipio"}, headers=user_headers
    )
    assert edited.status_code == 200
    assert edited.json()["data"]["signature"]["reason"] == "renewed license"

    assert client.get(f"/signatures/{s1['id']}/can-edit", headers=user_headers).json()["data"]["can_edit"] is False
    second = client.put(
        f"/signatures/{s1['id']}/edit", json={"reason": "again", "token": "Municipio"}, headers=user_headers
    )
    assert second.status_code == 403

    request_view = client.get(f"/requests/{request_id}", headers=user_headers).json()["data"]["request"]
    assert request_view["status"] == "CONSUMED"
    assert request_view["admin_response"].startswith("Edição realizada em")


def test_delete_request_approval_over_http(client, db_session, common_user, support_user, fake_storage):
    user_headers = auth_headers(common_user)
    sig = create_signature(client, common_user)
    upload = client.post(
        f"/signatures/{sig['id']}/attachments",
        files={"file": ("contrato.pdf", pdf_bytes(), "application/pdf")},
        headers=user_headers,
    )
    assert upload.status_code == 201, upload.text
    attachment_id = upload.json()["data"]["attachment"]["id"]

    created = client.post(
        "/requests", json={"type": "DELETE", "signature_id": sig["id"], "reason": "duplicada"}, headers=user_headers
    )
    request_id = created.json()["data"]["request"]["id"]

    resp = client.put(
        f"/admin/requests/{request_id}",
        json={"status": "APPROVED", "admin_response": "ok"},
        headers=auth_headers(support_user),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["request"]["status"] == "APPROVED"

    assert client.get(f"/signatures/{sig['id']}", headers=user_headers).status_code == 404
    assert client.get(f"/requests/{request_id}", headers=user_headers).status_code == 404
    assert client.get(f"/attachments/{attachment_id}/download", headers=user_headers).status_code == 404
    assert fake_storage.objects == {}


def test_invalid_request_payloads(client, common_user, other_user):
    sig = create_signature(client, common_user)
    headers = auth_headers(common_user)

    empty = client.post("/requests", json={"type": "EDIT", "signature_id": sig["id"], "reason": " "}, headers=headers)
    assert empty.status_code == 400

    missing = client.post("/requests", json={"type": "EDIT", "reason": "x"}, headers=headers)
    assert missing.status_code == 400
    assert "signature_id" in missing.json()["error"]

    not_found = client.post("/requests", json={"type": "EDIT", "signature_id": 404, "reason": "x"}, headers=headers)
    assert not_found.status_code == 404

    foreign = client.post(
        "/requests", json={"type": "EDIT", "signature_id": sig["id"], "reason": "x"}, headers=auth_headers(other_user)
    )
    assert foreign.status_code == 403

    anonymous = client.post("/requests", json={"type": "EDIT", "signature_id": sig["id"], "reason": "x"})
    assert anonymous.status_code == 401


def test_request_listing_scopes(client, common_user, other_user, admin_user):
    for user in (common_user, other_user):
        sig = create_signature(client, user)
        client.post("/requests", json={"type": "EDIT", "signature_id": sig["id"], "reason": "x"}, headers=auth_headers(user))

    own = client.get("/requests", headers=auth_headers(common_user)).json()["data"]
    assert own["pagination"]["total"] == 1
    assert own["requests"][0]["user"]["username"] == "ana"

    everything = client.get("/requests", params={"status": "PENDING"}, headers=auth_headers(admin_user)).json()["data"]
    assert everything["pagination"]["total"] == 2


def test_signature_direct_paths(client, common_user, other_user, admin_user):
    sig = create_signature(client, common_user)
    foreign_update = client.put(
        f"/signatures/{sig['id']}", json={"reason": "x", "token": "Prefeito"}, headers=auth_headers(other_user)
    )
    assert foreign_update.status_code == 403

    admin_update = client.put(
        f"/signatures/{sig['id']}", json={"reason": "ajuste", "token": "Prefeito"}, headers=auth_headers(admin_user)
    )
    assert admin_update.json()["data"]["signature"]["reason"] == "ajuste"

    assert client.delete(f"/signatures/{sig['id']}", headers=auth_headers(other_user)).status_code == 403
    assert client.delete(f"/signatures/{sig['id']}", headers=auth_headers(admin_user)).status_code == 200


def test_signature_listing_and_lookups(client, common_user, support_user):
    create_signature(client, common_user, reason="licença", token="Prefeito")
    create_signature(client, common_user, reason="contrato", token="Municipio")

    denied = client.post("/signatures", json={"reason": "x", "token": "Prefeito"}, headers=auth_headers(support_user))
    assert denied.status_code == 403

    listing = client.get("/signatures", params={"token": "Prefeito"}, headers=auth_headers(support_user)).json()
    assert [s["reason"] for s in listing["data"]["signatures"]] == ["licença"]

    tokens = client.get("/tokens", headers=auth_headers(common_user)).json()["data"]["tokens"]
    assert tokens == ["Prefeito", "Municipio"]
    servers = client.get("/servers", headers=auth_headers(common_user)).json()["data"]["servers"]
    assert servers == ["Ana Souza"]
