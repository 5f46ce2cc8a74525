from modules.directory.models import UserRole
from modules.signatures.services import SignatureService
from modules.workflow.models import Request, RequestStatus
from modules.workflow.services import RequestService

from conftest import auth_headers


def test_common_user_cannot_manage(client, common_user):
    resp = client.post("/admin/sectors", json={"name": "Jurídico"}, headers=auth_headers(common_user))
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "error": "Sem permissão para esta ação"}


def test_sector_crud(client, admin_user):
    headers = auth_headers(admin_user)
    created = client.post("/admin/sectors", json={"name": "Jurídico", "description": "Contratos"}, headers=headers)
    assert created.status_code == 201, created.text
    sector_id = created.json()["data"]["sector"]["id"]

    duplicate = client.post("/admin/sectors", json={"name": "Jurídico"}, headers=headers)
    assert duplicate.status_code == 409

    empty = client.post("/admin/sectors", json={"name": "  "}, headers=headers)
    assert empty.status_code == 400

    updated = client.put(f"/admin/sectors/{sector_id}", json={"name": "Jurídico Central"}, headers=headers)
    assert updated.json()["data"]["sector"]["name"] == "Jurídico Central"

    listing = client.get("/admin/sectors", params={"search": "central"})
    assert listing.status_code == 200
    data = listing.json()["data"]
    assert [s["name"] for s in data["sectors"]] == ["Jurídico Central"]
    assert data["pagination"]["total"] == 1

    assert client.delete(f"/admin/sectors/{sector_id}", headers=headers).status_code == 200
    assert client.get(f"/admin/sectors/{sector_id}", headers=headers).status_code == 404


def test_sector_in_use_cannot_be_deleted(client, admin_user):
    resp = client.delete(f"/admin/sectors/{admin_user.sector_id}", headers=auth_headers(admin_user))
    assert resp.status_code == 409


def test_user_crud(client, support_user):
    headers = auth_headers(support_user)
    payload = {
        "username": "joao",
        "name": "João Silva",
        "password": "senha123",
        "role": "COMMON",
        "sector_id": support_user.sector_id,
    }
    created = client.post("/admin/users", json=payload, headers=headers)
    assert created.status_code == 201, created.text
    user = created.json()["data"]["user"]
    assert user["is_first_login"] is True
    assert user["sector"]["id"] == support_user.sector_id

    assert client.post("/admin/users", json=payload, headers=headers).status_code == 409

    bad_sector = dict(payload, username="maria", sector_id=999)
    assert client.post("/admin/users", json=bad_sector, headers=headers).status_code == 400

    listing = client.get("/admin/users", params={"role": "COMMON"}, headers=headers)
    assert [u["username"] for u in listing.json()["data"]["users"]] == ["joao"]

    update = dict(payload, name="João S.", role="ADMIN")
    del update["password"]
    updated = client.put(f"/admin/users/{user['id']}", json=update, headers=headers)
    assert updated.json()["data"]["user"]["role"] == "ADMIN"

    assert client.delete(f"/admin/users/{user['id']}", headers=headers).status_code == 200
    assert client.get(f"/admin/users/{user['id']}", headers=headers).status_code == 404


def test_user_with_signatures_cannot_be_deleted(client, db_session, admin_user, common_user):
    SignatureService.create_signature(db_session, common_user, "motivo", "Prefeito")
    resp = client.delete(f"/admin/users/{common_user.id}", headers=auth_headers(admin_user))
    assert resp.status_code == 409


def test_cannot_delete_self(client, admin_user):
    resp = client.delete(f"/admin/users/{admin_user.id}", headers=auth_headers(admin_user))
    assert resp.status_code == 409


def test_password_reset_by_admin_forces_first_login(client, admin_user, make_user):
    user = make_user("lucas")
    payload = {
        "username": "lucas",
        "name": "Lucas",
        "role": UserRole.COMMON.value,
        "sector_id": user.sector_id,
        "password": "trocada1",
    }
    resp = client.put(f"/admin/users/{user.id}", json=payload, headers=auth_headers(admin_user))
    assert resp.json()["data"]["user"]["is_first_login"] is True


def test_delete_admin_who_adjudicated_requests(client, db_session, common_user, admin_user, support_user):
    sig = SignatureService.create_signature(db_session, common_user, "motivo", "Prefeito")
    request = RequestService.create_request(db_session, common_user, "EDIT", sig.id, "corrigir")
    RequestService.adjudicate(db_session, admin_user, request.id, "REJECTED")
    request_id, admin_id = request.id, admin_user.id

    resp = client.delete(f"/admin/users/{admin_id}", headers=auth_headers(support_user))
    assert resp.status_code == 200, resp.text

    db_session.expire_all()
    kept = db_session.get(Request, request_id)
    assert kept.status == RequestStatus.REJECTED
    assert kept.responded_by_id is None
