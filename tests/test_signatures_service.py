from datetime import datetime, timedelta

import pytest

from errors import ForbiddenError, NotFoundError, ValidationError
from modules.directory.models import Sector, UserRole
from modules.signatures.models import Signature
from modules.signatures.services import AttachmentService, SignatureService
from modules.signatures.services import signature_service


def test_create_signature_snapshots_creator(db_session, make_user, make_sector):
    sector = make_sector("Financeiro")
    user = make_user("diego", name="Diego Reis", sector=sector)

    sig = SignatureService.create_signature(db_session, user, "pagamento", "Prefeito")

    assert sig.incremental_id == 1
    assert sig.server_name == "Diego Reis"
    assert sig.sector_name == "Financeiro"
    assert sig.user_id == user.id

    # later changes to the user do not touch the snapshot
    user.name = "Diego R."
    user.sector.name = "Financeiro Central"
    db_session.commit()
    db_session.expire_all()
    sig = db_session.get(Signature, sig.id)
    assert sig.server_name == "Diego Reis"
    assert sig.sector_name == "Financeiro"


def test_incremental_id_is_max_plus_one(db_session, common_user, admin_user):
    first = SignatureService.create_signature(db_session, common_user, "a", "Prefeito")
    second = SignatureService.create_signature(db_session, admin_user, "b", "Municipio")
    assert (first.incremental_id, second.incremental_id) == (1, 2)

    SignatureService.delete_signature(db_session, admin_user, second.id)
    third = SignatureService.create_signature(db_session, common_user, "c", "Prefeito")
    assert third.incremental_id == 2


def test_support_cannot_create_signatures(db_session, support_user):
    with pytest.raises(ForbiddenError):
        SignatureService.create_signature(db_session, support_user, "motivo", "Prefeito")


def test_create_requires_reason_and_token(db_session, common_user):
    with pytest.raises(ValidationError):
        SignatureService.create_signature(db_session, common_user, "", "Prefeito")
    with pytest.raises(ValidationError):
        SignatureService.create_signature(db_session, common_user, "motivo", "  ")
    assert db_session.query(Signature).count() == 0


def test_get_signature_owner_or_privileged(db_session, common_user, other_user, support_user):
    sig = SignatureService.create_signature(db_session, common_user, "motivo", "Prefeito")
    assert SignatureService.get_signature(db_session, common_user, sig.id).id == sig.id
    assert SignatureService.get_signature(db_session, support_user, sig.id).id == sig.id
    with pytest.raises(ForbiddenError):
        SignatureService.get_signature(db_session, other_user, sig.id)
    with pytest.raises(NotFoundError):
        SignatureService.get_signature(db_session, common_user, 12345)


def test_owner_direct_paths_follow_config(db_session, common_user, monkeypatch):
    sig = SignatureService.create_signature(db_session, common_user, "motivo", "Prefeito")

    updated = SignatureService.update_signature(db_session, common_user, sig.id, "novo motivo", "Municipio")
    assert updated.reason == "novo motivo"

    monkeypatch.setattr(signature_service, "ALLOW_OWNER_DIRECT_UPDATE", False)
    monkeypatch.setattr(signature_service, "ALLOW_OWNER_DIRECT_DELETE", False)
    with pytest.raises(ForbiddenError):
        SignatureService.update_signature(db_session, common_user, sig.id, "outro", "Prefeito")
    with pytest.raises(ForbiddenError):
        SignatureService.delete_signature(db_session, common_user, sig.id)


def test_owner_direct_delete_purges_attachments(db_session, common_user, fake_storage):
    sig = SignatureService.create_signature(db_session, common_user, "motivo", "Prefeito")
    AttachmentService.upload_attachment(db_session, common_user, sig.id, "a.txt", "text/plain", b"a")
    AttachmentService.upload_attachment(db_session, common_user, sig.id, "b.png", "image/png", b"b")
    assert len(fake_storage.objects) == 2

    errors = SignatureService.delete_signature(db_session, common_user, sig.id)

    assert errors == []
    assert fake_storage.objects == {}
    assert db_session.query(Signature).count() == 0


def test_delete_returns_storage_errors(db_session, admin_user, fake_storage):
    sig = SignatureService.create_signature(db_session, admin_user, "motivo", "Prefeito")
    AttachmentService.upload_attachment(db_session, admin_user, sig.id, "a.txt", "text/plain", b"a")
    fake_storage.fail_deletes = True

    errors = SignatureService.delete_signature(db_session, admin_user, sig.id)

    assert len(errors) == 1
    assert db_session.query(Signature).count() == 0


def test_query_signatures_filters(db_session, make_user, make_sector):
    ana = make_user("ana", name="Ana Souza", sector=make_sector("Administração"))
    rui = make_user("rui", name="Rui Costa", sector=make_sector("Financeiro"))
    old = SignatureService.create_signature(db_session, ana, "licença antiga", "Prefeito")
    old.created_at = datetime(2024, 1, 10, 9, 30)
    db_session.commit()
    SignatureService.create_signature(db_session, ana, "contrato novo", "Municipio")
    SignatureService.create_signature(db_session, rui, "pagamento", "Prefeito")

    assert SignatureService.query_signatures(db_session).count() == 3
    assert SignatureService.query_signatures(db_session, search="contrato").count() == 1
    assert SignatureService.query_signatures(db_session, search="Rui").count() == 1
    assert SignatureService.query_signatures(db_session, token="Prefeito").count() == 2
    assert SignatureService.query_signatures(db_session, server_name="Ana Souza").count() == 2
    assert SignatureService.query_signatures(db_session, sector_name="Financeiro").count() == 1
    assert SignatureService.query_signatures(db_session, date_to=datetime(2024, 1, 10)).count() == 1
    assert SignatureService.query_signatures(db_session, date_from=datetime(2024, 1, 11)).count() == 2

    newest_first = SignatureService.query_signatures(db_session).all()
    assert newest_first[-1].reason == "licença antiga"


def test_tokens_and_servers(db_session, common_user, other_user):
    SignatureService.create_signature(db_session, common_user, "a", "Prefeito")
    SignatureService.create_signature(db_session, common_user, "b", "Prefeito")
    SignatureService.create_signature(db_session, other_user, "c", "Municipio")

    assert SignatureService.get_tokens() == ["Prefeito", "Municipio"]
    assert SignatureService.get_servers(db_session) == ["Ana Souza", "Bruno Lima"]
