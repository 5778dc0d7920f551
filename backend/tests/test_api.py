"""
NotaryPro Backend — API Integration Tests
===========================================

What we test:
    ✅ Health check and request ID header
    ✅ Login → /me → logout → token revoked
    ✅ Full lifecycle: create → verify identity → certify → QR validation
    ✅ Commission and notification side effects through the API
    ✅ Error mapping: 400 / 401 / 403 / 404 / 409 / 422
    ✅ Admin user management, analytics, POS locations, payouts

Seed data is committed through `session_factory` before requests, since
every request runs on its own session.
"""

from decimal import Decimal

import pytest

from app.models.enums import DocumentStatus, UserRole

from conftest import TEST_PASSWORD

SUBMITTER_RUT = "12345678-5"


@pytest.fixture
def seed(session_factory):
    """
    Run `build(db)` in a committed transaction and return its result.

    Usage:
        users = await seed(lambda db: make_user(db, UserRole.CERTIFICADOR))
    """

    async def _seed(build):
        async with session_factory() as db:
            result = await build(db)
            await db.commit()
            return result

    return _seed


@pytest.fixture
def actors(seed, make_user, auth_headers):
    """Submitter, certifier and superadmin with ready-to-use headers."""

    async def _actors():
        async def build(db):
            submitter = await make_user(db, UserRole.USUARIO_FINAL, rut=SUBMITTER_RUT)
            certifier = await make_user(db, UserRole.CERTIFICADOR)
            admin = await make_user(db, UserRole.SUPERADMIN)
            return {
                "submitter": submitter,
                "certifier": certifier,
                "admin": admin,
                "submitter_headers": await auth_headers(db, submitter),
                "certifier_headers": await auth_headers(db, certifier),
                "admin_headers": await auth_headers(db, admin),
            }

        return await seed(build)

    return _actors


def _document_body(certifier_id=None, **overrides):
    body = {
        "type": "declaracion_jurada",
        "title": "Declaración jurada de residencia",
        "content": {"address": "Av. Siempre Viva 742"},
        "price": "10000.00",
        "certificador_id": certifier_id,
    }
    body.update(overrides)
    return body


# ══════════════════════════════════════════════════════════════════════════
# Health & Auth
# ══════════════════════════════════════════════════════════════════════════

class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert "X-Request-ID" in response.headers


class TestAuth:
    @pytest.mark.asyncio
    async def test_login_me_logout(self, test_client, seed, make_user):
        user = await seed(lambda db: make_user(db, email="ana@notarypro.cl"))

        response = await test_client.post(
            "/api/auth/login",
            json={"email": "ana@notarypro.cl", "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == user.id
        assert "password_hash" not in data["user"]
        headers = {"Authorization": f"Bearer {data['access_token']}"}

        me = await test_client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["email"] == "ana@notarypro.cl"

        logout = await test_client.post("/api/auth/logout", headers=headers)
        assert logout.status_code == 204

        after = await test_client.get("/api/auth/me", headers=headers)
        assert after.status_code == 401
        assert after.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, seed, make_user):
        await seed(lambda db: make_user(db, email="ana@notarypro.cl"))

        response = await test_client.post(
            "/api/auth/login",
            json={"email": "ana@notarypro.cl", "password": "nope"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/api/documents")
        assert response.status_code == 401
        assert "request_id" in response.json()

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client):
        response = await test_client.get(
            "/api/documents", headers={"Authorization": "Bearer not.a.token"}
        )
        assert response.status_code == 401


# ══════════════════════════════════════════════════════════════════════════
# Certification Lifecycle
# ══════════════════════════════════════════════════════════════════════════

class TestLifecycle:
    @pytest.mark.asyncio
    async def test_create_verify_certify_validate(self, test_client, actors):
        a = await actors()

        created = await test_client.post(
            "/api/documents",
            json=_document_body(a["certifier"].id),
            headers=a["submitter_headers"],
        )
        assert created.status_code == 200
        document = created.json()["document"]
        assert document["status"] == "pending_verification"
        assert document["is_identity_verified"] is False
        assert created.json()["warnings"] == []
        doc_id = document["id"]

        verified = await test_client.post(
            "/api/verify-identity",
            json={"document_id": doc_id, "rut": "12.345.678-5"},
            headers=a["submitter_headers"],
        )
        assert verified.status_code == 200
        assert verified.json()["verified"] is True
        assert verified.json()["document"]["status"] == "pending_certification"

        pending = await test_client.get("/api/documents/pending", headers=a["certifier_headers"])
        assert [d["id"] for d in pending.json()] == [doc_id]

        certified = await test_client.patch(
            f"/api/documents/{doc_id}/certify",
            json={"action": "certify"},
            headers=a["certifier_headers"],
        )
        assert certified.status_code == 200
        result = certified.json()
        assert result["document"]["status"] == "certified"
        assert result["document"]["digital_signature"].startswith("CERT_")
        assert result["document"]["certified_at"] is not None

        commission = result["commission"]
        assert Decimal(commission["vecino_amount"]) == Decimal("4000.00")
        assert Decimal(commission["certificador_amount"]) == Decimal("3500.00")
        assert Decimal(commission["admin_amount"]) == Decimal("2500.00")
        assert Decimal(commission["total_amount"]) == Decimal("10000.00")
        assert commission["vecino_id"] == a["submitter"].id
        assert commission["is_paid"] is False

        qr = result["document"]["qr_validation_code"]
        validation = await test_client.get(f"/api/documents/validate/{qr}")
        assert validation.status_code == 200
        assert validation.json()["valid"] is True
        assert validation.json()["document_id"] == doc_id

        inbox = await test_client.get("/api/notifications", headers=a["submitter_headers"])
        assert inbox.json()[0]["title"] == "Document certified"

        earned = await test_client.get("/api/commissions", headers=a["certifier_headers"])
        assert [c["document_id"] for c in earned.json()] == [doc_id]

    @pytest.mark.asyncio
    async def test_failed_identity_check_changes_nothing(self, test_client, actors):
        a = await actors()
        created = await test_client.post(
            "/api/documents", json=_document_body(), headers=a["submitter_headers"]
        )
        doc_id = created.json()["document"]["id"]

        response = await test_client.post(
            "/api/verify-identity",
            json={"document_id": doc_id, "rut": "11.111.111-1"},
            headers=a["submitter_headers"],
        )
        assert response.status_code == 200
        assert response.json()["verified"] is False
        assert response.json()["document"]["status"] == "pending_verification"

    @pytest.mark.asyncio
    async def test_unverified_document_not_yet_valid(self, test_client, actors):
        a = await actors()
        created = await test_client.post(
            "/api/documents", json=_document_body(), headers=a["submitter_headers"]
        )
        qr = created.json()["document"]["qr_validation_code"]

        response = await test_client.get(f"/api/documents/validate/{qr}")
        assert response.status_code == 200
        assert response.json()["valid"] is False

    @pytest.mark.asyncio
    async def test_draft_submit_and_cancel(self, test_client, actors):
        a = await actors()
        created = await test_client.post(
            "/api/documents",
            json=_document_body(save_as_draft=True),
            headers=a["submitter_headers"],
        )
        doc_id = created.json()["document"]["id"]
        assert created.json()["document"]["status"] == "draft"

        submitted = await test_client.post(
            f"/api/documents/{doc_id}/submit", headers=a["submitter_headers"]
        )
        assert submitted.json()["document"]["status"] == "pending_verification"

        cancelled = await test_client.post(
            f"/api/documents/{doc_id}/cancel", headers=a["submitter_headers"]
        )
        assert cancelled.json()["document"]["status"] == "cancelled"

        again = await test_client.post(
            f"/api/documents/{doc_id}/cancel", headers=a["submitter_headers"]
        )
        assert again.status_code == 409


# ══════════════════════════════════════════════════════════════════════════
# Error Mapping
# ══════════════════════════════════════════════════════════════════════════

class TestCertificationErrors:
    @pytest.mark.asyncio
    async def test_submitter_cannot_certify(self, test_client, actors, seed, make_document):
        a = await actors()
        document = await seed(lambda db: make_document(db, a["submitter"]))

        response = await test_client.patch(
            f"/api/documents/{document.id}/certify",
            json={"action": "certify"},
            headers=a["submitter_headers"],
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_double_certify_conflicts(self, test_client, actors, seed, make_document):
        a = await actors()
        document = await seed(lambda db: make_document(db, a["submitter"]))
        url = f"/api/documents/{document.id}/certify"

        first = await test_client.patch(url, json={"action": "certify"}, headers=a["certifier_headers"])
        second = await test_client.patch(url, json={"action": "certify"}, headers=a["certifier_headers"])

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error"] == "state_conflict"
        assert second.json()["details"]["current_state"] == "certified"

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, test_client, actors, seed, make_document):
        a = await actors()
        document = await seed(lambda db: make_document(db, a["submitter"]))

        response = await test_client.patch(
            f"/api/documents/{document.id}/certify",
            json={"action": "reject", "rejection_reason": "   "},
            headers=a["certifier_headers"],
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_reject_with_reason(self, test_client, actors, seed, make_document):
        a = await actors()
        document = await seed(lambda db: make_document(db, a["submitter"]))

        response = await test_client.patch(
            f"/api/documents/{document.id}/certify",
            json={"action": "reject", "rejection_reason": "Firma ilegible"},
            headers=a["certifier_headers"],
        )
        assert response.status_code == 200
        assert response.json()["document"]["status"] == "rejected"
        assert response.json()["document"]["rejection_reason"] == "Firma ilegible"
        assert response.json()["commission"] is None

    @pytest.mark.asyncio
    async def test_invalid_price_is_422(self, test_client, actors):
        a = await actors()
        response = await test_client.post(
            "/api/documents",
            json=_document_body(price="-5"),
            headers=a["submitter_headers"],
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_certifier_is_400(self, test_client, actors):
        a = await actors()
        response = await test_client.post(
            "/api/documents",
            json=_document_body(certifier_id=a["admin"].id),
            headers=a["submitter_headers"],
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_qr_code(self, test_client):
        response = await test_client.get("/api/documents/validate/QR0000000000000abcdefghi")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_users_document_is_hidden(self, test_client, actors, seed, make_user, make_document, auth_headers):
        a = await actors()
        document = await seed(lambda db: make_document(db, a["submitter"]))

        async def build(db):
            return await auth_headers(db, await make_user(db))

        stranger_headers = await seed(build)
        response = await test_client.get(f"/api/documents/{document.id}", headers=stranger_headers)
        assert response.status_code == 403


class TestDocumentAccess:
    @pytest.mark.asyncio
    async def test_assigned_certifier_sees_and_verifies(
        self, test_client, actors, seed, make_document
    ):
        a = await actors()
        document = await seed(
            lambda db: make_document(
                db,
                a["submitter"],
                status=DocumentStatus.PENDING_VERIFICATION,
                certificador_id=a["certifier"].id,
            )
        )

        detail = await test_client.get(
            f"/api/documents/{document.id}", headers=a["certifier_headers"]
        )
        assert detail.status_code == 200

        verified = await test_client.post(
            "/api/verify-identity",
            json={"document_id": document.id, "rut": "12.345.678-5"},
            headers=a["certifier_headers"],
        )
        assert verified.status_code == 200
        assert verified.json()["verified"] is True
        assert verified.json()["document"]["status"] == "pending_certification"

    @pytest.mark.asyncio
    async def test_other_certifier_is_refused(
        self, test_client, actors, seed, make_user, make_document, auth_headers
    ):
        a = await actors()
        document = await seed(
            lambda db: make_document(
                db,
                a["submitter"],
                status=DocumentStatus.PENDING_VERIFICATION,
                certificador_id=a["certifier"].id,
            )
        )

        async def build(db):
            return await auth_headers(db, await make_user(db, UserRole.CERTIFICADOR))

        other_headers = await seed(build)
        detail = await test_client.get(f"/api/documents/{document.id}", headers=other_headers)
        verify = await test_client.post(
            "/api/verify-identity",
            json={"document_id": document.id, "rut": "12.345.678-5"},
            headers=other_headers,
        )

        assert detail.status_code == 403
        assert verify.status_code == 403


# ══════════════════════════════════════════════════════════════════════════
# Admin, Analytics, POS, Payouts
# ══════════════════════════════════════════════════════════════════════════

class TestAdmin:
    @pytest.mark.asyncio
    async def test_create_and_toggle_user(self, test_client, actors):
        a = await actors()
        body = {
            "email": "cert@notarypro.cl",
            "password": "una-clave-segura",
            "first_name": "Camila",
            "last_name": "Soto",
            "role": "certificador",
        }

        created = await test_client.post("/api/admin/users", json=body, headers=a["admin_headers"])
        assert created.status_code == 201
        new_id = created.json()["id"]

        duplicate = await test_client.post("/api/admin/users", json=body, headers=a["admin_headers"])
        assert duplicate.status_code == 400

        login = await test_client.post(
            "/api/auth/login", json={"email": body["email"], "password": body["password"]}
        )
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

        toggled = await test_client.post(
            f"/api/admin/users/{new_id}/toggle", headers=a["admin_headers"]
        )
        assert toggled.json()["is_active"] is False

        refused = await test_client.get("/api/auth/me", headers=headers)
        assert refused.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_routes_need_superadmin(self, test_client, actors):
        a = await actors()
        response = await test_client.get("/api/admin/users", headers=a["certifier_headers"])
        assert response.status_code == 403


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_superadmin_stats(self, test_client, actors, seed, make_document):
        a = await actors()
        await seed(lambda db: make_document(db, a["submitter"], status=DocumentStatus.DRAFT))

        docs = await test_client.get("/api/analytics/documents", headers=a["admin_headers"])
        users = await test_client.get("/api/analytics/users", headers=a["admin_headers"])
        commissions = await test_client.get("/api/analytics/commissions", headers=a["admin_headers"])

        assert docs.json()["total"] == 1
        assert docs.json()["by_status"]["draft"] == 1
        assert users.json()["total_users"] == 3
        assert commissions.json()["total_count"] == 0

    @pytest.mark.asyncio
    async def test_non_admin_refused(self, test_client, actors):
        a = await actors()
        response = await test_client.get("/api/analytics/documents", headers=a["submitter_headers"])
        assert response.status_code == 403


class TestPosLocations:
    @pytest.mark.asyncio
    async def test_create_list_deactivate(self, test_client, actors):
        a = await actors()

        created = await test_client.post(
            "/api/pos-locations",
            json={"name": "Almacén Don Pepe", "address": "Los Aromos 123"},
            headers=a["submitter_headers"],
        )
        assert created.status_code == 200
        location = created.json()
        assert Decimal(location["commission_rate"]) == Decimal("40.00")

        listed = await test_client.get("/api/pos-locations", headers=a["submitter_headers"])
        assert [loc["id"] for loc in listed.json()] == [location["id"]]

        updated = await test_client.patch(
            f"/api/pos-locations/{location['id']}",
            json={"is_active": False},
            headers=a["submitter_headers"],
        )
        assert updated.json()["is_active"] is False

        foreign = await test_client.patch(
            f"/api/pos-locations/{location['id']}",
            json={"is_active": True},
            headers=a["certifier_headers"],
        )
        assert foreign.status_code == 403


class TestPayouts:
    @pytest.mark.asyncio
    async def test_pay_commission_once(self, test_client, actors, seed, make_document):
        a = await actors()
        document = await seed(lambda db: make_document(db, a["submitter"]))
        certified = await test_client.patch(
            f"/api/documents/{document.id}/certify",
            json={"action": "certify"},
            headers=a["certifier_headers"],
        )
        commission_id = certified.json()["commission"]["id"]

        unpaid = await test_client.get("/api/admin/commissions/unpaid", headers=a["admin_headers"])
        assert [c["id"] for c in unpaid.json()] == [commission_id]

        paid = await test_client.post(
            f"/api/admin/commissions/{commission_id}/pay", headers=a["admin_headers"]
        )
        assert paid.status_code == 200
        assert paid.json()["is_paid"] is True

        again = await test_client.post(
            f"/api/admin/commissions/{commission_id}/pay", headers=a["admin_headers"]
        )
        assert again.status_code == 409
