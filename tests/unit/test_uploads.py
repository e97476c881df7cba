"""Tests for upload token issuing and the storage completion callback."""

import json
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import pytest

from conftest import USER_A, USER_B, auth
from docuexpiry.api.routes import uploads as uploads_routes
from docuexpiry.config.settings import reset_settings_cache
from docuexpiry.core.exceptions import UpstreamPayloadError
from docuexpiry.core.upload_manager import ALLOWED_CONTENT_TYPES, UploadManager


def _token_request(document_id: str, **overrides) -> dict:
    body = {
        "document_id": document_id,
        "pathname": "documents/policy.pdf",
        "file_name": "policy.pdf",
        "file_size": 2048,
        "file_type": "application/pdf",
    }
    body.update(overrides)
    return body


def _completion(client_token, url="https://blob.example/documents/policy-x1.pdf",
                pathname="documents/policy-x1.pdf") -> dict:
    return {"blob": {"url": url, "pathname": pathname}, "client_token": client_token}


def _signed(claims: dict, secret: Optional[str] = None) -> str:
    """Sign ``claims`` with the running upload manager's secret by default."""
    claims.setdefault("exp", datetime.now(timezone.utc) + timedelta(minutes=5))
    return jwt.encode(claims, secret or uploads_routes.upload_manager.secret, algorithm="HS256")


async def _issue_token(async_client, document_id: str, user_id: str = USER_A, **overrides) -> str:
    response = await async_client.post(
        "/api/v1/uploads/token",
        json=_token_request(document_id, **overrides),
        headers=auth(user_id),
    )
    assert response.status_code == 200
    return response.json()["client_token"]


@pytest.mark.unit
class TestIssueToken:

    @pytest.mark.asyncio
    async def test_token_for_owned_document(self, async_client, make_document):
        document_id = await make_document(USER_A)

        response = await async_client.post(
            "/api/v1/uploads/token", json=_token_request(document_id), headers=auth()
        )

        assert response.status_code == 200
        body = response.json()
        assert body["allowed_content_types"] == ALLOWED_CONTENT_TYPES
        assert body["maximum_size_in_bytes"] == 25 * 1024 * 1024
        assert body["expires_at"].endswith("+00:00")

        claims = uploads_routes.upload_manager.decode_token(body["client_token"])
        assert claims["sub"] == USER_A
        assert claims["pathname"] == "documents/policy.pdf"
        payload = json.loads(claims["token_payload"])
        assert payload["document_id"] == document_id
        assert payload["user_id"] == USER_A

    @pytest.mark.asyncio
    async def test_other_users_document_is_not_found(self, async_client, make_document):
        document_id = await make_document(USER_B)

        response = await async_client.post(
            "/api/v1/uploads/token", json=_token_request(document_id), headers=auth(USER_A)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client, make_document):
        document_id = await make_document(USER_A)

        response = await async_client.post("/api/v1/uploads/token", json=_token_request(document_id))

        assert response.status_code == 401
        assert response.json() == {"detail": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_disallowed_content_type(self, async_client, make_document):
        document_id = await make_document(USER_A)

        response = await async_client.post(
            "/api/v1/uploads/token",
            json=_token_request(document_id, file_type="application/x-msdownload"),
            headers=auth(),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_oversized_file(self, async_client, make_document):
        document_id = await make_document(USER_A)

        response = await async_client.post(
            "/api/v1/uploads/token",
            json=_token_request(document_id, file_size=25 * 1024 * 1024 + 1),
            headers=auth(),
        )

        assert response.status_code == 422

    def test_forged_token_rejected(self):
        manager = UploadManager(None, secret="right")
        forged = jwt.encode({"sub": USER_A}, "wrong", algorithm="HS256")

        with pytest.raises(jwt.InvalidTokenError):
            manager.decode_token(forged)


@pytest.mark.unit
class TestUploadCompleted:

    @pytest.mark.asyncio
    async def test_completion_attaches_file(self, async_client, doc_manager, make_document):
        document_id = await make_document(USER_A)
        client_token = await _issue_token(async_client, document_id)

        response = await async_client.post("/api/v1/uploads/complete", json=_completion(client_token))

        assert response.status_code == 200
        assert response.json() == {"updated": True}
        document = await doc_manager.get_document(document_id, USER_A)
        assert document.file_url == "https://blob.example/documents/policy-x1.pdf"
        assert document.file_pathname == "documents/policy-x1.pdf"
        assert document.file_name == "policy.pdf"
        assert document.file_size == 2048
        assert document.file_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_file_name_falls_back_to_pathname(self, async_client, doc_manager, make_document):
        document_id = await make_document(USER_A)
        client_token = await _issue_token(async_client, document_id, file_name=None)

        await async_client.post("/api/v1/uploads/complete", json=_completion(client_token))

        document = await doc_manager.get_document(document_id, USER_A)
        assert document.file_name == "policy-x1.pdf"

    @pytest.mark.asyncio
    async def test_unsigned_payload_cannot_attach_file(self, async_client, doc_manager, make_document):
        victim_id = await make_document(USER_B)
        unsigned = json.dumps({"user_id": USER_B, "document_id": victim_id})

        response = await async_client.post(
            "/api/v1/uploads/complete",
            json={
                "blob": {"url": "https://evil.example/malware.exe", "pathname": "malware.exe"},
                "token_payload": unsigned,
            },
        )

        assert response.status_code == 200
        assert response.json() == {"updated": False}
        document = await doc_manager.get_document(victim_id, USER_B)
        assert document.file_url is None

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret_is_skipped(self, async_client, doc_manager,
                                                             make_document):
        victim_id = await make_document(USER_B)
        payload = json.dumps({"user_id": USER_B, "document_id": victim_id})
        forged = _signed({"sub": USER_B, "token_payload": payload}, secret="not-the-server-secret")

        response = await async_client.post("/api/v1/uploads/complete", json=_completion(forged))

        assert response.json() == {"updated": False}
        document = await doc_manager.get_document(victim_id, USER_B)
        assert document.file_url is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("make_token", [
        lambda document_id: None,
        lambda document_id: "",
        lambda document_id: "not-a-jwt",
        # expired
        lambda document_id: _signed({
            "sub": USER_A,
            "token_payload": json.dumps({"user_id": USER_A, "document_id": document_id}),
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        }),
        # signed but no payload
        lambda document_id: _signed({"sub": USER_A}),
        lambda document_id: _signed({"sub": USER_A, "token_payload": "{not json"}),
        lambda document_id: _signed({
            "sub": USER_A,
            "token_payload": json.dumps({"user_id": USER_A, "document_id": document_id, "file_size": -1}),
        }),
    ])
    async def test_bad_token_is_skipped(self, async_client, doc_manager, make_document, make_token):
        document_id = await make_document(USER_A)

        response = await async_client.post(
            "/api/v1/uploads/complete", json=_completion(make_token(document_id))
        )

        assert response.status_code == 200
        assert response.json() == {"updated": False}
        document = await doc_manager.get_document(document_id, USER_A)
        assert document.file_url is None

    @pytest.mark.asyncio
    async def test_payload_must_match_token_subject(self, async_client, doc_manager, make_document):
        document_id = await make_document(USER_B)
        payload = json.dumps({"user_id": USER_B, "document_id": document_id})
        client_token = _signed({"sub": USER_A, "token_payload": payload})

        response = await async_client.post("/api/v1/uploads/complete", json=_completion(client_token))

        assert response.json() == {"updated": False}
        document = await doc_manager.get_document(document_id, USER_B)
        assert document.file_url is None

    @pytest.mark.asyncio
    async def test_payload_scoped_to_owner(self, async_client, doc_manager, make_document):
        document_id = await make_document(USER_B)
        payload = json.dumps({"user_id": USER_A, "document_id": document_id})
        client_token = _signed({"sub": USER_A, "token_payload": payload})

        response = await async_client.post("/api/v1/uploads/complete", json=_completion(client_token))

        assert response.json() == {"updated": False}
        document = await doc_manager.get_document(document_id, USER_B)
        assert document.file_url is None

    @pytest.mark.asyncio
    async def test_callback_secret_enforced(self, async_client, make_document, monkeypatch):
        monkeypatch.setenv("UPLOAD_CALLBACK_SECRET", "s3cret")
        reset_settings_cache()
        document_id = await make_document(USER_A)
        client_token = await _issue_token(async_client, document_id)

        rejected = await async_client.post("/api/v1/uploads/complete", json=_completion(client_token))
        non_ascii = await async_client.post(
            "/api/v1/uploads/complete",
            json=_completion(client_token),
            headers={"X-Upload-Callback-Secret": "sécret".encode()},
        )
        accepted = await async_client.post(
            "/api/v1/uploads/complete",
            json=_completion(client_token),
            headers={"X-Upload-Callback-Secret": "s3cret"},
        )

        assert rejected.status_code == 401
        assert non_ascii.status_code == 401
        assert accepted.json() == {"updated": True}

    def test_parse_payload_errors(self):
        with pytest.raises(UpstreamPayloadError):
            UploadManager.parse_token_payload(None)
        with pytest.raises(UpstreamPayloadError):
            UploadManager.parse_token_payload("[]")

    def test_verify_completion_rejects_foreign_signature(self):
        manager = UploadManager(None, secret="right")
        forged = _signed(
            {"sub": USER_A, "token_payload": json.dumps({"user_id": USER_A, "document_id": "d1"})},
            secret="wrong",
        )

        with pytest.raises(UpstreamPayloadError):
            manager.verify_completion(forged)
