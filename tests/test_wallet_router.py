import json
import logging
import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from eduwallet.config import Settings
from eduwallet.main import create_app
from eduwallet.providers.storage.memory import InMemoryKeyValueStore
from dependency_injector import providers


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def app(storage):
    """테스트용 앱 - 저장소를 공유 가능한 메모리 저장소로 교체"""
    app = create_app(Settings(STORAGE_BACKEND="memory"))
    app.container.repositories.storage.override(providers.Object(storage))  # type: ignore
    yield app
    app.container.repositories.storage.reset_override()  # type: ignore


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def signed_in_client(client):
    response = client.put("/api/v1/session", json={"user_id": "u1"})
    assert response.status_code == 200
    return client


class TestSessionRoutes:
    """세션 라우터 테스트"""

    def test_get_session_without_identity(self, client):
        response = client.get("/api/v1/session")

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "state": "NO_IDENTITY"}

    def test_sign_in(self, client):
        response = client.put("/api/v1/session", json={"user_id": "u1"})

        assert response.status_code == 200
        assert response.json() == {"user_id": "u1", "state": "READY"}

    def test_sign_in_rejects_blank_user(self, client):
        response = client.put("/api/v1/session", json={"user_id": "   "})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"

    def test_sign_out(self, signed_in_client):
        response = signed_in_client.delete("/api/v1/session")

        assert response.status_code == 200
        assert response.json() == {"user_id": None, "state": "NO_IDENTITY"}


class TestWalletRoutes:
    """지갑 라우터 테스트"""

    def test_get_wallet_without_identity(self, client):
        """사용자가 없으면 빈 지갑"""
        response = client.get("/api/v1/wallet")

        assert response.status_code == 200
        data = response.json()
        assert data["earned"] == 0
        assert data["balance"] == 0
        assert data["state"] == "NO_IDENTITY"

    def test_get_wallet_new_user(self, signed_in_client):
        response = signed_in_client.get("/api/v1/wallet")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "u1"
        assert data["earned"] == 1200
        assert data["spent"] == 0
        assert data["balance"] == 1200
        assert data["transactions"] == []

    def test_add_spend_transaction(self, signed_in_client, storage):
        """spend 거래 기록"""
        # When
        response = signed_in_client.post(
            "/api/v1/wallet/transactions",
            json={"amount": 50, "type": "spend", "description": "bought hint"},
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["persisted"] is True
        assert data["balance_after"] == 1150
        assert data["transaction"]["type"] == "spend"
        assert data["transaction"]["id"].startswith("tx_")
        assert json.loads(storage.get("wallet_u1"))["spent"] == 50

    def test_add_earn_transaction_keeps_earned(self, signed_in_client):
        signed_in_client.post(
            "/api/v1/wallet/transactions",
            json={"amount": 300, "type": "earn", "description": "energy quest"},
        )

        data = signed_in_client.get("/api/v1/wallet").json()
        assert data["earned"] == 1200
        assert data["balance"] == 1200
        assert len(data["transactions"]) == 1

    def test_spent_endpoint(self, signed_in_client):
        response = signed_in_client.post(
            "/api/v1/wallet/spent", json={"amount": 20}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["transaction"]["description"] == "Spent"
        assert data["balance_after"] == 1180

    def test_mutation_without_identity_is_unauthorized(self, client):
        response = client.post(
            "/api/v1/wallet/transactions",
            json={"amount": 50, "type": "spend", "description": "hint"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_001"

    @pytest.mark.parametrize(
        "payload",
        [
            {"amount": 0, "type": "spend", "description": "zero"},
            {"amount": -3, "type": "spend", "description": "negative"},
            {"amount": 10, "type": "refund", "description": "bad type"},
            {"amount": 10, "type": "spend"},
            {"amount": True, "type": "spend", "description": "bool"},
            {"amount": "10", "type": "spend", "description": "string"},
            {"amount": 2.0, "type": "spend", "description": "float"},
        ],
    )
    def test_invalid_transaction(self, signed_in_client, payload):
        response = signed_in_client.post("/api/v1/wallet/transactions", json=payload)

        assert response.status_code == 422
        assert response.json()["success"] is False
        wallet = signed_in_client.get("/api/v1/wallet").json()
        assert wallet["spent"] == 0
        assert wallet["transactions"] == []

    @pytest.mark.parametrize("amount", [True, "10", 2.0])
    def test_spent_rejects_non_integer_amount(self, signed_in_client, amount):
        """정수가 아닌 금액은 변환 없이 거부"""
        response = signed_in_client.post("/api/v1/wallet/spent", json={"amount": amount})

        assert response.status_code == 422
        assert signed_in_client.get("/api/v1/wallet").json()["balance"] == 1200

    def test_storage_full_is_reported(self, signed_in_client):
        """저장 실패 시 persisted=false"""
        with patch.object(InMemoryKeyValueStore, "set", return_value=False):
            response = signed_in_client.post(
                "/api/v1/wallet/transactions",
                json={"amount": 5, "type": "spend", "description": "hint"},
            )

        data = response.json()
        assert response.status_code == 200
        assert data["persisted"] is False
        assert data["error_code"] == "STORAGE_WRITE_FAILED"

    def test_transactions_pagination(self, signed_in_client):
        for amount in (30, 20, 10):
            signed_in_client.post(
                "/api/v1/wallet/transactions",
                json={"amount": amount, "type": "spend", "description": f"#{amount}"},
            )

        response = signed_in_client.get("/api/v1/wallet/transactions?limit=2&offset=0")

        data = response.json()
        assert data["total_count"] == 3
        assert data["has_next"] is True
        assert [e["amount"] for e in data["entries"]] == [10, 20]
        assert data["balance"] == 1140

    def test_refresh_picks_up_external_change(self, signed_in_client, storage):
        storage.set(
            "wallet_u1",
            json.dumps(
                {
                    "earned": 1200,
                    "spent": 75,
                    "transactions": [
                        {
                            "id": "tx_1705309200000_x",
                            "amount": 75,
                            "type": "spend",
                            "description": "other tab",
                            "timestamp": "2024-01-15T09:00:00.000Z",
                        }
                    ],
                }
            ),
        )

        response = signed_in_client.post("/api/v1/wallet/refresh")

        assert response.status_code == 200
        assert response.json()["balance"] == 1125

    def test_refresh_with_corrupt_value(self, signed_in_client, storage):
        storage.set("wallet_u1", "corrupted")

        response = signed_in_client.post("/api/v1/wallet/refresh")

        assert response.status_code == 200
        assert response.json()["balance"] == 1200

    def test_integrity(self, signed_in_client):
        signed_in_client.post("/api/v1/wallet/spent", json={"amount": 15})

        response = signed_in_client.get("/api/v1/wallet/integrity")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"

    def test_switch_user_restores_wallet(self, signed_in_client):
        signed_in_client.post("/api/v1/wallet/spent", json={"amount": 15})

        signed_in_client.put("/api/v1/session", json={"user_id": "u2"})
        u2 = signed_in_client.get("/api/v1/wallet").json()
        signed_in_client.put("/api/v1/session", json={"user_id": "u1"})
        u1 = signed_in_client.get("/api/v1/wallet").json()

        assert u2["balance"] == 1200
        assert u1["balance"] == 1185


class TestErrorHandling:
    """오류 응답 및 요청 로그 테스트"""

    def test_unknown_route_uses_error_body(self, client):
        response = client.get("/api/v1/nope")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "HTTP_ERROR", "message": "Not Found", "details": {}},
        }

    def test_validation_log_names_wallet_user(self, signed_in_client, caplog):
        """검증 실패 로그에 현재 지갑 사용자 포함"""
        caplog.set_level(logging.INFO, logger="eduwallet")

        signed_in_client.post("/api/v1/wallet/spent", json={"amount": "10"})

        assert "[VALIDATION_001] POST /api/v1/wallet/spent user=u1 -> 422: body.amount" in caplog.text
        assert "[Response] POST /api/v1/wallet/spent user=u1 -> 422" in caplog.text

    def test_business_error_log_without_identity(self, client, caplog):
        caplog.set_level(logging.INFO, logger="eduwallet")

        client.post("/api/v1/wallet/spent", json={"amount": 10})

        assert "[AUTH_001] POST /api/v1/wallet/spent user=- -> 401: No active identity" in caplog.text

    def test_sign_in_response_logs_new_user(self, client, caplog):
        caplog.set_level(logging.INFO, logger="eduwallet")

        client.put("/api/v1/session", json={"user_id": "u7"})

        assert "[Response] PUT /api/v1/session user=u7 -> 200" in caplog.text


class TestStartup:
    def test_legacy_purge_on_startup(self):
        """WALLET_PURGE_LEGACY_ON_STARTUP=True 이면 레거시 지갑 삭제"""
        storage = InMemoryKeyValueStore()
        storage.set("wallet_old", '{"earned": 1200, "spent": 5, "transactions": []}')
        storage.set("profile_u1", "{}")
        app = create_app(
            Settings(STORAGE_BACKEND="memory", WALLET_PURGE_LEGACY_ON_STARTUP=True)
        )
        app.container.repositories.storage.override(providers.Object(storage))  # type: ignore

        with TestClient(app):
            pass

        assert storage.get("wallet_old") is None
        assert storage.get("profile_u1") == "{}"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["storage_backend"] == "memory"
