"""
Tests for the failure envelope.

Every failure leaving the API is classified: business rule violations as
known failures with their own status code, anything else as an unknown
failure that exposes no internals.
"""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from warfront.main import app
from warfront.models.failure import (
    UNKNOWN_FAILURE_MESSAGE,
    ApiResponse,
    AuthError,
    ConflictError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OutcomeType,
    PermissionDeniedError,
    ValidationError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
)


class TestFailureEnvelope:
    def test_success_response_structure(self) -> None:
        response = ApiResponse.success({"data": "value"})

        assert response.outcome == OutcomeType.SUCCESS
        assert response.data == {"data": "value"}
        assert response.failure is None

    def test_known_failure_structure(self) -> None:
        response = ApiResponse.known_failure(
            kind=FailureKind.NOT_FOUND, message="Card not found", detail="X1"
        )

        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.kind == FailureKind.NOT_FOUND
        assert response.failure.detail == "X1"

    def test_failure_without_detail_rejected(self) -> None:
        """Failure outcomes must explain themselves."""
        response = ApiResponse(outcome=OutcomeType.KNOWN_FAILURE)

        with pytest.raises(ValueError):
            finalize_response(response)

    def test_success_with_failure_rejected(self) -> None:
        response = ApiResponse(
            outcome=OutcomeType.SUCCESS,
            failure=FailureDetail(kind=FailureKind.CONFLICT, message="Card already owned"),
        )

        with pytest.raises(ValueError, match="must not have failure details"):
            finalize_response(response)

    def test_finalize_returns_same_response(self) -> None:
        """Finalizing twice is harmless and leaves no trace behind."""
        response = ApiResponse.success({"custom_id": "X1"})

        assert finalize_response(response) is response
        assert finalize_response(response) is response


class TestKnownErrors:
    @pytest.mark.parametrize(
        ("error_cls", "kind", "status_code"),
        [
            (AuthError, FailureKind.NOT_AUTHENTICATED, 401),
            (PermissionDeniedError, FailureKind.FORBIDDEN, 403),
            (ValidationError, FailureKind.INVALID_INPUT, 400),
            (NotFoundError, FailureKind.NOT_FOUND, 404),
            (ConflictError, FailureKind.CONFLICT, 409),
        ],
    )
    def test_classification(
        self, error_cls: type[KnownError], kind: FailureKind, status_code: int
    ) -> None:
        error = error_cls("nope")

        assert error.kind == kind
        assert error.status_code == status_code

    def test_known_failure_response(self) -> None:
        response = create_known_failure(ConflictError("Batch is already complete"))

        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.message == "Batch is already complete"

    def test_unknown_failure_hides_message(self) -> None:
        response = create_unknown_failure(RuntimeError("password=hunter2"))

        assert response.outcome == OutcomeType.UNKNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.message == UNKNOWN_FAILURE_MESSAGE
        assert response.failure.detail == "RuntimeError"
        assert "hunter2" not in response.model_dump_json()


class TestExceptionHandlers:
    async def test_known_error_uses_its_status(self, client: AsyncClient) -> None:
        response = await client.get("/battles/999")

        assert response.status_code == 404
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "not_found"

    async def test_unexpected_error_is_unknown_failure(self, client: AsyncClient) -> None:
        """Unexpected exceptions become a 500 envelope, never a raw traceback."""
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        with patch(
            "warfront.api.cards.card_service.list_card_names",
            side_effect=RuntimeError("boom"),
        ):
            async with AsyncClient(transport=transport, base_url="http://test") as raw:
                response = await raw.get("/cards")

        assert response.status_code == 500
        data = response.json()
        assert data["outcome"] == "unknown_failure"
        assert data["failure"]["kind"] == "unknown"
        assert "boom" not in response.text
