"""
Presentation層APIエラーの単体テスト
"""

from session_guard.domain.exceptions import (
    BadRequestError,
    CSRFMismatchError,
    DomainError,
    SessionExpiredError,
    SessionHijackedError,
    SessionNotFoundError,
    StoreError,
    StoreTimeoutError,
    TokenGenerationError,
    UnauthorizedError,
    ValidationError,
)
from session_guard.presentation.exceptions import (
    APIError,
    ErrorResponse,
    domain_error_to_api_error,
    status_code_for,
)


class TestStatusCodeFor:
    """status_code_for()のテスト"""

    def test_session_errors_are_401(self) -> None:
        for error in (
            UnauthorizedError(),
            SessionNotFoundError(),
            SessionExpiredError(),
            SessionHijackedError(),
            CSRFMismatchError(),
        ):
            assert status_code_for(error) == 401

    def test_bad_request(self) -> None:
        assert status_code_for(BadRequestError()) == 400
        assert status_code_for(ValidationError()) == 400

    def test_store_errors(self) -> None:
        assert status_code_for(StoreTimeoutError()) == 503
        assert status_code_for(StoreError()) == 500
        assert status_code_for(TokenGenerationError()) == 500

    def test_unknown_domain_error(self) -> None:
        assert status_code_for(DomainError("x", "custom")) == 500


class TestDomainErrorToAPIError:
    """domain_error_to_api_error()のテスト"""

    def test_conversion(self) -> None:
        api_error = domain_error_to_api_error(
            SessionExpiredError(details={"reason": "idle"})
        )

        assert isinstance(api_error, APIError)
        assert api_error.status_code == 401
        response = api_error.to_response()
        assert isinstance(response, ErrorResponse)
        assert response.status == "error"
        assert response.code == "session_expired"
        assert response.message == "session has expired"
        assert response.details == {"reason": "idle"}

    def test_scalar_details_are_wrapped(self) -> None:
        api_error = domain_error_to_api_error(DomainError("x", "custom", "detail"))
        assert api_error.details == {"detail": "detail"}
