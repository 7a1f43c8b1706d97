"""
Tests for the auth rate limiter and the JSON error handlers.
"""
import pytest
from flask import Flask

from portal.auth.rate_limit import RateLimiter
from portal.errors import (
    ERROR_MESSAGES,
    AppError,
    ArticleNotFoundError,
    EmailExistsError,
    InternalError,
    QuotaExceededError,
    RateLimitedError,
    UserNotFoundError,
    ValidationError,
    register_error_handlers,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRateLimiter:

    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = RateLimiter(max_requests=5, window_seconds=60, clock=self.clock)

    def test_allows_up_to_max(self):
        for _ in range(5):
            self.limiter.hit("1.2.3.4")
        with pytest.raises(RateLimitedError) as exc_info:
            self.limiter.hit("1.2.3.4")
        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 60

    def test_keys_are_independent(self):
        for _ in range(5):
            self.limiter.hit("1.2.3.4")
        self.limiter.hit("5.6.7.8")

    def test_window_resets(self):
        for _ in range(5):
            self.limiter.hit("1.2.3.4")
        self.clock.now += 60
        self.limiter.hit("1.2.3.4")

    def test_retry_after_counts_down(self):
        for _ in range(5):
            self.limiter.hit("k")
        self.clock.now += 45
        with pytest.raises(RateLimitedError) as exc_info:
            self.limiter.hit("k")
        assert exc_info.value.retry_after == 15

    def test_reset(self):
        for _ in range(5):
            self.limiter.hit("k")
        self.limiter.reset()
        self.limiter.hit("k")


class TestErrors:

    def test_default_messages(self):
        assert UserNotFoundError().message == ERROR_MESSAGES["USER_NOT_FOUND"]
        assert EmailExistsError().status_code == 409
        assert ArticleNotFoundError().code == "ARTICLE_NOT_FOUND"

    def test_quota_exceeded_body(self):
        error = QuotaExceededError(current_usage=3, limit=3, membership_type="A")
        assert error.status_code == 403
        assert error.to_dict() == {
            "error": {
                "code": "QUOTA_EXCEEDED",
                "message": ERROR_MESSAGES["QUOTA_EXCEEDED"],
                "details": {"currentUsage": 3, "limit": 3, "membershipType": "A"},
            }
        }

    def test_validation_error_uses_fields(self):
        body = ValidationError({"email": "Invalid email format"}).to_dict()
        assert body["error"]["fields"] == {"email": "Invalid email format"}
        assert "details" not in body["error"]

    def test_internal_error_is_not_operational(self):
        error = InternalError("Boom", original_error=RuntimeError("cause"))
        assert not error.is_operational
        assert error.details == {"originalMessage": "cause"}


class TestErrorHandlers:

    def setup_method(self):
        self.app = Flask(__name__)
        register_error_handlers(self.app)

        @self.app.route("/quota")
        def quota():
            raise QuotaExceededError(current_usage=10, limit=10, membership_type="B")

        @self.app.route("/limited")
        def limited():
            raise RateLimitedError(retry_after=30)

        @self.app.route("/internal")
        def internal():
            raise InternalError("Wrapped", original_error=ValueError("secret detail"))

        @self.app.route("/crash")
        def crash():
            raise RuntimeError("database password is hunter2")

        @self.app.route("/custom")
        def custom():
            raise AppError("FORBIDDEN", status_code=403)

        self.client = self.app.test_client()

    def test_app_error_response(self):
        response = self.client.get("/quota")
        assert response.status_code == 403
        assert response.get_json()["error"]["details"]["membershipType"] == "B"

    def test_rate_limited_sets_retry_after(self):
        response = self.client.get("/limited")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"
        assert response.get_json()["error"]["code"] == "RATE_LIMITED"

    def test_internal_error_hides_details_outside_debug(self):
        response = self.client.get("/internal")
        assert response.status_code == 500
        body = response.get_json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "details" not in body["error"]

    def test_unexpected_exception_is_masked(self):
        response = self.client.get("/crash")
        assert response.status_code == 500
        body = response.get_json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "hunter2" not in body["error"]["message"]

    def test_unknown_route(self):
        response = self.client.get("/nowhere")
        assert response.status_code == 404
        assert response.get_json() == {"error": {"code": "NOT_FOUND", "message": "Cannot GET /nowhere"}}

    def test_explicit_status(self):
        assert self.client.get("/custom").status_code == 403
