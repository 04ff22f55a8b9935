"""
Tests for posture_coach/utils/errors.py.
"""

import pytest

from posture_coach.utils.errors import HTTP_STATUS_BY_CODE, ErrorCode, ServiceError


class TestErrorTaxonomy:
    """The status map must cover every code so the exception handler never fails."""

    def test_every_code_has_a_status(self):
        assert set(HTTP_STATUS_BY_CODE) == set(ErrorCode)

    @pytest.mark.parametrize("code", [code for code in ErrorCode if code.value.startswith("LLM_")])
    def test_llm_failures_map_to_503(self, code):
        assert code.is_llm_failure
        assert HTTP_STATUS_BY_CODE[code] == 503

    @pytest.mark.parametrize("code,expected_status", [
        (ErrorCode.VALIDATION_ERROR, 400),
        (ErrorCode.EXERCISES_NOT_FOUND, 400),
        (ErrorCode.NOT_FOUND, 404),
        (ErrorCode.CATALOG_UNAVAILABLE, 500),
        (ErrorCode.NO_RESULTS_RESOLVED, 500),
        (ErrorCode.INTERNAL_ERROR, 500),
    ])
    def test_non_llm_statuses(self, code, expected_status):
        assert not code.is_llm_failure
        assert HTTP_STATUS_BY_CODE[code] == expected_status

    def test_catalog_unavailable_wire_code(self):
        assert ErrorCode.CATALOG_UNAVAILABLE.value == "DATA_NOT_LOADED"


class TestServiceError:

    def test_carries_code_message_and_details(self):
        error = ServiceError(ErrorCode.LLM_RATE_LIMIT, "LLM rate limit exceeded", {"attempts": 3})

        assert error.code is ErrorCode.LLM_RATE_LIMIT
        assert error.message == "LLM rate limit exceeded"
        assert error.details == {"attempts": 3}
        assert error.http_status == 503
        assert str(error) == "LLM rate limit exceeded"

    def test_details_default_to_none(self):
        assert ServiceError(ErrorCode.NOT_FOUND, "missing").details is None
