from __future__ import annotations

import requests

from aiscriptwriter.script_engine.classifier import classify_error
from aiscriptwriter.script_engine.errors import (
    ConfigurationError,
    GenerationTimeout,
    ProviderError,
    TransportError,
)


def test_network_failure_mentions_cors_provider_and_fallback():
    message = classify_error(TransportError("Failed to fetch https://api.openai.com"), "openai")
    assert "CORS" in message
    assert "OpenAI" in message
    assert "Google Gemini" in message


def test_requests_connection_error_counts_as_network_failure():
    message = classify_error(requests.ConnectionError("connection refused"), "grok")
    assert "CORS" in message
    assert "Grok" in message


def test_plain_failed_to_fetch_text_is_network_failure():
    assert "CORS" in classify_error(Exception("TypeError: Failed to fetch"), "deepseek")


def test_google_invalid_key_without_payload():
    message = classify_error(Exception("API key not valid"), "google")
    assert "API key không hợp lệ" in message
    assert "Profile" in message


def test_google_overloaded_payload():
    raw = '503 UNAVAILABLE. {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}}'
    message = classify_error(ProviderError(raw, status_code=503), "google")
    assert "quá tải" in message


def test_google_python_repr_payload_is_repaired():
    raw = (
        "400 INVALID_ARGUMENT. {'error': {'code': 400, 'message': "
        "'API key not valid. Please pass a valid API key.', 'status': 'INVALID_ARGUMENT'}}"
    )
    message = classify_error(ProviderError(raw, status_code=400), "google")
    assert message.startswith("Lỗi API Google: API key không hợp lệ")


def test_google_other_nested_message_is_surfaced():
    raw = '{"error": {"code": 400, "message": "Request contains an invalid argument."}}'
    message = classify_error(ProviderError(raw), "google")
    assert message == "Lỗi từ Google AI: Request contains an invalid argument."


def test_embedded_payload_ignored_for_openai_family():
    raw = '{"error": {"status": "UNAVAILABLE", "code": 503}}'
    message = classify_error(ProviderError(raw), "openai")
    assert "quá tải" not in message
    assert raw in message


def test_openai_incorrect_key():
    message = classify_error(ProviderError("Incorrect API key provided: sk-abc"), "openai")
    assert message.startswith("Lỗi API OpenAI: API key không hợp lệ")


def test_rate_limit_is_case_insensitive():
    message = classify_error(ProviderError("Rate limit reached for gpt-4o"), "openai")
    assert "vượt quá giới hạn" in message


def test_insufficient_balance_names_provider():
    message = classify_error(ProviderError("Insufficient Balance"), "deepseek")
    assert "Số dư tài khoản không đủ" in message
    assert "DeepSeek" in message


def test_unmatched_error_falls_back_with_raw_text():
    message = classify_error(ValueError("something odd"), "grok")
    assert message.startswith("Không thể tạo kịch bản")
    assert "something odd" in message


def test_configuration_error_passes_through():
    error = ConfigurationError("Please enter a content idea.")
    assert classify_error(error, "openai") == "Please enter a content idea."


def test_timeout_has_its_own_message():
    message = classify_error(GenerationTimeout("slow"), "openai")
    assert "quá thời gian chờ" in message
    assert "CORS" not in message
