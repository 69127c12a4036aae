"""Turns provider failures into the messages shown to the user.

The rules are heuristics over error text: the first rule that matches wins and
anything unrecognised falls through to a generic message carrying the raw text.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx
import requests

from .errors import ConfigurationError, GenerationBusyError, GenerationTimeout, TransportError
from .model import Provider
from .providers import NATIVE_PROVIDER, spec_for
from .utils import find_embedded_object

UNKNOWN_ERROR = "An unknown error occurred during generation."

_INVALID_KEY_MARKERS = ("incorrect api key", "invalid api key", "api key not valid", "api_key_invalid")


def classify_error(error: BaseException | str, provider: Provider | str) -> str:
    provider = Provider(provider)
    name = spec_for(provider).display_name
    fallback_name = spec_for(NATIVE_PROVIDER).display_name

    if isinstance(error, (ConfigurationError, GenerationBusyError)):
        return str(error)
    if isinstance(error, GenerationTimeout):
        return (
            f"Lỗi kết nối đến {name}: Yêu cầu đã quá thời gian chờ mà không nhận được phản hồi. "
            "Vui lòng thử lại sau ít phút."
        )

    message = _message_of(error)

    if _is_network_failure(error, message):
        return (
            f"Lỗi kết nối đến {name}: Yêu cầu có thể đã bị chặn bởi chính sách bảo mật (CORS) "
            "hoặc do sự cố mạng. Đây là một hạn chế phổ biến khi gọi API trực tiếp. "
            f"Vui lòng thử lại, hoặc sử dụng {fallback_name} để đảm bảo ứng dụng hoạt động ổn định."
        )

    if provider is NATIVE_PROVIDER:
        classified = _classify_native_payload(message)
        if classified:
            return classified

    lowered = message.lower()
    if any(marker in lowered for marker in _INVALID_KEY_MARKERS):
        return f"Lỗi API {name}: API key không hợp lệ. Vui lòng kiểm tra lại trong tab Profile."
    if "rate limit" in lowered:
        return (
            f"Lỗi API {name}: Bạn đã vượt quá giới hạn sử dụng. "
            "Vui lòng thử lại sau hoặc kiểm tra gói cước của bạn."
        )
    if "insufficient" in lowered:
        return (
            f"Lỗi API {name}: Số dư tài khoản không đủ. "
            f"Vui lòng kiểm tra và nạp thêm tiền vào tài khoản {name} của bạn."
        )

    return f"Không thể tạo kịch bản. Vui lòng kiểm tra API key và prompt. Chi tiết lỗi: {message}"


def _message_of(error: BaseException | str) -> str:
    if isinstance(error, str):
        return error or UNKNOWN_ERROR
    return str(error) or UNKNOWN_ERROR


def _is_network_failure(error: BaseException | str, message: str) -> bool:
    if isinstance(error, (TransportError, requests.ConnectionError, httpx.TransportError)):
        return True
    return "failed to fetch" in message.lower()


def _classify_native_payload(message: str) -> str | None:
    payload = find_embedded_object(message)
    if payload is None:
        return None
    nested: Any = payload.get("error", payload)
    if not isinstance(nested, Mapping):
        return None

    if nested.get("status") == "UNAVAILABLE" or str(nested.get("code")) == "503":
        return "Lỗi từ Google AI: Model đang bị quá tải. Vui lòng thử lại sau ít phút."
    nested_message = nested.get("message")
    if not nested_message:
        return None
    nested_message = str(nested_message)
    if "API key not valid" in nested_message or "API_KEY_INVALID" in nested_message:
        return "Lỗi API Google: API key không hợp lệ. Vui lòng kiểm tra lại trong tab Profile."
    return f"Lỗi từ Google AI: {nested_message}"
