"""Unit tests for analyze request validation."""

import base64

import pytest

from meal_vision.core.exceptions import ImageTooLargeError, InvalidRequestError
from meal_vision.models.nutrition import ImageMimeType
from meal_vision.services.request_validator import (
    MAX_IMAGE_SIZE,
    decoded_size,
    parse_analyze_request,
    strip_data_url_prefix,
    validate_image_size,
)


def b64_of_size(n: int) -> str:
    return base64.b64encode(b"\x00" * n).decode("ascii")


class TestParseAnalyzeRequest:
    """Tests for structural validation."""

    def test_valid_request(self, png_base64):
        request = parse_analyze_request({"image": png_base64, "mimeType": "image/png"})

        assert request.image == png_base64
        assert request.mime_type == ImageMimeType.PNG
        assert request.context is None

    def test_context_is_kept(self, png_base64):
        request = parse_analyze_request(
            {"image": png_base64, "mimeType": "image/jpeg", "context": "large portion"}
        )

        assert request.context == "large portion"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"mimeType": "image/png"},
            {"image": "", "mimeType": "image/png"},
            {"image": "   ", "mimeType": "image/png"},
            {"image": "data:image/png;base64,", "mimeType": "image/png"},
            {"image": "abc=", "mimeType": "text/plain"},
            {"image": "abc=", "mimeType": "image/gif"},
            {"image": "abc="},
            {"image": 123, "mimeType": "image/png"},
            {"image": "abc=", "mimeType": "image/png", "context": "x" * 501},
            {"image": "abc=", "mimeType": "image/png", "context": 42},
            [],
            "image",
            None,
        ],
    )
    def test_rejects_malformed(self, body):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_analyze_request(body)

        assert exc_info.value.code == "INVALID_REQUEST"
        assert exc_info.value.status_code == 400

    def test_context_at_limit_is_accepted(self):
        request = parse_analyze_request(
            {"image": "abc=", "mimeType": "image/webp", "context": "x" * 500}
        )

        assert len(request.context) == 500


class TestDecodedSize:
    """Tests for base64 size accounting."""

    @pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 5, 10, 1023, 4096])
    def test_matches_real_decoded_length(self, n):
        assert decoded_size(b64_of_size(n)) == n

    def test_strips_data_url_prefix(self):
        payload = b64_of_size(100)

        assert decoded_size(f"data:image/png;base64,{payload}") == 100

    def test_strip_data_url_prefix_leaves_plain_base64(self):
        assert strip_data_url_prefix("  QUJD  ") == "QUJD"
        assert strip_data_url_prefix("data:image/jpeg;base64,QUJD") == "QUJD"


class TestValidateImageSize:
    """Tests for the 4 MiB limit."""

    def test_at_limit_is_accepted(self):
        assert validate_image_size(b64_of_size(MAX_IMAGE_SIZE)) == MAX_IMAGE_SIZE

    @pytest.mark.parametrize("n", [1, 1000, 3 * 1024 * 1024, MAX_IMAGE_SIZE - 1])
    def test_no_false_positives(self, n):
        assert validate_image_size(b64_of_size(n)) == n

    def test_one_byte_over_is_rejected(self):
        with pytest.raises(ImageTooLargeError) as exc_info:
            validate_image_size(b64_of_size(MAX_IMAGE_SIZE + 1))

        assert exc_info.value.code == "IMAGE_TOO_LARGE"
        assert exc_info.value.size_bytes == MAX_IMAGE_SIZE + 1

    def test_message_reports_size(self):
        five_mib = 5 * 1024 * 1024

        with pytest.raises(ImageTooLargeError) as exc_info:
            validate_image_size("A" * (five_mib // 3 * 4 + 4))

        size = exc_info.value.size_bytes
        assert f"({size / 1024 / 1024:.2f}MB)" in exc_info.value.message
        assert "maximum allowed size of 4MB" in exc_info.value.message

    def test_custom_limit(self):
        with pytest.raises(ImageTooLargeError):
            validate_image_size(b64_of_size(11), max_bytes=10)
