import base64

import pytest

from conftest import make_image_bytes
from imei_scanner.core.image_processing import (
    EncodingError,
    ScanRequest,
    encode_image,
    encode_request,
    normalize_media_type,
    sniff_media_type,
)


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("image/jpeg", "image/jpeg"),
        ("image/png", "image/png"),
        ("IMAGE/JPEG", "image/jpeg"),
        ("image/jpg", "image/jpeg"),
        ("image/png; charset=binary", "image/png"),
    ],
)
def test_supported_types_are_encoded(content_type, expected):
    content = make_image_bytes("PNG" if "png" in content_type.lower() else "JPEG")
    encoded = encode_image(content, content_type)
    assert encoded.mime_type == expected
    assert base64.b64decode(encoded.data) == content


@pytest.mark.parametrize("content_type", ["image/gif", "image/webp", "application/pdf", "text/plain"])
def test_unsupported_types_rejected(content_type):
    with pytest.raises(EncodingError):
        encode_image(b"not really an image", content_type)


def test_empty_content_rejected():
    with pytest.raises(EncodingError, match="No image provided"):
        encode_image(b"", "image/jpeg")


def test_missing_type_is_sniffed():
    png = make_image_bytes("PNG")
    assert encode_image(png, None).mime_type == "image/png"
    jpeg = make_image_bytes("JPEG")
    assert encode_image(jpeg, "application/octet-stream").mime_type == "image/jpeg"


def test_sniffed_unsupported_format_rejected():
    gif = make_image_bytes("GIF")
    assert sniff_media_type(gif) == "image/gif"
    with pytest.raises(EncodingError, match="image/gif"):
        encode_image(gif, None)


def test_undetectable_bytes_rejected():
    assert sniff_media_type(b"garbage") == ""
    with pytest.raises(EncodingError):
        encode_image(b"garbage", "")


def test_payload_passed_through_unchanged():
    content = make_image_bytes("JPEG", size=(64, 48))
    encoded = encode_request(ScanRequest(content=content, content_type="image/jpeg", filename="box.jpg"))
    assert encoded.as_data_url().startswith("data:image/jpeg;base64,")
    assert base64.b64decode(encoded.data) == content


def test_normalize_media_type_empty():
    assert normalize_media_type(None) == ""
    assert normalize_media_type("") == ""
