import io

import pytest
from PIL import Image

from imei_scanner.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # Tests patch env vars; never leak a cached Settings instance across tests.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_image_bytes(fmt: str = "JPEG", size: tuple[int, int] = (8, 8)) -> bytes:
    """Tiny solid-colour image encoded with Pillow."""
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()
