from fastapi import HTTPException

from imei_scanner.core.config import get_settings


def ensure_vision_ai_enabled() -> None:
    settings = get_settings()
    if not settings.enable_vision_ai:
        raise HTTPException(status_code=404, detail="Not found")
