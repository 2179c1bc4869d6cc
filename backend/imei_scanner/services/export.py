"""CSV projection of scanned devices for download."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from imei_scanner.services.ai.vision.contracts import DeviceRecord

CSV_HEADER = "Position,IMEI"


def devices_to_csv(devices: Iterable[DeviceRecord]) -> str:
    """Render *devices* as ``Position,IMEI`` rows joined by ``\\n``.

    Values are written as-is, without quoting: a comma inside a position
    shifts columns.  IMEIs are numeric so they are safe.
    """
    lines = [CSV_HEADER]
    lines.extend(f"{device.position},{device.imei}" for device in devices)
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"imei-scan-{today.isoformat()}.csv"
