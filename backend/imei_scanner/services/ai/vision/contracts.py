"""Vision scan contracts: ScanResult shape and analysis outcome variants.

``ScanResult`` and the prompt in ``prompt.py`` are a matched pair: any
change to the expected schema changes both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

SOFT_PARSE_MESSAGE = "Could not understand the AI response. Please try again with a clearer image."


class DeviceRecord(BaseModel):
    """One detected device: free-text position + IMEI as reported."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    position: str
    imei: str


class ScanResult(BaseModel):
    """Structured output expected from the vision model.

    ``device_count`` is the model's own count and is not reconciled with
    ``devices``.
    """

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    description: str = ""
    device_count: Annotated[int, Field(alias="deviceCount", ge=0, strict=True)]
    devices: list[DeviceRecord]
    soft_error: Optional[str] = Field(default=None, alias="error")

    def without_devices(self) -> ScanResult:
        """Copy with the soft-error invariant applied (count 0, no devices)."""
        return self.model_copy(update={"device_count": 0, "devices": []})

    def count_mismatch(self) -> bool:
        return self.device_count != len(self.devices)


# ------------------------------------------------------------------
# Outcomes
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ScanSuccess:
    """Validated result.  ``result.soft_error`` set means the model judged
    the image unusable (soft content error)."""

    result: ScanResult
    warnings: tuple[str, ...] = ()
    kind: Literal["success"] = field(default="success", init=False)

    @property
    def devices(self) -> list[DeviceRecord]:
        return list(self.result.devices)

    @property
    def is_soft_content_error(self) -> bool:
        return bool(self.result.soft_error)

    def to_scan_result(self) -> ScanResult:
        return self.result


@dataclass(frozen=True)
class ScanSoftError:
    """The call succeeded but its payload did not fit the schema."""

    message: str = SOFT_PARSE_MESSAGE
    reason: str = ""
    kind: Literal["soft_error"] = field(default="soft_error", init=False)

    @property
    def devices(self) -> list[DeviceRecord]:
        return []

    def to_scan_result(self) -> ScanResult:
        return ScanResult(description="", device_count=0, devices=[], soft_error=self.message)


@dataclass(frozen=True)
class ScanHardError:
    """Encoding or inference failed; no result payload exists."""

    stage: Literal["encoding", "inference"]
    message: str
    kind: Literal["hard_error"] = field(default="hard_error", init=False)

    @property
    def devices(self) -> list[DeviceRecord]:
        return []

    @property
    def display_message(self) -> str:
        if self.stage == "inference":
            return f"API Error: {self.message}"
        return self.message

    def to_scan_result(self) -> ScanResult:
        return ScanResult(description="", device_count=0, devices=[], soft_error=self.display_message)


AnalysisOutcome = Union[ScanSuccess, ScanSoftError, ScanHardError]
