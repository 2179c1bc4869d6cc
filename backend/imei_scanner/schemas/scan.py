from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from imei_scanner.services.ai.vision.contracts import AnalysisOutcome, DeviceRecord, ScanHardError, ScanSuccess


class ScanDevice(BaseModel):
    position: str
    imei: str


class ScanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    outcome: Literal["success", "soft_error", "hard_error"]
    description: str = ""
    device_count: int = Field(default=0, alias="deviceCount")
    devices: List[ScanDevice] = Field(default_factory=list)
    error: Optional[str] = None
    error_stage: Optional[Literal["encoding", "inference"]] = Field(default=None, alias="errorStage")
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: AnalysisOutcome) -> "ScanResponse":
        result = outcome.to_scan_result()
        return cls(
            outcome=outcome.kind,
            description=result.description,
            device_count=result.device_count,
            devices=[ScanDevice(position=d.position, imei=d.imei) for d in result.devices],
            error=result.soft_error,
            error_stage=outcome.stage if isinstance(outcome, ScanHardError) else None,
            warnings=list(outcome.warnings) if isinstance(outcome, ScanSuccess) else [],
        )


class ExportRequest(BaseModel):
    devices: List[DeviceRecord] = Field(default_factory=list)
