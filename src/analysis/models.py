# src/analysis/models.py — v1
"""Analysis domain models: defect inputs and validated model answers.

Answer schemas are strict on the fields that drive repair decisions
(booleans, enumerations, scores) and lenient on free text, which is
defaulted rather than rejected.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

Severity = Literal["low", "medium", "high", "critical"]
Confidence = Literal["high", "medium", "low"]
MatchSeverity = Literal["low", "medium", "high", "critical", "unknown"]

_MATCH_SEVERITIES = {"low", "medium", "high", "critical", "unknown"}

# Most likely defect types kept from a photo identification answer.
MAX_PHOTO_MATCHES = 3


def _free_text(value: Any, default: str | None) -> str | None:
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


class DefectEntry(BaseModel):
    """Field measurement of one pipeline defect, as submitted by a technician."""

    model_config = ConfigDict(populate_by_name=True)

    client_name: str = Field(alias="clientName", min_length=1)
    defect_type: str = Field(alias="defectType", min_length=1)
    pipe_od: float = Field(alias="pipeOD", gt=0)
    pipe_nwt: float = Field(alias="pipeNWT", gt=0)
    length: float
    width: float
    depth: float
    notes: str | None = None

    @property
    def is_hardspot(self) -> bool:
        return "hardspot" in self.defect_type.lower()


class DefectAnalysisResult(BaseModel):
    """Validated repair assessment for a defect."""

    model_config = ConfigDict(populate_by_name=True)

    repair_required: StrictBool = Field(alias="repairRequired")
    repair_type: str | None = Field(default=None, alias="repairType")
    severity: Severity
    recommendations: str = "No recommendations provided"
    procedure_reference: str = Field(
        default="No specific reference provided", alias="procedureReference"
    )
    confidence: Confidence

    @field_validator("repair_type", mode="before")
    @classmethod
    def default_repair_type(cls, v: Any) -> str | None:
        return _free_text(v, None)

    @field_validator("recommendations", mode="before")
    @classmethod
    def default_recommendations(cls, v: Any) -> str:
        return _free_text(v, "No recommendations provided")

    @field_validator("procedure_reference", mode="before")
    @classmethod
    def default_procedure_reference(cls, v: Any) -> str:
        return _free_text(v, "No specific reference provided")


class DefectMatch(BaseModel):
    """One candidate defect type identified from a photo."""

    model_config = ConfigDict(populate_by_name=True)

    defect_type: StrictStr = Field(alias="defectType", min_length=1)
    confidence: Confidence
    confidence_score: float = Field(alias="confidenceScore", ge=0, le=100, strict=True)
    visual_indicators: list[str] = Field(alias="visualIndicators")
    reasoning: StrictStr = Field(min_length=1)
    severity: MatchSeverity = "unknown"

    @field_validator("visual_indicators", mode="before")
    @classmethod
    def stringify_indicators(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [item if isinstance(item, str) else str(item) for item in v]
        return v

    @field_validator("severity", mode="before")
    @classmethod
    def default_severity(cls, v: Any) -> str:
        return v if v in _MATCH_SEVERITIES else "unknown"


class PhotoIdentificationResult(BaseModel):
    """Validated top defect-type candidates for a photo."""

    matches: list[DefectMatch] = Field(min_length=1)

    @field_validator("matches", mode="before")
    @classmethod
    def keep_top_matches(cls, v: Any) -> Any:
        if isinstance(v, list):
            return v[:MAX_PHOTO_MATCHES]
        return v
