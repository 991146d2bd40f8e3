"""
Conversion API endpoints.

Converts uploaded collection exports, detects dialects from a header row
and lists supported dialects. Request-level failures (empty file, unknown
dialect) are raised as KnownError and rendered by the application's error
handler; per-row failures are part of a successful response.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from omenpath.models.failure import ApiResponse
from omenpath.models.outcome import ConversionOutcome
from omenpath.services.converter import AUTO_DETECT, ConversionContext, Converter

router = APIRouter(tags=["convert"])


def get_context(request: Request) -> ConversionContext:
    """The process-wide ConversionContext created at startup."""
    context: ConversionContext = request.app.state.context
    return context


class ConvertRequest(BaseModel):
    """Request model for converting a collection export."""

    content: str = Field(
        ...,
        description="Raw file contents (CSV or MTGO .dek)",
        examples=["Count,Name,Edition\n4,Lightning Bolt,lea"],
    )
    dialect: str = Field(
        default=AUTO_DETECT,
        description='Dialect id from GET /formats, or "auto" to detect it',
    )


class OutcomeResponse(BaseModel):
    """One converted row."""

    output_row: int
    source_rows: list[int]
    success: bool
    count: int
    name: str
    confidence: str
    method: str
    scryfall_id: str | None = None
    row: dict[str, str]
    error: str | None = None
    failure_kind: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: ConversionOutcome) -> "OutcomeResponse":
        return cls(
            output_row=outcome.output_row,
            source_rows=outcome.source_rows,
            success=outcome.success,
            count=outcome.count,
            name=outcome.name,
            confidence=outcome.confidence.value,
            method=outcome.method.value,
            scryfall_id=outcome.card.id if outcome.card else None,
            row=outcome.row,
            error=outcome.error,
            failure_kind=outcome.failure_kind.value if outcome.failure_kind else None,
            warnings=outcome.warnings,
        )


class ConvertResponse(BaseModel):
    """Response model for a finished conversion."""

    dialect: str
    detection_confidence: float | None = None
    summary: dict[str, int]
    warnings: list[str] = Field(default_factory=list)
    outcomes: list[OutcomeResponse]
    csv: str


class DetectRequest(BaseModel):
    """Request model for dialect detection."""

    headers: list[str] = Field(
        ...,
        examples=[["Count", "Name", "Edition", "Condition", "Language", "Foil"]],
    )


class DialectScoreResponse(BaseModel):
    dialect: str
    score: float


class DetectResponse(BaseModel):
    """Detection outcome plus the full ranking for debugging near-misses."""

    detected: bool
    dialect: str | None = None
    name: str | None = None
    confidence: float | None = None
    scores: list[DialectScoreResponse]


class FormatResponse(BaseModel):
    id: str
    name: str
    description: str
    headers: list[str]
    detectable: bool


@router.post("/convert", response_model=ApiResponse[ConvertResponse])
async def convert(
    request: ConvertRequest,
    context: Annotated[ConversionContext, Depends(get_context)],
) -> ApiResponse[ConvertResponse]:
    """
    Convert a collection export to Moxfield CSV.

    Raises:
        KnownError: Empty or unreadable file, or unknown dialect id
    """
    result = await Converter(context).convert(request.content, request.dialect)
    return ApiResponse.success(
        ConvertResponse(
            dialect=result.dialect_id,
            detection_confidence=result.detection.confidence if result.detection else None,
            summary=result.summary(),
            warnings=result.warnings,
            outcomes=[OutcomeResponse.from_outcome(outcome) for outcome in result.outcomes],
            csv=result.to_csv(),
        )
    )


@router.post("/detect", response_model=ApiResponse[DetectResponse])
async def detect(
    request: DetectRequest,
    context: Annotated[ConversionContext, Depends(get_context)],
) -> ApiResponse[DetectResponse]:
    """Detect the dialect that produced a header row."""
    detector = context.detector
    detection = detector.detect(request.headers)
    scores = [
        DialectScoreResponse(dialect=score.dialect_id, score=score.score)
        for score in detector.rank(request.headers)
    ]
    if detection is None:
        return ApiResponse.success(DetectResponse(detected=False, scores=scores))
    return ApiResponse.success(
        DetectResponse(
            detected=True,
            dialect=detection.dialect.id,
            name=detection.dialect.name,
            confidence=detection.confidence,
            scores=scores,
        )
    )


@router.get("/formats", response_model=list[FormatResponse])
async def list_formats(
    context: Annotated[ConversionContext, Depends(get_context)],
) -> list[FormatResponse]:
    """List every supported dialect."""
    return [
        FormatResponse(
            id=dialect.id,
            name=dialect.name,
            description=dialect.description,
            headers=list(dialect.expected_headers),
            detectable=dialect.detectable,
        )
        for dialect in context.registry
    ]
