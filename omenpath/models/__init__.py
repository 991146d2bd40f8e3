from omenpath.models.card import CanonicalCardRecord, SetEntry
from omenpath.models.confidence import METHOD_CEILINGS, Confidence, IdentificationMethod
from omenpath.models.failure import (
    ApiResponse,
    ConversionCancelled,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
)
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.record import FINISHES, ParsedRecord

__all__ = [
    "ApiResponse",
    "CanonicalCardRecord",
    "Confidence",
    "ConversionCancelled",
    "ConversionOutcome",
    "FINISHES",
    "FailureDetail",
    "FailureKind",
    "IdentificationMethod",
    "KnownError",
    "METHOD_CEILINGS",
    "OutcomeType",
    "ParsedRecord",
    "SetEntry",
]
