"""Analysis pipeline: request building, provider transport, validation and mocks."""

from parksense.analysis.errors import (
    AnalysisError,
    ConfigurationError,
    CredentialError,
    ProviderError,
)
from parksense.analysis.mock import MOCK_CATALOG, MockOracle, MockStrategy
from parksense.analysis.provider import VisionProvider, extract_chat_content
from parksense.analysis.request import AnalysisRequestBuilder, ProviderRequest, format_timestamp
from parksense.analysis.service import ParkingSignAnalyzer
from parksense.analysis.validator import ResponseValidator, ValidationOutcome, strip_code_fences

__all__ = [
    "MOCK_CATALOG",
    "AnalysisError",
    "AnalysisRequestBuilder",
    "ConfigurationError",
    "CredentialError",
    "MockOracle",
    "MockStrategy",
    "ParkingSignAnalyzer",
    "ProviderError",
    "ProviderRequest",
    "ResponseValidator",
    "ValidationOutcome",
    "VisionProvider",
    "extract_chat_content",
    "format_timestamp",
    "strip_code_fences",
]
