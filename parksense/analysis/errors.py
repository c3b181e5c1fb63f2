"""Errors raised by the analysis pipeline.

Configuration errors send the session back to the start so the user can fix
setup. Provider errors keep the captured image so the analysis can be retried.
Validation problems never raise; they become fallback results.
"""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for analysis failures."""

    pass


class ConfigurationError(AnalysisError):
    """Analysis cannot run with the current configuration."""

    pass


class CredentialError(ConfigurationError):
    """The provider rejected the configured credential."""

    pass


class ProviderError(AnalysisError):
    """Transport failure or malformed response from the provider."""

    pass
