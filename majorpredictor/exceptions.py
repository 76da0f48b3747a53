"""
Custom exceptions for Major Predictor.

Usage:
    from majorpredictor.exceptions import ConfigurationError, ProviderError

    try:
        result = await service.predict(request, settings)
    except ConfigurationError as e:
        print(f"Fix your settings: {e}")
    except ProviderError as e:
        print(f"Provider failed: {e}")
"""

from typing import Optional


class MajorPredictorError(Exception):
    """
    Base exception for all Major Predictor errors.

    All custom exceptions inherit from this, allowing:
        except MajorPredictorError:
            # Catch any system error
    """
    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(MajorPredictorError):
    """
    Configuration or setup error.

    Raised when:
    - Required API key missing
    - Unknown setting key
    - Invalid setting value
    """

    def __init__(self, setting: str, message: str):
        self.setting = setting
        super().__init__(f"Configuration error ({setting}): {message}")


# =============================================================================
# PROVIDER ERRORS
# =============================================================================

class ProviderError(MajorPredictorError):
    """
    Error from an external provider (completion or search API).

    The message carries the provider's own error text when it sent one.
    """

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        self.provider_message = message
        msg = f"{provider} error: {message}"
        if status_code:
            msg += f" (status: {status_code})"
        super().__init__(msg)


class ProviderTimeoutError(ProviderError):
    """Completion call did not answer within the configured timeout."""

    def __init__(self, provider: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(provider, f"request timed out after {timeout_seconds:g}s")


class EmptyCompletionError(MajorPredictorError):
    """Completion provider answered but the message content was empty."""

    def __init__(self, provider: str = "OpenRouter"):
        self.provider = provider
        super().__init__(f"Empty response from {provider}")


class SearchError(MajorPredictorError):
    """
    Search provider failure.

    Never escapes the prediction service: search context is optional.
    """

    def __init__(self, query: str, message: str):
        self.query = query
        super().__init__(f"Search failed for '{query}': {message}")


# =============================================================================
# PAGE ERRORS
# =============================================================================

class PageLoadError(MajorPredictorError):
    """Bracket page could not be fetched or read."""

    def __init__(self, source: str, message: str = None, original_error: Exception = None):
        self.source = source
        self.original_error = original_error
        msg = f"Error loading page {source}"
        if message:
            msg += f": {message}"
        if original_error:
            msg += f" (caused by: {type(original_error).__name__}: {original_error})"
        super().__init__(msg)
