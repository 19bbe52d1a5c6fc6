"""
Custom exceptions for chromium-fetcher.

This module defines domain-specific exceptions that provide better error
categorization and more informative error messages for users and developers.
"""


class ChromiumFetcherError(Exception):
    """
    Base exception for all chromium-fetcher errors.

    All custom exceptions should inherit from this class so callers can
    catch every application-specific error in one place.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ChromiumFetcherError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Invalid option values (unknown OS, channel, on-fail policy)
    - Configuration file parsing errors
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or parsed."""

    pass


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(ChromiumFetcherError):
    """
    Exception raised when validation fails.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidVersionInput(ValidationError):
    """
    Exception raised when a version is constructed from a value of the wrong shape.

    A missing or non-numeric component is not an error (it parses to 0); this is
    only raised when the input is not a string, a mapping or a number at all.
    """

    pass


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(ChromiumFetcherError):
    """Base exception for negative-hit store errors."""

    pass


class UnsupportedCombination(StoreError):
    """
    Exception raised when the store is accessed with an invalid OS/arch pair.

    Attributes:
        os: The requested operating system.
        arch: The requested architecture.
    """

    def __init__(self, os: str, arch: str) -> None:
        super().__init__(f"Unsupported os/arch combination: {os}/{arch}")
        self.os = os
        self.arch = arch


class NoLocalStoreError(StoreError):
    """Exception raised when an export is requested but no store file exists."""

    def __init__(self, path: str | None = None) -> None:
        super().__init__("No localstore.json file found", details=path)
        self.path = path


class StoreImportError(StoreError):
    """
    Exception raised when a store cannot be imported.

    Attributes:
        source: The URL or file path the import was attempted from.
    """

    def __init__(self, message: str, source: str, details: str | None = None) -> None:
        super().__init__(message, details)
        self.source = source


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(ChromiumFetcherError):
    """
    Base exception for download-related errors.

    Attributes:
        url: The URL that was being downloaded when the error occurred.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class NoBinaryForSingleVersion(DownloadError):
    """
    Exception raised when a single-version run finds no binary.

    This is distinct from network failures: the requested build simply does not
    exist for the configured OS and architecture.

    Attributes:
        version: The requested version string.
    """

    def __init__(self, version: str) -> None:
        super().__init__(f"No binary available for version {version}")
        self.version = version


# =============================================================================
# Archive Errors
# =============================================================================


class ArchiveError(ChromiumFetcherError):
    """
    Exception raised for archive-related errors.

    Attributes:
        archive_path: Path to the problematic archive.
    """

    def __init__(
        self,
        message: str,
        archive_path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path


class ExtractionError(ArchiveError):
    """Exception raised when archive extraction fails."""

    pass
