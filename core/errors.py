"""Error taxonomy shared by the HTTP layer, the STT gateways and the QC pipeline."""


class ServiceError(Exception):
    """Base error with an error code for categorization and an HTTP status."""

    default_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code or self.default_code

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error_code, "message": str(self)}


class InputError(ServiceError):
    """Missing, empty or malformed client input."""

    default_code = "INVALID_INPUT"
    status_code = 400


class ConfigError(ServiceError):
    """Missing credential or invalid service configuration."""

    default_code = "CONFIGURATION_ERROR"
    status_code = 500


class TranscriptionServiceError(ServiceError):
    """Failure of the external speech-to-text service."""

    default_code = "STT_FAILED"
    status_code = 502


class AudioDecodeError(ServiceError):
    """Audio that cannot be opened or decoded."""

    default_code = "AUDIO_DECODE_ERROR"
    status_code = 422


class NotFoundError(ServiceError):
    """Unknown transcript filename."""

    default_code = "FILE_NOT_FOUND"
    status_code = 404
