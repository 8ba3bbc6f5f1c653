from fastapi import status


class ServiceError(Exception):
    """Base exception for service errors with built-in HTTP status mapping"""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "service_error"


class ConfigurationError(ServiceError):
    """Dify credential missing; raised before any network call"""

    http_status: int = status.HTTP_503_SERVICE_UNAVAILABLE
    error_type: str = "configuration_error"


class ReadError(ServiceError):
    """Local image resource could not be read"""

    http_status: int = status.HTTP_400_BAD_REQUEST
    error_type: str = "read_error"


class RemoteServiceError(ServiceError):
    """Non-successful response from the Dify API"""

    http_status: int = status.HTTP_502_BAD_GATEWAY
    error_type: str = "remote_service_error"

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadError(RemoteServiceError):
    """File upload endpoint failure"""

    error_type: str = "upload_error"


class WorkflowError(RemoteServiceError):
    """Workflow-run endpoint failure"""

    error_type: str = "workflow_error"


class UnexpectedError(ServiceError):
    """Any other failure inside the scoring pipeline"""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "unexpected_error"
