"""
Error taxonomy for the data pipelines.

Stage-local errors are caught by the services and turned into "try the next
source"; only CredentialMissing is expected to reach a route as a failure.
"""
from typing import Optional


class KisanError(Exception):
    kind = "internal"


class FetchError(KisanError):
    kind = "network_error"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FetchTimeout(FetchError):
    kind = "timeout"


class HttpStatusError(FetchError):
    kind = "http_error"

    def __init__(self, status: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status}", url=url)
        self.status = status


class ParseError(KisanError):
    kind = "parse_error"


class ValidationRejected(KisanError):
    kind = "validation_rejected"


class CredentialMissing(KisanError):
    kind = "credential_missing"


class NoDataFound(KisanError):
    kind = "no_data_found"
