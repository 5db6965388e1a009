"""
Exception classes for BOS Python SDK
"""

from typing import Optional, Dict, Any


class BosSDKError(Exception):
    """Base exception for all BOS SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ValidationError(BosSDKError):
    """Exception raised for invalid client configuration or arguments"""
    pass


class ConfigError(BosSDKError):
    """Exception raised when configuration cannot be loaded"""
    pass


class ServerCommunicationError(BosSDKError):
    """Exception raised for transport failures and unparseable error responses"""
    
    def __init__(self, message: str, error_code: str = "SERVER_ERROR", 
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class BosError(ServerCommunicationError):
    """
    Structured error returned by the BOS API.
    
    Raised for non-2xx responses whose JSON body carries ``code`` and
    ``message``. ``bos_code`` holds the service error code (e.g. ``NoSuchKey``)
    and ``request_id`` the server request id when one was returned.
    """
    
    def __init__(self, message: str, bos_code: str, http_status: int = 0,
                 request_id: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "BOS_ERROR", http_status, details)
        self.message = message
        self.bos_code = bos_code
        self.request_id = request_id
    
    def __str__(self) -> str:
        text = f"{self.message} (code: {self.bos_code}, status: {self.http_status}"
        if self.request_id:
            text += f", request id: {self.request_id}"
        return text + ")"
