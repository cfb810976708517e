"""
User-facing messages for network and backend failures.

Each handler logs the failure into the error log and returns the message a
screen should display.
"""

from typing import Any, Dict, Optional

NETWORK_ERROR_MESSAGES: Dict[str, str] = {
    "NETWORK_ERROR": "Network connection failed. Please check your internet connection.",
    "TIMEOUT": "Request timed out. Please try again.",
    "SERVER_ERROR": "Server error. Please try again later.",
    "OFFLINE": "You appear to be offline. Please check your connection.",
}

BACKEND_ERROR_MESSAGES: Dict[str, str] = {
    "auth/user-not-found": "No account found with this email.",
    "auth/wrong-password": "Incorrect password.",
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/weak-password": "Password should be at least 6 characters.",
    "auth/invalid-email": "Please enter a valid email address.",
    "auth/invalid-credential": "Invalid email or password.",
    "auth/too-many-requests": "Too many attempts. Please try again later.",
    "auth/network-request-failed": "Network error. Please check your connection.",
    "firestore/permission-denied": "Permission denied. You may not have access to this data.",
    "firestore/unavailable": "Firestore service is currently unavailable.",
    "firestore/deadline-exceeded": "Request timed out. Please try again.",
}


def _error_code(error: Any) -> Optional[str]:
    if isinstance(error, dict):
        code = error.get("code")
    else:
        code = getattr(error, "code", None)
    return str(code) if code else None


def _error_message(error: Any) -> Optional[str]:
    if isinstance(error, dict):
        message = error.get("message")
    elif isinstance(error, BaseException):
        message = str(error)
    else:
        message = getattr(error, "message", None)
    return str(message) if message else None


def handle_network_error(error_log, error: Any, context: str, is_online: Optional[bool] = None) -> str:
    """
    Log a network failure and translate it for the user.

    Args:
        error_log: ErrorLog receiving the failure
        error: The failure
        context: Where it occurred
        is_online: Connectivity at the time of failure, when known

    Returns:
        Message to display
    """
    code = _error_code(error)
    message = NETWORK_ERROR_MESSAGES.get(code or "") or _error_message(error) or "Network error occurred"

    error_log.log_error(error, context, {"type": "network", "is_online": is_online})

    return message


def handle_backend_error(error_log, error: Any, context: str) -> str:
    """
    Log an authentication or document-sync failure and translate it for the user.

    Args:
        error_log: ErrorLog receiving the failure
        error: The failure
        context: Where it occurred

    Returns:
        Message to display
    """
    code = _error_code(error)
    message = BACKEND_ERROR_MESSAGES.get(code or "") or _error_message(error) or "Backend error occurred"

    error_log.log_error(error, context, {"type": "backend", "code": code})

    return message
