"""Error codes and user-friendly messages.

This module defines the error catalog for transaction ingestion.
Each error has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    "UPLOAD_001": {
        "code": "UPLOAD_001",
        "message": "Invalid CSV format",
        "user_message": "We couldn't read this file as CSV.",
        "suggestion": "Export the statement from your bank as a UTF-8 CSV file and try again.",
        "retry_allowed": False,
    },
    "UPLOAD_002": {
        "code": "UPLOAD_002",
        "message": "CSV content is empty",
        "user_message": "The uploaded file is empty.",
        "suggestion": "Make sure the file contains a header row and at least one transaction.",
        "retry_allowed": False,
    },
    "UPLOAD_003": {
        "code": "UPLOAD_003",
        "message": "Missing required fields in CSV header",
        "user_message": "This file is missing columns we need for this bank.",
        "suggestion": "Check that the file was exported from the selected bank without edits to the header row.",
        "retry_allowed": False,
    },
    "UPLOAD_004": {
        "code": "UPLOAD_004",
        "message": "File size exceeds maximum limit",
        "user_message": "The file is too large.",
        "suggestion": "Split the export into smaller files and upload them one by one.",
        "retry_allowed": False,
    },
    "BANK_001": {
        "code": "BANK_001",
        "message": "Bank not found",
        "user_message": "We couldn't find the selected bank.",
        "suggestion": "Refresh the bank list and select a bank again.",
        "retry_allowed": False,
    },
    "BANK_002": {
        "code": "BANK_002",
        "message": "Bank does not support CSV import",
        "user_message": "This bank doesn't support CSV uploads.",
        "suggestion": "Connect this bank through its API instead.",
        "retry_allowed": False,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed during transaction persistence",
        "user_message": "We couldn't save your transactions due to a database error.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "API_001": {
        "code": "API_001",
        "message": "Resource not found",
        "user_message": "We couldn't find what you asked for.",
        "suggestion": "Please check the identifier and try again.",
        "retry_allowed": False,
    },
    "MONZO_001": {
        "code": "MONZO_001",
        "message": "Monzo API request failed",
        "user_message": "We couldn't reach Monzo.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "MONZO_002": {
        "code": "MONZO_002",
        "message": "Monzo account is not authorized",
        "user_message": "Your Monzo account isn't connected.",
        "suggestion": "Connect your Monzo account and try again.",
        "retry_allowed": False,
    },
    "MONZO_003": {
        "code": "MONZO_003",
        "message": "Invalid OAuth state parameter",
        "user_message": "The Monzo authorization request expired or was tampered with.",
        "suggestion": "Start the Monzo connection again.",
        "retry_allowed": True,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request validation failed",
        "user_message": "Invalid input data.",
        "suggestion": "Please check your input and try again.",
        "retry_allowed": True,
    },
    "SYS_001": {
        "code": "SYS_001",
        "message": "Internal server error",
        "user_message": "An unexpected error occurred.",
        "suggestion": "Please try again later or contact support.",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details (a generic entry for unknown codes)
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    return get_error(error_code)["user_message"]


def is_retryable(error_code: str) -> bool:
    return get_error(error_code)["retry_allowed"]
