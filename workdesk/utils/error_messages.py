ERROR_MESSAGES = {
    "validation": {
        "request_body_empty": "Request body cannot be empty.",
        "invalid_ids": "Invalid request. 'ids' must be a non-empty list.",
        "invalid_csv": "The uploaded file is not a readable CSV file.",
        "missing_file": "A CSV file is required.",
    },
    "auth": {
        "invalid_credentials": "Invalid email or password.",
        "token_expired": "The token has expired.",
        "token_invalid": "Signature verification failed.",
        "token_missing": "Request does not contain an access token.",
        "token_revoked": "The token has been revoked.",
        "account_disabled": "This account has been disabled.",
    },
    "not_found": {
        "invoice": "Invoice not found.",
        "user": "User not found.",
        "gateway": "Unknown payment gateway.",
    },
    "payment": {
        "invalid_signature": "Invalid webhook signature.",
        "invoice_paid": "This invoice has already been paid.",
    },
}
