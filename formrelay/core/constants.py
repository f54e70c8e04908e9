"""Literal values shared across the request flow."""

DEFAULT_FORM_NAME = "contact"
DEFAULT_THANK_YOU_PATH = "/thank-you"
SUBMIT_SEGMENT = "submit"

FORM_FIELD = "_form"
REDIRECT_FIELD = "_redirect"
HONEYPOT_FIELD = "_hp"
RESERVED_FIELD_PREFIX = "_"
TURNSTILE_FIELD = "cf-turnstile-response"

REDIRECT_QUERY_PARAM = "redirect"
CLIENT_IP_HEADER = "CF-Connecting-IP"

RATE_LIMIT_KEY_PREFIX = "rate"
RATE_LIMIT_TTL_GRACE_SECONDS = 60

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
