# FILE: vendor_format.py
# Everything that knows how amoCRM wraps its responses lives here.

import json
import re

from errors import VendorApiError

# The upload/delete endpoints answer with '<script>...</script>{json}'
SCRIPT_WRAPPER = re.compile(r'^\s*<script.*?</script>', re.DOTALL)


def strip_script_wrapper(text):
    return SCRIPT_WRAPPER.sub('', text, count=1).strip()


def parse_wrapped_json(text):
    """Parses a script-wrapped JSON body. An empty body is an empty object."""
    body = strip_script_wrapper(text or '')
    if not body:
        return {}
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise VendorApiError(f"Could not parse vendor response: {body[:200]!r}") from e


def parse_json(response):
    try:
        return response.json()
    except ValueError as e:
        raise VendorApiError(
            f"Expected JSON from {response.url}, got: {response.text[:200]!r}"
        ) from e


def raise_for_error(payload):
    """Raises VendorApiError carrying the `error` field verbatim, else returns payload."""
    if isinstance(payload, dict) and 'error' in payload:
        raise VendorApiError(str(payload['error']))
    return payload
