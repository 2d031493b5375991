# FILE: amo_client.py
# Talks to amoCRM: authentication, the widget registry and the widget
# upload/delete endpoints.

from collections import namedtuple

import requests

from errors import AuthenticationFailure, VendorApiError
from vendor_format import parse_json, parse_wrapped_json, raise_for_error

# --- CONFIGURATION ---
AUTH_URL = 'https://{subdomain}.amocrm.ru/private/api/auth.php'
SETTINGS_URL = 'https://{subdomain}.amocrm.ru/ajax/settings/dev/'
UPLOAD_URL = 'https://widgets.amocrm.ru/{subdomain}/upload/'
DELETE_URL = 'https://widgets.amocrm.ru/{subdomain}/delete/'
ACCOUNT_DOMAIN = 'amocrm.ru'
REQUEST_TIMEOUT = 60
DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:51.0) Gecko/20100101 Firefox/51.0',
    'X-Requested-With': 'XMLHttpRequest',
}
# ---------------------

WidgetIdentity = namedtuple('WidgetIdentity', ['code', 'secret_key'])


class AmoSession:
    """One authenticated account. Owns its own headers and cookie jar."""

    def __init__(self, subdomain, login, api_key):
        self.subdomain = subdomain
        self.login = login
        self.api_key = api_key
        self.http = requests.Session()
        self.http.headers.update(DEFAULT_HEADERS)

    def authenticate(self):
        url = AUTH_URL.format(subdomain=self.subdomain)
        params = {'type': 'json', 'USER_LOGIN': self.login, 'USER_HASH': self.api_key}
        try:
            response = self.http.get(url, params=params, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            payload = raise_for_error(parse_json(response))
        except (requests.exceptions.RequestException, VendorApiError) as e:
            raise AuthenticationFailure(f"Authentication failed for {self.login}: {e}") from e

        # auth.php reports failures inside the "response" object
        result = payload.get('response') if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            raise AuthenticationFailure(f"Unexpected authentication response for {self.login}")
        if 'error' in result:
            raise AuthenticationFailure(f"Authentication failed for {self.login}: {result['error']}")
        if result.get('auth') is False:
            raise AuthenticationFailure(f"Authentication failed for {self.login}")
        return self

    def find_widget(self, code):
        """
        Looks the widget up in the account's developer settings.
        Returns a WidgetIdentity, or None when no widget has exactly this code.
        """
        url = SETTINGS_URL.format(subdomain=self.subdomain)
        response = self.http.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        payload = raise_for_error(parse_json(response))

        try:
            items = payload['response']['widgets']['items']
        except (KeyError, TypeError) as e:
            raise VendorApiError("Widget list missing from developer settings response") from e

        # Some accounts get the list as an object keyed by widget id
        if isinstance(items, dict):
            items = items.values()

        for item in items:
            if isinstance(item, dict) and item.get('code') == code:
                if not item.get('secret_key'):
                    raise VendorApiError(f"Widget {code} is listed without a secret key")
                return WidgetIdentity(item['code'], item['secret_key'])
        return None

    def create_widget(self, code):
        url = SETTINGS_URL.format(subdomain=self.subdomain)
        # The settings page expects a multipart form, not urlencoded fields
        fields = {'action': (None, 'create'), 'code': (None, code)}
        response = self.http.post(url, files=fields, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        raise_for_error(parse_json(response))

        # The create call does not return the secret key
        identity = self.find_widget(code)
        if identity is None:
            raise VendorApiError(f"Widget {code} was created but is missing from the widget list")
        return identity

    def delete_widget(self, identity):
        url = DELETE_URL.format(subdomain=self.subdomain)
        data = {
            'secret': identity.secret_key,
            'widget': identity.code,
            'amouser': self.login,
            'amohash': self.api_key,
        }
        response = self.http.post(url, data=data, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return raise_for_error(parse_wrapped_json(response.text))

    def upload_widget(self, archive_path, identity):
        url = UPLOAD_URL.format(subdomain=self.subdomain)
        data = {
            'secret': identity.secret_key,
            'widget': identity.code,
            'amouser': self.login,
            'amohash': self.api_key,
            'domain': ACCOUNT_DOMAIN,
        }
        with open(archive_path, 'rb') as f:
            # The leading space in ' widget' is what the vendor's form uses
            files = {' widget': ('widget.zip', f, 'application/x-zip-compressed')}
            response = self.http.post(url, data=data, files=files, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return raise_for_error(parse_wrapped_json(response.text))


def authenticate(subdomain, login, api_key):
    """Establishes and returns a new authenticated session."""
    return AmoSession(subdomain, login, api_key).authenticate()
