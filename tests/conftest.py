import json

import pytest
import requests

import amo_client

WRAPPER = '<script type="text/javascript">document.domain = "amocrm.ru";</script>'


class FakeResponse:
    def __init__(self, url, body='', status_code=200):
        self.url = url
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeVendor:
    """In-memory stand-in for the amoCRM endpoints the deploy tool calls."""

    def __init__(self):
        self.widgets = []
        self.auth_ok = True
        self.create_error = None
        self.upload_error = None
        self.calls = []
        self.uploads = []
        self.deleted = []
        self._next_key = 1

    def add_widget(self, code, secret_key):
        self.widgets.append({'code': code, 'secret_key': secret_key})

    def get(self, session, url, params=None, timeout=None):
        self.calls.append(('GET', url))
        if url.endswith('/private/api/auth.php'):
            if not self.auth_ok:
                return FakeResponse(url, {'response': {'auth': False, 'error': 'wrong login'}})
            session.cookies.set('session_id', 'abc123')
            return FakeResponse(url, {'response': {'auth': True}})
        if url.endswith('/ajax/settings/dev/'):
            if session.cookies.get('session_id') != 'abc123':
                return FakeResponse(url, '<html>login</html>', status_code=401)
            return FakeResponse(url, {'response': {'widgets': {'items': list(self.widgets)}}})
        return FakeResponse(url, '', status_code=404)

    def post(self, session, url, data=None, files=None, timeout=None):
        self.calls.append(('POST', url))
        if url.endswith('/ajax/settings/dev/'):
            code = files['code'][1]
            if self.create_error:
                return FakeResponse(url, {'error': self.create_error})
            self.add_widget(code, f"secret-{self._next_key}")
            self._next_key += 1
            return FakeResponse(url, {'response': {'result': True}})
        if url.endswith('/upload/'):
            name, fileobj, content_type = files[' widget']
            self.uploads.append({'data': dict(data), 'filename': name,
                                 'content_type': content_type, 'content': fileobj.read()})
            if self.upload_error:
                return FakeResponse(url, WRAPPER + json.dumps({'error': self.upload_error}))
            return FakeResponse(url, WRAPPER + json.dumps({'status': 'ok'}))
        if url.endswith('/delete/'):
            self.deleted.append(dict(data))
            self.widgets = [w for w in self.widgets if w['code'] != data['widget']]
            return FakeResponse(url, WRAPPER + json.dumps({'status': 'ok'}))
        return FakeResponse(url, '', status_code=404)


@pytest.fixture
def vendor(monkeypatch):
    fake = FakeVendor()

    class FakeHttpSession:
        def __init__(self):
            self.headers = {}
            self.cookies = requests.cookies.RequestsCookieJar()

        def get(self, url, **kwargs):
            return fake.get(self, url, **kwargs)

        def post(self, url, **kwargs):
            return fake.post(self, url, **kwargs)

    monkeypatch.setattr(amo_client.requests, 'Session', FakeHttpSession)
    return fake


@pytest.fixture
def widget_folder(tmp_path):
    folder = tmp_path / 'src'
    (folder / 'images').mkdir(parents=True)
    (folder / 'script.js').write_text('define([], function () {});\n')
    (folder / 'images' / 'logo.png').write_bytes(bytes(range(256)) * 4)
    (folder / 'manifest.json').write_text(json.dumps({
        'widget': {
            'name': 'widget.name',
            'version': '1.0.1',
            'code': '',
            'secret_key': '',
        },
        'locations': ['ccard-1', 'lcard-1'],
    }, indent=4))
    return folder
