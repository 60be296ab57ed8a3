import pytest


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class HttpStub:
    """记录 httpx.Client.post 的调用，并返回预设响应或抛出预设异常。"""

    def __init__(self):
        self.calls = []
        self.response = FakeResponse(payload={})
        self.error = None

    def respond(self, status_code=200, payload=None, text=None):
        self.response = FakeResponse(status_code=status_code, payload=payload, text=text)

    def client_factory(self):
        stub = self

        class Client:
            def __init__(self, *a, **kw):
                stub.client_kwargs = kw

            def __enter__(self):
                return self

            def __exit__(self, *a):
                return False

            def post(self, url, **kw):
                stub.calls.append({"url": url, **kw})
                if stub.error is not None:
                    raise stub.error
                return stub.response

        return Client


@pytest.fixture
def http_stub(monkeypatch):
    stub = HttpStub()
    monkeypatch.setattr("httpx.Client", stub.client_factory())
    return stub


class SettingsStub:
    http_timeout = 1.0


@pytest.fixture
def settings_stub():
    return SettingsStub()
