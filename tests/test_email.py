import requests

from payroll_app.notifications.email import EmailSender


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.text = "{}"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


def test_send_posts_formspree_payload():
    session = FakeSession()
    sender = EmailSender(url="https://formspree.io/f/test", session=session)

    assert sender.send("kofi@twinhill.com", "Verification Code", "Your code is 123456") is True

    url, kwargs = session.calls[0]
    assert url == "https://formspree.io/f/test"
    assert kwargs["headers"] == {"Accept": "application/json"}
    assert kwargs["json"]["email"] == "kofi@twinhill.com"
    assert kwargs["json"]["message"] == "Your code is 123456"
    assert kwargs["json"]["_subject"] == "Twin Hill Security: Verification Code for kofi@twinhill.com"


def test_send_failure_does_not_raise():
    sender = EmailSender(url="https://formspree.io/f/test", session=FakeSession(error=requests.ConnectionError("down")))
    assert sender.send("kofi@twinhill.com", "Verification Code", "123456") is True


def test_send_http_error_does_not_raise():
    sender = EmailSender(url="https://formspree.io/f/test", session=FakeSession(FakeResponse(500)))
    assert sender.send("kofi@twinhill.com", "Verification Code", "123456") is True
