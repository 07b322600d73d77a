"""
Tests for the external collaborators: NLP service client, Anthropic client
and identity verifier. Network calls are replaced with fake sessions.
"""

from types import SimpleNamespace

import pytest
import requests

from journal_insights.services.anthropic_client import AnthropicInsightsClient, _parse_json
from journal_insights.services import identity, insights_client
from journal_insights.services.identity import AuthError, IdentityVerifier
from journal_insights.services.insights_client import (
    GenerationError,
    NlpServiceClient,
    get_insights_client,
    text_field,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def close(self):
        self.closed = True

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


class TestNlpServiceClient:
    """Tests for NlpServiceClient."""

    def test_classify_posts_text(self):
        """Entry text is posted to /emotions with the configured timeout."""
        session = FakeSession(FakeResponse([{"emotion": "joy", "confidence": 0.9}]))
        client = NlpServiceClient(base_url="http://nlp:8000/", timeout=5, session=session)

        result = client.classify_emotions("A happy day")

        url, kwargs = session.requests[0]
        assert url == "http://nlp:8000/emotions"
        assert kwargs["json"] == {"text": "A happy day"}
        assert kwargs["timeout"] == 5
        assert result == [{"emotion": "joy", "confidence": 0.9}]

    def test_summary_sends_entries_and_user(self):
        """Summary request carries the entries and the user id."""
        session = FakeSession(FakeResponse({"summary": "ok"}))
        client = NlpServiceClient(base_url="http://nlp", session=session)

        client.summarize([{"title": "t"}], user_id=7)

        url, kwargs = session.requests[0]
        assert url == "http://nlp/insights/daily-summary"
        assert kwargs["json"] == {"entries": [{"title": "t"}], "userId": 7}

    def test_timeout_is_generation_error(self):
        """A timeout surfaces as GenerationError."""
        client = NlpServiceClient(session=FakeSession(error=requests.exceptions.Timeout()))

        with pytest.raises(GenerationError):
            client.generate_quote([])

    def test_http_error_is_generation_error(self):
        """An HTTP error status surfaces as GenerationError."""
        client = NlpServiceClient(session=FakeSession(FakeResponse({}, status_code=503)))

        with pytest.raises(GenerationError):
            client.generate_quote([])

    def test_invalid_json_is_generation_error(self):
        """An unparseable body surfaces as GenerationError."""
        client = NlpServiceClient(session=FakeSession(FakeResponse(ValueError("bad json"))))

        with pytest.raises(GenerationError):
            client.summarize([])

    def test_malformed_emotions_is_generation_error(self):
        """A reply without an emotion list surfaces as GenerationError."""
        client = NlpServiceClient(session=FakeSession(FakeResponse({"label": "joy"})))

        with pytest.raises(GenerationError):
            client.classify_emotions("text")


    def test_close_releases_session(self):
        """Closing the client closes its HTTP session."""
        session = FakeSession()

        NlpServiceClient(session=session).close()

        assert session.closed


class TestGetInsightsClient:
    """Tests for the get_insights_client dependency."""

    def test_client_closed_after_request(self, monkeypatch):
        """The dependency closes its client once the request is done."""
        session = FakeSession()
        monkeypatch.setattr(insights_client, "build_insights_client", lambda: NlpServiceClient(session=session))

        dependency = get_insights_client()
        client = next(dependency)
        assert isinstance(client, NlpServiceClient)
        assert not session.closed

        with pytest.raises(StopIteration):
            next(dependency)
        assert session.closed


class TestTextField:
    """Tests for text_field."""

    def test_strips_text(self):
        """Surrounding whitespace is trimmed."""
        assert text_field({"title": "  Rise  "}, "title") == "Rise"

    def test_missing_or_blank_is_none(self):
        """Missing and blank values read as None."""
        assert text_field({}, "author") is None
        assert text_field({"author": "   "}, "author") is None

    def test_number_becomes_text(self):
        """Numbers are accepted as text."""
        assert text_field({"citation": 1854}, "citation") == "1854"

    @pytest.mark.parametrize("value", [{"name": "x"}, ["a"], True])
    def test_other_types_raise(self, value):
        """Objects, lists and booleans are unusable."""
        with pytest.raises(GenerationError):
            text_field({"author": value}, "author")

class FakeAnthropic:
    def __init__(self, text):
        self.text = text
        self.calls = []
        self.messages = self

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


class TestAnthropicInsightsClient:
    """Tests for AnthropicInsightsClient."""

    def test_quote_from_fenced_json(self):
        """Quote JSON inside a code fence is parsed."""
        fake = FakeAnthropic('```json\n{"title": "Rise", "quote": "Fall seven times, stand up eight."}\n```')
        client = AnthropicInsightsClient(client=fake, model="test-model")

        result = client.generate_quote([{"title": "Monday", "content": "Rough start", "emotions": None}])

        assert result["quote"] == "Fall seven times, stand up eight."
        assert fake.calls[0]["model"] == "test-model"
        assert "Rough start" in fake.calls[0]["messages"][0]["content"]

    def test_classify_from_prose_wrapped_array(self):
        """A JSON array after leading prose is parsed."""
        fake = FakeAnthropic('Here you go: [{"emotion": "relief", "confidence": 0.7}]')

        result = AnthropicInsightsClient(client=fake).classify_emotions("Finally done.")

        assert result == [{"emotion": "relief", "confidence": 0.7}]

    def test_non_json_reply_is_generation_error(self):
        """A refusal without JSON surfaces as GenerationError."""
        client = AnthropicInsightsClient(client=FakeAnthropic("I cannot help with that."))

        with pytest.raises(GenerationError):
            client.summarize([])

    def test_parse_json_rejects_truncated(self):
        """Truncated JSON is rejected."""
        with pytest.raises(GenerationError):
            _parse_json('{"summary": "cut off')


class TestIdentityVerifier:
    """Tests for IdentityVerifier."""

    def test_valid_token(self):
        """A known token yields the account's claims."""
        session = FakeSession(FakeResponse({
            "users": [{"localId": "uid-1", "email": "a@example.com", "emailVerified": True}]
        }))
        verifier = IdentityVerifier(lookup_url="https://idp/lookup", api_key="k", session=session)

        claims = verifier.verify("token-1")

        url, kwargs = session.requests[0]
        assert url == "https://idp/lookup"
        assert kwargs["params"] == {"key": "k"}
        assert kwargs["json"] == {"idToken": "token-1"}
        assert claims.subject_id == "uid-1"
        assert claims.email == "a@example.com"
        assert claims.email_verified is True

    def test_rejected_token(self):
        """A token the provider rejects raises AuthError."""
        verifier = IdentityVerifier(session=FakeSession(FakeResponse({"error": {}}, status_code=400)))

        with pytest.raises(AuthError):
            verifier.verify("expired")

    def test_unknown_account(self):
        """A lookup with no account raises AuthError."""
        verifier = IdentityVerifier(session=FakeSession(FakeResponse({"users": []})))

        with pytest.raises(AuthError):
            verifier.verify("token")

    def test_empty_token(self):
        """An empty token is rejected without a network call."""
        with pytest.raises(AuthError):
            IdentityVerifier(session=FakeSession()).verify("")

    def test_provider_unreachable(self):
        """Connection failures raise AuthError."""
        verifier = IdentityVerifier(session=FakeSession(error=requests.exceptions.ConnectionError()))

        with pytest.raises(AuthError):
            verifier.verify("token")


class TestGetIdentityVerifier:
    """Tests for the get_identity_verifier dependency."""

    def test_verifier_closed_after_request(self, monkeypatch):
        """The dependency closes its verifier once the request is done."""
        session = FakeSession()
        monkeypatch.setattr(identity, "IdentityVerifier", lambda: IdentityVerifier(session=session))

        dependency = identity.get_identity_verifier()
        next(dependency)
        dependency.close()

        assert session.closed
