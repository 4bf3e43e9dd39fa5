from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import requests

from limeai.config import settings

log = logging.getLogger("limeai.upstream")

PLAYDIALOG_TTS_URL = "https://api.play.ai/api/v1/tts/"
GEMINI_URL_TMPL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_RATE_LIMIT_CUES = ("rate limit", "rate_limit", "429", "too many requests")
_AUTH_CUES = ("authentication", "auth", "api key", "unauthorized")

_VOICE_MALE = "s3://voice-cloning-zero-shot/baf1ef41-36b6-428c-9bdf-50ba54682bd8/original/manifest.json"
_VOICE_FEMALE = "s3://voice-cloning-zero-shot/e040bd1b-f190-4bdb-83f0-75ef85b18f84/original/manifest.json"

# style -> (first voice, second voice)
VOICES: dict[str, tuple[str, str]] = {
    "educational": (_VOICE_MALE, _VOICE_FEMALE),
    "storytelling": (_VOICE_FEMALE, _VOICE_MALE),
    "interview": (_VOICE_MALE, _VOICE_FEMALE),
    "conversational": (_VOICE_MALE, _VOICE_FEMALE),
}


class UpstreamError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FailureKind:
    RATE_LIMITED = "rate_limited"
    AUTH = "auth"
    OTHER = "other"


def classify_failure(err: BaseException) -> str:
    """String/status heuristic separating quota and credential failures from the rest."""
    msg = str(err).lower()
    status = getattr(err, "status_code", None)
    if status == 429 or any(cue in msg for cue in _RATE_LIMIT_CUES):
        return FailureKind.RATE_LIMITED
    if status == 401 or any(cue in msg for cue in _AUTH_CUES):
        return FailureKind.AUTH
    return FailureKind.OTHER


def _request(
    session: requests.Session, method: str, url: str, timeout: float, **kwargs: Any
) -> requests.Response:
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise UpstreamError(str(e)) from e
    if resp.status_code >= 400:
        raise UpstreamError(
            f"upstream returned {resp.status_code}: {resp.text[:500]}", resp.status_code
        )
    return resp


def _json(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamError(f"non-JSON body from upstream: {e}") from e


class DeepSeekClient:
    def __init__(
        self,
        api_key: str = settings.DEEPSEEK_API_KEY,
        url: str = settings.DEEPSEEK_API_URL,
        model: str = settings.DEEPSEEK_MODEL,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECS,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self._session = session or requests.Session()

    def complete(self, prompt: str, system_prompt: str) -> str:
        if not self.api_key or not self.api_key.startswith("sk-"):
            log.error('deepseek_bad_key msg="key must start with sk-"')
            raise UpstreamError("Invalid API key format")

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.2,
            "max_tokens": 1024,
        }
        resp = _request(
            self._session,
            "POST",
            self.url,
            self.timeout,
            json=body,
            headers={"Authorization": f"Bearer {self.api_key.strip()}"},
        )
        log.info("deepseek_response status=%d", resp.status_code)
        data = _json(resp)
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Invalid response from DeepSeek API") from e


class GeminiClient:
    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECS,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(
        self,
        model: str,
        contents: list[dict[str, Any]],
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        body = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }
        resp = _request(
            self._session,
            "POST",
            GEMINI_URL_TMPL.format(model=model),
            self.timeout,
            params={"key": self.api_key},
            json=body,
        )
        data = _json(resp)
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Invalid response from Gemini API") from e


class PlayDialogClient:
    def __init__(
        self,
        user_id: str = settings.PLAYDIALOG_USER_ID,
        secret_key: str = settings.PLAYDIALOG_SECRET_KEY,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECS,
        session: requests.Session | None = None,
    ):
        self.user_id = user_id
        self.secret_key = secret_key
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.user_id and self.secret_key)

    def _headers(self) -> dict[str, str]:
        return {"X-USER-ID": self.user_id, "Authorization": self.secret_key}

    def start_job(self, text: str, style: str) -> str:
        voice1, voice2 = VOICES.get(style, VOICES["conversational"])
        body = {
            "model": "PlayDialog",
            "text": text,
            "voice": voice1,
            "voice2": voice2,
            "turnPrefix": "HOST:",
            "turnPrefix2": "GUEST:",
            "outputFormat": "mp3",
        }
        resp = _request(
            self._session, "POST", PLAYDIALOG_TTS_URL, self.timeout, json=body, headers=self._headers()
        )
        data = _json(resp)
        job_id = data.get("id") if isinstance(data, dict) else None
        if not job_id:
            log.error('playdialog_bad_payload body="%s"', str(data)[:200])
            raise UpstreamError("Invalid response from PlayDialog API")
        return job_id

    def job_status(self, job_id: str) -> dict[str, Any]:
        """Returns the provider's `output` object ({status, url, ...})."""
        resp = _request(
            self._session, "GET", f"{PLAYDIALOG_TTS_URL}{job_id}", self.timeout, headers=self._headers()
        )
        data = _json(resp)
        output = data.get("output") if isinstance(data, dict) else None
        if not isinstance(output, dict):
            raise UpstreamError("Invalid response from PlayDialog API")
        return output

    def stream_audio(self, url: str, chunk_size: int = 8192) -> Iterator[bytes]:
        # Request eagerly so HTTP errors surface before the response starts
        resp = _request(self._session, "GET", url, self.timeout, stream=True)

        def _chunks() -> Iterator[bytes]:
            try:
                yield from resp.iter_content(chunk_size=chunk_size)
            finally:
                resp.close()

        return _chunks()
