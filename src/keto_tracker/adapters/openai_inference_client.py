"""OpenAI-compatible client for chat completion and transcription."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

import httpx
import openai
from openai import AsyncOpenAI
from openai.types.audio import Transcription
from openai.types.chat import ChatCompletion

from keto_tracker.domain.errors import (
    AnalysisError,
    InvalidCredentialError,
    InvalidRequestError,
    MalformedResponseError,
    MissingCredentialError,
    ProviderUnavailableError,
    RateLimitedError,
    RequestTimeoutError,
)
from keto_tracker.domain.inference import AudioClip
from keto_tracker.services.analysis import InferenceGateway
from keto_tracker.services.audio import transport_file

_logger = logging.getLogger(__name__)

_T = TypeVar("_T")

HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


@dataclass
class OpenAIInferenceGateway(InferenceGateway):
    """Inference gateway backed by the OpenAI SDK and a shared httpx session.

    A client is built per call because the credential is supplied per call.
    SDK retries are disabled; retry policy belongs to the caller.
    """

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "OpenAIInferenceGateway":
        """Create a gateway with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def complete_chat(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_content: str | list[dict[str, object]],
        temperature: float,
        max_tokens: int,
        credential: str | None,
        timeout: float,
    ) -> str:
        """Return the text of the first choice of a chat completion."""
        client = self._client_for(credential)
        response = await _call_with_deadline(
            client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
            ),
            timeout=timeout,
            action=f"chat:{model}",
        )
        if not isinstance(response, ChatCompletion) or not response.choices:
            raise MalformedResponseError(f"Provider returned no choices for {model}")
        message = response.choices[0].message
        if message is None:
            raise MalformedResponseError(
                f"Provider returned an empty choice for {model}"
            )
        return message.content or ""

    async def transcribe(  # noqa: PLR0913
        self,
        *,
        audio: AudioClip,
        model: str,
        language: str,
        credential: str | None,
        timeout: float,
    ) -> str:
        """Return the transcript of an audio clip."""
        client = self._client_for(credential)
        response = await _call_with_deadline(
            client.audio.transcriptions.create(
                file=transport_file(audio),
                model=model,
                language=language,
                response_format="json",
                timeout=timeout,
            ),
            timeout=timeout,
            action=f"transcribe:{model}",
        )
        if not isinstance(response, Transcription):
            raise MalformedResponseError(f"Provider returned no transcript for {model}")
        return response.text or ""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _client_for(self, credential: str | None) -> AsyncOpenAI:
        if not credential:
            raise MissingCredentialError("No API credential supplied")
        return AsyncOpenAI(
            api_key=credential,
            base_url=self.base_url,
            http_client=self.http_client,
            max_retries=0,
        )


async def _call_with_deadline(
    call: Awaitable[_T], *, timeout: float, action: str
) -> _T:
    """Await a provider call, aborting it when the deadline expires."""
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except (TimeoutError, openai.APITimeoutError) as exc:
        _logger.warning("Inference %s timed out after %ss", action, timeout)
        raise RequestTimeoutError(f"{action} timed out after {timeout}s") from exc
    except openai.APIStatusError as exc:
        _logger.warning(
            "Inference %s failed (status=%s): %s", action, exc.status_code, exc
        )
        raise error_for_status(exc.status_code, str(exc)) from exc
    except openai.APIConnectionError as exc:
        _logger.warning("Inference %s could not connect: %s", action, exc)
        raise ProviderUnavailableError(f"{action} connection failed: {exc}") from exc
    except openai.APIError as exc:
        _logger.warning("Inference %s returned an unusable response: %s", action, exc)
        raise ProviderUnavailableError(f"{action} failed: {exc}") from exc


def error_for_status(status_code: int, detail: str) -> AnalysisError:
    """Map an HTTP status from the provider to a domain error."""
    if status_code in {HTTP_UNAUTHORIZED, HTTP_FORBIDDEN}:
        return InvalidCredentialError(detail)
    if status_code == HTTP_TOO_MANY_REQUESTS:
        return RateLimitedError(detail)
    if status_code >= HTTP_SERVER_ERROR:
        return ProviderUnavailableError(detail)
    if status_code >= HTTP_BAD_REQUEST:
        return InvalidRequestError(detail)
    return ProviderUnavailableError(detail)
