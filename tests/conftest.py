"""Shared test fixtures."""

import io
import json
from dataclasses import dataclass, field

import pytest
from PIL import Image

from keto_tracker.config import Settings
from keto_tracker.containers import (
    AppContainer,
    build_analysis_service,
    build_image_normalizer,
)
from keto_tracker.domain.errors import MissingCredentialError
from keto_tracker.domain.inference import AudioClip
from keto_tracker.services.analysis import InferenceGateway
from keto_tracker.services.payloads import to_data_uri

VISION_MODEL_A = "vision-a"
VISION_MODEL_B = "vision-b"

EGGS_AND_BACON_REPLY = json.dumps(
    {
        "foods": [
            {
                "name": "huevos fritos",
                "calories": 180,
                "carbs": 1.2,
                "protein": 12,
                "fat": 14,
                "fiber": 0,
                "netCarbs": 99,
                "servingSize": 2,
                "unit": "unidad",
            },
            {
                "name": "tocino",
                "calories": 130,
                "carbs": 0.4,
                "protein": 9,
                "fat": 10,
                "fiber": 0,
                "servingSize": 3,
                "unit": "tiras",
            },
        ],
        "totalNutrition": {"calories": 1, "carbs": 1, "netCarbs": 1},
    }
)

AVOCADO_REPLY = (
    "Claro, aquí está:\n```json\n"
    + json.dumps(
        {
            "foods": [
                {
                    "name": "aguacate",
                    "calories": 160,
                    "carbs": 9,
                    "protein": 2,
                    "fat": 15,
                    "fiber": 7,
                    "servingSize": 100,
                    "unit": "g",
                }
            ]
        }
    )
    + "\n```\n¡Buen provecho!"
)


@dataclass
class FakeInferenceGateway(InferenceGateway):
    """Gateway double with scripted replies keyed by model name."""

    chat_replies: dict[str, str | Exception] = field(default_factory=dict)
    default_reply: str | Exception = EGGS_AND_BACON_REPLY
    transcript: str | Exception = "dos huevos fritos con tres tiras de tocino"
    chat_calls: list[dict[str, object]] = field(default_factory=list)
    transcribe_calls: list[dict[str, object]] = field(default_factory=list)

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
        if not credential:
            raise MissingCredentialError("No API credential supplied")
        self.chat_calls.append(
            {
                "model": model,
                "system_prompt": system_prompt,
                "user_content": user_content,
                "credential": credential,
                "timeout": timeout,
            }
        )
        reply = self.chat_replies.get(model, self.default_reply)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def transcribe(  # noqa: PLR0913
        self,
        *,
        audio: AudioClip,
        model: str,
        language: str,
        credential: str | None,
        timeout: float,
    ) -> str:
        if not credential:
            raise MissingCredentialError("No API credential supplied")
        self.transcribe_calls.append(
            {"audio": audio, "model": model, "language": language}
        )
        if isinstance(self.transcript, Exception):
            raise self.transcript
        return self.transcript


def jpeg_bytes(size: tuple[int, int], color: tuple[int, int, int] = (200, 80, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def noise_png_bytes(size: tuple[int, int]) -> bytes:
    buffer = io.BytesIO()
    Image.effect_noise(size, 120).convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()


def jpeg_data_uri(size: tuple[int, int] = (320, 240)) -> str:
    return to_data_uri(jpeg_bytes(size), "image/jpeg")


AUDIO_DATA_URI = to_data_uri(b"\x1aE\xdf\xa3fake-webm", "audio/webm;codecs=opus")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        groq_api_key="deployment-key",
        vision_models=[VISION_MODEL_A, VISION_MODEL_B],
        vision_retry_delay_seconds=0,
        environment="test",
    )


@pytest.fixture
def gateway() -> FakeInferenceGateway:
    return FakeInferenceGateway()


@pytest.fixture
def container(settings: Settings, gateway: FakeInferenceGateway) -> AppContainer:
    image_normalizer = build_image_normalizer(settings)
    analysis_service = build_analysis_service(settings, gateway, image_normalizer)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        inference_gateway=gateway,
        image_normalizer=image_normalizer,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
