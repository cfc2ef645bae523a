"""
AI API Client

Talks to an OpenAI-compatible endpoint with the openai library.

AI is used for:
- interview questions (wizard, question bank, interview bot)
- analysing candidate answers
- speech-to-text for recorded answers
- job descriptions and the dashboard assistant

Every failure surfaces as AIClientError so routes can answer 502.
"""
import io
import json
import logging
from typing import List, Optional

from openai import OpenAI, OpenAIError

from hunter.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class AIClientError(Exception):
    """The AI backend failed or returned nothing usable."""


class AIClient:
    """
    Wrapper for the chat and transcription APIs.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.ai_api_key or "missing-key",
            base_url=settings.ai_base_url,
            timeout=settings.ai_timeout,
        )
        self.model = settings.ai_model
        self.transcription_model = settings.ai_transcription_model

    def chat(self, system_prompt: str, user_content: str,
             temperature: float = 0.7, max_tokens: int = 1000) -> str:
        """Single-turn completion. Returns the reply text."""
        return self.chat_messages(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def chat_messages(self, messages: List[dict], temperature: float = 0.7,
                      max_tokens: int = 1000) -> str:
        """Multi-turn completion over a prepared message list."""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature
            )
        except OpenAIError as e:
            logger.error(f"AI chat request failed: {e}")
            raise AIClientError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AIClientError("Empty response from AI")
        return content

    def transcribe(self, audio: bytes, filename: str = "answer.webm") -> str:
        """Speech-to-text for a recorded answer."""
        buffer = io.BytesIO(audio)
        buffer.name = filename
        try:
            result = self.client.audio.transcriptions.create(
                model=self.transcription_model,
                file=buffer
            )
        except OpenAIError as e:
            logger.error(f"AI transcription failed: {e}")
            raise AIClientError(str(e)) from e
        return result.text

    def test_connection(self) -> bool:
        """Test if the AI endpoint is reachable"""
        try:
            response = self.chat(
                "You are a test assistant.",
                "Reply with exactly: OK",
                temperature=0,
                max_tokens=10
            )
            return "OK" in response.upper()
        except AIClientError as e:
            logger.warning(f"AI connection failed: {e}")
            return False


def extract_json(text: str):
    """
    Extract JSON from an AI reply.
    Handles cases where the model wraps JSON in markdown code blocks.
    """
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    return json.loads(text.strip())


# Singleton instance
_ai_client: Optional[AIClient] = None


def get_ai_client() -> AIClient:
    """Get or create the AI client (singleton pattern)"""
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client


def set_ai_client(client) -> None:
    """Replace the client (used by tests)."""
    global _ai_client
    _ai_client = client
