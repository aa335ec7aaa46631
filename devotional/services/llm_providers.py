"""
Text-generation providers used for the periodic review.

Every provider takes a composed prompt and returns free text. Which one runs
is decided by configured credentials, in PROVIDER_PRIORITY order.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import requests
from django.conf import settings


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a warm, encouraging devotional mentor who helps believers "
    "organize and look back on their devotional journey."
)

MAX_TOKENS = 2000
TEMPERATURE = 0.7

NO_REVIEW_TEXT = "Could not generate a review."


class ReviewConfigurationError(RuntimeError):
    """The selected provider has no API key configured."""


class ProviderError(RuntimeError):
    """The provider API returned an error or an unusable response."""


class BaseReviewProvider(ABC):
    """
    Base class for review providers.

    Subclasses set ``name`` and ``settings_key`` and implement ``generate``.
    """

    name: str = ""
    settings_key: str = ""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.api_key = api_key if api_key is not None else getattr(settings, self.settings_key, "")
        self.timeout = timeout or getattr(settings, "LLM_HTTP_TIMEOUT_SECONDS", 60)

    @classmethod
    def is_configured(cls) -> bool:
        return bool(getattr(settings, cls.settings_key, ""))

    def _require_key(self) -> str:
        if not self.api_key:
            raise ReviewConfigurationError(f"{self.settings_key} is not set")
        return self.api_key

    def _post(self, url: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> requests.Response:
        try:
            return requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", **(headers or {})},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"{self.name} request failed: {e}") from e

    @staticmethod
    def _error_message(resp: requests.Response, default: str) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or default
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict) and err.get("message"):
                return err["message"]
            if isinstance(err, str):
                return err
            if body.get("message"):
                return body["message"]
        return resp.text or default

    def _json_body(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"{self.name} returned a response that is not JSON") from e

    def _json_object(self, resp: requests.Response) -> Dict[str, Any]:
        body = self._json_body(resp)
        if not isinstance(body, dict):
            raise ProviderError(f"{self.name} returned an unexpected response: {str(body)[:200]}")
        return body

    @staticmethod
    def _first_object(items: Any) -> Dict[str, Any]:
        """First element of a JSON array when it is an object, else {}."""
        if isinstance(items, list) and items and isinstance(items[0], dict):
            return items[0]
        return {}

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the model's answer to ``prompt``."""


class GeminiProvider(BaseReviewProvider):
    name = "gemini"
    settings_key = "GEMINI_API_KEY"

    # Tried in order; only "model not found / not supported" moves on.
    MODELS = ["gemini-pro", "gemini-1.5-pro", "gemini-1.5-flash"]
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
    SAFETY_CATEGORIES = [
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    ]

    @staticmethod
    def _model_unavailable(message: str) -> bool:
        return "not found" in message or "not supported" in message

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": f"{SYSTEM_PROMPT}\n\n{prompt}"}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": MAX_TOKENS,
                "topP": 0.95,
                "topK": 40,
            },
            "safetySettings": [
                {"category": c, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
                for c in self.SAFETY_CATEGORIES
            ],
        }

    def generate(self, prompt: str) -> str:
        api_key = self._require_key()
        last_error: Optional[str] = None

        for model in self.MODELS:
            resp = self._post(
                f"{self.BASE_URL}/{model}:generateContent?key={api_key}",
                self._payload(prompt),
            )
            if resp.status_code >= 400:
                message = self._error_message(resp, "Request failed")
                if self._model_unavailable(message):
                    logger.info("Gemini model %s unavailable, trying the next one", model)
                    last_error = f"Model {model} is unavailable: {message}"
                    continue
                raise ProviderError(f"Gemini API error: {message}")

            data = self._json_object(resp)
            candidate = self._first_object(data.get("candidates"))
            content = candidate.get("content")
            parts = content.get("parts") if isinstance(content, dict) else None
            text = self._first_object(parts).get("text")
            if not text:
                if candidate.get("finishReason") == "SAFETY":
                    raise ProviderError("The content was blocked by safety settings; adjust the prompt.")
                raise ProviderError("Could not generate a review; check the API response.")
            return text

        raise ProviderError(
            f"No Gemini model is available. Last error: {last_error or 'unknown error'}. "
            "Check that the API key is valid and which models Google AI Studio lists for it."
        )


class HuggingFaceProvider(BaseReviewProvider):
    name = "huggingface"
    settings_key = "HUGGINGFACE_API_KEY"

    MODEL = "meta-llama/Meta-Llama-3.1-8B-Instruct"
    BASE_URL = "https://api-inference.huggingface.co/models"

    @staticmethod
    def chat_template(prompt: str) -> str:
        return (
            "<|begin_of_text|><|start_header_id|>system<|end_header_id|>\n\n"
            f"{SYSTEM_PROMPT}<|eot_id|><|start_header_id|>user<|end_header_id|>\n\n"
            f"{prompt}<|eot_id|><|start_header_id|>assistant<|end_header_id|>\n\n"
        )

    def generate(self, prompt: str) -> str:
        api_key = self._require_key()
        resp = self._post(
            f"{self.BASE_URL}/{self.MODEL}",
            {
                "inputs": self.chat_template(prompt),
                "parameters": {
                    "max_new_tokens": MAX_TOKENS,
                    "temperature": TEMPERATURE,
                    "return_full_text": False,
                },
            },
            headers={"Authorization": f"Bearer {api_key}"},
        )
        if resp.status_code >= 400:
            raise ProviderError(f"Hugging Face API error: {resp.text}")

        data = self._json_body(resp)
        generated = self._first_object(data).get("generated_text")
        if isinstance(generated, str) and generated.strip():
            return generated.strip()
        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(f"Hugging Face API error: {data['error']}")
        return str(data)


class OpenAIProvider(BaseReviewProvider):
    name = "openai"
    settings_key = "OPENAI_API_KEY"

    MODEL = "gpt-4o-mini"
    URL = "https://api.openai.com/v1/chat/completions"

    def generate(self, prompt: str) -> str:
        api_key = self._require_key()
        resp = self._post(
            self.URL,
            {
                "model": self.MODEL,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": TEMPERATURE,
                "max_tokens": MAX_TOKENS,
            },
            headers={"Authorization": f"Bearer {api_key}"},
        )
        if resp.status_code >= 400:
            raise ProviderError(self._error_message(resp, "OpenAI API request failed"))

        message = self._first_object(self._json_object(resp).get("choices")).get("message")
        content = message.get("content") if isinstance(message, dict) else None
        return content or NO_REVIEW_TEXT


class CohereProvider(BaseReviewProvider):
    name = "cohere"
    settings_key = "COHERE_API_KEY"

    MODEL = "command"
    URL = "https://api.cohere.ai/v1/generate"

    def generate(self, prompt: str) -> str:
        api_key = self._require_key()
        resp = self._post(
            self.URL,
            {
                "model": self.MODEL,
                "prompt": f"{SYSTEM_PROMPT}\n\n{prompt}",
                "max_tokens": MAX_TOKENS,
                "temperature": TEMPERATURE,
            },
            headers={"Authorization": f"Bearer {api_key}"},
        )
        if resp.status_code >= 400:
            raise ProviderError(f"Cohere API error: {self._error_message(resp, 'Request failed')}")

        generation = self._first_object(self._json_object(resp).get("generations"))
        return generation.get("text") or NO_REVIEW_TEXT


_PROVIDER_REGISTRY: Dict[str, Type[BaseReviewProvider]] = {}

PROVIDER_PRIORITY: List[str] = ["gemini", "huggingface", "openai", "cohere"]


def register_provider(provider_class: Type[BaseReviewProvider]) -> None:
    _PROVIDER_REGISTRY[provider_class.name] = provider_class


for _cls in (GeminiProvider, HuggingFaceProvider, OpenAIProvider, CohereProvider):
    register_provider(_cls)


def get_provider(name: str) -> BaseReviewProvider:
    """
    Instantiate a provider by name.

    Raises:
        ValueError: If no provider is registered under ``name``.
    """
    try:
        provider_class = _PROVIDER_REGISTRY[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported AI provider: {name}")
    return provider_class()


def select_provider_name() -> Optional[str]:
    """First provider in priority order that has an API key, or None."""
    for name in PROVIDER_PRIORITY:
        if _PROVIDER_REGISTRY[name].is_configured():
            return name
    return None
