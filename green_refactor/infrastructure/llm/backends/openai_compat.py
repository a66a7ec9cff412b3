from typing import Any, Dict

from openai import OpenAI

from green_refactor.errors import BackendError
from green_refactor.infrastructure.llm.backends.base import (
    LLMBackend,
    chat_messages,
    require_text,
)
from green_refactor.infrastructure.llm.config import ModelProfile
from green_refactor.infrastructure.llm.types import LLMMetadata


class OpenAICompatBackend(LLMBackend):
    """
    Backend for any OpenAI-compatible chat API (Mistral, OpenAI, ...).

    Characteristics:
    - chat-based, system prompt supported
    - JSON mode via response_format
    - remote service, API key from the environment
    """

    def __init__(self, profile: ModelProfile):
        self.profile = profile
        self.profile_name: str = profile.key
        self.model_name: str = profile.name

        params = profile.params
        self.context_size = params.get("context_size")

        api_key = profile.api_key
        if profile.requires_api_key and not api_key:
            raise BackendError(
                f"Missing API key: environment variable {profile.api_key_env} is not set"
            )

        # --- client ---
        # One request per analysis: no client-side retries.
        self.client = OpenAI(
            api_key=api_key,
            base_url=profile.base_url,
            timeout=params.get("timeout", 60),
            max_retries=0,
        )

        # --- default generation params ---
        self.default_generation_params: Dict[str, Any] = {
            "temperature": params.get("temperature", 0.2),
            "top_p": params.get("top_p", 0.9),
            "max_tokens": params.get("max_tokens", 4096),
        }

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        params: Dict[str, Any] | None = None,
    ) -> str:
        generation_params = {
            **self.default_generation_params,
            **{k: v for k, v in (params or {}).items() if k in self.default_generation_params},
        }

        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=chat_messages(system_prompt, user_prompt),
            response_format={"type": "json_object"},
            **generation_params,
        )

        if not response.choices:
            raise BackendError(f"{self.model_name} returned no choices.")

        return require_text(response.choices[0].message.content, self.model_name)

    @property
    def meta(self) -> LLMMetadata:
        return {
            "backend": "openai_compat",
            "model": self.model_name,
            "profile": self.profile_name,
            "context_size": self.context_size,
            "supports_system_prompt": True,
            "supports_json_mode": True,
        }
