from typing import Any, Dict

import ollama

from green_refactor.infrastructure.llm.backends.base import (
    LLMBackend,
    chat_messages,
    require_text,
)
from green_refactor.infrastructure.llm.config import ModelProfile
from green_refactor.infrastructure.llm.types import LLMMetadata


class OllamaBackend(LLMBackend):
    """
    Backend for Ollama.

    Characteristics:
    - chat-based
    - supports system prompts and format="json"
    - external daemon (stateless from our side)
    """

    def __init__(self, profile: ModelProfile):
        self.profile = profile
        self.profile_name: str = profile.key
        self.model_name: str = profile.name

        params = profile.params
        self.context_size = params.get("context_size")  # may be None

        # --- client ---
        client_kwargs: Dict[str, Any] = {"timeout": params.get("timeout", 120)}
        api_key = profile.api_key
        if api_key:
            client_kwargs["headers"] = {"Authorization": f"Bearer {api_key}"}
        self.client = ollama.Client(host=profile.base_url, **client_kwargs)

        # --- default generation params ---
        self.default_generation_params: Dict[str, Any] = {
            "temperature": params.get("temperature", 0.1),
            "top_p": params.get("top_p", 0.9),
            "repeat_penalty": params.get("repeat_penalty", 1.1),
            "num_predict": params.get("num_predict", 2048),
        }
        if self.context_size:
            self.default_generation_params["num_ctx"] = self.context_size

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

        response = self.client.chat(
            model=self.model_name,
            messages=chat_messages(system_prompt, user_prompt),
            format="json",
            options=generation_params,
            stream=False,
        )

        return require_text(response["message"]["content"], f"Ollama ({self.model_name})")

    @property
    def meta(self) -> LLMMetadata:
        return {
            "backend": "ollama",
            "model": self.model_name,
            "profile": self.profile_name,
            "context_size": self.context_size,
            "supports_system_prompt": True,
            "supports_json_mode": True,
        }
