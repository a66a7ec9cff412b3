import logging
from pathlib import Path
from typing import Any, Dict

from green_refactor.infrastructure.llm.backends.base import (
    LLMBackend,
    chat_messages,
    require_text,
)
from green_refactor.infrastructure.llm.config import ModelProfile
from green_refactor.infrastructure.llm.types import LLMMetadata

logger = logging.getLogger(__name__)


class LlamaCppBackend(LLMBackend):
    """
    Backend for llama.cpp.

    Characteristics:
    - local model, loaded into process (once)
    - chat completion with the model's own chat template
    - JSON mode via response_format (grammar-constrained)
    """

    def __init__(self, profile: ModelProfile):
        # Optional dependency: pip install green-refactor[llama]
        from llama_cpp import Llama

        self.profile = profile
        self.profile_name: str = profile.key

        params = profile.params
        self.context_size: int = params.get("n_ctx", 4096)

        model_path = Path(profile.path).expanduser().resolve()
        if not model_path.exists():
            raise FileNotFoundError(f"Model file not found: {model_path}")
        self.model_name: str = profile.name or model_path.name

        logger.info("Loading %s (n_gpu_layers=%s)", model_path.name, params.get("n_gpu_layers", 0))
        self.llm = Llama(
            model_path=str(model_path),
            n_ctx=self.context_size,
            n_gpu_layers=params.get("n_gpu_layers", 0),
            n_batch=params.get("n_batch", 512),
            verbose=params.get("verbose", False),
        )

        self.default_generation_params: Dict[str, Any] = {
            "temperature": params.get("temperature", 0.1),
            "top_p": params.get("top_p", 0.9),
            "repeat_penalty": params.get("repeat_penalty", 1.1),
            "max_tokens": params.get("max_tokens", 2048),
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

        result = self.llm.create_chat_completion(
            messages=chat_messages(system_prompt, user_prompt),
            response_format={"type": "json_object"},
            **generation_params,
        )

        return require_text(result["choices"][0]["message"]["content"], "llama.cpp")

    @property
    def meta(self) -> LLMMetadata:
        return {
            "backend": "llama_cpp",
            "model": self.model_name,
            "profile": self.profile_name,
            "context_size": self.context_size,
            "supports_system_prompt": True,
            "supports_json_mode": True,
        }
