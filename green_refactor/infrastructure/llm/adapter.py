import logging
from typing import Any, Dict, Optional

from green_refactor.infrastructure.llm.backends.base import LLMBackend
from green_refactor.infrastructure.llm.backends.llama_cpp import LlamaCppBackend
from green_refactor.infrastructure.llm.backends.ollama import OllamaBackend
from green_refactor.infrastructure.llm.backends.openai_compat import OpenAICompatBackend
from green_refactor.infrastructure.llm.config import ModelProfile, ModelsConfig
from green_refactor.infrastructure.llm.types import LLMMetadata

logger = logging.getLogger(__name__)


class LLMAdapter:
    """
    Infrastructure-level LLM adapter.

    Responsibilities:
    - load model config
    - select backend
    - lazy backend initialization
    - expose unified metadata and credential status
    """

    def __init__(self, models_config_path: Optional[str] = None, profile_name: Optional[str] = None):
        self.models_config = ModelsConfig(models_config_path)
        self.profile: ModelProfile = self.models_config.get_active_profile(profile_name)

        self._backend: Optional[LLMBackend] = None  # lazy-loaded
        logger.debug("LLMAdapter created for profile %s (lazy init)", self.profile.key)

    def _init_backend(self):
        if self._backend is not None:
            return

        backend_type = self.profile.backend

        if backend_type == "openai_compat":
            self._backend = OpenAICompatBackend(self.profile)
        elif backend_type == "ollama":
            self._backend = OllamaBackend(self.profile)
        elif backend_type == "llama_cpp":
            self._backend = LlamaCppBackend(self.profile)
        else:
            raise ValueError(f"Unsupported backend: {backend_type}")

    @property
    def requires_api_key(self) -> bool:
        return self.profile.requires_api_key

    @property
    def api_key(self) -> Optional[str]:
        return self.profile.api_key

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        """
        Run inference via selected backend.
        """
        self._init_backend()

        params: Dict[str, Any] = self.profile.params
        return self._backend.generate(system_prompt, user_prompt, params)

    @property
    def meta(self) -> LLMMetadata:
        """
        Unified backend metadata.
        """
        self._init_backend()
        return self._backend.meta
