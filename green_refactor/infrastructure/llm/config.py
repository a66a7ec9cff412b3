"""
Model profiles loader (models.yaml).
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from green_refactor.errors import ModelConfigError

logger = logging.getLogger(__name__)

DEFAULT_MODELS_PATH = "models.yaml"

SUPPORTED_BACKENDS = ("openai_compat", "ollama", "llama_cpp")


class ModelProfile:
    """Model profile with validation."""

    def __init__(self, key: str, config: Dict[str, Any]):
        self.key = key
        self.backend = config.get("backend")
        self.name = config.get("name")
        self.path = config.get("path")
        self.base_url = config.get("base_url")
        self.api_key_env = config.get("api_key_env")
        self.description = config.get("description", "")
        self.params: Dict[str, Any] = dict(config.get("params") or {})

        if not self.backend:
            raise ModelConfigError(f"Profile '{key}': missing 'backend'")
        if self.backend not in SUPPORTED_BACKENDS:
            raise ModelConfigError(
                f"Profile '{key}': unsupported backend '{self.backend}'"
            )

        if self.backend in ("openai_compat", "ollama") and not self.name:
            raise ModelConfigError(
                f"Profile '{key}': backend='{self.backend}' requires 'name'"
            )
        if self.backend == "llama_cpp" and not self.path:
            raise ModelConfigError(f"Profile '{key}': backend='llama_cpp' requires 'path'")

    @property
    def requires_api_key(self) -> bool:
        return bool(self.api_key_env)

    @property
    def api_key(self) -> Optional[str]:
        """Credential from the environment (.env included), None when blank."""
        if not self.api_key_env:
            return None
        value = os.getenv(self.api_key_env, "").strip()
        return value or None

    def __repr__(self):
        return f"<ModelProfile key={self.key} backend={self.backend}>"


class ModelsConfig:
    """Container for all model profiles."""

    def __init__(self, config_path: str | Path | None = None):
        self.config_path = Path(
            config_path or os.getenv("GREEN_REFACTOR_MODELS", DEFAULT_MODELS_PATH)
        )
        self.profiles: Dict[str, ModelProfile] = {}
        self.default_model: str = ""
        self._load()

    def _load(self):
        if not self.config_path.exists():
            raise ModelConfigError(f"Models config not found: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}

        self.default_model = raw_config.get("default_model", "")
        profiles_raw = raw_config.get("profiles") or {}

        if not profiles_raw:
            raise ModelConfigError("No model profiles configured")

        for key, cfg in profiles_raw.items():
            try:
                self.profiles[key] = ModelProfile(key, cfg or {})
            except ModelConfigError as e:
                logger.warning("Skipping invalid profile '%s': %s", key, e)

    def get_active_profile(self, override: Optional[str] = None) -> ModelProfile:
        """Profile named by override, ACTIVE_MODEL_PROFILE or default_model."""
        active_key = override or os.getenv("ACTIVE_MODEL_PROFILE") or self.default_model

        if not active_key:
            raise ModelConfigError(
                "No active model. Set ACTIVE_MODEL_PROFILE in .env "
                "or default_model in models.yaml"
            )

        profile = self.profiles.get(active_key)
        if not profile:
            available = ", ".join(self.profiles.keys())
            raise ModelConfigError(
                f"Profile '{active_key}' not found. Available profiles: {available}"
            )

        return profile

    def list_profiles(self) -> Dict[str, str]:
        return {key: profile.description for key, profile in self.profiles.items()}
