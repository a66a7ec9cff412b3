from pathlib import Path
import yaml

from green_refactor.errors import PromptNotFound


PROMPTS_DIR = Path(__file__).parent


class PromptRegistry:
    """
    Loads and renders versioned prompts.
    """

    def __init__(self, base_dir: str | Path = PROMPTS_DIR):
        self.base_dir = Path(base_dir)

    def load(self, relative_path: str) -> dict:
        """
        Example: analysis/v1.yaml
        """
        path = self.base_dir / relative_path

        if not path.exists():
            raise PromptNotFound(f"Prompt not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    def system_prompt(self, relative_path: str) -> str:
        prompt = self.load(relative_path)

        system = prompt.get("system")
        if not system:
            raise ValueError(f"System prompt missing in {relative_path}")

        return system.strip()

    def render(self, relative_path: str, **variables) -> str:
        prompt = self.load(relative_path)

        template = prompt.get("template")
        if template is None:
            raise ValueError(f"Prompt template missing in {relative_path}")

        for key, value in variables.items():
            template = template.replace(f"{{{{ {key} }}}}", value)

        return template
