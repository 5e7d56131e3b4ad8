"""
Prompt builder for LLM requests.

Responsible for:
- Loading and rendering the Jinja2 templates shipped in ``json_sage/prompts``
- Truncating sample JSON at a line boundary before embedding it
- Constructing a complete ChatCompletionRequest per task
"""

import json
from pathlib import Path
from typing import Any, Optional
from jinja2 import Environment, FileSystemLoader
import structlog

from json_sage.llm.text_utils import count_tokens_approximate, truncate_at_line_boundary
from json_sage.models.llm_models import ChatCompletionRequest, ChatMessage
from json_sage.models.schema_models import GenerationOptions


logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "prompts"

DESCRIPTIONS_TEMPERATURE = 0.3
EXAMPLES_TEMPERATURE = 0.5


class PromptBuilder:
    """
    Build chat-completion requests for the four generation tasks.

    Every ``build_*`` method returns ``(request, metadata)`` where metadata
    carries prompt size and truncation info for logging.
    """

    def __init__(
        self,
        templates_dir: Path = DEFAULT_TEMPLATES_DIR,
        sample_limit: int = 12000,
        default_model: str = "deepseek-chat",
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
    ):
        """
        Initialize prompt builder.

        Args:
            templates_dir: Directory containing prompt templates
            sample_limit: Max characters of sample JSON embedded in a prompt
            default_model: Default model name
            default_temperature: Default temperature for schema generation
            default_max_tokens: Default max tokens
        """
        self.templates_dir = Path(templates_dir)
        self.sample_limit = sample_limit
        self.default_model = default_model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False  # Prompts, not HTML
        )

        try:
            self.system_template = self.jinja_env.get_template("system_prompt.txt")
            self.description_template = self.jinja_env.get_template("schema_from_description.txt")
            self.data_template = self.jinja_env.get_template("schema_from_data.txt")
            self.field_descriptions_template = self.jinja_env.get_template("field_descriptions.txt")
            self.examples_template = self.jinja_env.get_template("examples.txt")
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e), templates_dir=str(self.templates_dir))
            raise

        logger.debug("PromptBuilder initialized", templates_dir=str(self.templates_dir), sample_limit=sample_limit)

    def build_system_prompt(self, task: str, options: Optional[GenerationOptions] = None) -> str:
        options = options or GenerationOptions()
        return self.system_template.render(
            task=task,
            draft=options.draft,
            include_descriptions=options.include_descriptions,
            include_examples=options.include_examples,
        ).strip()

    def prepare_sample(self, data: Any) -> tuple[str, bool]:
        """
        Serialize data as pretty JSON and truncate it to ``sample_limit``.

        Returns:
            (sample_json, truncated)
        """
        sample_json = json.dumps(data, indent=2, ensure_ascii=False)
        truncated = truncate_at_line_boundary(sample_json, self.sample_limit)
        if len(truncated) < len(sample_json):
            logger.info(
                "Sample JSON truncated",
                original_length=len(sample_json),
                truncated_length=len(truncated),
            )
            return truncated, True
        return sample_json, False

    def build_schema_request(
        self,
        description: str,
        options: Optional[GenerationOptions] = None,
    ) -> tuple[ChatCompletionRequest, dict]:
        """Schema from a natural-language description."""
        options = options or GenerationOptions()
        user_prompt = self.description_template.render(
            description=description.strip(),
            draft=options.draft,
            include_descriptions=options.include_descriptions,
            include_examples=options.include_examples,
        ).strip()
        return self._request("schema_from_description", user_prompt, options)

    def build_schema_from_data_request(
        self,
        data: Any,
        baseline_schema: dict,
        options: Optional[GenerationOptions] = None,
    ) -> tuple[ChatCompletionRequest, dict]:
        """Schema from sample JSON, with the locally inferred baseline embedded."""
        options = options or GenerationOptions()
        sample_json, truncated = self.prepare_sample(data)
        user_prompt = self.data_template.render(
            sample_json=sample_json,
            baseline_schema=json.dumps(baseline_schema, indent=2, ensure_ascii=False),
            truncated=truncated,
            sample_limit=self.sample_limit,
            draft=options.draft,
            include_descriptions=options.include_descriptions,
            include_examples=options.include_examples,
        ).strip()
        return self._request("schema_from_data", user_prompt, options, truncated=truncated)

    def build_field_descriptions_request(self, data: Any) -> tuple[ChatCompletionRequest, dict]:
        sample_json, truncated = self.prepare_sample(data)
        user_prompt = self.field_descriptions_template.render(sample_json=sample_json).strip()
        options = GenerationOptions(temperature=DESCRIPTIONS_TEMPERATURE)
        return self._request("field_descriptions", user_prompt, options, truncated=truncated)

    def build_examples_request(self, schema: dict) -> tuple[ChatCompletionRequest, dict]:
        schema_json = json.dumps(schema, indent=2, ensure_ascii=False)
        user_prompt = self.examples_template.render(schema_json=schema_json).strip()
        options = GenerationOptions(temperature=EXAMPLES_TEMPERATURE)
        return self._request("examples", user_prompt, options)

    def _request(
        self,
        task: str,
        user_prompt: str,
        options: GenerationOptions,
        truncated: bool = False,
    ) -> tuple[ChatCompletionRequest, dict]:
        system_prompt = self.build_system_prompt(task, options)

        request = ChatCompletionRequest(
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=user_prompt),
            ],
            model=self.default_model,
            temperature=options.temperature if options.temperature is not None else self.default_temperature,
            max_tokens=options.max_tokens or self.default_max_tokens,
        )

        metadata = {
            "task": task,
            "prompt_length": len(system_prompt) + len(user_prompt),
            "approx_tokens": count_tokens_approximate(system_prompt + user_prompt),
            "truncation_applied": truncated,
        }
        logger.debug("Built chat request", **metadata)
        return request, metadata
