"""
Schema generation service.

Orchestrates the full flow for every operation:
1. Build the chat request (PromptBuilder)
2. Call the client under RetryPolicy, classifying ApiError via handle_api_error
3. Extract and parse the JSON the model returned
4. Check generated schemas against the JSON Schema metaschema
5. Record the call in GenerationHistory

Local operations (infer_schema, validate_schema, validate_data) never touch
the network and need no API key.
"""

import json
import time
from typing import Any, Callable, Iterable, Optional

import structlog
from jsonschema import Draft7Validator, ValidationError
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from json_sage.config import Settings
from json_sage.exceptions import ErrorKind, JsonSageError
from json_sage.history import GenerationHistory, GenerationRecord
from json_sage.inference.inferrer import SchemaInferrer
from json_sage.inference.nodes import to_json_schema
from json_sage.llm.base_client import BaseLLMClient
from json_sage.llm.prompt_builder import PromptBuilder
from json_sage.llm.text_utils import extract_json_block
from json_sage.models.llm_models import ChatCompletionRequest, ChatCompletionResponse
from json_sage.models.schema_models import GenerationOptions, ValidationResult
from json_sage.monitoring.metrics import api_requests_total, inferences_total
from json_sage.retry.classification import handle_api_error
from json_sage.retry.exceptions import ApiError
from json_sage.retry.policy import RetryConfig, RetryPolicy


logger = structlog.get_logger(__name__)

MAX_REPORTED_ERRORS = 10

DRAFT_URIS = {
    "draft-07": "http://json-schema.org/draft-07/schema#",
    "draft-06": "http://json-schema.org/draft-06/schema#",
    "draft-04": "http://json-schema.org/draft-04/schema#",
}


def format_validation_errors(errors: Iterable[ValidationError]) -> list[str]:
    """Format the first errors as ``path: message`` (``root`` for the top level)."""
    formatted = []
    for error in errors:
        if len(formatted) >= MAX_REPORTED_ERRORS:
            break
        path = ".".join(str(p) for p in error.path) if error.path else "root"
        formatted.append(f"{path}: {error.message}")
    return formatted


def _require_object(data: Any) -> None:
    # SchemaInferrer accepts any JSON value; callers here require an object
    if not isinstance(data, dict):
        raise JsonSageError(
            "Input data must be a JSON object",
            kind=ErrorKind.VALIDATION,
            details={"type": type(data).__name__},
        )


class SchemaService:
    """
    High-level schema operations over an LLM client.

    Attributes:
        client: Chat-completion client (never retries by itself)
        prompt_builder: Renders the request for each task
        settings: Application settings (API key, retry and inference limits)
        retry_policy: The single retry boundary for remote calls
        history: Records every remote call
        inferrer: Local schema inference
    """

    def __init__(
        self,
        client: BaseLLMClient,
        prompt_builder: PromptBuilder,
        settings: Settings,
        retry_policy: Optional[RetryPolicy] = None,
        history: Optional[GenerationHistory] = None,
        inferrer: Optional[SchemaInferrer] = None,
    ):
        self.client = client
        self.prompt_builder = prompt_builder
        self.settings = settings
        self.retry_policy = retry_policy or RetryPolicy(
            RetryConfig(
                max_retries=settings.MAX_RETRIES,
                initial_delay_ms=settings.RETRY_INITIAL_DELAY_MS,
                max_delay_ms=settings.RETRY_MAX_DELAY_MS,
            )
        )
        # An empty history is falsy, so compare against None
        self.history = history if history is not None else GenerationHistory(settings.HISTORY_MAX_SIZE)
        self.inferrer = inferrer or SchemaInferrer(
            sample_size=settings.INFER_SAMPLE_SIZE,
            max_depth=settings.INFER_MAX_DEPTH,
        )

    # === Remote operations ===

    async def generate_schema(
        self,
        description: str,
        options: Optional[GenerationOptions] = None,
    ) -> dict[str, Any]:
        """
        Ask the model for a schema matching a natural-language description.

        Raises:
            JsonSageError: VALIDATION for an empty description (no API call),
                CONFIGURATION without an API key, SCHEMA_GENERATION when the
                output is not a valid schema, AUTHENTICATION/API on API errors
            RetryableError: Transient failures that outlived every retry
        """
        if not description or not description.strip():
            raise JsonSageError("Description must not be empty", kind=ErrorKind.VALIDATION)

        options = options or GenerationOptions()
        self.settings.require_api_key()

        request, metadata = self.prompt_builder.build_schema_request(description, options)
        return await self._generate(
            "generate_schema", request, metadata,
            finalize=lambda schema: self._finalize_schema(schema, options),
        )

    async def generate_schema_from_data(
        self,
        data: Any,
        options: Optional[GenerationOptions] = None,
    ) -> dict[str, Any]:
        """
        Infer a baseline locally, then have the model refine it.

        The returned document is checked against the metaschema of the
        requested draft.
        """
        _require_object(data)
        options = options or GenerationOptions()
        self.settings.require_api_key()

        baseline = to_json_schema(self.inferrer.infer_schema(data))
        inferences_total.labels(source="service").inc()

        request, metadata = self.prompt_builder.build_schema_from_data_request(data, baseline, options)
        return await self._generate(
            "generate_schema_from_data", request, metadata,
            finalize=lambda schema: self._finalize_schema(schema, options),
        )

    async def generate_field_descriptions(self, data: Any) -> dict[str, str]:
        """Map of field path -> description, generated at temperature 0.3."""
        _require_object(data)
        self.settings.require_api_key()

        request, metadata = self.prompt_builder.build_field_descriptions_request(data)
        descriptions = await self._generate("generate_field_descriptions", request, metadata)
        return {str(key): value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
                for key, value in descriptions.items()}

    async def generate_examples(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Example document conforming to ``schema``, generated at temperature 0.5."""
        self.settings.require_api_key()

        request, metadata = self.prompt_builder.build_examples_request(schema)
        return await self._generate("generate_examples", request, metadata)

    # === Local operations ===

    def infer_schema(self, data: Any, title: Optional[str] = None) -> dict[str, Any]:
        """Draft-07 schema inferred from ``data`` without any API call."""
        _require_object(data)
        node = self.inferrer.infer_schema(data)
        inferences_total.labels(source="service").inc()
        return to_json_schema(node, title=title)

    def validate_schema(self, schema: Any) -> ValidationResult:
        """Check ``schema`` against the draft-07 metaschema."""
        try:
            Draft7Validator.check_schema(schema)
        except SchemaError as e:
            meta_validator = Draft7Validator(Draft7Validator.META_SCHEMA)
            all_errors = list(meta_validator.iter_errors(schema))
            errors = format_validation_errors(all_errors)
            if not errors:
                path = ".".join(str(p) for p in e.path) if e.path else "root"
                errors = [f"{path}: {e.message}"]
            logger.info("Schema failed metaschema check", error_count=max(len(all_errors), 1))
            return ValidationResult(valid=False, errors=errors, error_count=max(len(all_errors), 1))
        return ValidationResult(valid=True)

    def validate_data(self, data: Any, schema: dict[str, Any]) -> ValidationResult:
        """
        Validate ``data`` against ``schema``.

        Raises:
            JsonSageError: VALIDATION if ``schema`` itself is not a valid schema
        """
        schema_result = self.validate_schema(schema)
        if not schema_result.valid:
            raise JsonSageError(
                "Schema is not a valid draft-07 JSON Schema",
                kind=ErrorKind.VALIDATION,
                details={"errors": schema_result.errors},
            )

        all_errors = list(Draft7Validator(schema).iter_errors(data))
        if all_errors:
            logger.info("Data failed schema validation", error_count=len(all_errors))
            return ValidationResult(
                valid=False,
                errors=format_validation_errors(all_errors),
                error_count=len(all_errors),
            )
        return ValidationResult(valid=True)

    # === Internals ===

    async def _call(self, request: ChatCompletionRequest, counter: list[int]) -> ChatCompletionResponse:
        async def operation() -> ChatCompletionResponse:
            counter[0] += 1
            try:
                return await self.client.chat(request)
            except ApiError as e:
                handle_api_error(e)

        return await self.retry_policy.execute(operation)

    async def _generate(
        self,
        operation: str,
        request: ChatCompletionRequest,
        metadata: dict,
        finalize: Optional[Callable[[dict[str, Any]], dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        """Run one remote call under the retry policy and parse its JSON object."""
        counter = [0]
        start_time = time.time()
        log = logger.bind(operation=operation, model=request.model)
        log.info("Starting generation", **metadata)

        try:
            response = await self._call(request, counter)
            result = self._parse_object(response.content, operation)
            if finalize is not None:
                result = finalize(result)
        except Exception as e:
            latency_ms = int((time.time() - start_time) * 1000)
            error_kind = e.kind.value if isinstance(e, JsonSageError) else type(e).__name__
            self.history.record(GenerationRecord(
                operation=operation,
                model=request.model,
                attempts=max(counter[0], 1),
                latency_ms=latency_ms,
                success=False,
                error_kind=error_kind,
            ))
            api_requests_total.labels(operation=operation, outcome="failure").inc()
            log.error("Generation failed", attempts=counter[0], error=str(e), error_kind=error_kind)
            raise

        latency_ms = int((time.time() - start_time) * 1000)
        self.history.record(GenerationRecord(
            operation=operation,
            model=response.model,
            attempts=counter[0],
            latency_ms=latency_ms,
            success=True,
        ))
        api_requests_total.labels(operation=operation, outcome="success").inc()
        log.info("Generation succeeded", attempts=counter[0], latency_ms=latency_ms)
        return result

    @staticmethod
    def _parse_object(content: str, operation: str) -> dict[str, Any]:
        """Parse model output as a JSON object. Failures are terminal."""
        text = extract_json_block(content)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise JsonSageError(
                "Model output is not valid JSON",
                kind=ErrorKind.SCHEMA_GENERATION,
                details={"operation": operation, "error": str(e), "preview": content[:200]},
            ) from e

        if not isinstance(parsed, dict):
            raise JsonSageError(
                "Model output is not a JSON object",
                kind=ErrorKind.SCHEMA_GENERATION,
                details={"operation": operation, "type": type(parsed).__name__},
            )
        return parsed

    def _finalize_schema(self, schema: dict[str, Any], options: GenerationOptions) -> dict[str, Any]:
        if "$schema" not in schema:
            schema = {"$schema": DRAFT_URIS[options.draft], **schema}

        validator_cls = validator_for(schema, default=Draft7Validator)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as e:
            raise JsonSageError(
                "Generated schema is not a valid JSON Schema",
                kind=ErrorKind.SCHEMA_GENERATION,
                details={"error": e.message},
            ) from e
        return schema

    async def close(self):
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
