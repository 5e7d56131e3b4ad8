"""
Unit tests for SchemaService.

The LLM client is an AsyncMock; retries run through a RetryPolicy whose
sleep only records the requested waits.
"""

import json
from unittest.mock import AsyncMock

import pytest

from json_sage.config import Settings
from json_sage.exceptions import ErrorKind, JsonSageError
from json_sage.history import GenerationHistory
from json_sage.inference import SchemaInferrer
from json_sage.llm.prompt_builder import PromptBuilder
from json_sage.models.schema_models import GenerationOptions
from json_sage.retry.exceptions import ApiError, RetryableError
from json_sage.services.schema_service import SchemaService


GENERATED_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Product name"},
        "price": {"type": "number", "minimum": 0},
    },
    "required": ["name", "price"],
}


@pytest.fixture
def history():
    return GenerationHistory(max_size=50)


@pytest.fixture
def service(mock_llm_client, test_settings, no_wait_policy, history):
    return SchemaService(
        client=mock_llm_client,
        prompt_builder=PromptBuilder(),
        settings=test_settings,
        retry_policy=no_wait_policy,
        history=history,
    )


class TestGenerateSchema:

    @pytest.mark.asyncio
    async def test_returns_generated_schema(self, service, mock_llm_client, chat_response, history):
        mock_llm_client.chat.return_value = chat_response(GENERATED_SCHEMA)

        schema = await service.generate_schema("A product with name and price")

        assert schema == GENERATED_SCHEMA
        mock_llm_client.chat.assert_awaited_once()
        request = mock_llm_client.chat.call_args.args[0]
        assert "A product with name and price" in request.messages[1].content

        records = history.records()
        assert len(records) == 1
        assert records[0].operation == "generate_schema"
        assert records[0].attempts == 1
        assert records[0].success is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("description", ["", "   ", "\n\t"])
    async def test_empty_description_rejected_without_api_call(self, service, mock_llm_client, description):
        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema(description)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        mock_llm_client.chat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_api_key_is_configuration_error(self, mock_llm_client, no_wait_policy):
        settings = Settings(DEEPSEEK_API_KEY="")
        service = SchemaService(mock_llm_client, PromptBuilder(), settings, retry_policy=no_wait_policy)

        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema("A user")

        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        mock_llm_client.chat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_adds_schema_uri_when_missing(self, service, mock_llm_client, chat_response):
        mock_llm_client.chat.return_value = chat_response({"type": "string"})

        schema = await service.generate_schema("A name")

        assert schema == {"$schema": "http://json-schema.org/draft-07/schema#", "type": "string"}

    @pytest.mark.asyncio
    async def test_fenced_output_is_parsed(self, service, mock_llm_client, chat_response):
        mock_llm_client.chat.return_value = chat_response(
            "Here you go:\n```json\n" + json.dumps(GENERATED_SCHEMA) + "\n```"
        )

        assert await service.generate_schema("A product") == GENERATED_SCHEMA

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["this is not json", "[1, 2, 3]", '"just a string"'])
    async def test_non_object_output_is_terminal(self, service, mock_llm_client, chat_response, content, history):
        mock_llm_client.chat.return_value = chat_response(content)

        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema("A product")

        assert exc_info.value.kind is ErrorKind.SCHEMA_GENERATION
        assert mock_llm_client.chat.await_count == 1
        assert history.records()[0].success is False
        assert history.records()[0].error_kind == "schema_generation"

    @pytest.mark.asyncio
    async def test_invalid_generated_schema_is_rejected(self, service, mock_llm_client, chat_response):
        mock_llm_client.chat.return_value = chat_response({"type": "objekt"})

        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema("A product")

        assert exc_info.value.kind is ErrorKind.SCHEMA_GENERATION


class TestRetries:

    @pytest.mark.asyncio
    async def test_gateway_errors_are_retried(self, service, mock_llm_client, chat_response, recorded_sleeps, history):
        mock_llm_client.chat.side_effect = [
            ApiError(502, "Bad Gateway"),
            ApiError(503, "Service Unavailable"),
            chat_response(GENERATED_SCHEMA),
        ]

        schema = await service.generate_schema("A product")

        assert schema == GENERATED_SCHEMA
        assert mock_llm_client.chat.await_count == 3
        assert recorded_sleeps == [1.0, 2.0]
        assert history.records()[0].attempts == 3
        assert history.summary().retried == 1

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried_via_classification(self, service, mock_llm_client, chat_response):
        mock_llm_client.chat.side_effect = [ApiError(429, "Too Many Requests"), chat_response(GENERATED_SCHEMA)]

        assert await service.generate_schema("A product") == GENERATED_SCHEMA
        assert mock_llm_client.chat.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_last_error(self, service, mock_llm_client, history):
        mock_llm_client.chat.side_effect = RetryableError("Network error: connection reset")

        with pytest.raises(RetryableError) as exc_info:
            await service.generate_schema("A product")

        assert exc_info.value.message == "Network error: connection reset"
        assert mock_llm_client.chat.await_count == 3
        record = history.records()[0]
        assert record.success is False
        assert record.attempts == 3
        assert record.error_kind == "RetryableError"

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_retried(self, service, mock_llm_client, recorded_sleeps):
        mock_llm_client.chat.side_effect = ApiError(401, "Authentication Fails")

        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema("A product")

        assert exc_info.value.kind is ErrorKind.AUTHENTICATION
        assert mock_llm_client.chat.await_count == 1
        assert recorded_sleeps == []

    @pytest.mark.asyncio
    async def test_other_api_errors_are_terminal(self, service, mock_llm_client):
        mock_llm_client.chat.side_effect = ApiError(400, "Invalid max_tokens")

        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema("A product")

        assert exc_info.value.kind is ErrorKind.API
        assert exc_info.value.message == "API error: Invalid max_tokens"
        assert mock_llm_client.chat.await_count == 1


class TestGenerateFromData:

    @pytest.mark.asyncio
    async def test_sends_sample_and_baseline(self, service, mock_llm_client, chat_response, sample_order):
        mock_llm_client.chat.return_value = chat_response(GENERATED_SCHEMA)

        schema = await service.generate_schema_from_data(sample_order)

        assert schema == GENERATED_SCHEMA
        user_prompt = mock_llm_client.chat.call_args.args[0].messages[1].content
        assert "ada@example.com" in user_prompt
        assert '"format": "date-time"' in user_prompt

    @pytest.mark.asyncio
    async def test_rejects_non_object_input(self, service, mock_llm_client):
        with pytest.raises(JsonSageError) as exc_info:
            await service.generate_schema_from_data([1, 2, 3])

        assert exc_info.value.kind is ErrorKind.VALIDATION
        mock_llm_client.chat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_respects_requested_draft(self, service, mock_llm_client, chat_response):
        mock_llm_client.chat.return_value = chat_response({"type": "object"})

        schema = await service.generate_schema_from_data({"a": 1}, GenerationOptions(draft="draft-04"))

        assert schema["$schema"] == "http://json-schema.org/draft-04/schema#"


class TestDescriptionsAndExamples:

    @pytest.mark.asyncio
    async def test_field_descriptions(self, service, mock_llm_client, chat_response, history):
        mock_llm_client.chat.return_value = chat_response({
            "name": "Customer full name",
            "address.zip": {"text": "Postal code"},
        })

        descriptions = await service.generate_field_descriptions({"name": "Ada", "address": {"zip": "123"}})

        assert descriptions["name"] == "Customer full name"
        assert descriptions["address.zip"] == '{"text": "Postal code"}'
        request = mock_llm_client.chat.call_args.args[0]
        assert request.temperature == pytest.approx(0.3)
        assert history.records()[0].operation == "generate_field_descriptions"

    @pytest.mark.asyncio
    async def test_examples(self, service, mock_llm_client, chat_response):
        mock_llm_client.chat.return_value = chat_response({"name": "Widget", "price": 9.99})

        examples = await service.generate_examples(GENERATED_SCHEMA)

        assert examples == {"name": "Widget", "price": 9.99}
        request = mock_llm_client.chat.call_args.args[0]
        assert request.temperature == pytest.approx(0.5)


class TestLocalOperations:

    def test_infer_schema_makes_no_api_call(self, service, mock_llm_client):
        schema = service.infer_schema({"a": 1, "b": "x"}, title="Thing")

        assert schema == {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "Thing",
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "string"}},
            "required": ["a", "b"],
        }
        mock_llm_client.chat.assert_not_awaited()

    def test_infer_schema_uses_settings_limits(self, mock_llm_client, test_settings):
        settings = test_settings.model_copy(update={"INFER_SAMPLE_SIZE": 1})
        service = SchemaService(mock_llm_client, PromptBuilder(), settings)

        schema = service.infer_schema({"xs": [1, "two"]})

        assert schema["properties"]["xs"]["items"] == {"type": "integer"}

    def test_custom_inferrer(self, mock_llm_client, test_settings):
        service = SchemaService(
            mock_llm_client, PromptBuilder(), test_settings, inferrer=SchemaInferrer(max_depth=0),
        )
        assert service.infer_schema({"a": {"b": 1}})["properties"]["a"] == {}

    def test_validate_schema_valid(self, service, fixtures_dir):
        schema = json.loads((fixtures_dir / "valid_schema.json").read_text(encoding="utf-8"))

        result = service.validate_schema(schema)

        assert result.valid is True
        assert result.errors == []

    def test_validate_schema_invalid(self, service, fixtures_dir):
        schema = json.loads((fixtures_dir / "invalid_schema.json").read_text(encoding="utf-8"))

        result = service.validate_schema(schema)

        assert result.valid is False
        assert result.error_count == 2
        assert any(error.startswith("type:") for error in result.errors)
        assert any(error.startswith("required:") for error in result.errors)

    def test_validate_data(self, service):
        schema = {
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "integer", "minimum": 0}},
            "required": ["name"],
        }

        assert service.validate_data({"name": "Ada", "age": 36}, schema).valid is True

        result = service.validate_data({"age": -1}, schema)
        assert result.valid is False
        assert result.error_count == 2
        assert "root: 'name' is a required property" in result.errors
        assert any(error.startswith("age:") for error in result.errors)

    def test_validate_data_reports_first_ten_errors(self, service):
        schema = {"type": "array", "items": {"type": "string"}}

        result = service.validate_data(list(range(15)), schema)

        assert result.error_count == 15
        assert len(result.errors) == 10
        assert result.errors[0] == "0: 0 is not of type 'string'"

    def test_validate_data_with_invalid_schema(self, service):
        with pytest.raises(JsonSageError) as exc_info:
            service.validate_data({}, {"type": 12})

        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, service, mock_llm_client):
        async with service:
            pass

        mock_llm_client.close.assert_awaited_once()

    def test_default_collaborators_come_from_settings(self, mock_llm_client, test_settings):
        service = SchemaService(mock_llm_client, PromptBuilder(), test_settings)

        assert service.retry_policy.config.max_retries == test_settings.MAX_RETRIES
        assert service.history.max_size == test_settings.HISTORY_MAX_SIZE
        assert service.inferrer.sample_size == test_settings.INFER_SAMPLE_SIZE

    def test_empty_history_is_kept(self, mock_llm_client, test_settings):
        history = GenerationHistory()
        service = SchemaService(mock_llm_client, PromptBuilder(), test_settings, history=history)
        assert service.history is history
