"""
Fixing coordinator - bounded repair of schema-invalid model output

Takes the raw text of a structured completion. If it does not validate,
asks a secondary model (distinct from the answer model, with a small
context window) to rewrite it against the schema, up to `retries` times.
"""

import json
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger
from pydantic import BaseModel

from chatter.agents.structured.metrics import record_exhausted, record_fix
from chatter.agents.structured.validator import NormalizedSchemaError, validate_structured
from chatter.config.settings import settings
from chatter.graph.session import Prompt, Session
from chatter.llm.models import STRUCTURED_CAPABILITIES, ModelDescriptor, describe_model
from chatter.utils.errors import ModelClientError, StructuredOutputExhaustedError

T = TypeVar("T", bound=BaseModel)

FIXING_SYSTEM_PROMPT = """You are a JSON repair service. You receive model output that failed to match a JSON schema.

RULES:
- Return ONLY a single JSON object that validates against the schema
- Keep every piece of content from the original output that fits the schema
- Do not invent new content beyond what is needed to satisfy required fields
- Do not wrap the JSON in markdown or add explanations"""


def default_fixing_model() -> ModelDescriptor:
    return describe_model(
        settings.fixing_model,
        capabilities=STRUCTURED_CAPABILITIES,
        temperature=0.0,
        context_length=settings.fixing_context_length,
    )


@dataclass
class FixingOutcome(Generic[T]):
    value: T
    text: str
    repair_calls: int


class FixingCoordinator:
    """
    Validate-and-repair loop shared by every node that returns typed output.

    At most `retries` repair calls are made per `parse` call; each one runs
    as an isolated call on the caller's session so the active prompt is
    untouched afterwards and usage is still counted.
    """

    def __init__(self, client, fixing_model: Optional[ModelDescriptor] = None, retries: Optional[int] = None):
        self.client = client
        self.fixing_model = fixing_model or default_fixing_model()
        self.retries = retries if retries is not None else settings.fixing_max_retries
        if self.retries < 0:
            raise ValueError("retries must be >= 0")

    def _fixing_prompt(self, text: str, schema: Type[T], error: Optional[NormalizedSchemaError]) -> Prompt:
        error_text = error.describe() if error else "Unknown error"
        user_prompt = f"""Fix this output so it matches the JSON schema.

JSON SCHEMA:
{json.dumps(schema.model_json_schema(), indent=2)}

VALIDATION ERRORS:
{error_text}

MALFORMED OUTPUT:
{text}

CORRECTED JSON:"""
        return Prompt(
            messages=(SystemMessage(content=FIXING_SYSTEM_PROMPT), HumanMessage(content=user_prompt)),
            model=self.fixing_model,
        )

    async def parse(self, text: str, schema: Type[T], session: Session, node: str) -> FixingOutcome[T]:
        """
        Validate `text` against `schema`, repairing it if needed.

        Raises:
            StructuredOutputExhaustedError: still invalid after the retry budget
        """
        result = validate_structured(text, schema)
        if result.ok:
            return FixingOutcome(value=result.value, text=text, repair_calls=0)

        last_text = text
        last_error = result.error
        error_type = last_error.error_type
        logger.warning(f"[{node}] Structured output invalid ({error_type.value}), starting repair")

        for attempt in range(1, self.retries + 1):
            logger.info(f"[{node}] Repair attempt {attempt}/{self.retries} with {self.fixing_model.id}")
            with session.isolated_call(self._fixing_prompt(last_text, schema, last_error), label="fixing"):
                try:
                    completion = await self.client.complete(session, structured=True)
                except ModelClientError as e:
                    logger.warning(f"[{node}] Repair call {attempt} failed: {e}")
                    record_fix(error_type, node, success=False, attempt_num=attempt)
                    continue

            last_text = completion.text
            result = validate_structured(last_text, schema)
            if result.ok:
                record_fix(error_type, node, success=True, attempt_num=attempt)
                session.record("structured_output_fixed", node=node, repair_calls=attempt)
                return FixingOutcome(value=result.value, text=last_text, repair_calls=attempt)

            record_fix(error_type, node, success=False, attempt_num=attempt)
            last_error = result.error
            error_type = last_error.error_type

        record_exhausted(node)
        session.record("structured_output_exhausted", node=node, repair_calls=self.retries)
        raise StructuredOutputExhaustedError(
            f"Structured output still invalid after {self.retries} repair attempts",
            last_text=last_text,
            validation_error=last_error.describe() if last_error else None,
            attempts=self.retries,
            node=node,
        )
