"""Base provider implementing the Template Method pattern.

All providers share the same structured-generation algorithm:
    generate() → _build_system_prompt(schema)
               → _call_with_retry() → _call_api()   ← only this differs per provider
               → _parse(schema)

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

A reply that does not validate against the schema counts as a failed
attempt, the same as a network error. When every attempt fails the error
propagates: the engine has nothing sensible to post without a model answer.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# Shared defaults; subclasses may override as class attributes if needed.
_MAX_RETRIES = 3
_MAX_TOKENS = 8192

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ProviderError(RuntimeError):
    """Raised when the model could not produce a valid structured response."""


class BaseProvider(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def generate(self, prompt: str, system_prompt: str, schema: type[SchemaT]) -> SchemaT:
        """Return the model's answer to ``prompt`` as an instance of ``schema``."""
        system = self._build_system_prompt(system_prompt, schema)
        last_error: Exception | None = None
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._parse(self._call_api(system, prompt), schema)
            except Exception as e:
                last_error = e
                if attempt == self.MAX_RETRIES - 1:
                    break
                delay = 2**attempt
                logger.warning(
                    "%s request failed (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)

        logger.error("%s failed after %d attempts: %s", self.__class__.__name__, self.MAX_RETRIES, last_error)
        raise ProviderError(
            f"{self.__class__.__name__} could not produce a valid {schema.__name__}: {last_error}"
        ) from last_error

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        It should raise on failure; generate() handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _build_system_prompt(self, system_prompt: str, schema: type[BaseModel]) -> str:
        json_schema = json.dumps(schema.model_json_schema(), indent=2)
        return f"""{system_prompt}

### Output Format:
Respond with **only** a valid JSON object matching this JSON schema:

{json_schema}

Do not return any text outside the JSON object."""

    def _parse(self, raw: str, schema: type[SchemaT]) -> SchemaT:
        # Strip only the outer ```json ... ``` fence the model may wrap the
        # reply in, not backticks inside string values.
        cleaned = re.sub(r"^```(?:json)?\s*", "", (raw or "").strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        try:
            return schema.model_validate_json(cleaned)
        except ValidationError:
            logger.debug("%s: response did not match %s: %s", self.__class__.__name__, schema.__name__, raw[:200])
            raise
