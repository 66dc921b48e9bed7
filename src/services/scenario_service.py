"""Scenario authoring with Gemini via Google GenAI."""

import json
import logging

from google.genai import Client
from google.genai import types

from models.slide import Scenario
from services.prompts import strip_markdown_code_blocks
from services.prompts.scenario import SCENARIO_GENERATOR_V1
from utils.errors import ExternalToolError

logger = logging.getLogger(__name__)


class ScenarioError(ExternalToolError):
    """The model answered, but not with a usable scenario."""

    pass


class ScenarioService:
    """Generates slide scenarios from a theme using Gemini."""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", client=None):
        """Initialize Google GenAI client.

        Args:
            api_key: Google GenAI API key
            model_name: Gemini model to use
            client: Pre-built client (tests inject a fake here)
        """
        self.model_name = model_name
        self.client = client or Client(api_key=api_key)
        logger.info(f"Initialized scenario service with model: {model_name}")

    def generate(
        self,
        theme: str,
        slide_count: int = 5,
        slide_duration: float = 5.0,
        narration_language: str = "Russian",
    ) -> Scenario:
        """Ask Gemini for a scenario.

        Raises:
            ExternalToolError: If the API call fails
            ScenarioError: If the response is not a valid scenario
        """
        logger.info(f"Generating scenario: theme='{theme[:60]}', slides={slide_count}")

        prompt = SCENARIO_GENERATOR_V1.format(
            theme=theme,
            slide_count=slide_count,
            slide_duration=slide_duration,
            total_duration=slide_count * slide_duration,
            language=narration_language,
        )

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=0.9,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            raise ExternalToolError(f"Gemini request failed: {e}") from e

        if not response.text:
            raise ScenarioError("Empty AI response for scenario generation")

        scenario = self.parse_scenario(response.text)
        if len(scenario.slides) != slide_count:
            logger.warning(
                f"Requested {slide_count} slides, model returned {len(scenario.slides)}"
            )

        logger.info(f"Scenario generated: {len(scenario.slides)} slides")
        return scenario

    @staticmethod
    def parse_scenario(text: str) -> Scenario:
        """Parse a scenario from raw model output (markdown fences allowed).

        Raises:
            ScenarioError: If the text is not JSON or does not match the schema
        """
        cleaned = strip_markdown_code_blocks(text)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.debug(f"Raw response: {text[:500]}")
            raise ScenarioError(f"Failed to parse scenario JSON: {e}") from e

        try:
            return Scenario.from_dict(data)
        except ValueError as e:
            raise ScenarioError(f"Invalid scenario: {e}") from e
