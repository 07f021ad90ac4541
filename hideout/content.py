"""
Free-text AI content service.

The Address Locator asks a language model for plausible street addresses
near a point. The model replies in free text that should contain a JSON
payload; parsing and validation happen in the locator.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Protocol

from openai import OpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


class ContentService(Protocol):
    """Anything that turns a prompt into free text."""

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class OpenAIContentService:
    """Thin wrapper around chat completions."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        client: OpenAI | None = None,
    ):
        if client is None:
            if "OPENAI_API_KEY" not in os.environ:
                raise RuntimeError("OPENAI_API_KEY not set in environment")
            client = OpenAI()
        self.client = client
        self.model = model
        self.temperature = temperature

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        content = response.choices[0].message.content
        logger.debug(f"Content service returned {len(content or '')} characters")
        return content or ""


@dataclass
class AddressPrompt:
    """Prompt asking for street addresses near a point."""

    role_description: str = (
        "You are a local geography assistant. You suggest real, existing "
        "street addresses close to a given coordinate."
    )

    # Nearby-address request
    lat: float = 0.0
    lon: float = 0.0
    radius_miles: float = 0.5
    city_name: str = ""
    max_candidates: int = 5

    # One line per prior answer, most recent last
    hints: list[str] = field(default_factory=list)

    response_format: str = """
Respond with a JSON object only:
{"addresses": [{"label": "123 Example St, City", "lat": 0.0, "lon": 0.0}]}
"""

    def build_system_prompt(self) -> str:
        return "\n".join([
            self.role_description,
            f"\n## Response Format\n{self.response_format}",
        ])

    def build_user_prompt(self) -> str:
        sections = [
            f"List up to {self.max_candidates} street addresses within "
            f"{self.radius_miles:g} miles of ({self.lat:.5f}, {self.lon:.5f})."
        ]
        if self.city_name:
            sections.append(f"The point is in or near {self.city_name}.")
        if self.hints:
            sections.append("\n## Known Clues")
            sections.extend(f"- {hint}" for hint in self.hints)
        return "\n".join(sections)
