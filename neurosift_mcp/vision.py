"""
Plot analysis through a multimodal chat completions endpoint.

The image is inlined as a base64 PNG data URL; one system message and
one user message make up the whole conversation.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Any

import requests

from neurosift_mcp.config import DEFAULT_PLOT_VISION_MODEL

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = DEFAULT_PLOT_VISION_MODEL
MAX_TOKENS = 1000
REFERER = "https://neurosift.app"
NO_ANALYSIS = "No analysis generated"

SYSTEM_PROMPT = (
    "You are an expert at analyzing scientific plots. Your responses will be used by "
    "an AI system to understand whether plots are informative and what information "
    "they convey."
)
USER_PROMPT = (
    "Please provide a very detailed description and analysis of the plot in the image below."
)


def encode_image(path: str | Path) -> str:
    """Read a file as bytes and return it base64-encoded. OSError propagates."""
    data = Path(path).read_bytes()
    return base64.b64encode(data).decode("ascii")


def build_payload(
    image_b64: str,
    additional_instructions: str | None = None,
    model: str = DEFAULT_MODEL,
) -> dict[str, Any]:
    system_prompt = f"{SYSTEM_PROMPT}\n{additional_instructions or ''}"
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/png;base64,{image_b64}"},
                    },
                ],
            },
        ],
        "max_tokens": MAX_TOKENS,
    }


def first_choice_text(data: Any) -> str:
    """Content of choices[0].message, or NO_ANALYSIS when there is none."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    return content or NO_ANALYSIS


class PlotAnalyzer:
    """Sends one plot image to the LLM gateway and returns its description."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        url: str = OPENROUTER_URL,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def analyze(self, image_path: str, additional_instructions: str | None = None) -> str:
        """
        Describe the plot stored at image_path.

        Raises:
            OSError: If the image cannot be read.
            requests.RequestException: If the gateway call fails.
        """
        image_b64 = encode_image(image_path)
        payload = build_payload(image_b64, additional_instructions, model=self.model)

        logger.info(f"Analyzing {image_path} with {self.model}")
        response = self.session.post(
            self.url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "HTTP-Referer": REFERER,
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return first_choice_text(response.json())
