"""
Simulated Reply Generator - canned replies when no backend is reachable.

Used only in simulated mode. Replies quote the user's message, carry
several | delimited segments and an action group, and arrive after an
artificial delay so interactive testing feels like a real backend.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import ActionGroup, CanonicalResponse, CTAButton, Usage, VideoLink
from .normalizer import build_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplyTemplate:
    """One canned reply. ``body`` is formatted with the user's message."""

    body: str
    actions: Tuple[ActionGroup, ...]
    output_tokens: int
    cost: float
    duration_ms: float


REPLY_TEMPLATES: List[ReplyTemplate] = [
    ReplyTemplate(
        body=(
            'I understand you said: "{message}". This is a simulated response for development purposes.'
            "|1. This is a simulated response for part 2 purposes."
            "|2. This is a simulated response for part 3 purposes. More at https://www.w3schools.com"
        ),
        actions=(
            ActionGroup(cta=[
                CTAButton(label="Tell me more", value="more_info"),
                CTAButton(label="Ask another question", value="new_question"),
            ]),
        ),
        output_tokens=50,
        cost=0.001,
        duration_ms=500,
    ),
    ReplyTemplate(
        body=(
            "That's an interesting question about \"{message}\". Here's what I think..."
            "|Additional details about your question with more information."
            "|Final thoughts and recommendations for your consideration."
            "|Here's a bonus tip that might help you further."
        ),
        actions=(
            ActionGroup(
                cta=[
                    CTAButton(label="Learn more", value="learn_more"),
                    CTAButton(label="See examples", value="examples"),
                ],
                video_links=[
                    VideoLink(label="Tutorial Video", url="https://www.youtube.com/watch?v=dQw4w9WgXcQ"),
                    VideoLink(label="Demo Video", url="https://www.youtube.com/watch?v=oHg5SJYRHA0"),
                ],
            ),
        ),
        output_tokens=75,
        cost=0.0015,
        duration_ms=750,
    ),
]


class ReplySimulator:
    """Generates simulated CanonicalResponses.

    Args:
        rng: Random source for template choice and latency (seed it for tests)
        latency_ms: (low, high) artificial delay in milliseconds
        templates: Reply templates to choose from
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        latency_ms: Tuple[float, float] = (500, 1500),
        templates: Optional[List[ReplyTemplate]] = None,
    ):
        self.rng = rng or random.Random()
        self.latency_ms = latency_ms
        self.templates = list(templates or REPLY_TEMPLATES)

    def compose(self, message: str) -> CanonicalResponse:
        """Build a simulated reply without the artificial delay."""
        template = self.rng.choice(self.templates)
        usage = Usage(
            input_tokens=len(message),
            output_tokens=template.output_tokens,
            cost=template.cost,
            duration_ms=template.duration_ms,
            is_estimated=True,
        )
        # Fresh groups per reply so callers never share mutable lists
        actions = [
            ActionGroup(cta=list(g.cta), video_links=list(g.video_links)) for g in template.actions
        ]
        return build_response(template.body.format(message=message), actions, usage, simulated=True)

    async def simulate(self, message: str) -> CanonicalResponse:
        """Build a simulated reply and resolve it after the configured delay."""
        response = self.compose(message)
        lo, hi = self.latency_ms
        delay_ms = self.rng.uniform(lo, hi) if hi > 0 else 0
        logger.debug(f"Simulated reply with {len(response.segments)} segments in {delay_ms:.0f}ms")
        await asyncio.sleep(delay_ms / 1000)
        return response


async def simulate(message: str) -> CanonicalResponse:
    """Simulate a reply using config latency settings."""
    from config import runtime_config

    return await ReplySimulator(latency_ms=runtime_config.sim_latency_ms).simulate(message)
