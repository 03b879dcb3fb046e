"""
Purpose:
- Drive one session through upload -> caption -> configure -> generate -> display.
- Caption and image backends are injected so the workflow runs against fakes.

Phases:
    idle -> analyzing -> ready -> generating -> displaying
    analyzing -> error (upload discarded)
    generating -> error (prompt + selection kept)

Notes:
- Generation is all-or-nothing: every selected ratio is requested in parallel,
  we wait for all of them, and any failure drops the whole batch.
- No retries, no timeouts, no cancellation.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional
from ..core.errors import (
    BusyError,
    GenerationGateError,
    InvalidActionError,
)
from ..imagegen.synthesizer import ImageSynthesizer
from ..vlm.captioner import Captioner
from .ratios import AspectRatio
from .state import GeneratedImage, Phase, UploadedImage, WorkflowState

logger = logging.getLogger(__name__)

ANALYZING_MESSAGE = "Analyzing image..."
GENERATING_MESSAGE = "Generating images..."
CAPTION_FAILED = "Failed to generate image description. Please try another image."
GENERATION_FAILED = "Failed to generate images. Please check your prompt or try again."
GATE_FAILED = "Please provide a prompt and select at least one aspect ratio."

class ImageWorkflow:
    def __init__(self, captioner: Captioner, synthesizer: ImageSynthesizer,
                 instruction: str, state: Optional[WorkflowState] = None):
        self.captioner = captioner
        self.synthesizer = synthesizer
        self.instruction = instruction
        self.state = state or WorkflowState()

    # --- guards -------------------------------------------------------------

    def _ensure_idle(self) -> None:
        if self.state.busy:
            raise BusyError(f"Busy: {self.state.loading_message or self.state.phase.value}")

    def _ensure_configurable(self) -> None:
        self._ensure_idle()
        if self.state.image is None:
            raise InvalidActionError("Upload an image first.")

    # --- transitions --------------------------------------------------------

    async def upload(self, image: UploadedImage) -> WorkflowState:
        """
        Start over with a new image and caption it.
        Success lands in READY with the prompt set to the caption verbatim.
        """
        self._ensure_idle()
        s = self.state
        s.phase = Phase.ANALYZING
        s.loading_message = ANALYZING_MESSAGE
        s.error = None
        s.image = image
        s.prompt = ""
        s.results = []
        s.selected = []
        s.fullscreen = None

        try:
            text = await self.captioner.caption(image, self.instruction)
        except Exception:
            logger.exception("caption failed (backend=%s)", getattr(self.captioner, "name", "?"))
            s.image = None
            s.phase = Phase.ERROR
            s.error = CAPTION_FAILED
        else:
            s.prompt = text
            s.phase = Phase.READY
            logger.info("caption ready (%d chars)", len(text))
        finally:
            s.loading_message = ""
        return s

    def set_prompt(self, prompt: str) -> WorkflowState:
        self._ensure_configurable()
        self.state.prompt = prompt
        return self.state

    def toggle_aspect_ratio(self, aspect_ratio: AspectRatio) -> WorkflowState:
        self._ensure_configurable()
        selected = self.state.selected
        if aspect_ratio in selected:
            selected.remove(aspect_ratio)
        else:
            selected.append(aspect_ratio)
        return self.state

    async def generate(self) -> WorkflowState:
        """
        One request per selected ratio, awaited together.
        Any failure -> ERROR with zero results; prompt and selection survive.
        """
        self._ensure_configurable()
        s = self.state
        if not s.prompt.strip() or not s.selected:
            s.error = GATE_FAILED
            raise GenerationGateError(GATE_FAILED)

        ratios = list(s.selected)
        prompt = s.prompt
        s.phase = Phase.GENERATING
        s.loading_message = GENERATING_MESSAGE
        s.error = None
        s.results = []
        s.fullscreen = None

        outcomes = await asyncio.gather(
            *(self.synthesizer.generate(prompt, r) for r in ratios),
            return_exceptions=True,
        )
        failures = [
            (r, o if isinstance(o, BaseException) else TypeError(f"backend returned {type(o).__name__}"))
            for r, o in zip(ratios, outcomes)
            if not isinstance(o, GeneratedImage)
        ]

        s.loading_message = ""
        if failures:
            for ratio, exc in failures:
                logger.error("generation failed for %s", ratio.value, exc_info=exc)
            s.phase = Phase.ERROR
            s.error = GENERATION_FAILED
            return s

        s.results = list(outcomes)
        s.phase = Phase.DISPLAYING
        logger.info("generated %d image(s): %s", len(s.results), ", ".join(r.value for r in ratios))
        return s

    # --- gallery ------------------------------------------------------------

    def open_fullscreen(self, index: int) -> WorkflowState:
        if not 0 <= index < len(self.state.results):
            raise InvalidActionError(f"No generated image at index {index}.")
        self.state.fullscreen = index
        return self.state

    def close_fullscreen(self) -> WorkflowState:
        self.state.fullscreen = None
        return self.state

    def result(self, index: int) -> GeneratedImage:
        if not 0 <= index < len(self.state.results):
            raise InvalidActionError(f"No generated image at index {index}.")
        return self.state.results[index]
