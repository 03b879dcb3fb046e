"""
Workflow state machine: upload -> caption -> configure -> generate -> display.
"""

import anyio
import pytest

from app.core.errors import BusyError, GenerationGateError, InvalidActionError
from app.workflow.machine import (
    CAPTION_FAILED,
    GATE_FAILED,
    GENERATION_FAILED,
    ImageWorkflow,
)
from app.workflow.ratios import AspectRatio
from app.workflow.state import GeneratedImage, Phase

from conftest import FakeCaptioner, FakeSynthesizer

pytestmark = pytest.mark.anyio


class GatedSynthesizer:
    """Holds every call until `release` is set; flags once all have started."""

    name = "gated"

    def __init__(self, expected):
        self.expected = expected
        self.started = 0
        self.all_started = anyio.Event()
        self.release = anyio.Event()

    async def generate(self, prompt, aspect_ratio):
        self.started += 1
        if self.started == self.expected:
            self.all_started.set()
        await self.release.wait()
        return GeneratedImage(aspect_ratio=aspect_ratio, data=b"jpeg")


async def _ready(workflow, uploaded, *ratios):
    await workflow.upload(uploaded)
    for r in ratios:
        workflow.toggle_aspect_ratio(r)
    return workflow.state


class TestUpload:
    async def test_caption_becomes_prompt_verbatim(self, workflow, uploaded, captioner):
        captioner.text = "  Exactly this text, trailing spaces included.  \n"
        state = await workflow.upload(uploaded)
        assert state.phase is Phase.READY
        assert state.prompt == captioner.text
        assert state.image is uploaded
        assert state.error is None
        assert state.loading_message == ""

    async def test_instruction_is_forwarded(self, workflow, uploaded, captioner):
        await workflow.upload(uploaded)
        assert captioner.calls == [(uploaded, "describe it")]

    async def test_caption_failure_discards_upload(self, uploaded, synthesizer):
        wf = ImageWorkflow(FakeCaptioner(fail=True), synthesizer, instruction="x")
        state = await wf.upload(uploaded)
        assert state.phase is Phase.ERROR
        assert state.error == CAPTION_FAILED
        assert state.image is None
        assert state.prompt == ""

    async def test_new_upload_clears_previous_run(self, workflow, uploaded):
        await _ready(workflow, uploaded, AspectRatio.SQUARE)
        await workflow.generate()
        workflow.open_fullscreen(0)

        state = await workflow.upload(uploaded)
        assert state.selected == []
        assert state.results == []
        assert state.fullscreen is None
        assert state.phase is Phase.READY

    async def test_retry_after_caption_failure(self, uploaded, synthesizer):
        cap = FakeCaptioner(fail=True)
        wf = ImageWorkflow(cap, synthesizer, instruction="x")
        await wf.upload(uploaded)
        cap.fail = False
        state = await wf.upload(uploaded)
        assert state.phase is Phase.READY
        assert state.error is None

    async def test_configuring_without_image_is_rejected(self, workflow):
        with pytest.raises(InvalidActionError):
            workflow.toggle_aspect_ratio(AspectRatio.SQUARE)
        with pytest.raises(InvalidActionError):
            workflow.set_prompt("hello")


class TestAspectRatioToggle:
    async def test_toggle_twice_restores_selection(self, workflow, uploaded):
        await _ready(workflow, uploaded, AspectRatio.LANDSCAPE)
        before = set(workflow.state.selected)
        workflow.toggle_aspect_ratio(AspectRatio.PORTRAIT)
        workflow.toggle_aspect_ratio(AspectRatio.PORTRAIT)
        assert set(workflow.state.selected) == before

        workflow.toggle_aspect_ratio(AspectRatio.LANDSCAPE)
        workflow.toggle_aspect_ratio(AspectRatio.LANDSCAPE)
        assert set(workflow.state.selected) == before

    async def test_selection_keeps_click_order(self, workflow, uploaded):
        state = await _ready(workflow, uploaded, AspectRatio.STANDARD, AspectRatio.SQUARE)
        assert state.selected == [AspectRatio.STANDARD, AspectRatio.SQUARE]


class TestGenerate:
    async def test_one_call_per_ratio_and_tagged_results(self, workflow, uploaded, synthesizer):
        ratios = [AspectRatio.SQUARE, AspectRatio.LANDSCAPE, AspectRatio.PORTRAIT_3_4]
        await _ready(workflow, uploaded, *ratios)
        state = await workflow.generate()

        assert state.phase is Phase.DISPLAYING
        assert sorted(r.value for _, r in synthesizer.calls) == sorted(r.value for r in ratios)
        assert all(p == state.prompt for p, _ in synthesizer.calls)
        assert [img.aspect_ratio for img in state.results] == ratios

    async def test_empty_prompt_blocks_generation(self, workflow, uploaded, synthesizer):
        await _ready(workflow, uploaded, AspectRatio.SQUARE)
        workflow.set_prompt("   ")
        with pytest.raises(GenerationGateError):
            await workflow.generate()
        assert synthesizer.calls == []
        assert workflow.state.error == GATE_FAILED
        assert workflow.state.phase is Phase.READY

    async def test_no_ratio_blocks_generation(self, workflow, uploaded, synthesizer):
        await _ready(workflow, uploaded)
        with pytest.raises(GenerationGateError):
            await workflow.generate()
        assert synthesizer.calls == []

    async def test_any_failure_shows_nothing(self, uploaded, captioner):
        synth = FakeSynthesizer(fail_for={"9:16"})
        wf = ImageWorkflow(captioner, synth, instruction="x")
        await _ready(wf, uploaded, AspectRatio.SQUARE, AspectRatio.PORTRAIT, AspectRatio.STANDARD)

        state = await wf.generate()
        assert len(synth.calls) == 3
        assert state.phase is Phase.ERROR
        assert state.results == []
        assert state.error == GENERATION_FAILED
        # retry without re-uploading
        assert state.image is uploaded
        assert state.selected == [AspectRatio.SQUARE, AspectRatio.PORTRAIT, AspectRatio.STANDARD]

    async def test_retry_after_generation_failure(self, uploaded, captioner):
        synth = FakeSynthesizer(fail_for={"1:1"})
        wf = ImageWorkflow(captioner, synth, instruction="x")
        await _ready(wf, uploaded, AspectRatio.SQUARE)
        await wf.generate()

        synth.fail_for.clear()
        wf.set_prompt("a blue bicycle")
        state = await wf.generate()
        assert state.phase is Phase.DISPLAYING
        assert state.error is None
        assert synth.calls[-1][0] == "a blue bicycle"

    async def test_ratio_calls_run_concurrently(self, uploaded, captioner):
        ratios = [AspectRatio.SQUARE, AspectRatio.LANDSCAPE, AspectRatio.PORTRAIT]
        synth = GatedSynthesizer(expected=len(ratios))
        wf = ImageWorkflow(captioner, synth, instruction="x")
        await _ready(wf, uploaded, *ratios)

        async with anyio.create_task_group() as tg:
            tg.start_soon(wf.generate)
            # a sequential loop would park on the first call and never get here
            with anyio.fail_after(2):
                await synth.all_started.wait()
            assert synth.started == len(ratios)
            assert wf.state.phase is Phase.GENERATING
            assert wf.state.results == []
            synth.release.set()

        assert wf.state.phase is Phase.DISPLAYING
        assert [img.aspect_ratio for img in wf.state.results] == ratios

    async def test_wrong_result_type_counts_as_failure(self, uploaded, captioner):
        class OddSynthesizer(FakeSynthesizer):
            async def generate(self, prompt, aspect_ratio):
                if aspect_ratio is AspectRatio.STANDARD:
                    return b"raw bytes, not a GeneratedImage"
                return await super().generate(prompt, aspect_ratio)

        wf = ImageWorkflow(captioner, OddSynthesizer(), instruction="x")
        await _ready(wf, uploaded, AspectRatio.SQUARE, AspectRatio.STANDARD)
        state = await wf.generate()
        assert state.phase is Phase.ERROR
        assert state.results == []
        assert state.error == GENERATION_FAILED

    async def test_rerun_replaces_results(self, workflow, uploaded):
        await _ready(workflow, uploaded, AspectRatio.SQUARE, AspectRatio.LANDSCAPE)
        first = list((await workflow.generate()).results)

        workflow.toggle_aspect_ratio(AspectRatio.LANDSCAPE)
        second = (await workflow.generate()).results
        assert len(second) == 1
        assert second[0].aspect_ratio is AspectRatio.SQUARE
        assert second[0] not in first

    async def test_busy_rejects_actions(self, workflow, uploaded):
        await _ready(workflow, uploaded, AspectRatio.SQUARE)
        workflow.state.phase = Phase.GENERATING
        with pytest.raises(BusyError):
            workflow.toggle_aspect_ratio(AspectRatio.LANDSCAPE)
        with pytest.raises(BusyError):
            await workflow.upload(uploaded)


class TestFullscreen:
    async def test_open_and_close(self, workflow, uploaded):
        await _ready(workflow, uploaded, AspectRatio.SQUARE, AspectRatio.LANDSCAPE)
        await workflow.generate()
        assert workflow.open_fullscreen(1).fullscreen == 1
        assert workflow.close_fullscreen().fullscreen is None

    async def test_out_of_range(self, workflow):
        with pytest.raises(InvalidActionError):
            workflow.open_fullscreen(0)

    async def test_new_run_closes_fullscreen(self, workflow, uploaded):
        await _ready(workflow, uploaded, AspectRatio.SQUARE)
        await workflow.generate()
        workflow.open_fullscreen(0)
        assert (await workflow.generate()).fullscreen is None
