"""
Local Qwen2.5-VL captioner (optional `local` extra):
- bf16 precision
- Accelerate device_map="auto" with explicit max_memory (GPU cap + CPU offload)
- OOM guard with clean CPU fallback
- generate() is blocking, so caption() hops to the threadpool
"""

from __future__ import annotations
from dataclasses import dataclass
from io import BytesIO
import logging
import os

# allocator hint before torch import
os.environ.setdefault("PYTORCH_CUDA_ALLOC_CONF", "expandable_segments:True")

import torch
from PIL import Image, ImageOps
from starlette.concurrency import run_in_threadpool
from ..core.settings import Settings
from ..workflow.state import UploadedImage
from .captioner import caption_image_stub

logger = logging.getLogger(__name__)

@dataclass
class QwenConfig:
    model_id: str
    device: str          # "auto" | "cpu" | "cuda"
    max_new_tokens: int
    temperature: float
    top_p: float
    offload_folder: str
    gpu_max_gb: float
    cpu_max_gb: float

    @classmethod
    def from_settings(cls, cfg: Settings) -> "QwenConfig":
        return cls(
            model_id=cfg.qwen_model_id,
            device=cfg.qwen_device,
            max_new_tokens=cfg.qwen_max_new_tokens,
            temperature=cfg.qwen_temperature,
            top_p=cfg.qwen_top_p,
            offload_folder=str(cfg.qwen_offload_folder),
            gpu_max_gb=float(cfg.qwen_gpu_max_gb),
            cpu_max_gb=float(cfg.qwen_cpu_max_gb),
        )

def _normalize_model_id(mid: str) -> str:
    mid = (mid or "").strip()
    if not mid:
        return "Qwen/Qwen2.5-VL-3B-Instruct"
    if "/" not in mid:
        return "Qwen/" + mid
    return mid

def _max_memory_map(gpu_gb: float, cpu_gb: float) -> dict:
    mm = {"cpu": f"{int(cpu_gb)}GiB"}
    if torch.cuda.is_available() and torch.cuda.device_count() > 0:
        mm[0] = f"{int(gpu_gb)}GiB"   # integer GPU key
    return mm

class QwenCaptioner:
    name = "qwen"

    def __init__(self, cfg: QwenConfig):
        from transformers import AutoProcessor, AutoModelForImageTextToText

        self.cfg = cfg
        model_id = _normalize_model_id(cfg.model_id)
        self.processor = AutoProcessor.from_pretrained(model_id, trust_remote_code=True, use_fast=True)

        os.makedirs(cfg.offload_folder, exist_ok=True)
        load = dict(
            torch_dtype=torch.bfloat16,
            offload_folder=cfg.offload_folder,
            trust_remote_code=True,
        )

        if cfg.device == "cpu" or not torch.cuda.is_available():
            self.model = AutoModelForImageTextToText.from_pretrained(
                model_id, device_map={"": "cpu"}, **load
            ).eval()
            self._device = torch.device("cpu")
            return

        try:
            self.model = AutoModelForImageTextToText.from_pretrained(
                model_id,
                device_map="auto",
                max_memory=_max_memory_map(cfg.gpu_max_gb, cfg.cpu_max_gb),
                **load,
            ).eval()
            self._device = next(self.model.parameters()).device
        except RuntimeError:
            # OOM -> fallback to CPU
            logger.warning("Qwen GPU load failed; retrying on CPU", exc_info=True)
            self.model = AutoModelForImageTextToText.from_pretrained(
                model_id, device_map={"": "cpu"}, **load
            ).eval()
            self._device = torch.device("cpu")

    def _caption_sync(self, image: UploadedImage, instruction: str) -> str:
        with Image.open(BytesIO(image.data)) as raw:
            img = ImageOps.exif_transpose(raw).convert("RGB")

        messages = [
            {
                "role": "user",
                "content": [{"type": "image"}, {"type": "text", "text": instruction}],
            }
        ]
        chat_text = self.processor.apply_chat_template(messages, add_generation_prompt=True)
        inputs = self.processor(images=[img], text=chat_text, return_tensors="pt", padding=True)
        for k, v in inputs.items():
            if hasattr(v, "to"):
                inputs[k] = v.to(self._device)

        with torch.inference_mode():
            gen = self.model.generate(
                **inputs,
                max_new_tokens=self.cfg.max_new_tokens,
                temperature=self.cfg.temperature,
                top_p=self.cfg.top_p,
            )

        # Decode only continuation
        in_ids = inputs.get("input_ids")
        gen_ids = gen[:, in_ids.shape[1]:] if in_ids is not None else gen
        out = self.processor.batch_decode(gen_ids, skip_special_tokens=True)
        text = (out[0] if out else "").strip()
        return text or caption_image_stub(img)

    async def caption(self, image: UploadedImage, instruction: str) -> str:
        return await run_in_threadpool(self._caption_sync, image, instruction)
