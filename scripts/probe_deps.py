"""
Purpose:
- Sanity-check critical library versions after upgrades.
- Import the exact modules we use and print versions so we can spot drift immediately.
"""

import sys
import fastapi
import uvicorn
import pydantic
import PIL
from google import genai
from app.core.settings import settings

print("python", sys.version)
print("fastapi", fastapi.__version__)
print("uvicorn", uvicorn.__version__)
print("pydantic", pydantic.__version__)
print("pillow", PIL.__version__)
print("google-genai", getattr(genai, "__version__", "unknown"))
print("caption", settings.caption_backend, settings.caption_model)
print("image", settings.image_backend, settings.image_model)
print("api key", "present" if settings.has_api_key else "MISSING")
print("OK")
