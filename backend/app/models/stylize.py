"""Stylization request/response models."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.analysis import EnhancementOptions, ImageAnalysis

MIN_ITERATIONS = 1
MAX_ITERATIONS = 5
MIN_STRENGTH = 0.1
MAX_STRENGTH = 1.0


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StylizeRequest(_CamelModel):
    """Body of ``POST /api/stylize``.

    ``image_data`` and ``style`` are optional at the schema level so that a
    missing field is answered by the service with a 400, not a 422.
    """

    image_data: Optional[str] = None
    style: Optional[str] = None
    iterations: Optional[int] = None
    # NaN and infinity would slip through clamping
    strength: Optional[float] = Field(None, allow_inf_nan=False)
    seed: Optional[int] = None
    enhance_background: bool = True
    fill_empty_spaces: bool = True
    add_atmospheric_elements: bool = True
    preserve_style: bool = True
    enhance_colors: bool = True
    enhance_details: bool = True

    def enhancement_options(self) -> EnhancementOptions:
        return EnhancementOptions(
            enhance_background=self.enhance_background,
            fill_empty_spaces=self.fill_empty_spaces,
            add_atmospheric_elements=self.add_atmospheric_elements,
            preserve_style=self.preserve_style,
            enhance_colors=self.enhance_colors,
            enhance_details=self.enhance_details,
        )


class StylizeParameters(_CamelModel):
    """Effective generation parameters reported back to the caller (pre-clamp)."""

    iterations: int
    strength: float
    seed: int


class StylizeResponse(_CamelModel):
    """Successful response of ``POST /api/stylize``."""

    success: bool = True
    styled_image: str
    original_prompt: str
    parameters: StylizeParameters
    analysis: ImageAnalysis


class ErrorResponse(BaseModel):
    """Uniform error body."""

    success: bool = False
    error: str


class CancelResponse(BaseModel):
    success: bool = True
    message: str


class StylesResponse(BaseModel):
    success: bool = True
    styles: list[str]


class GenerationRequest(BaseModel):
    """Everything sent to the hosted img2img model for one request."""

    image_bytes: bytes
    mime_type: str = "image/png"
    prompt: str
    iterations: int = Field(..., ge=MIN_ITERATIONS, le=MAX_ITERATIONS)
    strength: float = Field(..., ge=MIN_STRENGTH, le=MAX_STRENGTH)
    seed: int


class GenerationResult(BaseModel):
    """Outcome of one generation call: an image data URL or an error message."""

    success: bool
    image_data_url: Optional[str] = None
    image_url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, image_data_url: str, image_url: Optional[str] = None) -> "GenerationResult":
        return cls(success=True, image_data_url=image_data_url, image_url=image_url)

    @classmethod
    def failure(cls, error: str, error_kind: str) -> "GenerationResult":
        return cls(success=False, error=error, error_kind=error_kind)
