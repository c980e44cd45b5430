"""Image analysis and prompt enhancement data models."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MainSubject(str, Enum):
    """Subject the sketch is mostly about."""

    tree = "tree"
    person = "person"
    landscape = "landscape"
    object = "object"
    water = "water"


class LineWeight(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"


class DrawingComplexity(str, Enum):
    simple = "simple"
    moderate = "moderate"
    complex = "complex"


class ImageAnalysis(BaseModel):
    """Structured description of one sketch, consumed by the prompt composer.

    Serialized in camelCase (``mainSubject``, ``hasTree``, ...) for API clients.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    main_subject: MainSubject
    has_tree: bool
    has_person: bool
    has_water: bool
    has_background: bool
    emptiness: float = Field(..., ge=0.0, lt=1.0)
    line_weight: LineWeight
    drawing_complexity: DrawingComplexity
    dominant_colors: list[str] = Field(..., min_length=1, max_length=3)


class EnhancementOptions(BaseModel):
    """Toggles for the optional prompt enhancement steps."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    enhance_background: bool = True
    fill_empty_spaces: bool = True
    add_atmospheric_elements: bool = True
    preserve_style: bool = True
    enhance_colors: bool = True
    enhance_details: bool = True
