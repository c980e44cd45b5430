"""Style identifiers."""
from enum import Enum


class StyleId(str, Enum):
    """Art styles a sketch can be transformed into."""

    ghibli = "ghibli"
    anime = "anime"
    pixar = "pixar"
    disney = "disney"
    realistic = "realistic"
    watercolor = "watercolor"
    oil = "oil"
    vangogh = "vangogh"
    cyberpunk = "cyberpunk"
