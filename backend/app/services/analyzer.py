"""Content analysis of input sketches."""
import abc
import random
from typing import Optional

from app.models.analysis import (
    DrawingComplexity,
    ImageAnalysis,
    LineWeight,
    MainSubject,
)

PLACEHOLDER_COLORS = ("#336699", "#993366", "#669933")


class ImageAnalyzer(abc.ABC):
    """Describes a sketch so the prompt composer can tailor its instructions.

    Real implementations (e.g. a vision model call) should raise
    ``AnalysisFailed`` when the image cannot be read.
    """

    @abc.abstractmethod
    def analyze(self, image_bytes: bytes) -> ImageAnalysis:
        """Return a structured description of ``image_bytes``."""


class RandomImageAnalyzer(ImageAnalyzer):
    """Placeholder analyzer returning plausible random values.

    The image is never inspected; every field is drawn independently on each
    call. Pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def analyze(self, image_bytes: bytes) -> ImageAnalysis:
        rng = self._rng
        return ImageAnalysis(
            main_subject=rng.choice(list(MainSubject)),
            has_tree=rng.random() > 0.7,
            has_person=rng.random() > 0.6,
            has_water=rng.random() > 0.8,
            has_background=rng.random() > 0.5,
            emptiness=rng.random() * 0.8,
            line_weight=rng.choice(list(LineWeight)),
            drawing_complexity=rng.choice(list(DrawingComplexity)),
            dominant_colors=list(PLACEHOLDER_COLORS[: rng.randint(1, len(PLACEHOLDER_COLORS))]),
        )
