"""StylizeService: orchestrates one sketch stylization request."""
from typing import TYPE_CHECKING

from app.core.errors import BadRequest, GenerationFailed
from app.core.logging import setup_logging
from app.models.stylize import (
    MAX_ITERATIONS,
    MAX_STRENGTH,
    MIN_ITERATIONS,
    MIN_STRENGTH,
    GenerationRequest,
    StylizeParameters,
    StylizeRequest,
    StylizeResponse,
)
from app.services import styles
from app.services.prompt import compose_prompt, recommend_iterations, recommend_strength
from app.utils.data_url import parse_data_url

if TYPE_CHECKING:
    from app.services.analyzer import ImageAnalyzer
    from app.services.generation import GenerationClient

logger = setup_logging("stylize")


def clamp_iterations(iterations: int) -> int:
    return min(max(iterations, MIN_ITERATIONS), MAX_ITERATIONS)


def clamp_strength(strength: float) -> float:
    return min(max(strength, MIN_STRENGTH), MAX_STRENGTH)


class StylizeService:
    """Orchestrates a single stylization.

    Responsibilities:
    1. Validate the image data URL and style
    2. Analyze the sketch and compose the prompt
    3. Resolve iterations / strength / seed (caller values win over hints)
    4. Clamp parameters and call the generation client once
    5. Return the styled image with the effective parameters

    Holds no per-request state; concurrent calls are independent.
    """

    def __init__(
        self,
        analyzer: "ImageAnalyzer",
        generation_client: "GenerationClient",
    ) -> None:
        self.analyzer = analyzer
        self.generation_client = generation_client

    async def stylize(self, request: StylizeRequest) -> StylizeResponse:
        """Stylize the sketch in ``request``.

        Raises:
            BadRequest: Missing image/style or malformed image data URL.
            UnknownStyle: Style not in the catalog.
            GenerationFailed: The generation client reported a failure.
        """
        # --- 1. Validate ---
        if not request.image_data or not request.style:
            raise BadRequest("Missing image or style")
        style = styles.resolve(request.style)
        mime_type, image_bytes = parse_data_url(request.image_data)

        # --- 2. Analyze + compose ---
        analysis = self.analyzer.analyze(image_bytes)
        prompt = compose_prompt(style, analysis, request.enhancement_options())

        # --- 3. Resolve parameters ---
        iterations = (
            request.iterations if request.iterations is not None else recommend_iterations(analysis)
        )
        strength = request.strength if request.strength is not None else recommend_strength(analysis)
        seed = request.seed if request.seed is not None else await self.generation_client.get_random_seed()

        logger.info(
            "stylize: style=%s subject=%s iterations=%d strength=%.2f seed=%d",
            style.value,
            analysis.main_subject.value,
            iterations,
            strength,
            seed,
            extra={"style": style.value},
        )

        # --- 4. Generate (clamp is unconditional) ---
        result = await self.generation_client.generate(
            GenerationRequest(
                image_bytes=image_bytes,
                mime_type=mime_type,
                prompt=prompt,
                iterations=clamp_iterations(iterations),
                strength=clamp_strength(strength),
                seed=seed,
            )
        )
        if not result.success or result.image_data_url is None:
            raise GenerationFailed(result.error or "Processing failed")

        # --- 5. Respond with pre-clamp parameters ---
        return StylizeResponse(
            styled_image=result.image_data_url,
            original_prompt=prompt,
            parameters=StylizeParameters(iterations=iterations, strength=strength, seed=seed),
            analysis=analysis,
        )
