"""Prompt composition from style + image analysis, and generation parameter hints."""
from typing import Mapping, Optional, Union

from app.models.analysis import (
    DrawingComplexity,
    EnhancementOptions,
    ImageAnalysis,
    LineWeight,
    MainSubject,
)
from app.models.style import StyleId
from app.services import styles

DEFAULT_OPTIONS = EnhancementOptions()

BACKGROUND_EMPTINESS = 0.6
SPARSE_EMPTINESS = 0.3
VERY_EMPTY = 0.7

# "{s}" is replaced with the style identifier.
SUBJECT_DETAILS: Mapping[MainSubject, str] = {
    MainSubject.tree: "Enhance the tree with detailed {s}-style foliage, textured bark, and natural proportions.",
    MainSubject.person: "Create a detailed {s}-style character with appropriate clothing, facial features, and posture.",
    MainSubject.water: "Render detailed {s}-style water with appropriate reflections, movement, and transparency effects.",
    MainSubject.landscape: "Create a detailed {s}-style landscape with appropriate terrain features, vegetation, and perspective.",
    MainSubject.object: "Enhance the main object with detailed {s}-style textures, lighting, and dimensionality.",
}

TREE_ENVIRONMENT = "Create a cohesive {s}-style natural environment around the tree - "
TREE_CLAUSES: Mapping[StyleId, str] = {
    StyleId.ghibli: "with rolling hills, wildflowers, and a dreamy sky with distinctive clouds.",
    StyleId.anime: "with distinctive anime-style grass, stone path, and dramatic sky with clouds.",
    StyleId.cyberpunk: (
        "contrasting the natural element with futuristic city elements, neon lights, "
        "and technological details."
    ),
}
TREE_CLAUSE_DEFAULT = "with grass, path, other vegetation, and an appropriate sky."

CHARACTER_ENVIRONMENT = "Create a contextually appropriate {s}-style environment for the character - "
CHARACTER_CLAUSES: Mapping[StyleId, str] = {
    StyleId.cyberpunk: "with neon city streets, technological elements, and atmospheric urban details.",
    StyleId.anime: "with natural or urban elements that complement the character.",
    StyleId.ghibli: "with natural or urban elements that complement the character.",
}
CHARACTER_CLAUSE_DEFAULT = "that establishes a clear setting and mood."

WATER_BACKGROUND = (
    "Expand the water into a complete {s}-style aquatic scene with shore, sky, "
    "and complementary elements."
)
GENERIC_BACKGROUND = "Add a contextually appropriate {s}-style background that complements the existing elements."
SPARSE_BACKGROUND = (
    "Enhance the existing elements with a complementary {s}-style background "
    "that creates a complete scene."
)

FILL_EMPTY_SPACES = (
    "Fill all empty white spaces with contextually appropriate {s}-style elements "
    "that complement the drawing."
)
SECONDARY_ELEMENTS = (
    "Add complementary {s}-style details and secondary elements to create a richer scene "
    "while preserving the original drawing's intent."
)

ATMOSPHERE: Mapping[StyleId, str] = {
    StyleId.ghibli: (
        "Add Ghibli's characteristic atmospheric elements - magical particles, "
        "gentle wind effects, and soft lighting."
    ),
    StyleId.anime: (
        "Include anime-style atmospheric effects like light rays, gentle wind patterns, "
        "and subtle environmental particles."
    ),
    StyleId.cyberpunk: (
        "Add cyberpunk atmospheric elements like digital particles, scanning lines, fog, "
        "and multiple colored light sources."
    ),
    StyleId.vangogh: (
        "Include Van Gogh's characteristic swirling sky patterns, dynamic brush movement, "
        "and emotional color contrasts."
    ),
    StyleId.realistic: (
        "Add realistic atmospheric effects like depth haze, natural shadows, "
        "and authentic lighting conditions."
    ),
}
ATMOSPHERE_DEFAULT = "Add appropriate {s}-style atmospheric elements and lighting effects."

# "{colors}" is replaced with the comma separated dominant colours.
EXPRESSIVE_PALETTE = (
    "Use a harmonious color palette building from the drawing's existing colors ({colors}) "
    "with rich, expressive color contrasts."
)
COLOR_GUIDANCE: Mapping[StyleId, str] = {
    StyleId.vangogh: EXPRESSIVE_PALETTE,
    StyleId.oil: EXPRESSIVE_PALETTE,
    StyleId.cyberpunk: (
        "Use a neon-dominated color scheme with blues, purples, and hot pinks that "
        "complements the drawing's existing colors ({colors})."
    ),
}
COLOR_GUIDANCE_DEFAULT = (
    "Use a harmonious color palette that builds from and complements the drawing's "
    "existing colors ({colors})."
)

CONSISTENT_STYLE = "Ensure the entire image maintains a consistent {s} visual style throughout all elements."


def _background_sentence(style: StyleId, analysis: ImageAnalysis) -> Optional[str]:
    s = style.value
    if analysis.emptiness > BACKGROUND_EMPTINESS:
        if analysis.has_tree:
            return TREE_ENVIRONMENT.format(s=s) + TREE_CLAUSES.get(style, TREE_CLAUSE_DEFAULT)
        if analysis.has_person:
            return CHARACTER_ENVIRONMENT.format(s=s) + CHARACTER_CLAUSES.get(
                style, CHARACTER_CLAUSE_DEFAULT
            )
        if analysis.has_water:
            return WATER_BACKGROUND.format(s=s)
        return GENERIC_BACKGROUND.format(s=s)
    if not analysis.has_background and analysis.emptiness > SPARSE_EMPTINESS:
        return SPARSE_BACKGROUND.format(s=s)
    return None


def compose_prompt(
    style: Union[str, StyleId],
    analysis: ImageAnalysis,
    options: Optional[EnhancementOptions] = None,
) -> str:
    """Build the img2img instruction for ``style`` tailored to ``analysis``.

    Fragments are appended in a fixed order (subject detail, background,
    empty-space filling, atmosphere, colour guidance, style consistency)
    after the style's base prompt and joined with single spaces.

    Args:
        style: Style identifier from the catalog.
        analysis: Description of the input sketch.
        options: Which enhancement steps to apply; all enabled by default.

    Returns:
        The composed prompt, always starting with the style's base prompt.

    Raises:
        UnknownStyle: When ``style`` is not in the catalog.
    """
    style_id = styles.resolve(style)
    opts = options or DEFAULT_OPTIONS
    s = style_id.value
    fragments: list[str] = [styles.lookup(style_id)]

    if opts.enhance_details and analysis.main_subject in SUBJECT_DETAILS:
        fragments.append(SUBJECT_DETAILS[analysis.main_subject].format(s=s))

    if opts.enhance_background:
        background = _background_sentence(style_id, analysis)
        if background is not None:
            fragments.append(background)

    if opts.fill_empty_spaces and analysis.emptiness > SPARSE_EMPTINESS:
        fragments.append(FILL_EMPTY_SPACES.format(s=s))
        if analysis.drawing_complexity == DrawingComplexity.simple:
            fragments.append(SECONDARY_ELEMENTS.format(s=s))

    if opts.add_atmospheric_elements:
        fragments.append(ATMOSPHERE.get(style_id, ATMOSPHERE_DEFAULT.format(s=s)))

    if opts.enhance_colors and analysis.dominant_colors:
        colors = ", ".join(analysis.dominant_colors).replace("#", "")
        template = COLOR_GUIDANCE.get(style_id, COLOR_GUIDANCE_DEFAULT)
        fragments.append(template.format(colors=colors))

    if opts.preserve_style:
        fragments.append(CONSISTENT_STYLE.format(s=s))

    return " ".join(fragments)


def recommend_strength(analysis: ImageAnalysis) -> float:
    """Suggest how far the generation may depart from the sketch, in [0.3, 0.9].

    Light lines and simple or very empty drawings get a stronger
    transformation; heavy lines and complex drawings a weaker one.
    """
    strength = 0.7

    if analysis.line_weight == LineWeight.light:
        strength += 0.1
    elif analysis.line_weight == LineWeight.heavy:
        strength -= 0.1

    if analysis.drawing_complexity == DrawingComplexity.simple:
        strength += 0.1
    elif analysis.drawing_complexity == DrawingComplexity.complex:
        strength -= 0.1

    if analysis.emptiness > VERY_EMPTY:
        strength += 0.1

    return min(max(round(strength, 2), 0.3), 0.9)


def recommend_iterations(analysis: ImageAnalysis) -> int:
    """Suggest the number of diffusion iterations for the sketch."""
    iterations = 2

    if analysis.drawing_complexity == DrawingComplexity.simple:
        iterations = 3
    elif analysis.drawing_complexity == DrawingComplexity.complex:
        iterations = 2

    if analysis.emptiness > VERY_EMPTY:
        iterations += 1

    return iterations
