"""Style catalog: base prompt fragment for every supported art style."""
from types import MappingProxyType
from typing import Mapping, Union

from app.core.errors import UnknownStyle
from app.models.style import StyleId

STYLE_PROMPTS: Mapping[StyleId, str] = MappingProxyType({
    StyleId.ghibli: (
        "Create a Studio Ghibli style artwork with Ghibli's characteristic soft colors, "
        "magical atmosphere, and natural elements."
    ),
    StyleId.anime: (
        "Transform this into anime-style digital art with clean lines, vibrant colors, "
        "and characteristic anime stylization."
    ),
    StyleId.pixar: (
        "Create a Pixar-style 3D render with rich texturing, vibrant colors, and Pixar's "
        "characteristic lighting and dimensionality."
    ),
    StyleId.disney: (
        "Transform this into a Disney animation style artwork with Disney's characteristic "
        "expressive features, rich colors, and magical atmosphere."
    ),
    StyleId.realistic: (
        "Create a photorealistic digital painting with natural lighting, detailed textures, "
        "and realistic proportions while maintaining the original composition."
    ),
    StyleId.watercolor: (
        "Transform this into a delicate watercolor painting with characteristic transparency, "
        "soft edges, gentle color bleeding, and visible paper texture."
    ),
    StyleId.oil: (
        "Create an oil painting with rich textures, visible brushstrokes, deep colors, "
        "and classical composition techniques."
    ),
    StyleId.vangogh: (
        "Transform this into Van Gogh's post-impressionist style with swirling patterns, "
        "bold brushwork, emotional color use, and distinctive stroke directionality."
    ),
    StyleId.cyberpunk: (
        "Create a cyberpunk digital artwork with neon lighting, high tech-low life aesthetic, "
        "urban dystopian elements, and digital glitch effects."
    ),
})


def resolve(style: Union[str, StyleId]) -> StyleId:
    """Convert a raw style identifier into a StyleId.

    Raises:
        UnknownStyle: When the identifier is not in the catalog.
    """
    try:
        return StyleId(style)
    except ValueError as exc:
        raise UnknownStyle("Invalid style option") from exc


def lookup(style: Union[str, StyleId]) -> str:
    """Return the base prompt for ``style``.

    Raises:
        UnknownStyle: When the identifier is not in the catalog.
    """
    return STYLE_PROMPTS[resolve(style)]
