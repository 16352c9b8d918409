from .backdrop import BackdropLink
from .canvas import Bounds, Canvas, ImageElement, Positionable, RectElement, Renderable, Scalable, TextElement
from .composer import AdComposer, ComposerState, Layer, compose_ad, place_cover_image
from .templates import BUILT_IN_TEMPLATES, get_template
from .text_fit import apply_casing, estimate_text_width, fit_to_height, trim_to_height

__all__ = [
    "AdComposer",
    "ComposerState",
    "Layer",
    "compose_ad",
    "place_cover_image",
    "BackdropLink",
    "Canvas",
    "Bounds",
    "TextElement",
    "RectElement",
    "ImageElement",
    "Positionable",
    "Scalable",
    "Renderable",
    "BUILT_IN_TEMPLATES",
    "get_template",
    "apply_casing",
    "estimate_text_width",
    "fit_to_height",
    "trim_to_height",
]
