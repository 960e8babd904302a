"""
Confetti Maker - Core Utilities
"""

from .config import (
    ConfettiConfig, ShapeMode, DEFAULT_SHAPES, NUMERIC_FIELDS,
    normalize, validate_number, merge_settings, load_settings,
)
from .palette import (
    SolidColor, Gradient, GradientKind, GradientStop, Fill,
    RAINBOW_PALETTE, NEUTRAL_GRAY,
    hsl_to_rgb, hex_to_rgb, parse_fill, parse_gradient,
    resolve_palette, resolve_color_spec,
)
from .shapes import (
    # Shape variants
    Rectangle, Square, Circle, Star, Wave, Emoji, Flag, Custom, Shape,
    ShapeKind, CustomPath, STANDARD_TAGS, REFERENCE_SIZE,
    # Helpers
    make_shape, shape_type, takes_fill, base_size, flatten_path,
)
from .renderer import (
    Renderer, RasterRenderer, RasterFrame, RenderedSequence,
    RenderError, MissingResourceError, BUILTIN_FLAGS,
)
from .exporter import ConfettiExporter
from .presets import (
    ConfettiPreset, PresetManager, BUILTIN_PRESETS,
    get_preset_manager, get_preset, list_presets, save_preset, search_presets,
)
from .preview import (
    PreviewWindow, PreviewConfig, SequencePlayer,
    preview_settings, preview_sequence, check_pygame_available, PYGAME_AVAILABLE,
)

__all__ = [
    # Config
    'ConfettiConfig', 'ShapeMode', 'DEFAULT_SHAPES', 'NUMERIC_FIELDS',
    'normalize', 'validate_number', 'merge_settings', 'load_settings',
    # Colors
    'SolidColor', 'Gradient', 'GradientKind', 'GradientStop', 'Fill',
    'RAINBOW_PALETTE', 'NEUTRAL_GRAY',
    'hsl_to_rgb', 'hex_to_rgb', 'parse_fill', 'parse_gradient',
    'resolve_palette', 'resolve_color_spec',
    # Shapes
    'Rectangle', 'Square', 'Circle', 'Star', 'Wave', 'Emoji', 'Flag', 'Custom', 'Shape',
    'ShapeKind', 'CustomPath', 'STANDARD_TAGS', 'REFERENCE_SIZE',
    'make_shape', 'shape_type', 'takes_fill', 'base_size', 'flatten_path',
    # Rendering
    'Renderer', 'RasterRenderer', 'RasterFrame', 'RenderedSequence',
    'RenderError', 'MissingResourceError', 'BUILTIN_FLAGS',
    'ConfettiExporter',
    # Presets
    'ConfettiPreset', 'PresetManager', 'BUILTIN_PRESETS',
    'get_preset_manager', 'get_preset', 'list_presets', 'save_preset', 'search_presets',
    # Preview
    'PreviewWindow', 'PreviewConfig', 'SequencePlayer',
    'preview_settings', 'preview_sequence', 'check_pygame_available', 'PYGAME_AVAILABLE',
]
