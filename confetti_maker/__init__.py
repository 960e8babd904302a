"""
Confetti Maker - Procedural confetti layouts and falling-confetti frame sequences
"""

from .core import (
    ConfettiConfig, ShapeMode, normalize, load_settings, merge_settings,
    RasterRenderer, Renderer, RenderedSequence, RenderError, MissingResourceError,
    ConfettiExporter, get_preset, list_presets,
)
from .procedural import (
    Bounds, CancelToken, ChangeKind, GenerationError, SequenceCancelled,
    SequenceOrchestrator, init_pool, restyle, sample_at, render_sequence,
)
from .session import ConfettiSession, GenerationResult, SessionClosed

__version__ = "0.1.0"
__all__ = [
    'ConfettiConfig',
    'ShapeMode',
    'normalize',
    'Bounds',
    'CancelToken',
    'ChangeKind',
    'ConfettiSession',
    'GenerationResult',
    'GenerationError',
    'SequenceCancelled',
    'SessionClosed',
    'Renderer',
    'RasterRenderer',
    'RenderedSequence',
    'RenderError',
    'MissingResourceError',
    'ConfettiExporter',
    'SequenceOrchestrator',
    'init_pool',
    'restyle',
    'sample_at',
    'render_sequence',
    'generate',
    'preview',
]


def _settings(preset: str = None, settings_file: str = None, settings: dict = None) -> dict:
    """Layer preset, settings file and explicit settings (later wins)"""
    layers = []
    if preset:
        found = get_preset(preset)
        if found is None:
            raise ValueError(f"Unknown preset: {preset}")
        layers.append(found.settings)
    if settings_file:
        layers.append(load_settings(settings_file))
    layers.append(settings)
    return merge_settings(*layers)


def generate(
    output_path: str = None,
    format: str = 'gif',
    width: float = 1440,
    height: float = 1024,
    preset: str = None,
    settings_file: str = None,
    seed: int = None,
    renderer: Renderer = None,
    **settings
):
    """
    Generate a falling-confetti frame sequence and optionally export it.

    Args:
        output_path: Where to export (nothing is written if None)
        format: Output format ('gif', 'spritesheet', 'frames')
        width: Frame width in canvas units
        height: Frame height in canvas units
        preset: Name of a preset to start from
        settings_file: YAML file with raw settings, applied over the preset
        seed: Seed for a reproducible layout
        renderer: Renderer to draw with (RasterRenderer by default)
        **settings: Raw settings (amount, zoom, shape_selection, ...);
                    these override preset and file values

    Returns:
        The renderer's output (a RenderedSequence for RasterRenderer), or the
        exported path(s) when output_path is given

    Example:
        generate("party.gif", amount=80, shape_selection=["star", "circle"])
    """
    config = normalize(_settings(preset, settings_file, settings))
    renderer = renderer or RasterRenderer()

    sequence = render_sequence(config, Bounds(width, height), renderer, seed=seed)

    if output_path is None:
        return sequence

    result = ConfettiExporter.export(sequence, output_path, format)
    print(f"Saved: {output_path}")
    return result


def preview(
    width: float = 1440,
    height: float = 1024,
    preset: str = None,
    settings_file: str = None,
    seed: int = None,
    **settings
) -> None:
    """
    Open the live preview window (requires pygame).

    Args:
        width: Frame width in canvas units
        height: Frame height in canvas units
        preset: Name of a preset to start from
        settings_file: YAML file with raw settings
        seed: Seed for the session's random draws
        **settings: Raw settings overriding preset and file values
    """
    from .core.preview import preview_settings

    session = ConfettiSession(bounds=Bounds(width, height), seed=seed)
    preview_settings(session, _settings(preset, settings_file, settings))
