"""
Confetti Exporter - writes rendered sequences to disk
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from .renderer import RenderedSequence

Frames = Union[RenderedSequence, Sequence[np.ndarray]]


def _unpack(frames: Frames, duration: Optional[int]) -> Tuple[List[np.ndarray], int]:
    if isinstance(frames, RenderedSequence):
        return list(frames.frames), duration if duration is not None else frames.delay_ms
    return list(frames), duration if duration is not None else 100


class ConfettiExporter:
    """Exports confetti frames and sequences to various formats"""

    @classmethod
    def to_png(cls, pixels: np.ndarray, path: str | Path) -> Path:
        """Export a single frame to PNG"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        img = Image.fromarray(pixels.astype(np.uint8), 'RGBA')
        img.save(path, 'PNG')

        return path

    @classmethod
    def to_gif(
        cls,
        frames: Frames,
        path: str | Path,
        duration: Optional[int] = None,
        loop: int = 0
    ) -> Path:
        """
        Export frames to an animated GIF.

        The per-frame duration defaults to the sequence's frame delay, so
        the frames play back in generation order at the configured pace.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        pixels, duration = _unpack(frames, duration)
        if not pixels:
            raise ValueError("No frames to export")

        images = []
        for frame in pixels:
            img = Image.fromarray(frame.astype(np.uint8), 'RGBA')
            # Confetti frames are opaque; quantize straight from RGB
            images.append(img.convert('RGB').convert('P', palette=Image.Palette.ADAPTIVE, colors=255))

        images[0].save(
            path,
            save_all=True,
            append_images=images[1:],
            duration=duration,
            loop=loop,
            disposal=2
        )

        return path

    @classmethod
    def to_spritesheet(
        cls,
        frames: Frames,
        path: str | Path,
        columns: Optional[int] = None,
        padding: int = 0
    ) -> Tuple[Path, dict]:
        """
        Export frames to a spritesheet PNG with JSON metadata.

        By default all frames sit side by side in one row, in playback
        order.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        pixels, duration = _unpack(frames, None)
        if not pixels:
            raise ValueError("No frames to export")

        frame_count = len(pixels)
        frame_height, frame_width = pixels[0].shape[:2]

        if columns is None:
            columns = frame_count
        rows = (frame_count + columns - 1) // columns

        sheet_width = columns * (frame_width + padding) - padding
        sheet_height = rows * (frame_height + padding) - padding

        sheet = np.zeros((sheet_height, sheet_width, 4), dtype=np.uint8)

        for i, frame in enumerate(pixels):
            row = i // columns
            col = i % columns
            x = col * (frame_width + padding)
            y = row * (frame_height + padding)
            sheet[y:y+frame_height, x:x+frame_width] = frame

        img = Image.fromarray(sheet, 'RGBA')
        img.save(path, 'PNG')

        metadata = {
            'frames': frame_count,
            'frame_width': frame_width,
            'frame_height': frame_height,
            'frame_delay': duration,
            'columns': columns,
            'rows': rows,
            'padding': padding,
            'sheet_width': sheet_width,
            'sheet_height': sheet_height
        }

        meta_path = path.with_suffix('.json')
        with open(meta_path, 'w') as f:
            json.dump(metadata, f, indent=2)

        return path, metadata

    @classmethod
    def to_frames(
        cls,
        frames: Frames,
        directory: str | Path,
        prefix: str = "frame"
    ) -> List[Path]:
        """Export frames as individual PNGs"""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        pixels, _ = _unpack(frames, None)
        paths = []
        for i, frame in enumerate(pixels):
            frame_path = directory / f"{prefix}_{i:04d}.png"
            cls.to_png(frame, frame_path)
            paths.append(frame_path)

        return paths

    @classmethod
    def export(cls, frames: Frames, path: str | Path, format: str = 'gif') -> Union[Path, List[Path]]:
        """Export in the named format ('gif', 'spritesheet', 'frames')"""
        if format == 'gif':
            return cls.to_gif(frames, path)
        elif format == 'spritesheet':
            sheet_path, _ = cls.to_spritesheet(frames, path)
            return sheet_path
        elif format == 'frames':
            return cls.to_frames(frames, path)
        else:
            raise ValueError(f"Unknown format: {format}")
