"""
Confetti Configuration - validation and normalization of raw settings.

normalize() never fails: every malformed, non-numeric or out-of-range value
is replaced by the documented default, so the engine always receives a
usable configuration.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .shapes import CustomPath, STANDARD_TAGS


class ShapeMode(Enum):
    """Which family of shapes the selection refers to"""
    STANDARD = "standard"
    EMOJI = "emoji"
    FLAG = "flag"

    @classmethod
    def parse(cls, value: Any) -> 'ShapeMode':
        if isinstance(value, cls):
            return value
        text = str(value or '').strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        return cls.STANDARD


# name -> (min, max, default)
NUMERIC_FIELDS: Dict[str, Tuple[float, float, float]] = {
    'randomness': (0, 100, 60),
    'amount': (0, 100, 60),
    'zoom': (10, 50, 10),
    'flutter': (0, 100, 50),
    'frame_count': (1, 100, 10),
    'frame_delay': (1, 5000, 50),
}

INTEGER_FIELDS = ('frame_count', 'frame_delay')

DEFAULT_SHAPES: Dict[ShapeMode, Tuple[str, ...]] = {
    ShapeMode.STANDARD: ('rectangle', 'square', 'circle', 'star'),
    ShapeMode.EMOJI: ('🎉', '🎊', '✨', '🥳', '⭐'),
    ShapeMode.FLAG: ('fr', 'de', 'it', 'nl', 'ua', 'jp'),
}

# UI message keys -> canonical field names
_ALIASES = {
    'randomizeSize': 'randomize_size',
    'randomizeRotation': 'randomize_rotation',
    'shapeMode': 'shape_mode',
    'shapeSelection': 'shape_selection',
    'selectedShapes': 'shape_selection',
    'shapes': 'shape_selection',
    'colorSpec': 'color_spec',
    'colorData': 'color_spec',
    'colors': 'color_spec',
    'frameCount': 'frame_count',
    'frames': 'frame_count',
    'frameDelay': 'frame_delay',
    'delay': 'frame_delay',
    'customShapePath': 'custom_shape',
    'customShape': 'custom_shape',
}


@dataclass(frozen=True)
class ConfettiConfig:
    """Canonical, validated confetti configuration"""
    randomness: float = 60.0
    amount: float = 60.0
    zoom: float = 10.0
    flutter: float = 50.0
    randomize_size: bool = False
    randomize_rotation: bool = False
    shape_mode: ShapeMode = ShapeMode.STANDARD
    shape_selection: Tuple[str, ...] = DEFAULT_SHAPES[ShapeMode.STANDARD]
    color_spec: Union[str, Tuple[Any, ...]] = 'multi'
    frame_count: int = 10
    frame_delay: int = 50
    custom_shape: Optional[CustomPath] = None
    seed: Optional[int] = None

    @property
    def is_multicolor(self) -> bool:
        return self.color_spec == 'multi'

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form suitable for YAML/JSON"""
        data = asdict(self)
        data['shape_mode'] = self.shape_mode.value
        data['shape_selection'] = list(self.shape_selection)
        data['color_spec'] = self.color_spec if self.is_multicolor else list(self.color_spec)
        if self.custom_shape is not None:
            data['custom_shape'] = {
                'path': self.custom_shape.data,
                'viewbox': list(self.custom_shape.viewbox),
            }
        return data

    def layout_key(self) -> Tuple[Any, ...]:
        """Settings whose change requires a brand new particle pool"""
        return (
            self.amount, self.shape_mode, self.shape_selection,
            self.frame_count, self.custom_shape,
        )


def validate_number(value: Any, min_val: float, max_val: float, default: float) -> float:
    """Parse a real number; fall back to default when unparsable or out of range"""
    if isinstance(value, bool):
        return default
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(num) or num < min_val or num > max_val:
        return default
    return num


def _canonical_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    data = {}
    for key, value in raw.items():
        name = _ALIASES.get(key, key)
        # Canonical spelling wins over an alias
        if name in data and key != name:
            continue
        data[name] = value
    return data


def _normalize_color_spec(raw: Any) -> Union[str, Tuple[Any, ...]]:
    if raw is None or raw == 'multi':
        return 'multi'
    if isinstance(raw, dict) and ('isMultiColor' in raw or 'customColors' in raw):
        if raw.get('isMultiColor') is True:
            return 'multi'
        raw = raw.get('customColors') or []
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, (list, tuple)):
        return tuple(raw)
    return 'multi'


def _normalize_selection(
    raw: Any, mode: ShapeMode, custom_shape: Optional[CustomPath]
) -> Tuple[str, ...]:
    if isinstance(raw, str):
        raw = raw.replace(',', ' ').split() if mode is ShapeMode.STANDARD else [raw]
    if not isinstance(raw, (list, tuple)) or len(raw) == 0:
        return DEFAULT_SHAPES[mode]

    selection = [str(item).strip() for item in raw if str(item).strip()]
    if not selection:
        return DEFAULT_SHAPES[mode]

    if mode is ShapeMode.STANDARD:
        selection = [tag.lower() for tag in selection]
        selection = [
            tag for tag in selection
            if tag in STANDARD_TAGS and (tag != 'custom' or custom_shape is not None)
        ]
    return tuple(selection)


def normalize(raw: Union[None, Dict[str, Any], ConfettiConfig] = None) -> ConfettiConfig:
    """
    Validate raw settings into a canonical ConfettiConfig.

    Args:
        raw: Mapping of settings (snake_case or UI camelCase keys), an
             existing config, or None for all defaults

    Returns:
        A usable configuration. This function never raises.
    """
    if isinstance(raw, ConfettiConfig):
        return raw
    if not isinstance(raw, dict):
        raw = {}

    data = _canonical_keys(raw)
    values: Dict[str, Any] = {}

    for name, (min_val, max_val, default) in NUMERIC_FIELDS.items():
        number = validate_number(data.get(name), min_val, max_val, default)
        values[name] = int(number) if name in INTEGER_FIELDS else float(number)

    values['randomize_size'] = data.get('randomize_size') is True
    values['randomize_rotation'] = data.get('randomize_rotation') is True

    mode = ShapeMode.parse(data.get('shape_mode'))
    custom_shape = CustomPath.from_raw(data.get('custom_shape'))
    values['shape_mode'] = mode
    values['custom_shape'] = custom_shape
    values['shape_selection'] = _normalize_selection(data.get('shape_selection'), mode, custom_shape)
    values['color_spec'] = _normalize_color_spec(data.get('color_spec'))

    seed = data.get('seed')
    values['seed'] = seed if isinstance(seed, int) and not isinstance(seed, bool) else None

    return ConfettiConfig(**values)


def merge_settings(*layers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge raw settings mappings; later layers override earlier ones"""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(_canonical_keys(layer))
    return merged


def load_settings(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load raw settings from a YAML file.

    The file may hold the settings mapping directly or under a top-level
    "settings" key.
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")
    if isinstance(data.get('settings'), dict):
        data = data['settings']
    return data
