"""
Confetti Presets Library - Pre-configured confetti settings
Allows users to apply a complete look with a single flag
"""

import copy
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import ConfettiConfig, normalize


# ============================================================================
# Preset Data Structures
# ============================================================================

@dataclass
class ConfettiPreset:
    """A single confetti preset"""

    name: str
    description: str = ""

    # Raw settings, validated through normalize() when applied
    settings: Dict[str, Any] = field(default_factory=dict)

    # Output settings
    width: int = 1440
    height: int = 1024
    format: str = "gif"

    # Tags for organization
    tags: List[str] = field(default_factory=list)

    @property
    def config(self) -> ConfettiConfig:
        return normalize(self.settings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        return {k: v for k, v in asdict(self).items() if v}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfettiPreset':
        """Create from dictionary"""
        data = dict(data)

        # Settings may be given inline next to the preset metadata
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        inline = {k: v for k, v in data.items() if k not in valid_fields}
        if inline:
            data['settings'] = {**inline, **(data.get('settings') or {})}

        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


# ============================================================================
# Built-in Presets
# ============================================================================

BUILTIN_PRESETS: Dict[str, Dict[str, Any]] = {
    "celebration": {
        "name": "celebration",
        "description": "Classic rainbow confetti burst",
        "settings": {
            "amount": 60,
            "randomness": 60,
            "zoom": 10,
            "flutter": 50,
            "randomize_size": True,
            "randomize_rotation": True,
            "shape_selection": ["rectangle", "square", "circle", "star"],
            "color_spec": "multi",
            "frame_count": 10,
            "frame_delay": 50,
        },
        "tags": ["party", "rainbow"],
    },

    "gentle_drift": {
        "name": "gentle_drift",
        "description": "Sparse, slow-tumbling circles in soft pastels",
        "settings": {
            "amount": 20,
            "randomness": 30,
            "zoom": 14,
            "flutter": 20,
            "randomize_size": True,
            "shape_selection": ["circle", "wave"],
            "color_spec": [
                {"h": 340, "s": 80, "l": 85, "a": 1.0},
                {"h": 200, "s": 70, "l": 85, "a": 1.0},
                {"h": 50, "s": 90, "l": 85, "a": 1.0},
            ],
            "frame_count": 24,
            "frame_delay": 80,
        },
        "tags": ["calm", "pastel"],
    },

    "gold_rush": {
        "name": "gold_rush",
        "description": "Dense golden gradient stars and streamers",
        "settings": {
            "amount": 85,
            "randomness": 70,
            "zoom": 12,
            "flutter": 70,
            "randomize_size": True,
            "randomize_rotation": True,
            "shape_selection": ["star", "rectangle", "wave"],
            "color_spec": [
                {
                    "type": "linear",
                    "stops": [
                        {"position": 0.0, "color": "#FFF1A8"},
                        {"position": 0.5, "color": "#FFC83D"},
                        {"position": 1.0, "color": "#B8860B"},
                    ],
                },
                {
                    "type": "radial",
                    "stops": [
                        {"position": 0.0, "color": "#FFFFFF"},
                        {"position": 1.0, "color": "#DAA520"},
                    ],
                },
            ],
            "frame_count": 16,
            "frame_delay": 40,
        },
        "tags": ["party", "gold", "premium"],
    },

    "emoji_party": {
        "name": "emoji_party",
        "description": "Falling party emoji",
        "settings": {
            "amount": 25,
            "randomness": 50,
            "zoom": 16,
            "flutter": 30,
            "randomize_rotation": True,
            "shape_mode": "emoji",
            "frame_count": 12,
            "frame_delay": 60,
        },
        "tags": ["party", "emoji"],
    },

    "flag_parade": {
        "name": "flag_parade",
        "description": "Tumbling little national flags",
        "settings": {
            "amount": 30,
            "randomness": 50,
            "zoom": 12,
            "flutter": 60,
            "randomize_size": True,
            "shape_mode": "flag",
            "frame_count": 12,
            "frame_delay": 60,
        },
        "tags": ["flags", "sport"],
    },

    "blizzard": {
        "name": "blizzard",
        "description": "Heavy white squares and circles, fast flutter",
        "settings": {
            "amount": 100,
            "randomness": 90,
            "zoom": 10,
            "flutter": 100,
            "randomize_size": True,
            "randomize_rotation": True,
            "shape_selection": ["square", "circle"],
            "color_spec": ["#FFFFFF", "#E8F4FF", "#CFE6FF"],
            "frame_count": 20,
            "frame_delay": 30,
        },
        "tags": ["winter", "dense"],
    },
}


# ============================================================================
# Preset Manager
# ============================================================================

class PresetManager:
    """
    Manages loading, saving, and applying confetti presets.
    """

    def __init__(self, user_presets_dir: Optional[Path] = None):
        """
        Initialize preset manager.

        Args:
            user_presets_dir: Directory for user presets (default: ~/.confetti-maker/presets)
        """
        self.user_presets_dir = Path(user_presets_dir) if user_presets_dir else Path.home() / '.confetti-maker' / 'presets'
        self.user_presets_dir.mkdir(parents=True, exist_ok=True)

        self._builtin: Dict[str, ConfettiPreset] = {}
        self._user: Dict[str, ConfettiPreset] = {}

        self._load_builtin_presets()
        self._load_user_presets()

    def _load_builtin_presets(self) -> None:
        """Load built-in presets"""
        for name, data in BUILTIN_PRESETS.items():
            self._builtin[name] = ConfettiPreset.from_dict(copy.deepcopy(data))

    def _load_user_presets(self) -> None:
        """Load user-defined presets from YAML files"""
        for yaml_file in sorted(self.user_presets_dir.glob('*.yaml')):
            try:
                with open(yaml_file, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)

                if isinstance(data, dict):
                    if 'presets' in data:
                        # Multiple presets in one file
                        for name, preset_data in data['presets'].items():
                            preset_data['name'] = name
                            self._user[name] = ConfettiPreset.from_dict(preset_data)
                    else:
                        # Single preset
                        name = yaml_file.stem
                        data['name'] = name
                        self._user[name] = ConfettiPreset.from_dict(data)
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                print(f"Warning: Could not load preset file {yaml_file}: {e}")

    def get(self, name: str) -> Optional[ConfettiPreset]:
        """
        Get a preset by name.
        User presets override built-in presets with same name.
        """
        return self._user.get(name) or self._builtin.get(name)

    def exists(self, name: str) -> bool:
        """Check if preset exists"""
        return name in self._user or name in self._builtin

    def list_all(self) -> List[str]:
        """List all preset names"""
        return sorted(set(self._builtin) | set(self._user))

    def list_by_tag(self, tag: str) -> List[str]:
        """List presets with a specific tag"""
        matches = []
        for name, preset in {**self._builtin, **self._user}.items():
            if tag.lower() in [t.lower() for t in preset.tags]:
                matches.append(name)
        return sorted(matches)

    def list_tags(self) -> List[str]:
        """List all available tags"""
        tags = set()
        for preset in {**self._builtin, **self._user}.values():
            tags.update(preset.tags)
        return sorted(tags)

    def search(self, query: str) -> List[str]:
        """Search preset names, descriptions and tags"""
        query = query.lower()
        matches = []
        for name, preset in {**self._builtin, **self._user}.items():
            haystack = ' '.join([name, preset.description, *preset.tags]).lower()
            if query in haystack:
                matches.append(name)
        return sorted(matches)

    def save_preset(self, preset: ConfettiPreset, filename: Optional[str] = None) -> Path:
        """
        Save a user preset to YAML file.

        Args:
            preset: The preset to save
            filename: Optional filename (default: preset.name.yaml)

        Returns:
            Path to saved file
        """
        filename = filename or f"{preset.name}.yaml"
        if not filename.endswith('.yaml'):
            filename += '.yaml'

        filepath = self.user_presets_dir / filename

        with open(filepath, 'w', encoding='utf-8') as f:
            yaml.safe_dump(preset.to_dict(), f, default_flow_style=False, sort_keys=False, allow_unicode=True)

        self._user[preset.name] = preset

        return filepath

    def delete_preset(self, name: str) -> bool:
        """
        Delete a user preset.

        Returns:
            True if deleted, False if not found or is builtin
        """
        if name not in self._user:
            return False

        for yaml_file in self.user_presets_dir.glob('*.yaml'):
            if yaml_file.stem == name:
                yaml_file.unlink()
                break

        del self._user[name]
        return True

    def create_preset(
        self,
        name: str,
        config: ConfettiConfig,
        description: str = "",
        **kwargs
    ) -> ConfettiPreset:
        """
        Create a new preset from a validated configuration.

        Args:
            name: Preset name
            config: Settings to capture
            description: Optional description
            **kwargs: Additional preset fields (width, height, format, tags)

        Returns:
            Created ConfettiPreset
        """
        settings = config.to_dict()
        if settings.get('seed') is None:
            settings.pop('seed', None)
        if settings.get('custom_shape') is None:
            settings.pop('custom_shape', None)
        return ConfettiPreset(name=name, description=description, settings=settings, **kwargs)


# ============================================================================
# Global Instance & Convenience Functions
# ============================================================================

_manager: Optional[PresetManager] = None


def get_preset_manager() -> PresetManager:
    """Get or create global preset manager"""
    global _manager
    if _manager is None:
        _manager = PresetManager()
    return _manager


def get_preset(name: str) -> Optional[ConfettiPreset]:
    """Get a preset by name"""
    return get_preset_manager().get(name)


def list_presets(tag: Optional[str] = None) -> List[str]:
    """List available presets, optionally filtered by tag"""
    manager = get_preset_manager()
    if tag:
        return manager.list_by_tag(tag)
    return manager.list_all()


def save_preset(preset: ConfettiPreset) -> Path:
    """Save a user preset"""
    return get_preset_manager().save_preset(preset)


def search_presets(query: str) -> List[str]:
    """Search presets"""
    return get_preset_manager().search(query)
