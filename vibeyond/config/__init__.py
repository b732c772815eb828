from .config import keyboard_octaves, load_config, validate_config

__all__ = ["load_config", "validate_config", "keyboard_octaves"]
