from .missions import MissionDefinition, MissionKind, MissionRegistry, list_missions, resolve_mission
from .session_engine import EngineSnapshot, Phase, SessionEngine

__all__ = [
    "MissionDefinition",
    "MissionKind",
    "MissionRegistry",
    "list_missions",
    "resolve_mission",
    "EngineSnapshot",
    "Phase",
    "SessionEngine",
]
