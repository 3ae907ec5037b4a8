"""Mutable engine state for one running lesson."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from classroom.core.conversation import ConversationTracker


@dataclass
class LessonRuntime:
    elapsed_minutes: float = 0.0
    phase: str = "start"
    is_playing: bool = False
    speed: float = 1.0
    generating: bool = False  # a turn is waiting on the generator
    ended: bool = False
    last_speaker_id: Optional[str] = None
    fallback_cursors: Dict[str, int] = field(default_factory=dict)  # speaker_type -> pool index
    conversation: ConversationTracker = field(default_factory=ConversationTracker)
