"""Transcript log helpers: one NDJSON line and one text line per utterance."""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List

from classroom.core.script import format_clock
from classroom.core.state import Utterance
from classroom.persistence.session_io import is_valid_session_id, session_dir

logger = logging.getLogger(__name__)


def get_transcript_paths(session_id: str, base_dir: Path | None = None) -> Dict[str, Path]:
    base = session_dir(session_id, base_dir)
    return {
        "json": base / "utterances.json",
        "txt": base / "utterances.log",
    }


def _format_text_entry(u: Utterance) -> str:
    return f"[{format_clock(u.timestamp)}] phase={u.phase} {u.speaker_type}={u.speaker_name} | {u.content}"


def append_utterance(utterance: Utterance, base_dir: Path | None = None) -> None:
    """Best-effort write; failures are logged so the lesson keeps running."""
    paths = get_transcript_paths(utterance.session_id, base_dir)
    try:
        paths["json"].parent.mkdir(parents=True, exist_ok=True)
        with paths["json"].open("a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(utterance), ensure_ascii=False) + "\n")
        with paths["txt"].open("a", encoding="utf-8") as f:
            f.write(_format_text_entry(utterance) + "\n")
    except OSError:
        logger.exception("could not persist utterance %s", utterance.id)


def load_utterances(session_id: str, base_dir: Path | None = None) -> List[Utterance]:
    """Read the stored transcript ordered by timestamp; bad lines are skipped."""
    if not is_valid_session_id(session_id):
        return []
    path = get_transcript_paths(session_id, base_dir)["json"]
    if not path.exists():
        return []
    utterances: List[Utterance] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                utterances.append(Utterance(**json.loads(line)))
            except (json.JSONDecodeError, TypeError):
                logger.warning("skipping malformed transcript line in %s", path)
                continue
    utterances.sort(key=lambda u: u.timestamp)
    return utterances
