"""Session snapshots: the whole working state as plain JSON.

A snapshot holds the raw sheets, the classification table, the configuration,
the confirmed mapping and (once processed) the ProcessingResult. Loading runs
the snapshot through the pydantic schema first, so a malformed file is
rejected before any processing function sees it.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import Category, FieldMapping, ProcessingConfig, ProcessingResult, RawRow

SESSION_VERSION = 1


class ProcessStep(str, Enum):
    LOAD = "LOAD"
    MAP = "MAP"
    REVIEW = "REVIEW"
    INVOICE = "INVOICE"


class FilesState(BaseModel):
    ota_raw: List[RawRow] = Field(default_factory=list)
    gl_raw: List[RawRow] = Field(default_factory=list)
    classification_map: Dict[str, Category] = Field(default_factory=dict)


class SessionState(BaseModel):
    version: Literal[1] = SESSION_VERSION
    saved_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    created_at: Optional[str] = None
    current_step: ProcessStep = ProcessStep.LOAD
    files: FilesState = Field(default_factory=FilesState)
    config: ProcessingConfig
    mappings: FieldMapping = Field(default_factory=FieldMapping)
    processed_data: Optional[ProcessingResult] = None

    @field_validator("current_step", mode="before")
    @classmethod
    def _unknown_step_resumes_review(cls, v):
        if isinstance(v, str) and v not in ProcessStep.__members__:
            return ProcessStep.REVIEW
        return v


def _relink_expense_rows(result: ProcessingResult) -> None:
    # JSON has no shared references; point the sublists back at the gl_expenses objects
    by_id = {row.id: row for row in result.gl_expenses}
    result.review_rows = [by_id.get(r.id, r) for r in result.review_rows]
    result.auto_reimbursables = [by_id.get(r.id, r) for r in result.auto_reimbursables]


def save_session(state: SessionState) -> str:
    if state is None:
        raise ValueError("Session state is None")
    return json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False)


def load_session(text: Union[str, bytes]) -> SessionState:
    try:
        state = SessionState.model_validate_json(text)
    except ValidationError as e:
        raise ValueError(f"The uploaded file is not a valid session file: {e}") from e
    if state.processed_data is not None:
        _relink_expense_rows(state.processed_data)
    return state


def write_session(state: SessionState, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(save_session(state), encoding="utf-8")
    return path


def read_session(path: Union[str, Path]) -> SessionState:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    return load_session(path.read_text(encoding="utf-8"))


def session_filename(config: ProcessingConfig, now: Optional[datetime] = None) -> str:
    """str-session-<owner>-<period start>-<timestamp>.json"""
    now = now or datetime.now(timezone.utc)
    owner = re.sub(r"[^a-z0-9]", "_", config.owner_name, flags=re.IGNORECASE).lower() or "owner"
    period = config.period_start.isoformat()
    timestamp = now.strftime("%Y%m%d%H%M%S")
    return f"str-session-{owner}-{period}-{timestamp}.json"
