"""
app/flow/states.py

Purpose: Defines all upload conversation states

- Enum for each step of the Telegram artist upload flow
- Single source of truth for flow stages
- State transition validation
- Metadata for each state (prompt step, input kind)
"""

from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass


class UploadState(str, Enum):
    """
    Defines all possible states in the bot upload conversation.
    Each state represents the input the bot is waiting for.
    """

    AWAITING_MEDIA_TYPE = "AWAITING_MEDIA_TYPE"
    AWAITING_MEDIA = "AWAITING_MEDIA"
    AWAITING_TITLE = "AWAITING_TITLE"
    AWAITING_DESCRIPTION = "AWAITING_DESCRIPTION"
    AWAITING_PRICE = "AWAITING_PRICE"
    AWAITING_CATEGORY = "AWAITING_CATEGORY"
    AWAITING_STOCK = "AWAITING_STOCK"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"

    # Terminal
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


@dataclass
class StateMetadata:
    """
    Metadata associated with each upload state.
    """
    name: UploadState
    step_number: Optional[int] = None  # For progress tracking
    total_steps: int = 8
    expects_media: bool = False  # Waits for a file rather than text
    is_terminal: bool = False


_STEPS = (
    UploadState.AWAITING_MEDIA_TYPE,
    UploadState.AWAITING_MEDIA,
    UploadState.AWAITING_TITLE,
    UploadState.AWAITING_DESCRIPTION,
    UploadState.AWAITING_PRICE,
    UploadState.AWAITING_CATEGORY,
    UploadState.AWAITING_STOCK,
    UploadState.AWAITING_CONFIRMATION,
)

STATE_METADATA: Dict[UploadState, StateMetadata] = {
    state: StateMetadata(
        name=state,
        step_number=number,
        total_steps=len(_STEPS),
        expects_media=state == UploadState.AWAITING_MEDIA,
    )
    for number, state in enumerate(_STEPS, 1)
}
STATE_METADATA[UploadState.PUBLISHED] = StateMetadata(name=UploadState.PUBLISHED, is_terminal=True)
STATE_METADATA[UploadState.CANCELLED] = StateMetadata(name=UploadState.CANCELLED, is_terminal=True)


# Valid state transitions - prevents skipping steps.
# A state that re-prompts on bad input simply stays put (no transition).
STATE_TRANSITIONS: Dict[UploadState, List[UploadState]] = {
    UploadState.AWAITING_MEDIA_TYPE: [UploadState.AWAITING_MEDIA, UploadState.CANCELLED],
    UploadState.AWAITING_MEDIA: [UploadState.AWAITING_TITLE, UploadState.CANCELLED],
    UploadState.AWAITING_TITLE: [UploadState.AWAITING_DESCRIPTION, UploadState.CANCELLED],
    UploadState.AWAITING_DESCRIPTION: [UploadState.AWAITING_PRICE, UploadState.CANCELLED],
    UploadState.AWAITING_PRICE: [UploadState.AWAITING_CATEGORY, UploadState.CANCELLED],
    UploadState.AWAITING_CATEGORY: [UploadState.AWAITING_STOCK, UploadState.CANCELLED],
    UploadState.AWAITING_STOCK: [UploadState.AWAITING_CONFIRMATION, UploadState.CANCELLED],
    UploadState.AWAITING_CONFIRMATION: [UploadState.PUBLISHED, UploadState.CANCELLED],
    UploadState.PUBLISHED: [],
    UploadState.CANCELLED: [],
}


def is_valid_transition(from_state: UploadState, to_state: UploadState) -> bool:
    """
    Checks if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    allowed_transitions = STATE_TRANSITIONS.get(from_state, [])
    return to_state in allowed_transitions


def get_state_metadata(state: UploadState) -> StateMetadata:
    return STATE_METADATA.get(state, StateMetadata(name=state))


def get_progress_message(state: UploadState) -> str:
    """
    Generates a progress message for the current state (e.g. "Step 3 of 8").
    """
    metadata = get_state_metadata(state)
    if metadata.step_number and metadata.step_number > 0:
        return f"📍 Step {metadata.step_number} of {metadata.total_steps}"
    return ""


def expects_media(state: UploadState) -> bool:
    return get_state_metadata(state).expects_media


def is_terminal(state: UploadState) -> bool:
    return get_state_metadata(state).is_terminal
