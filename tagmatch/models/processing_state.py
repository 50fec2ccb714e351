"""States of the auto mode decision automaton."""

from enum import Enum


class AutoModeState(Enum):
    """Represents where one album's auto mode run currently is."""

    IDLE = "idle"
    SEARCHING_ALBUM = "searching_album"
    ALBUM_EVALUATED = "album_evaluated"
    AUTO_SELECTED = "auto_selected"
    AWAITING_FALLBACK = "awaiting_fallback"
    DEFER_TO_INTERACTIVE = "defer_to_interactive"
    TRACK_MATCHING = "track_matching"
    AUTO_SAVED = "auto_saved"
    COMPLETED = "completed"

    def is_decision(self) -> bool:
        """Check if this state is an automatic decision that carries a rationale."""
        return self in {
            AutoModeState.AUTO_SELECTED,
            AutoModeState.AUTO_SAVED,
            AutoModeState.DEFER_TO_INTERACTIVE,
        }

    def needs_user_action(self) -> bool:
        """Check if this state requires user intervention."""
        return self is AutoModeState.DEFER_TO_INTERACTIVE
