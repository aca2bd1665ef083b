"""Exceptions surfaced to the user by the application shell."""


class OmniTaskError(RuntimeError):
    """Base class for user-visible OmniTask errors."""


class NoEligibleGamesError(OmniTaskError):
    def __init__(self) -> None:
        super().__init__("No active games enabled. Enable some in the settings!")


class PopupAlreadyOpenError(OmniTaskError):
    def __init__(self) -> None:
        super().__init__("A brain-break game is already open.")
