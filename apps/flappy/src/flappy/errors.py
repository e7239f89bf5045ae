from __future__ import annotations


class FlappyError(RuntimeError):
    pass


class CollaboratorMissingError(FlappyError):
    """Raised by `GameStateMachine.attach()` when a required collaborator cannot be resolved."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required collaborators: {', '.join(self.missing)}")


class NotAttachedError(FlappyError):
    pass


__all__ = ["CollaboratorMissingError", "FlappyError", "NotAttachedError"]
