"""Layout exceptions."""


class LayoutError(RuntimeError):
    """Exception raised when a timeline cannot be laid out."""

    def __init__(self, message: str, entry_id: str | None = None) -> None:
        self.message = message
        self.entry_id = entry_id
        location = f" (entry {entry_id})" if entry_id else ""
        super().__init__(f"{message}{location}")


class GridBoundsError(LayoutError, IndexError):
    """Raised when a grid row is used before the grid has been grown to it."""
