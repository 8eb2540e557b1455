"""Task and subtask storage, validation and export."""
