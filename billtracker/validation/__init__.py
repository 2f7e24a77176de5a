"""Import validation package."""

from billtracker.validation.validator import BackupValidator

__all__ = ["BackupValidator"]
