"""Interest-due schedules and back-office reports for cooperative society loans."""

__version__ = "0.1.0"
