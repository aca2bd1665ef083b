"""OmniTask: personal task dashboard with reminders and brain-break mini-games."""

__version__ = "1.0.0"
