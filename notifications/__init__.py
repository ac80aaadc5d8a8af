"""Collection reminders: evaluation windows, push delivery and the periodic pass."""
