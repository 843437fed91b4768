"""streakboard: categorized task lists, habit streaks and reminders on top of a PostgREST datastore."""

__version__ = "0.1.0"
