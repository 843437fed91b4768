"""
Tracker subsystem.

Components:
- models.py: data structures (Category, Task, Habit, Reminder, TrackerData)
- rules.py: pure expiry / completion / streak rules
- api.py: async operations on AppState (load, add, toggle, delete, stats, import/export)
- views.py: view models derived from TrackerData
- reminders.py: once-a-minute reminder checker
- snapshot.py: local JSON snapshot used when the datastore is unreachable
"""
