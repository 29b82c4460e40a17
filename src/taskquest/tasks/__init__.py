"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Schedule, UserStats, Priority)
- task_codec.py: JSON-ready encoding for the record store
- categories.py: user-extensible category registry
- progress.py: XP / level / streak / badge transitions
- task_store.py: in-memory task collection persisted on every mutation
- reminder_scheduler.py: polling loop that fires one reminder per task
- task_api.py: small high-level helpers used by the rest of the app
"""
