"""taskquest: a gamified personal task tracker (XP, levels, streaks, reminders)."""
