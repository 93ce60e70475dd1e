"""
Daily Regimen Module.

The mutable side of the core:
- StreakTracker: consecutive-day streak state machine
- DailyGoalTracker: same-day quiz aggregation and goal completion
- ReminderPlanner: reminder payload decisions
- LearnerProfile: single-writer context tying them together
"""

from studyloop.regimen.daily_goal_tracker import DailyGoalTracker, ProgressUpdate
from studyloop.regimen.learner_profile import LearnerProfile
from studyloop.regimen.reminders import ReminderKind, ReminderPayload, ReminderPlanner
from studyloop.regimen.streak_tracker import StreakTracker, reconstruct_streak

__all__ = [
    "StreakTracker",
    "reconstruct_streak",
    "DailyGoalTracker",
    "ProgressUpdate",
    "ReminderPlanner",
    "ReminderPayload",
    "ReminderKind",
    "LearnerProfile",
]
