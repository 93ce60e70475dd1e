"""
StudyLoop: adaptive-learning core for a spaced-repetition quiz application.

Subpackages:
- core: data model, daily goals, calendar helpers, errors, logging
- study: proficiency estimation, retry eligibility, quiz question selection
- regimen: streak state machine, daily goal tracking, reminders, learner profile
- adaptive: rule-based insights and recommendations
- cli: terminal front-end over a history snapshot
"""

__version__ = "1.0.0"
