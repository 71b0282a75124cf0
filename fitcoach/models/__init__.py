from .user import User
from .questionnaire import HealthQuestionnaire
from .exercise import Exercise
from .assignments import workout_assignments, combined_workout_assignments, session_assignments
from .workout import Workout
from .combined_workout import CombinedWorkout
from .session import TrainingSession
from .meal import Meal
from .notification import Notification

__all__ = [
    "User", "HealthQuestionnaire", "Exercise",
    "workout_assignments", "combined_workout_assignments", "session_assignments",
    "Workout", "CombinedWorkout", "TrainingSession", "Meal", "Notification",
]
