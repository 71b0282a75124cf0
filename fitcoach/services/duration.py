import math


def exercise_seconds(entry):
    """Work time plus inter-set rest for one exercise entry, in seconds."""
    sets = entry.sets
    total = 0
    if entry.duration and sets:
        total += entry.duration * sets
    if entry.rest and sets and sets > 1:
        total += entry.rest * (sets - 1)
    return total


def calculate_total_duration(entity):
    """
    Total duration of a workout in minutes.

    An explicit ``duration`` on the entity always wins. Otherwise the time of
    every exercise entry is summed and converted to minutes, rounding up.
    """
    if entity.duration:
        return entity.duration

    seconds = sum(exercise_seconds(entry) for entry in entity.exercise_entries)
    return math.ceil(seconds / 60)


def calculate_combined_duration(combined_workout):
    return sum(calculate_total_duration(w) for w in combined_workout.resolved_workouts())


def calculate_session_duration(session):
    """
    Explicit session duration, or the sum of the durations of the workouts
    and combined workouts scheduled in it.
    """
    if session.duration:
        return session.duration

    total = sum(calculate_total_duration(w) for w in session.workouts)
    total += sum(calculate_combined_duration(c) for c in session.combined_workouts)
    return total
