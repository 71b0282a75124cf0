"""
Exercise entries stored inside a workout.

An entry either embeds its exercise data (``{"exercise": {"name": ...}}``)
or references a library ``Exercise`` by id (``{"exercise_id": 7}``). Both
kinds expose the same accessors so duration and ordering code never needs
to know which one it holds.
"""


class ExerciseEntry:
    kind = None

    def __init__(self, data):
        self.data = data or {}

    @property
    def sets(self):
        return self.data.get("sets")

    @property
    def reps(self):
        return self.data.get("reps")

    @property
    def weight(self):
        return self.data.get("weight", 0)

    @property
    def duration(self):
        """Seconds per set."""
        return self.data.get("duration")

    @property
    def rest(self):
        """Seconds of rest between two sets."""
        return self.data.get("rest")

    @property
    def order(self):
        return self.data.get("order")

    @property
    def notes(self):
        return self.data.get("notes")

    @property
    def name(self):
        raise NotImplementedError

    def to_dict(self):
        return {
            "kind": self.kind,
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "weight": self.weight,
            "duration": self.duration,
            "rest": self.rest,
            "order": self.order,
            "notes": self.notes,
        }


class EmbeddedExercise(ExerciseEntry):
    kind = "embedded"

    @property
    def exercise(self):
        return self.data.get("exercise") or {}

    @property
    def name(self):
        return self.exercise.get("name")

    def to_dict(self):
        result = super().to_dict()
        result["exercise"] = self.exercise
        return result


class ReferencedExercise(ExerciseEntry):
    """Unset sets, reps and duration fall back to the library exercise defaults."""

    kind = "referenced"

    def __init__(self, data, resolver=None):
        super().__init__(data)
        self._resolver = resolver
        self._resolved = None

    @property
    def exercise_id(self):
        return self.data.get("exercise_id")

    @property
    def exercise(self):
        if self._resolved is None and self._resolver is not None:
            self._resolved = self._resolver(self.exercise_id)
        return self._resolved

    def _default(self, key, attribute):
        value = self.data.get(key)
        if value is None and self.exercise is not None:
            value = getattr(self.exercise, attribute, None)
        return value

    @property
    def sets(self):
        return self._default("sets", "default_sets")

    @property
    def reps(self):
        return self._default("reps", "default_reps")

    @property
    def duration(self):
        return self._default("duration", "default_duration")

    @property
    def name(self):
        exercise = self.exercise
        return exercise.name if exercise is not None else None

    def to_dict(self):
        result = super().to_dict()
        result["exercise_id"] = self.exercise_id
        return result


def build_entry(data, resolver=None):
    if data and data.get("exercise_id") is not None:
        return ReferencedExercise(data, resolver)
    return EmbeddedExercise(data)


def build_entries(items, resolver=None):
    entries = [build_entry(item, resolver) for item in items or []]
    # entries without an explicit order keep their stored position
    return sorted(entries, key=lambda e: e.order if e.order is not None else float("inf"))
