"""
Progression engine errors.

The engines treat missing rows as no-ops or failure-shaped results; these
are raised by the API lookups that turn unknown path ids into 404s.
"""


class ProgressionError(Exception):
    """Base class for progression engine errors."""


class LevelNotFoundError(ProgressionError):
    def __init__(self, level_id: int):
        super().__init__(f"Level {level_id} not found")
        self.level_id = level_id


class CourseModuleNotFoundError(ProgressionError):
    def __init__(self, module_id: int):
        super().__init__(f"Module {module_id} not found")
        self.module_id = module_id


class StudentNotFoundError(ProgressionError):
    def __init__(self, student_id: int):
        super().__init__(f"Student {student_id} not found")
        self.student_id = student_id
