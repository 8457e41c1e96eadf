from models.availability import AvailabilityWindow
from models.student import Student, Course
from models.group import Group, GroupStatus
from models.registry import ConflictRegistry, CommittedSlot
from models.result import MatchingResult, UnmatchedStudent, UnmatchedReason, ConflictRecord
from models.student_pool import StudentPool, FeasibilityReport

__all__ = [
    "AvailabilityWindow",
    "Student",
    "Course",
    "Group",
    "GroupStatus",
    "ConflictRegistry",
    "CommittedSlot",
    "MatchingResult",
    "UnmatchedStudent",
    "UnmatchedReason",
    "ConflictRecord",
    "StudentPool",
    "FeasibilityReport",
]
