"""Student-to-professor assignment counting model.

A solution assigns each of m students to one of p professors, so the space
has ``p**m`` elements and a uniform sample is m independent uniform picks.
Students and professors carry language bitmasks.
"""

import itertools
from dataclasses import dataclass
from enum import IntFlag
from typing import Callable, Sequence, Tuple

import numpy as np

from mcest.core.sources import UniformSource


Assignment = Tuple[int, ...]
Predicate = Callable[[Assignment], bool]


class Language(IntFlag):
    SPANISH = 1
    ENGLISH = 2
    FRENCH = 4
    PORTUGUESE = 8


S, E, F, P = Language.SPANISH, Language.ENGLISH, Language.FRENCH, Language.PORTUGUESE

DEFAULT_STUDENTS = (
    S | E,      # Maria
    E | F,      # Sophie
    S | P,      # Liliana
    E | P,      # Lucia
    F,          # Monique
    S | E | F,  # Rodrigo
    E,          # John
    P | S,      # Neymar
    F | P,      # Jacques
    S,          # Juan
)

DEFAULT_PROFESSORS = (
    E | F | S,  # Tom
    E | P,      # Luciana
    E | F,      # Gerard
    S | F,      # Silvia
)


@dataclass(frozen=True)
class AssignmentProblem:
    """Students, professors and the per-professor load limits.

    Attributes:
        students: Language mask per student.
        professors: Language mask per professor.
        min_load: Fewest students a professor may take.
        max_load: Most students a professor may take.
    """
    students: Tuple[int, ...] = tuple(int(m) for m in DEFAULT_STUDENTS)
    professors: Tuple[int, ...] = tuple(int(m) for m in DEFAULT_PROFESSORS)
    min_load: int = 1
    max_load: int = 4

    def __post_init__(self):
        if not self.students or not self.professors:
            raise ValueError("need at least one student and one professor")
        if self.min_load > self.max_load:
            raise ValueError(f"min_load {self.min_load} exceeds max_load {self.max_load}")

    @property
    def space_size(self) -> int:
        """Number of possible assignments, professors ** students."""
        return len(self.professors) ** len(self.students)

    def sample(self, source: UniformSource) -> Assignment:
        """Uniformly random assignment: each student picks a professor."""
        n_prof = len(self.professors)
        picks = (np.asarray(source.random(len(self.students))) * n_prof).astype(np.int64)
        # a table source may hand out exactly 1.0
        np.minimum(picks, n_prof - 1, out=picks)
        return tuple(int(p) for p in picks)

    def language_matches(self, assignment: Assignment) -> bool:
        """Every student shares a language with their professor."""
        return all(
            self.professors[prof] & self.students[student]
            for student, prof in enumerate(assignment)
        )

    def load_balanced(self, assignment: Assignment) -> bool:
        """Every professor has between min_load and max_load students."""
        counts = np.bincount(assignment, minlength=len(self.professors))
        return bool(np.all((counts >= self.min_load) & (counts <= self.max_load)))

    def language_match_count(self) -> int:
        """Exact size of the language-match set.

        Students choose independently, so it is the product over students
        of how many professors share a language with them.
        """
        count = 1
        for mask in self.students:
            count *= sum(1 for prof in self.professors if prof & mask)
        return count

    def exact_count(self, *predicates: Predicate) -> int:
        """Count assignments satisfying all predicates by enumeration.

        Visits all ``professors ** students`` assignments; only practical
        for small instances.
        """
        check = AllOf(predicates)
        return sum(
            1
            for assignment in itertools.product(range(len(self.professors)), repeat=len(self.students))
            if check(assignment)
        )


class AllOf:
    """Evaluator that is true when every predicate holds.

    Stops at the first failing predicate.
    """

    def __init__(self, predicates: Sequence[Predicate]):
        if not predicates:
            raise ValueError("AllOf needs at least one predicate")
        self.predicates = tuple(predicates)

    def __call__(self, sample) -> bool:
        return all(predicate(sample) for predicate in self.predicates)
