"""
Course catalog: resolves a course id to its module collection.

Courses come from outside the engine.  The catalog accepts either a JSON
array of course objects or ``{"courses": [...]}``; each course is validated
into a :class:`learnmap.models.Course`.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from learnmap.models import Course

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class CourseNotFoundError(KeyError):
    """Raised when a course id is not in the catalog.

    Attributes:
        course_id: The id that was looked up.
    """

    def __init__(self, course_id: str) -> None:
        self.course_id = course_id
        super().__init__(course_id)

    def __str__(self) -> str:
        return f"course {self.course_id!r} not found"


class CatalogLoadError(Exception):
    """Raised when a catalog file cannot be read or validated.

    Attributes:
        path: The file that failed to load.
        original: The underlying exception.
    """

    def __init__(self, path: str, original: Optional[Exception] = None) -> None:
        self.path = path
        self.original = original
        super().__init__(f"cannot load catalog {path}: {original}")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CourseCatalog:
    """In-memory ``{course_id: Course}`` lookup preserving insertion order."""

    def __init__(self, courses: Iterable[Course] = ()) -> None:
        self._courses: Dict[str, Course] = {}
        for course in courses:
            if course.id in self._courses:
                logger.warning("Duplicate course id %r — keeping the last one.", course.id)
            self._courses[course.id] = course

    def get(self, course_id: str) -> Course:
        try:
            return self._courses[str(course_id)]
        except KeyError:
            raise CourseNotFoundError(str(course_id)) from None

    def ids(self) -> List[str]:
        return list(self._courses)

    def __contains__(self, course_id: object) -> bool:
        return str(course_id) in self._courses

    def __len__(self) -> int:
        return len(self._courses)


def parse_catalog(data: Any) -> CourseCatalog:
    """Build a catalog from already-decoded JSON data."""
    if isinstance(data, dict) and "courses" in data:
        data = data["courses"]
    if not isinstance(data, list):
        raise ValueError("expected a list of courses or an object with 'courses'")
    return CourseCatalog(Course.model_validate(item) for item in data)


def load_catalog(path: str) -> CourseCatalog:
    """Load a course catalog from a JSON file.

    Raises:
        CatalogLoadError: If the file is unreadable, not JSON, or fails
            validation.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        catalog = parse_catalog(data)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("Failed to load catalog %s: %s", path, exc)
        raise CatalogLoadError(path, exc) from exc

    logger.info("Loaded %d course(s) from %s.", len(catalog), path)
    return catalog
