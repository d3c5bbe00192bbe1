"""Base classes for checks."""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import ClassVar

from mapset_timing.models.beatmap import Beatmap, Mode
from mapset_timing.models.issues import Issue, IssueTemplate
from mapset_timing.models.pipeline import CheckContext, CheckResult
from mapset_timing.timeline import TimelineError

logger = logging.getLogger(__name__)


class Check(ABC):
    """Abstract base class for checks.

    Each check implements get_issues() which lazily yields the issues of a
    single difficulty. Checks that compare difficulties read the rest of the
    set from the context. Checks keep no state between calls.
    """

    category: ClassVar[str] = "Timing"
    message: ClassVar[str] = ""
    modes: ClassVar[tuple[Mode, ...]] = tuple(Mode)
    templates: ClassVar[dict[str, IssueTemplate]] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this check."""
        ...

    @abstractmethod
    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        """Yield the issues found in `beatmap`.

        Args:
            context: Shared state for the beatmap set being checked.
            beatmap: The difficulty to check.
        """
        ...

    def issue(
        self,
        template: str,
        beatmap: Beatmap | None,
        *args: object,
        time: float | None = None,
    ) -> Issue:
        """Create an issue from one of this check's templates."""
        issue_template = self.templates[template]
        return Issue(
            check=self.name,
            template=template,
            level=issue_template.level,
            message=issue_template.render(*args),
            beatmap=str(beatmap) if beatmap is not None else None,
            time=time,
        )

    def run(self, context: CheckContext) -> CheckResult:
        """Run the check over every applicable beatmap, with timing.

        This is the public entry point. A beatmap whose check pass fails is
        recorded as an error without affecting the other beatmaps.
        """
        start_time = time.time()
        result = CheckResult(success=True, check_name=self.name, duration_seconds=0)

        for beatmap in context.beatmap_set.beatmaps:
            if beatmap.mode not in self.modes:
                continue

            try:
                issues = list(self.get_issues(context, beatmap))
            except TimelineError as e:
                result.success = False
                result.errors.append(f"{beatmap}: {e}")
            except Exception as e:
                logger.exception("%s failed on %s", self.name, beatmap)
                result.success = False
                result.errors.append(f"{beatmap}: Unexpected error: {e}")
            else:
                result.issues.extend(issues)

        result.duration_seconds = time.time() - start_time
        return result
