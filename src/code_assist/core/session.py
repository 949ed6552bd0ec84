import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from code_assist.config import Settings
from code_assist.core.classify import classify
from code_assist.core.features import detect_features
from code_assist.core.ignore import IgnoreRules
from code_assist.core.ports.ignore import IgnorePredicate
from code_assist.errors import RepositoryNotFoundError
from code_assist.models import ProjectFeatures, ProjectType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectSnapshot:
    root: Path
    features: ProjectFeatures
    project_type: ProjectType


class ProjectSession:
    """Holds the detected features and project type for one repository root.

    The snapshot is computed on first use and replaced wholesale by
    ``refresh()``. Writers serialize on a lock; readers only ever see a
    complete snapshot.
    """

    def __init__(
        self,
        root: str | Path,
        settings: Settings | None = None,
        is_ignored: IgnorePredicate | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._root = self._check_root(root)
        self._custom_ignore = is_ignored
        self._snapshot: ProjectSnapshot | None = None
        self._lock = threading.Lock()

    @staticmethod
    def _check_root(root: str | Path) -> Path:
        path = Path(root)
        if not path.is_dir():
            raise RepositoryNotFoundError(str(root))
        return path.resolve()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_ignored(self) -> IgnorePredicate:
        if self._custom_ignore is not None:
            return self._custom_ignore
        return IgnoreRules.for_root(self._root, self.settings.extra_ignore)

    @property
    def snapshot(self) -> ProjectSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._compute()
            return self._snapshot

    @property
    def features(self) -> ProjectFeatures:
        return self.snapshot.features

    @property
    def project_type(self) -> ProjectType:
        return self.snapshot.project_type

    def refresh(self) -> ProjectSnapshot:
        """Recompute features and type from disk and swap them in."""
        with self._lock:
            self._snapshot = self._compute()
            return self._snapshot

    def change_root(self, root: str | Path) -> None:
        path = self._check_root(root)
        with self._lock:
            self._root = path
            self._snapshot = None
        logger.info("Session root changed to %s", path)

    def _compute(self) -> ProjectSnapshot:
        root = self._root
        features = detect_features(root, self.is_ignored, max_depth=self.settings.feature_scan_depth)
        project_type = classify(features)
        logger.info("Project at %s classified as %s", root, project_type.label)
        return ProjectSnapshot(root=root, features=features, project_type=project_type)
