"""React Native project discovery shared by every build command."""

import logging
from dataclasses import dataclass
from pathlib import Path

from rnbuild import fsutil

logger = logging.getLogger(__name__)

# Present in every installed React Native project
REACT_NATIVE_MARKER = Path("node_modules") / "@react-native"


class ProjectError(Exception):
    """
    Raised when the working project is not a React Native project.

    Attributes:
        root: Project root that was checked
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(
            f"{root} is not a react native project. "
            "Specify one with `--project` or run with `--force` to ignore this"
        )


@dataclass
class ProjectConfig:
    """
    Options common to all build commands.

    Attributes:
        root: React Native project root (default: current directory)
        force: Continue even if root is not a React Native project
    """

    root: Path | None = None
    force: bool = False

    def resolve_root(self) -> Path:
        return self.root if self.root is not None else Path(".")

    def setup(self) -> Path:
        """
        Validate the project and change into its root.

        Returns:
            Absolute project root

        Raises:
            ProjectError: If root is not a React Native project and force is off
        """
        root = self.resolve_root()
        if not fsutil.exists(root / REACT_NATIVE_MARKER):
            if not self.force:
                raise ProjectError(root)
            logger.warning(f"{root} is not a react native project, ignoring")

        fsutil.cd(root)
        return fsutil.pwd()
