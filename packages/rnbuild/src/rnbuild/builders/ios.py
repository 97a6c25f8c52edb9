"""iOS build."""

from dataclasses import dataclass, field

from rnbuild.project import ProjectConfig


@dataclass
class IosBuild:
    """Options for `rnbuild build ios`."""

    project: ProjectConfig = field(default_factory=ProjectConfig)

    def build(self) -> bool:
        """
        Validate the project. The iOS toolchain is not wired up yet.

        Returns:
            False, nothing was built
        """
        self.project.setup()
        return False
