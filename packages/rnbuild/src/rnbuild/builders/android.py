"""
Android build: ubrn codegen + native build, then patch generated files.

Patches (each can be turned off):
- ubrn: call uniffi-bindgen-react-native directly instead of `yarn ubrn`;
  the yarn wrapper formats codegen output with prettier, which it cannot
  locate on Windows, and passes --no-strip, which cargo-ndk v4 removed
- cmake: forward slashes in android/CMakeLists.txt
- cpp: RN 0.80+ compatible install body in android/cpp-adapter.cpp
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from rnbuild import fsutil
from rnbuild.config import settings
from rnbuild.patching import patch_cmakelists, patch_cpp_adapter
from rnbuild.proc import Command
from rnbuild.progress import Step
from rnbuild.project import ProjectConfig

logger = logging.getLogger(__name__)

UBRN_ARGS = ("build", "android", "--and-generate")


@dataclass
class AndroidBuild:
    """
    Options for `rnbuild build android`.

    Attributes:
        project: Common project options
        unpatch_cpp: Leave cpp-adapter.cpp as generated
        unpatch_ubrn: Build through `yarn ubrn` instead of the ubrn binary
        unpatch_cmake: Leave CMakeLists.txt as generated
        crate: Rust crate directory under the rust dir
    """

    project: ProjectConfig = field(default_factory=ProjectConfig)
    unpatch_cpp: bool = False
    unpatch_ubrn: bool = False
    unpatch_cmake: bool = False
    crate: str = settings.crate

    def ubrn_command(self, root: Path) -> tuple[Command, str]:
        """Codegen/build command and its progress label."""
        if self.unpatch_ubrn:
            command = Command("yarn").args(["ubrn", *UBRN_ARGS])
            label = "building with ubrn (unpatched)"
        else:
            command = Command("uniffi-bindgen-react-native").args(UBRN_ARGS)
            label = "building with ubrn (patched)"

        if fsutil.exists(root / settings.rust_dir / "tools"):
            command = command.env("PATH", fsutil.tools_path(root))
        return command, label

    def build(self) -> None:
        """
        Run the Android build in the project root.

        Raises:
            ProjectError: If the project check fails
            FileNotFoundError: If the crate directory is missing
            CommandError: If the ubrn build fails
            PatchError: If a generated file cannot be patched
        """
        root = self.project.setup()

        crate_dir = root / settings.rust_dir / self.crate
        if not fsutil.exists(crate_dir):
            raise FileNotFoundError(f"crate directory {crate_dir} not found")

        command, label = self.ubrn_command(root)
        command.run_live(label)

        if not self.unpatch_cmake:
            with Step("patching CMakeLists.txt"):
                patch_cmakelists(root / "android" / "CMakeLists.txt")

        if not self.unpatch_cpp:
            with Step("patching cpp-adapter.cpp"):
                patch_cpp_adapter(root / "android" / "cpp-adapter.cpp")

        logger.info(f"Android build finished in {root}")
