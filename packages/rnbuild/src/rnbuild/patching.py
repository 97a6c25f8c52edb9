"""
Patches for files generated by uniffi-bindgen-react-native.

- patch_cmakelists: CMakeLists.txt is generated with backslash paths on
  Windows; CMake wants forward slashes
- patch_cpp_adapter: React Native 0.80+ removed APIs the generated
  cpp-adapter.cpp still uses; the install body (lines 27-55) is replaced
  with one that goes through fbjni
"""

import logging
import re
from pathlib import Path

from rnbuild.fsutil import OpenMode, open_file, read, write_over

logger = logging.getLogger(__name__)

FBJNI_INCLUDE = "#include <fbjni/fbjni.h>"

# Generated lines kept before and after the replaced install body
CPP_ADAPTER_HEAD = 26
CPP_ADAPTER_TAIL = 55

INSTALL_CALL_PATTERN = re.compile(r"([\w:]+)::installRustCrate\s*\(")

CPP_ADAPTER_INSTALL_BODY = """
    try {
        if (callInvokerHolderJavaObj == nullptr) {
            return false;
        }

        auto alias = facebook::jni::alias_ref<jobject>(callInvokerHolderJavaObj);
        auto holder = facebook::jni::static_ref_cast<facebook::react::CallInvokerHolder::javaobject>(alias);
        if (!holder) {
            return false;
        }

        auto jsCallInvoker = holder->cthis()->getCallInvoker();
        if (!jsCallInvoker) {
            return false;
        }

        auto runtime = reinterpret_cast<jsi::Runtime *>(rtPtr);
        return {ns}::installRustCrate(*runtime, jsCallInvoker);
    } catch (...) {
        return false;
    }
"""


class PatchError(Exception):
    """
    Raised when a generated file does not look like expected.

    Attributes:
        path: File that could not be patched
        reason: What was wrong with it
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot patch {path}: {reason}")


def patch_cmakelists(path: str | Path) -> bool:
    """
    Replace backslashes with forward slashes in CMakeLists.txt.

    Returns:
        True if the file changed
    """
    with open_file(path, OpenMode.READ | OpenMode.WRITE) as f:
        content = read(f)
        patched = content.replace("\\", "/")
        if patched == content:
            return False
        write_over(f, patched)
    return True


def render_install_body(namespace: str) -> str:
    """Install body for the given crate namespace."""
    return CPP_ADAPTER_INSTALL_BODY.replace("{ns}", namespace)


def patch_cpp_adapter(path: str | Path) -> bool:
    """
    Rewrite the install body of the generated cpp-adapter.cpp.

    Keeps generated lines 1-26 and 56 onwards, prefixes the fbjni include
    and replaces lines 27-55. The crate namespace is read from the
    generated installRustCrate call.

    Returns:
        True if the file changed, False if it was already patched

    Raises:
        PatchError: If the file is too short or has no installRustCrate call
    """
    path = Path(path)
    with open_file(path, OpenMode.READ | OpenMode.WRITE) as f:
        content = read(f)
        if content.startswith(FBJNI_INCLUDE):
            logger.info(f"{path} already patched")
            return False

        lines = content.splitlines()
        if len(lines) < CPP_ADAPTER_TAIL:
            raise PatchError(path, f"expected at least {CPP_ADAPTER_TAIL} lines, got {len(lines)}")

        match = INSTALL_CALL_PATTERN.search("\n".join(lines[CPP_ADAPTER_HEAD:CPP_ADAPTER_TAIL]))
        if match is None:
            raise PatchError(path, "no installRustCrate call in the generated install body")

        patched = (
            FBJNI_INCLUDE
            + "\n"
            + "\n".join(lines[:CPP_ADAPTER_HEAD])
            + render_install_body(match.group(1))
            + "\n".join(lines[CPP_ADAPTER_TAIL:])
        )
        if content.endswith("\n") and not patched.endswith("\n"):
            patched += "\n"
        write_over(f, patched)
    return True
