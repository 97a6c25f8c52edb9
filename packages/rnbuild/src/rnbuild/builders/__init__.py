"""Platform builds."""

from rnbuild.builders.android import AndroidBuild
from rnbuild.builders.ios import IosBuild

__all__ = ["AndroidBuild", "IosBuild"]
