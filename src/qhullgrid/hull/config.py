from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from ..errors import UnsupportedOptionError


class HullMode(str, Enum):
    HULL = "hull"
    DELAUNAY = "delaunay"
    VORONOI = "voronoi"


# Qhull option strings per mode. scipy adds "d" / "v" itself for Delaunay / Voronoi.
QHULL_OPTIONS = {
    HullMode.HULL: "QJ Pp",
    HullMode.DELAUNAY: "QJ Pp",
    HullMode.VORONOI: "QJ Qbb Pp",
}


@dataclass(frozen=True)
class HullOptions:
    """
    Every option a hull query understands, with its default.
    Built once per call; never cached between calls.
    """
    mode: HullMode = HullMode.HULL
    bounds: bool = False
    connectivity: bool = False
    voronoi_vertices: bool = False
    voronoi_normals: bool = False
    voronoi_diagram: bool = False
    sphere: bool = False

    def __post_init__(self):
        if not isinstance(self.mode, HullMode):
            by_name = {m.value: m for m in HullMode}
            key = self.mode.lower() if isinstance(self.mode, str) else None
            if key not in by_name:
                raise UnsupportedOptionError(
                    f"unknown mode {self.mode!r}, expected one of {sorted(by_name)}"
                )
            object.__setattr__(self, "mode", by_name[key])

    @property
    def wants_voronoi(self) -> bool:
        return self.voronoi_vertices or self.voronoi_normals or self.voronoi_diagram

    @property
    def effective_mode(self) -> HullMode:
        # any Voronoi output switches to the dual of a Delaunay triangulation
        if self.wants_voronoi:
            return HullMode.VORONOI
        return self.mode

    @property
    def is_delaunay(self) -> bool:
        return self.effective_mode in (HullMode.DELAUNAY, HullMode.VORONOI)

    @property
    def qhull_options(self) -> str:
        return QHULL_OPTIONS[self.effective_mode]

    def validated(self) -> "HullOptions":
        """
        Return self with mode resolved, or raise for option combinations that cannot run.
        """
        if self.connectivity and not (self.is_delaunay or self.sphere):
            raise UnsupportedOptionError(
                "connectivity requires delaunay (or sphere) mode"
            )
        if self.sphere:
            raise UnsupportedOptionError("SPHERE is not implemented")
        return replace(self, mode=self.effective_mode)
