from __future__ import annotations

from typing import List

from .models import Dependency, Formula, FormulaOption


HOMEPAGE = "https://www.openems.de"
HEAD_URL = "https://github.com/thliebig/openEMS-Project.git"
DESC = "Electromagnetic field solver using the FDTD method"

BINDING_SUBDIRS = ["CSXCAD/python", "openEMS/python"]

_PYTHON_OPTION = FormulaOption(
    name="python",
    description="Build the CSXCAD and openEMS python bindings",
    default=False,
)


def builtin_formulas() -> List[Formula]:
    # Historical variants, oldest first. Dependency sets drift between them on
    # purpose and are kept as they were shipped.
    return [
        Formula(
            name="openems",
            version_tag="v1",
            homepage="http://openems.de",
            head_url=HEAD_URL,
            dependencies=[
                Dependency(name="cmake", kind="build"),
                Dependency(name="flex"),
                Dependency(name="bison"),
                Dependency(name="qt"),
                Dependency(name="tinyxml"),
                Dependency(name="vtk", tags=["with-qt", "c++11"]),
                Dependency(name="cgal", tags=["c++11"]),
                Dependency(name="boost", tags=["c++11"]),
            ],
            cxx_std="c++11",
        ),
        Formula(
            name="openems",
            version_tag="v2",
            desc=DESC,
            homepage=HOMEPAGE,
            head_url=HEAD_URL,
            dependencies=[
                Dependency(name="cmake", kind="build"),
                Dependency(name="qt@5"),
                Dependency(name="vtk"),
                Dependency(name="tinyxml"),
                Dependency(name="hdf5"),
                Dependency(name="gmp"),
                Dependency(name="mpfr"),
                Dependency(name="cgal"),
                Dependency(name="boost"),
            ],
        ),
        Formula(
            name="openems",
            version_tag="v3",
            desc=DESC,
            homepage=HOMEPAGE,
            head_url=HEAD_URL,
            dependencies=[
                Dependency(name="cmake", kind="build"),
                Dependency(name="qt@5"),
                Dependency(name="vtk"),
                Dependency(name="tinyxml"),
                Dependency(name="hdf5"),
                Dependency(name="cgal"),
                Dependency(name="boost"),
                Dependency(name="python", kind="optional", option="python"),
            ],
            options=[_PYTHON_OPTION],
            python_packages=["h5py"],
            binding_subdirs=list(BINDING_SUBDIRS),
            cxx_std="c++11",
            sdk_root_required=True,
        ),
        Formula(
            name="openems",
            version_tag="v4",
            desc=DESC,
            homepage=HOMEPAGE,
            head_url=HEAD_URL,
            dependencies=[
                Dependency(name="cmake", kind="build"),
                Dependency(name="qt@5"),
                Dependency(name="vtk@8.2"),
                Dependency(name="tinyxml"),
                Dependency(name="hdf5"),
                Dependency(name="cgal"),
                Dependency(name="boost"),
                Dependency(name="python@3.9", kind="optional", option="python"),
            ],
            options=[_PYTHON_OPTION],
            python_packages=["cython", "numpy", "h5py"],
            binding_subdirs=list(BINDING_SUBDIRS),
            cxx_std="c++11",
            sdk_root_required=True,
        ),
        Formula(
            name="openems",
            version_tag="v5",
            desc=DESC,
            homepage=HOMEPAGE,
            head_url=HEAD_URL,
            dependencies=[
                Dependency(name="cmake", kind="build"),
                Dependency(name="qt@5"),
                Dependency(name="vtk"),
                Dependency(name="tinyxml"),
                Dependency(name="hdf5"),
                Dependency(name="cgal"),
                Dependency(name="boost"),
                Dependency(name="python@3", kind="optional", option="python"),
            ],
            options=[_PYTHON_OPTION],
            python_packages=["cython", "numpy", "h5py"],
            binding_subdirs=list(BINDING_SUBDIRS),
            cxx_std="c++17",
            sdk_root_required=True,
        ),
    ]
