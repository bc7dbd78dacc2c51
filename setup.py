# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

import os

from setuptools import find_packages, setup


def read_version():
    """Read __version__ from the package without importing it."""
    init_path = os.path.join(os.path.dirname(__file__), "fixedtensor", "__init__.py")
    with open(init_path, encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"')
    raise RuntimeError("Unable to find __version__ in fixedtensor/__init__.py")


setup(
    name="fixedtensor",
    version=read_version(),
    description="Dense fixed-shape tensors with row-major index codec and owned buffers",
    author="Wahyu Ardiansyah",
    license="Apache-2.0",
    python_requires=">=3.9",
    packages=find_packages(include=["fixedtensor", "fixedtensor.*"]),
    install_requires=[
        "numpy>=1.21",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
)
