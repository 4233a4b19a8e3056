#!/usr/bin/env python

"""
A setuptools based setup module.
See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""

from pathlib import Path

# Always prefer setuptools over distutils
from setuptools import find_packages, setup

# Get the long description from the README file
long_description = (Path(__file__).parent / "README.md").read_text()

setup(
    name="navgraph",
    version="0.1.0",
    description="Directional navigation edges between nearby street-level and panoramic images.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="",
    author="",
    author_email="",
    license="BSD-3-Clause",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: POSIX",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Processing",
    ],
    keywords="computer-vision panorama navigation",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"navgraph": ["configs/*.yaml"]},
    include_package_data=True,
    python_requires=">= 3.10",
    install_requires=[
        "dask",
        "distributed",
        "gtsam",
        "hydra-core",
        "networkx",
        "numpy",
        "omegaconf",
        "scipy",
    ],
    extras_require={"test": ["pytest"]},
)
