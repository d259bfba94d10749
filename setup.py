#!/usr/bin/env python3
"""Setup script for pybloom_diff - Bloom filtered differential file lookups."""
from setuptools import setup

VERSION = "1.0.0"
DESCRIPTION = "Bloom filter accelerated lookups over a differential file"
LONG_DESCRIPTION = """
Key-based record lookup over a two-tier text store: a small differential file
of recently changed records shadowing a large, mostly static database file.

A Bloom filter built over the differential keys lets a query skip the
differential scan whenever the key is provably absent, trading a small,
tunable false positive rate for a large average-case speedup.

Features:
- Three interchangeable hash families: FNV-1a, MurmurHash64A and an affine
  rotation family, all finished with (a * x + b) mod p over a prime p
- Space-efficient bit array storage
- Naive reference lookup for correctness and latency comparisons
- False positive and retrieval timing experiments
- `pybloom-diff` command line tool
"""

CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.8",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3 :: Only",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Utilities",
]

setup(
    name="pybloom_diff",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/plain",
    classifiers=CLASSIFIERS,
    keywords=[
        "bloom filter",
        "probabilistic",
        "differential file",
        "set membership",
        "fnv",
        "murmurhash",
    ],
    license="MIT License",
    platforms=["any"],
    python_requires=">=3.8",
    install_requires=["bitarray>=1.0.0"],
    extras_require={"test": ["pytest>=7.0"]},
    packages=["pybloom_diff"],
    entry_points={
        "console_scripts": ["pybloom-diff=pybloom_diff.cli:main"],
    },
    zip_safe=True,
)
