#!/usr/bin/env python3
"""Setup script for the Super Seed client."""

from setuptools import find_packages, setup


if __name__ == "__main__":
    setup(
        name="super-seed",
        version="0.1.0",
        description="Client for a pay-per-piece file sharing engine",
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=[
            "aria2p>=0.12",
            "requests>=2.28",
            "websocket-client>=1.6",
        ],
        extras_require={
            "test": ["pytest>=7"],
        },
        entry_points={
            "console_scripts": [
                "super-seed=super_seed.cli:main",
            ],
        },
    )
