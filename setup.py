"""Setup configuration for uirun."""

from setuptools import setup, find_packages

setup(
    name="uirun",
    version="0.1.0",
    description="Run coordinator for UI test suites running inside a host application",
    packages=find_packages(exclude=["tests", "tests.*", "scenarios"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "uirun=uirun.cli:main",
        ],
    },
)
