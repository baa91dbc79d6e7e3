"""
Setup script for strata-quiz.

Strata is the adaptive selection core of a kanji study app:

1. Question Selection - Priority-weighted daily mixes, drills and mock exams
2. Mastery Tracking - Per-item streaks and per-category rates
3. Rewards - Minerals, titles and badges derived from progress

The 'strata' command inspects and manages a local profile.
"""

from setuptools import find_packages, setup

setup(
    name="strata-quiz",
    version="1.0.0",
    description="Adaptive question selection and mastery tracking for kanji study",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Strata",
    packages=find_packages(include=["strata", "strata.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "strata=strata.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition quiz kanji education",
)
