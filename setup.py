"""
Setup script for glo-readiness-engine.

The readiness engine predicts how ready a learner is for an upcoming
assessment. It serves three roles:

1. Prediction - Weighted readiness score, confidence and level per assessment
2. Remediation - Ranked practice recommendations for weak objectives
3. Readiness Checks - Short diagnostic question sets ahead of an assessment

The 'readiness' command is the CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="glo-readiness-engine",
    version="1.0.0",
    description="Assessment readiness prediction from mastery and practice history",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Right Learning",
    packages=find_packages(exclude=("tests", "tests.*")),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
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
            "readiness=readiness_engine.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning assessment readiness mastery bloom education",
)
