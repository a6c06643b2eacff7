# pylint: disable=missing-module-docstring
# ruff: noqa

from pathlib import Path

from setuptools import find_packages, setup


def read_long_description() -> str:
    """Return README contents for PyPI description."""
    readme_path = Path(__file__).with_name("README.md")
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else "Trend Pulse"


setup(
    name="trend-pulse",
    version="0.1.0",
    description="Cascading trending-topics fetcher with caching and prompt formatting",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    packages=find_packages(include=["trend_engine", "trend_engine.*", "fetchers", "fetchers.*"]),
    include_package_data=True,
    install_requires=[
        "pandas>=2.0",
        "httpx>=0.26",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "openai>=1.30",
        "google-genai>=1.33",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "trend-fetch = trend_engine.cli_entrypoints:fetch",
            "trend-watch = trend_engine.cli_entrypoints:watch",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
