"""Setup configuration for the jobwatch Discord bot."""

from setuptools import setup, find_packages

setup(
    name="jobwatch",
    version="0.1.0",
    description="A Discord bot that reports job posts and recruitment pitches using an LLM",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"jobwatch.data": ["*.json"]},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.6",
        "openai>=1.40",
        "jsonschema>=4.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
        "prompt_toolkit>=3.0",
        "regex>=2023.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "jobwatch=jobwatch.main:main",
            "jobwatch-eval=jobwatch.evaluation.harness:main",
        ],
    },
)
