"""Setup configuration for RaidGuard Discord Bot."""

from setuptools import setup, find_packages

setup(
    name="raidguard",
    version="0.0.1",
    description="A Discord bot for bulk role assignment and anti-raid protection",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.12",
    install_requires=[
        "py-cord>=2.4",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "raidguard=raidguard.main:main",
        ],
    },
)
