"""Setup script for gbm-stoploss-game package."""

from setuptools import setup, find_packages

setup(
    name="gbm-stoploss-game",
    version="1.0.0",
    description="Stop-loss trading game on Geometric Brownian Motion price paths",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="GBM Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.20.0",
        "matplotlib>=3.3.0",
        "pandas>=1.3.0",
        "python-dotenv>=0.19.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "gbm-game=gbmgame.cli:main",
        ],
    },
)
