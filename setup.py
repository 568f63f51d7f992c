from setuptools import find_packages, setup

setup(
    name="gridstream",
    packages=find_packages(include=["gridstream", "gridstream.*"]),
    version="0.1.0.dev0",
    description="Proximity-ordered streaming of grid cells around an origin, backed by Polars",
    python_requires=">=3.11",
    install_requires=[
        "polars>=1.0",
        "numpy>=1.26",
        "beartype>=0.18",
        "typer>=0.9",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "hypothesis",
        ],
    },
    license="MIT License",
)
