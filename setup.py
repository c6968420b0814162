from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="crid",
    version="0.1.0",
    description="Access-controlled course registration record (CRID) registry with an HTTP API",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "fastapi>=0.100",
        "uvicorn>=0.23",
        "httpx>=0.24",
        "structlog>=23.1",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "crid=crid.__main__:main",
        ],
    },
)
