#!/usr/bin/env python3
"""
Setup script for Courier.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="courier-http",
    version="0.1.0",
    description="Async HTTP response writer with idempotent finalization and static file streaming",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Courier Contributors",
    packages=find_packages(include=["courier", "courier.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "aiofiles>=23.1.0",
        "pyyaml>=6.0",
        "python-dotenv>=1.0.0",
        "uvicorn>=0.30.0",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "courier=courier.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    keywords="http response asgi static files streaming",
)
