"""
Setup configuration for MDB_AUTOINDEX package.
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

setup(
    name="mdb-autoindex",
    version="0.1.0",
    description="Self-tuning dynamic index watcher for MongoDB collections",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["mdb_autoindex", "mdb_autoindex.*"]),
    python_requires=">=3.10",
    install_requires=[
        "motor>=3.0.0",
        "pymongo>=4.0.0",
        "pydantic>=2.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "testcontainers[mongodb]>=3.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mdb-autoindex=mdb_autoindex.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="mongodb indexes motor auto-indexing",
    include_package_data=True,
)
