"""
Installation script for the mdb-to-sql package.
"""

from setuptools import setup, find_packages
import os

# Read the README content
here = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = "Access (.mdb) to PostgreSQL / SQLite / MySQL copy tool"

# Package version
version = '1.0.0'

setup(
    name="mdb-to-sql",
    version=version,
    description="Access (.mdb) to PostgreSQL / SQLite / MySQL copy tool",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="famat.me",
    author_email="contact@famat.me",
    url="https://github.com/fran-cois/mdb-to-sql",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "python-dotenv>=0.15.0",
        "rich>=10.0.0",
        "pyodbc>=4.0.30",
        "psycopg2-binary>=2.8",
        "PyMySQL>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
        ],
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
            "black>=20.8b1",
            "isort>=5.0.0",
            "mypy>=0.800",
        ],
    },
    entry_points={
        "console_scripts": [
            "mdb-to-sql=mdb_to_sql.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: SQL",
        "Topic :: Database",
        "Topic :: Database :: Database Engines/Servers",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    keywords="access, mdb, postgresql, sqlite, mysql, database, migration",
)
