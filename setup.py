"""
uvg - SQLAlchemy model code generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="uvg",
    version="0.1.0",
    author="uvg contributors",
    author_email="",
    description="Generate SQLAlchemy declarative or Table models from an introspected schema",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Database",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "sqlalchemy>=2.0.7",
        ],
        "dev": [
            "pytest>=7.0",
            "sqlalchemy>=2.0.7",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "uvg=uvg.cli:cli_main",
        ],
    },
    keywords="sqlalchemy, generator, codegen, schema, orm, postgresql, mssql",
)
