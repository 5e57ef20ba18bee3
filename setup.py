"""
multisql Setup
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="multisql",
    version="1.0.0",
    author="multisql Contributors",
    description="Pluggable drivers and query pipeline for a multi-source SQL shell",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Database :: Front-Ends",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "duckdb>=0.9.0",
        "pandas>=1.5.0,<3",
        "pyarrow>=14.0.0",
        "fastavro>=1.9.0",
        "pyyaml>=6.0",
        "openpyxl>=3.1.0",
        "odfpy>=1.4.0",
        "sqlglot>=20.0.0",
        "inflection>=0.5.1",
        "babel>=2.12.0",
        "rich>=13.0.0",
        "httpx>=0.25.0",
    ],
    extras_require={
        "postgres": ["psycopg2-binary>=2.9.0"],
        "mysql": ["mysql-connector-python>=8.0.0"],
        "clickhouse": ["clickhouse-connect>=0.6.0"],
        "snowflake": ["snowflake-connector-python>=3.0.0"],
        "cratedb": ["crate>=0.35.0"],
        "libsql": ["libsql-experimental>=0.0.30"],
        "flightsql": ["adbc-driver-flightsql>=0.10.0"],
        "redis": ["redis>=5.0.0"],
        "aws": ["boto3>=1.28.0"],
        "compression": ["brotli>=1.1.0", "lz4>=4.3.0", "zstandard>=0.22.0"],
        "all": [
            "psycopg2-binary>=2.9.0",
            "mysql-connector-python>=8.0.0",
            "clickhouse-connect>=0.6.0",
            "snowflake-connector-python>=3.0.0",
            "crate>=0.35.0",
            "libsql-experimental>=0.0.30",
            "adbc-driver-flightsql>=0.10.0",
            "redis>=5.0.0",
            "boto3>=1.28.0",
            "brotli>=1.1.0",
            "lz4>=4.3.0",
            "zstandard>=0.22.0",
        ],
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "respx>=0.20.0",
        ],
    },
    keywords="sql, database, duckdb, postgresql, mysql, sqlite, csv, parquet, shell",
)
