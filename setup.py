# setup.py
from setuptools import setup, find_packages

setup(
    name="index-ping",
    version="0.1.0",
    description="IndexNow URL submission with sitemap crawling",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"index_ping.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.2",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "index-ping=index_ping.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
