"""Setup script for Site Audit"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
this_directory = Path(__file__).parent
long_description = ""
readme_path = this_directory / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name="site-audit",
    version="0.1.0",
    description="Two-wave website auditor: parallel collectors, fallback-chained analysers, scored synthesis",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Internet :: WWW/HTTP :: Site Management",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.20.0",
        "httpx>=0.25.0",
        "pydantic>=2.4",
        "beautifulsoup4>=4.12",
        "typer>=0.9.0",
        "rich>=13.0",
        "starlette>=0.27",
        "uvicorn>=0.23",
        "tomli>=2.0; python_version<'3.11'",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-audit=site_audit.cli:app",
        ],
    },
    keywords="website-audit lighthouse seo accessibility security asyncio",
)
