"""Setup configuration for tsight-agent package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]
else:
    requirements = []

setup(
    name="tsight-agent",
    version="0.1.0",
    author="TSight Team",
    author_email="your-email@example.com",
    description="Data-access agent that runs TSight queries and schema discovery against local data sources",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/your-org/tsight-agent",
    packages=find_packages(where=".", include=["tsight_agent", "tsight_agent.*"]),
    package_dir={"": "."},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "respx>=0.20.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tsight-agent=tsight_agent.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "tsight_agent.config": ["*.yaml"],
    },
    zip_safe=False,
)
