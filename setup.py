"""
Setup script for TokenWeaver - Design Token Ingestion and Design System Export
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README file
readme_path = Path(__file__).parent / "README.md"
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()
else:
    long_description = "TokenWeaver - Design Token Ingestion and Design System Export"

# Read version from package
version = "1.0.0"
try:
    with open(Path(__file__).parent / "tokenweaver" / "__version__.py", "r") as f:
        exec(f.read())
        version = __version__
except FileNotFoundError:
    pass

# Core requirements (always installed)
core_requirements = [
    "click>=8.0.0",
    "PyYAML>=6.0",
    "python-dotenv>=1.0.0",
    "chardet>=4.0.0",
    "jinja2>=3.1.0",
]

# Optional feature requirements
extras_require = {
    # Development tools
    "dev": [
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
    ],
}

setup(
    name="tokenweaver",
    version=version,
    author="TokenWeaver Development Team",
    description="Design token ingestion and multi-format design system export",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Software Development :: User Interfaces",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    python_requires=">=3.8",
    install_requires=core_requirements,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "tokenweaver=tokenweaver.cli.main:main",
            "tw=tokenweaver.cli.main:main",  # Short alias
        ],
    },
    include_package_data=True,
    package_data={
        "tokenweaver": [
            "templates/mcp_server/*.j2",
            "templates/mcp_server/src/*.j2",
            "templates/mcp_server/src/tools/*.j2",
        ],
    },
    keywords=[
        "design tokens",
        "design system",
        "css variables",
        "tailwind",
        "figma",
        "style dictionary",
        "mcp",
        "ai context",
    ],
    zip_safe=False,
)
