from pathlib import Path
from setuptools import find_packages, setup

README = Path(__file__).parent / "README.md"

setup(
    name="tsmerge",
    version="1.0.0",
    description="Merges the repeated namespace blocks of TypeScript output (.d.ts and .js) files",
    long_description=README.read_text(encoding="utf-8") if README.exists() else "",
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "calmjs.parse>=1.3",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["tsmerge=tsmerge.cli:main"],
    },
)
