"""
Setup script for predprey_abm package
Patch-based prey/predator model of alpha/tau trait evolution
"""
from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="predprey-abm",
    version="0.1.0",
    description="Agent-based model of prey/predator trait evolution over resource patches",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["predprey_abm", "predprey_abm.*"]),
    python_requires=">=3.10",
    install_requires=[
        # Core scientific stack
        "numpy>=1.20",
        "pandas>=1.3,<3.0",
    ],
    extras_require={
        "dev": [
            "black>=22.0",
            "isort>=5.0",
            "pytest>=7.0",
            "pytest-cov>=3.0",
            "scipy>=1.7,<2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "predprey-run=predprey_abm.experiments:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
