"""
Setup script for the ilqgmpc Python package.

The package is pure Python; the numerical work is done with NumPy/SciPy
and the YAML configuration files are read with PyYAML.

Install for development from the repository root:
    pip install -e "python/[dev]"

Then run the tests:
    pytest tests/python
"""

from setuptools import find_packages, setup

setup(
    name="ilqgmpc",
    version="0.1.0",
    description="iLQG trajectory optimization and receding-horizon nonlinear MPC",
    packages=find_packages(),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
        "pyyaml>=5.4",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "hypothesis>=6.0",
            "black>=23.0",
            "ruff>=0.1.0",
            "mypy>=1.0",
        ],
    },
)
