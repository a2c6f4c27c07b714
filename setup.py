from setuptools import find_packages, setup

setup(
    name="fem-displacement",
    version="0.1.0",
    description="Displacement element integration engine for nonlinear structural analysis",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.24",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0", "scipy>=1.10"],
    },
)
