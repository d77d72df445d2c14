from setuptools import setup, find_packages

setup(
    name="coupledfe",
    version="0.1.0",
    description="Gauss-point kernels for coupled phase-field fracture and Cahn-Hilliard mechanics",
    author="CoupledFE Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
        "matplotlib>=3.4",
    ],
    extras_require={
        "dev": ["pytest>=6.0"],
        "docs": ["sphinx>=4.0", "sphinx-rtd-theme>=1.0"],
    },
)
