from setuptools import setup, find_packages

setup(
    name="cubic_montecarlo",
    version="0.1.0",
    description="Monte Carlo integration of a cubic: sequential CPU vs Triton/torch parallel backends",
    packages=find_packages(include=["integration", "backends", "kernels"]),
    py_modules=["main"],
    python_requires=">=3.8",
    install_requires=[
        "torch>=2.1.0",
        "triton>=2.1.0",
        "numpy",
        "pytest",
        "scipy"
    ],
)
