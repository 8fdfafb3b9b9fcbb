from setuptools import setup, find_packages

setup(
    name="armagarch-historical-simulation",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*", "scripts"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "arch",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)
