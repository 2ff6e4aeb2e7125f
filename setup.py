from typing import List

from setuptools import find_namespace_packages, setup


setup_requirements: List[str] = []

requirements = [
    "numpy>=1.15.0",
    "dacite>=1.6.0",
    "pyyaml>=5.1",
    "click>=7.0",
]

test_requirements: List[str] = ["pytest"]

with open("README.md") as readme_file:
    readme = readme_file.read()

setup(
    author="stagger developers",
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
    ],
    description=(
        "stagger advects scalar fields on a periodic Arakawa-C staggered grid "
        "with upstream, leapfrog and MPDATA schemes"
    ),
    install_requires=requirements,
    setup_requires=setup_requirements,
    tests_require=test_requirements,
    extras_require={
        "mpi": ["mpi4py"],
        "test": test_requirements,
    },
    name="stagger",
    license="BSD license",
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["stagger.*"]),
    include_package_data=True,
    version="0.1.0",
    zip_safe=False,
)
