import setuptools
import os

version = "0.1.0"

with open(os.path.join(os.path.dirname(__file__), "README.md")) as f:
    LongDescription = f.read()

setuptools.setup(
    name="universaldrone",
    zip_safe=True,
    version=version,
    description="Hardware-agnostic control layer for small drones.",
    long_description_content_type="text/markdown",
    long_description=LongDescription,
    install_requires=[
        "pymavlink>=2.2.20",
        "monotonic>=1.3",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering",
    ],
    license="gpl-3.0",
    packages=setuptools.find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
)
