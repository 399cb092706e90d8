import sys
from setuptools import setup, find_packages

if sys.version_info.major < 3:
    sys.exit("Error: Please upgrade to Python3")


def get_long_description():
    with open("README.rst") as fp:
        return fp.read()


setup(
    name="lockstamp",
    version="1.0.0",
    description="Stamp a release version into a dependency lockfile",
    long_description=get_long_description(),
    packages=find_packages(exclude=["lockstamp.test", "lockstamp.test.*"]),
    include_package_data=True,
    python_requires=">=3.7",
    install_requires=["cli-ui>=0.9.0", "docopt", "schema", "tomlkit>=0.11"],
    extras_require={
        "dev": [
            "black",
            # tests
            "pytest",
            "pytest-mock",
            "pytest-cov",
            # linters
            "mypy",
            "flake8",
            # distribution
            "wheel",
            "twine",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
    entry_points={"console_scripts": ["lockstamp = lockstamp.cli:main"]},
)
