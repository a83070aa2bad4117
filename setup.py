#!/usr/bin/env python

"""The setup script."""

from setuptools import find_packages, setup

with open("README.rst") as readme_file:
    readme = readme_file.read()

with open("HISTORY.rst") as history_file:
    history = history_file.read()

requirements = [
    "Click>=7.0",
    "httpx>=0.23.0",
    "rich>=13.0.0",
    "pyyaml>=5.0",
]

test_requirements = [
    "pytest>=3",
]

setup(
    author="isilonpapi maintainers",
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: System :: Filesystems",
    ],
    description="Python client for the OneFS Platform API",
    entry_points={
        "console_scripts": [
            "isilon=isilonpapi.cli_entry:main",
        ],
    },
    install_requires=requirements,
    extras_require={
        "test": test_requirements,
    },
    license="Apache Software License 2.0",
    long_description=readme + "\n\n" + history,
    include_package_data=True,
    keywords=["isilon", "onefs", "powerscale", "papi", "nas", "python-client"],
    name="isilonpapi",
    packages=find_packages(include=["isilonpapi", "isilonpapi.*"]),
    test_suite="tests",
    tests_require=test_requirements,
    version='0.1.0',
    zip_safe=False,
)
