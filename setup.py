#!/usr/bin/env python3
"""
Setup script for radiodial.
"""

from setuptools import setup, find_packages

setup(
    name="radiodial",
    version="0.1.0",
    description="Connection dispatch and radio-session orchestration for ARDOP, PACTOR, VARA, AX.25 and telnet links",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pyserial>=3.5",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-timeout>=2.1.0",
        ],
    },
    keywords=["ham-radio", "winlink", "ardop", "pactor", "vara", "ax25", "qsy", "modem"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Communications :: Ham Radio",
        "Topic :: System :: Hardware :: Hardware Drivers",
        "Operating System :: POSIX :: Linux",
        "License :: OSI Approved :: MIT License",
    ],
)
