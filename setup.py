"""Daily statistics and charts for individually reported lab test results."""

import os

from setuptools import find_packages, setup

readme = open("README.md").read()
history = open("CHANGES.md").read()

tests_require = [
    "pytest>=7.0",
]

extras_require = {
    "tests": tests_require,
}

extras_require["all"] = []
for reqs in extras_require.values():
    extras_require["all"].extend(reqs)

install_requires = [
    "arrow>=1.2",
    "Babel>=2.8",
    "click>=8.0",
    "Flask>=2.0",
    "halo>=0.0.31",
    "Jinja2>=3.0",
    "openpyxl>=3.0",
    "orjson>=3.6",
]

packages = find_packages(exclude=["tests", "tests.*"])

# Get the version string. Cannot be done with import!
g = {}
with open(os.path.join("lab_stats_dashboard", "version.py"), "rt") as fp:
    exec(fp.read(), g)
    version = g["__version__"]

setup(
    name="lab-stats-dashboard",
    version=version,
    description=__doc__,
    long_description=readme + "\n\n" + history,
    long_description_content_type="text/markdown",
    keywords="lab tests statistics percentiles gnuplot",
    license="MIT",
    author="MESH Research",
    author_email="info@meshresearch.net",
    packages=packages,
    zip_safe=False,
    include_package_data=True,
    package_data={
        "lab_stats_dashboard": ["plotting/templates/*.gp"],
    },
    platforms="any",
    entry_points={
        "console_scripts": [
            "lab-stats = lab_stats_dashboard.cli:cli",
        ],
    },
    extras_require=extras_require,
    install_requires=install_requires,
    python_requires=">=3.11",
    classifiers=[
        "Environment :: Console",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Development Status :: 4 - Beta",
    ],
)
