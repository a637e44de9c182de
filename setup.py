from setuptools import setup, find_packages

setup(
    name="sidecarfs",
    version="0.1",
    author="The sidecarfs authors",
    description="Extended attributes for file systems that lack them",
    license="GPL-3.0-or-later",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fusepy",
    ],
    extras_require={
        "validation": ["jsonschema"],
        "toml": ['tomli; python_version < "3.11"'],
        "yaml": ["PyYAML"],
        "test": [
            "pytest",
            "jsonschema",
            "PyYAML",
            'tomli; python_version < "3.11"',
            "pyxattr",
        ],
    },
    entry_points={
        "console_scripts": ["sidecarfs=sidecarfs.commands.main:main"],
    },
)
