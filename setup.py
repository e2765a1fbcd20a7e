from setuptools import setup, find_packages

setup(
    name="semver-checker",
    version="1.0.0",
    description="Semantic version checker and fixer for GitHub Actions repositories",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "rich>=13.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "semver-checker=semver_checker.cli:main",
        ],
    },
)
