"""
Setup script for happymath package.
"""

from setuptools import setup, find_packages

setup(
    name="happymath",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",

        # Record validation
        "pydantic>=2.0.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "tests": ["pytest>=6.0.0", "scikit-learn>=1.0.0"],
    },
    entry_points={
        'console_scripts': [
            'happymath=happymath.__main__:main',
        ],
    },
    author="Happiness Dashboard Team",
    description="Association mining, clustering and correlation engine for the well-being dashboard",
    keywords="happiness, apriori, association rules, kmeans, clustering, correlation",
    python_requires=">=3.8",
)
