from setuptools import find_packages, setup

setup(
    name="emrio_robustness",
    version="0.1.0",
    packages=find_packages(include=["emrio_tools", "emrio_tools.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "pandas>=1.3.0",
        "pyyaml>=6.0.0",
        "pydantic>=2.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "emrio-robustness=emrio_tools.cli:robustness",
        ],
    },
    python_requires=">=3.10",
    description="Monte Carlo internal robustness analysis for enterprise-level MRIO tables",
    license="MIT",
)
