from setuptools import setup, find_packages

setup(
    name="lasercalc",
    version="0.1.0",
    description="Laser Cutting Calculators - validated engineering calculators with a uniform contract",
    author="HST.AI Engineering",
    author_email="ha.nguyen@hydrostructai.com",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "app", "app.*"]),
    package_data={
        "lasercalc": ["data/*.yaml", "data/locales/*.yaml"],
    },
    include_package_data=True,
    install_requires=[
        "numpy>=1.24.0",
        "scipy>=1.15.0",
        "pandas>=2.0.0",
        "streamlit>=1.28.0",
        "plotly>=5.17.0",
        "deap>=1.4.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "hypothesis>=6.0",
        ],
        "dev": [
            "pytest>=7.4.0",
            "hypothesis>=6.0",
            "black>=23.0.0",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Manufacturing",
        "Topic :: Scientific/Engineering",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
