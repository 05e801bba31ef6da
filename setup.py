from setuptools import find_packages, setup

setup(
    name='NxReach',
    packages=find_packages(include=['nxreach']),
    python_requires='>=3.9',
    install_requires=[
        "geopandas>=0.14.3",
        "networkx>=3.2.1",
        "numpy>=1.26.4",
        "pandas>=2.2.0",
        "Shapely>=2.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.1",
        ],
    },
    version='0.1.0',
    description='Time-bounded, transfer-aware station reachability search for rail networks',
    author='chingiztob',
)

# python setup.py sdist bdist_wheel

# twine upload dist/*
