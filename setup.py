from setuptools import setup, find_packages

setup(
    name='earcutpy',
    version='0.1.0',
    description='Ear-clipping triangulation of polygons with holes',
    packages=find_packages(include=['earcutpy', 'earcutpy.*']),
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'numba',
    ],
    extras_require={
        'cuda': ['cupy'],
        'tests': ['pytest', 'xarray'],
    },
)
