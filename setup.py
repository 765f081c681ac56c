import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pyidat",
    version="0.0.1",
    description="Decoder for IDAT microarray intensity files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    scripts=['scripts/readidat.py'],
    python_requires='>=3.8',
    install_requires=[
        'numpy',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
