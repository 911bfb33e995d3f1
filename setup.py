from setuptools import setup, find_packages

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("requirements.txt", "r") as fh:
    reqs = fh.read()

setup(
    name="dicomsorter",
    version="0.1.0",
    description="Sort DICOM studies into subject and series folders, safely and repeatably.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=reqs,
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    extras_require={
        'test': ['pytest'],
    },
    entry_points={'console_scripts': ['dicomsort = dicomsorter.cli.dicomsort:dicomsort',]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: Apache Software License",
        "Development Status :: 3 - Alpha"
    ],
    python_requires='>=3.10',
)
