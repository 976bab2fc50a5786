import setuptools

# This call to setup() does all the work
setuptools.setup(
    name="symopl",
    version="0.1.0",
    description="SYMbolic OPL model compiler (SYMOPL) package",
    long_description="Compiles OPL-style optimization models into linear equations and objectives.",
    long_description_content_type="text/plain",
    license="MIT",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Topic :: Scientific/Engineering",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Intended Audience :: Science/Research",
        "Development Status :: 2 - Pre-Alpha",
    ],
    packages=setuptools.find_packages(include=["symopl", "symopl.*"]),
    package_data={"symopl": ["VERSION"]},
    python_requires=">=3.8",
    include_package_data=True,
    install_requires=["numpy>=1.21.2", "ordered-set>=4.0.2"],
    extras_require={"test": ["pytest"]},
)
