from setuptools import setup, find_packages

setup(
    name="browser-harness",
    version="1.0.0",
    description="Pooled browser contexts, reusable sessions and cross-engine fan-out for end-to-end tests",
    author="Michael Elliott",
    author_email="melliott@anaconda.com",
    packages=find_packages(exclude=["tests", "tests.*", "suites", "suites.*"]),
    include_package_data=True,
    install_requires=[
        "playwright>=1.40.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'harness=harness.__main__:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
)
