from setuptools import setup, find_packages

setup(
    name="commute-routing",
    version="0.1.0",
    description="Next-departure transit routing for Seattle commutes using the Google Directions API.",
    author="Hamish Burke",
    author_email="hamishapps@gmail.com",  # Optional
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main_cli"],
    install_requires=[
        "requests",
        "pytz",
        "python-dotenv"
    ],
    extras_require={
        "tests": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "commute=main_cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.7',
)
