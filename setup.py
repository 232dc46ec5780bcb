from setuptools import setup, find_namespace_packages

setup(
    name="mongobox",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["mongobox*"]),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "tenacity>=8.0",
        "python-dotenv>=1.0",
        "docker>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "mongobox=mongobox.CLI.main:main",
        ],
    },
)
