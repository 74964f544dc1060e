from setuptools import setup, find_namespace_packages

setup(
    name="d2sd",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["d2sd", "d2sd.*"]),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "tenacity>=8.0",
        "python-dotenv>=1.0",
        "jinja2>=3.0",
        "docker>=7.0",
        "prometheus_client>=0.17",
        "flask>=2.3",
        "werkzeug>=2.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "d2sd=d2sd.CLI.main:main",
        ],
    },
)
