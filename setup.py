import os

from setuptools import find_packages, setup

_VERSION_FILE = os.path.join(os.path.dirname(__file__), "aigateway_console", "version.py")


def _read_version() -> str:
    version = {}
    with open(_VERSION_FILE) as f:
        exec(f.read(), version)
    return version["VERSION"]


setup(
    name="aigateway-console",
    version=_read_version(),
    description="REST backend for managing Envoy AI Gateway LLM providers on Kubernetes",
    packages=find_packages(include=["aigateway_console", "aigateway_console.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click<9,>=7.0",
        "fastapi<1",
        "kubernetes",
        "pydantic<3,>=2.0",
        "pyyaml<7,>=5.1",
        "urllib3",
        "uvicorn<1",
    ],
    extras_require={
        "tests": [
            "httpx",
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "aigw-console=aigateway_console.cli:cli",
        ],
    },
)
