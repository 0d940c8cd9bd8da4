from setuptools import setup, find_packages

setup(
    name="rindex",
    version="0.1.0",
    description="Fast indexer compatible with nginx's autoindex module",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "mcp[cli]>=1.10.0,<2",
        "starlette",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        'console_scripts': [
            'rindex=rindex:main',
        ],
    },
    python_requires=">=3.11",
)
