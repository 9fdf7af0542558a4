from setuptools import find_packages, setup

setup(
    name="asset-locator",
    version="0.1.0",
    description="Resolve asset URLs and cache file existence across local, bucket and cloud-proxy storage",
    author="Daniel T Sasser II",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "cachetools>=5.0.0",
        "paramiko>=3.0.0",
    ],
    entry_points={
        "console_scripts": [
            "asset-locator=asset_locator.__main__:main",
        ],
    },
    python_requires=">=3.10",
    extras_require={
        "dev": [
            "pytest",
            "build",
            "twine",
        ],
    },
)
