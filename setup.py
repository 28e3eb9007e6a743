from setuptools import find_packages, setup

setup(
    name="storec",
    version="1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=["httpx>=0.24", "botocore>=1.29"],
    extras_require={"test": ["pytest>=7"]},
    description="Streaming client for S3-compatible object storage and the local filesystem",
    license="Apache 2.0",
)
