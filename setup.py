from setuptools import setup, find_packages

setup(
    name="openclaw-vps",
    version="0.1.0",
    description="Single spot instance VPS with a persistent EBS volume, declared with Pulumi",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="OpenClaw VPS Team",
    packages=find_packages(include=["openclaw_vps", "openclaw_vps.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pulumi>=3.100.0,<4.0.0",
        "pulumi-aws>=6.0.0,<7.0.0",
        "pydantic>=2.0.0",
        "click>=8.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "openclaw-vps=openclaw_vps.cli.main:cli",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
