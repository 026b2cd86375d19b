#!/usr/bin/env python3
"""
Setup script for the Wiener vs DnCNN denoising comparison project.
"""

from setuptools import find_packages, setup


# Read README for long description
def read_readme():
    with open("README.md", "r", encoding="utf-8") as f:
        return f.read()


# Read requirements
def read_requirements():
    with open("requirements.txt", "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip() and not line.startswith("#")]


setup(
    name="denoise-comparison",
    version="0.1.0",
    description="Adaptive Wiener filtering vs pretrained DnCNN on Gaussian noise",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    # Package configuration
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=read_requirements(),
    # Entry points for CLI tools
    entry_points={
        "console_scripts": [
            "compare-denoisers=scripts.compare_denoisers:main",
        ],
    },
    # Development dependencies
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    # Classifiers
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Processing",
    ],
    keywords="image denoising, wiener filter, dncnn, psnr, ssim",
)
