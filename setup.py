# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for flowscope, the n8n workflow inspection API
"""

from setuptools import setup, find_packages

setup(
    name="flowscope",
    version="0.1.0",
    description="Variable search and schedule calendar for n8n workflows",
    author="Jason Cafarelli",
    packages=find_packages(include=["flowscope", "flowscope.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "pydantic>=2.0.0",
        "httpx>=0.27.0",
        "croniter>=2.0.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ]
    },
)
