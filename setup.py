from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="lessonsync",
    version="0.1.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Timed speech synthesis and timeline compilation for mixed-language video lessons",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/lessonsync",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "edge-tts>=6.1.0",
        "pydub>=0.25.1",
        "aiohttp>=3.8.0",
        "aiofiles>=23.1.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "PyYAML>=6.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
        "typing_extensions>=4.5.0",
    ],
    extras_require={
        "google": [
            "google-cloud-texttospeech>=2.14.0",
        ],
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-mock>=3.11.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'lessonsync=lessonsync.cli.main:app',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
