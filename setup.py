from setuptools import setup, find_packages

setup(
    name="page-scraper",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    py_modules=["api", "app", "yc_cli"],
    install_requires=[
        "playwright",
        "beautifulsoup4",
        "python-dotenv",
        "aiohttp",
        "fastapi>=0.115",
        "uvicorn",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "page-scraper-server=app:main",
            "yc-scraper=yc_cli:main",
        ],
    },
)
