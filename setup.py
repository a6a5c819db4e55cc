from pathlib import Path

from setuptools import find_namespace_packages, setup

# Load packages from requirements.txt
BASE_DIR = Path(__file__).parent
with open(Path(BASE_DIR, "requirements.txt")) as file:
    required_packages = [
        ln.strip() for ln in file.readlines() if ln.strip() and not ln.startswith("#")
    ]

# Define our package
setup(
    name="FlowSpace",
    version="0.1.0",
    description="No-shame study companion: focus timer, AI quizzes, mood check-ins and a gentle time coach",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["flowspace", "flowspace.*"]),
    package_data={"flowspace": ["schemas/*.json"]},
    install_requires=required_packages,
    extras_require={
        "test": ["pytest>=7.0", "httpx>=0.25"],
        "dev": ["pre-commit==2.19.0", "pytest>=7.0", "httpx>=0.25"],
    },
    entry_points={
        "console_scripts": [
            "flowspace-api=flowspace.server:main",
            "flowspace-ui=flowspace.run:main",
        ],
    },
)
