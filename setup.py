from setuptools import setup, find_packages

setup(
    name="merge2048",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "merge2048=merge2048.play_2048:main",
        ],
    },
)
